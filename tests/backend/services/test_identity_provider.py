import json

import httpx
import pytest

from backend.services.identity_provider import IdentityProviderClient, IdentityProviderError


def make_client(handler, **kwargs) -> IdentityProviderClient:
    return IdentityProviderClient(
        base_url='https://idp.example.com/',
        anon_key='anon-key',
        service_key='service-key',
        bucket='doctor-images',
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_sign_up_posts_credentials_with_anon_key() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200, json={'id': 'user-1', 'email': 'pat@example.com'})

    client = make_client(handler)
    user = client.sign_up('pat@example.com', 'pw123456', username='Pat')

    request = captured['request']
    assert request.method == 'POST'
    assert request.url.path == '/auth/v1/signup'
    assert request.headers['apikey'] == 'anon-key'
    assert request.headers['authorization'] == 'Bearer anon-key'
    assert json.loads(request.content) == {
        'email': 'pat@example.com',
        'password': 'pw123456',
        'data': {'username': 'Pat'},
    }
    assert user == {'id': 'user-1', 'email': 'pat@example.com'}


def test_sign_in_uses_password_grant() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200, json={'access_token': 'access-abc', 'token_type': 'bearer'})

    session = make_client(handler).sign_in('pat@example.com', 'pw123456')

    assert captured['request'].url.path == '/auth/v1/token'
    assert captured['request'].url.params['grant_type'] == 'password'
    assert session['access_token'] == 'access-abc'


def test_send_password_reset_tolerates_empty_body() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200)

    make_client(handler).send_password_reset('pat@example.com', redirect_to='https://app.example.com/reset')

    request = captured['request']
    assert request.url.path == '/auth/v1/recover'
    assert request.url.params['redirect_to'] == 'https://app.example.com/reset'
    assert json.loads(request.content) == {'email': 'pat@example.com'}


def test_create_user_uses_service_key() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200, json={'id': 'doctor-1'})

    make_client(handler).create_user('drx@example.com', 's3cret')

    request = captured['request']
    assert request.url.path == '/auth/v1/admin/users'
    assert request.headers['apikey'] == 'service-key'
    assert json.loads(request.content) == {
        'email': 'drx@example.com',
        'password': 's3cret',
        'email_confirm': False,
    }


def test_upload_object_sends_raw_bytes_and_builds_public_url() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200, json={'Key': 'doctor-images/doctors/1_portrait.png'})

    client = make_client(handler)
    object_path = client.upload_object('doctors/1_portrait.png', b'png-bytes', 'image/png')

    request = captured['request']
    assert request.url.path == '/storage/v1/object/doctor-images/doctors/1_portrait.png'
    assert request.headers['content-type'] == 'image/png'
    assert request.content == b'png-bytes'
    assert client.public_url(object_path) == (
        'https://idp.example.com/storage/v1/object/public/doctor-images/doctors/1_portrait.png'
    )


def test_error_responses_raise_with_provider_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={'error': 'invalid_grant', 'error_description': 'Invalid login credentials'})

    with pytest.raises(IdentityProviderError) as exception_info:
        make_client(handler).sign_in('pat@example.com', 'wrong')

    assert exception_info.value.status_code == 400
    assert exception_info.value.message == 'Invalid login credentials'


def test_transport_failures_raise_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    with pytest.raises(IdentityProviderError) as exception_info:
        make_client(handler).sign_up('pat@example.com', 'pw123456')

    assert exception_info.value.status_code is None
    assert exception_info.value.message == 'Identity provider unavailable.'


@pytest.mark.parametrize(
    'object_path',
    ['../other-bucket/evil.png', 'doctors/../../evil.png', 'doctors//evil.png', 'doctors\\evil.png', '/evil.png'],
)
def test_upload_object_refuses_paths_leaving_the_bucket(object_path: str) -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    with pytest.raises(ValueError):
        make_client(handler).upload_object(object_path, b'png-bytes', 'image/png')

    assert requests == []


def test_upload_object_escapes_reserved_characters_within_segments() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured['request'] = request
        return httpx.Response(200)

    make_client(handler).upload_object('doctors/1_my photo#1.png', b'png-bytes', 'image/png')

    assert captured['request'].url.raw_path == b'/storage/v1/object/doctor-images/doctors/1_my%20photo%231.png'

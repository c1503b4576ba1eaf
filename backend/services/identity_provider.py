"""HTTP client for the hosted identity and object-storage provider.

Only the calls the booking service needs are wrapped: account signup, password
login, password recovery, admin user creation and public object upload.
"""

import logging
from urllib.parse import quote

import httpx

from backend.core import config

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """The provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(payload, dict):
        for key in ('msg', 'error_description', 'message', 'error'):
            if payload.get(key):
                return str(payload[key])
    return response.reason_phrase


def _encode_object_path(object_path: str) -> str:
    # objects must stay inside the configured bucket
    segments = object_path.split('/')
    if '\\' in object_path or any(segment in ('', '.', '..') for segment in segments):
        raise ValueError(f'Invalid storage object path {object_path!r}')
    return '/'.join(quote(segment, safe='') for segment in segments)


class IdentityProviderClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_key: str = '',
        bucket: str = 'doctor-images',
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.anon_key = anon_key
        self.service_key = service_key
        self.bucket = bucket
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def _headers(self, use_service_key: bool) -> dict:
        key = self.service_key if use_service_key else self.anon_key
        return {'apikey': key, 'Authorization': f'Bearer {key}'}

    def _request(
        self,
        method: str,
        path: str,
        *,
        use_service_key: bool = False,
        json: dict | None = None,
        params: dict | None = None,
        content: bytes | None = None,
        headers: dict | None = None,
    ) -> dict:
        request_headers = self._headers(use_service_key)
        if headers:
            request_headers.update(headers)

        try:
            response = self._client.request(
                method,
                path,
                json=json,
                params=params,
                content=content,
                headers=request_headers,
            )
        except httpx.HTTPError as exc:
            logger.exception('Identity provider request %s %s failed', method, path)
            raise IdentityProviderError('Identity provider unavailable.') from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning('Identity provider rejected %s %s: %s %s', method, path, response.status_code, message)
            raise IdentityProviderError(message, status_code=response.status_code)

        if not response.content:
            return {}
        return response.json()

    def sign_up(self, email: str, password: str, username: str | None = None) -> dict:
        payload = {'email': email, 'password': password}
        if username:
            payload['data'] = {'username': username}
        return self._request('POST', '/auth/v1/signup', json=payload)

    def sign_in(self, email: str, password: str) -> dict:
        return self._request(
            'POST',
            '/auth/v1/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
        )

    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        params = {'redirect_to': redirect_to} if redirect_to else None
        self._request('POST', '/auth/v1/recover', params=params, json={'email': email})

    def create_user(self, email: str, password: str, email_confirm: bool = False) -> dict:
        return self._request(
            'POST',
            '/auth/v1/admin/users',
            use_service_key=True,
            json={'email': email, 'password': password, 'email_confirm': email_confirm},
        )

    def upload_object(self, object_path: str, content: bytes, content_type: str) -> str:
        encoded_path = _encode_object_path(object_path)
        self._request(
            'POST',
            f'/storage/v1/object/{self.bucket}/{encoded_path}',
            use_service_key=True,
            content=content,
            headers={'Content-Type': content_type},
        )
        return object_path

    def public_url(self, object_path: str) -> str:
        return f'{self.base_url}/storage/v1/object/public/{self.bucket}/{_encode_object_path(object_path)}'


def get_identity_provider():
    client = IdentityProviderClient(
        base_url=config.IDENTITY_PROVIDER_URL,
        anon_key=config.IDENTITY_PROVIDER_ANON_KEY,
        service_key=config.IDENTITY_PROVIDER_SERVICE_KEY,
        bucket=config.STORAGE_BUCKET,
        timeout=config.IDENTITY_PROVIDER_TIMEOUT_SECONDS,
    )
    try:
        yield client
    finally:
        client.close()

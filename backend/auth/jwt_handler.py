import jwt

from backend.core import config


def decode_access_token(token: str) -> dict:
    """Decode an access token issued by the identity provider."""
    return jwt.decode(
        token,
        config.IDENTITY_PROVIDER_JWT_SECRET,
        algorithms=[config.JWT_ALGORITHM],
        audience=config.JWT_AUDIENCE,
    )

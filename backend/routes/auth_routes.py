from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.core import config
from backend.models.user import UserEmail
from backend.routes.common import (
    MessageResponse,
    database_unavailable,
    ensure_database_ready,
    get_db,
    provider_failure,
    require_field,
)
from backend.services.identity_provider import IdentityProviderClient, IdentityProviderError, get_identity_provider

router = APIRouter(tags=['auth'])


class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    username: str | None = None


class SignupResponse(BaseModel):
    details: dict | None = None
    message: str


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    expires_in: int | None = None
    refresh_token: str | None = None
    user: dict | None = None


class EmailRequest(BaseModel):
    email: str | None = None


class UserEmailResponse(BaseModel):
    id: int
    email: str
    username: str | None = None

    class Config:
        from_attributes = True


class CheckUserResponse(BaseModel):
    exists: bool
    message: str | None = None
    user: UserEmailResponse | None = None


def _require_credentials(email: str | None, password: str | None) -> str:
    normalized_email = require_field(email, 'Email is required.')
    if not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Password is required.')
    return normalized_email


@router.post('/signup', response_model=SignupResponse)
def signup(data: SignupRequest, provider: IdentityProviderClient = Depends(get_identity_provider)):
    email = _require_credentials(data.email, data.password)

    try:
        user = provider.sign_up(email, data.password, username=(data.username or '').strip() or None)
    except IdentityProviderError as exc:
        raise provider_failure(exc) from exc

    return SignupResponse(
        details=user or None,
        message='Signup successful! Please check your email to confirm your account.',
    )


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, provider: IdentityProviderClient = Depends(get_identity_provider)):
    email = _require_credentials(data.email, data.password)

    try:
        session = provider.sign_in(email, data.password)
    except IdentityProviderError as exc:
        raise provider_failure(exc) from exc

    if not session.get('access_token'):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail='Identity provider returned no access token.')

    return LoginResponse(
        access_token=session['access_token'],
        token_type=session.get('token_type') or 'bearer',
        expires_in=session.get('expires_in'),
        refresh_token=session.get('refresh_token'),
        user=session.get('user'),
    )


@router.post('/reset-password', response_model=MessageResponse)
def reset_password(data: EmailRequest, provider: IdentityProviderClient = Depends(get_identity_provider)):
    email = require_field(data.email, 'Email is required.')

    try:
        provider.send_password_reset(email, redirect_to=config.PASSWORD_RESET_REDIRECT_URL or None)
    except IdentityProviderError as exc:
        raise provider_failure(exc) from exc

    return MessageResponse(message='Password reset email sent.')


@router.post('/check-user', response_model=CheckUserResponse)
def check_user(data: EmailRequest, db: Session = Depends(get_db)):
    email = require_field(data.email, 'Email is required.')

    ensure_database_ready()

    try:
        user = db.query(UserEmail).filter(UserEmail.email == email).first()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    if user is None:
        return CheckUserResponse(exists=False, message='User does not exist.')

    return CheckUserResponse(exists=True, user=UserEmailResponse.model_validate(user))


@router.get('/auth/me')
def me(current_user: dict = Depends(get_current_user)):
    return {
        'email': current_user['email'],
        'role': current_user.get('role', 'authenticated'),
    }

import logging
import re
import time
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.passwords import MAX_PASSWORD_BYTES, hash_password
from backend.models.doctor import Doctor
from backend.routes.common import (
    MessageResponse,
    database_unavailable,
    ensure_database_ready,
    get_db,
    provider_failure,
    require_field,
)
from backend.services.identity_provider import IdentityProviderClient, IdentityProviderError, get_identity_provider

router = APIRouter(tags=['doctors'])

logger = logging.getLogger(__name__)

IMAGE_FOLDER = 'doctors'
UNSAFE_FILENAME_CHARACTERS = re.compile(r'[^A-Za-z0-9._-]')


class AddDoctorRequest(BaseModel):
    doctor_name: str
    specialty: str | None = None
    doctor_email: str | None = None
    doctor_password: str
    education: str | None = None
    experience: str | None = None
    fee: str | None = None
    about_me: str | None = None
    city: str | None = None
    image_url: str | None = None

    @field_validator('doctor_name')
    @classmethod
    def validate_doctor_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Doctor name is required.')
        return normalized

    @field_validator('doctor_password')
    @classmethod
    def validate_doctor_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Doctor password is required.')
        if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValueError(f'Doctor password must be at most {MAX_PASSWORD_BYTES} bytes.')
        return value

    @field_validator('fee', 'experience', mode='before')
    @classmethod
    def stringify_numbers(cls, value):
        if value is None:
            return None
        return str(value)


class DoctorResponse(BaseModel):
    id: int
    doctor_name: str
    specialty: str | None = None
    doctor_email: str | None = None
    education: str | None = None
    experience: str | None = None
    fee: str | None = None
    about_me: str | None = None
    city: str | None = None
    image_url: str | None = None

    class Config:
        from_attributes = True


class DoctorProfileResponse(BaseModel):
    doctor_name: str
    about_me: str | None = None
    specialty: str | None = None
    experience: str | None = None
    fee: str | None = None
    education: str | None = None
    image_url: str | None = None

    class Config:
        from_attributes = True


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]


class DoctorProfileListResponse(BaseModel):
    doctors: list[DoctorProfileResponse]


class RegisterDoctorAuthRequest(BaseModel):
    doctor_email: str
    doctor_password: str


class ImageUploadResponse(BaseModel):
    image_url: str


def safe_image_name(filename: str) -> str:
    """Reduce a client-supplied filename to a single storage path segment."""
    name = PurePosixPath(filename.replace('\\', '/')).name.lstrip('.')
    return UNSAFE_FILENAME_CHARACTERS.sub('_', name)


@router.post('/add-doctor', response_model=MessageResponse)
def add_doctor(data: AddDoctorRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        doctor = Doctor(
            **data.model_dump(exclude={'doctor_password'}),
            doctor_password=hash_password(data.doctor_password),
        )
        db.add(doctor)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc

    logger.info('Added doctor %s', data.doctor_name)
    return MessageResponse(message='Doctor added to database successfully.')


def _list_doctors(db: Session) -> DoctorListResponse:
    ensure_database_ready()

    try:
        doctors = db.query(Doctor).order_by(Doctor.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    return DoctorListResponse(doctors=[DoctorResponse.model_validate(doctor) for doctor in doctors])


@router.get('/get-doctors', response_model=DoctorListResponse)
def get_doctors(db: Session = Depends(get_db)):
    return _list_doctors(db)


@router.get('/doctors', response_model=DoctorListResponse)
def list_doctors(db: Session = Depends(get_db)):
    return _list_doctors(db)


@router.get('/getdoctor-by-name', response_model=DoctorProfileListResponse)
def get_doctor_by_name(name: str | None = Query(default=None), db: Session = Depends(get_db)):
    doctor_name = require_field(name, 'Doctor name is required')

    ensure_database_ready()

    try:
        doctors = db.query(Doctor).filter(Doctor.doctor_name == doctor_name).order_by(Doctor.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    if not doctors:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Doctor not found')

    return DoctorProfileListResponse(doctors=[DoctorProfileResponse.model_validate(doctor) for doctor in doctors])


@router.post('/register-doctor-auth', response_model=MessageResponse)
def register_doctor_auth(
    data: RegisterDoctorAuthRequest,
    provider: IdentityProviderClient = Depends(get_identity_provider),
):
    doctor_email = require_field(data.doctor_email, 'Doctor email is required')
    if not data.doctor_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Doctor password is required')

    try:
        # unconfirmed accounts get a confirmation email from the provider
        provider.create_user(doctor_email, data.doctor_password, email_confirm=False)
    except IdentityProviderError as exc:
        raise provider_failure(exc) from exc

    return MessageResponse(message='Doctor registered with the identity provider and confirmation email sent.')


@router.post('/upload-image', response_model=ImageUploadResponse)
def upload_image(
    image: UploadFile | None = File(default=None),
    provider: IdentityProviderClient = Depends(get_identity_provider),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='No image file uploaded')

    image_name = safe_image_name(image.filename)
    if not image_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid image file name')

    object_path = f'{IMAGE_FOLDER}/{int(time.time() * 1000)}_{image_name}'
    content = image.file.read()

    try:
        provider.upload_object(object_path, content, image.content_type or 'application/octet-stream')
    except IdentityProviderError as exc:
        raise provider_failure(exc) from exc

    return ImageUploadResponse(image_url=provider.public_url(object_path))

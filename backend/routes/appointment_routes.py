import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.models.appointment import Appointment
from backend.routes.common import (
    MessageResponse,
    database_unavailable,
    ensure_database_ready,
    get_db,
    require_field,
)
from backend.scheduling.availability import (
    DoctorAvailabilityView,
    UpcomingAppointmentsSummary,
    booking_window,
    build_doctor_availability,
    current_clock,
    summarize_upcoming,
)
from backend.scheduling.time_slots import SlotParseError, normalize_time_slot
from backend.services.appointment_store import fetch_all_upcoming_appointments, fetch_appointments_for_doctor

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

REQUIRED_BOOKING_FIELDS = ('user_name', 'user_email', 'doctor_name', 'specialty', 'date', 'time_slot')


class BookAppointmentRequest(BaseModel):
    user_name: str | None = None
    user_email: str | None = None
    doctor_name: str | None = None
    specialty: str | None = None
    fee: str | None = None
    doctor_email: str | None = None
    date: str | None = None
    time_slot: str | None = None

    @field_validator('fee', mode='before')
    @classmethod
    def stringify_fee(cls, value):
        if value is None:
            return None
        return str(value)


class DoctorAppointmentsResponse(BaseModel):
    doctor: DoctorAvailabilityView
    count: int


def slot_parse_failure(exc: SlotParseError) -> HTTPException:
    logger.exception('Aborting slot computation on malformed time slot %r', exc.time_slot)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail='Internal server error',
    )


def parse_booking_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='date must be an ISO 8601 calendar date (YYYY-MM-DD).',
        ) from exc


@router.get('/getdoctor-appointment', response_model=DoctorAppointmentsResponse)
def get_doctor_appointments(name: str | None = Query(default=None), db: Session = Depends(get_db)):
    doctor_name = require_field(name, 'Doctor name is required')

    ensure_database_ready()

    now = current_clock(config.CLINIC_TIMEZONE)
    date_from, date_to = booking_window(now, config.BOOKING_WINDOW_DAYS)

    try:
        rows = fetch_appointments_for_doctor(db, doctor_name, date_from, date_to)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    try:
        view, count = build_doctor_availability(doctor_name, rows, now, strict=config.STRICT_SLOT_PARSING)
    except SlotParseError as exc:
        raise slot_parse_failure(exc) from exc

    return DoctorAppointmentsResponse(doctor=view, count=count)


@router.post('/book-appointment', response_model=MessageResponse)
def book_appointment(data: BookAppointmentRequest, db: Session = Depends(get_db)):
    missing = [field for field in REQUIRED_BOOKING_FIELDS if not (getattr(data, field) or '').strip()]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Missing required fields: {", ".join(missing)}',
        )

    appointment_date = parse_booking_date(data.date.strip())
    try:
        time_slot = normalize_time_slot(data.time_slot)
    except SlotParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='time_slot must look like "hh:mm AM" or "hh:mm PM".',
        ) from exc

    ensure_database_ready()

    try:
        appointment = Appointment(
            user_name=data.user_name.strip(),
            user_email=data.user_email.strip(),
            doctor_name=data.doctor_name.strip(),
            specialty=data.specialty.strip(),
            fee=data.fee,
            doctor_email=data.doctor_email,
            date=appointment_date,
            time_slot=time_slot,
        )
        db.add(appointment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc

    logger.info('Booked %s %s with %s', appointment_date.isoformat(), time_slot, data.doctor_name.strip())
    return MessageResponse(message='Appointment booked successfully')


@router.get('/upcoming-appointments', response_model=UpcomingAppointmentsSummary)
def list_upcoming_appointments(db: Session = Depends(get_db)):
    ensure_database_ready()

    now = current_clock(config.CLINIC_TIMEZONE)

    try:
        rows = fetch_all_upcoming_appointments(db, now.today)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    try:
        return summarize_upcoming(rows, now, strict=config.STRICT_SLOT_PARSING)
    except SlotParseError as exc:
        raise slot_parse_failure(exc) from exc

"""Upcoming-slot computations over booked appointment rows.

Every function takes the reference moment as an explicit ``ClockReading`` so the
results only depend on their inputs. Rows are any objects exposing the
appointment attributes (ORM rows in the service, plain namespaces in tests).
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple, Sequence
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from backend.scheduling.time_slots import SlotParseError, decode_time_slot

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_WINDOW_DAYS = 7


class ClockReading(NamedTuple):
    today: date
    hour: int
    minute: int

    @classmethod
    def from_datetime(cls, moment: datetime) -> 'ClockReading':
        return cls(today=moment.date(), hour=moment.hour, minute=moment.minute)


class BookedSlot(BaseModel):
    date: date
    time_slot: str


class DoctorAvailabilityView(BaseModel):
    user_name: str = ''
    user_email: str = ''
    doctor_name: str
    specialty: str = ''
    doctor_email: str = ''
    fee: str = ''
    booked_slots: list[BookedSlot] = []


class UpcomingAppointment(BaseModel):
    user_name: str
    doctor_name: str
    date: date
    time_slot: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UpcomingAppointmentsSummary(BaseModel):
    appointments: list[UpcomingAppointment]
    appointmentscount: int
    patientCount: int


def current_clock(timezone_name: str) -> ClockReading:
    return ClockReading.from_datetime(datetime.now(ZoneInfo(timezone_name)))


def booking_window(now: ClockReading, days: int = DEFAULT_BOOKING_WINDOW_DAYS) -> tuple[date, date]:
    """Return the inclusive ``(first, last)`` dates of a lookahead window starting today."""
    if days < 1:
        raise ValueError('Booking window must span at least one day.')
    return now.today, now.today + timedelta(days=days - 1)


def _row_date(row) -> date:
    value = row.date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


def is_upcoming(row, now: ClockReading) -> bool:
    row_date = _row_date(row)
    if row_date > now.today:
        return True
    if row_date < now.today:
        return False
    return decode_time_slot(row.time_slot) > (now.hour, now.minute)


def filter_upcoming(rows: Iterable, now: ClockReading, strict: bool = False) -> list:
    """Keep the rows whose slot is strictly later than ``now``, preserving order.

    A row with an undecodable time_slot is skipped with a warning, or re-raises
    ``SlotParseError`` when ``strict`` is set.
    """
    upcoming = []
    for row in rows:
        try:
            keep = is_upcoming(row, now)
        except SlotParseError:
            if strict:
                raise
            logger.warning(
                'Skipping appointment for %r on %s with malformed time slot %r',
                getattr(row, 'doctor_name', None),
                row.date,
                row.time_slot,
            )
            continue
        if keep:
            upcoming.append(row)
    return upcoming


def _text(value) -> str:
    return '' if value is None else str(value)


def build_doctor_availability(
    doctor_name: str,
    rows: Sequence,
    now: ClockReading,
    strict: bool = False,
) -> tuple[DoctorAvailabilityView, int]:
    """Assemble a doctor's booked-slot view from their rows inside the booking window.

    The profile fields are copied from the first row, so a doctor without bookings
    yields an empty view carrying only the requested name.
    """
    if not rows:
        return DoctorAvailabilityView(doctor_name=doctor_name), 0

    first = rows[0]
    booked_slots = [
        BookedSlot(date=_row_date(row), time_slot=row.time_slot)
        for row in filter_upcoming(rows, now, strict=strict)
    ]

    view = DoctorAvailabilityView(
        user_name=_text(first.user_name),
        user_email=_text(first.user_email),
        doctor_name=_text(first.doctor_name) or doctor_name,
        specialty=_text(first.specialty),
        doctor_email=_text(first.doctor_email),
        fee=_text(first.fee),
        booked_slots=booked_slots,
    )
    return view, len(rows)


def summarize_upcoming(rows: Iterable, now: ClockReading, strict: bool = False) -> UpcomingAppointmentsSummary:
    upcoming = filter_upcoming(rows, now, strict=strict)
    # patients are identified by display name only
    patient_names = {row.user_name for row in upcoming}

    return UpcomingAppointmentsSummary(
        appointments=[UpcomingAppointment.model_validate(row, from_attributes=True) for row in upcoming],
        appointmentscount=len(upcoming),
        patientCount=len(patient_names),
    )

"""Appointment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, String

from backend.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """A booked slot. Doctor and patient fields are denormalised copies taken at booking time."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_name = Column(String, nullable=False)
    user_email = Column(String, nullable=False)
    doctor_name = Column(String, nullable=False, index=True)
    specialty = Column(String, nullable=False)
    doctor_email = Column(String)
    fee = Column(String)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String, nullable=False)  # "hh:mm AM|PM"
    created_at = Column(DateTime(timezone=True), default=_utcnow)

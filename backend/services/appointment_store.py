from datetime import date

from sqlalchemy.orm import Session

from backend.models.appointment import Appointment


def fetch_appointments_for_doctor(db: Session, doctor_name: str, date_from: date, date_to: date) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.doctor_name == doctor_name,
        Appointment.date >= date_from,
        Appointment.date <= date_to,
    ).order_by(Appointment.date.asc(), Appointment.id.asc()).all()


def fetch_all_upcoming_appointments(db: Session, date_from: date) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.date >= date_from,
    ).order_by(Appointment.date.asc(), Appointment.id.asc()).all()

from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


DATABASE_URL = config.DATABASE_URL

connect_args = {'check_same_thread': False} if DATABASE_URL.startswith('sqlite') else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_doctor_schema_checked = False
_appointment_schema_checked = False


def _add_missing_columns(table_name: str, migration_steps: list[tuple[str, str]], index_statements: list[str]) -> None:
    inspector = inspect(engine)

    if table_name not in inspector.get_table_names():
        return

    existing_columns = {column['name'] for column in inspector.get_columns(table_name)}

    with engine.begin() as connection:
        for column_name, statement in migration_steps:
            if column_name not in existing_columns:
                connection.execute(text(statement))
        for statement in index_statements:
            connection.execute(text(statement))


def ensure_doctor_schema() -> None:
    global _doctor_schema_checked

    if _doctor_schema_checked:
        return

    with _schema_lock:
        if _doctor_schema_checked:
            return

        _add_missing_columns(
            'doctors',
            [
                ('city', 'ALTER TABLE doctors ADD COLUMN city VARCHAR'),
                ('image_url', 'ALTER TABLE doctors ADD COLUMN image_url VARCHAR'),
            ],
            ['CREATE INDEX IF NOT EXISTS idx_doctors_name ON doctors(doctor_name)'],
        )

        _doctor_schema_checked = True


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        _add_missing_columns(
            'appointments',
            [
                ('created_at', 'ALTER TABLE appointments ADD COLUMN created_at TIMESTAMP'),
            ],
            [
                'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date ON appointments(doctor_name, date)',
                'CREATE INDEX IF NOT EXISTS idx_appointments_date ON appointments(date)',
            ],
        )

        _appointment_schema_checked = True

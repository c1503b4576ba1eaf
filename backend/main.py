import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import require_api_key
from backend.core import config
from backend.database import Base, engine, ensure_appointment_schema, ensure_doctor_schema
from backend.models import appointment, doctor, user  # noqa: F401  registers tables on Base
from backend.routes import appointment_routes, auth_routes, doctor_routes

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Doctor Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_doctor_schema()
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Doctor Booking API Running'}


api_key_required = [Depends(require_api_key)]

app.include_router(doctor_routes.router, dependencies=api_key_required)
app.include_router(appointment_routes.router, dependencies=api_key_required)
app.include_router(auth_routes.router, dependencies=api_key_required)

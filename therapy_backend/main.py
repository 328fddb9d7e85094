import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from therapy_backend.core import config
from therapy_backend.core.responses import register_exception_handlers
from therapy_backend.database import Base, engine, ensure_schedule_schema
from therapy_backend.models import patient, schedule, schedule_settings, therapist  # noqa: F401
from therapy_backend.routes import schedule_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Therapy Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schedule_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Therapy Scheduling API Running'}


app.include_router(schedule_routes.router, prefix='/schedules')

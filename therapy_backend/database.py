from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from therapy_backend.core import config


engine = create_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schedule_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_schedule_schema(bind=None) -> None:
    """Bring a pre-existing therapist_schedules table up to the current column and index set."""
    global _schedule_schema_checked

    if _schedule_schema_checked:
        return

    with _schema_lock:
        if _schedule_schema_checked:
            return

        bind = bind or engine
        inspector = inspect(bind)

        if 'therapist_schedules' not in inspector.get_table_names():
            _schedule_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('therapist_schedules')}
        migration_steps = [
            ('start_time', 'ALTER TABLE therapist_schedules ADD COLUMN start_time TIME'),
            ('end_time', 'ALTER TABLE therapist_schedules ADD COLUMN end_time TIME'),
            ('cancel_reason', 'ALTER TABLE therapist_schedules ADD COLUMN cancel_reason VARCHAR'),
            ('patient_id', 'ALTER TABLE therapist_schedules ADD COLUMN patient_id INTEGER'),
        ]

        with bind.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_therapist_schedules_slot '
                    'ON therapist_schedules(therapist_id, date, start_time)'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_therapist_schedules_status_date ON therapist_schedules(status, date)')
            )

        _schedule_schema_checked = True

import os
from datetime import date, datetime, time, timedelta, timezone

import jwt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from therapy_backend.core import config  # noqa: E402
from therapy_backend.database import Base  # noqa: E402
from therapy_backend.models.patient import Patient  # noqa: E402,F401
from therapy_backend.models.schedule import TherapistSchedule  # noqa: E402
from therapy_backend.models.schedule_settings import TherapistScheduleSettings  # noqa: E402,F401
from therapy_backend.models.therapist import Therapist  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def therapist(db) -> Therapist:
    therapist = Therapist(
        email='therapist@clinic.test',
        first_name='Tara',
        last_name='Quinn',
        phone='555-0100',
        profile_pic='tara.png',
    )
    db.add(therapist)
    db.commit()
    db.refresh(therapist)
    return therapist


@pytest.fixture
def other_therapist(db) -> Therapist:
    therapist = Therapist(email='other@clinic.test', first_name='Omar', last_name='Reyes', phone='555-0199')
    db.add(therapist)
    db.commit()
    db.refresh(therapist)
    return therapist


@pytest.fixture
def add_slot(db):
    def _add_slot(
        owner: Therapist,
        slot_date: date,
        start: time = time(9, 0),
        end: time = time(9, 30),
        status: str = 'open',
    ) -> TherapistSchedule:
        slot = TherapistSchedule(
            therapist_id=owner.id,
            date=slot_date,
            start_time=start,
            end_time=end,
            status=status,
            created_by=owner.id,
            updated_by=owner.id,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _add_slot


@pytest.fixture
def make_token():
    def _make_token(subject: str, expires_minutes: int = 5) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = {'sub': subject, 'iat': issued_at, 'exp': issued_at + timedelta(minutes=expires_minutes)}
        return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)

    return _make_token

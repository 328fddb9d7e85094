"""Therapist schedule settings model definitions."""

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, Time, func
from therapy_backend.database import Base


class TherapistScheduleSettings(Base):
    """A therapist's recurring weekly rule used to generate schedule slots."""
    __tablename__ = "therapist_schedule_settings"

    id = Column(Integer, primary_key=True)
    therapist_id = Column(Integer, ForeignKey("therapists.id"), unique=True, nullable=False)
    interval_minutes = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    active_weekdays = Column(JSON, nullable=False, default=list)  # lower-case weekday names
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

"""Therapist schedule slot model definitions."""

import enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint, func
from sqlalchemy.orm import relationship
from therapy_backend.database import Base
from therapy_backend.models.patient import Patient
from therapy_backend.models.therapist import Therapist


class ScheduleStatus(str, enum.Enum):
    OPEN = "open"
    BOOKED = "booked"
    CANCELLED = "cancelled"


class TherapistSchedule(Base):
    """Represents one bookable appointment slot on a therapist's calendar."""
    __tablename__ = "therapist_schedules"
    __table_args__ = (
        UniqueConstraint("therapist_id", "date", "start_time", name="uq_therapist_schedules_slot"),
    )

    id = Column(Integer, primary_key=True)
    therapist_id = Column(Integer, ForeignKey("therapists.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default=ScheduleStatus.OPEN.value)
    cancel_reason = Column(String, nullable=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=True)
    created_by = Column(Integer, ForeignKey("therapists.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("therapists.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    therapist = relationship(Therapist, foreign_keys=[therapist_id])
    patient = relationship(Patient)
    creator = relationship(Therapist, foreign_keys=[created_by])
    updater = relationship(Therapist, foreign_keys=[updated_by])

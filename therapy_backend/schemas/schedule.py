"""Request and response models for therapist schedules."""

from datetime import date, datetime, time
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from therapy_backend.core import config
from therapy_backend.models.schedule import TherapistSchedule
from therapy_backend.models.schedule_settings import TherapistScheduleSettings
from therapy_backend.services.slot_generator import WEEKDAY_NAMES

MAX_CANCEL_REASON_LENGTH = 255

# Field selections used by the routes when serializing slots.
SCHEDULE_LIST_EXCLUDE = frozenset({'patient', 'created_by', 'updated_by'})
SCHEDULE_DETAIL_EXCLUDE: frozenset[str] = frozenset()


def _parse_clock(value: Any) -> Any:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), '%H:%M').time()
        except ValueError as exc:
            raise ValueError('Time must use the HH:MM format.') from exc
    return value


class ScheduleSettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interval_minutes: int = Field(alias='interval_time')
    start_time: time
    end_time: time
    start_date: date
    end_date: date
    active_weekdays: list[str] = Field(alias='holiday')

    @field_validator('interval_minutes')
    @classmethod
    def validate_interval(cls, value: int) -> int:
        if value < config.SCHEDULE_MIN_INTERVAL_MINUTES:
            raise ValueError(f'Interval must be at least {config.SCHEDULE_MIN_INTERVAL_MINUTES} minutes.')
        return value

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def validate_clock_format(cls, value: Any) -> Any:
        return _parse_clock(value)

    @field_validator('end_time')
    @classmethod
    def validate_end_time(cls, value: time, info: ValidationInfo) -> time:
        start_time = info.data.get('start_time')
        if start_time is not None and value <= start_time:
            raise ValueError('End time must be after start time.')
        return value

    @field_validator('end_date')
    @classmethod
    def validate_end_date(cls, value: date, info: ValidationInfo) -> date:
        start_date = info.data.get('start_date')
        if start_date is not None and value < start_date:
            raise ValueError('End date must be a date after or equal to start date.')
        return value

    @field_validator('active_weekdays')
    @classmethod
    def validate_active_weekdays(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError('At least one day is required.')

        weekdays: list[str] = []
        for name in value:
            if name not in WEEKDAY_NAMES:
                raise ValueError('Day Name is not Match. use small letter in days name')
            if name not in weekdays:
                weekdays.append(name)
        return weekdays


class CancelScheduleRequest(BaseModel):
    cancel_reason: str

    @field_validator('cancel_reason')
    @classmethod
    def validate_cancel_reason(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Cancel reason is required.')
        if len(normalized) > MAX_CANCEL_REASON_LENGTH:
            raise ValueError(f'Cancel reason must be {MAX_CANCEL_REASON_LENGTH} characters or fewer.')
        return normalized


class MultipleDeleteRequest(BaseModel):
    id: list[int] = Field(min_length=1)


class TherapistSummary(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    profile_pic: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PatientSummary(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ScheduleResponse(BaseModel):
    id: int
    therapist_id: int
    date: date
    start_time: time
    end_time: time
    status: str
    cancel_reason: str | None = None
    patient: PatientSummary | None = None
    created_by: TherapistSummary | None = None
    updated_by: TherapistSummary | None = None


class ScheduleSettingsResponse(BaseModel):
    id: int
    therapist_id: int
    interval_time: int
    start_time: time
    end_time: time
    start_date: date
    end_date: date
    holiday: list[str]


class AvailableTherapistResponse(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    profile_pic: str | None = None
    total: int


def serialize_schedule(schedule: TherapistSchedule, exclude: Iterable[str] = SCHEDULE_DETAIL_EXCLUDE) -> dict:
    """Serialize one slot, leaving out every top-level key named in ``exclude``."""
    response = ScheduleResponse(
        id=schedule.id,
        therapist_id=schedule.therapist_id,
        date=schedule.date,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        status=schedule.status,
        cancel_reason=schedule.cancel_reason,
        patient=PatientSummary.model_validate(schedule.patient) if schedule.patient else None,
        created_by=TherapistSummary.model_validate(schedule.creator) if schedule.creator else None,
        updated_by=TherapistSummary.model_validate(schedule.updater) if schedule.updater else None,
    )
    return response.model_dump(mode='json', exclude=set(exclude))


def serialize_schedules(schedules: Iterable[TherapistSchedule], exclude: Iterable[str] = SCHEDULE_DETAIL_EXCLUDE) -> list[dict]:
    excluded = frozenset(exclude)
    return [serialize_schedule(schedule, excluded) for schedule in schedules]


def serialize_settings(settings: TherapistScheduleSettings | None) -> dict | None:
    if settings is None:
        return None

    return ScheduleSettingsResponse(
        id=settings.id,
        therapist_id=settings.therapist_id,
        interval_time=settings.interval_minutes,
        start_time=settings.start_time,
        end_time=settings.end_time,
        start_date=settings.start_date,
        end_date=settings.end_date,
        holiday=list(settings.active_weekdays or []),
    ).model_dump(mode='json')

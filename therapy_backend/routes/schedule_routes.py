from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from therapy_backend.auth.dependencies import get_current_therapist
from therapy_backend.core.responses import api_output
from therapy_backend.database import ensure_schedule_schema, get_db
from therapy_backend.models.therapist import Therapist
from therapy_backend.schemas.schedule import (
    SCHEDULE_DETAIL_EXCLUDE,
    SCHEDULE_LIST_EXCLUDE,
    AvailableTherapistResponse,
    CancelScheduleRequest,
    MultipleDeleteRequest,
    ScheduleSettingsRequest,
    serialize_schedule,
    serialize_schedules,
    serialize_settings,
)
from therapy_backend.services.schedule_service import ScheduleService
from therapy_backend.unit_of_work import UnitOfWork

schedule_service = ScheduleService()


def ensure_database_ready() -> None:
    try:
        ensure_schedule_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


# Runs ahead of every route's own dependencies, including the auth lookup.
router = APIRouter(tags=['schedules'], dependencies=[Depends(ensure_database_ready)])


def get_unit_of_work(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


@router.get('')
def list_schedules(
    schedule_date: date | None = Query(default=None, alias='date'),
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    schedules = schedule_service.list_schedules(uow, therapist.id, schedule_date)
    return api_output(
        'Therapist Schedules Loaded Successfully',
        serialize_schedules(schedules, exclude=SCHEDULE_LIST_EXCLUDE),
    )


@router.get('/settings')
def get_schedule_settings(
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    settings = schedule_service.get_settings(uow, therapist.id)
    return api_output('Therapist Schedule Settings Loaded Successfully', serialize_settings(settings))


@router.post('')
def generate_schedules(
    data: ScheduleSettingsRequest,
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    schedules = schedule_service.generate_schedule(uow, therapist.id, data)
    return api_output('Therapist Schedule Added Successfully', serialize_schedules(schedules))


@router.get('/available')
def list_available_schedules(
    therapist_id: int | None = Query(default=None),
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    del therapist
    rows = schedule_service.available_schedules(uow, therapist_id)
    return api_output(
        'Available Therapist Schedules Loaded Successfully',
        [AvailableTherapistResponse(**row).model_dump() for row in rows],
    )


@router.post('/multiple-delete')
def delete_multiple_schedules(
    data: MultipleDeleteRequest,
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    deleted = schedule_service.delete_schedules(uow, data.id, therapist.id)
    return api_output('Multiple Schedule Deleted Successfully', {'deleted': deleted})


@router.get('/{schedule_id}')
def get_schedule(
    schedule_id: int,
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    del therapist
    schedule = schedule_service.get_schedule(uow, schedule_id)
    return api_output('Schedule Detail loaded Successfully', serialize_schedule(schedule, SCHEDULE_DETAIL_EXCLUDE))


@router.delete('/{schedule_id}')
def delete_schedule(
    schedule_id: int,
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    schedule_service.delete_schedule(uow, schedule_id, therapist.id)
    return api_output('Schedule Deleted Successfully')


@router.post('/{schedule_id}/cancel')
def cancel_schedule(
    schedule_id: int,
    data: CancelScheduleRequest,
    therapist: Therapist = Depends(get_current_therapist),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    schedule = schedule_service.cancel_schedule(uow, schedule_id, therapist.id, data)
    return api_output('Therapist Schedule cancelled successfully', serialize_schedule(schedule))

"""Schedule orchestration: settings upsert, slot generation and slot lifecycle."""

import logging
from datetime import date
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from therapy_backend.core.exceptions import ScheduleValidationError
from therapy_backend.core.responses import field_errors
from therapy_backend.models.schedule import ScheduleStatus, TherapistSchedule
from therapy_backend.models.schedule_settings import TherapistScheduleSettings
from therapy_backend.schemas.schedule import CancelScheduleRequest, ScheduleSettingsRequest
from therapy_backend.services.slot_generator import count_slots, generate_slots, overlaps_any
from therapy_backend.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _validated(model, payload: Any):
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ScheduleValidationError(field_errors(exc.errors())) from exc


class ScheduleService:
    """Entry points used by the schedule routes. Every method takes the caller's unit of work."""

    def generate_schedule(
        self,
        uow: UnitOfWork,
        therapist_id: int,
        request: ScheduleSettingsRequest | Mapping[str, Any],
    ) -> list[TherapistSchedule]:
        """Replace the therapist's recurrence rule and materialize its slots.

        Validation happens before the transaction starts, so a rejected request
        writes nothing. Settings and slots are committed together or not at all;
        a candidate that overlaps any slot the therapist already has on that date
        is skipped, and existing slots are kept as they are.
        """
        settings_request = _validated(ScheduleSettingsRequest, request)

        with uow:
            settings = uow.settings.upsert(therapist_id, settings_request)
            existing = uow.schedules.existing_windows(therapist_id, settings.start_date, settings.end_date)
            candidates = [
                TherapistSchedule(
                    therapist_id=therapist_id,
                    date=slot.date,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    status=ScheduleStatus.OPEN.value,
                    created_by=therapist_id,
                    updated_by=therapist_id,
                )
                for slot in generate_slots(settings)
                if not overlaps_any(slot, existing.get(slot.date, ()))
            ]
            inserted = uow.schedules.bulk_insert(candidates)

        logger.info(
            'Generated %d of %d schedule slots for therapist %s between %s and %s',
            inserted,
            count_slots(settings_request),
            therapist_id,
            settings_request.start_date,
            settings_request.end_date,
        )
        return uow.schedules.list_between(therapist_id, settings_request.start_date, settings_request.end_date)

    def list_schedules(self, uow: UnitOfWork, therapist_id: int, from_date: date | None = None) -> list[TherapistSchedule]:
        return uow.schedules.list(therapist_id, from_date)

    def get_settings(self, uow: UnitOfWork, therapist_id: int) -> TherapistScheduleSettings | None:
        return uow.settings.get(therapist_id)

    def get_schedule(self, uow: UnitOfWork, schedule_id: int) -> TherapistSchedule:
        return uow.schedules.find(schedule_id)

    def delete_schedule(self, uow: UnitOfWork, schedule_id: int, therapist_id: int) -> None:
        with uow:
            uow.schedules.delete(schedule_id, therapist_id)
        logger.info('Therapist %s deleted schedule %s', therapist_id, schedule_id)

    def delete_schedules(self, uow: UnitOfWork, schedule_ids: Iterable[int], therapist_id: int) -> int:
        with uow:
            deleted = uow.schedules.bulk_delete(schedule_ids, therapist_id)
        logger.info('Therapist %s deleted %d schedules', therapist_id, deleted)
        return deleted

    def cancel_schedule(
        self,
        uow: UnitOfWork,
        schedule_id: int,
        therapist_id: int,
        request: CancelScheduleRequest | Mapping[str, Any],
    ) -> TherapistSchedule:
        cancel_request = _validated(CancelScheduleRequest, request)

        with uow:
            schedule = uow.schedules.cancel(schedule_id, cancel_request.cancel_reason, therapist_id)
        return schedule

    def available_schedules(self, uow: UnitOfWork, therapist_id: int | None = None) -> list[dict]:
        return uow.schedules.count_available_by_therapist(therapist_id)

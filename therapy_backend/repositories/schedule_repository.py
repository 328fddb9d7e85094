from __future__ import annotations

import logging
from datetime import date, time
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from therapy_backend.core.exceptions import ScheduleNotFoundError, ScheduleStateError, StorageError
from therapy_backend.models.schedule import ScheduleStatus, TherapistSchedule
from therapy_backend.models.therapist import Therapist

logger = logging.getLogger(__name__)

CANNOT_DELETE_MESSAGE = "Sorry! You Can't Delete this schedule at this time"
CANNOT_CANCEL_MESSAGE = 'Only open schedules can be cancelled.'


class ScheduleRepository:
    """Data access for generated schedule slots."""

    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, therapist_id: int):
        return self.db.query(TherapistSchedule).filter(
            TherapistSchedule.therapist_id == therapist_id,
        ).order_by(TherapistSchedule.date.asc(), TherapistSchedule.id.asc())

    def list(self, therapist_id: int, from_date: date | None = None) -> list[TherapistSchedule]:
        from_date = from_date or date.today()
        return self._ordered(therapist_id).filter(TherapistSchedule.date >= from_date).all()

    def list_between(self, therapist_id: int, start_date: date, end_date: date) -> list[TherapistSchedule]:
        return self._ordered(therapist_id).filter(
            TherapistSchedule.date >= start_date,
            TherapistSchedule.date <= end_date,
        ).all()

    def find(self, schedule_id: int) -> TherapistSchedule:
        schedule = self.db.get(TherapistSchedule, schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError()
        return schedule

    def find_owned(self, schedule_id: int, therapist_id: int) -> TherapistSchedule:
        schedule = self.db.query(TherapistSchedule).filter(
            TherapistSchedule.id == schedule_id,
            TherapistSchedule.therapist_id == therapist_id,
        ).first()
        if schedule is None:
            raise ScheduleNotFoundError()
        return schedule

    def existing_windows(self, therapist_id: int, start_date: date, end_date: date) -> dict[date, list[tuple[time, time]]]:
        """Map each date in the range to the (start, end) windows the therapist already has on it."""
        rows = self.db.query(TherapistSchedule.date, TherapistSchedule.start_time, TherapistSchedule.end_time).filter(
            TherapistSchedule.therapist_id == therapist_id,
            TherapistSchedule.date >= start_date,
            TherapistSchedule.date <= end_date,
        ).all()

        windows: dict[date, list[tuple[time, time]]] = {}
        for slot_date, slot_start, slot_end in rows:
            windows.setdefault(slot_date, []).append((slot_start, slot_end))
        return windows

    def bulk_insert(self, schedules: Iterable[TherapistSchedule]) -> int:
        """Stage every slot and flush once; the caller's transaction decides whether they persist."""
        schedules = list(schedules)
        if not schedules:
            return 0

        try:
            self.db.add_all(schedules)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.warning('Inserting %d schedule slots failed', len(schedules))
            raise StorageError() from exc

        return len(schedules)

    def cancel(self, schedule_id: int, reason: str, therapist_id: int) -> TherapistSchedule:
        schedule = self.find_owned(schedule_id, therapist_id)
        if schedule.status != ScheduleStatus.OPEN.value:
            raise ScheduleStateError(CANNOT_CANCEL_MESSAGE)

        schedule.status = ScheduleStatus.CANCELLED.value
        schedule.cancel_reason = reason
        schedule.updated_by = therapist_id
        self.db.flush()
        return schedule

    def delete(self, schedule_id: int, therapist_id: int) -> None:
        schedule = self.find_owned(schedule_id, therapist_id)
        if schedule.status != ScheduleStatus.OPEN.value:
            raise ScheduleStateError(CANNOT_DELETE_MESSAGE)

        self.db.delete(schedule)
        self.db.flush()

    def bulk_delete(self, schedule_ids: Iterable[int], therapist_id: int) -> int:
        """Delete the open slots among ``schedule_ids`` owned by the therapist; others are skipped."""
        schedule_ids = list(schedule_ids)
        if not schedule_ids:
            return 0

        return self.db.query(TherapistSchedule).filter(
            TherapistSchedule.id.in_(schedule_ids),
            TherapistSchedule.therapist_id == therapist_id,
            TherapistSchedule.status == ScheduleStatus.OPEN.value,
        ).delete(synchronize_session='fetch')

    def count_available_by_therapist(self, therapist_id: int | None = None) -> list[dict]:
        total = func.count(TherapistSchedule.id).label('total')
        query = self.db.query(
            Therapist.id,
            Therapist.first_name,
            Therapist.last_name,
            Therapist.phone,
            Therapist.profile_pic,
            total,
        ).join(
            TherapistSchedule, TherapistSchedule.therapist_id == Therapist.id,
        ).filter(
            TherapistSchedule.date >= date.today(),
            TherapistSchedule.status == ScheduleStatus.OPEN.value,
        )

        if therapist_id is not None:
            query = query.filter(Therapist.id == therapist_id)

        rows = query.group_by(
            Therapist.id,
            Therapist.first_name,
            Therapist.last_name,
            Therapist.phone,
            Therapist.profile_pic,
        ).order_by(Therapist.id.asc()).all()

        return [dict(row._mapping) for row in rows]

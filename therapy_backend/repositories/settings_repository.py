import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from therapy_backend.core.exceptions import StorageError
from therapy_backend.models.schedule_settings import TherapistScheduleSettings
from therapy_backend.models.therapist import Therapist

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ('interval_minutes', 'start_time', 'end_time', 'start_date', 'end_date', 'active_weekdays')


class ScheduleSettingsStore:
    """Keeps one recurrence rule per therapist."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, therapist_id: int) -> TherapistScheduleSettings | None:
        return self.db.query(TherapistScheduleSettings).filter(
            TherapistScheduleSettings.therapist_id == therapist_id,
        ).first()

    def upsert(self, therapist_id: int, settings) -> TherapistScheduleSettings:
        """Overwrite the therapist's rule with ``settings``, inserting it when none exists.

        The therapist row is locked for the rest of the transaction, so two
        generation requests for the same therapist run one after the other even
        when neither finds a settings row yet.
        """
        try:
            self.db.query(Therapist.id).filter(Therapist.id == therapist_id).with_for_update().first()

            row = self.db.query(TherapistScheduleSettings).filter(
                TherapistScheduleSettings.therapist_id == therapist_id,
            ).with_for_update().first()

            if row is None:
                row = TherapistScheduleSettings(therapist_id=therapist_id)
                self.db.add(row)

            for field in SETTINGS_FIELDS:
                setattr(row, field, getattr(settings, field))
            row.active_weekdays = list(settings.active_weekdays)

            self.db.flush()
        except SQLAlchemyError as exc:
            logger.warning('Saving schedule settings failed for therapist %s', therapist_id)
            raise StorageError() from exc

        return row

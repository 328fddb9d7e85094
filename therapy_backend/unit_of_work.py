"""Explicit transaction boundary for schedule operations.

Usage::

    uow = UnitOfWork(db)
    with uow:
        settings = uow.settings.upsert(therapist_id, request)
        uow.schedules.bulk_insert(rows)

Leaving the block normally commits. Any exception rolls the whole unit back;
database errors are re-raised as ``StorageError`` so no driver detail escapes.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from therapy_backend.core.exceptions import StorageError
from therapy_backend.repositories.schedule_repository import ScheduleRepository
from therapy_backend.repositories.settings_repository import ScheduleSettingsStore

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, db: Session):
        self.db = db
        self.settings = ScheduleSettingsStore(db)
        self.schedules = ScheduleRepository(db)

    def __enter__(self) -> 'UnitOfWork':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
            if issubclass(exc_type, SQLAlchemyError):
                logger.error('Transaction rolled back: %s', exc_type.__name__)
                raise StorageError() from exc
            return False

        try:
            self.db.commit()
        except SQLAlchemyError as commit_exc:
            self.rollback()
            logger.error('Commit failed: %s', commit_exc.__class__.__name__)
            raise StorageError() from commit_exc
        return False

    def rollback(self) -> None:
        self.db.rollback()

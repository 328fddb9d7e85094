"""Domain errors raised by the scheduling services and rendered by the API layer."""

from fastapi import status


class ScheduleError(Exception):
    """Base class for all scheduling errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None) -> None:
        self.message = message
        self.errors = errors
        super().__init__(message)


class ScheduleValidationError(ScheduleError):
    """Raised when request fields fail validation. Carries per-field messages."""

    def __init__(self, errors: dict[str, list[str]], message: str = 'Validation failed.') -> None:
        super().__init__(message, errors=errors)


class ScheduleNotFoundError(ScheduleError):
    """Raised when a referenced schedule slot does not exist for the caller."""

    def __init__(self, message: str = 'Therapist Data Not Found') -> None:
        super().__init__(message)


class ScheduleStateError(ScheduleError):
    """Raised when a slot's status does not allow the requested transition."""


class StorageError(ScheduleError):
    """Raised when a persistence operation fails and the transaction was rolled back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = 'Database operation failed. Please try again later.') -> None:
        super().__init__(message)

"""Uniform ``{status, message, data}`` response envelope and the handlers that produce it."""

import logging
from typing import Any, Iterable

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from therapy_backend.core import config
from therapy_backend.core.exceptions import ScheduleError

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {'body', 'query', 'path', 'header'}


def api_output(
    message: str,
    data: Any = None,
    status_code: int = status.HTTP_200_OK,
    errors: dict[str, list[str]] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        'status': status_code,
        'message': message,
        'data': data,
    }
    if errors is not None:
        content['errors'] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def field_errors(errors: Iterable[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error entries into ``{field: [messages]}``."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        location = [str(part) for part in error.get('loc', ())]
        if location and location[0] in _LOCATION_PREFIXES:
            location = location[1:]
        field = '.'.join(location) or 'request'
        message = str(error.get('msg', 'Invalid value.')).removeprefix('Value error, ')
        grouped.setdefault(field, []).append(message)
    return grouped


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScheduleError, schedule_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


async def schedule_error_handler(request: Request, exc: ScheduleError) -> JSONResponse:
    return api_output(exc.message, status_code=exc.status_code, errors=exc.errors)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return api_output(
        'Validation failed.',
        status_code=status.HTTP_400_BAD_REQUEST,
        errors=field_errors(exc.errors()),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else 'Request failed.'
    response = api_output(message, status_code=exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error('Unhandled error while processing %s %s', request.method, request.url.path, exc_info=exc)
    message = 'Something went wrong. Please try again later.'
    if config.APP_DEBUG:
        message = f'{message} ({exc.__class__.__name__})'
    return api_output(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

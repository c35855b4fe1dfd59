"""HTTP error envelope for roomstate.

RoomStateError subclasses carry their own status and code, so one handler
covers the whole hierarchy: a forbidden join is a 403, a transaction
conflict or a lost race is a 409, a dangling event reference is a 500.
Malformed requests get a 400 listing the offending fields. Anything else is
logged with its traceback and answered with an opaque 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from roomstate.core.errors import ErrorSeverity, RoomStateError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RoomStateError, _handle_roomstate_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


async def _handle_roomstate_error(request: Request, exc: RoomStateError):
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "room_id": exc.context.room_id,
            "user_id": exc.context.user_id,
            "event_id": exc.context.event_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _handle_validation_error(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Invalid request: {exc.errors()}", extra={"path": request.url.path},
    )
    details = [
        {
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def _handle_unexpected_error(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__}", exc_info=exc,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )

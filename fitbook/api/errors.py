"""
Domain error to HTTP response translation.

Routes let booking and store errors propagate; the handlers registered
here turn them into status codes with a readable `detail`.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.booking.errors import (
    AdminAuthError,
    BookingError,
    CapacityExceededError,
    DuplicatePhoneError,
    NotFoundError,
    RegistrationBlockedError,
    SessionCancelledError,
    SyncError,
    ValidationError,
)
from ..core.booking.models import TrainingSession
from ..infrastructure.storage.base import StoreError
from .schemas import SessionOut

logger = logging.getLogger(__name__)

# Most specific first: the first isinstance match wins.
STATUS_BY_ERROR: list[tuple[type[BookingError], int]] = [
    (DuplicatePhoneError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (SessionCancelledError, status.HTTP_409_CONFLICT),
    (RegistrationBlockedError, status.HTTP_403_FORBIDDEN),
    (AdminAuthError, status.HTTP_401_UNAUTHORIZED),
    (SyncError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: BookingError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    code = status_for(exc)
    logger.info(
        "Booking request rejected",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "status_code": code,
            "error": str(exc),
        }
    )

    content: dict = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, SyncError) and isinstance(exc.session, TrainingSession):
        content["session"] = SessionOut.from_domain(exc.session).model_dump(mode="json")
    return JSONResponse(status_code=code, content=content)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(
        "Store unavailable",
        extra={"path": request.url.path, "method": request.method, "error": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "The data store is unavailable. Please try again.", "error": "StoreError"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)

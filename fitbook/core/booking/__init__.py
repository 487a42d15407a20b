"""
Class booking logic.

Contains the domain models, the attendance/streak rules, session status
derivation and the booking workflows.
"""

from .attendance import AttendanceDraft, UserStats, is_attended, monthly_count, streak, user_stats
from .context import ClientContext, check_admin_password
from .errors import (
    AdminAuthError,
    BookingError,
    CapacityExceededError,
    DuplicatePhoneError,
    NotFoundError,
    RegistrationBlockedError,
    SessionCancelledError,
    SyncError,
    ValidationError,
    WaiverError,
)
from .models import (
    UNREPORTED,
    AppConfig,
    Attendance,
    HourlyWeather,
    LocationDef,
    PaymentStatus,
    Quote,
    Reported,
    TrainingSession,
    Unreported,
    User,
    WeatherInfo,
    WeatherLocation,
    WorkoutType,
)
from .phones import normalize_phone, to_dialable
from .service import BookingRepository, BookingService
from .status import DisplayState, SessionStatus, derive_status, visible_sessions

__all__ = [
    "AttendanceDraft",
    "UserStats",
    "is_attended",
    "monthly_count",
    "streak",
    "user_stats",
    "ClientContext",
    "check_admin_password",
    "AdminAuthError",
    "BookingError",
    "CapacityExceededError",
    "DuplicatePhoneError",
    "NotFoundError",
    "RegistrationBlockedError",
    "SessionCancelledError",
    "SyncError",
    "ValidationError",
    "WaiverError",
    "UNREPORTED",
    "AppConfig",
    "Attendance",
    "HourlyWeather",
    "LocationDef",
    "PaymentStatus",
    "Quote",
    "Reported",
    "TrainingSession",
    "Unreported",
    "User",
    "WeatherInfo",
    "WeatherLocation",
    "WorkoutType",
    "normalize_phone",
    "to_dialable",
    "BookingRepository",
    "BookingService",
    "DisplayState",
    "SessionStatus",
    "derive_status",
    "visible_sessions",
]

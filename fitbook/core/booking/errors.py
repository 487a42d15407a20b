"""
Booking domain errors.

Every failure a trainee or the coach can cause is one of these. The API
layer maps them to HTTP status codes; nothing here knows about HTTP.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for booking failures."""
    pass


class ValidationError(BookingError):
    """Input is missing or malformed. Nothing was changed."""
    pass


class NotFoundError(BookingError):
    """A referenced user or session doesn't exist."""
    pass


class CapacityExceededError(BookingError):
    """The session roster is already at max capacity."""

    def __init__(self, session_id: str, max_capacity: int) -> None:
        super().__init__(f"Session {session_id} is full ({max_capacity} spots)")
        self.session_id = session_id
        self.max_capacity = max_capacity


class RegistrationBlockedError(BookingError):
    """The trainee is restricted from registering."""
    pass


class SessionCancelledError(BookingError):
    """Trainees can't change registration on a cancelled session."""
    pass


class DuplicatePhoneError(ValidationError):
    """Another user already has this (normalized) phone number."""
    pass


class WaiverError(ValidationError):
    """The health waiver was not accepted or the upload is invalid."""
    pass


class AdminAuthError(BookingError):
    """Wrong admin password."""
    pass


class SyncError(BookingError):
    """
    Persisting a change failed and state was re-fetched.

    `session` holds the authoritative copy after the resync (None if the
    session no longer exists).
    """

    def __init__(self, message: str, session: Optional[object] = None) -> None:
        super().__init__(message)
        self.session = session

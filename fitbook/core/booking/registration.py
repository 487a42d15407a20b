"""
Roster changes.

Functions here return a new session and never mutate the one passed in,
so a rejected change leaves no trace.
"""

from dataclasses import replace

from .errors import (
    CapacityExceededError,
    RegistrationBlockedError,
    SessionCancelledError,
    ValidationError,
)
from .models import TrainingSession, User
from .phones import normalize_phone


def is_registered(phone: str, session: TrainingSession) -> bool:
    normalized = normalize_phone(phone)
    return bool(normalized) and any(
        normalize_phone(p) == normalized for p in session.registered_phone_numbers
    )


def _without(phone: str, session: TrainingSession) -> TrainingSession:
    normalized = normalize_phone(phone)
    roster = [p for p in session.registered_phone_numbers if normalize_phone(p) != normalized]
    return replace(session, registered_phone_numbers=roster)


def _with(phone: str, session: TrainingSession) -> TrainingSession:
    roster = list(session.registered_phone_numbers) + [normalize_phone(phone)]
    return replace(session, registered_phone_numbers=roster)


def toggle_registration(user: User, session: TrainingSession) -> TrainingSession:
    """
    Register the trainee, or unregister them if already on the roster.

    Restricted trainees can do neither. Leaving is always allowed
    otherwise; joining needs a free spot.
    """
    if user.is_restricted:
        raise RegistrationBlockedError(f"User {user.id} is restricted from registering")
    if session.is_cancelled:
        raise SessionCancelledError(f"Session {session.id} is cancelled")

    if is_registered(user.phone, session):
        return _without(user.phone, session)

    if session.registered_count >= session.max_capacity:
        raise CapacityExceededError(session.id, session.max_capacity)

    return _with(user.phone, session)


def admin_set_registration(
    phone: str,
    session: TrainingSession,
    registered: bool,
) -> TrainingSession:
    """
    Coach override: add or remove a phone regardless of capacity,
    cancellation or restriction.
    """
    if not normalize_phone(phone):
        raise ValidationError("Phone number is required")
    if registered:
        if is_registered(phone, session):
            return session
        return _with(phone, session)
    return _without(phone, session)

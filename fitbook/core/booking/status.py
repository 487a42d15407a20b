"""
Session display state.

Nothing here is stored. Cancelled/started/hidden/zoom/trial are
independent flags on the session; this module combines them with the
clock and the viewer into what a session card shows.
"""

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .models import TrainingSession

HAPPENING_LEAD_HOURS = 3.0
HAPPENING_TAIL_HOURS = 1.5


class DisplayState(Enum):
    SCHEDULED = "scheduled"
    HAPPENING = "happening"
    CANCELLED = "cancelled"


class ButtonLabel(Enum):
    """What the card's action button offers."""
    REGISTER = "register"
    REGISTERED = "registered"
    WAITLIST = "waitlist"
    CANCELLED = "cancelled"
    MANAGE = "manage"


@dataclass(frozen=True)
class SessionStatus:
    state: DisplayState
    show_zoom: bool
    show_trial: bool
    badge_text: Optional[str]
    is_full: bool
    spots_left: int
    button: ButtonLabel
    registration_enabled: bool

    @property
    def is_cancelled(self) -> bool:
        return self.state is DisplayState.CANCELLED

    @property
    def is_happening(self) -> bool:
        return self.state is DisplayState.HAPPENING


def is_happening(session: TrainingSession, now: dt.datetime) -> bool:
    """
    Live from three hours before start until an hour and a half after.

    `now` must be naive local time, like the session's date and time.
    """
    if session.is_cancelled:
        return False
    if session.manual_has_started:
        return True
    diff_hours = (session.starts_at - now).total_seconds() / 3600
    return -HAPPENING_TAIL_HOURS < diff_hours <= HAPPENING_LEAD_HOURS


def _badge_text(happening: bool, zoom: bool, trial: bool) -> Optional[str]:
    if happening and zoom:
        return "LIVE ON ZOOM"
    if happening:
        return "LIVE"
    if zoom:
        return "ZOOM"
    if trial:
        return "TRIAL"
    return None


def derive_status(
    session: TrainingSession,
    now: dt.datetime,
    is_registered: bool = False,
    is_admin: bool = False,
) -> SessionStatus:
    if session.is_cancelled:
        state = DisplayState.CANCELLED
    elif is_happening(session, now):
        state = DisplayState.HAPPENING
    else:
        state = DisplayState.SCHEDULED

    cancelled = state is DisplayState.CANCELLED
    happening = state is DisplayState.HAPPENING
    zoom = session.has_zoom and not cancelled
    trial = session.is_trial and not cancelled and not happening

    if is_admin:
        button = ButtonLabel.MANAGE
    elif cancelled:
        button = ButtonLabel.CANCELLED
    elif is_registered:
        button = ButtonLabel.REGISTERED
    elif session.is_full:
        button = ButtonLabel.WAITLIST
    else:
        button = ButtonLabel.REGISTER

    return SessionStatus(
        state=state,
        show_zoom=zoom,
        show_trial=trial,
        badge_text=None if cancelled else _badge_text(happening, zoom, trial),
        is_full=session.is_full,
        spots_left=max(session.spots_left, 0),
        button=button,
        registration_enabled=is_admin or not cancelled,
    )


def visible_sessions(
    sessions: Iterable[TrainingSession],
    is_admin: bool = False,
) -> list[TrainingSession]:
    """Hidden sessions are left out of the trainee schedule."""
    if is_admin:
        return list(sessions)
    return [s for s in sessions if not s.is_hidden]

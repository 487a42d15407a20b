"""
Response and request models shared by several routers.

Route-specific request bodies live next to their endpoints; the shapes
here (users, sessions, their status) show up in more than one router.
"""

import datetime as dt
from dataclasses import replace
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..core.booking.attendance import UserStats
from ..core.booking.models import (
    PaymentStatus,
    Reported,
    TrainingSession,
    User,
    parse_hhmm,
)
from ..core.booking.status import SessionStatus


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserOut(BaseModel):
    """A trainee as shown to themselves or to the coach."""
    id: str = Field(description="User identifier")
    full_name: str = Field(description="Full name")
    display_name: Optional[str] = Field(None, description="Nickname shown instead of the full name")
    shown_name: str = Field(description="Name to display")
    phone: str = Field(description="Normalized phone number (login credential)")
    email: str = Field(description="Email address")
    start_date: dt.date = Field(description="Date the trainee joined")
    payment_status: PaymentStatus = Field(description="Payment status")
    is_new: bool = Field(description="Self-registered and not yet reviewed by the coach")
    is_restricted: bool = Field(description="Blocked from registering to sessions")
    user_color: Optional[str] = Field(None, description="Badge color")
    monthly_record: int = Field(description="Best monthly attendance count so far")
    has_signed_waiver: bool = Field(description="Whether the health declaration is signed")
    health_declaration_date: Optional[dt.datetime] = Field(None, description="When the declaration was signed")
    health_declaration_id: Optional[str] = Field(None, description="Signature token")
    has_declaration_file: bool = Field(description="Whether a declaration file was uploaded")

    @classmethod
    def from_domain(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            full_name=user.full_name,
            display_name=user.display_name,
            shown_name=user.shown_name,
            phone=user.phone,
            email=user.email,
            start_date=user.start_date,
            payment_status=user.payment_status,
            is_new=user.is_new,
            is_restricted=user.is_restricted,
            user_color=user.user_color,
            monthly_record=user.monthly_record,
            has_signed_waiver=user.has_signed_waiver,
            health_declaration_date=user.health_declaration_date,
            health_declaration_id=user.health_declaration_id,
            has_declaration_file=bool(user.health_declaration_file),
        )


class UserStatsOut(BaseModel):
    monthly_count: int = Field(description="Sessions attended this month")
    streak: int = Field(description="Consecutive weeks with at least 3 sessions")
    monthly_record: int = Field(description="Best monthly count, including this month")
    is_new_record: bool = Field(description="This month beats every earlier month")

    @classmethod
    def from_domain(cls, stats: UserStats) -> "UserStatsOut":
        return cls(
            monthly_count=stats.monthly_count,
            streak=stats.streak,
            monthly_record=stats.monthly_record,
            is_new_record=stats.is_new_record,
        )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class SessionOut(BaseModel):
    """
    A training session.

    Roster phone numbers are included for the coach only; trainees get
    counts.
    """
    id: str
    type: str
    date: dt.date
    time: str
    location: str
    max_capacity: int
    description: str
    registered_count: int
    spots_left: int
    color: Optional[str] = None
    is_trial: bool
    is_zoom_session: bool
    zoom_link: str
    is_hybrid: bool
    is_hidden: bool
    is_cancelled: bool
    manual_has_started: bool
    registered_phone_numbers: Optional[list[str]] = Field(None, description="Roster in registration order (admin only)")
    attended_phone_numbers: Optional[list[str]] = Field(
        None,
        description="Reported attendance (admin only). Null until the coach records it.",
    )
    waiting_list: Optional[list[str]] = Field(None, description="Waiting list (admin only)")

    @classmethod
    def from_domain(cls, session: TrainingSession, include_roster: bool = False) -> "SessionOut":
        attended = None
        if include_roster and isinstance(session.attendance, Reported):
            attended = list(session.attendance.phones)
        return cls(
            id=session.id,
            type=session.type,
            date=session.date,
            time=session.time,
            location=session.location,
            max_capacity=session.max_capacity,
            description=session.description,
            registered_count=session.registered_count,
            spots_left=max(session.spots_left, 0),
            color=session.color,
            is_trial=session.is_trial,
            is_zoom_session=session.is_zoom_session,
            zoom_link=session.zoom_link,
            is_hybrid=session.is_hybrid,
            is_hidden=session.is_hidden,
            is_cancelled=session.is_cancelled,
            manual_has_started=session.manual_has_started,
            registered_phone_numbers=list(session.registered_phone_numbers) if include_roster else None,
            attended_phone_numbers=attended,
            waiting_list=list(session.waiting_list) if include_roster else None,
        )


class SessionStatusOut(BaseModel):
    state: str = Field(description="scheduled, happening or cancelled")
    badge_text: Optional[str] = Field(None, description="LIVE ON ZOOM, LIVE, ZOOM or TRIAL")
    show_zoom: bool
    show_trial: bool
    is_full: bool
    spots_left: int
    button: str = Field(description="register, registered, waitlist, cancelled or manage")
    registration_enabled: bool

    @classmethod
    def from_domain(cls, status: SessionStatus) -> "SessionStatusOut":
        return cls(
            state=status.state.value,
            badge_text=status.badge_text,
            show_zoom=status.show_zoom,
            show_trial=status.show_trial,
            is_full=status.is_full,
            spots_left=status.spots_left,
            button=status.button.value,
            registration_enabled=status.registration_enabled,
        )


class SessionIn(BaseModel):
    """Editable session fields. The roster and attendance have their own endpoints."""
    type: str = Field(min_length=1, description="Workout type label")
    date: dt.date = Field(description="Session date (local)")
    time: str = Field(description="Start time, HH:MM (local)")
    location: str = Field(min_length=1, description="Location name")
    max_capacity: int = Field(gt=0, description="Maximum number of registrants")
    description: str = ""
    color: Optional[str] = None
    is_trial: bool = False
    is_zoom_session: bool = False
    zoom_link: str = ""
    is_hybrid: bool = False
    is_hidden: bool = False
    is_cancelled: bool = False
    manual_has_started: bool = False

    @field_validator("time")
    @classmethod
    def time_is_hhmm(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    def to_domain(self) -> TrainingSession:
        return TrainingSession(**self.model_dump())

    def apply_to(self, session: TrainingSession) -> TrainingSession:
        return replace(session, **self.model_dump())

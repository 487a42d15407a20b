"""
Training session endpoints.

Trainees toggle their own registration and download calendar files.
Everything else (creating, editing, rosters, attendance, messaging
registrants) is the coach's and requires an admin session.
"""

import logging

import pytz
from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from ...core.booking.attendance import AttendanceDraft
from ...core.booking.calendar import ics_filename, session_to_ics
from ...core.booking.models import Reported
from ...core.booking.phones import normalize_phone, whatsapp_link
from ...core.booking.registration import is_registered
from ...core.booking.status import derive_status
from ..dependencies import (
    AdminDep,
    BookingServiceDep,
    LoggedInDep,
    NowDep,
    SettingsDep,
)
from ..schemas import SessionIn, SessionOut, SessionStatusOut

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class RegistrationResponse(BaseModel):
    """Result of a registration toggle."""
    session: SessionOut
    status: SessionStatusOut
    is_registered: bool = Field(description="Whether the trainee is on the roster after the toggle")


class RosterChange(BaseModel):
    phone: str = Field(min_length=1, description="Trainee phone number")
    registered: bool = Field(description="True to add to the roster, False to remove")


class AttendanceEntry(BaseModel):
    phone: str
    name: str = Field(description="Trainee name, or the phone when no trainee matches")
    registered: bool = Field(description="On the session roster")
    attended: bool = Field(description="Marked as present in the editor")


class AttendanceResponse(BaseModel):
    session_id: str
    reported: bool = Field(description="Whether attendance was already recorded for this session")
    entries: list[AttendanceEntry] = Field(description="Roster order, then attendees who weren't registered")


class AttendanceUpdate(BaseModel):
    attended_phones: list[str] = Field(description="Everyone who actually came")


class MessageLink(BaseModel):
    phone: str
    name: str
    link: str = Field(description="wa.me link with the message prefilled")


# ---------------------------------------------------------------------------
# Trainee endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/{session_id}/registration",
    response_model=RegistrationResponse,
    summary="Join or leave a session",
    description="Toggles the logged-in trainee's registration. Full, cancelled and restricted cases are rejected.",
    responses={
        403: {"description": "Trainee is restricted"},
        409: {"description": "Session is full or cancelled"},
        502: {"description": "Change could not be saved; response carries the refreshed session"},
    },
)
def toggle_registration(
    session_id: str,
    context: LoggedInDep,
    booking: BookingServiceDep,
    now: NowDep,
) -> RegistrationResponse:
    updated = booking.toggle_registration(session_id, context.phone)
    registered = is_registered(context.phone, updated)
    return RegistrationResponse(
        session=SessionOut.from_domain(updated, include_roster=context.is_admin),
        status=SessionStatusOut.from_domain(derive_status(
            updated, now, is_registered=registered, is_admin=context.is_admin,
        )),
        is_registered=registered,
    )


@router.get(
    "/{session_id}/calendar.ics",
    summary="Download the session as a calendar event",
    response_class=Response,
    responses={200: {"content": {"text/calendar": {}}}},
)
def download_calendar(
    session_id: str,
    booking: BookingServiceDep,
    settings: SettingsDep,
    now: NowDep,
) -> Response:
    session = booking.get_session(session_id)
    stamp = pytz.timezone(settings.timezone).localize(now)
    return Response(
        content=session_to_ics(session, now=stamp, duration_minutes=settings.session_duration_minutes),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(session)}"'},
    )


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[SessionOut],
    summary="All sessions (admin)",
)
def list_sessions(_: AdminDep, booking: BookingServiceDep) -> list[SessionOut]:
    sessions = sorted(booking.state.sessions, key=lambda s: s.starts_at)
    return [SessionOut.from_domain(s, include_roster=True) for s in sessions]


@router.post(
    "",
    response_model=SessionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a session (admin)",
)
def create_session(body: SessionIn, _: AdminDep, booking: BookingServiceDep) -> SessionOut:
    created = booking.create_session(body.to_domain())
    return SessionOut.from_domain(created, include_roster=True)


@router.put(
    "/{session_id}",
    response_model=SessionOut,
    summary="Edit a session (admin)",
    description="Replaces the editable fields. Roster and attendance are kept.",
)
def update_session(
    session_id: str,
    body: SessionIn,
    _: AdminDep,
    booking: BookingServiceDep,
) -> SessionOut:
    existing = booking.get_session(session_id)
    updated = booking.update_session(body.apply_to(existing))
    logger.info(
        "Session edited",
        extra={"session_id": session_id, "is_cancelled": updated.is_cancelled}
    )
    return SessionOut.from_domain(updated, include_roster=True)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a session (admin)",
)
def delete_session(session_id: str, _: AdminDep, booking: BookingServiceDep) -> Response:
    booking.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{session_id}/duplicate",
    response_model=SessionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Copy a session one hour later (admin)",
)
def duplicate_session(session_id: str, _: AdminDep, booking: BookingServiceDep) -> SessionOut:
    return SessionOut.from_domain(booking.duplicate_session(session_id), include_roster=True)


@router.put(
    "/{session_id}/roster",
    response_model=SessionOut,
    summary="Add or remove a trainee (admin)",
    description="Coach override: ignores capacity and cancellation.",
)
def set_roster_entry(
    session_id: str,
    body: RosterChange,
    _: AdminDep,
    booking: BookingServiceDep,
) -> SessionOut:
    updated = booking.set_registration(session_id, body.phone, body.registered)
    return SessionOut.from_domain(updated, include_roster=True)


@router.get(
    "/{session_id}/attendance",
    response_model=AttendanceResponse,
    summary="Open the attendance editor (admin)",
    description="Unreported sessions start with the whole roster checked; reported ones start from the record.",
)
def get_attendance(session_id: str, _: AdminDep, booking: BookingServiceDep) -> AttendanceResponse:
    session = booking.get_session(session_id)
    draft = AttendanceDraft.open(session)

    entries = []
    for phone in list(draft.roster) + [p for p in draft.ordered() if p not in draft.roster]:
        user = booking.state.find_user(phone)
        entries.append(AttendanceEntry(
            phone=phone,
            name=user.shown_name if user else phone,
            registered=phone in draft.roster,
            attended=draft.is_marked(phone),
        ))

    return AttendanceResponse(
        session_id=session.id,
        reported=isinstance(session.attendance, Reported),
        entries=entries,
    )


@router.put(
    "/{session_id}/attendance",
    response_model=SessionOut,
    summary="Record attendance (admin)",
)
def commit_attendance(
    session_id: str,
    body: AttendanceUpdate,
    _: AdminDep,
    booking: BookingServiceDep,
) -> SessionOut:
    updated = booking.commit_attendance(session_id, body.attended_phones)
    return SessionOut.from_domain(updated, include_roster=True)


@router.get(
    "/{session_id}/messages",
    response_model=list[MessageLink],
    summary="WhatsApp links for everyone registered (admin)",
)
def message_links(
    session_id: str,
    _: AdminDep,
    booking: BookingServiceDep,
    text: str = Query("", max_length=1000),
) -> list[MessageLink]:
    session = booking.get_session(session_id)
    links = []
    for phone in session.registered_phone_numbers:
        user = booking.state.find_user(phone)
        links.append(MessageLink(
            phone=normalize_phone(phone),
            name=user.shown_name if user else normalize_phone(phone),
            link=whatsapp_link(phone, text),
        ))
    return links

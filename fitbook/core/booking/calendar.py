"""
iCalendar export for a single session ("add to my calendar").
"""

import datetime as dt

import pytz

from .models import TrainingSession

PRODID = "-//FitBook//Class Booking//EN"

_ICS_STAMP = "%Y%m%dT%H%M%S"
_MAX_LINE_OCTETS = 75


def _escape(text: str) -> str:
    """Escape TEXT values per RFC 5545 section 3.3.11."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _fold(line: str) -> str:
    """
    Split a content line into 75-octet pieces (RFC 5545 section 3.1).

    Continuation lines start with a space, which counts toward their
    length. Multi-byte characters are never split.
    """
    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    pieces = []
    current, size = "", 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > _MAX_LINE_OCTETS:
            pieces.append(current)
            current, size = " ", 1
        current += char
        size += width
    pieces.append(current)
    return "\r\n".join(pieces)


def _utc_stamp(moment: dt.datetime) -> str:
    # naive values are taken to be UTC already
    if moment.tzinfo is not None:
        moment = moment.astimezone(pytz.utc)
    return moment.strftime(_ICS_STAMP) + "Z"


def session_to_ics(
    session: TrainingSession,
    now: dt.datetime,
    duration_minutes: int = 60,
) -> str:
    """
    A VCALENDAR with one VEVENT for the session.

    Start and end are floating local times, which is how the coach
    schedules them. DTSTAMP is `now` in UTC.
    """
    start = session.starts_at
    end = start + dt.timedelta(minutes=duration_minutes)

    summary = session.type
    if session.is_cancelled:
        summary = f"[CANCELLED] {summary}"

    description = session.description or ""
    if session.zoom_link:
        description = f"{description}\n{session.zoom_link}".strip()

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:{session.id}@fitbook",
        f"DTSTAMP:{_utc_stamp(now)}",
        f"DTSTART:{start.strftime(_ICS_STAMP)}",
        f"DTEND:{end.strftime(_ICS_STAMP)}",
        f"SUMMARY:{_escape(summary)}",
        f"LOCATION:{_escape(session.location)}",
    ]
    if description:
        lines.append(f"DESCRIPTION:{_escape(description)}")
    lines += ["END:VEVENT", "END:VCALENDAR"]

    return "".join(_fold(line) + "\r\n" for line in lines)


def ics_filename(session: TrainingSession) -> str:
    return f"session-{session.id}.ics"

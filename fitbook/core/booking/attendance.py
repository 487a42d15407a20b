"""
Attendance resolution, monthly counts, weekly streaks and the coach's
attendance editor.

The one rule everything here depends on: until the coach records
attendance for a session, everyone registered is assumed to have attended.
Once recorded (even as an empty list), the record is authoritative.
"""

import datetime as dt
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Iterable

from .models import Reported, TrainingSession, User
from .phones import normalize_phone

STREAK_MIN_SESSIONS = 3
STREAK_FLOOR_YEAR = 2023


def is_attended(phone: str, session: TrainingSession) -> bool:
    """Whether the trainee counts as having attended the session."""
    normalized = normalize_phone(phone)
    if not normalized:
        return False
    if isinstance(session.attendance, Reported):
        pool = session.attendance.phones
    else:
        pool = session.registered_phone_numbers
    return any(normalize_phone(p) == normalized for p in pool)


def attended_sessions(
    phone: str,
    sessions: Iterable[TrainingSession],
) -> list[TrainingSession]:
    return [s for s in sessions if is_attended(phone, s)]


def monthly_count(
    phone: str,
    sessions: Iterable[TrainingSession],
    reference: dt.date,
) -> int:
    """Sessions attended in the calendar month of `reference`."""
    return sum(
        1 for s in attended_sessions(phone, sessions)
        if s.date.year == reference.year and s.date.month == reference.month
    )


def week_key(day: dt.date) -> dt.date:
    """The Sunday that starts `day`'s week."""
    days_since_sunday = (day.weekday() + 1) % 7
    return day - dt.timedelta(days=days_since_sunday)


def streak(
    phone: str,
    sessions: Iterable[TrainingSession],
    today: dt.date,
) -> int:
    """
    Consecutive weeks with at least three attended sessions.

    The walk goes backwards from the current week. The current week may
    still be in progress, so falling short there doesn't break the streak;
    a shortfall in any earlier week does.
    """
    per_week = Counter(week_key(s.date) for s in attended_sessions(phone, sessions))

    current = week_key(today)
    week = current
    count = 0
    while week.year >= STREAK_FLOOR_YEAR:
        if per_week[week] >= STREAK_MIN_SESSIONS:
            count += 1
        elif week != current:
            break
        week -= dt.timedelta(weeks=1)
    return count


@dataclass(frozen=True)
class UserStats:
    """Numbers shown next to a trainee in the coach's list."""
    monthly_count: int
    streak: int
    monthly_record: int

    @property
    def is_new_record(self) -> bool:
        return self.monthly_count > 0 and self.monthly_count >= self.monthly_record


def user_stats(
    user: User,
    sessions: list[TrainingSession],
    today: dt.date,
) -> UserStats:
    count = monthly_count(user.phone, sessions, today)
    return UserStats(
        monthly_count=count,
        streak=streak(user.phone, sessions, today),
        monthly_record=max(user.monthly_record or 0, count),
    )


# ---------------------------------------------------------------------------
# Attendance editor
# ---------------------------------------------------------------------------

@dataclass
class AttendanceDraft:
    """
    The coach's in-progress attendance marks for one session.

    Opening an unreported session pre-checks the whole roster, so the coach
    only unchecks no-shows. Opening a reported one continues from the record.
    """
    session_id: str
    roster: tuple[str, ...]
    phones: set[str] = field(default_factory=set)

    @classmethod
    def open(cls, session: TrainingSession) -> "AttendanceDraft":
        roster = tuple(normalize_phone(p) for p in session.registered_phone_numbers)
        if isinstance(session.attendance, Reported):
            seed = {normalize_phone(p) for p in session.attendance.phones}
        else:
            seed = set(roster)
        return cls(session_id=session.id, roster=roster, phones=seed)

    def is_marked(self, phone: str) -> bool:
        return normalize_phone(phone) in self.phones

    def toggle(self, phone: str) -> bool:
        """Flip one trainee's mark. Returns whether they are now marked."""
        normalized = normalize_phone(phone)
        if normalized in self.phones:
            self.phones.discard(normalized)
            return False
        self.phones.add(normalized)
        return True

    def ordered(self) -> tuple[str, ...]:
        """Marked phones in roster order, then anyone added off-roster."""
        in_roster = [p for p in self.roster if p in self.phones]
        extras = sorted(self.phones - set(self.roster))
        return tuple(dict.fromkeys(in_roster + extras))

    def commit(self, session: TrainingSession) -> TrainingSession:
        """
        Session with the draft recorded as its attendance.

        After this the session is permanently "reported".
        """
        if session.id != self.session_id:
            raise ValueError("Draft belongs to a different session")
        return replace(session, attendance=Reported(self.ordered()))

"""
Weekly calendar windowing and the coach's list helpers.
"""

import datetime as dt
from collections import defaultdict
from dataclasses import replace
from typing import Iterable, Literal, Optional

from .attendance import UserStats, week_key
from .models import Reported, TrainingSession, User, parse_hhmm
from .phones import normalize_phone

UserSort = Literal["name", "workouts"]


def week_dates(today: dt.date, week_offset: int = 0) -> list[dt.date]:
    """The seven dates (Sunday first) of the week `week_offset` weeks away."""
    start = week_key(today) + dt.timedelta(weeks=week_offset)
    return [start + dt.timedelta(days=i) for i in range(7)]


def group_by_date(
    sessions: Iterable[TrainingSession],
) -> dict[dt.date, list[TrainingSession]]:
    grouped: dict[dt.date, list[TrainingSession]] = defaultdict(list)
    for session in sessions:
        grouped[session.date].append(session)
    for day_sessions in grouped.values():
        day_sessions.sort(key=lambda s: parse_hhmm(s.time))
    return dict(grouped)


def duplicate_session(session: TrainingSession, new_id: str) -> TrainingSession:
    """
    Copy of a session one hour later with an empty roster.

    The copy starts out with attendance reported as empty, the same as the
    coach's "duplicate" button always did.
    """
    start = parse_hhmm(session.time)
    next_hour = (start.hour + 1) % 24
    return replace(
        session,
        id=new_id,
        time=f"{next_hour:02d}:{start.minute:02d}",
        registered_phone_numbers=[],
        attendance=Reported(()),
        waiting_list=[],
        manual_has_started=False,
    )


def search_users(
    users: Iterable[User],
    query: str = "",
    sort_by: UserSort = "name",
    stats: Optional[dict[str, UserStats]] = None,
) -> list[User]:
    """
    Filter trainees by name or phone substring and sort them.

    Sorting by workouts needs `stats` keyed by user id; users without
    stats sort as zero.
    """
    query = query.strip()
    phone_query = normalize_phone(query)

    def matches(user: User) -> bool:
        if not query:
            return True
        if query in user.full_name or (user.display_name and query in user.display_name):
            return True
        return bool(phone_query) and phone_query in normalize_phone(user.phone)

    found = [u for u in users if matches(u)]

    if sort_by == "workouts":
        stats = stats or {}
        found.sort(
            key=lambda u: (
                -(stats[u.id].monthly_count if u.id in stats else 0),
                u.full_name,
            )
        )
    else:
        found.sort(key=lambda u: u.full_name)
    return found

"""
Seed data for a fresh install.

The local mirror returns these when a table has never been written (or its
blob is corrupt), so a new coach sees a working schedule immediately.
"""

import datetime as dt
from typing import Optional

from fitbook.core.booking.models import (
    AppConfig,
    LocationDef,
    PaymentStatus,
    TrainingSession,
    User,
    WorkoutType,
)

from .base import APP_CONFIG, LOCATIONS, QUOTES, SESSIONS, USERS, WORKOUT_TYPES, Record, RecordStore
from .local import LocalMirrorStore
from .records import (
    config_to_record,
    location_to_record,
    session_to_record,
    user_to_record,
    workout_type_to_record,
)

DEFAULT_WORKOUT_TYPES = [t.value for t in WorkoutType]

DEFAULT_LOCATIONS = [
    LocationDef(id="1", name="כיכר הפרפר, נס ציונה", address="כיכר הפרפר, נס ציונה", color="#A3E635"),
    LocationDef(id="2", name="סטודיו נס ציונה", address="נס ציונה", color="#3B82F6"),
]

DEMO_USERS = [
    User(id="1", full_name="ישראל ישראלי", phone="0501234567", email="israel@example.com",
         start_date=dt.date(2023, 1, 1), payment_status=PaymentStatus.PAID),
    User(id="2", full_name="דנה כהן", phone="0547654321", email="dana@example.com",
         start_date=dt.date(2023, 3, 15), payment_status=PaymentStatus.PENDING),
    User(id="3", full_name="רוני לוי", phone="0529998888", email="roni@example.com",
         start_date=dt.date(2023, 6, 10), payment_status=PaymentStatus.OVERDUE),
    User(id="4", full_name="עמית שחר", phone="0500000001", email="amit@example.com",
         start_date=dt.date(2023, 8, 1), payment_status=PaymentStatus.PAID),
    User(id="5", full_name="נועה ברק", phone="0500000002", email="noa@example.com",
         start_date=dt.date(2023, 8, 5), payment_status=PaymentStatus.PAID),
]


def demo_sessions(today: dt.date) -> list[TrainingSession]:
    """A few upcoming sessions with the demo trainees registered."""
    roster = [u.phone for u in DEMO_USERS]
    plan = [
        ("s1", WorkoutType.FUNCTIONAL, 0, "18:00", DEFAULT_LOCATIONS[0].name, 15,
         "אימון בדופק גבוה המשלב כוח וסיבולת.", False),
        ("s2", WorkoutType.STRENGTH, 1, "07:00", DEFAULT_LOCATIONS[1].name, 10,
         "עבודה על כוח מתפרץ ומשקולות.", False),
        ("s3", WorkoutType.HIIT, 2, "19:30", DEFAULT_LOCATIONS[0].name, 20,
         "אימון אינטרוולים עצים.", True),
        ("s4", WorkoutType.PILATES, 3, "08:00", DEFAULT_LOCATIONS[1].name, 8,
         "חיזוק שרירי ליבה וגמישות.", False),
    ]
    return [
        TrainingSession(
            id=session_id,
            type=workout_type.value,
            date=today + dt.timedelta(days=offset),
            time=time,
            location=location,
            max_capacity=capacity,
            description=description,
            registered_phone_numbers=list(roster),
            is_trial=is_trial,
        )
        for session_id, workout_type, offset, time, location, capacity, description, is_trial in plan
    ]


def default_records(
    today: Optional[dt.date] = None,
    with_demo_data: bool = True,
) -> dict[str, list[Record]]:
    """Seed records per table for the local mirror."""
    today = today or dt.date.today()
    seeds: dict[str, list[Record]] = {
        LOCATIONS: [location_to_record(loc) for loc in DEFAULT_LOCATIONS],
        WORKOUT_TYPES: [workout_type_to_record(t) for t in DEFAULT_WORKOUT_TYPES],
        APP_CONFIG: [config_to_record(AppConfig())],
        QUOTES: [],
        USERS: [],
        SESSIONS: [],
    }
    if with_demo_data:
        seeds[USERS] = [user_to_record(u) for u in DEMO_USERS]
        seeds[SESSIONS] = [session_to_record(s) for s in demo_sessions(today)]
    return seeds


def stored_record_count(store: RecordStore, table: str) -> int:
    """
    Records actually persisted in a table.

    A local blob that was never written reads as its seeds; those are not
    stored yet, so they count as zero.
    """
    if isinstance(store, LocalMirrorStore) and not store.has_blob(table):
        return 0
    return len(store.list(table))

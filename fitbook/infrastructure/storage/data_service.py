"""
Entity-level persistence over a RecordStore.

DataService is the one place that knows which table holds which entity
and how records become domain objects. It implements the
BookingRepository protocol the booking workflows depend on.

Store errors propagate to the caller unchanged. A single record that can't
be parsed is skipped and logged rather than failing the whole list.
"""

import logging
from typing import Callable, TypeVar

from fitbook.core.booking.errors import ValidationError
from fitbook.core.booking.models import AppConfig, LocationDef, Quote, TrainingSession, User

from .base import (
    APP_CONFIG,
    LOCATIONS,
    QUOTES,
    SESSIONS,
    USERS,
    WORKOUT_TYPES,
    Record,
    RecordStore,
)
from .defaults import DEFAULT_WORKOUT_TYPES
from .records import (
    config_from_record,
    config_to_record,
    location_from_record,
    location_to_record,
    quote_from_record,
    quote_to_record,
    session_from_record,
    session_to_record,
    user_from_record,
    user_to_record,
    workout_type_from_record,
    workout_type_to_record,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataService:
    """Get/add/update/delete for users, sessions, locations, workout types, config and quotes."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def _load(self, table: str, parse: Callable[[Record], T]) -> list[T]:
        items = []
        for record in self._store.list(table):
            try:
                items.append(parse(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(
                    "Skipping unreadable record",
                    extra={"table": table, "record_id": record.get("id"), "error": str(e)}
                )
        return items

    # -----------------------------------------------------------------------
    # Users
    # -----------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return self._load(USERS, user_from_record)

    def add_user(self, user: User) -> None:
        self._store.add(USERS, user_to_record(user))

    def update_user(self, user: User) -> None:
        self._store.update(USERS, user_to_record(user))

    def delete_user(self, user_id: str) -> None:
        self._store.delete(USERS, user_id)

    # -----------------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------------

    def list_sessions(self) -> list[TrainingSession]:
        return self._load(SESSIONS, session_from_record)

    def add_session(self, session: TrainingSession) -> None:
        self._store.add(SESSIONS, session_to_record(session))

    def update_session(self, session: TrainingSession) -> None:
        self._store.update(SESSIONS, session_to_record(session))

    def delete_session(self, session_id: str) -> None:
        self._store.delete(SESSIONS, session_id)

    # -----------------------------------------------------------------------
    # Locations
    # -----------------------------------------------------------------------

    def list_locations(self) -> list[LocationDef]:
        return self._load(LOCATIONS, location_from_record)

    def save_locations(self, locations: list[LocationDef]) -> None:
        self._store.upsert(LOCATIONS, [location_to_record(loc) for loc in locations])

    def delete_location(self, location_id: str) -> None:
        self._store.delete(LOCATIONS, location_id)

    # -----------------------------------------------------------------------
    # Workout types
    # -----------------------------------------------------------------------

    def list_workout_types(self) -> list[str]:
        """An empty table means "never configured", so the defaults apply."""
        types = self._load(WORKOUT_TYPES, workout_type_from_record)
        return types or list(DEFAULT_WORKOUT_TYPES)

    def save_workout_types(self, types: list[str]) -> None:
        unique = list(dict.fromkeys(t.strip() for t in types if t.strip()))
        if not unique:
            raise ValidationError("At least one workout type is required")
        self._store.upsert(WORKOUT_TYPES, [workout_type_to_record(t) for t in unique])

    def delete_workout_type(self, name: str) -> None:
        """
        Remove one label. The last remaining label cannot be deleted.

        While the table is empty the defaults are only implied, so they are
        stored first; otherwise the delete would find nothing to remove.
        """
        current = self.list_workout_types()
        if name not in current:
            return
        if len(current) == 1:
            raise ValidationError("At least one workout type is required")
        if not self._store.list(WORKOUT_TYPES):
            self.save_workout_types(current)
        self._store.delete(WORKOUT_TYPES, name)

    # -----------------------------------------------------------------------
    # App config
    # -----------------------------------------------------------------------

    def get_app_config(self) -> AppConfig:
        records = self._store.list(APP_CONFIG)
        return config_from_record(records[0] if records else None)

    def save_app_config(self, config: AppConfig) -> None:
        self._store.upsert(APP_CONFIG, [config_to_record(config)])

    # -----------------------------------------------------------------------
    # Quotes
    # -----------------------------------------------------------------------

    def list_quotes(self) -> list[Quote]:
        return self._load(QUOTES, quote_from_record)

    def add_quote(self, quote: Quote) -> None:
        self._store.add(QUOTES, quote_to_record(quote))

    def delete_quote(self, quote_id: str) -> None:
        self._store.delete(QUOTES, quote_id)

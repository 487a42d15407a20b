"""
Record store interface.

Both backends (Snowflake tables and the local JSON mirror) store plain
JSON-compatible dicts keyed by their "id" field. DataService translates
those records to and from domain models, so neither backend knows about
users or sessions.
"""

from __future__ import annotations

from typing import Any, Protocol

Record = dict[str, Any]

USERS = "users"
SESSIONS = "sessions"
LOCATIONS = "config_locations"
WORKOUT_TYPES = "config_workout_types"
APP_CONFIG = "config_general"
QUOTES = "config_quotes"

TABLES = (USERS, SESSIONS, LOCATIONS, WORKOUT_TYPES, APP_CONFIG, QUOTES)


class StoreError(Exception):
    """Raised when a store operation fails (network, auth, constraint)."""
    pass


class UnknownTableError(StoreError):
    pass


def check_table(table: str) -> str:
    if table not in TABLES:
        raise UnknownTableError(f"Unknown table: {table}")
    return table


class RecordStore(Protocol):
    """
    Uniform list/add/update/delete over named tables.

    Updates and deletes of missing ids are silent no-ops. Concurrent
    writers follow last-write-wins.
    """

    def list(self, table: str) -> list[Record]:
        ...

    def add(self, table: str, record: Record) -> None:
        ...

    def update(self, table: str, record: Record) -> None:
        ...

    def delete(self, table: str, record_id: str) -> None:
        ...

    def upsert(self, table: str, records: list[Record]) -> None:
        """Insert new ids, replace existing ones."""
        ...

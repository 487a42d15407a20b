"""
Unit tests for persistence: record translation, the local mirror store
and DataService.

The local mirror writes to pytest's tmp_path. The Snowflake store runs
against a fake connection that records its SQL.
"""

import datetime as dt
import json

import pytest

from fitbook.core.booking.errors import ValidationError
from fitbook.core.booking.models import (
    UNREPORTED,
    AppConfig,
    LocationDef,
    Quote,
    Reported,
)
from fitbook.infrastructure.snowflake.store import SnowflakeRecordStore
from fitbook.infrastructure.storage.base import (
    APP_CONFIG,
    LOCATIONS,
    SESSIONS,
    TABLES,
    USERS,
    WORKOUT_TYPES,
    StoreError,
    UnknownTableError,
)
from fitbook.infrastructure.storage.data_service import DataService
from fitbook.infrastructure.storage.defaults import (
    DEFAULT_WORKOUT_TYPES,
    default_records,
    stored_record_count,
)
from fitbook.infrastructure.storage.local import LocalMirrorStore
from fitbook.infrastructure.storage.records import (
    config_from_record,
    config_to_record,
    session_from_record,
    session_to_record,
    user_from_record,
    user_to_record,
)


@pytest.fixture
def store(tmp_path):
    return LocalMirrorStore(tmp_path, namespace="test")


@pytest.fixture
def data(store):
    return DataService(store)


# ---------------------------------------------------------------------------
# Record translation
# ---------------------------------------------------------------------------

class TestSessionRecords:
    """Attendance is a variant in the domain and null-or-list on disk."""

    def test_unreported_is_stored_as_null(self, make_session):
        record = session_to_record(make_session(registered_phone_numbers=["0501234567"]))
        assert record["attendedPhoneNumbers"] is None
        assert record["registeredPhoneNumbers"] == ["0501234567"]

    def test_reported_empty_is_stored_as_empty_list(self, make_session):
        record = session_to_record(make_session(attendance=Reported(())))
        assert record["attendedPhoneNumbers"] == []

    def test_missing_field_loads_as_unreported(self, make_session):
        record = session_to_record(make_session())
        del record["attendedPhoneNumbers"]
        assert session_from_record(record).attendance == UNREPORTED

    def test_empty_list_loads_as_reported(self, make_session):
        record = session_to_record(make_session())
        record["attendedPhoneNumbers"] = []
        assert session_from_record(record).attendance == Reported(())

    def test_stored_record_uses_camel_case(self, make_session):
        record = session_to_record(make_session(max_capacity=12, is_cancelled=True))
        assert record["maxCapacity"] == 12
        assert record["isCancelled"] is True

    def test_bad_time_is_rejected_on_load(self, make_session):
        record = session_to_record(make_session())
        record["time"] = "evening"
        with pytest.raises(ValueError, match="Invalid session time"):
            session_from_record(record)


class TestUserRecords:
    def test_waiver_fields_survive_a_round_trip(self, make_user):
        user = make_user(
            health_declaration_date=dt.datetime(2024, 5, 14, 9, 30),
            health_declaration_id="sig-1",
        )
        loaded = user_from_record(user_to_record(user))
        assert loaded.has_signed_waiver
        assert loaded.health_declaration_date == dt.datetime(2024, 5, 14, 9, 30)

    def test_legacy_record_with_missing_fields_loads(self):
        user = user_from_record({"id": "7", "fullName": "Noa", "phone": "0500000002"})
        assert user.monthly_record == 0
        assert not user.is_restricted


class TestConfigRecords:
    def test_admin_password_uses_historical_field_name(self):
        record = config_to_record(AppConfig(admin_password="s3cret"))
        assert record["coachAdditionalPhone"] == "s3cret"
        assert "adminPassword" not in record

    def test_stored_values_override_defaults(self):
        config = config_from_record({"id": "main", "coachNameEng": "COACH K", "urgentMessage": None})
        assert config.coach_name_eng == "COACH K"
        assert config.coach_name_heb == AppConfig().coach_name_heb
        assert config.admin_password == "admin"


# ---------------------------------------------------------------------------
# Local mirror store
# ---------------------------------------------------------------------------

class TestLocalMirrorStore:
    """Tests for LocalMirrorStore."""

    def test_blob_is_namespaced_json(self, store, tmp_path):
        store.add(USERS, {"id": "1", "fullName": "Dana"})

        blob = tmp_path / "test_users.json"
        assert json.loads(blob.read_text(encoding="utf-8")) == [{"id": "1", "fullName": "Dana"}]

    def test_update_and_delete_by_id(self, store):
        store.add(USERS, {"id": "1", "fullName": "Dana"})
        store.add(USERS, {"id": "2", "fullName": "Roni"})

        store.update(USERS, {"id": "1", "fullName": "Dana Cohen"})
        store.delete(USERS, "2")

        assert store.list(USERS) == [{"id": "1", "fullName": "Dana Cohen"}]

    def test_upsert_replaces_and_appends(self, store):
        store.add(LOCATIONS, {"id": "a", "name": "Park"})
        store.upsert(LOCATIONS, [{"id": "a", "name": "Park North"}, {"id": "b", "name": "Studio"}])
        assert [r["name"] for r in store.list(LOCATIONS)] == ["Park North", "Studio"]

    def test_missing_blob_returns_seeds(self, tmp_path):
        store = LocalMirrorStore(tmp_path, seeds={LOCATIONS: [{"id": "a", "name": "Park"}]})
        assert store.list(LOCATIONS) == [{"id": "a", "name": "Park"}]
        assert store.list(USERS) == []

    def test_corrupt_blob_falls_back_to_seeds(self, tmp_path, caplog):
        (tmp_path / "fitbook_locations.json").write_text("{not json", encoding="utf-8")
        store = LocalMirrorStore(tmp_path, seeds={LOCATIONS: [{"id": "a", "name": "Park"}]})

        with caplog.at_level("ERROR"):
            records = store.list(LOCATIONS)

        assert records == [{"id": "a", "name": "Park"}]
        assert "Corrupt local blob" in caplog.text

    def test_non_list_blob_falls_back_to_seeds(self, tmp_path):
        (tmp_path / "fitbook_users.json").write_text('{"id": "1"}', encoding="utf-8")
        assert LocalMirrorStore(tmp_path).list(USERS) == []

    def test_seeds_are_not_shared_between_reads(self, tmp_path):
        store = LocalMirrorStore(tmp_path, seeds={LOCATIONS: [{"id": "a", "name": "Park"}]})
        store.list(LOCATIONS)[0]["name"] = "changed"
        assert store.list(LOCATIONS)[0]["name"] == "Park"

    def test_unknown_table_is_rejected(self, store):
        with pytest.raises(UnknownTableError):
            store.list("payments")

    def test_no_temp_files_left_behind(self, store, tmp_path):
        store.add(USERS, {"id": "1"})
        assert [p.name for p in tmp_path.iterdir()] == ["test_users.json"]


# ---------------------------------------------------------------------------
# DataService
# ---------------------------------------------------------------------------

class TestDataService:
    """Tests for entity-level persistence."""

    def test_sessions_round_trip_through_the_store(self, data, make_session):
        session = make_session(registered_phone_numbers=["0501234567"], attendance=Reported(("0501234567",)))
        data.add_session(session)
        assert data.list_sessions() == [session]

    def test_unreadable_record_is_skipped(self, data, store, make_session, caplog):
        data.add_session(make_session(id="good"))
        store.add(SESSIONS, {"id": "bad", "date": "2024-05-14", "time": "18:00", "maxCapacity": 0})

        with caplog.at_level("ERROR"):
            sessions = data.list_sessions()

        assert [s.id for s in sessions] == ["good"]
        assert "Skipping unreadable record" in caplog.text

    def test_workout_types_fall_back_to_defaults_when_empty(self, data):
        assert data.list_workout_types() == DEFAULT_WORKOUT_TYPES

    def test_workout_types_are_deduplicated(self, data):
        data.save_workout_types(["Boxing", "Boxing ", "Yoga"])
        assert data.list_workout_types() == ["Boxing", "Yoga"]

    def test_delete_workout_type(self, data):
        data.save_workout_types(["Boxing", "Yoga"])
        data.delete_workout_type("Boxing")
        assert data.list_workout_types() == ["Yoga"]

    def test_deleting_an_implied_default_keeps_the_others(self, data, store):
        removed = DEFAULT_WORKOUT_TYPES[0]

        data.delete_workout_type(removed)

        assert data.list_workout_types() == DEFAULT_WORKOUT_TYPES[1:]
        assert len(store.list(WORKOUT_TYPES)) == len(DEFAULT_WORKOUT_TYPES) - 1

    def test_last_workout_type_cannot_be_deleted(self, data):
        data.save_workout_types(["Yoga"])

        with pytest.raises(ValidationError):
            data.delete_workout_type("Yoga")

        assert data.list_workout_types() == ["Yoga"]

    def test_empty_workout_type_list_is_rejected(self, data):
        with pytest.raises(ValidationError):
            data.save_workout_types(["  "])

    def test_config_defaults_when_never_saved(self, data):
        assert data.get_app_config() == AppConfig()

    def test_config_save_is_a_singleton(self, data, store):
        data.save_app_config(AppConfig(coach_name_eng="ONE"))
        data.save_app_config(AppConfig(coach_name_eng="TWO"))

        assert len(store.list(APP_CONFIG)) == 1
        assert data.get_app_config().coach_name_eng == "TWO"

    def test_locations_and_quotes(self, data):
        data.save_locations([LocationDef(id="a", name="Park")])
        quote = Quote(text="Go")
        data.add_quote(quote)

        assert [loc.name for loc in data.list_locations()] == ["Park"]
        assert data.list_quotes() == [quote]

        data.delete_location("a")
        data.delete_quote(quote.id)

        assert data.list_locations() == []
        assert data.list_quotes() == []


class TestDefaultRecords:
    def test_demo_data_is_optional(self):
        today = dt.date(2024, 5, 14)
        assert default_records(today, with_demo_data=False)[USERS] == []
        assert len(default_records(today)[USERS]) == 5

    def test_defaults_load_through_data_service(self, tmp_path):
        store = LocalMirrorStore(tmp_path, seeds=default_records(dt.date(2024, 5, 14)))
        data = DataService(store)

        assert len(data.list_sessions()) == 4
        assert data.list_workout_types() == DEFAULT_WORKOUT_TYPES
        assert data.get_app_config().admin_password == "admin"
        assert store.list(WORKOUT_TYPES)

    def test_seeds_do_not_count_as_stored(self, tmp_path):
        store = LocalMirrorStore(tmp_path, seeds=default_records(dt.date(2024, 5, 14)))

        assert store.list(LOCATIONS)
        assert stored_record_count(store, LOCATIONS) == 0

        store.upsert(LOCATIONS, store.list(LOCATIONS))

        assert store.has_blob(LOCATIONS)
        assert stored_record_count(store, LOCATIONS) == 2


# ---------------------------------------------------------------------------
# Snowflake store (fake connection)
# ---------------------------------------------------------------------------

class FakeCursor:
    def __init__(self, conn):
        self._conn = conn

    def execute(self, query, params):
        if self._conn.error:
            raise self._conn.error
        self._conn.executed.append((" ".join(query.split()), params))

    def fetchall(self):
        return self._conn.rows

    def close(self):
        pass


class FakeConnection:
    """Records statements; SELECTs return `rows`."""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.executed = []
        self.commits = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1


class TestSnowflakeRecordStore:
    """Tests for SnowflakeRecordStore SQL and payload handling."""

    def test_list_parses_string_and_dict_payloads(self):
        conn = FakeConnection(rows=[('{"id": "1", "fullName": "Dana"}',), ({"id": "2"},), ("not json",), (None,)])
        records = SnowflakeRecordStore(conn).list(USERS)
        assert records == [{"id": "1", "fullName": "Dana"}, {"id": "2"}]

    def test_add_writes_id_and_json_payload(self):
        conn = FakeConnection()
        SnowflakeRecordStore(conn).add(USERS, {"id": "1", "fullName": "דנה"})

        query, params = conn.executed[0]
        assert query.startswith("INSERT INTO users")
        assert params[0] == "1"
        assert json.loads(params[1]) == {"id": "1", "fullName": "דנה"}
        assert conn.commits == 1

    def test_upsert_merges_each_record(self):
        conn = FakeConnection()
        SnowflakeRecordStore(conn).upsert(LOCATIONS, [{"id": "a"}, {"id": "b"}])

        assert len(conn.executed) == 2
        assert all(q.startswith("MERGE INTO config_locations") for q, _ in conn.executed)

    def test_driver_errors_become_store_errors(self):
        conn = FakeConnection(error=RuntimeError("warehouse suspended"))
        with pytest.raises(StoreError, match="warehouse suspended"):
            SnowflakeRecordStore(conn).delete(SESSIONS, "s1")

    def test_unknown_table_never_reaches_sql(self):
        conn = FakeConnection()
        with pytest.raises(UnknownTableError):
            SnowflakeRecordStore(conn).list("users; DROP TABLE users")
        assert conn.executed == []

    def test_ensure_tables_creates_every_collection(self):
        conn = FakeConnection()
        SnowflakeRecordStore(conn).ensure_tables()
        assert len(conn.executed) == len(TABLES)

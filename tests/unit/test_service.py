"""
Unit tests for BookingService.

The repository is an in-memory fake so tests can make individual writes
fail and check how the service recovers.
"""

import datetime as dt

import pytest

from fitbook.core.booking.errors import (
    CapacityExceededError,
    DuplicatePhoneError,
    NotFoundError,
    SyncError,
    ValidationError,
)
from fitbook.core.booking.models import UNREPORTED, AppConfig, Reported
from fitbook.core.booking.service import BookingService

TODAY = dt.date(2024, 5, 14)
PHONE = "0501234567"


class InMemoryRepository:
    """BookingRepository over two lists, with switchable write failures."""

    def __init__(self, users=None, sessions=None):
        self.users = list(users or [])
        self.sessions = list(sessions or [])
        self.fail_session_updates = False
        self.fail_reads = False
        self.user_updates = []

    def list_users(self):
        return list(self.users)

    def add_user(self, user):
        self.users.append(user)

    def update_user(self, user):
        self.user_updates.append(user)
        self.users = [user if u.id == user.id else u for u in self.users]

    def delete_user(self, user_id):
        self.users = [u for u in self.users if u.id != user_id]

    def list_sessions(self):
        if self.fail_reads:
            raise ConnectionError("store unreachable")
        return list(self.sessions)

    def add_session(self, session):
        self.sessions.append(session)

    def update_session(self, session):
        if self.fail_session_updates:
            raise ConnectionError("store unreachable")
        self.sessions = [session if s.id == session.id else s for s in self.sessions]

    def delete_session(self, session_id):
        self.sessions = [s for s in self.sessions if s.id != session_id]

    def get_app_config(self):
        return AppConfig()


@pytest.fixture
def repo(make_user, make_session):
    return InMemoryRepository(
        users=[make_user(id="u1", phone=PHONE)],
        sessions=[make_session(id="s1", registered_phone_numbers=["0540000000"])],
    )


@pytest.fixture
def service(repo):
    service = BookingService(repo)
    service.refresh()
    return service


class TestToggleRegistration:
    """Tests for BookingService.toggle_registration."""

    def test_join_is_persisted(self, service, repo):
        updated = service.toggle_registration("s1", "+972-50-123-4567")

        assert updated.registered_phone_numbers == ["0540000000", PHONE]
        assert repo.sessions[0].registered_phone_numbers == ["0540000000", PHONE]
        assert service.get_session("s1") == updated

    def test_unknown_phone_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.toggle_registration("s1", "0529999999")

    def test_unknown_session_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            service.toggle_registration("missing", PHONE)

    def test_full_session_leaves_state_alone(self, make_user, make_session):
        repo = InMemoryRepository(
            users=[make_user(id="u1", phone=PHONE)],
            sessions=[make_session(id="s1", max_capacity=1, registered_phone_numbers=["0540000000"])],
        )
        service = BookingService(repo)
        service.refresh()

        with pytest.raises(CapacityExceededError):
            service.toggle_registration("s1", PHONE)

        assert service.get_session("s1").registered_phone_numbers == ["0540000000"]

    def test_failed_write_resyncs_and_reports_latest(self, service, repo):
        repo.fail_session_updates = True

        with pytest.raises(SyncError) as exc_info:
            service.toggle_registration("s1", PHONE)

        assert exc_info.value.session.registered_phone_numbers == ["0540000000"]
        assert service.get_session("s1").registered_phone_numbers == ["0540000000"]

    def test_resync_picks_up_other_writers(self, service, repo):
        """After a failed write the view shows what the store really holds."""
        repo.fail_session_updates = True
        repo.sessions[0].registered_phone_numbers.append("0529998888")

        with pytest.raises(SyncError) as exc_info:
            service.toggle_registration("s1", PHONE)

        assert "0529998888" in exc_info.value.session.registered_phone_numbers

    def test_failed_resync_still_raises_sync_error(self, service, repo):
        repo.fail_session_updates = True
        repo.fail_reads = True

        with pytest.raises(SyncError) as exc_info:
            service.toggle_registration("s1", PHONE)

        assert exc_info.value.session is None
        assert service.get_session("s1").registered_phone_numbers == ["0540000000"]


class TestSetRegistration:
    def test_coach_can_overfill(self, make_user, make_session):
        repo = InMemoryRepository(
            sessions=[make_session(id="s1", max_capacity=1, registered_phone_numbers=["0540000000"])],
        )
        service = BookingService(repo)
        service.refresh()

        updated = service.set_registration("s1", PHONE, registered=True)

        assert updated.registered_count == 2
        assert repo.sessions[0].registered_count == 2


class TestCommitAttendance:
    """Tests for recording attendance and monthly records."""

    def test_unchecking_a_no_show(self, service, repo):
        service.set_registration("s1", PHONE, registered=True)

        updated = service.commit_attendance("s1", [PHONE])

        assert updated.attendance == Reported((PHONE,))
        assert repo.sessions[0].attendance == Reported((PHONE,))

    def test_nobody_came_is_recorded(self, service):
        updated = service.commit_attendance("s1", [])
        assert updated.attendance == Reported(())

    def test_walk_in_is_appended_after_roster(self, service):
        updated = service.commit_attendance("s1", ["0529998888", "0540000000"])
        assert updated.attendance.phones == ("0540000000", "0529998888")

    def test_new_monthly_best_is_saved(self, service, repo):
        updated = service.commit_attendance("s1", [PHONE])

        assert updated.attendance == Reported((PHONE,))
        assert repo.users[0].monthly_record == 1
        assert service.get_user("u1").monthly_record == 1

    def test_lower_count_keeps_existing_record(self, make_user, make_session):
        repo = InMemoryRepository(
            users=[make_user(id="u1", phone=PHONE, monthly_record=12)],
            sessions=[make_session(id="s1", registered_phone_numbers=[PHONE])],
        )
        service = BookingService(repo)
        service.refresh()

        service.commit_attendance("s1", [PHONE])

        assert repo.user_updates == []

    def test_unchecking_two_of_five_persists_three(self, make_user, make_session):
        roster = ["0501111111", "0502222222", "0503333333", "0504444444", "0505555555"]
        repo = InMemoryRepository(
            users=[make_user(id=f"u{i}", phone=p) for i, p in enumerate(roster)],
            sessions=[make_session(id="s1", registered_phone_numbers=list(roster))],
        )
        service = BookingService(repo)
        service.refresh()

        draft = service.open_attendance("s1")
        assert draft.phones == set(roster)

        service.commit_attendance("s1", [roster[0], roster[2], roster[4]])

        assert repo.sessions[0].attendance == Reported(("0501111111", "0503333333", "0505555555"))

    def test_monthly_record_counts_the_session_month(self, make_user, make_session):
        """Recording April attendance in May still raises the April best."""
        april = [
            make_session(id=f"a{day}", date=dt.date(2024, 4, day), registered_phone_numbers=[PHONE])
            for day in (2, 9, 16, 23, 30)
        ]
        repo = InMemoryRepository(users=[make_user(id="u1", phone=PHONE)], sessions=april)
        service = BookingService(repo)
        service.refresh()

        service.commit_attendance("a30", [PHONE])

        assert repo.users[0].monthly_record == 5

    def test_open_attendance_prechecks_roster(self, service):
        draft = service.open_attendance("s1")
        assert draft.phones == {"0540000000"}
        assert service.get_session("s1").attendance == UNREPORTED


class TestUsers:
    """Tests for self-registration and coach-managed trainees."""

    def test_self_registration_normalizes_phone(self, service, repo):
        user = service.register_user(" Dana Cohen ", "+972 54 765 4321", email="dana@example.com")

        assert user.full_name == "Dana Cohen"
        assert user.phone == "0547654321"
        assert user.is_new
        assert repo.users[-1] == user

    def test_duplicate_phone_in_any_format_is_rejected(self, service):
        with pytest.raises(DuplicatePhoneError):
            service.register_user("Someone", "972501234567")

    def test_blank_name_is_rejected(self, service):
        with pytest.raises(ValidationError):
            service.register_user("  ", "0547654321")

    def test_coach_update_may_keep_own_phone(self, service):
        user = service.get_user("u1")
        user.email = "new@example.com"
        assert service.update_user(user).email == "new@example.com"

    def test_coach_update_cannot_take_another_phone(self, service, make_user):
        service.add_user(make_user(id="u2", phone="0547654321"))
        other = make_user(id="u2", phone=PHONE)

        with pytest.raises(DuplicatePhoneError):
            service.update_user(other)

    def test_delete_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.delete_user("nobody")

    def test_sign_waiver(self, service, repo):
        signed = service.sign_waiver(PHONE, accepted=True, now=dt.datetime(2024, 5, 14, 9, 0))
        assert signed.has_signed_waiver
        assert repo.users[0].has_signed_waiver

    def test_overview_sorted_by_workouts(self, service, make_user):
        service.add_user(make_user(id="u2", full_name="Aaron", phone="0540000000"))

        overview = service.user_overview(today=TODAY, sort_by="workouts")

        assert [u.id for u, _ in overview] == ["u2", "u1"]
        assert overview[0][1].monthly_count == 1


class TestSessions:
    def test_duplicate_creates_empty_copy(self, service, repo):
        copy = service.duplicate_session("s1")

        assert copy.id != "s1"
        assert copy.time == "19:00"
        assert copy.registered_phone_numbers == []
        assert len(repo.sessions) == 2

    def test_create_normalizes_roster(self, service, make_session):
        created = service.create_session(make_session(id="s2", registered_phone_numbers=["972-50-123-4567"]))
        assert created.registered_phone_numbers == [PHONE]

    def test_delete(self, service, repo):
        service.delete_session("s1")
        assert repo.sessions == []
        with pytest.raises(NotFoundError):
            service.get_session("s1")

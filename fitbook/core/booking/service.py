"""
Booking workflows.

BookingService orchestrates the pure functions of this package against a
repository. It keeps an in-memory copy of the data (the view state),
applies changes to it optimistically, then persists. When persisting
fails it re-fetches everything rather than trying to undo the one change.
"""

import datetime as dt
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Protocol

from .attendance import AttendanceDraft, UserStats, monthly_count, user_stats
from .errors import (
    DuplicatePhoneError,
    NotFoundError,
    SyncError,
    ValidationError,
)
from .models import (
    AppConfig,
    PaymentStatus,
    TrainingSession,
    User,
    new_id,
)
from .phones import is_valid_login_phone, normalize_phone
from .registration import admin_set_registration, toggle_registration
from .schedule import UserSort, duplicate_session, search_users
from .waiver import DEFAULT_MAX_FILE_BYTES, sign_waiver

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class BookingRepository(Protocol):
    """
    Persistence the workflows need.

    Implemented by infrastructure.storage.DataService over either the
    remote or the local store.
    """

    def list_users(self) -> list[User]: ...
    def add_user(self, user: User) -> None: ...
    def update_user(self, user: User) -> None: ...
    def delete_user(self, user_id: str) -> None: ...
    def list_sessions(self) -> list[TrainingSession]: ...
    def add_session(self, session: TrainingSession) -> None: ...
    def update_session(self, session: TrainingSession) -> None: ...
    def delete_session(self, session_id: str) -> None: ...
    def get_app_config(self) -> AppConfig: ...


# ---------------------------------------------------------------------------
# View state
# ---------------------------------------------------------------------------

@dataclass
class BookingState:
    """Local copy of users and sessions, reconciled with the repository."""
    users: list[User] = field(default_factory=list)
    sessions: list[TrainingSession] = field(default_factory=list)

    def find_user(self, phone: str) -> Optional[User]:
        normalized = normalize_phone(phone)
        if not normalized:
            return None
        return next((u for u in self.users if normalize_phone(u.phone) == normalized), None)

    def find_user_by_id(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_session(self, session_id: str) -> Optional[TrainingSession]:
        return next((s for s in self.sessions if s.id == session_id), None)

    def patch_session(self, session: TrainingSession) -> None:
        self.sessions = [session if s.id == session.id else s for s in self.sessions]

    def patch_user(self, user: User) -> None:
        self.users = [user if u.id == user.id else u for u in self.users]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class BookingService:
    """
    Trainee and coach workflows over a repository.

    Create one per request and call refresh() first; the view state is
    only as fresh as the last refresh.
    """

    def __init__(
        self,
        repository: BookingRepository,
        max_waiver_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
    ) -> None:
        self._repository = repository
        self._max_waiver_file_bytes = max_waiver_file_bytes
        self.state = BookingState()

    def refresh(self) -> BookingState:
        """Re-fetch authoritative users and sessions."""
        self.state = BookingState(
            users=self._repository.list_users(),
            sessions=self._repository.list_sessions(),
        )
        return self.state

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def get_session(self, session_id: str) -> TrainingSession:
        session = self.state.find_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def get_user(self, user_id: str) -> User:
        user = self.state.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def require_user(self, phone: str) -> User:
        user = self.state.find_user(phone)
        if user is None:
            raise NotFoundError("No trainee is registered with this phone number")
        return user

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    def toggle_registration(self, session_id: str, phone: str) -> TrainingSession:
        """
        Join or leave a session as a trainee.

        Validation errors leave everything untouched. A persistence failure
        triggers a full refresh and raises SyncError with the refreshed
        session.
        """
        user = self.require_user(phone)
        session = self.get_session(session_id)

        updated = toggle_registration(user, session)
        joined = updated.registered_count > session.registered_count

        self._persist_session(updated)

        logger.info(
            "Registration toggled",
            extra={
                "session_id": session_id,
                "user_id": user.id,
                "action": "join" if joined else "leave",
                "registered": updated.registered_count,
                "capacity": updated.max_capacity,
            }
        )
        return updated

    def set_registration(self, session_id: str, phone: str, registered: bool) -> TrainingSession:
        """Coach override of a roster entry. Ignores capacity and cancellation."""
        session = self.get_session(session_id)
        updated = admin_set_registration(phone, session, registered)
        if updated is session:
            return session
        self._persist_session(updated)
        return updated

    def _persist_session(self, updated: TrainingSession) -> None:
        original = self.state.find_session(updated.id)
        self.state.patch_session(updated)
        try:
            self._repository.update_session(updated)
        except Exception as e:
            logger.error(
                "Failed to persist session, resyncing",
                extra={"session_id": updated.id, "error": str(e)}
            )
            try:
                self.refresh()
            except Exception as refresh_error:
                logger.error(
                    "Resync after failed write also failed",
                    extra={"session_id": updated.id, "error": str(refresh_error)}
                )
                if original is not None:
                    self.state.patch_session(original)
                raise SyncError("Could not save the change. Please try again.") from e
            raise SyncError(
                "Could not save the change. Showing the latest data.",
                session=self.state.find_session(updated.id),
            ) from e

    # -----------------------------------------------------------------------
    # Attendance
    # -----------------------------------------------------------------------

    def open_attendance(self, session_id: str) -> AttendanceDraft:
        return AttendanceDraft.open(self.get_session(session_id))

    def commit_attendance(
        self,
        session_id: str,
        attended_phones: list[str],
    ) -> TrainingSession:
        """
        Record who actually came.

        Starts from the editor's default marks and toggles the difference,
        then raises monthly records for anyone who just set a new best in
        the month the session took place.
        """
        session = self.get_session(session_id)
        draft = AttendanceDraft.open(session)

        wanted = {normalize_phone(p) for p in attended_phones if normalize_phone(p)}
        for phone in sorted(draft.phones ^ wanted):
            draft.toggle(phone)

        updated = draft.commit(session)
        self._persist_session(updated)

        logger.info(
            "Attendance recorded",
            extra={
                "session_id": session_id,
                "attended": len(draft.phones),
                "registered": session.registered_count,
            }
        )

        self._update_monthly_records(draft.phones, session.date)
        return updated

    def _update_monthly_records(self, phones: set[str], month_of: dt.date) -> None:
        for phone in phones:
            user = self.state.find_user(phone)
            if user is None:
                continue
            count = monthly_count(user.phone, self.state.sessions, month_of)
            if count > (user.monthly_record or 0):
                updated = replace(user, monthly_record=count)
                self._repository.update_user(updated)
                self.state.patch_user(updated)

    # -----------------------------------------------------------------------
    # Users
    # -----------------------------------------------------------------------

    def _ensure_unique_phone(self, phone: str, user_id: Optional[str] = None) -> None:
        existing = self.state.find_user(phone)
        if existing is not None and existing.id != user_id:
            raise DuplicatePhoneError("A trainee with this phone number already exists")

    def register_user(
        self,
        full_name: str,
        phone: str,
        email: str = "",
        display_name: Optional[str] = None,
    ) -> User:
        """Trainee self-registration after first phone login."""
        if not is_valid_login_phone(phone):
            raise ValidationError("Invalid phone number")
        if not full_name or not full_name.strip():
            raise ValidationError("Full name is required")
        self._ensure_unique_phone(phone)

        user = User(
            full_name=full_name.strip(),
            phone=normalize_phone(phone),
            email=email.strip(),
            display_name=display_name or None,
            payment_status=PaymentStatus.PENDING,
            is_new=True,
        )
        self._repository.add_user(user)
        self.state.users.append(user)

        logger.info("Trainee self-registered", extra={"user_id": user.id})
        return user

    def add_user(self, user: User) -> User:
        """Coach adds a trainee."""
        if not is_valid_login_phone(user.phone):
            raise ValidationError("Invalid phone number")
        self._ensure_unique_phone(user.phone)
        user = replace(user, phone=normalize_phone(user.phone))
        self._repository.add_user(user)
        self.state.users.append(user)
        return user

    def update_user(self, user: User) -> User:
        self.get_user(user.id)
        if not is_valid_login_phone(user.phone):
            raise ValidationError("Invalid phone number")
        self._ensure_unique_phone(user.phone, user_id=user.id)
        user = replace(user, phone=normalize_phone(user.phone))
        self._repository.update_user(user)
        self.state.patch_user(user)
        return user

    def delete_user(self, user_id: str) -> None:
        self.get_user(user_id)
        self._repository.delete_user(user_id)
        self.state.users = [u for u in self.state.users if u.id != user_id]
        logger.info("Trainee deleted", extra={"user_id": user_id})

    def sign_waiver(
        self,
        phone: str,
        accepted: bool,
        now: dt.datetime,
        file_data: Optional[str] = None,
    ) -> User:
        user = self.require_user(phone)
        signed = sign_waiver(
            user,
            accepted=accepted,
            now=now,
            file_data=file_data,
            max_file_bytes=self._max_waiver_file_bytes,
        )
        self._repository.update_user(signed)
        self.state.patch_user(signed)
        logger.info("Health waiver signed", extra={"user_id": user.id})
        return signed

    def user_overview(
        self,
        today: dt.date,
        query: str = "",
        sort_by: UserSort = "name",
    ) -> list[tuple[User, UserStats]]:
        """Trainee list for the coach with this month's numbers."""
        stats = {u.id: user_stats(u, self.state.sessions, today) for u in self.state.users}
        users = search_users(self.state.users, query=query, sort_by=sort_by, stats=stats)
        return [(u, stats[u.id]) for u in users]

    # -----------------------------------------------------------------------
    # Sessions (coach)
    # -----------------------------------------------------------------------

    def create_session(self, session: TrainingSession) -> TrainingSession:
        session = replace(
            session,
            registered_phone_numbers=[normalize_phone(p) for p in session.registered_phone_numbers],
        )
        self._repository.add_session(session)
        self.state.sessions.append(session)
        logger.info("Session created", extra={"session_id": session.id, "date": session.date.isoformat()})
        return session

    def update_session(self, session: TrainingSession) -> TrainingSession:
        self.get_session(session.id)
        self._repository.update_session(session)
        self.state.patch_session(session)
        return session

    def delete_session(self, session_id: str) -> None:
        self.get_session(session_id)
        self._repository.delete_session(session_id)
        self.state.sessions = [s for s in self.state.sessions if s.id != session_id]
        logger.info("Session deleted", extra={"session_id": session_id})

    def duplicate_session(self, session_id: str) -> TrainingSession:
        copy = duplicate_session(self.get_session(session_id), new_id=new_id())
        return self.create_session(copy)

"""
Shared fixtures: small factories for trainees and sessions.

Tests pass only the fields they care about; everything else gets a
boring default.
"""

import datetime as dt

import pytest

from fitbook.core.booking.models import TrainingSession, User


@pytest.fixture
def make_user():
    def _make(phone: str = "0501234567", full_name: str = "ישראל ישראלי", **kwargs) -> User:
        kwargs.setdefault("start_date", dt.date(2024, 1, 1))
        return User(full_name=full_name, phone=phone, **kwargs)
    return _make


@pytest.fixture
def make_session():
    def _make(
        date: dt.date = dt.date(2024, 5, 14),
        time: str = "18:00",
        max_capacity: int = 10,
        **kwargs,
    ) -> TrainingSession:
        kwargs.setdefault("type", "FUNCTIONAL")
        kwargs.setdefault("location", "כיכר הפרפר, נס ציונה")
        return TrainingSession(date=date, time=time, max_capacity=max_capacity, **kwargs)
    return _make

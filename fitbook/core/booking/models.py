"""
Domain models for class booking.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. How they are stored (Snowflake
rows, local JSON blobs) is the infrastructure layer's business.
"""

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union
from uuid import uuid4


def new_id() -> str:
    """Identifier for newly created records."""
    return uuid4().hex


def parse_hhmm(value: str) -> dt.time:
    """Parse an "HH:MM" session time."""
    try:
        hour, minute = value.split(":")[:2]
        return dt.time(int(hour), int(minute))
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid session time: {value!r}") from e


class PaymentStatus(Enum):
    """Where a trainee stands with the monthly payment."""
    PAID = "PAID"
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"


class WorkoutType(Enum):
    """
    Default workout type labels.

    Session types are free text; the coach can add or remove labels.
    These only seed the list on a fresh install.
    """
    FUNCTIONAL = "FUNCTIONAL"
    STRENGTH = "STRENGTH"
    HIIT = "HIIT"
    PILATES = "PILATES"
    YOGA = "YOGA"
    TABATA = "TABATA"
    CARDIO = "CARDIO"


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Unreported:
    """The coach has not recorded attendance for the session yet."""


@dataclass(frozen=True)
class Reported:
    """
    Attendance as recorded by the coach.

    An empty tuple is a real answer ("nobody came"), not a missing one.
    """
    phones: tuple[str, ...] = ()

    def __contains__(self, phone: object) -> bool:
        return phone in self.phones


Attendance = Union[Unreported, Reported]

UNREPORTED = Unreported()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@dataclass
class User:
    """
    A trainee.

    The phone number is the login credential. Normalized, it is unique
    across all users.
    """
    full_name: str
    phone: str
    id: str = field(default_factory=new_id)
    display_name: Optional[str] = None
    email: str = ""
    start_date: dt.date = field(default_factory=dt.date.today)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    is_new: bool = False
    is_restricted: bool = False
    user_color: Optional[str] = None
    monthly_record: int = 0
    health_declaration_date: Optional[dt.datetime] = None
    health_declaration_id: Optional[str] = None
    health_declaration_file: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.full_name.strip():
            raise ValueError("User full name cannot be empty")

    @property
    def shown_name(self) -> str:
        return self.display_name or self.full_name

    @property
    def has_signed_waiver(self) -> bool:
        return bool(self.health_declaration_id and self.health_declaration_date)


@dataclass
class TrainingSession:
    """
    A scheduled class occurrence.

    The roster keeps registration order. Display state (cancelled,
    happening, full) is derived from these fields, never stored.
    """
    type: str
    date: dt.date
    time: str
    location: str
    max_capacity: int
    id: str = field(default_factory=new_id)
    description: str = ""
    registered_phone_numbers: list[str] = field(default_factory=list)
    attendance: Attendance = UNREPORTED
    waiting_list: list[str] = field(default_factory=list)
    color: Optional[str] = None
    is_trial: bool = False
    is_zoom_session: bool = False
    zoom_link: str = ""
    is_hybrid: bool = False
    is_hidden: bool = False
    is_cancelled: bool = False
    manual_has_started: bool = False

    def __post_init__(self) -> None:
        if self.max_capacity <= 0:
            raise ValueError("max_capacity must be positive")
        parse_hhmm(self.time)

    @property
    def starts_at(self) -> dt.datetime:
        """Naive local start time."""
        return dt.datetime.combine(self.date, parse_hhmm(self.time))

    @property
    def registered_count(self) -> int:
        return len(self.registered_phone_numbers)

    @property
    def spots_left(self) -> int:
        return self.max_capacity - self.registered_count

    @property
    def is_full(self) -> bool:
        return self.registered_count >= self.max_capacity

    @property
    def has_zoom(self) -> bool:
        return self.is_zoom_session or bool(self.zoom_link and self.zoom_link.strip())


@dataclass
class LocationDef:
    """A named training location, used for badge colors."""
    name: str
    address: str = ""
    id: str = field(default_factory=new_id)
    color: Optional[str] = None


DEFAULT_WAIVER_TEXT = (
    "אני מצהיר בזאת כי מצב בריאותי תקין וכי אין לי כל מניעה רפואית "
    "לביצוע פעילות גופנית עצימה. הצהרה זו תקפה למשך שנה."
)

DEFAULT_ADMIN_PASSWORD = "admin"


@dataclass
class AppConfig:
    """
    Singleton configuration edited by the coach.

    `admin_password` is persisted under the historical field name
    `coachAdditionalPhone`.
    """
    coach_name_heb: str = "המאמן"
    coach_name_eng: str = "FIT COACH"
    coach_phone: str = ""
    coach_email: str = ""
    default_city: str = "נס ציונה"
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    urgent_message: Optional[str] = None
    health_declaration_template: str = DEFAULT_WAIVER_TEXT


@dataclass
class Quote:
    """A motivational line for the banner."""
    text: str
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("Quote text cannot be empty")


@dataclass(frozen=True)
class HourlyWeather:
    temp: float
    weather_code: int


@dataclass
class WeatherInfo:
    """Forecast for one calendar date."""
    max_temp: float
    weather_code: int
    hourly: dict[str, HourlyWeather] = field(default_factory=dict)

    def at_hour(self, session_time: str) -> Optional[HourlyWeather]:
        """Hourly forecast for a session's start hour, if known."""
        return self.hourly.get(session_time.split(":")[0].zfill(2))


@dataclass(frozen=True)
class WeatherLocation:
    name: str
    lat: float
    lon: float

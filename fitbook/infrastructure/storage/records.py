"""
Translation between domain models and stored records.

Records keep the camelCase field names the data has always been stored
under, so existing tables and blobs load unchanged. The one structural
difference: session attendance is a tagged variant in the domain and
"attendedPhoneNumbers: null | [...]" on disk.
"""

import datetime as dt
from typing import Any, Optional

from fitbook.core.booking.models import (
    UNREPORTED,
    AppConfig,
    LocationDef,
    PaymentStatus,
    Quote,
    Reported,
    TrainingSession,
    User,
)

from .base import Record

APP_CONFIG_ID = "main"

# AppConfig attribute -> stored field
_CONFIG_FIELDS = {
    "coach_name_heb": "coachNameHeb",
    "coach_name_eng": "coachNameEng",
    "coach_phone": "coachPhone",
    "coach_email": "coachEmail",
    "default_city": "defaultCity",
    "admin_password": "coachAdditionalPhone",
    "urgent_message": "urgentMessage",
    "health_declaration_template": "healthDeclarationTemplate",
}


def _parse_date(value: Any) -> dt.date:
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> Optional[dt.datetime]:
    if not value:
        return None
    if isinstance(value, dt.datetime):
        return value
    return dt.datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _phones(value: Any) -> list[str]:
    return [str(p) for p in (value or [])]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def user_to_record(user: User) -> Record:
    return {
        "id": user.id,
        "fullName": user.full_name,
        "displayName": user.display_name,
        "phone": user.phone,
        "email": user.email,
        "startDate": user.start_date.isoformat(),
        "paymentStatus": user.payment_status.value,
        "isNew": user.is_new,
        "isRestricted": user.is_restricted,
        "userColor": user.user_color,
        "monthlyRecord": user.monthly_record,
        "healthDeclarationDate": (
            user.health_declaration_date.isoformat() if user.health_declaration_date else None
        ),
        "healthDeclarationId": user.health_declaration_id,
        "healthDeclarationFile": user.health_declaration_file,
    }


def user_from_record(record: Record) -> User:
    return User(
        id=str(record["id"]),
        full_name=record.get("fullName") or "",
        phone=str(record.get("phone") or ""),
        display_name=record.get("displayName") or None,
        email=record.get("email") or "",
        start_date=_parse_date(record.get("startDate") or dt.date.today()),
        payment_status=PaymentStatus(record.get("paymentStatus") or PaymentStatus.PENDING.value),
        is_new=bool(record.get("isNew")),
        is_restricted=bool(record.get("isRestricted")),
        user_color=record.get("userColor") or None,
        monthly_record=int(record.get("monthlyRecord") or 0),
        health_declaration_date=_parse_datetime(record.get("healthDeclarationDate")),
        health_declaration_id=record.get("healthDeclarationId") or None,
        health_declaration_file=record.get("healthDeclarationFile") or None,
    )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

def session_to_record(session: TrainingSession) -> Record:
    if isinstance(session.attendance, Reported):
        attended: Optional[list[str]] = list(session.attendance.phones)
    else:
        attended = None

    return {
        "id": session.id,
        "type": session.type,
        "date": session.date.isoformat(),
        "time": session.time,
        "location": session.location,
        "maxCapacity": session.max_capacity,
        "description": session.description,
        "registeredPhoneNumbers": list(session.registered_phone_numbers),
        "waitingList": list(session.waiting_list),
        "attendedPhoneNumbers": attended,
        "color": session.color,
        "isTrial": session.is_trial,
        "zoomLink": session.zoom_link,
        "isZoomSession": session.is_zoom_session,
        "isHybrid": session.is_hybrid,
        "isHidden": session.is_hidden,
        "isCancelled": session.is_cancelled,
        "manualHasStarted": session.manual_has_started,
    }


def session_from_record(record: Record) -> TrainingSession:
    attended = record.get("attendedPhoneNumbers")
    attendance = UNREPORTED if attended is None else Reported(tuple(_phones(attended)))

    return TrainingSession(
        id=str(record["id"]),
        type=str(record.get("type") or ""),
        date=_parse_date(record["date"]),
        time=str(record["time"]),
        location=str(record.get("location") or ""),
        max_capacity=int(record["maxCapacity"]),
        description=record.get("description") or "",
        registered_phone_numbers=_phones(record.get("registeredPhoneNumbers")),
        attendance=attendance,
        waiting_list=_phones(record.get("waitingList")),
        color=record.get("color") or None,
        is_trial=bool(record.get("isTrial")),
        zoom_link=record.get("zoomLink") or "",
        is_zoom_session=bool(record.get("isZoomSession")),
        is_hybrid=bool(record.get("isHybrid")),
        is_hidden=bool(record.get("isHidden")),
        is_cancelled=bool(record.get("isCancelled")),
        manual_has_started=bool(record.get("manualHasStarted")),
    )


# ---------------------------------------------------------------------------
# Locations, workout types, config, quotes
# ---------------------------------------------------------------------------

def location_to_record(location: LocationDef) -> Record:
    return {
        "id": location.id,
        "name": location.name,
        "address": location.address,
        "color": location.color,
    }


def location_from_record(record: Record) -> LocationDef:
    return LocationDef(
        id=str(record["id"]),
        name=str(record.get("name") or ""),
        address=str(record.get("address") or ""),
        color=record.get("color") or None,
    )


def workout_type_to_record(name: str) -> Record:
    return {"id": name, "name": name}


def workout_type_from_record(record: Record) -> str:
    return str(record.get("name") or record["id"])


def config_to_record(config: AppConfig) -> Record:
    record: Record = {"id": APP_CONFIG_ID}
    for attr, key in _CONFIG_FIELDS.items():
        record[key] = getattr(config, attr)
    return record


def config_from_record(record: Optional[Record]) -> AppConfig:
    """Stored values laid over the defaults; missing or null fields keep the default."""
    config = AppConfig()
    if not record:
        return config
    for attr, key in _CONFIG_FIELDS.items():
        if record.get(key) is not None:
            setattr(config, attr, record[key])
    return config


def quote_to_record(quote: Quote) -> Record:
    return {"id": quote.id, "text": quote.text}


def quote_from_record(record: Record) -> Quote:
    return Quote(id=str(record["id"]), text=str(record.get("text") or ""))

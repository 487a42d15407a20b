"""
Weekly schedule endpoint.

One call returns everything the schedule screen shows: the week's days
with their sessions, each session's derived status for this viewer,
the forecast, and the banner (urgent message and motivational quote).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from ...core.booking.models import TrainingSession, WeatherInfo
from ...core.booking.registration import is_registered
from ...core.booking.schedule import group_by_date, week_dates
from ...core.booking.status import derive_status, visible_sessions
from ...core.booking.weather import weather_description, weather_icon
from ..dependencies import (
    BookingServiceDep,
    ClientContextDep,
    DataServiceDep,
    MotivationServiceDep,
    NowDep,
    SettingsDep,
    WeatherClientDep,
)
from ..schemas import SessionOut, SessionStatusOut

logger = logging.getLogger(__name__)

router = APIRouter()

NIGHT_STARTS_AT = 19
NIGHT_ENDS_AT = 6


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class WeatherOut(BaseModel):
    temp: float = Field(description="Temperature at session start if known, else the day's max")
    weather_code: int = Field(description="WMO weather code")
    icon: str
    description: str


class SessionCard(BaseModel):
    session: SessionOut
    status: SessionStatusOut
    is_registered: bool = Field(description="Whether the logged-in trainee is on the roster")
    location_color: Optional[str] = Field(None, description="Badge color of the session's location")
    weather: Optional[WeatherOut] = None


class DayOut(BaseModel):
    date: str = Field(description="ISO date")
    sessions: list[SessionCard]


class WeekResponse(BaseModel):
    week_offset: int
    days: list[DayOut] = Field(description="Sunday through Saturday")
    urgent_message: Optional[str] = None
    quote: str = Field(description="Motivational banner text")
    coach_name_heb: str
    coach_name_eng: str


def _weather_for(session: TrainingSession, info: Optional[WeatherInfo]) -> Optional[WeatherOut]:
    if info is None:
        return None
    hourly = info.at_hour(session.time)
    hour = int(session.time.split(":")[0])
    is_night = hour >= NIGHT_STARTS_AT or hour < NIGHT_ENDS_AT
    code = hourly.weather_code if hourly else info.weather_code
    return WeatherOut(
        temp=hourly.temp if hourly else info.max_temp,
        weather_code=code,
        icon=weather_icon(code, is_night=is_night),
        description=weather_description(code),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/week",
    response_model=WeekResponse,
    summary="Sessions for one week",
    description="offset=0 is the current Sunday-start week, 1 the next one, -1 the previous one.",
)
async def get_week(
    settings: SettingsDep,
    context: ClientContextDep,
    booking: BookingServiceDep,
    data: DataServiceDep,
    motivation: MotivationServiceDep,
    weather: WeatherClientDep,
    now: NowDep,
    offset: int = Query(0, ge=-52, le=52),
) -> WeekResponse:
    dates = week_dates(now.date(), offset)
    in_week = [s for s in booking.state.sessions if dates[0] <= s.date <= dates[-1]]
    by_date = group_by_date(visible_sessions(in_week, is_admin=context.is_admin))

    # DataService does blocking store IO
    config = await run_in_threadpool(data.get_app_config)
    locations = await run_in_threadpool(data.list_locations)
    location_colors = {loc.name: loc.color for loc in locations}

    place = await run_in_threadpool(weather.get_city_coordinates, config.default_city)
    lat = place.lat if place else settings.weather_default_lat
    lon = place.lon if place else settings.weather_default_lon
    forecast = await run_in_threadpool(
        weather.get_weather_for_dates, [d.isoformat() for d in by_date], lat, lon,
    )

    days = []
    for day in dates:
        cards = []
        for session in by_date.get(day, []):
            registered = bool(context.phone) and is_registered(context.phone, session)
            cards.append(SessionCard(
                session=SessionOut.from_domain(session, include_roster=context.is_admin),
                status=SessionStatusOut.from_domain(derive_status(
                    session, now, is_registered=registered, is_admin=context.is_admin,
                )),
                is_registered=registered,
                location_color=location_colors.get(session.location),
                weather=_weather_for(session, forecast.get(day.isoformat())),
            ))
        days.append(DayOut(date=day.isoformat(), sessions=cards))

    quotes = await run_in_threadpool(data.list_quotes)
    quote = await motivation.banner_quote(quotes)

    logger.debug(
        "Week served",
        extra={"week_offset": offset, "sessions": sum(len(d.sessions) for d in days)}
    )

    return WeekResponse(
        week_offset=offset,
        days=days,
        urgent_message=config.urgent_message or None,
        quote=quote,
        coach_name_heb=config.coach_name_heb,
        coach_name_eng=config.coach_name_eng,
    )

"""
App configuration endpoints.

The coach's settings (names, contact details, urgent message, waiver
text, admin password), training locations, workout type labels and
banner quotes. Trainees can read the public parts.
"""

import logging
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from ...core.booking.models import AppConfig, LocationDef, Quote, new_id
from ...infrastructure.storage.data_service import DataService
from ..dependencies import (
    AdminDep,
    ClientContextDep,
    DataServiceDep,
    MotivationServiceDep,
    WeatherClientDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class LocationModel(BaseModel):
    id: Optional[str] = Field(None, description="Omit to create a new location")
    name: str = Field(min_length=1, max_length=100)
    address: str = ""
    color: Optional[str] = None

    @classmethod
    def from_domain(cls, location: LocationDef) -> "LocationModel":
        return cls(id=location.id, name=location.name, address=location.address, color=location.color)

    def to_domain(self) -> LocationDef:
        return LocationDef(id=self.id or new_id(), name=self.name, address=self.address, color=self.color)


class ConfigOut(BaseModel):
    """App config. `admin_password` is only filled in for admins."""
    coach_name_heb: str
    coach_name_eng: str
    coach_phone: str
    coach_email: str
    default_city: str
    urgent_message: Optional[str] = None
    health_declaration_template: str
    workout_types: list[str]
    locations: list[LocationModel]
    admin_password: Optional[str] = None


class ConfigIn(BaseModel):
    coach_name_heb: str = Field(min_length=1)
    coach_name_eng: str = Field(min_length=1)
    coach_phone: str = ""
    coach_email: str = ""
    default_city: str = Field(min_length=1)
    urgent_message: Optional[str] = None
    health_declaration_template: str = Field(min_length=1)
    admin_password: Optional[str] = Field(
        None,
        min_length=1,
        description="New admin password. Omit to keep the current one.",
    )


class WorkoutTypesIn(BaseModel):
    types: list[str] = Field(description="Complete list of workout type labels")


class QuoteModel(BaseModel):
    id: Optional[str] = None
    text: str = Field(min_length=1, max_length=300, pattern=r"\S")


class QuoteText(BaseModel):
    text: str


class DescriptionRequest(BaseModel):
    type: str = Field(min_length=1, description="Workout type")
    location: str = Field(min_length=1, description="Location name")


class DescriptionResponse(BaseModel):
    description: str


class CityRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CityResponse(BaseModel):
    name: str
    lat: float
    lon: float


def _config_out(config: AppConfig, data: DataService, is_admin: bool) -> ConfigOut:
    return ConfigOut(
        coach_name_heb=config.coach_name_heb,
        coach_name_eng=config.coach_name_eng,
        coach_phone=config.coach_phone,
        coach_email=config.coach_email,
        default_city=config.default_city,
        urgent_message=config.urgent_message,
        health_declaration_template=config.health_declaration_template,
        workout_types=data.list_workout_types(),
        locations=[LocationModel.from_domain(loc) for loc in data.list_locations()],
        admin_password=config.admin_password if is_admin else None,
    )


# ---------------------------------------------------------------------------
# App config
# ---------------------------------------------------------------------------

@router.get("", response_model=ConfigOut, summary="App configuration")
def get_config(context: ClientContextDep, data: DataServiceDep) -> ConfigOut:
    return _config_out(data.get_app_config(), data, context.is_admin)


@router.put("", response_model=ConfigOut, summary="Update app configuration (admin)")
def update_config(body: ConfigIn, _: AdminDep, data: DataServiceDep) -> ConfigOut:
    current = data.get_app_config()
    changes = body.model_dump()
    if changes["admin_password"] is None:
        changes["admin_password"] = current.admin_password
    updated = replace(current, **changes)
    data.save_app_config(updated)
    logger.info(
        "App config updated",
        extra={"password_changed": updated.admin_password != current.admin_password}
    )
    return _config_out(updated, data, is_admin=True)


@router.put("/city", response_model=CityResponse, summary="Change the weather city (admin)")
async def set_city(
    body: CityRequest,
    _: AdminDep,
    data: DataServiceDep,
    weather: WeatherClientDep,
) -> CityResponse:
    place = await run_in_threadpool(weather.get_city_coordinates, body.name)
    if place is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"City not found: {body.name}",
        )
    current = await run_in_threadpool(data.get_app_config)
    await run_in_threadpool(data.save_app_config, replace(current, default_city=body.name.strip()))
    return CityResponse(name=place.name, lat=place.lat, lon=place.lon)


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

@router.get("/locations", response_model=list[LocationModel], summary="Training locations")
def list_locations(data: DataServiceDep) -> list[LocationModel]:
    return [LocationModel.from_domain(loc) for loc in data.list_locations()]


@router.put("/locations", response_model=list[LocationModel], summary="Add or edit locations (admin)")
def save_locations(body: list[LocationModel], _: AdminDep, data: DataServiceDep) -> list[LocationModel]:
    data.save_locations([loc.to_domain() for loc in body])
    return [LocationModel.from_domain(loc) for loc in data.list_locations()]


@router.delete(
    "/locations/{location_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a location (admin)",
)
def delete_location(location_id: str, _: AdminDep, data: DataServiceDep) -> Response:
    data.delete_location(location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Workout types
# ---------------------------------------------------------------------------

@router.get("/workout-types", response_model=list[str], summary="Workout type labels")
def list_workout_types(data: DataServiceDep) -> list[str]:
    return data.list_workout_types()


@router.put("/workout-types", response_model=list[str], summary="Replace workout type labels (admin)")
def save_workout_types(body: WorkoutTypesIn, _: AdminDep, data: DataServiceDep) -> list[str]:
    wanted = [t.strip() for t in body.types if t.strip()]
    data.save_workout_types(wanted)
    for name in data.list_workout_types():
        if name not in wanted:
            data.delete_workout_type(name)
    return data.list_workout_types()


@router.delete(
    "/workout-types/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a workout type label (admin)",
)
def delete_workout_type(name: str, _: AdminDep, data: DataServiceDep) -> Response:
    data.delete_workout_type(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Quotes and generated text
# ---------------------------------------------------------------------------

@router.get("/quotes", response_model=list[QuoteModel], summary="Banner quotes (admin)")
def list_quotes(_: AdminDep, data: DataServiceDep) -> list[QuoteModel]:
    return [QuoteModel(id=q.id, text=q.text) for q in data.list_quotes()]


@router.post(
    "/quotes",
    response_model=QuoteModel,
    status_code=status.HTTP_201_CREATED,
    summary="Add a banner quote (admin)",
)
def add_quote(body: QuoteModel, _: AdminDep, data: DataServiceDep) -> QuoteModel:
    quote = Quote(text=body.text.strip())
    data.add_quote(quote)
    return QuoteModel(id=quote.id, text=quote.text)


@router.delete(
    "/quotes/{quote_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a banner quote (admin)",
)
def delete_quote(quote_id: str, _: AdminDep, data: DataServiceDep) -> Response:
    data.delete_quote(quote_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/quote", response_model=QuoteText, summary="Motivational banner text")
async def banner_quote(data: DataServiceDep, motivation: MotivationServiceDep) -> QuoteText:
    quotes = await run_in_threadpool(data.list_quotes)
    return QuoteText(text=await motivation.banner_quote(quotes))


@router.post(
    "/description",
    response_model=DescriptionResponse,
    summary="Generate a session description (admin)",
)
async def generate_description(
    body: DescriptionRequest,
    _: AdminDep,
    motivation: MotivationServiceDep,
) -> DescriptionResponse:
    text = await motivation.workout_description(body.type, body.location)
    return DescriptionResponse(description=text)

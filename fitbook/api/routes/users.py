"""
Trainee endpoints.

A trainee registers themselves after logging in with an unknown phone,
edits their own profile and signs the health waiver. The coach lists,
searches, adds, edits and removes trainees.
"""

import datetime as dt
import logging
from dataclasses import replace
from typing import Literal, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from ...core.booking.models import PaymentStatus, User
from ..dependencies import AdminDep, BookingServiceDep, LoggedInDep, NowDep
from ..schemas import UserOut, UserStatsOut

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class SelfRegistration(BaseModel):
    """Profile a trainee fills in on first login. The phone comes from the login."""
    full_name: str = Field(min_length=1, max_length=100, pattern=r"\S", description="Full name")
    email: str = Field("", max_length=200, description="Email address")
    display_name: Optional[str] = Field(None, max_length=50, description="Nickname shown instead of the full name")


class ProfileUpdate(BaseModel):
    """Fields a trainee may change on their own record. Omitted fields stay as they are."""
    full_name: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"\S")
    email: Optional[str] = Field(None, max_length=200)
    display_name: Optional[str] = Field(None, max_length=50)


class WaiverSignature(BaseModel):
    accepted: bool = Field(description="The trainee confirmed the declaration text")
    file_data: Optional[str] = Field(
        None,
        description="Optional signed declaration file as a data URL or base64 text",
    )


class UserIn(BaseModel):
    """Trainee fields the coach edits."""
    full_name: str = Field(min_length=1, max_length=100, pattern=r"\S")
    phone: str = Field(min_length=1, max_length=32)
    display_name: Optional[str] = Field(None, max_length=50)
    email: str = ""
    start_date: Optional[dt.date] = Field(None, description="Defaults to today for new trainees")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    is_new: bool = False
    is_restricted: bool = False
    user_color: Optional[str] = None
    monthly_record: int = Field(0, ge=0)


class UserOverviewItem(BaseModel):
    user: UserOut
    stats: UserStatsOut


# ---------------------------------------------------------------------------
# Trainee endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register as a new trainee",
    responses={409: {"description": "The phone is already registered"}},
)
def register(body: SelfRegistration, context: LoggedInDep, booking: BookingServiceDep) -> UserOut:
    user = booking.register_user(
        full_name=body.full_name,
        phone=context.phone,
        email=body.email,
        display_name=body.display_name,
    )
    return UserOut.from_domain(user)


@router.put(
    "/me",
    response_model=UserOut,
    summary="Update your own profile",
)
def update_profile(body: ProfileUpdate, context: LoggedInDep, booking: BookingServiceDep) -> UserOut:
    user = booking.require_user(context.phone)
    changes = body.model_dump(exclude_none=True)
    updated = booking.update_user(replace(user, **changes))
    return UserOut.from_domain(updated)


@router.post(
    "/me/waiver",
    response_model=UserOut,
    summary="Sign the health declaration",
    responses={400: {"description": "Not accepted, or the uploaded file is empty or too large"}},
)
def sign_waiver(
    body: WaiverSignature,
    context: LoggedInDep,
    booking: BookingServiceDep,
    now: NowDep,
) -> UserOut:
    signed = booking.sign_waiver(
        context.phone,
        accepted=body.accepted,
        now=now,
        file_data=body.file_data,
    )
    return UserOut.from_domain(signed)


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[UserOverviewItem],
    summary="Trainee list with this month's numbers (admin)",
)
def list_users(
    _: AdminDep,
    booking: BookingServiceDep,
    now: NowDep,
    q: str = "",
    sort: Literal["name", "workouts"] = "name",
) -> list[UserOverviewItem]:
    overview = booking.user_overview(now.date(), query=q, sort_by=sort)
    return [
        UserOverviewItem(user=UserOut.from_domain(user), stats=UserStatsOut.from_domain(stats))
        for user, stats in overview
    ]


@router.post(
    "/admin",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a trainee (admin)",
)
def add_user(body: UserIn, _: AdminDep, booking: BookingServiceDep, now: NowDep) -> UserOut:
    fields = body.model_dump()
    fields["start_date"] = fields["start_date"] or now.date()
    user = booking.add_user(User(**fields))
    logger.info("Trainee added by coach", extra={"user_id": user.id})
    return UserOut.from_domain(user)


@router.put(
    "/{user_id}",
    response_model=UserOut,
    summary="Edit a trainee (admin)",
    description="Waiver fields are kept as they are.",
)
def update_user(user_id: str, body: UserIn, _: AdminDep, booking: BookingServiceDep) -> UserOut:
    existing = booking.get_user(user_id)
    fields = body.model_dump()
    fields["start_date"] = fields["start_date"] or existing.start_date
    updated = booking.update_user(replace(existing, **fields))
    return UserOut.from_domain(updated)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a trainee (admin)",
)
def delete_user(user_id: str, _: AdminDep, booking: BookingServiceDep) -> Response:
    booking.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

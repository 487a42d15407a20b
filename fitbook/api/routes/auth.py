"""
Login, logout and admin entry.

There are no accounts or passwords for trainees: the phone number is the
credential, kept in the signed session cookie. The coach unlocks the
admin panel on a device with the admin password from the app config.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from ...core.booking.context import ClientContext
from ...core.booking.service import BookingService
from ..dependencies import BookingServiceDep, ClientContextDep, DataServiceDep
from ..schemas import UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    phone: str = Field(description="Phone number in any common format", min_length=1, max_length=32)


class AdminLoginRequest(BaseModel):
    password: str = Field(description="Admin password from the app config")


class MeResponse(BaseModel):
    """Who this device is logged in as."""
    phone: Optional[str] = Field(None, description="Normalized login phone, if logged in")
    is_admin: bool = Field(description="Whether the admin panel is unlocked on this device")
    user: Optional[UserOut] = Field(None, description="The trainee record for the phone, if one exists")
    needs_registration: bool = Field(description="Logged in with a phone that has no trainee record yet")
    needs_waiver: bool = Field(description="Trainee exists but hasn't signed the health declaration")


class AdminEntryResponse(BaseModel):
    admin_login_required: bool = Field(description="Whether the client should prompt for the admin password")
    is_admin: bool


def _me(context: ClientContext, booking: BookingService) -> MeResponse:
    user = booking.state.find_user(context.phone) if context.phone else None
    return MeResponse(
        phone=context.phone,
        is_admin=context.is_admin,
        user=UserOut.from_domain(user) if user else None,
        needs_registration=context.is_logged_in and user is None,
        needs_waiver=user is not None and not user.has_signed_waiver,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/login",
    response_model=MeResponse,
    summary="Log in with a phone number",
)
def login(
    body: LoginRequest,
    request: Request,
    context: ClientContextDep,
    booking: BookingServiceDep,
) -> MeResponse:
    """
    Remember the phone on this device.

    An unknown phone is not an error: the response says the trainee
    still needs to register.
    """
    context.login(body.phone)
    context.save(request.session)

    me = _me(context, booking)
    logger.info(
        "Trainee logged in",
        extra={"known_user": me.user is not None}
    )
    return me


@router.post(
    "/logout",
    response_model=MeResponse,
    summary="Forget the phone on this device",
)
def logout(
    request: Request,
    context: ClientContextDep,
    booking: BookingServiceDep,
) -> MeResponse:
    context.logout()
    context.save(request.session)
    return _me(context, booking)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current device session",
)
def me(context: ClientContextDep, booking: BookingServiceDep) -> MeResponse:
    return _me(context, booking)


@router.post(
    "/admin",
    response_model=MeResponse,
    summary="Unlock the admin panel",
    responses={401: {"description": "Wrong admin password"}},
)
def enter_admin(
    body: AdminLoginRequest,
    request: Request,
    context: ClientContextDep,
    data: DataServiceDep,
    booking: BookingServiceDep,
) -> MeResponse:
    context.enter_admin(data.get_app_config(), body.password)
    context.save(request.session)
    logger.info("Admin panel unlocked")
    return _me(context, booking)


@router.delete(
    "/admin",
    response_model=MeResponse,
    summary="Leave the admin panel",
)
def exit_admin(
    request: Request,
    context: ClientContextDep,
    booking: BookingServiceDep,
) -> MeResponse:
    context.exit_admin()
    context.save(request.session)
    return _me(context, booking)


@router.get(
    "/admin-entry",
    response_model=AdminEntryResponse,
    status_code=status.HTTP_200_OK,
    summary="Check an admin deep link",
    description="Clients opened with ?admin=1 (or on /admin) call this to decide whether to show the password prompt.",
)
def admin_entry(context: ClientContextDep, admin: bool = False) -> AdminEntryResponse:
    return AdminEntryResponse(
        admin_login_required=admin and not context.is_admin,
        is_admin=context.is_admin,
    )

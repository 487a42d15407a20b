"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized
- Resource lifecycle (connections, clients) is managed properly

Each dependency is a function that FastAPI calls when needed.
"""

import datetime as dt
import logging
from typing import Annotated, Generator, Optional

import pytz
from fastapi import Depends, HTTPException, Request, status

from ..config.settings import Settings, get_settings
from ..core.booking.context import ClientContext
from ..core.booking.motivation import MotivationService
from ..core.booking.service import BookingService
from ..infrastructure.anthropic.client import AnthropicConfig, AnthropicTextClient
from ..infrastructure.storage.base import RecordStore
from ..infrastructure.storage.data_service import DataService
from ..infrastructure.storage.factory import create_local_store, open_record_store
from ..infrastructure.storage.local import LocalMirrorStore
from ..infrastructure.weather.client import OpenMeteoClient

logger = logging.getLogger(__name__)

# Shared per process: the local mirror serializes its own writes, and the
# weather client keeps its geocoding cache between requests.
_local_store: Optional[LocalMirrorStore] = None
_weather_client: Optional[OpenMeteoClient] = None


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def get_record_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[RecordStore, None, None]:
    """
    Provide the configured RecordStore.

    With Snowflake credentials this opens a connection for the request
    and closes it afterwards. Without them, every request shares one
    local mirror so that its write lock covers all of them.
    """
    global _local_store

    if settings.remote_store_configured:
        with open_record_store(settings) as store:
            logger.debug("Using Snowflake record store")
            yield store
        return

    if _local_store is None:
        _local_store = create_local_store(settings)
        logger.info(
            "Created shared local mirror store",
            extra={"data_dir": settings.local_data_dir, "namespace": settings.local_namespace}
        )
    yield _local_store


def get_data_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> DataService:
    return DataService(store)


def get_booking_service(
    data: Annotated[DataService, Depends(get_data_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> BookingService:
    """BookingService with a freshly loaded view state."""
    service = BookingService(
        repository=data,
        max_waiver_file_bytes=settings.max_waiver_file_kb * 1024,
    )
    service.refresh()
    return service


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------

def get_motivation_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> MotivationService:
    """
    Provide MotivationService, backed by Claude when a key is configured.

    Without a key the service answers with its fallback text.
    """
    text_client = None
    if settings.anthropic_api_key:
        text_client = AnthropicTextClient(AnthropicConfig(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            temperature=settings.anthropic_temperature,
        ))
    return MotivationService(text_client=text_client)


def get_weather_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> OpenMeteoClient:
    global _weather_client

    if _weather_client is None:
        _weather_client = OpenMeteoClient(timeout=settings.weather_timeout_seconds)
    return _weather_client


def get_now(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dt.datetime:
    """
    Current wall-clock time in the coach's timezone, without tzinfo.

    Session dates and times are stored as naive local values, so every
    comparison against them uses this.
    """
    return dt.datetime.now(pytz.timezone(settings.timezone)).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Client context (who is using this device)
# ---------------------------------------------------------------------------

def get_client_context(request: Request) -> ClientContext:
    return ClientContext.load(request.session)


def require_login(
    context: Annotated[ClientContext, Depends(get_client_context)],
) -> ClientContext:
    if not context.is_logged_in:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Log in with your phone number first.",
        )
    return context


def require_admin(
    context: Annotated[ClientContext, Depends(get_client_context)],
) -> ClientContext:
    if not context.is_admin:
        logger.warning("Admin endpoint called without admin session")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )
    return context


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
RecordStoreDep = Annotated[RecordStore, Depends(get_record_store)]
DataServiceDep = Annotated[DataService, Depends(get_data_service)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
MotivationServiceDep = Annotated[MotivationService, Depends(get_motivation_service)]
WeatherClientDep = Annotated[OpenMeteoClient, Depends(get_weather_client)]
NowDep = Annotated[dt.datetime, Depends(get_now)]
ClientContextDep = Annotated[ClientContext, Depends(get_client_context)]
LoggedInDep = Annotated[ClientContext, Depends(require_login)]
AdminDep = Annotated[ClientContext, Depends(require_admin)]

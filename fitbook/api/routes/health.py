"""
Liveness and readiness.

/health answers as long as the process is up. /health/ready also reads
the app config table, so it fails when Snowflake is unreachable (or the
local data directory is unreadable).
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ... import __version__
from ...infrastructure.storage.base import APP_CONFIG
from ..dependencies import RecordStoreDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    name: str
    status: str  # ok, warning or error
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str  # ready or not_ready
    version: str
    checks: list[ReadinessCheck]


def _store_kind(settings) -> str:
    return "snowflake" if settings.remote_store_configured else "local"


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness",
    description="200 while the process runs. Touches no store.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"store": _store_kind(settings)},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness",
    description="200 when the store answers a read. Missing optional settings show up as warnings.",
    responses={503: {"description": "Store unreachable", "model": ReadinessResponse}},
)
def readiness_check(settings: SettingsDep, store: RecordStoreDep):
    missing = settings.validate_required_fields()
    checks = [
        ReadinessCheck(
            name="configuration",
            status="warning" if missing else "ok",
            error=", ".join(missing) or None,
        )
    ]

    try:
        store.list(APP_CONFIG)
    except Exception as e:
        logger.error(
            "Readiness store read failed",
            extra={"store": _store_kind(settings), "error": str(e)}
        )
        checks.append(ReadinessCheck(name="store", status="error", error=str(e)))
    else:
        checks.append(ReadinessCheck(name="store", status="ok"))

    ready = all(check.status != "error" for check in checks)
    response = ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )
    if ready:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(),
    )

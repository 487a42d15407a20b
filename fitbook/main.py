"""
FitBook API application.

create_app() wires settings, middleware, error handlers and routers into
a FastAPI instance. Tests call it directly and override dependencies;
servers import the module-level `app`:

    uvicorn fitbook.main:app --reload
    gunicorn fitbook.main:app -w 4 -k uvicorn.workers.UvicornWorker

With several workers the local mirror is only safe on one of them; use
Snowflake for anything bigger than a single process.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from . import __version__
from .api.errors import register_error_handlers
from .api.routes import auth, config, health, schedule, sessions, users
from .config.settings import get_settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)

DEV_SESSION_SECRET = "dev-session-secret"

API_DESCRIPTION = """
Class booking for a personal fitness coach.

## Trainees

1. **Log in**: `POST /api/v1/auth/login` with a phone number
2. **Register** (first time only): `POST /api/v1/users`
3. **Sign the health declaration**: `POST /api/v1/users/me/waiver`
4. **Browse the week**: `GET /api/v1/schedule/week?offset=0`
5. **Join or leave a session**: `POST /api/v1/sessions/{id}/registration`

## Coach

Unlock the admin panel with `POST /api/v1/auth/admin`, then manage
sessions, rosters, attendance, trainees and configuration.

## Authentication

Login state lives in a signed session cookie; send it back with every
request.
"""

# (router, prefix, tag)
ROUTERS = (
    (health.router, "/health", "Health"),
    (auth.router, "/api/v1/auth", "Auth"),
    (schedule.router, "/api/v1/schedule", "Schedule"),
    (sessions.router, "/api/v1/sessions", "Sessions"),
    (users.router, "/api/v1/users", "Users"),
    (config.router, "/api/v1/config", "Config"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup report.

    Says which store this process uses and what optional configuration
    is missing. Nothing here stops startup: the local mirror and the
    fallback texts keep the app usable.
    """
    settings = get_settings()

    logger.info(
        "FitBook API starting",
        extra={
            "version": __version__,
            "store": "snowflake" if settings.remote_store_configured else "local",
            "timezone": settings.timezone,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.warning("Optional configuration missing", extra={"missing_fields": missing_fields})

    if settings.session_secret == DEV_SESSION_SECRET:
        logger.warning("SESSION_SECRET is the development default; set it in production")

    yield

    logger.info("FitBook API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description=API_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # The session cookie needs allow_credentials, so CORS_ORIGINS should
    # list real origins rather than "*" outside development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="fitbook_session",
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        same_site="lax",
    )

    register_error_handlers(app)

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "FitBook API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    # Deep link the coach bookmarks; the client answers it with the password prompt.
    @app.get("/admin", include_in_schema=False)
    async def admin_deep_link():
        return {"admin_login_required": True, "login": "/api/v1/auth/admin"}

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Log the full error, return a generic 500 without the stack trace."""
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error. Please try again later."},
        )

    logger.info("FastAPI application created", extra={"routers": len(ROUTERS)})
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fitbook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )

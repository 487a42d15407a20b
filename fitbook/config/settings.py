"""
FitBook settings.

Everything comes from the environment (or a .env file next to the
process). Startup fails on a malformed value, such as a non-numeric
SESSION_MAX_AGE_DAYS, instead of failing later inside a request.

The store is picked from these settings: Snowflake when credentials
are present, the local JSON mirror otherwise.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings. Field names map to upper-case env vars."""

    # HTTP surface
    api_title: str = "FitBook API"
    session_secret: str = Field(
        default="dev-session-secret",
        description="Signs the session cookie that carries the logged-in phone and the admin flag."
    )
    session_max_age_days: int = Field(
        default=365,
        description="Days before a device has to log in again."
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed browser origins, comma separated. '*' is for local work only."
    )

    # Generated text
    anthropic_api_key: str = Field(
        default="",
        description="Empty disables Claude; the banner and descriptions fall back to fixed text."
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model for the daily quote and the workout descriptions."
    )
    anthropic_max_tokens: int = Field(
        default=200,
        description="Output cap. A quote or a description is a sentence or two."
    )
    anthropic_temperature: float = Field(
        default=0.9,
        description="Kept high so reloading the schedule shows a different quote."
    )

    # Remote store
    snowflake_account: str = Field(default="", description="Account identifier, e.g. xy12345.eu-west-1")
    snowflake_user: str = Field(default="", description="Service user FitBook connects as")
    snowflake_password: str = Field(default="", description="Password auth; ignored when a key is set")
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="PEM key file for key-pair auth"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Same key, base64 encoded, for hosts without a writable filesystem"
    )
    snowflake_database: str = Field(default="FITBOOK")
    snowflake_schema: str = Field(default="BOOKING")
    snowflake_warehouse: str = Field(default="COMPUTE_WH")
    snowflake_role: Optional[str] = Field(default=None, description="Role override; the user's default otherwise")

    # Local mirror
    local_data_dir: str = Field(
        default=".fitbook-data",
        description="Where the JSON blobs live when Snowflake is not configured."
    )
    local_namespace: str = Field(
        default="fitbook",
        description="Blob file prefix."
    )
    local_demo_data: bool = Field(
        default=True,
        description="Fill an empty mirror with sample trainees and this week's sessions."
    )

    # Forecasts
    weather_default_lat: float = Field(
        default=31.93,
        description="Forecast latitude before the coach sets a city."
    )
    weather_default_lon: float = Field(
        default=34.80,
        description="Forecast longitude before the coach sets a city."
    )
    weather_timeout_seconds: float = Field(default=10.0, description="Open-Meteo request timeout.")

    # Booking
    timezone: str = Field(
        default="Asia/Jerusalem",
        description="Studio timezone. Session dates and times are wall-clock values in it."
    )
    session_duration_minutes: int = Field(
        default=60,
        description="End time for .ics export; sessions only record when they start."
    )
    max_waiver_file_kb: int = Field(
        default=2048,
        description="Upper bound for a signed waiver upload stored on the user."
    )

    log_level: str = Field(default="INFO", description="Root logger level name.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def remote_store_configured(self) -> bool:
        """
        True when Snowflake has an account, a user and some credential.

        Checked per process; the app never mixes stores.
        """
        has_identity = bool(self.snowflake_account and self.snowflake_user)
        has_secret = any((
            self.snowflake_password,
            self.snowflake_private_key_path,
            self.snowflake_private_key_base64,
        ))
        return has_identity and has_secret

    def validate_required_fields(self) -> list[str]:
        """
        Env vars worth setting, for the startup log and /health/ready.

        None of them is required to run. A Snowflake account without a
        usable login is listed since it usually means a typo in .env.
        """
        missing = []

        if not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")

        if self.snowflake_account and not self.remote_store_configured:
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings. Tests reset with get_settings.cache_clear()."""
    return Settings()

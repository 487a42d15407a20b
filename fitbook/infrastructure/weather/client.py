"""
Open-Meteo client.

Forecasts decorate session cards and nothing depends on them, so every
failure here degrades to "no weather" instead of raising.
"""

import logging
from typing import Any, Iterable, Optional

import requests

from fitbook.core.booking.models import HourlyWeather, WeatherInfo, WeatherLocation

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"


class OpenMeteoClient:
    """Daily and hourly forecasts plus city geocoding."""

    def __init__(
        self,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self._timeout = timeout
        self._http = http or requests.Session()
        self._geocoded: dict[str, WeatherLocation] = {}

    def _get_json(self, url: str, params: dict[str, Any]) -> Optional[dict]:
        try:
            resp = self._http.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("Weather request failed", extra={"url": url, "error": str(e)})
            return None
        if resp.status_code != 200:
            logger.warning(
                "Weather request rejected",
                extra={"url": url, "status_code": resp.status_code}
            )
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Weather response not JSON", extra={"url": url, "error": str(e)})
            return None

    def get_weather_for_dates(
        self,
        dates: Iterable[str],
        lat: float = 31.93,
        lon: float = 34.80,
    ) -> dict[str, WeatherInfo]:
        """
        Forecast for the requested ISO dates.

        Dates outside the forecast horizon are simply missing from the
        result. Hourly entries are keyed by two-digit hour ("07", "18").
        """
        wanted = set(dates)
        if not wanted:
            return {}

        data = self._get_json(FORECAST_URL, {
            "latitude": lat,
            "longitude": lon,
            "daily": "weather_code,temperature_2m_max",
            "hourly": "temperature_2m,weather_code",
            "timezone": "auto",
        })
        if not data:
            return {}

        try:
            return _parse_forecast(data, wanted)
        except (KeyError, TypeError, IndexError, ValueError) as e:
            logger.warning("Unexpected forecast payload", extra={"error": str(e)})
            return {}

    def get_city_coordinates(self, name: str) -> Optional[WeatherLocation]:
        """Look up a city by (Hebrew or English) name. None when not found."""
        if not name or not name.strip():
            return None
        name = name.strip()
        if name in self._geocoded:
            return self._geocoded[name]

        data = self._get_json(GEOCODING_URL, {
            "name": name,
            "count": 1,
            "language": "he",
            "format": "json",
        })
        if not data or not data.get("results"):
            return None

        first = data["results"][0]
        try:
            location = WeatherLocation(
                name=first["name"],
                lat=float(first["latitude"]),
                lon=float(first["longitude"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected geocoding payload", extra={"error": str(e)})
            return None

        self._geocoded[name] = location
        return location


def _parse_forecast(data: dict, wanted: set[str]) -> dict[str, WeatherInfo]:
    result: dict[str, WeatherInfo] = {}

    daily = data.get("daily") or {}
    for index, day in enumerate(daily.get("time") or []):
        max_temp = daily["temperature_2m_max"][index]
        code = daily["weather_code"][index]
        # Open-Meteo sends null past the end of its forecast range
        if day in wanted and max_temp is not None and code is not None:
            result[day] = WeatherInfo(max_temp=max_temp, weather_code=code)

    hourly = data.get("hourly") or {}
    for index, stamp in enumerate(hourly.get("time") or []):
        day, _, clock = stamp.partition("T")
        info = result.get(day)
        temp = hourly["temperature_2m"][index]
        code = hourly["weather_code"][index]
        if info is None or temp is None or code is None:
            continue
        info.hourly[clock.split(":")[0]] = HourlyWeather(temp=temp, weather_code=code)

    return result

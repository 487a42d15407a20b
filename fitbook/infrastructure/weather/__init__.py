"""
Open-Meteo weather and geocoding client.
"""

from .client import OpenMeteoClient

__all__ = ["OpenMeteoClient"]

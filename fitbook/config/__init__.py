"""
Application configuration using Pydantic settings.

Configuration comes from environment variables with sensible defaults.
Without remote database credentials the app runs on the local mirror store.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

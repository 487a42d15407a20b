"""
Snowflake remote table store.
"""

from .client import SnowflakeConfig, SnowflakeConnectionError, get_snowflake_connection
from .store import SnowflakeRecordStore

__all__ = [
    "SnowflakeConfig",
    "SnowflakeConnectionError",
    "get_snowflake_connection",
    "SnowflakeRecordStore",
]

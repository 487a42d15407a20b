"""
Store selection.

The backend is picked once from settings: Snowflake when credentials are
present, the local mirror otherwise. Callers get a RecordStore either way
and never branch on which one it is.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from fitbook.config.settings import Settings

from ..snowflake.client import SnowflakeConfig, get_snowflake_connection
from ..snowflake.store import SnowflakeRecordStore
from .base import RecordStore
from .defaults import default_records
from .local import LocalMirrorStore

logger = logging.getLogger(__name__)


def snowflake_config_from_settings(settings: Settings) -> SnowflakeConfig:
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def create_local_store(settings: Settings) -> LocalMirrorStore:
    return LocalMirrorStore(
        data_dir=settings.local_data_dir,
        namespace=settings.local_namespace,
        seeds=default_records(with_demo_data=settings.local_demo_data),
    )


@contextmanager
def open_record_store(settings: Settings) -> Generator[RecordStore, None, None]:
    """
    Provide the configured store for the duration of a unit of work.

    For Snowflake this opens (and closes) a connection; the local mirror
    has nothing to open.
    """
    if settings.remote_store_configured:
        with get_snowflake_connection(snowflake_config_from_settings(settings)) as conn:
            yield SnowflakeRecordStore(conn)
    else:
        yield create_local_store(settings)

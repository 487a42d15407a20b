"""
Snowflake connections for the record store.

One connection per unit of work (an API request, a setup script run),
opened with either a password or an RSA key pair and always closed
afterwards. Only SnowflakeRecordStore uses the connection it yields.
"""

import base64
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, Optional, Protocol

from ..storage.base import StoreError

logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """The part of a DB-API connection the record store uses. Tests pass fakes."""

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "FITBOOK"
    schema: str = "BOOKING"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class SnowflakeConnectionError(StoreError):
    """Connecting (or loading credentials) failed."""
    pass


def _pem_to_der(pem: bytes) -> bytes:
    # snowflake-connector wants an unencrypted PKCS8 key in DER form
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    key = serialization.load_pem_private_key(pem, password=None, backend=default_backend())
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _credentials(config: SnowflakeConfig) -> dict[str, Any]:
    """
    Auth parameters for connect().

    A key pair wins over a password: the file path first, then the
    base64 value used in deployments where mounting a file is awkward.
    """
    try:
        if config.private_key_path:
            with open(config.private_key_path, "rb") as key_file:
                return {"private_key": _pem_to_der(key_file.read())}
        if config.private_key_base64:
            return {"private_key": _pem_to_der(base64.b64decode(config.private_key_base64))}
    except (OSError, ValueError) as e:
        raise SnowflakeConnectionError(f"Could not load private key: {e}") from e

    if config.password:
        return {"password": config.password}

    raise SnowflakeConnectionError("Either password or a private key must be provided")


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Open a connection, yield it, close it.

        with get_snowflake_connection(config) as conn:
            store = SnowflakeRecordStore(conn)
            ...
    """
    import snowflake.connector

    credentials = _credentials(config)
    logger.info(
        "Connecting to Snowflake",
        extra={
            "account": config.account,
            "database": config.database,
            "auth": "key_pair" if "private_key" in credentials else "password",
        }
    )

    try:
        conn = snowflake.connector.connect(
            account=config.account,
            user=config.user,
            database=config.database,
            schema=config.schema,
            warehouse=config.warehouse,
            role=config.role,
            client_session_keep_alive=True,
            **credentials,
        )
    except snowflake.connector.errors.Error as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}") from e

    try:
        yield conn
    finally:
        try:
            conn.close()
        except Exception as e:
            logger.warning("Error closing Snowflake connection", extra={"error": str(e)})

"""
Snowflake record store.

Every table has the same shape: an id and a VARIANT payload holding the
whole record. Adding a field to a user or session needs no migration.

The application code never writes SQL directly - it asks DataService for
what it needs in domain terms, and DataService asks this store for records.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..storage.base import TABLES, Record, StoreError, check_table
from .client import SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeRecordStore:
    """RecordStore backed by one Snowflake table per collection."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def ensure_tables(self) -> None:
        """Create any missing tables. Used by the setup script."""
        for table in TABLES:
            self._execute(f"""
                CREATE TABLE IF NOT EXISTS {table} (
                    id STRING PRIMARY KEY,
                    payload VARIANT,
                    updated_at TIMESTAMP_LTZ DEFAULT CURRENT_TIMESTAMP()
                )
            """, (), table=table)

    def list(self, table: str) -> list[Record]:
        rows = self._execute(
            f"SELECT payload FROM {check_table(table)} ORDER BY id",
            (),
            table=table,
            fetch=True,
        )
        records = []
        for (payload,) in rows:
            record = self._parse_variant_json(payload)
            if isinstance(record, dict):
                records.append(record)
        return records

    def add(self, table: str, record: Record) -> None:
        self._execute(
            f"INSERT INTO {check_table(table)} (id, payload) SELECT %s, PARSE_JSON(%s)",
            (str(record["id"]), json.dumps(record, ensure_ascii=False)),
            table=table,
        )

    def update(self, table: str, record: Record) -> None:
        self._execute(
            f"""
            UPDATE {check_table(table)}
            SET payload = PARSE_JSON(%s),
                updated_at = CURRENT_TIMESTAMP()
            WHERE id = %s
            """,
            (json.dumps(record, ensure_ascii=False), str(record["id"])),
            table=table,
        )

    def delete(self, table: str, record_id: str) -> None:
        self._execute(
            f"DELETE FROM {check_table(table)} WHERE id = %s",
            (str(record_id),),
            table=table,
        )

    def upsert(self, table: str, records: list[Record]) -> None:
        for record in records:
            payload = json.dumps(record, ensure_ascii=False)
            self._execute(
                f"""
                MERGE INTO {check_table(table)} AS target
                USING (SELECT %s AS id, PARSE_JSON(%s) AS payload) AS source
                ON target.id = source.id
                WHEN MATCHED THEN UPDATE SET
                    payload = source.payload,
                    updated_at = CURRENT_TIMESTAMP()
                WHEN NOT MATCHED THEN INSERT (id, payload)
                    VALUES (source.id, source.payload)
                """,
                (str(record["id"]), payload),
                table=table,
            )

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _execute(
        self,
        query: str,
        params: tuple,
        table: str,
        fetch: bool = False,
    ) -> list[tuple]:
        cursor = self._conn.cursor()
        try:
            cursor.execute(query, params)
            rows = cursor.fetchall() if fetch else []
            if not fetch:
                self._conn.commit()
            return rows
        except Exception as e:
            logger.error(
                "Snowflake query failed",
                extra={"table": table, "error": str(e)}
            )
            raise StoreError(f"Database error on {table}: {e}") from e
        finally:
            cursor.close()

    def _parse_variant_json(self, variant_data: Any) -> Any:
        """
        Parse Snowflake VARIANT data that might be a string or already parsed.

        snowflake-connector-python returns VARIANT as a JSON string; other
        drivers may hand back dicts.
        """
        if not variant_data:
            return None

        if isinstance(variant_data, str):
            try:
                return json.loads(variant_data)
            except json.JSONDecodeError as e:
                logger.error(
                    "Failed to parse VARIANT JSON string",
                    extra={"variant_data": variant_data[:100], "error": str(e)}
                )
                return None

        return variant_data

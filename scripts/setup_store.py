#!/usr/bin/env python3
"""
Prepare the data store for a new coach.

Creates the Snowflake tables (when Snowflake credentials are configured)
and fills any empty table with the default locations, workout types and
app config. With --demo it also adds demo trainees and sessions.

Usage:
    python scripts/setup_store.py [--demo] [--dry-run]

Requires:
    - .env file with Snowflake credentials, or nothing for the local mirror
"""

import sys
from pathlib import Path

# Add the project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fitbook.config.settings import get_settings  # noqa: E402
from fitbook.infrastructure.snowflake.store import SnowflakeRecordStore  # noqa: E402
from fitbook.infrastructure.storage.base import StoreError  # noqa: E402
from fitbook.infrastructure.storage.defaults import default_records, stored_record_count  # noqa: E402
from fitbook.infrastructure.storage.factory import open_record_store  # noqa: E402


def seed_store(store, seeds: dict[str, list[dict]], dry_run: bool = False) -> dict[str, int]:
    """
    Write seed records into tables that are still empty.

    Tables that already hold data are left alone, so running this twice
    never duplicates or overwrites anything. Returns records written per table.
    """
    written = {}
    for table, records in seeds.items():
        if not records:
            continue
        existing = stored_record_count(store, table)
        if existing:
            print(f"[SKIP] {table}: already has {existing} records")
            continue
        if dry_run:
            print(f"Would seed {table} with {len(records)} records")
        else:
            store.upsert(table, records)
            print(f"[OK] Seeded {table} with {len(records)} records")
        written[table] = len(records)
    return written


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create and seed the FitBook data store')
    parser.add_argument('--demo', action='store_true', help='Also add demo trainees and sessions')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be written')
    args = parser.parse_args()

    settings = get_settings()
    backend = "Snowflake" if settings.remote_store_configured else f"local mirror in {settings.local_data_dir}"
    print(f"Using {backend}")

    if args.dry_run:
        print("\n=== DRY RUN - No data will be written ===\n")

    try:
        with open_record_store(settings) as store:
            if isinstance(store, SnowflakeRecordStore) and not args.dry_run:
                store.ensure_tables()
                print("[OK] Tables ready")
            written = seed_store(store, default_records(with_demo_data=args.demo), dry_run=args.dry_run)
    except StoreError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"\n=== Setup Complete ===")
    print(f"Tables seeded: {len(written)}")
    sys.exit(0)


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""
Create the schema and seed reference data (categories, districts,
neighborhoods) outside the web process.

Idempotent: tables that already hold rows are left untouched.
"""

import argparse
import logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Create schema and seed Istanfix reference data.")
    parser.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL / settings)")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first (destroys data)")
    args = parser.parse_args()

    from istanfix.config import get_settings
    from istanfix.db.session import Database
    from istanfix.seed import seed_reference_data

    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    with Database(args.database_url or settings.database_url, echo=settings.sql_echo) as database:
        if args.reset:
            database.drop_schema()
        database.create_schema()
        result = seed_reference_data(database.session)

    print(
        f"categories_inserted={result.categories} "
        f"districts_inserted={result.districts} "
        f"neighborhoods_inserted={result.neighborhoods}"
    )
    if result.failed:
        print(f"failed_tables={','.join(result.failed)}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

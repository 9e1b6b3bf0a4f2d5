#!/usr/bin/env python3
"""Check the DB connection using the application's async engine.

Reports the dialect, server version and which rental tables exist.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from sqlalchemy import inspect, text

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from rental.core.config import settings  # noqa: E402
from rental.core.db import get_async_engine, reset_async_engine  # noqa: E402
from rental.db.models import Base  # noqa: E402

_VERSION_SQL = {
    "postgresql": "select version()",
    "sqlite": "select sqlite_version()",
}


async def _check() -> int:
    engine = get_async_engine()
    try:
        async with engine.connect() as conn:
            dialect = engine.dialect.name
            print("Session info:")
            print("- dialect:", dialect)
            version_sql = _VERSION_SQL.get(dialect)
            if version_sql:
                print("- server version:", (await conn.execute(text(version_sql))).scalar_one())

            existing = set(
                await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            )
            missing = [t for t in Base.metadata.tables if t not in existing]
            for table in Base.metadata.tables:
                print(f"- {table}: {'present' if table in existing else 'MISSING'}")
            if missing:
                print("Connected, but schema is incomplete. Run: scripts/setup_database.py init")
                return 3
            print("OK: connection successful; schema present")
            return 0
    except Exception as exc:
        print("ERROR: failed to connect:")
        print(type(exc).__name__, exc)
        return 1
    finally:
        await reset_async_engine()


def main() -> int:
    if not settings.database_url:
        print("DATABASE_URL not set.", file=sys.stderr)
        return 2
    return asyncio.run(_check())


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
Bicycle Rental Database Setup

Creates, resets, seeds and verifies the rental schema on the database named
by DATABASE_URL (PostgreSQL or SQLite).

Usage:
    # Create missing tables
    uv run python scripts/setup_database.py init

    # Drop and recreate every table
    uv run python scripts/setup_database.py reset --yes

    # Seed demo users, bicycles and orders
    uv run python scripts/setup_database.py seed --demo

    # Verify setup (row counts and page counts)
    uv run python scripts/setup_database.py verify

Environment Variables:
    DATABASE_URL       - Connection URL (defaults to sqlite:///./rental.db)
    DEFAULT_PAGE_SIZE  - Rows per page reported by verify
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path for imports
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from sqlalchemy.exc import IntegrityError  # noqa: E402

from rental.core.config import settings  # noqa: E402
from rental.core.db import (  # noqa: E402
    drop_database,
    get_async_db_session,
    get_async_sessionmaker,
    init_database,
    reset_async_engine,
)
from rental.core.observability import configure_structured_logging  # noqa: E402
from rental.db.models import Bicycle, Order, User  # noqa: E402
from rental.domain.enums import OrderStatus, UserRole  # noqa: E402
from rental.repos.order_repo import OrderRepository  # noqa: E402


# ANSI colors for terminal output
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def log_info(msg: str) -> None:
    print(f"{Colors.BLUE}[INFO]{Colors.END} {msg}")


def log_success(msg: str) -> None:
    print(f"{Colors.GREEN}[OK]{Colors.END} {msg}")


def log_warning(msg: str) -> None:
    print(f"{Colors.YELLOW}[WARN]{Colors.END} {msg}")


def log_error(msg: str) -> None:
    print(f"{Colors.RED}[ERROR]{Colors.END} {msg}")


DEMO_USERS = [("admin", UserRole.ADMIN), ("alice", UserRole.CLIENT), ("bob", UserRole.CLIENT)]
DEMO_BICYCLES = [
    ("Trek Marlin 5", "Central Station"),
    ("Giant Escape 3", "Central Station"),
    ("Cube Aim Pro", "City Park"),
    ("Merida Big.Nine", "Riverside"),
]
DEMO_STATUSES = [OrderStatus.PENDING, OrderStatus.ACCEPTED, OrderStatus.CANCELED]


async def cmd_init() -> int:
    await init_database()
    log_success("Schema created")
    return 0


async def cmd_reset(*, yes: bool) -> int:
    if not yes:
        answer = input(f"Drop every table at {settings.database_url}? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            log_warning("Aborted")
            return 1
    await drop_database()
    await init_database()
    log_success("Schema dropped and recreated")
    return 0


async def cmd_seed(*, demo: bool) -> int:
    if not demo:
        log_warning("Nothing to seed (pass --demo)")
        return 0

    await init_database()
    try:
        async with get_async_db_session() as db:
            users = [User(login=login, role=role.value) for login, role in DEMO_USERS]
            bicycles = [Bicycle(model=model, place=place) for model, place in DEMO_BICYCLES]
            db.add_all([*users, *bicycles])
            await db.flush()
            user_ids = [user.id for user in users if user.role == UserRole.CLIENT.value]
            bicycle_ids = [bicycle.id for bicycle in bicycles]
    except IntegrityError as e:
        log_error(f"Demo users already exist; run reset first ({e.orig})")
        return 1
    log_info(f"Seeded {len(users)} users and {len(bicycles)} bicycles")

    repo = OrderRepository(get_async_sessionmaker())
    today = date.today()
    created = 0
    for i in range(10):
        result = await repo.create(
            Order(
                user_id=user_ids[i % len(user_ids)],
                bicycle_id=bicycle_ids[i % len(bicycle_ids)],
                hours=1 + i % 4,
                status=DEMO_STATUSES[i % len(DEMO_STATUSES)],
                rental_date=today - timedelta(days=i),
            )
        )
        if not result.is_ok:
            log_error(f"Order {i + 1} not created: {result.error}")
            return 1
        created += 1

    log_success(f"Seeded {created} orders")
    return 0


async def cmd_verify() -> int:
    repo = OrderRepository(get_async_sessionmaker())
    ok = True
    for name, table_repo in (("users", repo.users), ("bicycles", repo.bicycles), ("orders", repo)):
        result = await table_repo.find_all()
        if not result.is_ok:
            log_error(f"{name}: {result.error}")
            ok = False
            continue
        pages = await table_repo.get_count_of_pages()
        log_success(f"{name}: {len(result.value)} rows, {pages} page(s) of {table_repo.page_size}")
    return 0 if ok else 1


async def _run(args: argparse.Namespace) -> int:
    try:
        if args.command == "init":
            return await cmd_init()
        if args.command == "reset":
            return await cmd_reset(yes=args.yes)
        if args.command == "seed":
            return await cmd_seed(demo=args.demo)
        return await cmd_verify()
    finally:
        await reset_async_engine()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bicycle rental database setup")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("init", help="Create missing tables")
    reset = sub.add_parser("reset", help="Drop and recreate all tables")
    reset.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    seed = sub.add_parser("seed", help="Insert demo data")
    seed.add_argument("--demo", action="store_true", help="Seed demo users, bicycles and orders")
    sub.add_parser("verify", help="Report row and page counts")

    args = parser.parse_args(argv)
    if settings.observability_structured_logs:
        configure_structured_logging(settings.app_log_level)

    log_info(f"{settings.app_name} database: {settings.database_url.split('@')[-1]}")
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())

"""
Database setup commands.

These commands wrap scripts/setup_database.py against the database named by
DATABASE_URL.

Usage:
    uv run db-init          # Create missing tables
    uv run db-reset         # Drop and recreate tables (asks first)
    uv run db-seed-demo     # Seed demo users, bicycles and orders
    uv run db-verify        # Report row and page counts
"""

from __future__ import annotations

import sys
from pathlib import Path

from cli._runner import run

_SETUP_DB_SCRIPT = Path(__file__).parent.parent / "scripts" / "setup_database.py"


def _validated_passthrough_args(
    raw_args: list[str], *, allowed_flags: set[str], command_name: str
) -> list[str]:
    """Return argv unchanged if every token is an allowed flag."""
    for token in raw_args:
        if token not in allowed_flags:
            allowed = " ".join(sorted(allowed_flags)) or "(none)"
            raise SystemExit(
                f"Unsupported argument '{token}' for {command_name}. Allowed: {allowed}"
            )
    return raw_args


def _setup(*args: str) -> None:
    run([sys.executable, str(_SETUP_DB_SCRIPT), *args])


def db_init() -> None:
    """Create missing tables."""
    _validated_passthrough_args(sys.argv[1:], allowed_flags=set(), command_name="db-init")
    _setup("init")


def db_reset() -> None:
    """Drop and recreate all tables."""
    passthrough = _validated_passthrough_args(
        sys.argv[1:], allowed_flags={"--yes"}, command_name="db-reset"
    )
    _setup("reset", *passthrough)


def db_seed_demo() -> None:
    """Seed demo data."""
    _validated_passthrough_args(sys.argv[1:], allowed_flags=set(), command_name="db-seed-demo")
    _setup("seed", "--demo")


def db_verify() -> None:
    """Report row and page counts for every table."""
    _validated_passthrough_args(sys.argv[1:], allowed_flags=set(), command_name="db-verify")
    _setup("verify")

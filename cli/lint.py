"""CLI wrapper: Run linter."""

from __future__ import annotations

import sys

from cli._runner import run
from cli.format import TARGETS


def main() -> None:
    run([sys.executable, "-m", "ruff", "check", *TARGETS, *sys.argv[1:]])

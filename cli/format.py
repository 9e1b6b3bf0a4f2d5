"""CLI wrapper: Format code."""

from __future__ import annotations

import sys

from cli._runner import run

TARGETS = ("rental", "tests", "scripts", "cli")


def main() -> None:
    run([sys.executable, "-m", "ruff", "format", *TARGETS, *sys.argv[1:]])

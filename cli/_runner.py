"""
Shared CLI runner helper.

Runs a command in the current environment and exits with its return code,
so every `rental-*` / `db-*` entry point behaves the same way.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """
    Run a command and propagate its exit code.

    Args:
        cmd: Command and arguments to execute

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"])
    """
    result = subprocess.run(list(cmd), check=False)  # nosec
    raise SystemExit(result.returncode)

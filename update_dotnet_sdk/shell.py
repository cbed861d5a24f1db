"""Shell and git utilities.

Provides a thin wrapper around git for the working tree that contains
global.json, plus output formatting helpers.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from .errors import GitError


def git(*args: str, cwd: Path | str | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        cwd: Working tree to run the command in (default: current directory).
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., probing for
               a remote branch).

    Returns:
        Stripped stdout from the git command.

    Raises:
        GitError: If check is True and git exits with a non-zero status.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=False
    )
    if check and result.returncode != 0:
        message = result.stderr.strip() or f"exit code {result.returncode}"
        raise GitError(args, message)
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the update in workflow logs.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warning(msg: str) -> None:
    """Print a GitHub Actions warning annotation."""
    print(f"::warning::{msg}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)

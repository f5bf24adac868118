"""Page dates from git history.

Resolution order: the git log for the file, then the filesystem creation
time, then the current time.  Failing git queries are not errors.
"""

from __future__ import annotations

import datetime as dt
import subprocess
from pathlib import Path
from typing import Optional

GIT_MODES = ("created", "modified")
GIT_TIMEOUT = 10


def git_log_args(path: Path, mode: str) -> list[str]:
    if mode == "created":
        return ["git", "log", "--diff-filter=A", "--follow", "--format=%at", "-1", "--", path.name]
    return ["git", "log", "--format=%at", "-1", "--", path.name]


def git_history_date(path: Path, mode: str) -> Optional[dt.datetime]:
    try:
        result = subprocess.run(
            git_log_args(path, mode),
            cwd=path.parent,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    if not lines:
        return None
    try:
        timestamp = int(lines[0].strip())
    except ValueError:
        return None
    return dt.datetime.fromtimestamp(timestamp, tz=dt.timezone.utc)


def file_birth_date(path: Path) -> Optional[dt.datetime]:
    try:
        info = path.stat()
    except OSError:
        return None
    birthtime = getattr(info, "st_birthtime", None)
    if birthtime is None:
        return None
    return dt.datetime.fromtimestamp(birthtime, tz=dt.timezone.utc)


def git_date(path: Path, mode: str = "created") -> dt.datetime:
    if mode not in GIT_MODES:
        raise ValueError(f"Unknown git date mode: {mode!r}")
    path = Path(path)
    return git_history_date(path, mode) or file_birth_date(path) or dt.datetime.now(dt.timezone.utc)

"""Filesystem helpers for playwright-bridge.

The bridge keeps its per-user files under ``~/.playwright-bridge/`` and writes
screenshots to a workspace-relative directory:

    ~/.playwright-bridge/
      bridge.log          # Log file (stdout/stderr are protocol channels)

    ./screenshots/
      screenshot_1760000000000.png
"""

from __future__ import annotations

import time
from pathlib import Path

_BASE_DIR_NAME = ".playwright-bridge"
_LOG_FILENAME = "bridge.log"
_SCREENSHOT_PREFIX = "screenshot"


def get_base_dir() -> Path:
    """Return ``~/.playwright-bridge/``, creating it if it does not exist."""
    base_dir = Path.home() / _BASE_DIR_NAME
    base_dir.mkdir(parents=True, exist_ok=True)
    return base_dir


def get_log_path(log_file: str | None = None) -> Path:
    """Return the log file path.

    An explicit *log_file* wins; otherwise ``~/.playwright-bridge/bridge.log``.
    The parent directory is created in both cases.
    """
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    return get_base_dir() / _LOG_FILENAME


def timestamp_ms() -> int:
    """Milliseconds since the epoch, used for default screenshot names."""
    return int(time.time() * 1000)


def default_screenshot_filename(timestamp: int) -> str:
    """Return ``screenshot_<timestamp>.png``."""
    return f"{_SCREENSHOT_PREFIX}_{timestamp}.png"


def resolve_screenshot_path(
    directory: str,
    filename: str | None = None,
    full_path: str | None = None,
    timestamp: int | None = None,
) -> Path:
    """Work out where a screenshot should be written.

    Priority (highest to lowest):

    1. *full_path*, used verbatim.
    2. *directory* / *filename*.
    3. *directory* / ``screenshot_<timestamp>.png``.

    The parent directory of the returned path is created if missing.
    """
    if full_path:
        path = Path(full_path)
    else:
        if not filename:
            filename = default_screenshot_filename(
                timestamp if timestamp is not None else timestamp_ms()
            )
        path = Path(directory) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    return path

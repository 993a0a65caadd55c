"""
Path resolver for trendpath.

Rules
-----
* base_dir  -> $TRENDPATH_HOME when set, otherwise the project root
* data_dir  -> base_dir/data  (preferred); fallback ~/.trendpath/data
* logs_dir  -> base_dir/logs  (preferred); fallback ~/.trendpath/logs
* settings  -> data_dir/settings.json

Runtime code never builds paths from os.getcwd(); call one of the
functions below.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _get_base_dir() -> Path:
    """
    Return the application's root directory.

    trendpath/utils/paths.py -> parent.parent.parent = project root
    """
    override = os.environ.get("TRENDPATH_HOME")
    if override:
        return Path(override).expanduser().resolve()
    return Path(__file__).resolve().parent.parent.parent


def _try_writable(path: Path) -> bool:
    """
    Return True if *path* can be created and used as a writable directory.

    Uses a canary-file probe so read-only installs are detected.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        canary = path / ".write_probe"
        canary.touch()
        canary.unlink()
        return True
    except (OSError, PermissionError):
        return False


def _home_dir(sub: str) -> Path:
    """Return ~/.trendpath/<sub>."""
    return Path.home() / ".trendpath" / sub


def _resolve_dir(sub: str) -> Path:
    primary = _get_base_dir() / sub
    if _try_writable(primary):
        return primary
    fallback = _home_dir(sub)
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_data_dir() -> Path:
    """
    Data directory.

    Priority:
      1. <base_dir>/data
      2. ~/.trendpath/data  (if base_dir is read-only)
    """
    return _resolve_dir("data")


def get_logs_dir() -> Path:
    """
    Logs directory.

    Priority:
      1. <base_dir>/logs
      2. ~/.trendpath/logs
    """
    return _resolve_dir("logs")


def get_settings_path() -> Path:
    """Full path to settings.json."""
    return get_data_dir() / "settings.json"

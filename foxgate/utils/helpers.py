"""Utility functions for foxgate runtime paths and helpers."""

import os
import time
from pathlib import Path

DATA_DIR_NAME = ".foxgate"


def now_ms() -> int:
    """Current timestamp in milliseconds since the epoch."""
    return int(time.time() * 1000)


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """
    Get the runtime data directory.

    Priority:
    1. `FOXGATE_DATA_DIR` env override
    2. `~/.foxgate`
    """
    env_path = str(os.environ.get("FOXGATE_DATA_DIR") or "").strip()
    if env_path:
        return ensure_dir(Path(env_path).expanduser())
    return ensure_dir(Path.home() / DATA_DIR_NAME)

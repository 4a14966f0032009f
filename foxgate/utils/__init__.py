"""Utility functions for foxgate."""

from foxgate.utils.helpers import ensure_dir, get_data_path, now_ms
from foxgate.utils.rwlock import ReadWriteLock

__all__ = ["ReadWriteLock", "ensure_dir", "get_data_path", "now_ms"]

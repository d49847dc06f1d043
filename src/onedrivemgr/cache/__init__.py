"""Cache exports for onedrivemgr."""

from __future__ import annotations

from .drive_cache import DriveCache

__all__ = ["DriveCache"]

"""Children collection exports for onedrivemgr."""

from __future__ import annotations

from .fetcher import collect_children

__all__ = ["collect_children"]

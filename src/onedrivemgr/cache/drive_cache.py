"""Canonical Drive instances, one per drive id."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from onedrivemgr.errors import InternalConsistencyError
from onedrivemgr.models import Drive

logger = logging.getLogger(__name__)


class DriveCache:
    """
    Registry mapping a drive id to the one Drive instance used for it.

    The first Drive built for an id stays canonical for the cache's
    lifetime; later decodes of the same id get that instance back untouched.
    There is no eviction.
    """

    def __init__(self) -> None:
        self._drives: dict[str, Drive] = {}
        self._lock = threading.Lock()

    def get(self, drive_id: str) -> Optional[Drive]:
        return self._drives.get(drive_id)

    def get_or_insert(self, drive_id: str, builder: Callable[[], Drive]) -> Drive:
        """
        Return the canonical Drive for `drive_id`, building it if absent.

        `builder` runs at most once per id, under the cache lock.

        Raises:
            InternalConsistencyError: if `builder` returns a Drive with another id.
        """
        drive = self._drives.get(drive_id)
        if drive is not None:
            return drive

        with self._lock:
            drive = self._drives.get(drive_id)
            if drive is not None:
                return drive

            drive = builder()
            if drive.id != drive_id:
                raise InternalConsistencyError(
                    "Drive builder returned a drive with a different id",
                    details={"drive_id": drive_id, "built_id": drive.id},
                )
            self._drives[drive_id] = drive
            logger.debug("Cached drive %s (%d cached)", drive_id, len(self._drives))
            return drive

    def __contains__(self, drive_id: object) -> bool:
        return drive_id in self._drives

    def __len__(self) -> int:
        return len(self._drives)

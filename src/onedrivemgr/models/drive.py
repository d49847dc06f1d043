"""Drive model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .references import IdentitySet


@dataclass(frozen=True)
class DriveQuota:
    """Storage quota of a drive. Every field is reported independently."""

    state: Optional[str] = None
    total: Optional[int] = None
    used: Optional[int] = None
    deleted: Optional[int] = None
    remaining: Optional[int] = None


@dataclass(frozen=True, eq=False)
class Drive:
    """
    A drive (personal, business or document library).

    Notes:
        - Equality and hashing use `id` only.
        - Instances are immutable; a DriveCache keeps the first one seen per id.
    """

    id: str
    drive_type: Optional[str] = None
    owner: Optional[IdentitySet] = None
    quota: Optional[DriveQuota] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Drive):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

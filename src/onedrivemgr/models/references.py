"""Value objects that point at other resources: parents, paths, identities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

# Graph reports percent-encoded parent paths relative to the drive,
# e.g. "/drive/root:/My%20Documents".
_ROOT_MARKER = "root:"


@dataclass(frozen=True)
class ItemReference:
    """
    Weak reference to a parent item (by id), as reported by `parentReference`.

    Holding an ItemReference never keeps the parent object alive.
    """

    drive_id: Optional[str] = None
    drive_type: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None

    def drive_relative_path(self) -> Optional[str]:
        """Parent path below the drive root ("" for the root itself)."""
        if self.path is None:
            return None
        _, marker, rest = self.path.partition(_ROOT_MARKER)
        if not marker:
            return None
        return unquote(rest.rstrip("/"))


@dataclass(frozen=True)
class PathPointer:
    """Absolute path of an item inside one drive."""

    path: str
    drive_id: Optional[str] = None

    @classmethod
    def for_child(cls, parent: ItemReference, name: str) -> Optional[PathPointer]:
        parent_path = parent.drive_relative_path()
        if parent_path is None:
            return None
        return cls(path=f"{parent_path}/{name}", drive_id=parent.drive_id)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class Identity:
    id: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class IdentitySet:
    """Who owns or touched a resource: a user, an application and/or a device."""

    user: Optional[Identity] = None
    application: Optional[Identity] = None
    device: Optional[Identity] = None

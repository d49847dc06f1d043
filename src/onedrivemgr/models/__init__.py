"""Public model exports for onedrivemgr."""

from __future__ import annotations

from .children import ChildrenBuffer, ChildrenSnapshot
from .drive import Drive, DriveQuota
from .items import BaseItem, FileItem, FolderItem, ItemKind, OtherItem
from .page import Page
from .references import Identity, IdentitySet, ItemReference, PathPointer

__all__ = [
    "ItemKind",
    "BaseItem",
    "FolderItem",
    "FileItem",
    "OtherItem",
    "ChildrenBuffer",
    "ChildrenSnapshot",
    "Drive",
    "DriveQuota",
    "Identity",
    "IdentitySet",
    "ItemReference",
    "PathPointer",
    "Page",
]

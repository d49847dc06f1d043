"""Drive item models: folders, files and everything else."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Optional, cast

from onedrivemgr.errors import InternalConsistencyError

from .references import ItemReference, PathPointer

if TYPE_CHECKING:
    from onedrivemgr.client import OneDriveClient

    from .children import ChildrenSnapshot

logger = logging.getLogger(__name__)


class ItemKind(str, Enum):
    """Closed set of item variants produced by the decoder."""

    FOLDER = "folder"
    FILE = "file"
    OTHER = "other"


class BaseItem:
    """
    Common part of every drive item.

    Items are created by the decoder and updated in place by `refresh_by`.
    The parent is only referenced by id (`parent_reference`).
    """

    kind: ItemKind = ItemKind.OTHER

    def __init__(
        self,
        client: OneDriveClient,
        *,
        id: str,
        name: str,
        parent_reference: Optional[ItemReference] = None,
        created_time: Optional[datetime] = None,
        last_modified_time: Optional[datetime] = None,
        e_tag: Optional[str] = None,
        c_tag: Optional[str] = None,
        size: Optional[int] = None,
        web_url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        self._client = client
        self.id = id
        self._assign_common(
            name=name,
            parent_reference=parent_reference,
            created_time=created_time,
            last_modified_time=last_modified_time,
            e_tag=e_tag,
            c_tag=c_tag,
            size=size,
            web_url=web_url,
            description=description,
        )

    def _assign_common(
        self,
        *,
        name: str,
        parent_reference: Optional[ItemReference],
        created_time: Optional[datetime],
        last_modified_time: Optional[datetime],
        e_tag: Optional[str],
        c_tag: Optional[str],
        size: Optional[int],
        web_url: Optional[str],
        description: Optional[str],
    ) -> None:
        self.name = name
        self.parent_reference = parent_reference
        self.created_time = created_time
        self.last_modified_time = last_modified_time
        self.e_tag = e_tag
        self.c_tag = c_tag
        self.size = size
        self.web_url = web_url
        self.description = description
        self.path_pointer: Optional[PathPointer] = (
            PathPointer.for_child(parent_reference, name) if parent_reference else None
        )

    @property
    def path(self) -> Optional[str]:
        return self.path_pointer.path if self.path_pointer else None

    @property
    def drive_id(self) -> Optional[str]:
        if self.parent_reference is None:
            return None
        return self.parent_reference.drive_id

    def refresh(self) -> None:
        """Re-fetch this item and overwrite its fields with the server's state."""
        self._client.refresh(self)

    def refresh_by(self, new_item: BaseItem) -> None:
        """
        Overwrite this item's fields with those of a freshly decoded item.

        Raises:
            InternalConsistencyError: if `new_item` is a different item or variant.
        """
        if type(new_item) is not type(self):
            raise InternalConsistencyError(
                "Cannot refresh an item from a different item variant",
                details={
                    "id": self.id,
                    "expected": type(self).__name__,
                    "actual": type(new_item).__name__,
                },
            )
        if new_item.id != self.id:
            raise InternalConsistencyError(
                "Cannot refresh an item from a different item id",
                details={"id": self.id, "new_id": new_item.id},
            )

        self._assign_common(
            name=new_item.name,
            parent_reference=new_item.parent_reference,
            created_time=new_item.created_time,
            last_modified_time=new_item.last_modified_time,
            e_tag=new_item.e_tag,
            c_tag=new_item.c_tag,
            size=new_item.size,
            web_url=new_item.web_url,
            description=new_item.description,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r})"


class FileItem(BaseItem):
    kind = ItemKind.FILE

    def __init__(
        self,
        client: OneDriveClient,
        *,
        mime_type: Optional[str] = None,
        hashes: Optional[dict[str, Any]] = None,
        **common: Any,
    ) -> None:
        super().__init__(client, **common)
        self.mime_type = mime_type
        self.hashes = dict(hashes or {})

    def refresh_by(self, new_item: BaseItem) -> None:
        super().refresh_by(new_item)
        fresh = cast(FileItem, new_item)
        self.mime_type = fresh.mime_type
        self.hashes = dict(fresh.hashes)


class OtherItem(BaseItem):
    """An item that is neither a folder nor a file (e.g. a package or a remote item)."""

    kind = ItemKind.OTHER

    def __init__(
        self,
        client: OneDriveClient,
        *,
        facet: Optional[str] = None,
        **common: Any,
    ) -> None:
        super().__init__(client, **common)
        self.facet = facet

    def refresh_by(self, new_item: BaseItem) -> None:
        super().refresh_by(new_item)
        self.facet = cast(OtherItem, new_item).facet


class FolderItem(BaseItem):
    """
    A folder whose children are materialized lazily.

    Children are held as one immutable ChildrenSnapshot. `None` means not
    fetched yet; the first call to any children accessor fetches every page
    and publishes the snapshot in a single assignment, so readers never see
    a partially filled set of views. Any refresh drops the snapshot.

    Concurrent first accesses share one fetch. A refresh that lands while a
    fetch is in flight wins: the stale result is not published.
    """

    kind = ItemKind.FOLDER

    def __init__(
        self,
        client: OneDriveClient,
        *,
        child_count: int = 0,
        special_folder: Optional[str] = None,
        root: bool = False,
        root_drive_id: Optional[str] = None,
        children: Optional[ChildrenSnapshot] = None,
        **common: Any,
    ) -> None:
        super().__init__(client, **common)
        _check_root_invariant(self.id, root, self.parent_reference)

        self.child_count = child_count
        self.special_folder = special_folder
        self._root = root
        self._root_drive_id = root_drive_id
        if root:
            self.path_pointer = PathPointer("/", self.drive_id)

        self._children: Optional[ChildrenSnapshot] = children
        self._generation = 0
        self._state_lock = threading.Lock()
        self._fetch_lock = threading.Lock()

    # ----------------------------
    # State
    # ----------------------------
    def is_root(self) -> bool:
        return self._root

    def is_special(self) -> bool:
        return self.special_folder is not None

    def is_children_fetched(self) -> bool:
        return self._children is not None

    def children_count(self) -> int:
        """Child count reported by the server; may differ from the fetched children."""
        return self.child_count

    @property
    def drive_id(self) -> Optional[str]:
        if self._root:
            # Consumer item ids are prefixed with the drive id.
            return self._root_drive_id or self.id.split("!")[0]
        return super().drive_id

    # ----------------------------
    # Children views
    # ----------------------------
    def all_children(self) -> tuple[BaseItem, ...]:
        return self._materialize().all

    def folder_children(self) -> tuple[FolderItem, ...]:
        return self._materialize().folders

    def file_children(self) -> tuple[FileItem, ...]:
        return self._materialize().files

    def __iter__(self) -> Iterator[BaseItem]:
        return iter(self.all_children())

    def refresh_by(self, new_item: BaseItem) -> None:
        if isinstance(new_item, FolderItem):
            _check_root_invariant(self.id, new_item.is_root(), new_item.parent_reference)
        super().refresh_by(new_item)
        fresh = cast(FolderItem, new_item)

        self.child_count = fresh.child_count
        self.special_folder = fresh.special_folder
        self._root = fresh.is_root()
        self._root_drive_id = fresh._root_drive_id
        if self._root:
            self.path_pointer = PathPointer("/", self.drive_id)

        with self._state_lock:
            self._generation += 1
            self._children = None

    # ----------------------------
    # Internals
    # ----------------------------
    def _materialize(self) -> ChildrenSnapshot:
        snapshot = self._children
        if snapshot is not None:
            return snapshot

        with self._fetch_lock:
            snapshot = self._children
            if snapshot is not None:
                return snapshot

            with self._state_lock:
                generation = self._generation

            snapshot = self._client.fetch_children(self)

            with self._state_lock:
                if generation == self._generation:
                    self._children = snapshot
                else:
                    logger.debug(
                        "Folder %s was refreshed during fetch; not publishing children",
                        self.id,
                    )
            return snapshot


def _check_root_invariant(
    item_id: str,
    root: bool,
    parent_reference: Optional[ItemReference],
) -> None:
    if root and parent_reference is not None:
        raise InternalConsistencyError(
            "Root folder must not have a parent reference",
            details={"id": item_id},
        )
    if not root and parent_reference is None:
        raise InternalConsistencyError(
            "Non-root folder must have a parent reference",
            details={"id": item_id},
        )

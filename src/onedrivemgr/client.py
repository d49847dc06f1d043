"""OneDriveClient: entry point tying transport, decoder and caches together."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from onedrivemgr.auth import AuthInfo
from onedrivemgr.cache import DriveCache
from onedrivemgr.children import collect_children
from onedrivemgr.config import ClientConfig
from onedrivemgr.errors import MalformedResponseError
from onedrivemgr.models import BaseItem, ChildrenSnapshot, Drive, FolderItem, Page
from onedrivemgr.models.decode import decode_drive, decode_item
from onedrivemgr.transport import GraphTransport, endpoints

logger = logging.getLogger(__name__)


class OneDriveClient:
    """
    High-level access to one account's drives and items.

    The client owns the DriveCache, so Drive canonicalization is scoped to the
    client's lifetime rather than the process.
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._transport = GraphTransport.from_auth(auth_info, scopes=scopes, config=config)
        self._drive_cache = DriveCache()

    @classmethod
    def from_transport(
        cls,
        transport: GraphTransport,
        *,
        drive_cache: Optional[DriveCache] = None,
    ) -> OneDriveClient:
        """Create client with an injected transport (useful for tests)."""
        obj = cls.__new__(cls)
        obj._transport = transport
        obj._drive_cache = drive_cache if drive_cache is not None else DriveCache()
        return obj

    @property
    def transport(self) -> GraphTransport:
        return self._transport

    @property
    def drive_cache(self) -> DriveCache:
        return self._drive_cache

    # ----------------------------
    # Items
    # ----------------------------
    def get_item(self, item_id: str, *, expand_children: bool = False) -> BaseItem:
        """
        Fetch one item by id.

        With `expand_children`, a folder comes back with its children already
        materialized.
        """
        if not item_id:
            raise ValueError("item_id must be a non-empty string")
        data = self._transport.get_json(endpoints.item_api(item_id, expand_children=expand_children))
        return self.decode_item(data)

    def get_item_by_path(self, path: str) -> BaseItem:
        data = self._transport.get_json(endpoints.item_path_api(path))
        return self.decode_item(data)

    def get_root_folder(self) -> FolderItem:
        item = self.decode_item(self._transport.get_json(endpoints.ROOT_API))
        if not isinstance(item, FolderItem) or not item.is_root():
            raise MalformedResponseError(
                "Drive root is not a root folder",
                details={"id": item.id, "type": type(item).__name__},
            )
        return item

    def create_folder(self, parent_id: str, name: str) -> FolderItem:
        """Create a folder under `parent_id`; fails if the name is taken."""
        if not name or not name.strip():
            raise ValueError("name must be a non-empty string")
        body = {
            "name": name,
            "folder": {},
            "@microsoft.graph.conflictBehavior": "fail",
        }
        item = self.decode_item(self._transport.post_json(endpoints.children_api(parent_id), body))
        if not isinstance(item, FolderItem):
            raise MalformedResponseError(
                "Create folder did not return a folder",
                details={"id": item.id, "type": type(item).__name__},
            )
        return item

    def refresh(self, item: BaseItem) -> None:
        """Re-fetch `item` and update it in place (a folder's children are dropped)."""
        logger.debug("Refreshing %s %s", type(item).__name__, item.id)
        fresh = self.get_item(item.id)
        item.refresh_by(fresh)

    def fetch_children(self, folder: FolderItem) -> ChildrenSnapshot:
        """Fetch every page of `folder`'s children and return the frozen views."""
        first: Page = self._transport.fetch_page(endpoints.children_api(folder.id))
        return collect_children(self._transport, first.elements, first.next_link, self.decode_item)

    def decode_item(self, raw: Any) -> BaseItem:
        return decode_item(raw, client=self)

    # ----------------------------
    # Drives
    # ----------------------------
    def get_default_drive(self) -> Drive:
        return decode_drive(self._transport.get_json(endpoints.DRIVE_API), self._drive_cache)

    def list_drives(self) -> list[Drive]:
        drives: list[Drive] = []
        next_link: Optional[str] = endpoints.DRIVES_API
        while next_link is not None:
            page = self._transport.fetch_page(next_link)
            drives.extend(decode_drive(raw, self._drive_cache) for raw in page.elements)
            next_link = page.next_link
        return drives

    def cached_drive(self, drive_id: str) -> Optional[Drive]:
        """Return the canonical Drive for `drive_id` if one was decoded before."""
        return self._drive_cache.get(drive_id)

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> OneDriveClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

"""API paths for Microsoft Graph drive resources."""

from __future__ import annotations

from urllib.parse import quote

DRIVE_API: str = "/me/drive"
DRIVES_API: str = "/me/drives"
ROOT_API: str = f"{DRIVE_API}/root"
ITEM_ID_PREFIX: str = f"{DRIVE_API}/items/"


def item_api(item_id: str, *, expand_children: bool = False) -> str:
    api = ITEM_ID_PREFIX + quote(item_id, safe="!")
    if expand_children:
        api += "?$expand=children"
    return api


def children_api(item_id: str) -> str:
    return item_api(item_id) + "/children"


def item_path_api(path: str) -> str:
    """API path addressing an item by its path below the drive root."""
    stripped = path.strip("/")
    if not stripped:
        return ROOT_API
    return f"{ROOT_API}:/{quote(stripped)}"

"""Decoding of Graph JSON objects into onedrivemgr models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from onedrivemgr.cache import DriveCache
from onedrivemgr.children import collect_children
from onedrivemgr.errors import MalformedResponseError
from onedrivemgr.util.time import parse_optional_rfc3339

from .drive import Drive, DriveQuota
from .items import BaseItem, FileItem, FolderItem, OtherItem
from .references import Identity, IdentitySet, ItemReference

if TYPE_CHECKING:
    from onedrivemgr.client import OneDriveClient

INLINE_CHILDREN_KEY = "children"
INLINE_NEXT_LINK_KEY = "children@odata.nextLink"

# Facets that mark an item as neither folder nor file, in lookup order.
_OTHER_FACETS: tuple[str, ...] = ("package", "remoteItem")


def decode_item(raw: Any, *, client: OneDriveClient) -> BaseItem:
    """
    Decode one `driveItem` object into FolderItem, FileItem or OtherItem.

    A folder payload that embeds its children (`$expand=children`) comes back
    with its children already materialized; follow-up pages are fetched
    through the client's transport.

    Raises:
        MalformedResponseError: if `raw` is not an object or lacks id/name.
        InternalConsistencyError: if a folder breaks the root/parent rule.
    """
    obj = _require_object(raw, "driveItem")
    common = _decode_common(obj)

    if "folder" in obj:
        return _decode_folder(obj, common, client)

    if "file" in obj:
        file_facet = _optional_object(obj.get("file"), "file")
        return FileItem(
            client,
            mime_type=_str_or_none(file_facet.get("mimeType")),
            hashes=_optional_object(file_facet.get("hashes"), "file.hashes"),
            **common,
        )

    facet = next((name for name in _OTHER_FACETS if name in obj), None)
    return OtherItem(client, facet=facet, **common)


def decode_drive(raw: Any, cache: DriveCache) -> Drive:
    """
    Decode a `drive` object, returning the cache's canonical instance.

    If the id is already cached, the cached Drive is returned as-is and the
    new payload is ignored.
    """
    obj = _require_object(raw, "drive")
    drive_id = obj.get("id")
    if not isinstance(drive_id, str) or not drive_id:
        raise MalformedResponseError("Drive has no id", details={"keys": sorted(obj)})

    return cache.get_or_insert(drive_id, lambda: _build_drive(drive_id, obj))


def decode_item_reference(raw: Any) -> ItemReference:
    obj = _require_object(raw, "parentReference")
    return ItemReference(
        drive_id=_str_or_none(obj.get("driveId")),
        drive_type=_str_or_none(obj.get("driveType")),
        id=_str_or_none(obj.get("id")),
        name=_str_or_none(obj.get("name")),
        path=_str_or_none(obj.get("path")),
    )


def decode_identity_set(raw: Any) -> Optional[IdentitySet]:
    if raw is None:
        return None
    obj = _require_object(raw, "identitySet")
    return IdentitySet(
        user=_decode_identity(obj.get("user")),
        application=_decode_identity(obj.get("application")),
        device=_decode_identity(obj.get("device")),
    )


# ----------------------------
# Internals
# ----------------------------
def _decode_common(obj: dict[str, Any]) -> dict[str, Any]:
    item_id = obj.get("id")
    name = obj.get("name")
    if not isinstance(item_id, str) or not item_id:
        raise MalformedResponseError("driveItem has no id", details={"keys": sorted(obj)})
    if not isinstance(name, str):
        raise MalformedResponseError("driveItem has no name", details={"id": item_id})

    parent_raw = obj.get("parentReference")
    parent_reference = decode_item_reference(parent_raw) if parent_raw is not None else None

    return {
        "id": item_id,
        "name": name,
        "parent_reference": parent_reference,
        "created_time": parse_optional_rfc3339(obj.get("createdDateTime")),
        "last_modified_time": parse_optional_rfc3339(obj.get("lastModifiedDateTime")),
        "e_tag": _str_or_none(obj.get("eTag")),
        "c_tag": _str_or_none(obj.get("cTag")),
        "size": _int_or_none(obj.get("size")),
        "web_url": _str_or_none(obj.get("webUrl")),
        "description": _str_or_none(obj.get("description")),
    }


def _decode_folder(
    obj: dict[str, Any],
    common: dict[str, Any],
    client: OneDriveClient,
) -> FolderItem:
    folder_facet = _optional_object(obj.get("folder"), "folder")
    special = _optional_object(obj.get("specialFolder"), "specialFolder")
    root = obj.get("root") is not None

    # The root's parentReference only names its drive; it is not a parent.
    parent = common["parent_reference"]
    root_drive_id = None
    if root and parent is not None and parent.id is None:
        root_drive_id = parent.drive_id
        common["parent_reference"] = None

    children = None
    if INLINE_CHILDREN_KEY in obj:
        elements = obj[INLINE_CHILDREN_KEY]
        if not isinstance(elements, list):
            raise MalformedResponseError(
                "Inline children is not an array",
                details={"id": common["id"]},
            )
        next_link = _str_or_none(obj.get(INLINE_NEXT_LINK_KEY))
        children = collect_children(
            client.transport,
            elements,
            next_link,
            lambda element: decode_item(element, client=client),
        )

    return FolderItem(
        client,
        child_count=_int_or_none(folder_facet.get("childCount")) or 0,
        special_folder=_str_or_none(special.get("name")),
        root=root,
        root_drive_id=root_drive_id,
        children=children,
        **common,
    )


def _build_drive(drive_id: str, obj: dict[str, Any]) -> Drive:
    owner_raw = obj.get("owner", obj.get("identitySet"))
    quota_raw = obj.get("quota")

    quota = None
    if quota_raw is not None:
        q = _require_object(quota_raw, "quota")
        quota = DriveQuota(
            state=_str_or_none(q.get("state")),
            total=_int_or_none(q.get("total")),
            used=_int_or_none(q.get("used")),
            deleted=_int_or_none(q.get("deleted")),
            remaining=_int_or_none(q.get("remaining")),
        )

    return Drive(
        id=drive_id,
        drive_type=_str_or_none(obj.get("driveType")),
        owner=decode_identity_set(owner_raw),
        quota=quota,
    )


def _decode_identity(raw: Any) -> Optional[Identity]:
    if raw is None:
        return None
    obj = _require_object(raw, "identity")
    return Identity(
        id=_str_or_none(obj.get("id")),
        display_name=_str_or_none(obj.get("displayName")),
    )


def _require_object(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise MalformedResponseError(
            f"Expected a JSON object for {what}",
            details={"type": type(raw).__name__},
        )
    return raw


def _optional_object(raw: Any, what: str) -> dict[str, Any]:
    if raw is None:
        return {}
    return _require_object(raw, what)


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None

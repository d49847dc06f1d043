"""onedrivemgr public API."""

from __future__ import annotations

from onedrivemgr.auth import AuthInfo, OAuthClient
from onedrivemgr.cache import DriveCache
from onedrivemgr.client import OneDriveClient
from onedrivemgr.config import ClientConfig
from onedrivemgr.errors import (
    ApiError,
    AuthError,
    ConflictError,
    HttpErrorInfo,
    InternalConsistencyError,
    InterruptedWaitError,
    InvalidArgumentError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    OneDriveMgrError,
    PermissionError,
    ProtocolError,
    QuotaExceededError,
    RateLimitError,
    map_http_error,
)
from onedrivemgr.models import (
    BaseItem,
    ChildrenSnapshot,
    Drive,
    DriveQuota,
    FileItem,
    FolderItem,
    IdentitySet,
    ItemKind,
    ItemReference,
    OtherItem,
    Page,
)

__all__ = [
    # High-level
    "OneDriveClient",
    "ClientConfig",
    "DriveCache",
    # Auth
    "AuthInfo",
    "OAuthClient",
    # Models
    "ItemKind",
    "BaseItem",
    "FolderItem",
    "FileItem",
    "OtherItem",
    "ChildrenSnapshot",
    "Drive",
    "DriveQuota",
    "IdentitySet",
    "ItemReference",
    "Page",
    # Errors
    "OneDriveMgrError",
    "ProtocolError",
    "InvalidArgumentError",
    "AuthError",
    "PermissionError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "ApiError",
    "NetworkError",
    "MalformedResponseError",
    "InternalConsistencyError",
    "InterruptedWaitError",
    "HttpErrorInfo",
    "map_http_error",
]

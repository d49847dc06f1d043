"""Public error exports for onedrivemgr."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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

"""Exception hierarchy and HTTP error mapping for onedrivemgr."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class OneDriveMgrError(Exception):
    """
    Base exception for onedrivemgr.

    Attributes:
        details: Optional structured information (e.g., HTTP status, error code).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ProtocolError(OneDriveMgrError):
    """
    Raised when the server answers with a non-success status.

    `code` and `message` are taken verbatim from the Graph error body
    (`{"error": {"code": ..., "message": ...}}`) when one was returned.
    """

    @property
    def status_code(self) -> int:
        return int(self.details.get("status_code") or 0)

    @property
    def code(self) -> Optional[str]:
        return self.details.get("code")


class InvalidArgumentError(ProtocolError):
    """Raised when request arguments are invalid (HTTP 400)."""


class AuthError(ProtocolError):
    """Raised when authentication fails (HTTP 401, token load/refresh failures)."""


class PermissionError(ProtocolError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class NotFoundError(ProtocolError):
    """Raised when a drive resource is not found (HTTP 404)."""


class ConflictError(ProtocolError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(ProtocolError):
    """Raised when throttled (HTTP 429)."""


class QuotaExceededError(ProtocolError):
    """Raised when the drive quota is exhausted (HTTP 403/507 with a quota code)."""


class ApiError(ProtocolError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class NetworkError(OneDriveMgrError):
    """Raised when network/timeout issues prevent the request."""


class MalformedResponseError(OneDriveMgrError):
    """Raised when a response does not have the expected page/item/drive shape."""


class InternalConsistencyError(OneDriveMgrError):
    """Raised when a structural invariant of the object model is violated."""


class InterruptedWaitError(OneDriveMgrError):
    """Raised when a blocking wait on an asynchronous request is interrupted."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to onedrivemgr exceptions."""

    status_code: int
    code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_CODE_KEYWORDS: tuple[str, ...] = (
    "quotaLimitReached",
    "insufficientStorage",
    "quota",
)


def _is_quota_code(code: str | None) -> bool:
    if not code:
        return False
    return any(key.lower() in code.lower() for key in _QUOTA_CODE_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> ProtocolError:
    """
    Map an HTTP error to an onedrivemgr exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError, or QuotaExceededError if the code is quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 507 -> QuotaExceededError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "code": info.code,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_code(info.code):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)
    if info.status_code == 507:
        return QuotaExceededError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)

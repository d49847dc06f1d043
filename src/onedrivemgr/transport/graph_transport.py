"""Microsoft Graph HTTP transport (internal use only)."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

import requests

from onedrivemgr.auth import AuthInfo, OAuthClient
from onedrivemgr.config import DEFAULT_SCOPES, ClientConfig
from onedrivemgr.errors import (
    ApiError,
    HttpErrorInfo,
    InternalConsistencyError,
    MalformedResponseError,
    NetworkError,
    OneDriveMgrError,
    RateLimitError,
    map_http_error,
)
from onedrivemgr.models.page import Page

from .bridge import mark_network_thread

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GraphTransport:
    """
    Blocking and thread-pool backed access to the Graph REST API.

    Notes:
        - `session` is any requests-compatible session that already carries
          authorization (normally google-auth's AuthorizedSession).
        - Async requests run on a bounded pool owned by the transport; callers
          block on them through ResponseBridge, never on a pool thread.
    """

    def __init__(
        self,
        session: Any,
        *,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._session = session
        self._config = config or ClientConfig()
        self._retry_policy = _RetryPolicy(
            max_retries=self._config.max_retries,
            initial_delay_sec=self._config.initial_retry_delay_sec,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.max_network_workers,
            thread_name_prefix="onedrivemgr-net",
            initializer=mark_network_thread,
        )
        self._closed = False
        self._lifecycle_lock = threading.Lock()

    @classmethod
    def from_auth(
        cls,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
        config: Optional[ClientConfig] = None,
    ) -> GraphTransport:
        """Create a transport with an OAuth-authorized session."""
        use_scopes = list(scopes) if scopes is not None else list(DEFAULT_SCOPES)
        session = OAuthClient(auth_info).build_session(use_scopes, ensure_valid=True)
        return cls(session, config=config)

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ----------------------------
    # Public API
    # ----------------------------
    def url_for(self, api: str) -> str:
        """Resolve an API path against base_url; absolute URLs pass through."""
        if api.startswith(("http://", "https://")):
            return api
        if not api.startswith("/"):
            raise ValueError(f"API path must start with '/': {api!r}")
        return self._config.base_url.rstrip("/") + api

    def get_json(self, api: str) -> dict[str, Any]:
        return self._request_json("GET", api)

    def post_json(self, api: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._request_json("POST", api, body=body)

    def fetch_page(self, url: str) -> Page:
        """Fetch one collection page and block until it arrives."""
        return Page.from_json(self.get_json(url))

    def fetch_page_async(self, url: str) -> Future[Page]:
        """Submit a page fetch to the network pool and return its handle."""
        with self._lifecycle_lock:
            self._ensure_open(url)
            return self._executor.submit(self.fetch_page, url)

    def close(self) -> None:
        with self._lifecycle_lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        close = getattr(self._session, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> GraphTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _request_json(
        self,
        method: str,
        api: str,
        *,
        body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        url = self.url_for(api)
        self._ensure_open(url)

        def send() -> dict[str, Any]:
            logger.debug("%s %s", method, url)
            response = self._session.request(
                method,
                url,
                json=body,
                timeout=self._config.request_timeout_sec,
            )
            return _parse_response(response, url=url)

        return self._execute(send)

    def _ensure_open(self, url: str) -> None:
        if self._closed:
            raise InternalConsistencyError("Transport is closed", details={"url": url})

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    wait_sec = max(delay, _retry_after(mapped))
                    logger.warning(
                        "Retrying after %s (attempt %d/%d, sleeping %.1fs)",
                        mapped.__class__.__name__,
                        attempt + 1,
                        self._retry_policy.max_retries,
                        wait_sec,
                    )
                    time.sleep(wait_sec)
                    delay *= 2
                    continue
                if mapped is exc:
                    raise
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, (RateLimitError, NetworkError)):
            return True
        if isinstance(exc, ApiError):
            return 500 <= exc.status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, OneDriveMgrError):
            return exc
        if isinstance(exc, (requests.RequestException, OSError)):
            return NetworkError("Network error", details={"error": str(exc)}, cause=exc)
        return exc


def _parse_response(response: Any, *, url: str) -> dict[str, Any]:
    status = response.status_code
    if not 200 <= status <= 299:
        raise map_http_error(_response_to_info(response, url=url))

    if status == 204 or not response.content:
        return {}

    try:
        payload = response.json()
    except ValueError as exc:
        raise MalformedResponseError(
            "Response body is not valid JSON",
            details={"status_code": status, "url": url},
            cause=exc,
        ) from exc

    if not isinstance(payload, dict):
        raise MalformedResponseError(
            "Response body is not a JSON object",
            details={"status_code": status, "url": url},
        )
    return payload


def _response_to_info(response: Any, *, url: str) -> HttpErrorInfo:
    code = None
    message = None
    details: dict[str, Any] = {"url": url}

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        code = err.get("code") if isinstance(err.get("code"), str) else None
        message = err.get("message") if isinstance(err.get("message"), str) else None
        inner = err.get("innerError")
        if isinstance(inner, dict) and isinstance(inner.get("request-id"), str):
            details["request_id"] = inner["request-id"]

    retry_after = response.headers.get("Retry-After") if response.headers else None
    if isinstance(retry_after, str) and retry_after.isdigit():
        details["retry_after"] = int(retry_after)

    return HttpErrorInfo(
        status_code=_status_code(response),
        code=code,
        message=message,
        details=details,
    )


def _status_code(response: Any) -> int:
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else 0


def _retry_after(exc: Exception) -> float:
    value = getattr(exc, "details", {}).get("retry_after")
    return float(value) if isinstance(value, int) else 0.0

"""Client configuration for onedrivemgr."""

from __future__ import annotations

from dataclasses import dataclass

GRAPH_BASE_URL: str = "https://graph.microsoft.com/v1.0"

DEFAULT_SCOPES: tuple[str, ...] = (
    "https://graph.microsoft.com/Files.ReadWrite.All",
    "offline_access",
)


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings shared by OneDriveClient and GraphTransport.

    Attributes:
        base_url: API root; relative API paths are joined onto it.
        max_network_workers: Size of the thread pool that runs async requests.
        max_retries: Retries for throttling, 5xx and network failures.
        initial_retry_delay_sec: First backoff delay (doubled per retry).
        request_timeout_sec: Per-request timeout handed to the HTTP session.
    """

    base_url: str = GRAPH_BASE_URL
    max_network_workers: int = 4
    max_retries: int = 3
    initial_retry_delay_sec: float = 1.0
    request_timeout_sec: float = 30.0

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("ClientConfig.base_url must be an http(s) URL")
        if self.max_network_workers < 1:
            raise ValueError("ClientConfig.max_network_workers must be >= 1")
        if self.max_retries < 0:
            raise ValueError("ClientConfig.max_retries must be >= 0")
        if self.initial_retry_delay_sec < 0:
            raise ValueError("ClientConfig.initial_retry_delay_sec must be >= 0")
        if self.request_timeout_sec <= 0:
            raise ValueError("ClientConfig.request_timeout_sec must be > 0")

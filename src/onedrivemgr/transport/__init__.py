"""Internal transport exports for onedrivemgr."""

from __future__ import annotations

from .bridge import ResponseBridge, is_network_thread
from .graph_transport import GraphTransport

__all__ = ["GraphTransport", "ResponseBridge", "is_network_thread"]

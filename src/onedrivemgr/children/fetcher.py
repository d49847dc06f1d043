"""Pipelined retrieval of a paginated children collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from onedrivemgr.models import BaseItem, ChildrenBuffer, ChildrenSnapshot
from onedrivemgr.transport.bridge import ResponseBridge

if TYPE_CHECKING:
    from onedrivemgr.transport import GraphTransport

logger = logging.getLogger(__name__)

Decoder = Callable[[Any], BaseItem]


def collect_children(
    transport: GraphTransport,
    elements: Sequence[Any],
    next_link: Optional[str],
    decode: Decoder,
) -> ChildrenSnapshot:
    """
    Decode every page of a children collection, starting from a page in hand.

    While a continuation link exists, the request for the next page is sent
    before the current page is decoded, so decoding overlaps the round trip.
    Pages are consumed strictly in server order.

    Args:
        transport: Issues the follow-up page requests.
        elements: Raw elements of the first page.
        next_link: Continuation link of the first page, or None.
        decode: Turns one raw element into an item.

    Returns:
        The frozen children views.

    Raises:
        Whatever a page request or `decode` raises. Nothing is returned in that
        case, and a page request still in flight is cancelled.
    """
    buffer = ChildrenBuffer()
    pages = 1

    while next_link is not None:
        bridge: ResponseBridge = ResponseBridge.attach(transport.fetch_page_async(next_link))
        try:
            buffer.extend(decode(raw) for raw in elements)
            page = bridge.wait()
        except BaseException:
            logger.warning(
                "Collecting children stopped at page %d; cancelling next page request",
                pages,
            )
            bridge.cancel()
            raise

        pages += 1
        elements, next_link = page.elements, page.next_link

    buffer.extend(decode(raw) for raw in elements)

    snapshot = buffer.freeze()
    logger.debug(
        "Collected %d children (%d folders, %d files) from %d page(s)",
        len(snapshot.all),
        len(snapshot.folders),
        len(snapshot.files),
        pages,
    )
    return snapshot

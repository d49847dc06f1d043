"""One page of a paginated collection response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from onedrivemgr.errors import MalformedResponseError

VALUE_KEY = "value"
NEXT_LINK_KEY = "@odata.nextLink"


@dataclass(frozen=True)
class Page:
    """
    Raw (undecoded) elements of one page plus the server's continuation link.

    `next_link` is opaque: it is only ever handed back to the transport.
    """

    elements: tuple[Any, ...]
    next_link: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return self.next_link is None

    @classmethod
    def from_json(cls, payload: Any) -> Page:
        """
        Build a Page from a collection response body.

        Raises:
            MalformedResponseError: if the body is not an object with a
                `value` array, or the continuation link is not a string.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                "Collection response is not a JSON object",
                details={"type": type(payload).__name__},
            )
        elements = payload.get(VALUE_KEY)
        if not isinstance(elements, list):
            raise MalformedResponseError(
                "Collection response has no 'value' array",
                details={"keys": sorted(payload)},
            )
        return cls(
            elements=tuple(elements),
            next_link=_link_or_none(payload.get(NEXT_LINK_KEY)),
        )


def _link_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise MalformedResponseError(
            "Continuation link must be a non-empty string",
            details={"next_link": value},
        )
    return value

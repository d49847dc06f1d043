from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

# Graph may send up to 7 fractional digits; datetime keeps 6.
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp string into a tz-aware UTC datetime.

    Accepts strings like:
      - 2025-01-01T12:34:56Z
      - 2025-01-01T12:34:56.1234567Z
      - 2025-01-01T12:34:56+09:00
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        raise ValueError("RFC3339 value must carry a UTC offset")
    return dt.astimezone(timezone.utc)


def parse_optional_rfc3339(value: Any) -> Optional[datetime]:
    """Lenient variant for metadata fields: None for absent or unparsable values."""
    if not isinstance(value, str):
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None

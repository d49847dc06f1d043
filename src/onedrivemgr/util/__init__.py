from .time import parse_optional_rfc3339, parse_rfc3339

__all__ = [
    "parse_rfc3339",
    "parse_optional_rfc3339",
]

"""Parse the raw ``<id>`` argument of a command."""

from __future__ import annotations

import re

from .errors import InvalidParameter, MissingParameter

__all__ = ["validate_id"]

# Leading integer, trailing text ignored: "12abc" -> 12, "07" -> 7.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def validate_id(raw: str | None) -> int:
    """Return the integer id in ``raw`` without checking that it exists."""

    if raw is None:
        raise MissingParameter("id")
    match = _LEADING_INT.match(raw)
    if match is None:
        raise InvalidParameter(raw, "id")
    return int(match.group(1))

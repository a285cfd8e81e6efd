"""Boundary parsing for ISO-8601 timestamps handed over by the data layer.

The reveal predicates never see strings.  Anything that cannot be turned
into a UTC-aware datetime here becomes ``None``, which the policy reports
as the ``unknown`` reveal state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse *value* into a UTC-aware datetime, or None if absent/invalid.

    Naive values are assumed to be UTC.  A trailing ``Z`` is accepted.
    Instants that cannot be expressed in UTC (offsets pushing them past
    year 1 or 9999) count as invalid.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        logger.debug("Timestamp %r falls outside the representable UTC range", value)
        return None


def to_iso(value: datetime | None) -> str | None:
    """Render a datetime as ISO-8601 UTC with a ``Z`` suffix."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

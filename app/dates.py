"""Date coercion for production records.

All parsing follows a fixed UTC policy: naive values are taken to be UTC and
aware values are converted to UTC before the calendar date is taken, so the
same input yields the same ``YYYY-MM-DD`` string on every host.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Iterable

from dateutil import parser as date_parser

# Components missing from a parsed string (year, month, day) are filled from
# this anchor instead of from the current date.
_PARSE_DEFAULT = datetime(1970, 1, 1)


def _utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def parse_date(value: Any) -> date | None:
    """Parse ``value`` to a calendar date under the UTC policy, or ``None``."""
    if isinstance(value, datetime):
        return _utc_date(value)

    if isinstance(value, date):
        return value

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None

    text = str(value).strip()
    if not text:
        return None

    try:
        parsed = date_parser.parse(text, default=_PARSE_DEFAULT)
    except (ValueError, OverflowError):
        return None

    return _utc_date(parsed)


def to_iso_date(value: Any) -> str:
    """Coerce ``value`` to a ``YYYY-MM-DD`` string.

    Falsy input gives ``""``.  Numbers are epoch milliseconds.  When the value
    cannot be parsed the first ten characters of its string form are returned
    unchanged as a best-effort passthrough.
    """
    if not value:
        return ""

    parsed = parse_date(value)
    if parsed is None:
        return str(value)[:10]
    return parsed.isoformat()


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def default_date_range(records: Iterable[dict]) -> tuple[str, str]:
    """Return the earliest and latest normalized ``date`` in ``records``.

    Falls back to today's date (UTC) for both ends when no record carries a
    usable date.
    """
    dates = sorted(d for d in (to_iso_date(row.get("date")) for row in records or []) if d)
    if not dates:
        today = today_iso()
        return today, today
    return dates[0], dates[-1]

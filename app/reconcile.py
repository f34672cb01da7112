"""Join production rows with the rejection rows recorded against them."""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from app.dates import to_iso_date
from app.normalize import coerce_number

NO_REASON = "-"

# Rejection rows may still carry a raw column name at join time, so the
# rejected count is read from the first of these fields holding a number.
REJECTED_QUANTITY_FIELDS: tuple[str, ...] = (
    "quantity",
    "quantity_rejected",
    "cantidadRechazada",
)


def round2(value: float) -> float:
    """Round half away from zero to two decimals on the exact binary value."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def rejection_rate(rejected: float, produced: float) -> float:
    """Percentage of ``produced`` that was rejected, or ``0`` without output."""
    if produced > 0:
        return round2(rejected / produced * 100.0)
    return 0.0


def rejected_units(row: dict, fields: Sequence[str] = REJECTED_QUANTITY_FIELDS) -> float:
    for name in fields:
        number = coerce_number(row.get(name), default=None)
        if number is not None:
            return number
    return 0.0


def _text_key(value) -> str:
    return str(value if value is not None else "").strip()


def composite_key(row: dict) -> tuple[str, str, str]:
    """Return the (date, operator, model) key used to match rows.

    Matching is exact and case-sensitive once whitespace is trimmed.
    """
    return (
        to_iso_date(row.get("date")),
        _text_key(row.get("operator")),
        _text_key(row.get("model")),
    )


def reconcile(productions: Iterable[dict], rejections: Iterable[dict]) -> list[dict]:
    """Attach rejected totals, rate and primary reason to each production row.

    Every production row yields exactly one enriched row.  Rejections whose key
    matches no production row are ignored.
    """
    by_key: defaultdict[tuple[str, str, str], list[dict]] = defaultdict(list)
    for row in rejections or []:
        by_key[composite_key(row)].append(row)

    enriched = []
    for prod in productions or []:
        key = composite_key(prod)
        matches = by_key.get(key, [])
        rejected = sum(rejected_units(r) for r in matches)
        produced = coerce_number(prod.get("quantity"), default=0.0)
        enriched.append(
            {
                **prod,
                "date": key[0],
                "quantity": produced,
                "rejected_quantity": float(rejected),
                "rejection_rate": rejection_rate(rejected, produced),
                "primary_reason": matches[0].get("reason", NO_REASON) if matches else NO_REASON,
            }
        )
    return enriched

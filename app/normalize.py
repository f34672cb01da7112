"""Map raw production and rejection rows onto canonical field names.

Raw rows come straight from the upstream export and their column names vary
between sources.  Every canonical field is located with :func:`guess_key` and
then coerced with an explicit default, so normalisation never raises for a
malformed row.  The raw columns are kept alongside the canonical ones.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from app.dates import to_iso_date
from app.fields import guess_key
from config.field_candidates import DEFAULT_FIELD_CANDIDATES, FieldCandidates

UNKNOWN_MODEL = "Desconocido"
UNASSIGNED_OPERATOR = "Sin Asignar"
UNKNOWN_REASON = "Desconocido"

_GROUPED_NUMBER = re.compile(r'^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$')

_INVALID_NUMBER_TOKENS = {
    'nan',
    '+nan',
    '-nan',
    'inf',
    '+inf',
    '-inf',
    'infinity',
    '+infinity',
    '-infinity',
}


def coerce_number(value, *, default=0.0):
    """Convert a raw cell value to a non-negative float.

    Commas are accepted only as strict thousands grouping (``1,234``).
    Anything that is not a finite, non-negative number yields ``default``,
    including decimal-comma text such as ``1,5`` and percentages.
    """

    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return default

        # A comma is only a thousands separator in strict 1,234 grouping;
        # anything else ("1,5" is a decimal comma) is left for float() to reject.
        if _GROUPED_NUMBER.match(text):
            text = text.replace(',', '')
        if '_' in text or text.lower() in _INVALID_NUMBER_TOKENS:
            return default

        try:
            number = float(text)
        except (TypeError, ValueError):
            return default

    if math.isnan(number) or math.isinf(number) or number < 0:
        return default

    return number


def _text(value: Any, default: str) -> str:
    if value in (None, ""):
        return default
    return str(value)


def _base_fields(row: Mapping, candidates: FieldCandidates) -> dict:
    return {
        **row,
        "date": to_iso_date(guess_key(row, candidates.date)),
        "model": _text(guess_key(row, candidates.model), UNKNOWN_MODEL),
        "operator": _text(guess_key(row, candidates.operator), UNASSIGNED_OPERATOR),
    }


def normalize_production(
    rows: Any, candidates: FieldCandidates = DEFAULT_FIELD_CANDIDATES
) -> list[dict]:
    """Return canonical production rows; non-list input gives ``[]``."""

    if not isinstance(rows, (list, tuple)):
        return []

    normalized = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        record = _base_fields(row, candidates)
        record["quantity"] = coerce_number(
            guess_key(row, candidates.production_quantity), default=0.0
        )
        normalized.append(record)
    return normalized


def normalize_rejection(
    rows: Any, candidates: FieldCandidates = DEFAULT_FIELD_CANDIDATES
) -> list[dict]:
    """Return canonical rejection rows.

    A rejection row without a usable count stands for a single rejected unit,
    so its ``quantity`` defaults to ``1``.
    """

    if not isinstance(rows, (list, tuple)):
        return []

    normalized = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        record = _base_fields(row, candidates)
        record["quantity"] = coerce_number(
            guess_key(row, candidates.rejection_quantity), default=1.0
        )
        record["reason"] = _text(guess_key(row, candidates.reason), UNKNOWN_REASON)
        normalized.append(record)
    return normalized

from collections.abc import Mapping
from typing import Any, Sequence


def guess_key(record: Mapping[str, Any] | None, candidates: Sequence[str]) -> Any:
    """Return the value of the first key matching any candidate fragment.

    Candidates are tried in order.  For each one the record's keys are scanned
    in insertion order and the first key whose lowercase form contains the
    lowercase fragment wins, so an earlier candidate always beats a later one
    even if the later one would match a more specific key.

    Returns ``None`` when ``record`` is not a mapping or nothing matches.
    """
    if not isinstance(record, Mapping):
        return None

    keys = [(key, str(key).lower()) for key in record.keys()]
    for candidate in candidates:
        fragment = str(candidate).lower()
        for key, lowered in keys:
            if fragment in lowered:
                return record[key]
    return None

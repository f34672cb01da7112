"""Filters and summaries over enriched production rows."""

from __future__ import annotations

from typing import Collection, Iterable

from app.dates import to_iso_date
from app.reconcile import rejection_rate


def filter_by_date_range(
    records: Iterable[dict], start: str | None = None, end: str | None = None
) -> list[dict]:
    """Keep rows whose normalized date lies in ``[start, end]``.

    Bounds are ISO date strings compared lexically; an empty bound is open.
    """
    kept = []
    for row in records or []:
        day = to_iso_date(row.get("date"))
        if start and day < start:
            continue
        if end and day > end:
            continue
        kept.append(row)
    return kept


def filter_by_entities(
    records: Iterable[dict],
    operators: Collection[str] | None = None,
    models: Collection[str] | None = None,
) -> list[dict]:
    """Keep rows whose operator and model are selected.

    An empty selection leaves that dimension unfiltered.
    """
    operators = set(operators or ())
    models = set(models or ())
    return [
        row
        for row in records or []
        if (not operators or row.get("operator") in operators)
        and (not models or row.get("model") in models)
    ]


def group_by_model(records: Iterable[dict]) -> list[dict]:
    """Sum produced and rejected units per model in first-seen order."""
    groups: dict[str, dict] = {}
    for row in records or []:
        model = row.get("model")
        bucket = groups.get(model)
        if bucket is None:
            bucket = groups[model] = {
                "model": model,
                "total_produced": 0.0,
                "total_rejected": 0.0,
            }
        bucket["total_produced"] += float(row.get("quantity") or 0)
        bucket["total_rejected"] += float(row.get("rejected_quantity") or 0)
    return list(groups.values())


def compute_totals(records: Iterable[dict], target_percent: float | None = None) -> dict:
    """Return overall produced, rejected and rejection rate.

    The rate is computed on the summed quantities, not averaged across rows.
    When ``target_percent`` is given the result also says whether the rate
    exceeds it.
    """
    produced = 0.0
    rejected = 0.0
    for row in records or []:
        produced += float(row.get("quantity") or 0)
        rejected += float(row.get("rejected_quantity") or 0)

    totals = {
        "total_produced": produced,
        "total_rejected": rejected,
        "rejection_rate_percent": rejection_rate(rejected, produced),
    }
    if target_percent is not None:
        totals["target_percent"] = target_percent
        totals["above_target"] = totals["rejection_rate_percent"] > target_percent
    return totals


def trend_series(records: Iterable[dict]) -> list[dict]:
    """Enriched rows ordered by date for the rejection trend chart.

    The sort is stable, so rows sharing a date keep their original order.
    """
    return sorted(records or [], key=lambda row: to_iso_date(row.get("date")))


def distinct_values(records: Iterable[dict], field: str) -> list:
    """Distinct truthy values of ``field`` in order of first appearance."""
    seen = {}
    for row in records or []:
        value = row.get(field)
        if value and value not in seen:
            seen[value] = None
    return list(seen)

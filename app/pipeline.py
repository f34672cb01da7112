"""Assemble the dashboard view from canonical production and rejection rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from app.aggregation import (
    compute_totals,
    filter_by_date_range,
    filter_by_entities,
    group_by_model,
    trend_series,
)
from app.reconcile import reconcile


@dataclass(frozen=True)
class DashboardParams:
    """Filter inputs for one dashboard view.

    Empty values mean "unfiltered".  Instances are hashable so they can key
    the snapshot's view cache.
    """

    start: str = ""
    end: str = ""
    operators: frozenset[str] = field(default_factory=frozenset)
    models: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_values(
        cls,
        start: str | None = None,
        end: str | None = None,
        operators: Iterable[str] | None = None,
        models: Iterable[str] | None = None,
    ) -> "DashboardParams":
        return cls(
            start=start or "",
            end=end or "",
            operators=frozenset(o for o in operators or () if o),
            models=frozenset(m for m in models or () if m),
        )


def build_dashboard_payload(
    production: list[dict],
    rejections: list[dict],
    params: DashboardParams,
    *,
    target_percent: float | None = None,
) -> dict:
    """Reconcile, filter and summarise one snapshot for ``params``.

    Returns the filtered detail rows, per-model totals, the date-ordered trend
    series and the overall totals.  An empty result is a valid state with
    empty lists and zero totals.
    """
    enriched = reconcile(production, rejections)
    records = filter_by_date_range(enriched, params.start, params.end)
    records = filter_by_entities(records, params.operators, params.models)

    return {
        "start": params.start,
        "end": params.end,
        "records": records,
        "models": group_by_model(records),
        "trend": trend_series(records),
        "totals": compute_totals(records, target_percent),
    }

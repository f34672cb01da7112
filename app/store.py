"""In-memory snapshot of the upstream dataset shared by all requests."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from app.aggregation import distinct_values
from app.dates import default_date_range
from app.normalize import normalize_production, normalize_rejection
from app.pipeline import DashboardParams, build_dashboard_payload
from app.source import DEFAULT_API_URL, fetch_dataset
from config.field_candidates import DEFAULT_FIELD_CANDIDATES, FieldCandidates

MAX_CACHED_VIEWS = 64


class FetchError(RuntimeError):
    """Raised when the data API cannot be read; carries the source message."""


@dataclass(frozen=True)
class Snapshot:
    production: list[dict]
    rejections: list[dict]


class SnapshotStore:
    """Fetches the dataset once and memoizes dashboard views over it.

    A failed fetch is not remembered, so the next call tries again.  Views are
    keyed on :class:`DashboardParams` and dropped when a new snapshot loads.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        *,
        candidates: FieldCandidates = DEFAULT_FIELD_CANDIDATES,
        target_percent: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api_url = api_url
        self.candidates = candidates
        self.target_percent = target_percent
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._snapshot: Snapshot | None = None
        self._views: dict[DashboardParams, dict] = {}

    def _load(self) -> Snapshot:
        data, error = fetch_dataset(self.api_url)
        if error:
            self.logger.error("Production data fetch failed: %s", error)
            raise FetchError(error)

        raw_production = data["production"]
        if isinstance(raw_production, list) and raw_production and isinstance(raw_production[0], dict):
            self.logger.debug("Production keys: %s", list(raw_production[0].keys()))

        snapshot = Snapshot(
            production=normalize_production(raw_production, self.candidates),
            rejections=normalize_rejection(data["rejections"], self.candidates),
        )
        self.logger.info(
            "Loaded %d production and %d rejection records",
            len(snapshot.production),
            len(snapshot.rejections),
        )
        return snapshot

    def snapshot(self) -> Snapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._load()
                self._views.clear()
            return self._snapshot

    def reload(self) -> Snapshot:
        with self._lock:
            snapshot = self._load()
            self._snapshot = snapshot
            self._views.clear()
            return snapshot

    def view(self, params: DashboardParams) -> dict:
        snapshot = self.snapshot()
        with self._lock:
            cached = self._views.get(params)
        if cached is not None:
            return cached

        payload = build_dashboard_payload(
            snapshot.production,
            snapshot.rejections,
            params,
            target_percent=self.target_percent,
        )
        with self._lock:
            if self._snapshot is snapshot:
                if len(self._views) >= MAX_CACHED_VIEWS:
                    self._views.pop(next(iter(self._views)))
                self._views[params] = payload
        return payload

    def options(self) -> dict:
        snapshot = self.snapshot()
        start, end = default_date_range(snapshot.production)
        return {
            "operators": distinct_values(snapshot.production, "operator"),
            "models": distinct_values(snapshot.production, "model"),
            "start": start,
            "end": end,
        }

"""In-memory store for the currently loaded permit dataset."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from middlehousing.classification.rules import ClassificationEngine
from middlehousing.core.types import ClassificationResult, FilterStatus
from middlehousing.ingest.pipeline import DatasetSummary, classify_rows, filter_results, summarize


class DatasetStore:
    """Holds one classified dataset until it is replaced or reset.

    Suitable for single-instance deployment. Results are created once at
    load time and never modified afterwards.
    """

    def __init__(self, engine: ClassificationEngine, max_workers: int | None = None) -> None:
        self._engine = engine
        self._max_workers = max_workers
        self._results: list[ClassificationResult] | None = None
        self._loaded_at: datetime | None = None

    def load(self, rows: Sequence[Mapping[str, Any]]) -> DatasetSummary:
        """Classify ``rows`` and replace the current dataset."""
        results = classify_rows(rows, self._engine, max_workers=self._max_workers)
        self._results = results
        self._loaded_at = datetime.now(timezone.utc)
        return summarize(results)

    def reset(self) -> None:
        self._results = None
        self._loaded_at = None

    @property
    def is_loaded(self) -> bool:
        return self._results is not None

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    @property
    def results(self) -> list[ClassificationResult]:
        return list(self._results or [])

    def filtered(self, status: FilterStatus = FilterStatus.ALL) -> list[ClassificationResult]:
        return filter_results(self.results, status)

    def summary(self) -> DatasetSummary:
        return summarize(self.results)

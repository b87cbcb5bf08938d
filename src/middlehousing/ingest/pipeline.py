"""Batch classification of permit rows."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Mapping, Sequence

from pydantic import BaseModel, Field

from middlehousing.classification.rules import ClassificationEngine
from middlehousing.core.types import Category, ClassificationResult, FilterStatus
from middlehousing.ingest.headers import ColumnMapping, extract_permit_text, resolve_columns


class DatasetSummary(BaseModel):
    """Counts over a classified dataset."""

    total: int = 0
    middle_housing: int = 0
    by_category: dict[Category, int] = Field(default_factory=dict)


def classify_row(
    row: Mapping[str, Any],
    engine: ClassificationEngine,
    columns: ColumnMapping | None = None,
) -> ClassificationResult:
    """Classify one row, resolving columns from its own keys if not given."""
    if columns is None:
        columns = resolve_columns(row.keys())
    text = extract_permit_text(row, columns)
    return engine.classify(
        text.description,
        text.project_name,
        text.address,
        original=row,
    )


def classify_rows(
    rows: Sequence[Mapping[str, Any]],
    engine: ClassificationEngine,
    columns: ColumnMapping | None = None,
    max_workers: int | None = None,
) -> list[ClassificationResult]:
    """Classify every row, one result per row in input order.

    Columns are resolved once from the first row's headers. Rows are
    independent, so with ``max_workers`` greater than 1 they are mapped
    over a thread pool.
    """
    if not rows:
        return []
    if columns is None:
        columns = resolve_columns(rows[0].keys())

    if max_workers is None or max_workers <= 1:
        return [classify_row(row, engine, columns) for row in rows]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda row: classify_row(row, engine, columns), rows))


def filter_results(
    results: Iterable[ClassificationResult],
    status: FilterStatus = FilterStatus.ALL,
) -> list[ClassificationResult]:
    if status == FilterStatus.MIDDLE_HOUSING_ONLY:
        return [r for r in results if r.is_middle_housing]
    if status == FilterStatus.EXCLUDED:
        return [r for r in results if not r.is_middle_housing]
    return list(results)


def summarize(results: Iterable[ClassificationResult]) -> DatasetSummary:
    by_category = {category: 0 for category in Category}
    total = 0
    middle = 0
    for result in results:
        total += 1
        by_category[result.category] += 1
        if result.is_middle_housing:
            middle += 1
    return DatasetSummary(total=total, middle_housing=middle, by_category=by_category)

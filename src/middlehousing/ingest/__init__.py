"""Permit CSV ingestion: header resolution, parsing and batch classification."""

from middlehousing.ingest.csv_loader import DatasetError, load_csv, load_default_dataset, parse_csv
from middlehousing.ingest.headers import ColumnMapping, resolve_columns
from middlehousing.ingest.pipeline import classify_rows, filter_results, summarize
from middlehousing.ingest.store import DatasetStore

__all__ = [
    "ColumnMapping",
    "DatasetError",
    "DatasetStore",
    "classify_rows",
    "filter_results",
    "load_csv",
    "load_default_dataset",
    "parse_csv",
    "resolve_columns",
    "summarize",
]

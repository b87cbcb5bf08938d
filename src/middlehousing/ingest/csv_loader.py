"""CSV parsing for permit exports."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Cells beyond the header width are kept under this key
EXTRA_CELLS_KEY = "__extra__"


class DatasetError(ValueError):
    """Raised when a permit file cannot be read or has no header row."""


def parse_csv(text: str) -> list[dict[str, Any]]:
    """Parse CSV text with a header row into one dict per non-empty line.

    Short rows are padded with "" and overflow cells are kept under
    ``EXTRA_CELLS_KEY``, so no cell is dropped.

    Raises:
        DatasetError: The text has no header row or is not valid CSV.
    """
    text = text.lstrip("\ufeff")
    reader = csv.DictReader(io.StringIO(text), restkey=EXTRA_CELLS_KEY, restval="")
    try:
        headers = reader.fieldnames
        if not headers or not any(h.strip() for h in headers):
            raise DatasetError("CSV has no header row")
        rows = []
        for row in reader:
            cells = [v for k, v in row.items() if k != EXTRA_CELLS_KEY]
            if all(not (cell or "").strip() for cell in cells):
                continue
            rows.append(row)
    except csv.Error as exc:
        raise DatasetError(f"Malformed CSV: {exc}") from exc
    return rows


def load_csv(path: str | Path) -> list[dict[str, Any]]:
    """Read and parse a permit CSV file.

    Raises:
        DatasetError: The file cannot be read or parsed.
    """
    csv_path = Path(path)
    try:
        text = csv_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise DatasetError(f"Cannot read {csv_path}: {exc}") from exc

    rows = parse_csv(text)
    logger.info("Loaded %d permit rows from %s", len(rows), csv_path)
    return rows


def load_default_dataset(path: str | Path) -> list[dict[str, Any]] | None:
    """Load the bundled sample dataset if present.

    Returns None when the file does not exist; the caller then waits for
    an upload instead.
    """
    csv_path = Path(path)
    if not csv_path.is_file():
        logger.info("No default dataset at %s, waiting for upload", csv_path)
        return None
    return load_csv(csv_path)

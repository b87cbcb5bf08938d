"""Resolution of permit CSV columns to the classifier's three text fields.

Exports vary by city and by year, so columns are found by a case-insensitive
substring match on the header name, falling back to fixed header names.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from middlehousing.core.types import PermitText

DESCRIPTION_HINT = "description"
PROJECT_NAME_HINT = "project name"
ADDRESS_HINT = "address"

DEFAULT_DESCRIPTION_HEADER = "Description"
DEFAULT_PROJECT_NAME_HEADER = "Property/Project Name"
DEFAULT_ADDRESS_HEADER = "Address"


class ColumnMapping(BaseModel):
    """Header names holding the description, project name and address."""

    model_config = ConfigDict(frozen=True)

    description: str = DEFAULT_DESCRIPTION_HEADER
    project_name: str = DEFAULT_PROJECT_NAME_HEADER
    address: str = DEFAULT_ADDRESS_HEADER


def find_header(headers: Iterable[Any], hint: str, fallback: str) -> str:
    """First header containing ``hint`` (case-insensitive), else ``fallback``."""
    for header in headers:
        if isinstance(header, str) and hint in header.lower():
            return header
    return fallback


def resolve_columns(headers: Iterable[Any]) -> ColumnMapping:
    headers = list(headers)
    return ColumnMapping(
        description=find_header(headers, DESCRIPTION_HINT, DEFAULT_DESCRIPTION_HEADER),
        project_name=find_header(headers, PROJECT_NAME_HINT, DEFAULT_PROJECT_NAME_HEADER),
        address=find_header(headers, ADDRESS_HINT, DEFAULT_ADDRESS_HEADER),
    )


def extract_permit_text(row: Mapping[str, Any], columns: ColumnMapping) -> PermitText:
    """Pull the three text fields out of a row; missing values become ""."""
    return PermitText(
        description=row.get(columns.description),
        project_name=row.get(columns.project_name),
        address=row.get(columns.address),
    )

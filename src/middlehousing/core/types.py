"""Core type definitions shared across all middlehousing modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(StrEnum):
    """Housing-type category assigned to a permit record."""

    ULS = "ULS"
    DADU = "DADU"
    AADU = "AADU"
    TOWNHOME = "TOWNHOME"
    MULTIPLEX = "MULTIPLEX"
    NEW_SFR = "NEW_SFR"
    EXCLUDED = "EXCLUDED"


MIDDLE_HOUSING_CATEGORIES: frozenset[Category] = frozenset({
    Category.ULS,
    Category.DADU,
    Category.AADU,
    Category.TOWNHOME,
    Category.MULTIPLEX,
})

# Highest priority first
CATEGORY_PRIORITY: tuple[Category, ...] = (
    Category.ULS,
    Category.MULTIPLEX,
    Category.TOWNHOME,
    Category.DADU,
    Category.AADU,
    Category.NEW_SFR,
    Category.EXCLUDED,
)


def is_middle_housing(category: Category) -> bool:
    return category in MIDDLE_HOUSING_CATEGORIES


class FilterStatus(StrEnum):
    """Table filter applied to a classified dataset."""

    ALL = "ALL"
    MIDDLE_HOUSING_ONLY = "MIDDLE_HOUSING_ONLY"
    EXCLUDED = "EXCLUDED"


class PermitText(BaseModel):
    """The three free-text fields the classifier reads from a permit row."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    project_name: str = ""
    address: str = ""

    @field_validator("description", "project_name", "address", mode="before")
    @classmethod
    def _coerce_missing(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class ClassificationResult(BaseModel):
    """Immutable classification of a single permit record.

    ``original`` carries the source row through unchanged for display.
    """

    model_config = ConfigDict(frozen=True)

    category: Category
    is_middle_housing: bool
    original: dict[str, Any] = Field(default_factory=dict)
    signals: tuple[str, ...] = ()
    unit_count: int | None = None


class GeocodedLocation(BaseModel):
    """Latitude/longitude pair returned by a geocoder."""

    lat: float
    lng: float


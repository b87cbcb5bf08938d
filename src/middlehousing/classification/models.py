"""Data models for the classification rule vocabulary and detector output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

from middlehousing.core.types import CATEGORY_PRIORITY, Category

PERMIT_FIELDS: tuple[str, ...] = ("description", "project_name", "address")
_DEFAULT_RULE_FIELDS = ["description", "project_name"]


class Signal(StrEnum):
    """Vocabulary families a detector can report."""

    ULS = "uls"
    MULTIPLEX = "multiplex"
    TOWNHOME = "townhome"
    DADU = "dadu"
    AADU = "aadu"
    NEW_CONSTRUCTION = "new_construction"
    EXCLUSION = "exclusion"


_CATEGORY_SIGNALS: dict[Category, Signal] = {
    Category.ULS: Signal.ULS,
    Category.MULTIPLEX: Signal.MULTIPLEX,
    Category.TOWNHOME: Signal.TOWNHOME,
    Category.DADU: Signal.DADU,
    Category.AADU: Signal.AADU,
}

# Middle-housing signals in resolution order, highest priority first
MIDDLE_HOUSING_SIGNALS: tuple[tuple[Signal, Category], ...] = tuple(
    (_CATEGORY_SIGNALS[category], category)
    for category in CATEGORY_PRIORITY
    if category in _CATEGORY_SIGNALS
)


class SignalRule(BaseModel):
    """Keyword rule for one signal family."""

    name: Signal
    description: str = ""
    keywords: list[str]
    fields: list[str] = Field(default_factory=lambda: list(_DEFAULT_RULE_FIELDS))

    @field_validator("keywords")
    @classmethod
    def _require_keywords(cls, value: list[str]) -> list[str]:
        cleaned = [kw for kw in value if kw and kw.strip()]
        if not cleaned:
            raise ValueError("rule must define at least one keyword")
        return cleaned

    @field_validator("fields")
    @classmethod
    def _known_fields(cls, value: list[str]) -> list[str]:
        unknown = [f for f in value if f not in PERMIT_FIELDS]
        if unknown:
            raise ValueError(f"unknown permit fields: {unknown}")
        return value


class RuleSet(BaseModel):
    """Complete keyword vocabulary loaded from the rules file."""

    signals: list[SignalRule]
    single_family_terms: list[str] = Field(default_factory=list)
    non_residential_terms: list[str] = Field(default_factory=list)
    plex_units: dict[str, int] = Field(default_factory=dict)
    multiplex_min_units: int = 2
    multiplex_max_units: int = 9

    @model_validator(mode="after")
    def _check_signals(self) -> RuleSet:
        names = [rule.name for rule in self.signals]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"duplicate signal rules: {sorted(duplicates)}")
        missing = set(Signal) - set(names)
        if missing:
            raise ValueError(f"missing signal rules: {sorted(missing)}")
        if self.multiplex_min_units > self.multiplex_max_units:
            raise ValueError("multiplex_min_units exceeds multiplex_max_units")
        return self

    def rule(self, signal: Signal) -> SignalRule:
        for rule in self.signals:
            if rule.name == signal:
                return rule
        raise KeyError(signal)


@dataclass(frozen=True)
class SignalReport:
    """Which detectors fired for one record, plus the governing unit count."""

    fired: frozenset[Signal] = field(default_factory=frozenset)
    unit_count: int | None = None
    unambiguous_new_sfr: bool = False

    def has(self, signal: Signal) -> bool:
        return signal in self.fired

    def ordered(self) -> tuple[str, ...]:
        """Fired signal names in resolution order."""
        return tuple(s.value for s in Signal if s in self.fired)

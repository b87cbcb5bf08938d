"""Housing-type classification engine.

Loads the keyword vocabulary from YAML config and resolves each permit's
description, project name and address into exactly one housing category.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from middlehousing.classification.detectors import SearchText, detect_signals
from middlehousing.classification.models import (
    MIDDLE_HOUSING_SIGNALS,
    RuleSet,
    Signal,
    SignalReport,
)
from middlehousing.core.types import Category, ClassificationResult, is_middle_housing

logger = logging.getLogger(__name__)

# Default path to the housing vocabulary shipped with the package
_DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "housing_rules.yml"


class RuleConfigError(ValueError):
    """Raised when the rules file is missing or invalid."""


def load_rules(path: str | Path | None = None) -> RuleSet:
    """Load and validate a rules file.

    Raises:
        RuleConfigError: The file cannot be read, parsed or validated.
    """
    rules_path = Path(path) if path else _DEFAULT_RULES_PATH
    try:
        with open(rules_path) as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise RuleConfigError(f"Cannot read rules file {rules_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuleConfigError(f"Invalid YAML in rules file {rules_path}: {exc}") from exc

    try:
        rules = RuleSet.model_validate(data)
    except ValidationError as exc:
        raise RuleConfigError(f"Invalid rules file {rules_path}: {exc}") from exc

    logger.debug("Loaded %d signal rules from %s", len(rules.signals), rules_path)
    return rules


def resolve_category(report: SignalReport) -> Category:
    """Apply the fixed priority order to a detector report.

    ULS > MULTIPLEX > TOWNHOME > DADU > AADU > NEW_SFR > EXCLUDED. Any
    middle-housing signal outranks exclusion wording. New-construction
    language loses to exclusion wording unless it names a single-family
    structure.
    """
    for signal, category in MIDDLE_HOUSING_SIGNALS:
        if report.has(signal):
            return category

    if report.has(Signal.NEW_CONSTRUCTION):
        if not report.has(Signal.EXCLUSION) or report.unambiguous_new_sfr:
            return Category.NEW_SFR

    return Category.EXCLUDED


class ClassificationEngine:
    """Rule-based permit classification engine.

    Classification is a total, pure function of the three input strings:
    it never raises and identical input always yields identical output.
    Results are memoized per normalized input triple.
    """

    def __init__(
        self,
        rules_path: str | Path | None = None,
        rules: RuleSet | None = None,
        cache_size: int = 4096,
    ) -> None:
        self._rules = rules if rules is not None else load_rules(rules_path)
        self._detect_cached = lru_cache(maxsize=cache_size)(self._detect)

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def _detect(self, search: SearchText) -> SignalReport:
        return detect_signals(self._rules, search)

    def detect(
        self,
        description: str | None = "",
        project_name: str | None = "",
        address: str | None = "",
    ) -> SignalReport:
        """Run every signal detector over one record."""
        search = SearchText.from_raw(description, project_name, address)
        return self._detect_cached(search)

    def resolve(
        self,
        description: str | None = "",
        project_name: str | None = "",
        address: str | None = "",
    ) -> Category:
        """Return the single category for a record."""
        return resolve_category(self.detect(description, project_name, address))

    def classify(
        self,
        description: str | None = "",
        project_name: str | None = "",
        address: str | None = "",
        original: Mapping[str, Any] | None = None,
    ) -> ClassificationResult:
        """Classify a record and carry its source row through unchanged.

        Args:
            description: Free-text permit description.
            project_name: Property or project name.
            address: Street address.
            original: The source row; copied, never mutated.

        Returns:
            The immutable ClassificationResult.
        """
        report = self.detect(description, project_name, address)
        category = resolve_category(report)
        return ClassificationResult(
            category=category,
            is_middle_housing=is_middle_housing(category),
            original=dict(original) if original is not None else {},
            signals=report.ordered(),
            unit_count=report.unit_count,
        )


# Module-level convenience: singleton engine and classify function
_engine: ClassificationEngine | None = None


def _get_engine() -> ClassificationEngine:
    global _engine
    if _engine is None:
        _engine = ClassificationEngine()
    return _engine


def classify_project(
    description: str | None,
    project_name: str | None,
    address: str | None,
) -> ClassificationResult:
    """Convenience function to classify one record with the default vocabulary."""
    return _get_engine().classify(description, project_name, address)

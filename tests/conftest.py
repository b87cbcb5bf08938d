"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from middlehousing.classification.rules import ClassificationEngine

SAMPLE_CSV = Path(__file__).resolve().parents[1] / "data" / "permits.csv"

PERMIT_CSV = (
    "Permit Number,Description,Property/Project Name,Address\n"
    "1,New construction of a detached accessory dwelling unit,,123 Main St\n"
    "2,Remodel kitchen and bath,,3311 Beacon Ave S\n"
    "3,Construct new 4-unit multiplex,Fremont Fourplex,999 Nowhere Ln\n"
    "\n"
    "4,Tenant improvement for retail space,Pike Place Retail,1501 Pike Pl\n"
)


@pytest.fixture(scope="session")
def engine() -> ClassificationEngine:
    """Engine built from the packaged vocabulary."""
    return ClassificationEngine()

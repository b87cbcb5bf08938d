"""Housing-type classification of construction permits.

Rule-based detection of middle housing (ULS, DADU, AADU, townhomes,
multiplexes), new single-family construction and excluded work.
"""

from middlehousing.classification.normalize import normalize_text
from middlehousing.classification.rules import (
    ClassificationEngine,
    RuleConfigError,
    classify_project,
    load_rules,
)

__all__ = [
    "ClassificationEngine",
    "RuleConfigError",
    "classify_project",
    "load_rules",
    "normalize_text",
]

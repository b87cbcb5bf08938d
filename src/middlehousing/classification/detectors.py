"""Signal detectors for permit housing-type vocabulary.

Each detector is a pure predicate over normalized permit text. Detectors
never raise: missing vocabulary simply yields ``False``. They are heuristics
over noisy human-written strings and will miss unusual phrasing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from middlehousing.classification.models import RuleSet, Signal, SignalReport, SignalRule
from middlehousing.classification.normalize import contains_phrase, normalize_text

_NUMBER_WORDS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
    "nineteen": 19, "twenty": 20,
}

# "4 units", "three new dwelling units", "6 unit"
_UNIT_COUNT = re.compile(
    r"\b(\d{1,4}|" + "|".join(_NUMBER_WORDS) + r")\s+"
    r"(?:(?:new|dwelling|residential|living|housing|attached|detached)\s+){0,2}"
    r"units?\b"
)


@dataclass(frozen=True)
class SearchText:
    """Normalized description, project name and address of one permit."""

    description: str = ""
    project_name: str = ""
    address: str = ""

    @classmethod
    def from_raw(
        cls,
        description: str | None,
        project_name: str | None,
        address: str | None,
    ) -> SearchText:
        return cls(
            description=normalize_text(description),
            project_name=normalize_text(project_name),
            address=normalize_text(address),
        )

    def select(self, fields: Iterable[str]) -> list[str]:
        return [getattr(self, name) for name in fields if getattr(self, name)]

    @property
    def is_empty(self) -> bool:
        return not (self.description or self.project_name or self.address)


def has_any_phrase(texts: Iterable[str], phrases: Iterable[str]) -> bool:
    texts = list(texts)
    return any(contains_phrase(text, phrase) for phrase in phrases for text in texts)


def matches_rule(rule: SignalRule, search: SearchText) -> bool:
    """True when any keyword of ``rule`` appears in one of its fields."""
    return has_any_phrase(search.select(rule.fields), rule.keywords)


def extract_unit_count(text: str, plex_units: dict[str, int] | None = None) -> int | None:
    """Highest explicit dwelling-unit count in a normalized string.

    Counts come from digits or number words before "unit(s)" and from plex
    words ("triplex" is 3). Returns None when the text states no count.
    """
    counts: list[int] = []
    for match in _UNIT_COUNT.finditer(text):
        token = match.group(1)
        counts.append(int(token) if token.isdigit() else _NUMBER_WORDS[token])
    for word, units in (plex_units or {}).items():
        if contains_phrase(text, word):
            counts.append(units)
    return max(counts) if counts else None


def governing_unit_count(texts: Iterable[str], plex_units: dict[str, int]) -> int | None:
    """The highest count across fields; undercounting in one field is common."""
    counts = [c for c in (extract_unit_count(t, plex_units) for t in texts) if c is not None]
    return max(counts) if counts else None


def detect_uls(rules: RuleSet, search: SearchText) -> bool:
    return matches_rule(rules.rule(Signal.ULS), search)


def detect_townhome(rules: RuleSet, search: SearchText) -> bool:
    return matches_rule(rules.rule(Signal.TOWNHOME), search)


def detect_dadu(rules: RuleSet, search: SearchText) -> bool:
    return matches_rule(rules.rule(Signal.DADU), search)


def detect_aadu(rules: RuleSet, search: SearchText) -> bool:
    return matches_rule(rules.rule(Signal.AADU), search)


def detect_new_construction(rules: RuleSet, search: SearchText) -> bool:
    return matches_rule(rules.rule(Signal.NEW_CONSTRUCTION), search)


def detect_multiplex(rules: RuleSet, search: SearchText) -> tuple[bool, int | None]:
    """Multiplex wording or a unit count within the multiplex window.

    Returns ``(fired, governing_unit_count)``. A bare unit count does not fire
    when townhome or accessory-unit vocabulary is present, since the count
    then describes that project (a townhome grouping, a house plus its ADU).
    A count outside the window never fires.
    """
    rule = rules.rule(Signal.MULTIPLEX)
    texts = search.select(rule.fields)
    unit_count = governing_unit_count(texts, rules.plex_units)

    in_window = (
        unit_count is not None
        and rules.multiplex_min_units <= unit_count <= rules.multiplex_max_units
    )
    if unit_count is not None and not in_window:
        return False, unit_count

    if has_any_phrase(texts, rule.keywords):
        return True, unit_count
    if has_any_phrase(texts, rules.plex_units):
        return True, unit_count
    if in_window and not _describes_other_grouping(rules, search):
        return True, unit_count
    return False, unit_count


def _describes_other_grouping(rules: RuleSet, search: SearchText) -> bool:
    return (
        detect_townhome(rules, search)
        or detect_dadu(rules, search)
        or detect_aadu(rules, search)
    )


def detect_exclusion(rules: RuleSet, search: SearchText, unit_count: int | None = None) -> bool:
    """Repair/alteration/commercial wording, or a unit count above multiplex scale."""
    if unit_count is not None and unit_count > rules.multiplex_max_units:
        return True
    return matches_rule(rules.rule(Signal.EXCLUSION), search)


def detect_unambiguous_new_sfr(rules: RuleSet, search: SearchText) -> bool:
    """New-construction language that also names a single-family structure.

    Commercial or apartment wording anywhere in the record disqualifies it.
    """
    rule = rules.rule(Signal.NEW_CONSTRUCTION)
    if not matches_rule(rule, search):
        return False
    texts = search.select(rule.fields)
    if has_any_phrase(texts, rules.non_residential_terms):
        return False
    return has_any_phrase(texts, rules.single_family_terms)


def detect_signals(rules: RuleSet, search: SearchText) -> SignalReport:
    """Run every detector over one record."""
    if search.is_empty:
        return SignalReport()

    fired: set[Signal] = set()
    multiplex, unit_count = detect_multiplex(rules, search)
    checks = {
        Signal.ULS: detect_uls(rules, search),
        Signal.MULTIPLEX: multiplex,
        Signal.TOWNHOME: detect_townhome(rules, search),
        Signal.DADU: detect_dadu(rules, search),
        Signal.AADU: detect_aadu(rules, search),
        Signal.NEW_CONSTRUCTION: detect_new_construction(rules, search),
        Signal.EXCLUSION: detect_exclusion(rules, search, unit_count),
    }
    for signal, hit in checks.items():
        if hit:
            fired.add(signal)

    return SignalReport(
        fired=frozenset(fired),
        unit_count=unit_count,
        unambiguous_new_sfr=detect_unambiguous_new_sfr(rules, search),
    )

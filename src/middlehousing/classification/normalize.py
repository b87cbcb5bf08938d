"""Text normalization for keyword matching over permit free text."""

from __future__ import annotations

import re

# Dotted acronyms such as "D.A.D.U." or "a.d.u"
_DOTTED_ACRONYM = re.compile(r"\b[a-z](?:\.[a-z](?![a-z]))+\.?")
# Slashed initials such as "T/I"
_SLASHED_ACRONYM = re.compile(r"\b[a-z](?:/[a-z](?![a-z]))+\b")
_APOSTROPHES = re.compile(r"['’`]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _collapse_acronym(match: re.Match) -> str:
    return match.group(0).replace(".", "")


def _collapse_slashes(match: re.Match) -> str:
    return match.group(0).replace("/", "")


def normalize_text(raw: str | None) -> str:
    """Return a lower-cased, punctuation-free, single-spaced search surface.

    >>> normalize_text("Construct NEW 4-unit  D.A.D.U.")
    'construct new 4 unit dadu'
    """
    if not raw:
        return ""
    text = str(raw).lower()
    text = _DOTTED_ACRONYM.sub(_collapse_acronym, text)
    text = _SLASHED_ACRONYM.sub(_collapse_slashes, text)
    text = _APOSTROPHES.sub("", text)
    text = _NON_ALNUM.sub(" ", text)
    return text.strip()


def contains_phrase(normalized: str, phrase: str) -> bool:
    """Whole-word match of ``phrase`` inside already-normalized text."""
    needle = normalize_text(phrase)
    if not needle or not normalized:
        return False
    return f" {needle} " in f" {normalized} "

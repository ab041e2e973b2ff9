# -*- coding: utf-8 -*-
"""
mt_brain.utils_text

Shared text helpers for the MT engine.

Role
----
- compile_phrase(phrase): case-insensitive whole-phrase regex; spaces in the
  phrase also match hyphens and runs of whitespace ("part-number", "part  number")
- find_phrase_spans(text, phrase): every (start, end) span of a phrase in the
  ORIGINAL text, so signal spans point back at what the user typed
- snippet(text, limit): one-line excerpt used for titles and log lines

Only the other mt_brain modules use this module.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Tuple

Span = Tuple[int, int]


# ------------------------------------------------------------
# 1. Phrase matching with spans
# ------------------------------------------------------------

@lru_cache(maxsize=2048)
def compile_phrase(phrase: str) -> "re.Pattern[str]":
    """
    Build the regex for one vocabulary phrase.

    - word boundaries on both ends so "abb" does not fire inside "abbreviation"
    - a space in the phrase matches spaces, hyphens or underscores
    """
    words = [re.escape(w) for w in phrase.strip().split()]
    body = r"[\s\-_]+".join(words)
    return re.compile(rf"(?<![A-Za-z0-9]){body}(?![A-Za-z0-9])", re.IGNORECASE)


def find_phrase_spans(text: str, phrase: str) -> List[Span]:
    if not text or not phrase:
        return []
    return [m.span() for m in compile_phrase(phrase).finditer(text)]


def spans_overlap(a: Span, b: Span) -> bool:
    return a[0] < b[1] and b[0] < a[1]


# ------------------------------------------------------------
# 2. Misc
# ------------------------------------------------------------

def snippet(text: str, limit: int = 80) -> str:
    """One-line excerpt, cut at limit characters."""
    if not text:
        return ""
    flat = re.sub(r"\s+", " ", text).strip()
    if len(flat) <= limit:
        return flat
    return flat[:limit].rstrip() + "..."


_ACRONYMS = ("abb", "ge", "weg", "plc", "hvac", "ecc", "eccs")


def title_case(value: str) -> str:
    """'general electric' -> 'General Electric'; known acronyms stay upper-case."""
    if not value:
        return ""
    parts = []
    for w in value.split():
        parts.append(w.upper() if w.lower() in _ACRONYMS else w.capitalize())
    return " ".join(parts)

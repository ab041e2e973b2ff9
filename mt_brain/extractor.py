# -*- coding: utf-8 -*-
"""
mt_brain.extractor

Entity / keyword extractor.

Scans one message for domain terms and returns typed Signals with the span
that produced them. Pure: no state, no I/O.

Matching rules
--------------
- case-insensitive whole-phrase matching against mt_brain.vocabulary
- when two entries overlap, the longest match wins
  ("no equivalency documentation" beats "equivalency documentation",
   "programmable logic controller" beats "controller")
- a span never yields two signals
- output is ordered by span start

Manufacturer signals carry a role hint (original / replacement) read from
cue words around the name. Phrases like "the replacement" with no vendor in
the message are resolved against the prior-message window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import vocabulary as vocab
from .utils_text import Span, find_phrase_spans, spans_overlap


class SignalKind(str, Enum):
    EQUIPMENT_TYPE = "equipment_type"
    MANUFACTURER = "manufacturer"
    SAFETY_MARKER = "safety_marker"
    IDENTITY_MARKER = "identity_marker"
    DURATION_MARKER = "duration_marker"
    ACTION_MARKER = "action_marker"
    CAPABILITY_MARKER = "capability_marker"
    SPECIFICATION_MARKER = "specification_marker"
    DOCUMENTATION_MARKER = "documentation_marker"
    RESTORATION_MARKER = "restoration_marker"
    SYSTEM_MARKER = "system_marker"
    SCENARIO_MARKER = "scenario_marker"
    CARRYOVER_MARKER = "carryover_marker"
    ANSWER_MARKER = "answer_marker"


@dataclass(frozen=True)
class Signal:
    kind: SignalKind
    value: str
    source_span: Span
    qualifier: Optional[str] = None
    origin: str = "message"  # "message" | "prior"
    phrase: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "source_span": list(self.source_span),
            "qualifier": self.qualifier,
            "origin": self.origin,
            "phrase": self.phrase,
        }


# kind -> vocabulary table, in one place
VOCABULARY_TABLES: Tuple[Tuple[SignalKind, Dict[str, str]], ...] = (
    (SignalKind.EQUIPMENT_TYPE, vocab.EQUIPMENT_TERMS),
    (SignalKind.MANUFACTURER, vocab.MANUFACTURER_TERMS),
    (SignalKind.SAFETY_MARKER, vocab.SAFETY_TERMS),
    (SignalKind.IDENTITY_MARKER, vocab.IDENTITY_TERMS),
    (SignalKind.DURATION_MARKER, vocab.DURATION_TERMS),
    (SignalKind.ACTION_MARKER, vocab.ACTION_TERMS),
    (SignalKind.CAPABILITY_MARKER, vocab.CAPABILITY_TERMS),
    (SignalKind.SPECIFICATION_MARKER, vocab.SPECIFICATION_TERMS),
    (SignalKind.DOCUMENTATION_MARKER, vocab.DOCUMENTATION_TERMS),
    (SignalKind.RESTORATION_MARKER, vocab.RESTORATION_TERMS),
    (SignalKind.SYSTEM_MARKER, vocab.SYSTEM_TERMS),
    (SignalKind.SCENARIO_MARKER, vocab.SCENARIO_TERMS),
    (SignalKind.CARRYOVER_MARKER, vocab.CARRYOVER_TERMS),
    (SignalKind.ANSWER_MARKER, vocab.ANSWER_TERMS),
)

_PERIOD_RE = re.compile(vocab.DURATION_PERIOD_PATTERN, re.IGNORECASE)
_WORD_RE = re.compile(r"[A-Za-z0-9']+")
_CLAUSE_BREAK_RE = re.compile(r"[.,;:!?]")

# project / change reference patterns, most specific first
_PROJECT_PATTERNS = (
    (re.compile(r"\bMT[-_ ]?(\d{4})[-_ ]?(\d{3,4})\b", re.IGNORECASE), "MT-{0}-{1}"),
    (re.compile(r"\bECR[-_ ]?(\d{4,6})\b", re.IGNORECASE), "ECR-{0}"),
    (re.compile(r"\bDCR[-_ ]?(\d{4,6})\b", re.IGNORECASE), "DCR-{0}"),
    (re.compile(r"\bWO[-_ ]?(\d{4,8})\b", re.IGNORECASE), "WO-{0}"),
)


# ------------------------------------------------------------
# 1. Raw vocabulary matches
# ------------------------------------------------------------

@dataclass(frozen=True)
class _Match:
    kind: SignalKind
    value: str
    span: Span
    phrase: str

    @property
    def length(self) -> int:
        return self.span[1] - self.span[0]


def _collect_matches(text: str) -> List[_Match]:
    matches: List[_Match] = []
    for kind, table in VOCABULARY_TABLES:
        for phrase, value in table.items():
            for span in find_phrase_spans(text, phrase):
                matches.append(_Match(kind, value, span, phrase))

    for m in _PERIOD_RE.finditer(text):
        matches.append(
            _Match(SignalKind.DURATION_MARKER, m.group(0).lower(), m.span(), m.group(0))
        )
    return matches


def _longest_non_overlapping(matches: Iterable[_Match]) -> List[_Match]:
    """Longest match first; a shorter match overlapping a kept one is dropped."""
    kept: List[_Match] = []
    ordered = sorted(matches, key=lambda m: (-m.length, m.span[0], m.kind.value))
    for m in ordered:
        if any(spans_overlap(m.span, k.span) for k in kept):
            continue
        kept.append(m)
    return sorted(kept, key=lambda m: m.span)


# ------------------------------------------------------------
# 2. Manufacturer role hints
# ------------------------------------------------------------

def _words(text: str) -> List[str]:
    # typographic apostrophes ("isn’t") count as plain ones
    return _WORD_RE.findall(text.lower().replace("’", "'"))


def _words_before(text: str, pos: int, n: int) -> List[str]:
    return _words(text[:pos])[-n:]


def _words_after(text: str, pos: int, n: int) -> List[str]:
    return _words(text[pos:])[:n]


def _clause_words_before(text: str, pos: int) -> List[str]:
    """Words between the start of the current clause and pos."""
    words = _words(_CLAUSE_BREAK_RE.split(text[:pos])[-1])
    for i in range(len(words) - 1, -1, -1):
        if words[i] in vocab.CLAUSE_BREAK_WORDS:
            return words[i + 1:]
    return words


def _role_behind_weak_cue(text: str, span: Span) -> str:
    # "the new one will be from ABB" vs "the current one is from Westinghouse"
    for w in reversed(_clause_words_before(text, span[0])):
        if w in vocab.WEAK_CUE_REPLACEMENT_CUES:
            return "replacement"
        if w in vocab.ORIGINAL_CUES:
            return "original"
    return "original"


def manufacturer_role(text: str, span: Span) -> Optional[str]:
    """
    Role of the vendor name at span: "original", "replacement" or None.
    The closest cue word in front wins; otherwise the words right after.
    A weak cue ("from") defers to the rest of its clause.
    """
    for w in reversed(_words_before(text, span[0], vocab.ROLE_CUE_WORDS_BEFORE)):
        if w in vocab.WEAK_ORIGINAL_CUES:
            return _role_behind_weak_cue(text, span)
        if w in vocab.ORIGINAL_CUES:
            return "original"
        if w in vocab.REPLACEMENT_CUES:
            return "replacement"

    for w in _words_after(text, span[1], vocab.ROLE_CUE_WORDS_AFTER):
        if w in vocab.ORIGINAL_AFTER_CUES:
            return "original"
        if w in vocab.REPLACEMENT_AFTER_CUES:
            return "replacement"
    return None


def _apply_negation(text: str, kind: SignalKind, value: str, span: Span) -> str:
    flipped = vocab.NEGATED_VALUES.get((kind.value, value))
    if flipped is None:
        return value
    before = _clause_words_before(text, span[0])[-vocab.NEGATION_WORDS_BEFORE:]
    if any(w in vocab.NEGATION_WORDS for w in before):
        return flipped
    return value


# ------------------------------------------------------------
# 3. Prior-window refinement
# ------------------------------------------------------------

def _prior_text(message: object) -> str:
    if isinstance(message, str):
        return message
    if isinstance(message, dict):
        return str(message.get("text") or message.get("content") or "")
    return str(getattr(message, "text", "") or "")


def _resolve_replacement_reference(
    text: str,
    prior_messages: Sequence[object],
) -> Optional[Signal]:
    """
    "the replacement is rated the same" with the vendor named two turns ago:
    return a Manufacturer signal for that vendor, spanning the reference phrase.
    """
    ref_span: Optional[Span] = None
    for phrase in vocab.REPLACEMENT_REFERENCES:
        spans = find_phrase_spans(text, phrase)
        if spans:
            ref_span = spans[0]
            break
    if ref_span is None:
        return None

    # most recent message first
    for message in reversed(list(prior_messages)):
        prior = _prior_text(message)
        candidates = [
            m for m in _longest_non_overlapping(_collect_matches(prior))
            if m.kind is SignalKind.MANUFACTURER
        ]
        hinted = [m for m in candidates if manufacturer_role(prior, m.span) == "replacement"]
        if hinted:
            chosen = hinted[-1]
            return Signal(
                kind=SignalKind.MANUFACTURER,
                value=chosen.value,
                source_span=ref_span,
                qualifier="replacement",
                origin="prior",
                phrase=chosen.phrase,
            )
    return None


# ------------------------------------------------------------
# 4. Public API
# ------------------------------------------------------------

def extract_signals(
    text: str,
    prior_messages: Optional[Sequence[object]] = None,
) -> List[Signal]:
    """
    Scan one message and return its signals ordered by span start.

    prior_messages: optional earlier messages (str, {"text": ...} dicts or
    objects with a .text attribute), oldest first. Only consulted to resolve
    references such as "the replacement".
    """
    if not text or not text.strip():
        return []

    signals: List[Signal] = []
    for m in _longest_non_overlapping(_collect_matches(text)):
        qualifier: Optional[str] = None
        value = _apply_negation(text, m.kind, m.value, m.span)
        if m.kind is SignalKind.MANUFACTURER:
            qualifier = manufacturer_role(text, m.span)
        elif m.kind is SignalKind.DURATION_MARKER and m.value not in ("temporary", "permanent"):
            qualifier = "period"
        signals.append(
            Signal(kind=m.kind, value=value, source_span=m.span, qualifier=qualifier, phrase=m.phrase)
        )

    has_vendor = any(s.kind is SignalKind.MANUFACTURER for s in signals)
    if prior_messages and not has_vendor:
        resolved = _resolve_replacement_reference(text, prior_messages)
        if resolved is not None and not any(s.source_span == resolved.source_span for s in signals):
            signals.append(resolved)
            signals.sort(key=lambda s: s.source_span)

    return signals


def signals_of(signals: Iterable[Signal], kind: SignalKind) -> List[Signal]:
    return [s for s in signals if s.kind is kind]


def extract_project_number(text: str) -> Optional[str]:
    """MT-2024-001 / ECR-12345 / DCR-1234 / WO-123456 references, or None."""
    if not text:
        return None
    for pattern, template in _PROJECT_PATTERNS:
        m = pattern.search(text)
        if m:
            return template.format(*m.groups())
    return None

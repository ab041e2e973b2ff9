# mt_brain/classifier.py
# -*- coding: utf-8 -*-
"""
MT classification decision engine.

Role
----
- classify(attrs):
    ScenarioAttributes -> ClassificationResult.
    Total and deterministic: every combination of attribute values, including
    all-unknown, yields a result. Nothing here raises or calls out.

Rules are an ordered table (RULES); the first rule whose predicate holds
builds the result. Precedence
-------
1) nothing to classify yet (no equipment, no action, no capability)  => unknown
2) identical replacement (same manufacturer / identity markers)      => Type V, minimal
3) temporary with a restoration plan                                 => Type IV, not required
4) replacement from a different manufacturer                         => Type III, required
5) new capability (digital / software / PLC / new design)            => Type I, required
6) everything else                                                   => Type II, required (neutral)

Safety elevation (SC / SS) only appends a note to reason; it never moves the tier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from . import vocabulary as vocab
from .schema import (
    ClassificationResult,
    DesignType,
    ELEVATED_SAFETY,
    MTRequirement,
    ScenarioAttributes,
)
from .utils_text import title_case

# ------------------------------------------------------------
# 1. Confidence constants
# ------------------------------------------------------------

IDENTICAL_BASE = 0.5
IDENTICAL_STEP = 0.15
IDENTICAL_CAP = 0.95

TEMPORARY_WITH_DURATION = 0.7
TEMPORARY_WITHOUT_DURATION = 0.5

NON_IDENTICAL_BASE = 0.4
NON_IDENTICAL_DOCS_BONUS = 0.3
NON_IDENTICAL_SAFETY_PENALTY = 0.1

NEW_DESIGN_CONFIDENCE = 0.6
NEUTRAL_CONFIDENCE = 0.5

SAFETY_REVIEW_NOTE = (
    "Enhanced engineering review is required regardless of design type "
    "({cls} equipment)."
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, round(value, 4)))


# ------------------------------------------------------------
# 2. Predicates
# ------------------------------------------------------------

def _same_identity_markers(attrs: ScenarioAttributes) -> List[str]:
    return sorted(m for m in attrs.identity_markers if m in vocab.SAME_IDENTITY_VALUES)


def _has_different_identity(attrs: ScenarioAttributes) -> bool:
    return any(m in vocab.DIFFERENT_IDENTITY_VALUES for m in attrs.identity_markers)


def _not_classifiable(attrs: ScenarioAttributes) -> bool:
    return attrs.equipment_type is None and attrs.action is None and not attrs.new_capability


def _is_identical(attrs: ScenarioAttributes) -> bool:
    if attrs.specifications_claimed_equal is False:
        return False

    if attrs.original_manufacturer is not None and attrs.original_manufacturer == attrs.replacement_manufacturer:
        return True

    return (
        attrs.is_temporary is False
        and bool(_same_identity_markers(attrs))
        and not _has_different_identity(attrs)
        and not attrs.manufacturer_changed()
    )


def _is_temporary(attrs: ScenarioAttributes) -> bool:
    return attrs.is_temporary is True and attrs.has_restoration_plan is True


def _is_non_identical(attrs: ScenarioAttributes) -> bool:
    return attrs.replacement_manufacturer is not None and attrs.manufacturer_changed()


def _is_new_capability(attrs: ScenarioAttributes) -> bool:
    return attrs.new_capability is True


def _always(attrs: ScenarioAttributes) -> bool:
    return True


# ------------------------------------------------------------
# 3. Result builders
# ------------------------------------------------------------

def _equipment(attrs: ScenarioAttributes) -> str:
    return attrs.equipment_type or "equipment"


def _build_unknown(attrs: ScenarioAttributes) -> ClassificationResult:
    return ClassificationResult(
        mt_required=MTRequirement.UNDETERMINED,
        design_type=DesignType.UNKNOWN,
        reason="Not enough information yet: no equipment or change action has been identified.",
        confidence=0.0,
    )


def identity_corroboration(attrs: ScenarioAttributes) -> List[str]:
    """Which of manufacturer / specification / part-number identity are backed by the record."""
    markers = set(_same_identity_markers(attrs))
    found: List[str] = []
    same_named = (
        attrs.original_manufacturer is not None
        and attrs.original_manufacturer == attrs.replacement_manufacturer
    )
    if same_named or "same_manufacturer" in markers:
        found.append("manufacturer")
    if attrs.specifications_claimed_equal is True:
        found.append("specification")
    if markers & {"same_part_number", "same_model", "identical"}:
        found.append("part-number")
    return found


def _build_identical(attrs: ScenarioAttributes) -> ClassificationResult:
    corroborated = identity_corroboration(attrs)
    confidence = min(IDENTICAL_CAP, IDENTICAL_BASE + IDENTICAL_STEP * len(corroborated))
    vendor = attrs.original_manufacturer or attrs.replacement_manufacturer
    basis = ", ".join(corroborated) if corroborated else "identity asserted"
    who = f" ({title_case(vendor)})" if vendor else ""
    return ClassificationResult(
        mt_required=MTRequirement.MINIMAL,
        design_type=DesignType.TYPE_V,
        reason=(
            f"Identical replacement of the {_equipment(attrs)}{who}: same make and specifications "
            f"[corroborated: {basis}]. Use the standard identical-replacement process; "
            "full MT documentation is not needed."
        ),
        confidence=confidence,
    )


def _build_temporary(attrs: ScenarioAttributes) -> ClassificationResult:
    confidence = TEMPORARY_WITH_DURATION if attrs.duration else TEMPORARY_WITHOUT_DURATION
    period = f" for {attrs.duration}" if attrs.duration else ""
    return ClassificationResult(
        mt_required=MTRequirement.NOT_REQUIRED,
        design_type=DesignType.TYPE_IV,
        reason=(
            f"Temporary change to the {_equipment(attrs)}{period} with a restoration plan. "
            "Follow the temporary modification process instead of a full MT."
        ),
        confidence=confidence,
    )


def _build_non_identical(attrs: ScenarioAttributes) -> ClassificationResult:
    confidence = NON_IDENTICAL_BASE
    if attrs.has_equivalency_docs is True:
        confidence += NON_IDENTICAL_DOCS_BONUS
    elif attrs.safety_marker in ELEVATED_SAFETY:
        confidence -= NON_IDENTICAL_SAFETY_PENALTY

    original = title_case(attrs.original_manufacturer) if attrs.original_manufacturer else "the original manufacturer"
    replacement = title_case(attrs.replacement_manufacturer or "")
    if attrs.has_equivalency_docs is True:
        docs = "Vendor equivalency documentation is available for review."
    elif attrs.has_equivalency_docs is False:
        docs = "No equivalency documentation yet; an equivalency evaluation is needed."
    else:
        docs = "Equivalency documentation status is unknown."
    specs = ""
    if attrs.specifications_claimed_equal is True:
        specs = " Matching specifications do not remove the equivalency verification."
    return ClassificationResult(
        mt_required=MTRequirement.REQUIRED,
        design_type=DesignType.TYPE_III,
        reason=(
            f"Non-identical replacement: the {_equipment(attrs)} changes from {original} to {replacement}. "
            f"{docs}{specs}"
        ),
        confidence=_clamp(confidence),
    )


def _build_new_design(attrs: ScenarioAttributes) -> ClassificationResult:
    markers = ", ".join(sorted(m.replace("_", " ") for m in attrs.capability_markers)) or "new capability"
    return ClassificationResult(
        mt_required=MTRequirement.REQUIRED,
        design_type=DesignType.TYPE_I,
        reason=(
            f"New capability introduced ({markers}). New designs receive the highest scrutiny "
            "and need a full MT with design verification."
        ),
        confidence=NEW_DESIGN_CONFIDENCE,
    )


def _build_modification(attrs: ScenarioAttributes) -> ClassificationResult:
    return ClassificationResult(
        mt_required=MTRequirement.REQUIRED,
        design_type=DesignType.TYPE_II,
        reason=(
            f"Modification of the {_equipment(attrs)} with no replacement-identity claim. "
            "Neutral classification; needs engineering review."
        ),
        confidence=NEUTRAL_CONFIDENCE,
    )


# ------------------------------------------------------------
# 4. Rule table
# ------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    name: str
    applies: Callable[[ScenarioAttributes], bool]
    build: Callable[[ScenarioAttributes], ClassificationResult]


RULES: Tuple[Rule, ...] = (
    Rule("not_classifiable", _not_classifiable, _build_unknown),
    Rule("identical_replacement", _is_identical, _build_identical),
    Rule("temporary_change", _is_temporary, _build_temporary),
    Rule("non_identical_replacement", _is_non_identical, _build_non_identical),
    Rule("new_capability", _is_new_capability, _build_new_design),
    Rule("modification", _always, _build_modification),
)


def _with_safety_note(result: ClassificationResult, attrs: ScenarioAttributes) -> ClassificationResult:
    if attrs.safety_marker not in ELEVATED_SAFETY:
        return result
    note = SAFETY_REVIEW_NOTE.format(cls=attrs.safety_marker.value)
    return ClassificationResult(
        mt_required=result.mt_required,
        design_type=result.design_type,
        reason=f"{result.reason} {note}",
        confidence=result.confidence,
        rule=result.rule,
    )


# ------------------------------------------------------------
# 5. Main entry
# ------------------------------------------------------------

def classify(attrs: ScenarioAttributes) -> ClassificationResult:
    """First matching rule wins; the final rule always matches."""
    for rule in RULES:
        if rule.applies(attrs):
            built = rule.build(attrs)
            result = ClassificationResult(
                mt_required=built.mt_required,
                design_type=built.design_type,
                reason=built.reason,
                confidence=_clamp(built.confidence),
                rule=rule.name,
            )
            return _with_safety_note(result, attrs)

    # unreachable: the modification rule matches everything
    return _build_modification(attrs)

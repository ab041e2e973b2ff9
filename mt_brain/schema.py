# -*- coding: utf-8 -*-
"""
mt_brain.schema

Data structures shared by the extractor, decision engine, state machine and
aggregator.

- SafetyClass         : SC / SS / GS
- DesignType          : Type I .. V (+ unknown while not classifiable)
- MTRequirement       : yes / minimal / no / undetermined
- Stage, Field        : state-machine stages and the fields it asks for
- ScenarioAttributes  : the accumulating record of one scenario
- ClassificationResult: derived verdict, frozen once built
- ArchivedScenario    : one ScenarioHistory entry
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple


# ---------------------------------------------------------
# Enums
# ---------------------------------------------------------

class SafetyClass(str, Enum):
    SC = "SC"  # Safety Class
    SS = "SS"  # Safety Significant
    GS = "GS"  # General Service


ELEVATED_SAFETY = (SafetyClass.SC, SafetyClass.SS)


class DesignType(str, Enum):
    TYPE_I = "I"      # new design
    TYPE_II = "II"    # modification
    TYPE_III = "III"  # non-identical replacement
    TYPE_IV = "IV"    # temporary
    TYPE_V = "V"      # identical replacement
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return DESIGN_TYPE_LABELS[self]


DESIGN_TYPE_LABELS = {
    DesignType.TYPE_I: "Type I - New Design",
    DesignType.TYPE_II: "Type II - Modification",
    DesignType.TYPE_III: "Type III - Non-Identical Replacement",
    DesignType.TYPE_IV: "Type IV - Temporary Modification",
    DesignType.TYPE_V: "Type V - Identical Replacement",
    DesignType.UNKNOWN: "Not yet classifiable",
}


class MTRequirement(str, Enum):
    REQUIRED = "yes"
    MINIMAL = "minimal"
    NOT_REQUIRED = "no"
    UNDETERMINED = "undetermined"


class Stage(str, Enum):
    COLLECTING_EQUIPMENT = "collecting_equipment"
    COLLECTING_ORIGINAL_MFG = "collecting_original_mfg"
    COLLECTING_REPLACEMENT_MFG = "collecting_replacement_mfg"
    COLLECTING_DURATION = "collecting_duration"
    COLLECTING_EQUIVALENCE = "collecting_equivalence"
    READY_TO_CLASSIFY = "ready_to_classify"
    ARCHIVED = "archived"


class Field(str, Enum):
    EQUIPMENT_TYPE = "equipment_type"
    ORIGINAL_MANUFACTURER = "original_manufacturer"
    REPLACEMENT_MANUFACTURER = "replacement_manufacturer"
    DURATION = "is_temporary"
    RESTORATION_PLAN = "has_restoration_plan"
    EQUIVALENCE = "has_equivalency_docs"


FIELD_STAGES = {
    None: Stage.READY_TO_CLASSIFY,
    Field.EQUIPMENT_TYPE: Stage.COLLECTING_EQUIPMENT,
    Field.ORIGINAL_MANUFACTURER: Stage.COLLECTING_ORIGINAL_MFG,
    Field.REPLACEMENT_MANUFACTURER: Stage.COLLECTING_REPLACEMENT_MFG,
    Field.DURATION: Stage.COLLECTING_DURATION,
    Field.RESTORATION_PLAN: Stage.COLLECTING_DURATION,
    Field.EQUIVALENCE: Stage.COLLECTING_EQUIVALENCE,
}


# ---------------------------------------------------------
# Scenario attributes
# ---------------------------------------------------------

# fields counted by the completeness ratio
TRACKED_FIELDS: Tuple[str, ...] = (
    "equipment_type",
    "original_manufacturer",
    "replacement_manufacturer",
    "specifications_claimed_equal",
    "has_equivalency_docs",
    "is_temporary",
    "safety_marker",
)


@dataclass
class ScenarioAttributes:
    """
    Accumulating record of one scenario.

    None means "unknown". Values only move from unknown to known, or from
    one known value to a contradicting one through merge(); nothing here
    clears a field. A fresh instance is the only way back to unknown.
    """
    equipment_type: Optional[str] = None
    original_manufacturer: Optional[str] = None
    replacement_manufacturer: Optional[str] = None
    specifications_claimed_equal: Optional[bool] = None
    has_equivalency_docs: Optional[bool] = None
    is_temporary: Optional[bool] = None
    safety_marker: Optional[SafetyClass] = None

    # supporting fields used by the rules
    action: Optional[str] = None
    new_capability: Optional[bool] = None
    has_restoration_plan: Optional[bool] = None
    duration: Optional[str] = None
    system: Optional[str] = None
    identity_markers: Set[str] = field(default_factory=set)
    capability_markers: Set[str] = field(default_factory=set)

    def merge(self, name: str, value: Any) -> bool:
        """
        Set one scalar field. None never overwrites.
        Returns True when the stored value changed.
        """
        if value is None:
            return False
        if getattr(self, name) == value:
            return False
        setattr(self, name, value)
        return True

    def add_marker(self, name: str, value: str) -> bool:
        markers: Set[str] = getattr(self, name)
        if value in markers:
            return False
        markers.add(value)
        return True

    # -----------------------------------------------------

    def known_fields(self) -> List[str]:
        return [f for f in TRACKED_FIELDS if getattr(self, f) is not None]

    def completeness(self) -> float:
        return len(self.known_fields()) / len(TRACKED_FIELDS)

    def is_empty(self) -> bool:
        return (
            not self.known_fields()
            and self.action is None
            and self.new_capability is None
            and self.system is None
            and not self.identity_markers
        )

    def manufacturer_changed(self) -> bool:
        return (
            self.replacement_manufacturer is not None
            and self.replacement_manufacturer != self.original_manufacturer
        )

    def snapshot(self) -> "ScenarioAttributes":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["safety_marker"] = self.safety_marker.value if self.safety_marker else None
        d["identity_markers"] = sorted(self.identity_markers)
        d["capability_markers"] = sorted(self.capability_markers)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioAttributes":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        safety = known.get("safety_marker")
        if safety is not None and not isinstance(safety, SafetyClass):
            known["safety_marker"] = SafetyClass(str(safety).upper())
        known["identity_markers"] = set(known.get("identity_markers") or ())
        known["capability_markers"] = set(known.get("capability_markers") or ())
        return cls(**known)


# ---------------------------------------------------------
# Results / history
# ---------------------------------------------------------

@dataclass(frozen=True)
class ClassificationResult:
    mt_required: MTRequirement
    design_type: DesignType
    reason: str
    confidence: float
    rule: str = ""

    @property
    def requires_mt(self) -> bool:
        return self.mt_required is MTRequirement.REQUIRED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mt_required": self.mt_required.value,
            "design_type": self.design_type.value,
            "design_type_label": self.design_type.label,
            "reason": self.reason,
            "confidence": self.confidence,
            "rule": self.rule,
        }


@dataclass(frozen=True)
class ArchivedScenario:
    scenario_number: int
    title: str
    summary: str
    classification: ClassificationResult
    attributes: ScenarioAttributes
    archived_reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario_number": self.scenario_number,
            "title": self.title,
            "summary": self.summary,
            "classification": self.classification.to_dict(),
            "attributes": self.attributes.to_dict(),
            "archived_reason": self.archived_reason,
        }

# -*- coding: utf-8 -*-
"""
mt_brain.decision_tree

Figure 1 questionnaire decision tree.

For callers that already hold a filled-in traveler questionnaire (yes/no
answers instead of free text). Steps run in order and the first one that
fires decides, the same way the conversational rules do:

 1) all changes temporary                 -> not required, Type IV
 2) non-physical change
      - facility change package applies  -> not required (facility change process), Type II
      - needs new/revised procedures     -> required, Type II
      - otherwise                        -> not required, Type II
 3) identical replacement                 -> minimal, Type V
 4) design outside the DA's group         -> required
 5) new/revised procedures or training    -> required
 6) more than one design document         -> required
 7) not single-discipline                 -> required
 8) revisions outside the DA's group      -> required
 9) software change                       -> required
10) hoisting and/or rigging               -> required
11) none of the above                     -> not required (possibly exempt)

For steps 4-11 the design type comes from the free-text problem description
and proposed solution (replacement -> III, new installation -> I, else II).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict

from .extractor import SignalKind, extract_signals
from .schema import ClassificationResult, DesignType, MTRequirement

# a questionnaire answer is explicit, so the decisive steps score high;
# the exempt fall-through is only "possibly" exempt
DECISIVE_CONFIDENCE = 0.9
FALLTHROUGH_CONFIDENCE = 0.6

FACILITY_CHANGE_PROCESS = "Facilities Change Package process"

_FAILURE_WORDS = ("failed", "failure", "broken", "worn out")


@dataclass
class TravelerQuestionnaire:
    is_temporary: bool = False
    is_physical_change: bool = True
    is_identical_replacement: bool = False
    is_design_outside_da: bool = False
    requires_new_procedures: bool = False
    requires_multiple_documents: bool = False
    is_single_discipline: bool = True
    revisions_outside_da: bool = False
    requires_software_change: bool = False
    requires_hoisting_rigging: bool = False
    facility_change_package_applicable: bool = False
    problem_description: str = ""
    proposed_solution: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TravelerQuestionnaire":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names and v is not None})


def design_type_from_text(q: TravelerQuestionnaire) -> DesignType:
    """Design type for the required/exempt branches, read off the free text."""
    if q.is_temporary:
        return DesignType.TYPE_IV
    if q.is_identical_replacement:
        return DesignType.TYPE_V

    text = f"{q.problem_description}. {q.proposed_solution}"
    signals = extract_signals(text)

    # replacement language beats new-installation language
    if any(s.kind is SignalKind.ACTION_MARKER and s.value == "replace" for s in signals):
        return DesignType.TYPE_III
    if any(w in text.lower() for w in _FAILURE_WORDS):
        return DesignType.TYPE_III

    if any(s.kind is SignalKind.CAPABILITY_MARKER and s.value == "new_design" for s in signals):
        return DesignType.TYPE_I

    return DesignType.TYPE_II


def _result(required: MTRequirement, design: DesignType, reason: str, step: str,
            confidence: float = DECISIVE_CONFIDENCE) -> ClassificationResult:
    return ClassificationResult(
        mt_required=required,
        design_type=design,
        reason=reason,
        confidence=confidence,
        rule=f"questionnaire:{step}",
    )


# step name, answer that fires it, reason
_REQUIRED_STEPS = (
    ("design_outside_da", lambda q: q.is_design_outside_da,
     "Design is being performed outside the Design Authority's group."),
    ("new_procedures", lambda q: q.requires_new_procedures,
     "New or revised technical procedures, training or maintenance manuals are required."),
    ("multiple_documents", lambda q: q.requires_multiple_documents,
     "More than one design document (ECN, DCN, EDT, ...) is needed."),
    ("multi_discipline", lambda q: not q.is_single_discipline,
     "The design spans more than one engineering discipline."),
    ("revisions_outside_da", lambda q: q.revisions_outside_da,
     "Revisions are implemented outside the Design Authority's group."),
    ("software_change", lambda q: q.requires_software_change,
     "The change also requires a software change."),
    ("hoisting_rigging", lambda q: q.requires_hoisting_rigging,
     "The change requires hoisting and/or rigging."),
)


def evaluate_questionnaire(q: TravelerQuestionnaire) -> ClassificationResult:
    # Step 1
    if q.is_temporary:
        return _result(
            MTRequirement.NOT_REQUIRED, DesignType.TYPE_IV,
            "All changes are temporary; follow the temporary modification process.",
            "temporary",
        )

    # Step 2
    if not q.is_physical_change:
        if q.facility_change_package_applicable:
            return _result(
                MTRequirement.NOT_REQUIRED, DesignType.TYPE_II,
                f"Non-physical change; use the {FACILITY_CHANGE_PROCESS}.",
                "facility_change_package",
            )
        if q.requires_new_procedures:
            return _result(
                MTRequirement.REQUIRED, DesignType.TYPE_II,
                "Non-physical change requiring new or revised technical procedures.",
                "non_physical_procedures",
            )
        return _result(
            MTRequirement.NOT_REQUIRED, DesignType.TYPE_II,
            "Non-physical change; an MT may not be required.",
            "non_physical",
        )

    # Step 3
    if q.is_identical_replacement:
        return _result(
            MTRequirement.MINIMAL, DesignType.TYPE_V,
            "Identical replacement; use the standard identical-replacement process.",
            "identical_replacement",
        )

    # Steps 4-10
    for step, fires, reason in _REQUIRED_STEPS:
        if fires(q):
            return _result(MTRequirement.REQUIRED, design_type_from_text(q), reason, step)

    # Step 11
    return _result(
        MTRequirement.NOT_REQUIRED, design_type_from_text(q),
        "Possibly exempt based on the decision tree criteria; confirm with the Design Authority.",
        "possibly_exempt",
        confidence=FALLTHROUGH_CONFIDENCE,
    )

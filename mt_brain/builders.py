# -*- coding: utf-8 -*-
"""
mt_brain.builders

Wraps classification / state results into the shape the caller shows.

Main functions:
- expected_outputs(result, attrs):
    design outputs the design type implies (drawings, calculations, PrHA,
    compatibility analysis, restoration plan, ...).

- build_classification_text(...):
    the verdict block shown once a scenario is ready to classify.

- build_response_text(...):
    the full reply for one turn: archive notes, verdict or follow-up
    question, and notices.

Nothing here decides anything; it only assembles what the decision engine,
aggregator and state machine produced.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from .aggregator import RiskAssessment
from .schema import (
    ArchivedScenario,
    ClassificationResult,
    DesignType,
    ELEVATED_SAFETY,
    ScenarioAttributes,
)


@dataclass(frozen=True)
class DesignOutput:
    type: str
    description: str
    required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------
# 1) Expected design outputs
# ---------------------------------------------------------

_ALWAYS = (
    DesignOutput("Design Drawings", "Technical drawings and specifications"),
    DesignOutput("Calculations", "Engineering calculations and analysis"),
)

_BY_DESIGN_TYPE = {
    DesignType.TYPE_I: (
        DesignOutput("PrHA", "Process Hazard Analysis"),
        DesignOutput("IQRPE", "Installation, Qualification, Readiness, Performance Evaluation"),
        DesignOutput("Environmental Assessment", "Environmental impact evaluation"),
    ),
    DesignType.TYPE_II: (
        DesignOutput("Impact Analysis", "Analysis of system impacts"),
    ),
    DesignType.TYPE_III: (
        DesignOutput("Compatibility Analysis", "Component compatibility verification"),
        DesignOutput("Installation Plan", "Replacement installation procedures"),
    ),
    DesignType.TYPE_IV: (
        DesignOutput("Temporary Installation Plan", "Temporary modification procedures"),
        DesignOutput("Restoration Plan", "Plan to restore original configuration"),
    ),
    DesignType.TYPE_V: (
        DesignOutput("Verification Documentation", "Documentation proving identical replacement"),
    ),
}

_SAFETY = DesignOutput("Safety Analysis", "Safety system impact analysis")

_SOFTWARE = (
    DesignOutput("Software Design Document", "Software modification specifications"),
    DesignOutput("Testing Plan", "Software testing and validation plan"),
)

_SOFTWARE_MARKERS = {"digital", "software", "programmable_logic"}


def expected_outputs(
    result: Optional[ClassificationResult],
    attrs: ScenarioAttributes,
) -> List[DesignOutput]:
    if result is None or result.design_type is DesignType.UNKNOWN:
        return []

    outputs: List[DesignOutput] = list(_ALWAYS)
    outputs.extend(_BY_DESIGN_TYPE.get(result.design_type, ()))

    if result.design_type is DesignType.TYPE_III and attrs.has_equivalency_docs is not True:
        outputs.append(DesignOutput("Equivalency Evaluation", "Evaluation of replacement against original specifications"))

    if attrs.safety_marker in ELEVATED_SAFETY:
        outputs.append(_SAFETY)

    if attrs.capability_markers & _SOFTWARE_MARKERS:
        outputs.extend(_SOFTWARE)

    return outputs


# ---------------------------------------------------------
# 2) Reply text
# ---------------------------------------------------------

def build_classification_text(
    scenario_number: int,
    title: str,
    result: ClassificationResult,
    assessment: Optional[RiskAssessment],
    outputs: List[DesignOutput],
) -> str:
    lines = [
        f"Scenario {scenario_number}: {title}",
        f"Design type: {result.design_type.label}",
        f"MT required: {result.mt_required.value}",
    ]
    if assessment is not None:
        lines.append(f"Confidence: {assessment.score:.2f} ({assessment.band.value.replace('_', ' ')})")
    lines.append(f"Reason: {result.reason}")
    if outputs:
        lines.append("Expected outputs: " + ", ".join(o.type for o in outputs))
    return "\n".join(lines)


def build_archive_note(entry: ArchivedScenario) -> str:
    return (
        f"Scenario {entry.scenario_number} ({entry.title}) saved to history as "
        f"{entry.classification.design_type.label}."
    )


def build_response_text(
    body: str,
    archived: Optional[List[ArchivedScenario]] = None,
    notices: Optional[List[str]] = None,
) -> str:
    parts: List[str] = []
    for entry in archived or []:
        parts.append(build_archive_note(entry))
    if body:
        parts.append(body)
    for notice in notices or []:
        parts.append(f"Note: {notice}")
    return "\n\n".join(parts)

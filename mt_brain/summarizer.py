# mt_brain/summarizer.py
# -*- coding: utf-8 -*-
"""
mt_brain.summarizer

Short titles / summaries for scenarios, and the prompts handed to the
text-generation collaborator.

Main functions:
- build_title(attrs):
    "Pump Replacement", "Transmitter Digital Upgrade", ... for the history list.

- build_summary(attrs, result):
    one-line scenario summary ("Westinghouse to ABB pump, Type III ...").

- build_fallback_answer():
    local answer for a general question when the collaborator is not used
    or not available.

- general_question_prompt(text) / phrasing_prompt(...):
    prompts for the collaborator.
"""

from __future__ import annotations

from typing import List, Optional

from .schema import ClassificationResult, DesignType, ScenarioAttributes
from .utils_text import snippet, title_case

_ACTION_TITLES = {
    "replace": "Replacement",
    "modify": "Modification",
    "install": "Installation",
    "upgrade": "Upgrade",
}


def build_title(attrs: ScenarioAttributes) -> str:
    equipment = title_case(attrs.equipment_type or "equipment")
    if attrs.new_capability and attrs.capability_markers & {"digital", "programmable_logic", "software"}:
        return f"{equipment} Digital Upgrade"
    if attrs.is_temporary:
        return f"Temporary {equipment} {_ACTION_TITLES.get(attrs.action or 'modify', 'Modification')}"
    action = attrs.action or ("replace" if attrs.replacement_manufacturer else "modify")
    return f"{equipment} {_ACTION_TITLES.get(action, 'Change')}"


def build_summary(attrs: ScenarioAttributes, result: Optional[ClassificationResult]) -> str:
    parts: List[str] = []

    equipment = attrs.equipment_type or "equipment"
    if attrs.original_manufacturer or attrs.replacement_manufacturer:
        original = title_case(attrs.original_manufacturer or "unknown")
        replacement = title_case(attrs.replacement_manufacturer or "unknown")
        parts.append(f"{original} to {replacement} {equipment}")
    else:
        parts.append(build_title(attrs).lower())

    if attrs.system:
        parts.append(f"{attrs.system} system")
    if attrs.safety_marker is not None:
        parts.append(f"{attrs.safety_marker.value} equipment")

    if result is not None and result.design_type is not DesignType.UNKNOWN:
        parts.append(f"{result.design_type.label}, MT required: {result.mt_required.value}")
    else:
        parts.append("not classified")

    return "; ".join(parts)


def build_fallback_answer() -> str:
    """Local answer used when no scenario has been described yet."""
    return (
        "I can help you decide whether a change needs a Modification Traveler (MT) "
        "and which design type applies. Tell me what equipment is involved, "
        "what you plan to do with it (replace, modify, install, upgrade), "
        "and who the original and replacement manufacturers are."
    )


# ---------------------------------------------------------
# Collaborator prompts
# ---------------------------------------------------------

def general_question_prompt(text: str) -> str:
    return "\n".join(
        [
            "An engineer asked the following about change control.",
            "Answer in 2-3 sentences. If the question describes a specific change, "
            "ask for the equipment type and the original and replacement manufacturers.",
            "",
            "[question]",
            snippet(text, 600),
        ]
    )


def phrasing_prompt(question: str, attrs: ScenarioAttributes) -> str:
    """Ask the collaborator to rephrase one follow-up question in context."""
    known = ", ".join(f"{k}={v}" for k, v in attrs.to_dict().items() if v not in (None, [], ""))
    return "\n".join(
        [
            "Rephrase the follow-up question below so it reads naturally for this change.",
            "Keep its meaning; ask exactly one question; one sentence.",
            "",
            f"[known so far] {known or 'nothing yet'}",
            f"[question] {question}",
        ]
    )

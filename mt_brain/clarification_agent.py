# -*- coding: utf-8 -*-
"""
mt_brain.clarification_agent

Follow-up questions (clarification) for the field the state machine is
waiting on.

Input:
- field : the Field returned by next_question()
- attrs : the scenario record so far (used to make the question specific)

Output:
- local_question(field, attrs)      : deterministic template text
- phrase_question(field, attrs, gen): the same question, rephrased by the
  collaborator. Raises CollaboratorUnavailable; the engine falls back to
  local_question() in that case.
"""

from typing import Dict, Optional

from .llm_client import TextGenerator, generate_bounded
from .schema import Field, ScenarioAttributes
from .summarizer import phrasing_prompt
from .utils_text import title_case

QUESTION_TEMPLATES: Dict[Field, str] = {
    Field.EQUIPMENT_TYPE: (
        "What equipment is involved (for example a pump, valve, motor, transmitter or breaker)?"
    ),
    Field.ORIGINAL_MANUFACTURER: (
        "Who is the manufacturer of the existing {equipment}?"
    ),
    Field.REPLACEMENT_MANUFACTURER: (
        "Who manufactures the replacement {equipment}? "
        "If it is the same manufacturer and part number, just say so."
    ),
    Field.DURATION: (
        "Is this {equipment} change temporary or permanent?"
    ),
    Field.RESTORATION_PLAN: (
        "Since the {equipment} change is temporary, is there a plan to restore "
        "the original configuration (and roughly when)?"
    ),
    Field.EQUIVALENCE: (
        "Do you have equivalency documentation showing the {replacement} {equipment} "
        "meets the original {original} specifications?"
    ),
}


def local_question(field: Field, attrs: ScenarioAttributes) -> str:
    template = QUESTION_TEMPLATES[field]
    return template.format(
        equipment=attrs.equipment_type or "equipment",
        original=title_case(attrs.original_manufacturer or "") or "original",
        replacement=title_case(attrs.replacement_manufacturer or "") or "replacement",
    ).replace("  ", " ")


def phrase_question(
    field: Field,
    attrs: ScenarioAttributes,
    generator: TextGenerator,
    timeout: Optional[float] = None,
) -> str:
    """Collaborator phrasing of the same question. May raise CollaboratorUnavailable."""
    base = local_question(field, attrs)
    text = generate_bounded(generator, phrasing_prompt(base, attrs), timeout=timeout)
    # one question, one line
    return text.splitlines()[0].strip()

# -*- coding: utf-8 -*-
"""
mt_brain package

Core logic of the MT (Modification Traveler) classification assistant.

Callers (app_fastapi.py, main.py) usually only use these:

- process_message(session_id, text):
    one chat message in; extracted signals, the updated scenario record,
    the next follow-up question or the classification, and the scenario
    history out.
- reset_session(session_id) / finalize_scenario(session_id)

The details live in these modules:

- utils_text          : normalisation, phrase patterns with spans
- vocabulary          : closed vocabularies (equipment, vendors, safety, ...)
- extractor           : message -> typed signals
- schema              : enums and dataclasses shared by everything
- classifier          : decision rules -> design type I-V, MT required?
- decision_tree       : Figure 1 questionnaire decision tree
- aggregator          : confidence + completeness -> risk band
- turn_router         : new scenario or the same one?
- scenario_state      : field filling, next question, scenario history
- llm_client          : OpenAI wrapper with a bounded timeout
- clarification_agent : follow-up question wording
- summarizer          : scenario titles / summaries, collaborator prompts
- builders            : reply text and expected design outputs
"""

from .classifier import classify
from .mt_engine import (
    MTEngine,
    TurnResult,
    finalize_scenario,
    process_message,
    reset_session,
)

__all__ = [
    "MTEngine",
    "TurnResult",
    "classify",
    "finalize_scenario",
    "process_message",
    "reset_session",
]

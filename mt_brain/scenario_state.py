# -*- coding: utf-8 -*-
"""
scenario_state.py

State module for multi-turn MT conversations. It handles
- filling the scenario record from one message's signals
- choosing the next follow-up question (and with it the stage)
- scenario boundaries: reset, clear, finish (archive)

Main roles
--------------------------------------
1) apply_signals(attrs, signals, awaiting_field)
   - writes each signal into its field; None never overwrites,
     an explicit contradicting signal does
   - manufacturers go to original / replacement by their role hint,
     unhinted ones fill original first, then replacement
   - bare yes / no fills the field that was just asked
   - two different values for one field in one message: the last one wins
     and an ambiguity note is returned

2) next_question(attrs) / stage_for(attrs)
   - the most specific still-unknown field, or None once the scenario can
     be classified (READY_TO_CLASSIFY)

3) ConversationSession.ingest(text, signals)
   - reset check (mt_brain.turn_router), field filling, next question,
     finish handling; returns an IngestOutcome for the engine

4) ConversationSession.reset() / clear() / finalize()
   - reset / finalize archive the open scenario with its best-available
     classification into the history
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from core.logging import logger

from . import vocabulary as vocab
from .classifier import classify
from .extractor import Signal, SignalKind
from .schema import (
    ArchivedScenario,
    ClassificationResult,
    Field,
    FIELD_STAGES,
    SafetyClass,
    ScenarioAttributes,
    Stage,
)
from .summarizer import build_summary, build_title
from .turn_router import RouteDecision, route_turn

# identity markers that contradict each other
_SAME = set(vocab.SAME_IDENTITY_VALUES)
_DIFFERENT = set(vocab.DIFFERENT_IDENTITY_VALUES)

# fields a bare yes / no can answer
_YES_NO_FIELDS = (Field.DURATION, Field.RESTORATION_PLAN, Field.EQUIVALENCE)

# signal kinds that carry scenario content (not commands or bare answers)
_CONTENT_KINDS = {
    SignalKind.EQUIPMENT_TYPE,
    SignalKind.MANUFACTURER,
    SignalKind.SAFETY_MARKER,
    SignalKind.IDENTITY_MARKER,
    SignalKind.DURATION_MARKER,
    SignalKind.ACTION_MARKER,
    SignalKind.CAPABILITY_MARKER,
    SignalKind.SPECIFICATION_MARKER,
    SignalKind.DOCUMENTATION_MARKER,
    SignalKind.RESTORATION_MARKER,
    SignalKind.SYSTEM_MARKER,
}


def has_content(signals: List[Signal]) -> bool:
    return any(s.kind in _CONTENT_KINDS for s in signals)


# ---------------------------------------------------------
# 1) Signals -> fields
# ---------------------------------------------------------

class _FieldWrites:
    """Collects the writes of one message so conflicts inside it can be reported."""

    def __init__(self) -> None:
        self.values: Dict[str, List[Any]] = {}

    def put(self, name: str, value: Any) -> None:
        self.values.setdefault(name, []).append(value)

    def final(self) -> List[Tuple[str, Any]]:
        return [(name, vals[-1]) for name, vals in self.values.items()]

    def conflicts(self) -> List[str]:
        notes: List[str] = []
        for name, vals in self.values.items():
            distinct: List[Any] = []
            for v in vals:
                if v not in distinct:
                    distinct.append(v)
            if len(distinct) > 1:
                shown = " vs ".join(repr(v) for v in distinct)
                notes.append(f"conflicting {name} in one message ({shown}); kept {distinct[-1]!r}")
        return notes


def _assign_manufacturers(
    attrs: ScenarioAttributes,
    signals: List[Signal],
    awaiting_field: Optional[Field],
    writes: _FieldWrites,
) -> None:
    original = attrs.original_manufacturer
    replacement = attrs.replacement_manufacturer

    for s in signals:
        if s.kind is not SignalKind.MANUFACTURER:
            continue

        role = s.qualifier
        if role is None:
            if awaiting_field is Field.ORIGINAL_MANUFACTURER:
                role = "original"
            elif awaiting_field is Field.REPLACEMENT_MANUFACTURER:
                role = "replacement"
            elif s.value in (original, replacement):
                # already placed; repeating a name is not new information
                continue
            elif original is None:
                role = "original"
            else:
                role = "replacement"

        if role == "original":
            original = s.value
            writes.put("original_manufacturer", s.value)
        else:
            replacement = s.value
            writes.put("replacement_manufacturer", s.value)
        # a vendor answering one question should not also answer the next one
        awaiting_field = None


def _collect_writes(
    attrs: ScenarioAttributes,
    signals: List[Signal],
    awaiting_field: Optional[Field],
) -> Tuple[_FieldWrites, Dict[str, List[str]]]:
    writes = _FieldWrites()
    markers: Dict[str, List[str]] = {"identity_markers": [], "capability_markers": []}
    answered: set = set()

    equipment = [s.value for s in signals if s.kind is SignalKind.EQUIPMENT_TYPE]
    if equipment and attrs.equipment_type not in equipment:
        for value in equipment:
            writes.put("equipment_type", value)

    _assign_manufacturers(attrs, signals, awaiting_field, writes)

    for s in signals:
        kind = s.kind
        if kind is SignalKind.SAFETY_MARKER:
            writes.put("safety_marker", SafetyClass(s.value))
        elif kind is SignalKind.IDENTITY_MARKER:
            markers["identity_markers"].append(s.value)
        elif kind is SignalKind.DURATION_MARKER:
            if s.qualifier == "period":
                writes.put("duration", s.value)
            else:
                writes.put("is_temporary", s.value == "temporary")
                answered.add(Field.DURATION)
        elif kind is SignalKind.ACTION_MARKER:
            writes.put("action", s.value)
        elif kind is SignalKind.CAPABILITY_MARKER:
            writes.put("new_capability", True)
            markers["capability_markers"].append(s.value)
        elif kind is SignalKind.SPECIFICATION_MARKER:
            writes.put("specifications_claimed_equal", s.value == "equal")
        elif kind is SignalKind.DOCUMENTATION_MARKER:
            writes.put("has_equivalency_docs", s.value == "present")
            answered.add(Field.EQUIVALENCE)
        elif kind is SignalKind.RESTORATION_MARKER:
            writes.put("has_restoration_plan", s.value == "restoration")
            answered.add(Field.RESTORATION_PLAN)
        elif kind is SignalKind.SYSTEM_MARKER:
            writes.put("system", s.value)

    # bare yes / no answers the question that was just asked
    answers = [s.value for s in signals if s.kind is SignalKind.ANSWER_MARKER]
    if answers and awaiting_field in _YES_NO_FIELDS and awaiting_field not in answered:
        writes.put(awaiting_field.value, answers[-1] == "yes")

    return writes, markers


def _apply_identity_marker(attrs: ScenarioAttributes, value: str) -> bool:
    # "same manufacturer" and "different manufacturer" cannot both stand
    opposite = _DIFFERENT if value in _SAME else _SAME
    removed = bool(attrs.identity_markers & opposite)
    attrs.identity_markers -= opposite
    added = attrs.add_marker("identity_markers", value)
    return added or removed


def apply_signals(
    attrs: ScenarioAttributes,
    signals: List[Signal],
    awaiting_field: Optional[Field] = None,
) -> Tuple[List[str], List[str]]:
    """
    Fill attrs in place from one message's signals.
    Returns (changed field names, ambiguity notes).
    """
    writes, markers = _collect_writes(attrs, signals, awaiting_field)
    notes = writes.conflicts()
    changed: List[str] = []

    for name, value in writes.final():
        before = getattr(attrs, name)
        if attrs.merge(name, value):
            changed.append(name)
            if before is not None:
                logger.info(f"[scenario] {name} corrected: {before!r} -> {value!r}")

    identity = markers["identity_markers"]
    if set(identity) & _SAME and set(identity) & _DIFFERENT:
        notes.append(f"conflicting identity markers in one message ({', '.join(identity)}); kept {identity[-1]!r}")
    for value in identity:
        if _apply_identity_marker(attrs, value) and "identity_markers" not in changed:
            changed.append("identity_markers")

    for value in markers["capability_markers"]:
        if attrs.add_marker("capability_markers", value) and "capability_markers" not in changed:
            changed.append("capability_markers")

    # "same manufacturer" with one side named names the other side too
    if "same_manufacturer" in attrs.identity_markers:
        if attrs.original_manufacturer and attrs.replacement_manufacturer is None:
            attrs.merge("replacement_manufacturer", attrs.original_manufacturer)
            changed.append("replacement_manufacturer")
        elif attrs.replacement_manufacturer and attrs.original_manufacturer is None:
            attrs.merge("original_manufacturer", attrs.replacement_manufacturer)
            changed.append("original_manufacturer")

    return changed, notes


def attributes_from_signals(signals: List[Signal]) -> ScenarioAttributes:
    """One message read on its own, without any context."""
    attrs = ScenarioAttributes()
    apply_signals(attrs, signals)
    return attrs


# ---------------------------------------------------------
# 2) Next question / stage
# ---------------------------------------------------------

def _identity_shortcut(attrs: ScenarioAttributes) -> bool:
    return classify(attrs).rule == "identical_replacement"


def next_question(attrs: ScenarioAttributes) -> Optional[Field]:
    """
    Most specific still-unknown field, or None when the scenario is ready
    to classify. A message that answers several fields skips their stages.
    """
    if attrs.new_capability:
        return None
    if attrs.equipment_type is not None and _identity_shortcut(attrs):
        return None
    if attrs.is_temporary is True and attrs.has_restoration_plan is True:
        return None

    if attrs.equipment_type is None:
        return Field.EQUIPMENT_TYPE

    if attrs.is_temporary is True and attrs.has_restoration_plan is None:
        return Field.RESTORATION_PLAN

    named = attrs.original_manufacturer or attrs.replacement_manufacturer
    if attrs.action in vocab.MODIFICATION_ACTIONS and not named and not attrs.identity_markers:
        # plain modification, nothing is being replaced
        return None

    if attrs.identity_markers and not named and attrs.is_temporary is None:
        return Field.DURATION

    if attrs.original_manufacturer is None:
        return Field.ORIGINAL_MANUFACTURER
    if attrs.replacement_manufacturer is None:
        return Field.REPLACEMENT_MANUFACTURER

    if attrs.manufacturer_changed() and attrs.has_equivalency_docs is None:
        return Field.EQUIVALENCE

    return None


def stage_for(attrs: ScenarioAttributes) -> Stage:
    return FIELD_STAGES[next_question(attrs)]


def is_ready(attrs: ScenarioAttributes) -> bool:
    return not attrs.is_empty() and next_question(attrs) is None


# ---------------------------------------------------------
# 3) Context / session
# ---------------------------------------------------------

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ScenarioContext:
    """The open scenario of a session."""
    attributes: ScenarioAttributes = field(default_factory=ScenarioAttributes)
    stage: Stage = Stage.COLLECTING_EQUIPMENT
    scenario_number: int = 1
    awaiting_field: Optional[Field] = Field.EQUIPMENT_TYPE
    ambiguities: List[str] = field(default_factory=list)
    turn_count: int = 0
    project_number: Optional[str] = None

    @property
    def archived(self) -> bool:
        return self.stage is Stage.ARCHIVED

    @property
    def ready(self) -> bool:
        return self.stage is Stage.READY_TO_CLASSIFY

    def refresh(self) -> None:
        if self.archived:
            return
        self.awaiting_field = next_question(self.attributes)
        if self.attributes.is_empty():
            self.stage = Stage.COLLECTING_EQUIPMENT
        else:
            self.stage = FIELD_STAGES[self.awaiting_field]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario_number": self.scenario_number,
            "stage": self.stage.value,
            "awaiting_field": self.awaiting_field.value if self.awaiting_field else None,
            "attributes": self.attributes.to_dict(),
            "ambiguities": list(self.ambiguities),
            "turn_count": self.turn_count,
            "project_number": self.project_number,
        }


@dataclass
class IngestOutcome:
    route: RouteDecision
    changed: List[str] = field(default_factory=list)
    ambiguities: List[str] = field(default_factory=list)
    archived: List[ArchivedScenario] = field(default_factory=list)
    finished: bool = False
    cleared: bool = False


class ConversationSession:
    """
    Everything one conversation owns: the open scenario, the archived
    history and the message transcript. One caller at a time.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.context = ScenarioContext()
        self.history: List[ArchivedScenario] = []
        # {"text", "sender", "timestamp"}; oldest first
        self.transcript: List[Dict[str, Any]] = []

    # -----------------------------------------------------
    # Transcript
    # -----------------------------------------------------

    def record(self, text: str, sender: str = "user") -> None:
        self.transcript.append({"text": text, "sender": sender, "timestamp": _now()})

    def prior_messages(self, limit: int) -> List[Dict[str, Any]]:
        """Last `limit` user messages, oldest first."""
        if limit <= 0:
            return []
        user_turns = [m for m in self.transcript if m.get("sender") == "user"]
        return user_turns[-limit:]

    # -----------------------------------------------------
    # Scenario boundaries
    # -----------------------------------------------------

    def current_classification(self) -> ClassificationResult:
        return classify(self.context.attributes)

    def _archive(self, reason: str) -> Optional[ArchivedScenario]:
        ctx = self.context
        if ctx.archived or ctx.attributes.is_empty():
            return None

        result = classify(ctx.attributes)
        entry = ArchivedScenario(
            scenario_number=ctx.scenario_number,
            title=build_title(ctx.attributes),
            summary=build_summary(ctx.attributes, result),
            classification=result,
            attributes=ctx.attributes.snapshot(),
            archived_reason=reason,
        )
        self.history.append(entry)
        logger.info(
            f"[scenario] session={self.session_id} archived #{entry.scenario_number} "
            f"({entry.title}, {result.design_type.value}) reason={reason}"
        )
        return entry

    def _start_next(self) -> None:
        self.context = ScenarioContext(scenario_number=self.context.scenario_number + 1)

    def reset(self, reason: str = "reset") -> Optional[ArchivedScenario]:
        """
        Archive the open scenario (if it holds anything) and start a fresh one.
        The scenario number moves up by one only when something was archived
        or the open scenario was already finished.
        """
        if self.context.archived:
            self._start_next()
            return None
        entry = self._archive(reason)
        if entry is not None:
            self._start_next()
        return entry

    def clear(self) -> None:
        """Drop the history and the open scenario; numbering starts over."""
        logger.info(f"[scenario] session={self.session_id} cleared ({len(self.history)} archived dropped)")
        self.history = []
        self.context = ScenarioContext()

    def finalize(self, reason: str = "finished") -> Optional[ArchivedScenario]:
        """The caller confirms the scenario is finished: archive it and keep it closed."""
        entry = self._archive(reason)
        if entry is not None:
            self.context.stage = Stage.ARCHIVED
            self.context.awaiting_field = None
        return entry

    # -----------------------------------------------------
    # One message
    # -----------------------------------------------------

    def ingest(self, text: str, signals: List[Signal]) -> IngestOutcome:
        ctx = self.context
        commands = [s.value for s in signals if s.kind is SignalKind.SCENARIO_MARKER]

        # a finished scenario stays closed; new content opens the next one
        if ctx.archived and (has_content(signals) or "new" in commands):
            self._start_next()
            ctx = self.context

        standalone = attributes_from_signals(signals)
        route = route_turn(
            ctx.attributes,
            signals,
            standalone if standalone.equipment_type and is_ready(standalone) else None,
        )
        outcome = IngestOutcome(route=route)

        # "clear scenarios" also works when the open scenario is still empty
        if route.clear_history or "clear" in commands:
            self.clear()
            outcome.cleared = True
            ctx = self.context
        elif route.reset:
            entry = self.reset(reason=route.trigger)
            if entry is not None:
                outcome.archived.append(entry)
            ctx = self.context

        if ctx.archived:
            return outcome

        changed, notes = apply_signals(ctx.attributes, signals, ctx.awaiting_field)
        outcome.changed = changed
        outcome.ambiguities = notes
        for note in notes:
            logger.warning(f"[scenario] session={self.session_id} #{ctx.scenario_number}: {note}")
        ctx.ambiguities.extend(notes)

        if has_content(signals) or changed:
            ctx.turn_count += 1
        ctx.refresh()

        if "finish" in commands:
            entry = self.finalize(reason="finished")
            if entry is not None:
                outcome.archived.append(entry)
                outcome.finished = True

        return outcome

    # -----------------------------------------------------
    # Debug view
    # -----------------------------------------------------

    def debug_view(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "context": self.context.to_dict(),
            "history": [h.to_dict() for h in self.history],
            "total_messages": len(self.transcript),
        }

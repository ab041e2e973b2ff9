# -*- coding: utf-8 -*-
"""
MT assistant engine: one message in, one structured turn result out.

Flow per message
----------------
extractor (signals, with the prior-message window)
  -> scenario_state (reset check, field filling, next question, finish)
  -> classifier + aggregator once the scenario is ready
  -> builders (reply text, expected outputs)
  -> core.logging.log_event (one JSONL line per turn)

The text-generation collaborator is only used for wording: answers to
general questions, and (MT_LLM_PHRASING) follow-up questions. When it fails
or times out the local text is used and a notice is attached; the scenario
record is never touched by a collaborator failure.

Module-level functions (process_message, reset_session, finalize_scenario,
get_session, drop_session, classify_record) run on a default MTEngine;
build your own MTEngine to inject a generator or a prior-message provider.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from core import config
from core.logging import logger, log_event

from . import llm_client
from .aggregator import RiskAssessment, aggregate
from .builders import (
    DesignOutput,
    build_classification_text,
    build_response_text,
    expected_outputs,
)
from .clarification_agent import local_question, phrase_question
from .classifier import classify
from .extractor import Signal, extract_project_number, extract_signals
from .llm_client import CollaboratorUnavailable, TextGenerator
from .scenario_state import ConversationSession, has_content
from .schema import (
    ArchivedScenario,
    ClassificationResult,
    Field,
    ScenarioAttributes,
    Stage,
)
from .summarizer import build_fallback_answer, build_title, general_question_prompt

PriorProvider = Callable[[str], Sequence[Dict[str, Any]]]

UNAVAILABLE_NOTICE = (
    "The language assistant is temporarily unavailable, please retry. "
    "This reply was produced by the local rules."
)


@dataclass
class TurnResult:
    session_id: str
    response_text: str
    scenario_number: int
    stage: Stage
    updated_attributes: ScenarioAttributes
    scenario_history: List[ArchivedScenario] = field(default_factory=list)
    classification: Optional[ClassificationResult] = None
    assessment: Optional[RiskAssessment] = None
    next_question: Optional[Field] = None
    expected_outputs: List[DesignOutput] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    project_number: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "response_text": self.response_text,
            "scenario_number": self.scenario_number,
            "stage": self.stage.value,
            "classification": self.classification.to_dict() if self.classification else None,
            "assessment": self.assessment.to_dict() if self.assessment else None,
            "updated_attributes": self.updated_attributes.to_dict(),
            "scenario_history": [h.to_dict() for h in self.scenario_history],
            "next_question": self.next_question.value if self.next_question else None,
            "expected_outputs": [o.to_dict() for o in self.expected_outputs],
            "signals": [s.to_dict() for s in self.signals],
            "notices": list(self.notices),
            "project_number": self.project_number,
        }


class MTEngine:
    """
    Session registry + per-turn pipeline.

    generate_text   : prompt -> text collaborator (default: OpenAI via llm_client)
    prior_messages  : session_id -> earlier messages, oldest first
                      (default: the session's own transcript)
    phrase_questions: let the collaborator word follow-up questions
    """

    def __init__(
        self,
        generate_text: Optional[TextGenerator] = None,
        prior_messages: Optional[PriorProvider] = None,
        phrase_questions: Optional[bool] = None,
        timeout: Optional[float] = None,
        prior_window: Optional[int] = None,
    ):
        self.generate_text = generate_text or llm_client.generate_text
        self._prior_provider = prior_messages
        self.phrase_questions = (
            config.LLM_PHRASING_ENABLED if phrase_questions is None else phrase_questions
        )
        self.timeout = timeout
        self.prior_window = config.PRIOR_MESSAGE_WINDOW if prior_window is None else prior_window

        self._sessions: Dict[str, ConversationSession] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # -----------------------------------------------------
    # Sessions
    # -----------------------------------------------------

    def _session_and_lock(self, session_id: str):
        with self._registry_lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = ConversationSession(session_id)
                self._sessions[session_id] = session
                self._locks[session_id] = threading.Lock()
                logger.info(f"[engine] new session {session_id}")
            return session, self._locks[session_id]

    def get_session(self, session_id: str) -> Optional[ConversationSession]:
        with self._registry_lock:
            return self._sessions.get(session_id)

    def drop_session(self, session_id: str) -> bool:
        with self._registry_lock:
            self._locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def _prior_messages(self, session: ConversationSession) -> List[Dict[str, Any]]:
        if self._prior_provider is None:
            return session.prior_messages(self.prior_window)
        prior = list(self._prior_provider(session.session_id) or [])
        return prior[-self.prior_window:] if self.prior_window > 0 else []

    # -----------------------------------------------------
    # Collaborator (wording only)
    # -----------------------------------------------------

    def _general_answer(self, text: str, notices: List[str]) -> str:
        try:
            return llm_client.generate_bounded(
                self.generate_text, general_question_prompt(text), timeout=self.timeout
            )
        except CollaboratorUnavailable as e:
            logger.warning(f"[engine] collaborator unavailable (general question): {e}")
            notices.append(UNAVAILABLE_NOTICE)
            return build_fallback_answer()

    def _follow_up(self, question: Field, attrs: ScenarioAttributes, notices: List[str]) -> str:
        if not self.phrase_questions:
            return local_question(question, attrs)
        try:
            return phrase_question(question, attrs, self.generate_text, timeout=self.timeout)
        except CollaboratorUnavailable as e:
            logger.warning(f"[engine] collaborator unavailable (follow-up {question.value}): {e}")
            notices.append(UNAVAILABLE_NOTICE)
            return local_question(question, attrs)

    # -----------------------------------------------------
    # Result assembly
    # -----------------------------------------------------

    def _result(
        self,
        session: ConversationSession,
        body: str,
        archived: Optional[List[ArchivedScenario]] = None,
        notices: Optional[List[str]] = None,
        signals: Optional[List[Signal]] = None,
    ) -> TurnResult:
        ctx = session.context
        notices = notices or []

        classification: Optional[ClassificationResult] = None
        assessment: Optional[RiskAssessment] = None
        outputs: List[DesignOutput] = []
        if ctx.ready:
            classification = classify(ctx.attributes)
            assessment = aggregate(classification, ctx.attributes)
            outputs = expected_outputs(classification, ctx.attributes)
            verdict = build_classification_text(
                ctx.scenario_number, build_title(ctx.attributes), classification, assessment, outputs
            )
            body = f"{body}\n\n{verdict}" if body else verdict

        return TurnResult(
            session_id=session.session_id,
            response_text=build_response_text(body, archived, notices),
            scenario_number=ctx.scenario_number,
            stage=ctx.stage,
            updated_attributes=ctx.attributes.snapshot(),
            scenario_history=list(session.history),
            classification=classification,
            assessment=assessment,
            next_question=ctx.awaiting_field if not ctx.ready and not ctx.archived else None,
            expected_outputs=outputs,
            signals=list(signals or []),
            notices=list(notices),
            project_number=ctx.project_number,
        )

    def _log_turn(self, session: ConversationSession, text: str, result: TurnResult, extra: Dict[str, Any]) -> None:
        log_event(
            session.session_id,
            {
                "user_text": text,
                "scenario_number": result.scenario_number,
                "stage": result.stage.value,
                "next_question": result.next_question.value if result.next_question else None,
                "classification": result.classification.to_dict() if result.classification else None,
                "attributes": result.updated_attributes.to_dict(),
                "notices": result.notices,
                **extra,
            },
        )

    # -----------------------------------------------------
    # Entry points
    # -----------------------------------------------------

    def process_message(self, session_id: str, text: str) -> TurnResult:
        session, lock = self._session_and_lock(session_id)
        with lock:
            return self._process(session, text or "")

    def _process(self, session: ConversationSession, text: str) -> TurnResult:
        prior = self._prior_messages(session)
        signals = extract_signals(text, prior)
        outcome = session.ingest(text, signals)
        session.record(text, "user")

        ctx = session.context
        project = extract_project_number(text)
        if project and not ctx.archived:
            ctx.project_number = project

        notices: List[str] = list(outcome.ambiguities)
        body = ""
        archived = list(outcome.archived)

        if outcome.finished:
            entry = archived.pop()
            outputs = expected_outputs(entry.classification, entry.attributes)
            assessment = aggregate(entry.classification, entry.attributes)
            body = build_classification_text(
                entry.scenario_number, entry.title, entry.classification, assessment, outputs
            )
            body += f"\n\nScenario {entry.scenario_number} is finalized and saved to history."
        elif outcome.cleared and ctx.attributes.is_empty():
            body = "All scenarios cleared. Describe the next change to start scenario 1."
        elif ctx.archived:
            body = (
                f"Scenario {ctx.scenario_number} is finalized. "
                "Describe the next change to start a new scenario."
            )
        elif ctx.ready:
            body = ""
        elif ctx.attributes.is_empty() and not has_content(signals):
            body = self._general_answer(text, notices)
            if ctx.awaiting_field is not None:
                body = f"{body}\n\n{local_question(ctx.awaiting_field, ctx.attributes)}"
        elif ctx.awaiting_field is not None:
            body = self._follow_up(ctx.awaiting_field, ctx.attributes, notices)

        result = self._result(session, body, archived, notices, signals)
        session.record(result.response_text, "assistant")

        self._log_turn(
            session,
            text,
            result,
            {
                "signals": [s.to_dict() for s in signals],
                "route": outcome.route.trigger or None,
                "changed": outcome.changed,
                "archived": [a.scenario_number for a in outcome.archived],
            },
        )
        return result

    def reset_session(self, session_id: str) -> TurnResult:
        session, lock = self._session_and_lock(session_id)
        with lock:
            entry = session.reset(reason="manual_reset")
            archived = [entry] if entry is not None else []
            body = f"Starting scenario {session.context.scenario_number}. What equipment is involved?"
            result = self._result(session, body, archived)
            self._log_turn(session, "", result, {"event": "reset"})
            return result

    def finalize_scenario(self, session_id: str) -> TurnResult:
        """Raises KeyError for an unknown session."""
        session = self.get_session(session_id)
        if session is None:
            raise KeyError(session_id)

        with self._locks[session_id]:
            entry = session.finalize(reason="finished")
            if entry is None:
                body = "There is no open scenario to finalize."
                result = self._result(session, body)
            else:
                outputs = expected_outputs(entry.classification, entry.attributes)
                assessment = aggregate(entry.classification, entry.attributes)
                body = build_classification_text(
                    entry.scenario_number, entry.title, entry.classification, assessment, outputs
                )
                body += f"\n\nScenario {entry.scenario_number} is finalized and saved to history."
                result = self._result(session, body)
            self._log_turn(session, "", result, {"event": "finalize"})
            return result


def classify_record(attrs: ScenarioAttributes) -> Dict[str, Any]:
    """Stateless: classify a complete record passed in by the caller."""
    result = classify(attrs)
    assessment = aggregate(result, attrs)
    return {
        "classification": result.to_dict(),
        "assessment": assessment.to_dict(),
        "expected_outputs": [o.to_dict() for o in expected_outputs(result, attrs)],
    }


# -------------------------------------------------------------
# Default engine + module-level entry points
# -------------------------------------------------------------

_default_engine = MTEngine()


def process_message(session_id: str, text: str) -> TurnResult:
    return _default_engine.process_message(session_id, text)


def reset_session(session_id: str) -> TurnResult:
    return _default_engine.reset_session(session_id)


def finalize_scenario(session_id: str) -> TurnResult:
    return _default_engine.finalize_scenario(session_id)


def get_session(session_id: str) -> Optional[ConversationSession]:
    return _default_engine.get_session(session_id)


def drop_session(session_id: str) -> bool:
    return _default_engine.drop_session(session_id)

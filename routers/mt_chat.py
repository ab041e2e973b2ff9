# routers/mt_chat.py
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from core.logging import logger
from mt_brain import mt_engine
from mt_brain.decision_tree import TravelerQuestionnaire, evaluate_questionnaire
from mt_brain.mt_engine import classify_record
from mt_brain.schema import SafetyClass, ScenarioAttributes

router = APIRouter()


# ============================================================
# Request / response models
# ============================================================

class MessageRequest(BaseModel):
    """
    One chat turn.
    - session_id: conversation id from an earlier turn (empty -> a new one is issued)
    - text: the engineer's message
    """
    session_id: Optional[str] = Field(
        default=None,
        description="Session id returned by an earlier turn. Leave empty on the first request.",
        examples=[None],
    )
    text: str = Field(
        ...,
        description="Free-text message describing the change",
        examples=["We need to replace the pump from Westinghouse with an ABB unit."],
    )


class SessionRequest(BaseModel):
    session_id: str = Field(..., description="Conversation session id")


class TurnResponse(BaseModel):
    """
    Result of one turn.
    - classification: present only once the scenario is ready to classify
    - scenario_history: archived scenarios, oldest first
    """
    session_id: str
    response_text: str
    scenario_number: int
    stage: str
    classification: Optional[Dict[str, Any]] = None
    assessment: Optional[Dict[str, Any]] = None
    updated_attributes: Dict[str, Any]
    scenario_history: List[Dict[str, Any]] = Field(default_factory=list)
    next_question: Optional[str] = None
    expected_outputs: List[Dict[str, Any]] = Field(default_factory=list)
    signals: List[Dict[str, Any]] = Field(default_factory=list)
    notices: List[str] = Field(default_factory=list)
    project_number: Optional[str] = None


class AttributesRequest(BaseModel):
    """A complete scenario record for stateless classification."""
    equipment_type: Optional[str] = None
    original_manufacturer: Optional[str] = None
    replacement_manufacturer: Optional[str] = None
    specifications_claimed_equal: Optional[bool] = None
    has_equivalency_docs: Optional[bool] = None
    is_temporary: Optional[bool] = None
    safety_marker: Optional[SafetyClass] = None
    action: Optional[str] = None
    new_capability: Optional[bool] = None
    has_restoration_plan: Optional[bool] = None
    duration: Optional[str] = None
    system: Optional[str] = None
    identity_markers: List[str] = Field(default_factory=list)
    capability_markers: List[str] = Field(default_factory=list)


class QuestionnaireRequest(BaseModel):
    """Figure 1 traveler questionnaire answers."""
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


# ============================================================
# Endpoints
# ============================================================

@router.post(
    "/api/mt/message",
    response_model=TurnResponse,
    summary="Process one chat turn",
    tags=["mt"],
)
def post_message(body: MessageRequest):
    session_id = body.session_id or str(uuid.uuid4())
    result = mt_engine.process_message(session_id, body.text.strip())
    return result.to_dict()


@router.post(
    "/api/mt/reset",
    response_model=TurnResponse,
    summary="Archive the open scenario and start a new one",
    tags=["mt"],
)
def post_reset(body: SessionRequest):
    return mt_engine.reset_session(body.session_id).to_dict()


@router.post(
    "/api/mt/finalize",
    response_model=TurnResponse,
    summary="Confirm the open scenario is finished",
    tags=["mt"],
)
def post_finalize(body: SessionRequest):
    try:
        result = mt_engine.finalize_scenario(body.session_id)
    except KeyError:
        logger.warning(f"[api] finalize for unknown session {body.session_id}")
        raise HTTPException(status_code=404, detail="session not found")
    return result.to_dict()


@router.post(
    "/api/mt/classify",
    summary="Classify a complete scenario record (stateless)",
    tags=["mt"],
)
def post_classify(body: AttributesRequest) -> Dict[str, Any]:
    attrs = ScenarioAttributes.from_dict(body.model_dump())
    return classify_record(attrs)


@router.post(
    "/api/mt/questionnaire",
    summary="Evaluate the Figure 1 questionnaire decision tree",
    tags=["mt"],
)
def post_questionnaire(body: QuestionnaireRequest) -> Dict[str, Any]:
    result = evaluate_questionnaire(TravelerQuestionnaire.from_dict(body.model_dump()))
    return {"classification": result.to_dict()}

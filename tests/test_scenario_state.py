"""Conversation context state machine: field filling, next question, reset, archive."""

import pytest

from mt_brain.extractor import extract_signals
from mt_brain.schema import (
    DesignType,
    Field,
    SafetyClass,
    ScenarioAttributes,
    Stage,
    TRACKED_FIELDS,
)
from mt_brain.scenario_state import (
    ConversationSession,
    apply_signals,
    attributes_from_signals,
    next_question,
    stage_for,
)
from mt_brain.turn_router import is_resettable, route_turn


def _feed(session, text):
    return session.ingest(text, extract_signals(text, session.prior_messages(5)))


@pytest.fixture
def session():
    return ConversationSession("test-session")


class TestApplySignals:

    def test_full_sentence(self):
        attrs = attributes_from_signals(
            extract_signals("Replace the pump from Westinghouse with ABB, no equivalency docs. Safety class.")
        )
        assert attrs.equipment_type == "pump"
        assert attrs.original_manufacturer == "westinghouse"
        assert attrs.replacement_manufacturer == "abb"
        assert attrs.has_equivalency_docs is False
        assert attrs.safety_marker is SafetyClass.SC
        assert attrs.action == "replace"

    def test_unhinted_vendors_fill_original_then_replacement(self):
        attrs = attributes_from_signals(extract_signals("Goulds and Flowserve"))
        assert attrs.original_manufacturer == "goulds"
        assert attrs.replacement_manufacturer == "flowserve"

    def test_unhinted_vendor_answers_awaited_field(self):
        attrs = ScenarioAttributes(equipment_type="transmitter")
        apply_signals(attrs, extract_signals("It was made by Rosemount"), Field.ORIGINAL_MANUFACTURER)
        assert attrs.original_manufacturer == "rosemount"
        assert attrs.replacement_manufacturer is None

    def test_same_manufacturer_names_the_other_side(self):
        attrs = ScenarioAttributes(equipment_type="valve", original_manufacturer="fisher")
        apply_signals(attrs, extract_signals("Same manufacturer."))
        assert attrs.replacement_manufacturer == "fisher"

    def test_bare_yes_answers_awaited_question(self):
        attrs = ScenarioAttributes(equipment_type="pump", is_temporary=True)
        apply_signals(attrs, extract_signals("yes"), Field.RESTORATION_PLAN)
        assert attrs.has_restoration_plan is True

    def test_bare_no_without_question_is_ignored(self):
        attrs = ScenarioAttributes(equipment_type="pump")
        changed, _ = apply_signals(attrs, extract_signals("no"), None)
        assert changed == []

    def test_specific_marker_beats_bare_answer(self):
        attrs = ScenarioAttributes(equipment_type="pump", original_manufacturer="abb", replacement_manufacturer="weg")
        apply_signals(attrs, extract_signals("No, we don't have equivalency documentation"), Field.EQUIVALENCE)
        assert attrs.has_equivalency_docs is False

    def test_conflict_in_one_message_last_wins(self):
        attrs = ScenarioAttributes(equipment_type="pump")
        changed, notes = apply_signals(attrs, extract_signals("It is temporary, actually permanent"))
        assert attrs.is_temporary is False
        assert "is_temporary" in changed
        assert len(notes) == 1 and "is_temporary" in notes[0]

    def test_none_never_overwrites(self):
        attrs = ScenarioAttributes(equipment_type="pump", original_manufacturer="abb")
        apply_signals(attrs, extract_signals("thanks, that helps"))
        assert attrs.equipment_type == "pump"
        assert attrs.original_manufacturer == "abb"

    def test_explicit_contradiction_overwrites(self):
        attrs = ScenarioAttributes(equipment_type="pump", has_equivalency_docs=False)
        apply_signals(attrs, extract_signals("Update: we have the equivalency documentation now"))
        assert attrs.has_equivalency_docs is True

    def test_negated_duration_fills_permanent(self):
        attrs = ScenarioAttributes(equipment_type="motor", identity_markers={"same_manufacturer"})
        changed, _ = apply_signals(attrs, extract_signals("It is not temporary"), Field.DURATION)
        assert attrs.is_temporary is False
        assert changed == ["is_temporary"]
        assert next_question(attrs) is None

    def test_negated_restoration_is_no_plan(self):
        attrs = ScenarioAttributes(equipment_type="pump", is_temporary=True)
        apply_signals(attrs, extract_signals("It won't be restored"), Field.RESTORATION_PLAN)
        assert attrs.has_restoration_plan is False

    def test_identity_markers_contradict(self):
        attrs = ScenarioAttributes(equipment_type="motor", identity_markers={"same_manufacturer"})
        apply_signals(attrs, extract_signals("Sorry, it is a different manufacturer"))
        assert attrs.identity_markers == {"different_manufacturer"}


class TestNextQuestion:

    def test_empty_asks_for_equipment(self, empty_attrs):
        assert next_question(empty_attrs) is Field.EQUIPMENT_TYPE
        assert stage_for(empty_attrs) is Stage.COLLECTING_EQUIPMENT

    def test_order_of_questions(self):
        attrs = ScenarioAttributes(equipment_type="pump", action="replace")
        assert next_question(attrs) is Field.ORIGINAL_MANUFACTURER
        attrs.original_manufacturer = "westinghouse"
        assert next_question(attrs) is Field.REPLACEMENT_MANUFACTURER
        assert stage_for(attrs) is Stage.COLLECTING_REPLACEMENT_MFG
        attrs.replacement_manufacturer = "abb"
        assert next_question(attrs) is Field.EQUIVALENCE
        attrs.has_equivalency_docs = False
        assert next_question(attrs) is None
        assert stage_for(attrs) is Stage.READY_TO_CLASSIFY

    def test_identity_without_names_asks_duration(self):
        attrs = ScenarioAttributes(equipment_type="motor", identity_markers={"same_manufacturer"})
        assert next_question(attrs) is Field.DURATION
        assert stage_for(attrs) is Stage.COLLECTING_DURATION

    def test_temporary_asks_for_restoration(self):
        attrs = ScenarioAttributes(equipment_type="pump", is_temporary=True)
        assert next_question(attrs) is Field.RESTORATION_PLAN

    def test_capability_is_ready(self):
        attrs = ScenarioAttributes(new_capability=True, capability_markers={"digital"})
        assert next_question(attrs) is None

    def test_plain_modification_is_ready(self):
        attrs = ScenarioAttributes(equipment_type="piping", action="modify")
        assert next_question(attrs) is None

    def test_identical_names_skip_equivalence(self, fisher_identical):
        assert next_question(fisher_identical) is None


class TestTurnRouter:

    def test_empty_context_never_resets(self, empty_attrs):
        assert not is_resettable(empty_attrs, extract_signals("new scenario: a valve"))

    def test_different_equipment(self):
        current = ScenarioAttributes(equipment_type="pump")
        decision = route_turn(current, extract_signals("Now the valve needs work"))
        assert decision.reset and decision.trigger == "equipment_changed"

    def test_carryover_language_keeps_scenario(self):
        current = ScenarioAttributes(equipment_type="pump")
        assert not is_resettable(current, extract_signals("the motor on it is from Baldor"))

    def test_mentioning_current_equipment_keeps_scenario(self):
        current = ScenarioAttributes(equipment_type="pump")
        assert not is_resettable(current, extract_signals("the pump motor is fine, the pump is the issue"))

    def test_different_system(self):
        current = ScenarioAttributes(equipment_type="pump", system="service water")
        assert route_turn(current, extract_signals("On the feedwater side")).trigger == "system_changed"

    def test_explicit_new_scenario(self):
        current = ScenarioAttributes(equipment_type="pump")
        assert route_turn(current, extract_signals("We also have another item")).trigger == "new_scenario"

    def test_clear(self):
        current = ScenarioAttributes(equipment_type="pump")
        decision = route_turn(current, extract_signals("clear scenarios"))
        assert decision.reset and decision.clear_history

    def test_conflicting_complete_scenario(self, westinghouse_to_abb):
        text = "Replace the pump from Goulds with Flowserve, no equivalency docs"
        standalone = attributes_from_signals(extract_signals(text))
        decision = route_turn(westinghouse_to_abb, extract_signals(text), standalone)
        assert decision.trigger == "conflicting_scenario"

    def test_same_complete_scenario_is_not_a_conflict(self, westinghouse_to_abb):
        text = "Replace the pump from Westinghouse with ABB, no equivalency docs"
        standalone = attributes_from_signals(extract_signals(text))
        assert not is_resettable(westinghouse_to_abb, extract_signals(text), standalone)


class TestSession:

    def test_progressive_filling(self, session):
        _feed(session, "We need to replace a pump")
        assert session.context.stage is Stage.COLLECTING_ORIGINAL_MFG
        _feed(session, "The current one is from Westinghouse")
        assert session.context.stage is Stage.COLLECTING_REPLACEMENT_MFG
        _feed(session, "ABB")
        assert session.context.stage is Stage.COLLECTING_EQUIVALENCE
        _feed(session, "no")
        assert session.context.stage is Stage.READY_TO_CLASSIFY
        assert session.current_classification().design_type is DesignType.TYPE_III

    def test_monotonic_filling(self, session):
        messages = [
            "We need to replace a pump",
            "It's safety class",
            "hmm, let me check",
            "The original is Westinghouse",
            "ok",
        ]
        known_before = set()
        for text in messages:
            _feed(session, text)
            session.record(text)
            attrs = session.context.attributes
            known = {f for f in TRACKED_FIELDS if getattr(attrs, f) is not None}
            assert known_before <= known
            known_before = known

    def test_message_with_several_fields_skips_stages(self, session):
        _feed(session, "Replace the pump from Westinghouse with ABB, we have equivalency documentation")
        assert session.context.stage is Stage.READY_TO_CLASSIFY

    def test_reset_archives_unchanged(self, session):
        _feed(session, "Replace the pump from Westinghouse with ABB, no equivalency docs")
        before = session.context.attributes.snapshot()
        outcome = _feed(session, "Next a valve on the service water line needs replacing")
        assert outcome.route.trigger == "equipment_changed"
        assert session.context.scenario_number == 2
        assert len(session.history) == 1
        archived = session.history[0]
        assert archived.scenario_number == 1
        assert archived.attributes == before
        assert archived.classification.design_type is DesignType.TYPE_III
        assert session.context.attributes.equipment_type == "valve"
        assert session.context.attributes.original_manufacturer is None

    def test_archived_snapshot_is_independent(self, session):
        _feed(session, "Replace the pump from Westinghouse with ABB")
        session.finalize()
        session.history[0].attributes.identity_markers.add("identical")
        assert session.context.attributes.identity_markers == set()
        assert session.context.stage is Stage.ARCHIVED

    def test_empty_reset_keeps_number(self, session):
        assert session.reset() is None
        assert session.context.scenario_number == 1

    def test_finish_phrase_archives(self, session):
        _feed(session, "Replace the Fisher valve with a Fisher valve, same specifications")
        outcome = _feed(session, "That's all for this one")
        assert outcome.finished
        assert session.context.stage is Stage.ARCHIVED
        assert session.history[-1].classification.design_type is DesignType.TYPE_V

    def test_content_after_finish_opens_next_scenario(self, session):
        _feed(session, "Replace the Fisher valve with a Fisher valve, same specifications")
        session.finalize()
        _feed(session, "Now a transmitter")
        assert session.context.scenario_number == 2
        assert session.context.attributes.equipment_type == "transmitter"
        assert len(session.history) == 1

    def test_clear_drops_history(self, session):
        _feed(session, "Replace the pump from Westinghouse with ABB")
        session.reset()
        outcome = _feed(session, "clear scenarios")
        assert outcome.cleared
        assert session.history == []
        assert session.context.scenario_number == 1

    def test_ambiguity_is_logged(self, session, caplog):
        caplog.set_level("WARNING", logger="mt_assistant")
        outcome = _feed(session, "The pump change is temporary, no wait, permanent")
        assert outcome.ambiguities
        assert session.context.ambiguities == outcome.ambiguities
        assert any("conflicting is_temporary" in r.message for r in caplog.records)

    def test_debug_view(self, session):
        _feed(session, "We need to replace a pump")
        session.record("We need to replace a pump")
        view = session.debug_view()
        assert view["context"]["awaiting_field"] == "original_manufacturer"
        assert view["total_messages"] == 1

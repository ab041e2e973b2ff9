"""Classification decision engine: rule precedence, confidence formula, safety note."""

import itertools

import pytest

from mt_brain.classifier import RULES, classify, identity_corroboration
from mt_brain.schema import (
    DesignType,
    MTRequirement,
    SafetyClass,
    ScenarioAttributes,
)


class TestNotClassifiable:

    def test_empty_record(self, empty_attrs):
        result = classify(empty_attrs)
        assert result.design_type is DesignType.UNKNOWN
        assert result.mt_required is MTRequirement.UNDETERMINED
        assert result.confidence == 0.0
        assert result.rule == "not_classifiable"

    def test_manufacturers_alone_are_not_enough(self):
        attrs = ScenarioAttributes(original_manufacturer="abb", replacement_manufacturer="siemens")
        assert classify(attrs).design_type is DesignType.UNKNOWN


class TestIdenticalReplacement:

    def test_fisher_to_fisher_same_specs(self, fisher_identical):
        result = classify(fisher_identical)
        assert result.design_type is DesignType.TYPE_V
        assert result.mt_required is MTRequirement.MINIMAL
        assert not result.requires_mt
        # manufacturer + specification corroborated
        assert result.confidence == pytest.approx(0.8)

    def test_confidence_caps_at_095(self, fisher_identical):
        fisher_identical.identity_markers.add("same_part_number")
        assert identity_corroboration(fisher_identical) == ["manufacturer", "specification", "part-number"]
        assert classify(fisher_identical).confidence == pytest.approx(0.95)

    def test_identity_markers_when_permanent(self):
        attrs = ScenarioAttributes(
            equipment_type="motor",
            is_temporary=False,
            identity_markers={"same_manufacturer"},
        )
        result = classify(attrs)
        assert result.design_type is DesignType.TYPE_V
        assert result.confidence == pytest.approx(0.65)

    def test_identity_markers_need_permanence(self):
        attrs = ScenarioAttributes(equipment_type="motor", identity_markers={"same_manufacturer"})
        assert classify(attrs).design_type is not DesignType.TYPE_V

    def test_different_specs_block_the_shortcut(self, fisher_identical):
        fisher_identical.specifications_claimed_equal = False
        result = classify(fisher_identical)
        assert result.design_type is DesignType.TYPE_II

    def test_identity_beats_temporary(self, fisher_identical):
        fisher_identical.is_temporary = True
        fisher_identical.has_restoration_plan = True
        assert classify(fisher_identical).design_type is DesignType.TYPE_V


class TestTemporary:

    def test_with_duration(self):
        attrs = ScenarioAttributes(
            equipment_type="pump", is_temporary=True, has_restoration_plan=True, duration="6 weeks"
        )
        result = classify(attrs)
        assert result.design_type is DesignType.TYPE_IV
        assert result.mt_required is MTRequirement.NOT_REQUIRED
        assert result.confidence == pytest.approx(0.7)
        assert "6 weeks" in result.reason

    def test_without_duration(self):
        attrs = ScenarioAttributes(equipment_type="pump", is_temporary=True, has_restoration_plan=True)
        assert classify(attrs).confidence == pytest.approx(0.5)

    def test_no_restoration_plan_is_not_type_iv(self):
        attrs = ScenarioAttributes(equipment_type="pump", is_temporary=True, has_restoration_plan=False)
        assert classify(attrs).design_type is not DesignType.TYPE_IV


class TestNonIdentical:

    def test_westinghouse_to_abb_without_docs(self, westinghouse_to_abb):
        result = classify(westinghouse_to_abb)
        assert result.design_type is DesignType.TYPE_III
        assert result.mt_required is MTRequirement.REQUIRED
        assert result.confidence <= 0.4
        assert "Westinghouse" in result.reason and "ABB" in result.reason

    def test_docs_raise_confidence(self, westinghouse_to_abb):
        westinghouse_to_abb.has_equivalency_docs = True
        assert classify(westinghouse_to_abb).confidence == pytest.approx(0.7)

    def test_safety_class_without_docs(self, safety_class_pump):
        result = classify(safety_class_pump)
        assert result.design_type is DesignType.TYPE_III
        assert result.confidence == pytest.approx(0.3)
        assert "Enhanced engineering review" in result.reason

    def test_safety_class_with_docs_has_no_penalty(self, safety_class_pump):
        safety_class_pump.has_equivalency_docs = True
        assert classify(safety_class_pump).confidence == pytest.approx(0.7)

    def test_matching_specs_do_not_make_it_identical(self, westinghouse_to_abb):
        westinghouse_to_abb.specifications_claimed_equal = True
        assert classify(westinghouse_to_abb).design_type is DesignType.TYPE_III


class TestNewCapabilityAndDefault:

    def test_plc_upgrade_is_type_i(self):
        attrs = ScenarioAttributes(
            equipment_type="relay",
            action="upgrade",
            new_capability=True,
            capability_markers={"programmable_logic"},
        )
        result = classify(attrs)
        assert result.design_type is DesignType.TYPE_I
        assert result.mt_required is MTRequirement.REQUIRED
        assert result.confidence == pytest.approx(0.6)
        assert "programmable logic" in result.reason

    def test_capability_without_equipment(self):
        attrs = ScenarioAttributes(new_capability=True, capability_markers={"digital"})
        assert classify(attrs).design_type is DesignType.TYPE_I

    def test_plain_modification_is_neutral(self):
        attrs = ScenarioAttributes(equipment_type="piping", action="modify")
        result = classify(attrs)
        assert result.design_type is DesignType.TYPE_II
        assert result.confidence == pytest.approx(0.5)
        assert result.rule == "modification"


class TestSafetyElevation:

    @pytest.mark.parametrize("marker", [SafetyClass.SC, SafetyClass.SS])
    def test_note_never_changes_type(self, fisher_identical, marker):
        plain = classify(fisher_identical)
        fisher_identical.safety_marker = marker
        elevated = classify(fisher_identical)
        assert elevated.design_type is plain.design_type
        assert elevated.confidence == plain.confidence
        assert f"({marker.value} equipment)" in elevated.reason

    def test_general_service_has_no_note(self, fisher_identical):
        fisher_identical.safety_marker = SafetyClass.GS
        assert "Enhanced engineering review" not in classify(fisher_identical).reason


class TestProperties:

    def test_last_rule_always_matches(self):
        assert RULES[-1].applies(ScenarioAttributes())

    def test_deterministic(self, westinghouse_to_abb):
        assert classify(westinghouse_to_abb) == classify(westinghouse_to_abb.snapshot())

    def test_total_and_bounded(self):
        vendors = (None, "abb", "siemens")
        flags = (None, True, False)
        combos = itertools.product(
            (None, "pump"), vendors, vendors, flags, flags, flags, (None, SafetyClass.SC)
        )
        for equipment, orig, repl, specs, docs, temporary, safety in combos:
            attrs = ScenarioAttributes(
                equipment_type=equipment,
                original_manufacturer=orig,
                replacement_manufacturer=repl,
                specifications_claimed_equal=specs,
                has_equivalency_docs=docs,
                is_temporary=temporary,
                has_restoration_plan=temporary,
                safety_marker=safety,
            )
            result = classify(attrs)
            assert 0.0 <= result.confidence <= 1.0
            assert result.reason

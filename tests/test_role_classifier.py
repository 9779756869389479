"""Tests for figma_intent.integrations.role_classifier: tiers and precedence."""

from __future__ import annotations

import pytest

from figma_intent.integrations.normalized import (
    DetectionMethod,
    RoleDetectionResult,
    SemanticRole,
)
from figma_intent.integrations.role_classifier import (
    ROLE_DETECTORS,
    combine_role_evidence,
    detect_from_component_type,
    detect_from_naming,
    detect_from_structure,
    identify_semantic_role,
)

from conftest import bbox, frame, rect, solid, text


def _result(role, confidence, method):
    return RoleDetectionResult(role=role, confidence=confidence, method=method, reasoning="")


class TestStructuralTier:
    def test_leaf_text(self):
        result = detect_from_structure(text("t"))
        assert (result.role, result.confidence) == (SemanticRole.TEXT, 0.9)

    def test_leaf_shape_is_container(self):
        result = detect_from_structure(rect("r"))
        assert (result.role, result.confidence) == (SemanticRole.CONTAINER, 0.5)

    def test_empty_children_counts_as_leaf(self):
        result = detect_from_structure({"id": "t", "type": "TEXT", "children": []})
        assert result.role == SemanticRole.TEXT

    def test_button_background_and_text(self):
        node = frame("b", fills=[solid(0.2, 0.4, 0.9)], children=[text("l")])
        result = detect_from_structure(node)
        assert (result.role, result.confidence) == (SemanticRole.BUTTON, 0.75)

    def test_button_with_icon_boosted(self):
        node = frame("b", fills=[solid(0.2, 0.4, 0.9)], children=[
            {"id": "i", "type": "VECTOR"}, text("l"),
        ])
        assert detect_from_structure(node).confidence == 0.85

    def test_input_bordered_frame(self):
        node = frame(
            "in",
            absoluteBoundingBox=bbox(0, 0, 240, 40),
            strokes=[solid(0.8, 0.8, 0.8)],
            children=[text("placeholder")],
        )
        result = detect_from_structure(node)
        assert (result.role, result.confidence) == (SemanticRole.INPUT, 0.8)

    def test_list_of_identical_children(self):
        node = frame("l", children=[frame(f"row{i}") for i in range(3)])
        result = detect_from_structure(node)
        assert (result.role, result.confidence) == (SemanticRole.LIST, 0.7)

    def test_mixed_children_are_not_a_list(self):
        node = frame("l", children=[frame("a"), frame("b"), rect("c")])
        assert detect_from_structure(node) is None

    def test_card(self):
        node = frame("c", fills=[solid(1, 1, 1)], children=[
            rect("img"), text("title"), text("body"), text("meta"),
        ])
        result = detect_from_structure(node)
        assert (result.role, result.confidence) == (SemanticRole.CARD, 0.65)


class TestOtherTiers:
    @pytest.mark.parametrize("node_type", ["COMPONENT", "COMPONENT_SET", "INSTANCE"])
    def test_component_types_are_weak_containers(self, node_type):
        result = detect_from_component_type({"id": "c", "type": node_type})
        assert (result.role, result.confidence) == (SemanticRole.CONTAINER, 0.6)
        assert result.method == DetectionMethod.COMPONENT_TYPE

    def test_non_component_type(self):
        assert detect_from_component_type(frame("f")) is None

    @pytest.mark.parametrize("name, role", [
        ("Primary Btn", SemanticRole.BUTTON),
        ("Search Field", SemanticRole.INPUT),
        ("Top Nav", SemanticRole.NAVIGATION),
        ("Confirm Dialog", SemanticRole.MODAL),
        ("user-avatar", SemanticRole.AVATAR),
    ])
    def test_naming_keywords(self, name, role):
        result = detect_from_naming(frame("n", name=name))
        assert (result.role, result.confidence) == (role, 0.4)

    def test_naming_no_match(self):
        assert detect_from_naming(frame("n", name="Group 12")) is None

    def test_detectors_in_fixed_precedence(self):
        assert [method for method, _ in ROLE_DETECTORS] == [
            DetectionMethod.COMPONENT_TYPE,
            DetectionMethod.STRUCTURAL,
            DetectionMethod.NAMING,
        ]


class TestCombination:
    def test_agreement_is_hybrid_with_boost(self):
        result = combine_role_evidence(
            _result(SemanticRole.CARD, 0.65, DetectionMethod.STRUCTURAL),
            None,
            _result(SemanticRole.CARD, 0.4, DetectionMethod.NAMING),
        )
        assert result.role == SemanticRole.CARD
        assert result.method == DetectionMethod.HYBRID
        assert result.confidence == pytest.approx(0.85)

    def test_boost_capped_at_one(self):
        result = combine_role_evidence(
            _result(SemanticRole.TEXT, 0.9, DetectionMethod.STRUCTURAL),
            None,
            _result(SemanticRole.TEXT, 0.4, DetectionMethod.NAMING),
        )
        assert result.confidence == 1.0

    def test_disagreement_structural_wins(self):
        result = combine_role_evidence(
            _result(SemanticRole.CARD, 0.65, DetectionMethod.STRUCTURAL),
            None,
            _result(SemanticRole.LIST, 0.4, DetectionMethod.NAMING),
        )
        assert (result.role, result.method) == (SemanticRole.CARD, DetectionMethod.STRUCTURAL)

    def test_component_type_before_naming(self):
        result = combine_role_evidence(
            None,
            _result(SemanticRole.CONTAINER, 0.6, DetectionMethod.COMPONENT_TYPE),
            _result(SemanticRole.BUTTON, 0.4, DetectionMethod.NAMING),
        )
        assert result.method == DetectionMethod.COMPONENT_TYPE

    def test_nothing_is_unknown(self):
        result = combine_role_evidence(None, None, None)
        assert result.role == SemanticRole.UNKNOWN
        assert result.confidence == 0.0
        assert result.method == DetectionMethod.HYBRID


class TestIdentifySemanticRole:
    def test_structural_button_beats_input_name(self):
        node = frame(
            "b", name="Email input",
            fills=[solid(0.2, 0.4, 0.9)],
            children=[text("l")],
        )
        result = identify_semantic_role(node)
        assert result.role == SemanticRole.BUTTON
        assert result.method == DetectionMethod.STRUCTURAL
        assert result.confidence == 0.75

    def test_strong_structural_short_circuits(self):
        result = identify_semantic_role(text("t", name="Button label"))
        assert (result.role, result.method) == (SemanticRole.TEXT, DetectionMethod.STRUCTURAL)

    def test_weak_structure_plus_matching_name_is_hybrid(self):
        node = frame("c", name="Product Card", fills=[solid(1, 1, 1)], children=[
            rect("img"), text("title"), text("body"), text("meta"),
        ])
        result = identify_semantic_role(node)
        assert result.role == SemanticRole.CARD
        assert result.method == DetectionMethod.HYBRID

    def test_instance_falls_back_to_component_type(self):
        node = {"id": "i", "name": "Thing", "type": "INSTANCE", "componentId": "c"}
        result = identify_semantic_role(node)
        assert result.method == DetectionMethod.COMPONENT_TYPE

    def test_name_only(self):
        result = identify_semantic_role(frame("f", name="Site Footer"))
        assert (result.role, result.method) == (SemanticRole.FOOTER, DetectionMethod.NAMING)

    def test_unknown(self):
        result = identify_semantic_role(frame("f", name="Frame 1"))
        assert result.role == SemanticRole.UNKNOWN

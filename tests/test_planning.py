"""Tests for figma_intent.planning."""

from __future__ import annotations

from figma_intent.integrations.node_normalizer import normalize_node, normalize_tree
from figma_intent.integrations.normalized import LayoutStrategy
from figma_intent.planning import (
    analyze_layout_patterns,
    build_implementation_plan,
    build_styling_guidance,
    calculate_complexity_score,
    describe_layout_strategy,
    find_related_tokens,
    identify_risks,
    select_plan_elements,
    suggest_file_path,
    to_pascal_case,
)
from figma_intent.tokens.inference import DesignToken, TokenCategory

from conftest import bbox, document, frame, instance, page, rect, text

TOKENS = [
    DesignToken("primary-button", TokenCategory.COLOR, "#3366FF"),
    DesignToken("spacing-md", TokenCategory.SPACING, 16),
    DesignToken("heading-1", TokenCategory.TYPOGRAPHY, {"font_size": 32}),
]


def mapping(layout_type, score=0, name="Element"):
    return {
        "component_name": name,
        "complexity_score": score,
        "layout_strategy": {"type": layout_type},
    }


def grid_frame(node_id="grid"):
    return frame(
        node_id, "Gallery",
        layoutMode="HORIZONTAL",
        layoutWrap="WRAP",
        children=[
            rect(f"{node_id}-{i}", absoluteBoundingBox=bbox(x, y, 80, 80))
            for i, (x, y) in enumerate([(0, 0), (100, 0), (0, 100), (100, 100)])
        ],
    )


class TestElementSelection:
    def test_frames_preferred(self):
        doc = document(page("1:1", "P", [
            frame("f1", children=[instance("i1", "c1")]),
        ]))
        kind, elements = select_plan_elements(doc)
        assert kind == "frames"
        assert [e["id"] for e in elements] == ["f1"]

    def test_components_without_frames(self):
        doc = document(page("1:1", "P", [
            {"id": "c1", "name": "Button", "type": "COMPONENT"},
            instance("i1", "c1"),
        ]))
        kind, elements = select_plan_elements(doc)
        assert kind == "components"
        assert [e["id"] for e in elements] == ["c1", "i1"]

    def test_page_and_id_filters(self):
        doc = document(
            page("1:1", "One", [frame("a")]),
            page("2:1", "Two", [frame("b", children=[frame("c")])]),
        )
        _, on_page = select_plan_elements(doc, page_id="2:1")
        assert [e["id"] for e in on_page] == ["b", "c"]

        _, picked = select_plan_elements(doc, component_ids=["a", "c"])
        assert [e["id"] for e in picked] == ["a", "c"]

        _, both = select_plan_elements(doc, page_id="1:1", component_ids=["c"])
        assert both == []


class TestNaming:
    def test_pascal_case(self):
        assert to_pascal_case("primary button/hover") == "PrimaryButtonHover"
        assert to_pascal_case("Icon-Close") == "IconClose"
        assert to_pascal_case("") == ""

    def test_file_path(self):
        assert suggest_file_path("Primary Button") == "components/primary-button/PrimaryButton"
        assert suggest_file_path("Nav/Item") == "components/nav-item/NavItem"


class TestLayoutAndComplexity:
    def test_flexbox_description(self):
        node = normalize_node(frame(
            "f", layoutMode="VERTICAL", itemSpacing=8,
            primaryAxisAlignItems="SPACE_BETWEEN", children=[text("t")],
        ))
        layout = describe_layout_strategy(node)
        assert layout["type"] == "flexbox"
        assert layout["details"]["direction"] == "column"
        assert layout["details"]["justify_content"] == "space-between"
        assert layout["details"]["gap"] == 8

    def test_grid_description(self):
        layout = describe_layout_strategy(normalize_node(grid_frame()))
        assert layout["type"] == "grid"
        assert layout["details"]["columns"] == 2
        assert layout["details"]["column_gap"] == 100

    def test_non_layout_nodes(self):
        assert describe_layout_strategy(None)["type"] == "none"
        assert describe_layout_strategy(normalize_node(text("t")))["type"] == "none"
        assert describe_layout_strategy(normalize_node(frame("f")))["type"] == "none"

    def test_complexity_bands(self):
        raw = grid_frame()
        # FRAME 1 + three-plus children 1 + grid 2
        assert calculate_complexity_score(raw, normalize_node(raw)) == 4

        many = {"type": "COMPONENT", "children": [{}] * 6}
        assert calculate_complexity_score(many) == 4
        assert calculate_complexity_score({"type": "INSTANCE"}) == 1
        assert calculate_complexity_score({"type": "GROUP"}) == 0

    def test_complexity_maximum(self):
        raw = frame("f", layoutMode="HORIZONTAL", children=[text(f"t{i}") for i in range(11)])
        node = normalize_node(raw)
        node.data.strategy = LayoutStrategy.ABSOLUTE
        element = dict(raw, type="COMPONENT_SET")
        assert calculate_complexity_score(element, node) == 10


class TestRelatedTokens:
    def test_name_word_match(self):
        assert find_related_tokens("Primary Button", TOKENS) == ["primary-button"]
        assert find_related_tokens("Heading", TOKENS) == ["heading-1"]

    def test_fallback_to_color_and_spacing(self):
        assert find_related_tokens("Card", TOKENS) == ["primary-button", "spacing-md"]

    def test_blank_name_uses_fallback(self):
        assert find_related_tokens(" / ", TOKENS) == ["primary-button", "spacing-md"]


class TestPlanWideAnalysis:
    def test_layout_patterns(self):
        layout = analyze_layout_patterns([
            mapping("flexbox"), mapping("flexbox"), mapping("none"),
        ])
        assert layout["counts"] == {"flexbox": 2, "grid": 0, "absolute": 0, "none": 1}
        assert layout["primary_strategy"] == "flexbox (2 components)"
        assert [p["pattern"] for p in layout["patterns"]] == ["Flexbox layouts"]

    def test_absolute_heavy_note(self):
        layout = analyze_layout_patterns([mapping("absolute"), mapping("absolute")])
        assert layout["primary_strategy"] == "absolute (2 components)"
        assert any("absolute positioning" in note for note in layout["notes"])

    def test_styling_guidance(self):
        guidance = build_styling_guidance(TOKENS, [])
        assert guidance["token_coverage"] == {"colors": 1, "typography": 1, "spacing": 1}
        assert guidance["considerations"] == []

        bare = build_styling_guidance([], [])
        assert "No spacing system detected" in bare["considerations"][0]

    def test_risks(self):
        risks = identify_risks(
            [mapping("absolute", score=9), mapping("absolute"), mapping("flexbox"), mapping("none")],
            [],
        )
        by_severity = {}
        for risk in risks:
            by_severity.setdefault(risk["severity"], []).append(risk["risk"])

        assert "1 highly complex components detected" in by_severity["medium"]
        assert "Multiple layout strategies used across components" in by_severity["low"]
        assert "No spacing system detected" in by_severity["high"]
        assert "2 components use absolute positioning (50%)" in by_severity["high"]

    def test_absolute_share_rounds_half_up(self):
        mappings = [mapping("absolute")] * 5 + [mapping("flexbox")] * 3
        [absolute] = [r for r in identify_risks(mappings, TOKENS) if "absolute" in r["risk"]]
        # 5 / 8 = 62.5%
        assert absolute["risk"].endswith("(63%)")

    def test_no_risks_for_tidy_plan(self):
        assert identify_risks([mapping("flexbox")], TOKENS) == []


class TestBuildPlan:
    def test_frames_plan(self, two_page_document):
        nodes = normalize_tree(two_page_document)
        plan = build_implementation_plan(two_page_document, nodes, TOKENS, target_framework="react")

        assert plan["element_kind"] == "frames"
        [toolbar] = plan["component_mappings"]
        assert toolbar["component_id"] == "1:10"
        assert toolbar["suggested_code_name"] == "Toolbar"
        assert toolbar["layout_strategy"]["type"] == "flexbox"
        assert toolbar["complexity_score"] == 3
        assert toolbar["notes"] == "Element type: FRAME."
        assert plan["styling_guidance"]["token_coverage"]["spacing"] == 1
        assert "Target framework: react" in plan["notes"]
        assert plan["notes"].startswith("Implementation plan generated for 1 frames with 3 design tokens.")

    def test_framework_agnostic_summary(self, two_page_document):
        plan = build_implementation_plan(two_page_document, [], [])
        assert "Framework-agnostic plan." in plan["notes"]
        assert plan["component_mappings"][0]["layout_strategy"]["type"] == "none"

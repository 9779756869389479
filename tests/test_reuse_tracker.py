"""Tests for figma_intent.integrations.reuse_tracker."""

from __future__ import annotations

from figma_intent.integrations.normalized import ComponentReuse
from figma_intent.integrations.reuse_tracker import (
    build_reuse_contexts,
    track_component_reuse,
)

from conftest import frame, instance


def _nested(depth: int, leaf):
    """Wrap leaf so that it sits at ``depth`` below the returned root."""
    node = leaf
    for level in range(depth - 1, -1, -1):
        node = frame(f"wrap{level}", children=[node])
    return node


class TestTrackComponentReuse:
    def test_groups_instances_by_component(self):
        root = frame("root", children=[
            instance("i1", "button"),
            instance("i2", "icon"),
            frame("row", children=[instance("i3", "button")]),
        ])
        assert track_component_reuse([root]) == {
            "button": ["i1", "i3"],
            "icon": ["i2"],
        }

    def test_depth_pre_order(self):
        root = frame("root", children=[
            frame("a", children=[instance("deep", "c")]),
            instance("shallow", "c"),
        ])
        assert track_component_reuse([root])["c"] == ["deep", "shallow"]

    def test_instance_at_max_depth_kept(self):
        root = _nested(4, instance("i", "C"))
        assert track_component_reuse([root], max_depth=4) == {"C": ["i"]}

    def test_instance_past_max_depth_dropped(self):
        root = _nested(5, instance("i", "C"))
        assert "C" not in track_component_reuse([root], max_depth=4)

    def test_repeated_ids_visited_once(self):
        shared = instance("i1", "C")
        root = frame("root", children=[shared, frame("again", children=[shared])])
        assert track_component_reuse([root]) == {"C": ["i1"]}

    def test_multiple_roots(self):
        roots = [frame("p1", children=[instance("a", "C")]), frame("p2", children=[instance("b", "C")])]
        assert track_component_reuse(roots) == {"C": ["a", "b"]}

    def test_instance_without_component_id_ignored(self):
        root = frame("root", children=[{"id": "i", "type": "INSTANCE"}])
        assert track_component_reuse([root]) == {}


class TestBuildReuseContexts:
    def test_nested_instance_path(self):
        inner = instance("inner", "icon", name="Icon")
        outer = instance("outer", "button", name="Button", children=[inner])
        roots = [frame("root", children=[outer])]
        reuse_map = track_component_reuse(roots)

        contexts = build_reuse_contexts(roots, reuse_map, {"icon": {"name": "Icon/24"}})

        assert contexts["inner"] == ComponentReuse(
            root_component_id="icon",
            root_component_name="Icon/24",
            nesting_path=("outer", "inner"),
            nesting_depth=1,
            instance_count=1,
        )
        assert contexts["outer"].nesting_depth == 0

    def test_primitive_flag_derived_from_count(self):
        roots = [frame("root", children=[instance(f"i{n}", "chip") for n in range(5)])]
        contexts = build_reuse_contexts(roots, track_component_reuse(roots))
        assert contexts["i0"].instance_count == 5
        assert contexts["i0"].is_primitive is True

    def test_component_definition_is_own_root(self):
        roots = [frame("root", children=[
            {"id": "chip", "name": "Chip", "type": "COMPONENT"},
            instance("i1", "chip"),
        ])]
        contexts = build_reuse_contexts(roots, track_component_reuse(roots))
        assert contexts["chip"].root_component_id == "chip"
        assert contexts["chip"].instance_count == 1

    def test_missing_metadata_falls_back_to_instance_name(self):
        roots = [instance("i1", "c", name="Local Button")]
        contexts = build_reuse_contexts(roots, track_component_reuse(roots))
        assert contexts["i1"].root_component_name == "Local Button"

"""Tests for positional constraint helpers.

Tests cover:
- ConstraintBuilder direction mapping and deduplication
- Helper alignment edges and pruning
- Cyclic fragments and rotations
- Default type colors
"""

import networkx as nx

from cnd_layout.config import AlignmentEdgeStrategy
from cnd_layout.layout import ColorPicker, ConstraintBuilder, cyclic_disjunctions, type_colors
from cnd_layout.layout.cyclic import NodePath, fragments, rotation_constraints, successor_map
from cnd_layout.layout.orientation import connected_via_path, is_alignment_edge
from cnd_layout.models.layout_result import AlignmentConstraint, LeftConstraint, TopConstraint


def make_graph(nodes, edges=()):
    graph = nx.MultiDiGraph()
    graph.add_nodes_from(nodes)
    for i, (u, v) in enumerate(edges):
        graph.add_edge(u, v, key=f"r_{i}", relation="r", label="r", atoms=(u, v))
    return graph


# =============================================================================
# ConstraintBuilder
# =============================================================================


class TestConstraintBuilder:
    """Test translation of orientation and align entries."""

    def test_above_places_target_on_top(self):
        builder = ConstraintBuilder(make_graph("ab", [("a", "b")]))
        builder.add_orientation("o-1", [("a", "b")], ["above"])
        assert builder.constraints == [
            TopConstraint(top="b", bottom="a", min_distance=15, source_entry_id="o-1"),
        ]

    def test_right_places_target_right(self):
        builder = ConstraintBuilder(make_graph("ab", [("a", "b")]))
        builder.add_orientation("o-1", [("a", "b")], ["right"])
        assert builder.constraints == [
            LeftConstraint(left="a", right="b", min_distance=15, source_entry_id="o-1"),
        ]

    def test_two_directions(self):
        builder = ConstraintBuilder(make_graph("ab", [("a", "b")]))
        builder.add_orientation("o-1", [("a", "b")], ["below", "left"])
        assert [c.type for c in builder.constraints] == ["top", "left"]

    def test_directly_below_aligns_x(self):
        builder = ConstraintBuilder(make_graph("ab", [("a", "b")]))
        builder.add_orientation("o-1", [("a", "b")], ["directlyBelow"])
        assert builder.constraints[1] == AlignmentConstraint(
            axis="x", node1="b", node2="a", source_entry_id="o-1"
        )

    def test_implied_constraint_skipped(self):
        builder = ConstraintBuilder(make_graph("abc", [("a", "b"), ("b", "c")]))
        builder.add_orientation("o-1", [("a", "b"), ("b", "c"), ("a", "c")], ["right"])
        assert [(c.left, c.right) for c in builder.constraints] == [("a", "b"), ("b", "c")]

    def test_alignment_emitted_once_per_pair(self):
        builder = ConstraintBuilder(make_graph("ab", [("a", "b")]))
        builder.add_alignment("a-1", [("a", "b"), ("b", "a")], "vertical")
        assert builder.constraints == [
            AlignmentConstraint(axis="x", node1="a", node2="b", source_entry_id="a-1"),
        ]

    def test_custom_separation(self):
        builder = ConstraintBuilder(make_graph("ab"), min_separation=40)
        builder.left("a", "b", "o-1")
        assert builder.constraints[0].min_distance == 40


class TestAlignmentEdges:
    """Test hidden helper edges between aligned nodes."""

    def test_connected_strategy_adds_edge_between_components(self):
        graph = make_graph("abc", [("a", "b")])
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.CONNECTED)
        builder.add_alignment("a-1", [("a", "c")], "horizontal")
        assert graph.has_edge("a", "c", key="_alignment_a_c_")

    def test_connected_strategy_skips_connected_nodes(self):
        graph = make_graph("abc", [("a", "b"), ("c", "b")])
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.CONNECTED)
        builder.add_alignment("a-1", [("a", "c")], "horizontal")
        assert not any(is_alignment_edge(k) for _, _, k in graph.edges(keys=True))

    def test_direct_strategy_adds_edge_unless_adjacent(self):
        graph = make_graph("abc", [("a", "b"), ("b", "c")])
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.DIRECT)
        builder.add_alignment("a-1", [("a", "c"), ("a", "b")], "horizontal")
        helpers = [k for _, _, k in graph.edges(keys=True) if is_alignment_edge(k)]
        assert helpers == ["_alignment_a_c_"]

    def test_never_strategy(self):
        graph = make_graph("ab")
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.NEVER)
        builder.add_alignment("a-1", [("a", "b")], "horizontal")
        assert graph.number_of_edges() == 0
        assert len(builder.constraints) == 1

    def test_prune_removes_redundant_helper(self):
        graph = make_graph("ab")
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.CONNECTED)
        builder.add_alignment("a-1", [("a", "b")], "horizontal")
        graph.add_edge("b", "a", key="real", relation="r", label="r", atoms=("b", "a"))
        assert builder.prune_alignment_edges() == 1
        assert list(graph.edges(keys=True)) == [("b", "a", "real")]

    def test_prune_disabled(self):
        graph = make_graph("ab")
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.CONNECTED, prune=False)
        builder.add_alignment("a-1", [("a", "b")], "horizontal")
        graph.add_edge("b", "a", key="real", relation="r", label="r", atoms=("b", "a"))
        assert builder.prune_alignment_edges() == 0

    def test_connected_via_path_ignores_direction(self):
        graph = make_graph("abc", [("a", "b"), ("c", "b")])
        assert connected_via_path(graph, "a", "c")
        assert not connected_via_path(graph, "a", "c", exclude=("c", "b", "r_1"))
        assert not connected_via_path(graph, "a", "missing")

    def test_connected_via_parallel_edge(self):
        graph = make_graph("ab", [("a", "b"), ("a", "b")])
        assert connected_via_path(graph, "a", "b", exclude=("a", "b", "r_0"))
        assert connected_via_path(graph, "b", "a", exclude=("a", "b", "r_1"))


# =============================================================================
# Cyclic Constraints
# =============================================================================


class TestFragments:
    """Test extraction of maximal paths from successor pairs."""

    def test_chain_is_one_fragment(self):
        assert fragments(successor_map([("a", "b"), ("b", "c"), ("c", "d")])) == [
            ["a", "b", "c", "d"]
        ]

    def test_cycle_is_one_fragment(self):
        result = fragments(successor_map([("a", "b"), ("b", "c"), ("c", "a")]))
        assert result == [["a", "b", "c"]]

    def test_branch_gives_two_fragments(self):
        result = fragments(successor_map([("a", "b"), ("b", "c"), ("b", "d")]))
        assert result == [["a", "b", "c"], ["a", "b", "d"]]

    def test_loop_path_contains_rotation(self):
        loop = NodePath(("a", "b", "c"), loops_to="a")
        assert loop.contains(NodePath(("b", "c", "a"), loops_to="b"))
        assert loop.expand(2) == ["a", "b", "c", "a", "b", "c"]


class TestCyclicDisjunctions:
    """Test circle placement alternatives."""

    def test_one_alternative_per_rotation(self):
        result = cyclic_disjunctions("c-1", [("a", "b"), ("b", "c"), ("c", "a")])
        assert len(result) == 1
        assert len(result[0].alternatives) == 3
        assert result[0].source_entry_id == "c-1"

    def test_short_fragments_ignored(self):
        assert cyclic_disjunctions("c-1", [("a", "b")]) == []

    def test_directions_mirror(self):
        pairs = [("a", "b"), ("b", "c"), ("c", "d")]
        clockwise = cyclic_disjunctions("c-1", pairs, "clockwise")[0]
        counter = cyclic_disjunctions("c-1", pairs, "counterclockwise")[0]
        assert clockwise.alternatives[0] != counter.alternatives[0]

    def test_rotation_zero_layout(self):
        """Four nodes at 0, 90, 180 and 270 degrees."""
        constraints = rotation_constraints(["a", "b", "c", "d"], 0, "c-1")
        assert LeftConstraint(left="c", right="a", min_distance=15, source_entry_id="c-1") in constraints
        assert TopConstraint(top="d", bottom="b", min_distance=15, source_entry_id="c-1") in constraints
        assert AlignmentConstraint(axis="x", node1="b", node2="d", source_entry_id="c-1") in constraints
        assert AlignmentConstraint(axis="y", node1="a", node2="c", source_entry_id="c-1") in constraints


# =============================================================================
# Colors
# =============================================================================


class TestColors:
    """Test default type colors."""

    def test_type_colors_distinct(self):
        colors = type_colors(["A", "B", "C"])
        assert list(colors) == ["A", "B", "C"]
        assert len(set(colors.values())) == 3
        assert all(c.startswith("rgb(") for c in colors.values())

    def test_picker_cycles(self):
        picker = ColorPicker(2)
        first = picker.next_color()
        picker.next_color()
        assert picker.next_color() == first

    def test_deterministic(self):
        assert type_colors(["X", "Y"]) == type_colors(["X", "Y"])

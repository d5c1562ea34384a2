"""Translate orientation and align entries into solver constraints.

Relative-orientation tuples ``(a, b)`` read "b is <direction> of a": with
``directions: [below]`` the tuple's target is placed below its source.

Left/top constraints are transitively reduced: a constraint already implied
by earlier ones (a left of b, b left of c, so a left of c) is not emitted.
Alignment constraints are symmetric and emitted once per node pair and axis.

Nodes that must line up but share no path in the graph may also receive a
hidden ``_alignment_`` helper edge, depending on the alignment edge strategy.
"""

import logging
from typing import Iterable, List, Optional, Set, Tuple

import networkx as nx

from cnd_layout.config.settings import MIN_SEPARATION, AlignmentEdgeStrategy
from cnd_layout.models.layout_result import (
    AlignmentConstraint,
    LeftConstraint,
    PositionalConstraint,
    TopConstraint,
)

logger = logging.getLogger(__name__)

ALIGNMENT_EDGE_PREFIX = "_alignment_"


def alignment_edge_id(source: str, target: str) -> str:
    return f"{ALIGNMENT_EDGE_PREFIX}{source}_{target}_"


def is_alignment_edge(key: str) -> bool:
    return key.startswith(ALIGNMENT_EDGE_PREFIX)


def connected_via_path(
    graph: nx.MultiDiGraph,
    source: str,
    target: str,
    exclude: Optional[Tuple[str, str, str]] = None,
) -> bool:
    """Whether two nodes are connected ignoring edge direction.

    Args:
        graph: Layout graph
        source: Start node
        target: Node to reach
        exclude: ``(u, v, key)`` edge to ignore

    Returns:
        True if a path exists
    """
    if source not in graph or target not in graph:
        return False
    view = nx.restricted_view(graph, [], [exclude] if exclude else [])
    return nx.has_path(view.to_undirected(as_view=True), source, target)


class ConstraintBuilder:
    """Accumulates positional constraints for one layout call.

    Example:
        builder = ConstraintBuilder(graph, AlignmentEdgeStrategy.CONNECTED)
        builder.add_orientation("orientation-1", pairs, ["below"])
        builder.add_alignment("align-2", pairs, "horizontal")
        builder.prune_alignment_edges()
        constraints = builder.constraints
    """

    def __init__(
        self,
        graph: nx.MultiDiGraph,
        strategy: AlignmentEdgeStrategy = AlignmentEdgeStrategy.CONNECTED,
        min_separation: float = MIN_SEPARATION,
        prune: bool = True,
    ):
        self.graph = graph
        self.strategy = strategy
        self.min_separation = min_separation
        self.prune = prune
        self.constraints: List[PositionalConstraint] = []
        self._left_of = nx.DiGraph()
        self._above = nx.DiGraph()
        self._aligned: Set[Tuple[str, str, str]] = set()

    # ------------------------------------------------------------------
    # Primitive constraints
    # ------------------------------------------------------------------

    @staticmethod
    def _implied(order: nx.DiGraph, first: str, second: str) -> bool:
        return first in order and second in order and nx.has_path(order, first, second)

    def left(self, left: str, right: str, entry_id: str) -> None:
        if self._implied(self._left_of, left, right):
            return
        self._left_of.add_edge(left, right)
        self.constraints.append(LeftConstraint(
            left=left, right=right, min_distance=self.min_separation,
            source_entry_id=entry_id,
        ))

    def top(self, top: str, bottom: str, entry_id: str) -> None:
        if self._implied(self._above, top, bottom):
            return
        self._above.add_edge(top, bottom)
        self.constraints.append(TopConstraint(
            top=top, bottom=bottom, min_distance=self.min_separation,
            source_entry_id=entry_id,
        ))

    def align(self, axis: str, node1: str, node2: str, entry_id: str) -> None:
        first, second = sorted((node1, node2))
        key = (axis, first, second)
        if key in self._aligned:
            return
        self._aligned.add(key)
        self.constraints.append(AlignmentConstraint(
            axis=axis, node1=node1, node2=node2, source_entry_id=entry_id,
        ))

    # ------------------------------------------------------------------
    # Entry translation
    # ------------------------------------------------------------------

    def add_orientation(
        self, entry_id: str, pairs: Iterable[Tuple[str, str]], directions: List[str]
    ) -> None:
        """Emit constraints placing each pair's target relative to its source."""
        for source, target in pairs:
            self.maybe_add_alignment_edge(source, target)
            for direction in directions:
                if direction in ("left", "directlyLeft"):
                    self.left(target, source, entry_id)
                elif direction in ("right", "directlyRight"):
                    self.left(source, target, entry_id)
                elif direction in ("above", "directlyAbove"):
                    self.top(target, source, entry_id)
                elif direction in ("below", "directlyBelow"):
                    self.top(source, target, entry_id)

                if direction in ("directlyLeft", "directlyRight"):
                    self.align("y", target, source, entry_id)
                elif direction in ("directlyAbove", "directlyBelow"):
                    self.align("x", target, source, entry_id)

    def add_alignment(
        self, entry_id: str, pairs: Iterable[Tuple[str, str]], direction: str
    ) -> None:
        """Horizontal alignment shares y; vertical alignment shares x."""
        axis = "y" if direction == "horizontal" else "x"
        for source, target in pairs:
            self.maybe_add_alignment_edge(source, target)
            self.align(axis, source, target, entry_id)

    # ------------------------------------------------------------------
    # Helper edges
    # ------------------------------------------------------------------

    def should_add_alignment_edge(self, source: str, target: str) -> bool:
        if self.strategy is AlignmentEdgeStrategy.NEVER:
            return False
        direct = self.graph.has_edge(source, target) or self.graph.has_edge(target, source)
        if direct:
            return False
        if self.strategy is AlignmentEdgeStrategy.DIRECT:
            return True
        return not connected_via_path(self.graph, source, target)

    def maybe_add_alignment_edge(self, source: str, target: str) -> None:
        if source == target or source not in self.graph or target not in self.graph:
            return
        if not self.should_add_alignment_edge(source, target):
            return
        key = alignment_edge_id(source, target)
        self.graph.add_edge(
            source, target, key=key,
            relation=ALIGNMENT_EDGE_PREFIX, label=key, atoms=(source, target),
        )

    def prune_alignment_edges(self) -> int:
        """Remove helper edges whose endpoints stay connected without them.

        Only applies to the CONNECTED strategy.

        Returns:
            Number of edges removed
        """
        if not self.prune or self.strategy is not AlignmentEdgeStrategy.CONNECTED:
            return 0
        helper_edges = [
            (u, v, k) for u, v, k in self.graph.edges(keys=True) if is_alignment_edge(k)
        ]
        removed = 0
        for u, v, k in helper_edges:
            if connected_via_path(self.graph, u, v, exclude=(u, v, k)):
                self.graph.remove_edge(u, v, key=k)
                removed += 1
        if removed:
            logger.debug(
                f"Pruned {removed} redundant alignment edges out of {len(helper_edges)}"
            )
        return removed

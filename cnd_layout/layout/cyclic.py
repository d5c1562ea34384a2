"""Cyclic orientation: place chains of nodes around a circle.

The selected pairs form a successor map. Every maximal path through it (a
"fragment", possibly closing into a loop) with three or more nodes becomes
one disjunctive constraint: the fragment's nodes sit at equal angles on a
circle, and each alternative is one rotation of that arrangement.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from cnd_layout.config.settings import MIN_SEPARATION
from cnd_layout.models.layout_result import (
    AlignmentConstraint,
    DisjunctiveConstraint,
    LeftConstraint,
    PositionalConstraint,
    TopConstraint,
)

CIRCLE_RADIUS = 100.0
EPSILON = 1e-9


@dataclass(frozen=True)
class NodePath:
    """A path through the successor map; ``loops_to`` closes a cycle."""

    nodes: Tuple[str, ...]
    loops_to: Optional[str] = None

    def expand(self, repeat: int) -> List[str]:
        """Node ids with the loop unrolled ``repeat`` times."""
        ids = list(self.nodes)
        if self.loops_to is None or self.loops_to not in ids:
            return ids
        start = ids.index(self.loops_to)
        return ids[:start] + ids[start:] * repeat

    def contains(self, other: "NodePath") -> bool:
        """Whether ``other`` appears contiguously in this path (loop unrolled)."""
        mine = self.expand(2)
        theirs = other.expand(1)
        if len(theirs) > len(mine):
            return False
        return any(
            mine[i:i + len(theirs)] == theirs
            for i in range(len(mine) - len(theirs) + 1)
        )

    def equivalent(self, other: "NodePath") -> bool:
        return self.contains(other) and other.contains(self)


def successor_map(pairs: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    successors: Dict[str, List[str]] = {}
    for source, target in pairs:
        targets = successors.setdefault(source, [])
        if target not in targets:
            targets.append(target)
    return successors


def all_paths(successors: Dict[str, List[str]]) -> List[NodePath]:
    """Every maximal simple path from every start node."""
    paths: List[NodePath] = []

    def walk(current: str, path: Tuple[str, ...]) -> None:
        path = path + (current,)
        neighbors = successors.get(current, [])
        if not neighbors:
            paths.append(NodePath(path))
            return
        for neighbor in neighbors:
            if neighbor in path:
                paths.append(NodePath(path, loops_to=neighbor))
            else:
                walk(neighbor, path)

    for start in successors:
        walk(start, ())
    return paths


def fragments(successors: Dict[str, List[str]]) -> List[List[str]]:
    """Representative paths: one per equivalence class, none contained in another."""
    paths = all_paths(successors)
    distinct = [
        p for i, p in enumerate(paths)
        if not any(p.equivalent(q) for q in paths[:i])
    ]
    maximal = [
        p for i, p in enumerate(distinct)
        if not any(q.contains(p) for j, q in enumerate(distinct) if j != i)
    ]
    return [list(p.nodes) for p in maximal]


def rotation_constraints(
    fragment: List[str],
    rotation: int,
    entry_id: str,
    min_separation: float = MIN_SEPARATION,
) -> List[PositionalConstraint]:
    """Pairwise constraints for the fragment placed on a circle, rotated."""
    step = 2 * math.pi / len(fragment)
    positions = {
        node: (
            CIRCLE_RADIUS * math.cos((i + rotation) * step),
            CIRCLE_RADIUS * math.sin((i + rotation) * step),
        )
        for i, node in enumerate(fragment)
    }

    constraints: List[PositionalConstraint] = []
    seen = set()

    def add(constraint: PositionalConstraint) -> None:
        key = constraint.model_dump_json()
        if key not in seen:
            seen.add(key)
            constraints.append(constraint)

    for a in fragment:
        for b in fragment:
            if a == b:
                continue
            ax, ay = positions[a]
            bx, by = positions[b]
            if ax - bx > EPSILON:
                add(LeftConstraint(left=b, right=a, min_distance=min_separation,
                                   source_entry_id=entry_id))
            elif bx - ax > EPSILON:
                add(LeftConstraint(left=a, right=b, min_distance=min_separation,
                                   source_entry_id=entry_id))
            else:
                first, second = sorted((a, b))
                add(AlignmentConstraint(axis="x", node1=first, node2=second,
                                        source_entry_id=entry_id))

            if ay - by > EPSILON:
                add(TopConstraint(top=b, bottom=a, min_distance=min_separation,
                                  source_entry_id=entry_id))
            elif by - ay > EPSILON:
                add(TopConstraint(top=a, bottom=b, min_distance=min_separation,
                                  source_entry_id=entry_id))
            else:
                first, second = sorted((a, b))
                add(AlignmentConstraint(axis="y", node1=first, node2=second,
                                        source_entry_id=entry_id))
    return constraints


def cyclic_disjunctions(
    entry_id: str,
    pairs: Iterable[Tuple[str, str]],
    direction: str = "clockwise",
    min_separation: float = MIN_SEPARATION,
) -> List[DisjunctiveConstraint]:
    """One disjunction per fragment of three or more nodes.

    Args:
        entry_id: Id of the cyclic entry
        pairs: Successor pairs among visible nodes
        direction: ``clockwise`` or ``counterclockwise``
        min_separation: Minimum gap in emitted constraints

    Returns:
        Disjunctive constraints, alternatives ordered by rotation
    """
    result = []
    for fragment in fragments(successor_map(pairs)):
        if direction == "counterclockwise":
            fragment = list(reversed(fragment))
        if len(fragment) <= 2:
            continue
        alternatives = [
            rotation_constraints(fragment, rotation, entry_id, min_separation)
            for rotation in range(len(fragment))
        ]
        result.append(DisjunctiveConstraint(source_entry_id=entry_id, alternatives=alternatives))
    return result

"""Temporal policy implementations.

- baseline: previous position if the node existed, else its default seed.
- transport_pan_zoom: previous positions mapped through one uniform
  scale + translate transform fitted to where the solver would seed them.
- change_emphasis: surviving nodes as in transport_pan_zoom, changed nodes
  seeded fresh with a small deterministic offset so the solver moves them.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from cnd_layout.temporal.base import (
    HintResult,
    Position,
    Positions,
    TemporalPolicy,
    TransformInfo,
    Viewport,
    centroid,
)

logger = logging.getLogger(__name__)

EPSILON = 1e-6
CHANGE_EMPHASIS_JITTER_RADIUS = 18.0

Bounds = Tuple[float, float, float, float]


def compute_bounds(points: Iterable[Position]) -> Optional[Bounds]:
    """``(min_x, min_y, max_x, max_y)`` of the points, None if empty."""
    points = list(points)
    if not points:
        return None
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def is_degenerate(bounds: Bounds) -> bool:
    min_x, min_y, max_x, max_y = bounds
    return max_x - min_x <= EPSILON or max_y - min_y <= EPSILON


class SimilarityTransform(BaseModel):
    """Uniform scale about ``source_center`` followed by a move to ``target_center``."""

    model_config = ConfigDict(frozen=True)

    scale: float = 1.0
    source_center: Position = Position(x=0.0, y=0.0)
    target_center: Position = Position(x=0.0, y=0.0)

    @classmethod
    def between(cls, source: Bounds, target: Bounds) -> "SimilarityTransform":
        """Largest uniform scale fitting ``source`` inside ``target``, centers matched."""
        s_min_x, s_min_y, s_max_x, s_max_y = source
        t_min_x, t_min_y, t_max_x, t_max_y = target
        scale = min(
            (t_max_x - t_min_x) / (s_max_x - s_min_x),
            (t_max_y - t_min_y) / (s_max_y - s_min_y),
        )
        return cls(
            scale=scale,
            source_center=Position(x=(s_min_x + s_max_x) / 2, y=(s_min_y + s_max_y) / 2),
            target_center=Position(x=(t_min_x + t_max_x) / 2, y=(t_min_y + t_max_y) / 2),
        )

    def apply(self, point: Position) -> Position:
        return Position(
            x=(point.x - self.source_center.x) * self.scale + self.target_center.x,
            y=(point.y - self.source_center.y) * self.scale + self.target_center.y,
        )


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash over UTF-16 code units."""
    value = 0x811C9DC5
    encoded = text.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        value ^= encoded[i] | (encoded[i + 1] << 8)
        value = (value * 0x01000193) & 0xFFFFFFFF
    return value


def deterministic_jitter(node_id: str, radius: float) -> Position:
    """Offset of at most ``radius`` derived only from the node id."""
    value = fnv1a_32(node_id)
    angle = ((value & 0xFFFF) / 0xFFFF) * math.pi * 2
    magnitude = (((value >> 16) & 0xFFFF) / 0xFFFF) * radius
    return Position(x=math.cos(angle) * magnitude, y=math.sin(angle) * magnitude)


class BaselinePolicy(TemporalPolicy):
    """Reuse previous positions verbatim."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(options or {})

    @property
    def name(self) -> str:
        return "baseline"

    def make_hints(
        self,
        prev_positions: Optional[Positions],
        prev_transform: Optional[TransformInfo],
        nodes: Sequence[str],
        default_seeds: Positions,
        viewport: Optional[Viewport] = None,
    ) -> HintResult:
        previous = dict(prev_positions or {})
        return HintResult(
            hints=self.seed_hints(previous, nodes, default_seeds),
            iteration_mode="reduced" if prev_positions else "default",
        )


class TransportPanZoomPolicy(TemporalPolicy):
    """Carry the previous picture over as a whole, rescaled and recentered."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(options or {})

    @property
    def name(self) -> str:
        return "transport_pan_zoom"

    def estimate_transform(
        self,
        prev_positions: Positions,
        nodes: Sequence[str],
        default_seeds: Positions,
        viewport: Optional[Viewport] = None,
    ) -> SimilarityTransform:
        """Transform from previous positions to seed space.

        The transform is fitted on nodes with both a previous position and a
        seed. When no such node exists the previous positions are fitted to
        the viewport instead. Falls back to the identity when fewer than two
        anchors remain or either point set has no extent on some axis.
        """
        survivors = [n for n in nodes if n in prev_positions]
        anchors = [n for n in survivors if n in default_seeds]
        if anchors:
            target = compute_bounds(default_seeds[n] for n in anchors)
        elif viewport is not None:
            anchors = survivors
            target = (0.0, 0.0, viewport.width, viewport.height)
        else:
            target = None
        if len(anchors) < 2:
            logger.debug(f"Only {len(anchors)} anchor(s); using identity transform")
            return SimilarityTransform()

        source = compute_bounds(prev_positions[n] for n in anchors)
        if source is None or is_degenerate(source):
            return SimilarityTransform()
        if target is None or is_degenerate(target):
            return SimilarityTransform()

        return SimilarityTransform.between(source, target)

    def make_hints(
        self,
        prev_positions: Optional[Positions],
        prev_transform: Optional[TransformInfo],
        nodes: Sequence[str],
        default_seeds: Positions,
        viewport: Optional[Viewport] = None,
    ) -> HintResult:
        if not prev_positions:
            return HintResult(
                hints=self.seed_hints({}, nodes, default_seeds), iteration_mode="default"
            )
        transform = self.estimate_transform(prev_positions, nodes, default_seeds, viewport)
        transported = {
            n: transform.apply(prev_positions[n]) for n in nodes if n in prev_positions
        }
        return HintResult(
            hints=self.seed_hints(transported, nodes, default_seeds),
            iteration_mode="reduced",
        )


class ChangeEmphasisPolicy(TemporalPolicy):
    """Keep unchanged nodes stable and let changed nodes move visibly.

    Options:
        changed_ids (or changedIds): Ids to treat as changed. Defaults to
            every node without a previous position.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(options or {})
        changed = self.options.get("changed_ids", self.options.get("changedIds"))
        self.changed_ids = None if changed is None else set(changed)
        self.transport = TransportPanZoomPolicy()

    @property
    def name(self) -> str:
        return "change_emphasis"

    def make_hints(
        self,
        prev_positions: Optional[Positions],
        prev_transform: Optional[TransformInfo],
        nodes: Sequence[str],
        default_seeds: Positions,
        viewport: Optional[Viewport] = None,
    ) -> HintResult:
        previous = prev_positions or {}
        transported = {
            hint.id: Position(x=hint.x, y=hint.y)
            for hint in self.transport.make_hints(
                prev_positions, prev_transform, nodes, default_seeds, viewport
            ).hints
        }

        if self.changed_ids is not None:
            changed = self.changed_ids
        else:
            changed = {n for n in nodes if n not in previous}

        matched: List[Position] = [transported[n] for n in nodes if n in previous]
        seeds: List[Position] = [default_seeds[n] for n in nodes if n in default_seeds]
        anchor = centroid(matched) or centroid(seeds) or Position(x=0.0, y=0.0)

        hints = []
        for node_id in nodes:
            if node_id not in changed:
                hints.append(self.hint(node_id, transported[node_id]))
                continue
            base = default_seeds.get(node_id) or anchor
            jitter = deterministic_jitter(node_id, CHANGE_EMPHASIS_JITTER_RADIUS)
            hints.append(self.hint(node_id, Position(x=base.x + jitter.x, y=base.y + jitter.y)))

        return HintResult(hints=hints, iteration_mode="default")

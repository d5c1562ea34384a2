"""Temporal policy protocol.

A temporal policy turns the positions of a previous layout into initial
position hints for the next solver run, so nodes that survive an edit stay
roughly where the user last saw them. Policies never change layout
semantics; they only seed the solver and pick its iteration mode.

The previous layout is always passed in explicitly. Policies hold no state
between calls.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

IterationMode = Literal["default", "reduced"]


class Position(BaseModel):
    """Node center in layout space."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class TransformInfo(BaseModel):
    """Pan/zoom applied to the previous view (scale ``k``, translation ``x``/``y``)."""

    model_config = ConfigDict(frozen=True)

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PositionHint(BaseModel):
    """Initial position for one node."""

    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    y: float


class HintResult(BaseModel):
    """Hints for every requested node plus the solver iteration mode."""

    model_config = ConfigDict(frozen=True)

    hints: List[PositionHint] = Field(default_factory=list)
    iteration_mode: IterationMode = "default"


Positions = Mapping[str, Position]


def centroid(points: Sequence[Position]) -> Optional[Position]:
    if not points:
        return None
    return Position(
        x=sum(p.x for p in points) / len(points),
        y=sum(p.y for p in points) / len(points),
    )


class TemporalPolicy(ABC):
    """Abstract base class for temporal policies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Policy name as used by ``resolve_temporal_policy``."""
        ...

    @abstractmethod
    def make_hints(
        self,
        prev_positions: Optional[Positions],
        prev_transform: Optional[TransformInfo],
        nodes: Sequence[str],
        default_seeds: Positions,
        viewport: Optional[Viewport] = None,
    ) -> HintResult:
        """Compute one position hint per node.

        Args:
            prev_positions: Node id -> position in the previous layout
            prev_transform: View transform of the previous layout
            nodes: Ids of the nodes in the new layout, in output order
            default_seeds: Node id -> position the solver would start from
            viewport: Visible area, used when seeds give no usable extent

        Returns:
            HintResult with exactly one hint per entry of ``nodes``
        """
        ...

    @staticmethod
    def fallback_position(default_seeds: Positions) -> Position:
        """Where a node with neither prior position nor seed is placed."""
        return centroid(list(default_seeds.values())) or Position(x=0.0, y=0.0)

    @staticmethod
    def hint(node_id: str, position: Position) -> PositionHint:
        return PositionHint(id=node_id, x=position.x, y=position.y)

    def seed_hints(
        self,
        positions: Dict[str, Position],
        nodes: Sequence[str],
        default_seeds: Positions,
    ) -> List[PositionHint]:
        """Hints from ``positions``, then seeds, then the fallback position."""
        fallback = None
        hints = []
        for node_id in nodes:
            position = positions.get(node_id) or default_seeds.get(node_id)
            if position is None:
                if fallback is None:
                    fallback = self.fallback_position(default_seeds)
                position = fallback
            hints.append(self.hint(node_id, position))
        return hints


class UnknownPolicyError(ValueError):
    """Raised when a temporal policy name is not registered."""

    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = list(available)
        super().__init__(f"Unknown temporal policy: {name}. Available: {self.available}")

"""Layout result schemas.

A LayoutResult is the engine's only output: the visible nodes and edges with
their decorations, the groups, and the relative-position constraints handed
to the external constraint solver. Coordinates are not part of the result;
the solver computes them.

All models are frozen. ``LayoutResult.to_json`` produces a canonical
serialization so two results can be compared byte for byte.
"""

import json
import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class NodeLayout(BaseModel):
    """One visible atom."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = Field(..., description="Most specific type of the atom")
    types: List[str] = Field(default_factory=list, description="Type hierarchy plus 'univ'")
    label: str
    width: float
    height: float
    color: Optional[str] = None
    icon: Optional[str] = None
    show_labels: bool = True
    attributes: Dict[str, List[str]] = Field(default_factory=dict)
    groups: List[str] = Field(default_factory=list)
    hidden: bool = False


class EdgeLayout(BaseModel):
    """One visible edge."""

    model_config = ConfigDict(frozen=True)

    id: str
    relation_name: str
    source: str
    target: str
    label: str
    color: str = "black"
    style: Literal["solid", "dashed", "dotted"] = "solid"
    weight: Optional[float] = None
    show_label: bool = True
    hidden: bool = False


class LayoutGroup(BaseModel):
    """Named cluster of nodes, optionally keyed on one node."""

    model_config = ConfigDict(frozen=True)

    name: str
    node_ids: List[str] = Field(default_factory=list)
    key_node_id: Optional[str] = None
    show_label: bool = True


# =============================================================================
# Relative-position constraints
# =============================================================================


class LeftConstraint(BaseModel):
    """``left`` sits at least ``min_distance`` left of ``right``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["left"] = "left"
    left: str
    right: str
    min_distance: float
    source_entry_id: str


class TopConstraint(BaseModel):
    """``top`` sits at least ``min_distance`` above ``bottom``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["top"] = "top"
    top: str
    bottom: str
    min_distance: float
    source_entry_id: str


class AlignmentConstraint(BaseModel):
    """Two nodes share a coordinate on ``axis``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["alignment"] = "alignment"
    axis: Literal["x", "y"]
    node1: str
    node2: str
    source_entry_id: str


PositionalConstraint = Union[LeftConstraint, TopConstraint, AlignmentConstraint]


class DisjunctiveConstraint(BaseModel):
    """Exactly one alternative (a conjunction of constraints) must hold."""

    model_config = ConfigDict(frozen=True)

    source_entry_id: str
    alternatives: List[List[PositionalConstraint]]


class LayoutResult(BaseModel):
    """Complete, immutable layout description."""

    model_config = ConfigDict(frozen=True)

    nodes: List[NodeLayout] = Field(default_factory=list)
    edges: List[EdgeLayout] = Field(default_factory=list)
    groups: List[LayoutGroup] = Field(default_factory=list)
    constraints: List[PositionalConstraint] = Field(default_factory=list)
    disjunctive_constraints: List[DisjunctiveConstraint] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[NodeLayout]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_of(self, relation_name: str) -> List[EdgeLayout]:
        return [e for e in self.edges if e.relation_name == relation_name]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Canonical JSON with sorted keys."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))


class ProjectionChoice(BaseModel):
    """Atom chosen for one projected type."""

    type: str
    projected_atom: str
    atoms: List[str]


class LayoutGenerationResult(BaseModel):
    """Layout plus everything the caller needs to report on it.

    ``layout`` is None only when strict mode aborted the call, in which case
    ``error`` describes why.
    """

    layout: Optional[LayoutResult] = None
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    projection_choices: List[ProjectionChoice] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

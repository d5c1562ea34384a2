"""Data models: instance input, typed spec entries and layout output."""

from .instance import Atom, AtomType, DataInstance, Relation, RelationTuple
from .layout_result import (
    AlignmentConstraint,
    DisjunctiveConstraint,
    EdgeLayout,
    LayoutGenerationResult,
    LayoutGroup,
    LayoutResult,
    LeftConstraint,
    NodeLayout,
    ProjectionChoice,
    TopConstraint,
)
from .layout_spec import ENTRY_TYPES, LayoutSpec, SpecEntry, UnknownEntry, get_entry_type

__all__ = [
    # Instance
    "Atom",
    "AtomType",
    "DataInstance",
    "Relation",
    "RelationTuple",

    # Spec
    "ENTRY_TYPES",
    "LayoutSpec",
    "SpecEntry",
    "UnknownEntry",
    "get_entry_type",

    # Result
    "AlignmentConstraint",
    "DisjunctiveConstraint",
    "EdgeLayout",
    "LayoutGenerationResult",
    "LayoutGroup",
    "LayoutResult",
    "LeftConstraint",
    "NodeLayout",
    "ProjectionChoice",
    "TopConstraint",
]

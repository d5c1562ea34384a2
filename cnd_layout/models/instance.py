"""Relational data instance: atoms, types and tuples.

A data instance is the read-only input to the layout engine. Atoms become
diagram nodes; every relation tuple of arity two or more becomes an edge from
its first atom to its last atom, with interior atoms folded into the label.

JSON shape accepted by ``DataInstance.from_dict``:
    {
        "atoms": [{"id": "Alice", "type": "Person", "label": "Alice"}],
        "relations": [
            {
                "id": "friend",
                "name": "friend",
                "types": ["Person", "Person"],
                "tuples": [{"atoms": ["Alice", "Bob"], "types": ["Person", "Person"]}]
            }
        ],
        "types": [{"id": "Person", "types": ["Person"], "atoms": [...]}]
    }

``types`` is optional; missing type definitions are inferred from atoms.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

logger = logging.getLogger(__name__)


BUILTIN_TYPES = frozenset({
    'String', 'Int', 'Bool', 'seq/Int', 'univ', 'none',
})


class Atom(BaseModel):
    """An indivisible labeled entity."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique atom identifier")
    type: str = Field(..., description="Most specific type name")
    label: str = Field(default="", description="Display label (defaults to id)")

    @model_validator(mode="before")
    @classmethod
    def default_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("label"):
            data = {**data, "label": str(data.get("id", ""))}
        return data


class RelationTuple(BaseModel):
    """Ordered atom ids with parallel type names."""

    model_config = ConfigDict(frozen=True)

    atoms: List[str] = Field(..., min_length=1)
    types: List[str] = Field(default_factory=list)

    @property
    def arity(self) -> int:
        return len(self.atoms)


class Relation(BaseModel):
    """A named set of tuples of one arity."""

    id: str = Field(default="", description="Relation identifier (defaults to name)")
    name: str
    types: List[str] = Field(default_factory=list)
    tuples: List[RelationTuple] = Field(default_factory=list)

    @model_validator(mode="after")
    def normalize(self) -> "Relation":
        if not self.id:
            self.id = self.name
        # (name, tuple) pairs are set-like
        seen = set()
        unique: List[RelationTuple] = []
        for t in self.tuples:
            key = tuple(t.atoms)
            if key in seen:
                logger.debug(f"Dropping duplicate tuple {key} in relation '{self.name}'")
                continue
            seen.add(key)
            unique.append(t)
        self.tuples = unique
        return self

    @property
    def arity(self) -> int:
        if self.tuples:
            return self.tuples[0].arity
        return len(self.types)


class AtomType(BaseModel):
    """A type with its hierarchy, most specific first."""

    id: str
    types: List[str] = Field(default_factory=list)
    atoms: List[Atom] = Field(default_factory=list)
    is_builtin: bool = False

    @model_validator(mode="after")
    def ensure_hierarchy(self) -> "AtomType":
        if not self.types:
            self.types = [self.id]
        return self


class DataInstance(BaseModel):
    """Read-only snapshot of atoms, relations and types.

    Lookups by id are indexed once on construction; the instance must not be
    mutated afterwards.
    """

    atoms: List[Atom] = Field(default_factory=list)
    relations: List[Relation] = Field(default_factory=list)
    types: List[AtomType] = Field(default_factory=list)

    _atom_index: Dict[str, Atom] = PrivateAttr(default_factory=dict)
    _type_index: Dict[str, AtomType] = PrivateAttr(default_factory=dict)
    _relation_index: Dict[str, Relation] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def build_indexes(self) -> "DataInstance":
        atom_index: Dict[str, Atom] = {}
        unique_atoms: List[Atom] = []
        for atom in self.atoms:
            if atom.id in atom_index:
                logger.debug(f"Dropping duplicate atom '{atom.id}'")
                continue
            atom_index[atom.id] = atom
            unique_atoms.append(atom)
        self.atoms = unique_atoms

        type_index: Dict[str, AtomType] = {t.id: t for t in self.types}
        for atom in self.atoms:
            if atom.type not in type_index:
                inferred = AtomType(
                    id=atom.type,
                    types=[atom.type],
                    is_builtin=atom.type in BUILTIN_TYPES,
                )
                type_index[atom.type] = inferred
                self.types.append(inferred)
            atom_type = type_index[atom.type]
            if all(a.id != atom.id for a in atom_type.atoms):
                atom_type.atoms.append(atom)

        self._atom_index = atom_index
        self._type_index = type_index
        # First relation wins when names collide
        relation_index: Dict[str, Relation] = {}
        for relation in self.relations:
            relation_index.setdefault(relation.name, relation)
        self._relation_index = relation_index
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataInstance":
        """Build an instance from its JSON-style dictionary form.

        Args:
            data: Dictionary with ``atoms``, ``relations`` and optional ``types``

        Returns:
            Validated DataInstance

        Raises:
            pydantic.ValidationError: If the data does not match the schema
        """
        types = []
        for raw in data.get("types", []) or []:
            raw = dict(raw)
            if "isBuiltin" in raw:
                raw["is_builtin"] = raw.pop("isBuiltin")
            types.append(raw)
        return cls.model_validate({
            "atoms": data.get("atoms", []),
            "relations": data.get("relations", []),
            "types": types,
        })

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_atoms(self) -> List[Atom]:
        return list(self.atoms)

    def get_relations(self) -> List[Relation]:
        return list(self.relations)

    def get_types(self) -> List[AtomType]:
        return list(self.types)

    def get_atom(self, atom_id: str) -> Optional[Atom]:
        return self._atom_index.get(atom_id)

    def get_relation(self, name: str) -> Optional[Relation]:
        return self._relation_index.get(name)

    def get_type(self, type_id: str) -> Optional[AtomType]:
        return self._type_index.get(type_id)

    def get_atom_type(self, atom_id: str) -> AtomType:
        """Get the type definition for an atom.

        Raises:
            KeyError: If the atom or its type is unknown
        """
        atom = self._atom_index.get(atom_id)
        if atom is None:
            raise KeyError(f"Atom with ID '{atom_id}' not found")
        atom_type = self._type_index.get(atom.type)
        if atom_type is None:
            raise KeyError(f"Type '{atom.type}' not found for atom '{atom_id}'")
        return atom_type

    def label_of(self, atom_id: str) -> str:
        atom = self._atom_index.get(atom_id)
        return atom.label if atom else atom_id

    def type_hierarchy(self, type_id: str) -> List[str]:
        """Type names from most specific to most general."""
        atom_type = self._type_index.get(type_id)
        return list(atom_type.types) if atom_type else [type_id]

    def top_level_type(self, type_id: str) -> str:
        return self.type_hierarchy(type_id)[-1]

    def is_subtype(self, type_id: str, ancestor: str) -> bool:
        return ancestor in self.type_hierarchy(type_id)

    def atoms_of_type(self, type_id: str) -> List[Atom]:
        """All atoms whose type is ``type_id`` or one of its subtypes."""
        return [a for a in self.atoms if self.is_subtype(a.type, type_id)]

    def is_builtin_atom(self, atom: Atom) -> bool:
        atom_type = self._type_index.get(atom.type)
        if atom_type is not None and atom_type.is_builtin:
            return True
        return atom.type in BUILTIN_TYPES

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def apply_projections(self, atom_ids: Sequence[str]) -> "DataInstance":
        """Project the instance over the given atoms.

        Each projected atom removes its top-level type: relations mentioning
        that type keep only tuples containing a projected atom, with the
        projected columns dropped, and every atom of the type disappears.

        Args:
            atom_ids: Atoms to project over, at most one per top-level type

        Returns:
            New DataInstance with projections applied

        Raises:
            ValueError: If an atom is unknown or two atoms share a top-level type
        """
        if not atom_ids:
            return self.model_copy(deep=True)

        projections: Dict[str, str] = {}
        for atom_id in atom_ids:
            atom = self._atom_index.get(atom_id)
            if atom is None:
                raise ValueError(f"Cannot project over atom '{atom_id}': atom not found")
            top = self.top_level_type(atom.type)
            if top in projections:
                raise ValueError(
                    f"Cannot project over '{atom_id}' and '{projections[top]}'. "
                    f"Both are of type '{top}'"
                )
            projections[top] = atom_id

        projected_types = list(projections.keys())
        projected_atoms = set(projections.values())

        def is_projected(type_id: str) -> bool:
            return any(self.is_subtype(type_id, p) for p in projected_types)

        new_relations: List[Dict[str, Any]] = []
        for relation in self.relations:
            column_types = relation.types or (relation.tuples[0].types if relation.tuples else [])
            dropped = [i for i, t in enumerate(column_types) if is_projected(t)]
            if not dropped:
                new_relations.append(relation.model_dump())
                continue
            tuples = []
            for t in relation.tuples:
                if not any(a in projected_atoms for a in t.atoms):
                    continue
                atoms = [a for i, a in enumerate(t.atoms) if i not in dropped]
                if not atoms:
                    continue
                types = [ty for i, ty in enumerate(t.types) if i not in dropped]
                tuples.append({"atoms": atoms, "types": types})
            kept_types = [t for i, t in enumerate(relation.types) if i not in dropped]
            if tuples or kept_types:
                new_relations.append({
                    "id": relation.id,
                    "name": relation.name,
                    "types": kept_types,
                    "tuples": tuples,
                })

        new_atoms = [
            a.model_dump() for a in self.atoms
            if self.top_level_type(a.type) not in projected_types
        ]
        new_types = [
            {
                "id": t.id,
                "types": list(t.types),
                "is_builtin": t.is_builtin,
                "atoms": [] if is_projected(t.id) else [
                    a.model_dump() for a in t.atoms if a.id not in projected_atoms
                ],
            }
            for t in self.types
        ]
        logger.debug(f"Projected over {sorted(projected_atoms)}")
        return DataInstance.model_validate({
            "atoms": new_atoms,
            "relations": new_relations,
            "types": new_types,
        })

    def edge_label(self, relation_name: str, atoms: Sequence[str]) -> str:
        """Edge label for a tuple: ``name`` or ``name[mid, ...]``."""
        middle = atoms[1:-1]
        if not middle:
            return relation_name
        return f"{relation_name}[{', '.join(self.label_of(a) for a in middle)}]"

    def generate_graph(
        self,
        hide_disconnected: bool = False,
        hide_disconnected_builtins: bool = False,
    ) -> nx.MultiDiGraph:
        """Build a directed multigraph of atoms and relation tuples.

        Tuples of arity two or more connect their first atom to their last;
        unary tuples become self loops. Edge keys are ``{relation.id}_{index}``.

        Args:
            hide_disconnected: Remove every atom without edges
            hide_disconnected_builtins: Remove built-in atoms without edges

        Returns:
            NetworkX MultiDiGraph with ``label``, ``type`` and ``is_builtin``
            node attributes and ``relation``, ``label`` and ``atoms`` edge
            attributes
        """
        graph = nx.MultiDiGraph()
        for atom in self.atoms:
            graph.add_node(
                atom.id,
                label=atom.label,
                type=atom.type,
                is_builtin=self.is_builtin_atom(atom),
            )

        for relation in self.relations:
            for index, t in enumerate(relation.tuples):
                source, target = t.atoms[0], t.atoms[-1]
                if source not in graph or target not in graph:
                    logger.debug(
                        f"Skipping tuple {t.atoms} of '{relation.name}': unknown atom"
                    )
                    continue
                graph.add_edge(
                    source,
                    target,
                    key=f"{relation.id}_{index}",
                    relation=relation.name,
                    label=self.edge_label(relation.name, t.atoms),
                    atoms=tuple(t.atoms),
                )

        if hide_disconnected or hide_disconnected_builtins:
            to_remove = [
                node for node, data in graph.nodes(data=True)
                if graph.degree(node) == 0
                and (hide_disconnected or data.get("is_builtin", False))
            ]
            graph.remove_nodes_from(to_remove)

        return graph


"""Compile a layout spec against a data instance.

The generator never positions nodes. It decides which atoms and tuples are
visible, how they are decorated and grouped, and which relative-position
constraints the external solver must satisfy.

Order of operations:
    1. Projections (faceted view over chosen atoms)
    2. Graph of atoms and tuples (hideDisconnected flags)
    3. hideField / attribute directives remove or fold edges
    4. Icon, color and size maps
    5. Inferred edges
    6. Groups (groupselector, groupfield)
    7. hideAtom and disconnected hiding
    8. Tags
    9. Orientation, align and cyclic constraints
   10. Edge styling and assembly

Failure policy:
    Lenient (default): an entry whose selector fails, or that conflicts with
    an earlier entry, is skipped and reported in ``warnings``.
    Strict: the first such problem ends the call with ``error`` set and no
    layout.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from cnd_layout.config.settings import (
    DEFAULT_EDGE_COLOR,
    DEFAULT_NODE_COLOR,
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    AlignmentEdgeStrategy,
    get_alignment_edge_strategy,
    is_enabled,
)
from cnd_layout.evaluator import SelectorError, SelectorEvaluator, SelectorValue
from cnd_layout.layout.colors import type_colors
from cnd_layout.layout.cyclic import cyclic_disjunctions
from cnd_layout.layout.errors import LayoutEntryError
from cnd_layout.layout.orientation import ALIGNMENT_EDGE_PREFIX, ConstraintBuilder, is_alignment_edge
from cnd_layout.models.instance import DataInstance
from cnd_layout.models.layout_result import (
    DisjunctiveConstraint,
    EdgeLayout,
    LayoutGenerationResult,
    LayoutGroup,
    LayoutResult,
    NodeLayout,
    ProjectionChoice,
)
from cnd_layout.models.layout_spec import (
    AlignConstraint,
    AtomColorDirective,
    AttributeDirective,
    CyclicConstraint,
    EdgeColorDirective,
    GroupByFieldConstraint,
    GroupBySelectorConstraint,
    HideAtomConstraint,
    HideFieldDirective,
    IconDirective,
    InferredEdgeDirective,
    LayoutSpec,
    OrientationConstraint,
    ProjectionDirective,
    SizeConstraint,
    SpecEntryBase,
    TagDirective,
)

logger = logging.getLogger(__name__)

INFERRED_EDGE_PREFIX = "_inferred_"
DISCONNECTED_PREFIX = "_d_"
UNIVERSAL_TYPE = "univ"

Attributes = Dict[str, Dict[str, List[str]]]


@dataclass
class _GroupDraft:
    name: str
    key_node_id: Optional[str]
    node_ids: List[str] = field(default_factory=list)

    def add(self, node_id: str) -> None:
        if node_id not in self.node_ids:
            self.node_ids.append(node_id)


@dataclass
class _EdgeRule:
    entry: Union[EdgeColorDirective, AttributeDirective, HideFieldDirective]
    atoms: Optional[Set[str]]
    tuples: Optional[Set[Tuple[str, ...]]] = None

    def matches(self, relation: str, atoms: Sequence[str]) -> bool:
        if self.entry.field != relation:
            return False
        if self.atoms is not None and atoms[0] not in self.atoms:
            return False
        if self.tuples is not None and tuple(atoms) not in self.tuples:
            return False
        return True


class _Compilation:
    """State of one generate call."""

    def __init__(
        self,
        spec: LayoutSpec,
        evaluator: Any,
        instance: DataInstance,
        strict: bool,
        strategy: AlignmentEdgeStrategy,
    ):
        self.spec = spec
        self.evaluator = evaluator
        self.instance = instance
        self.strict = strict
        self.strategy = strategy
        self.warnings: List[str] = []
        self.projection_choices: List[ProjectionChoice] = []
        self._values: Dict[str, Union[SelectorValue, SelectorError]] = {}

    # ------------------------------------------------------------------
    # Problem reporting
    # ------------------------------------------------------------------

    def warn(self, entry: SpecEntryBase, message: str) -> None:
        text = f"{entry.kind} entry {entry.id}: {message}"
        logger.warning(text)
        self.warnings.append(text)

    def problem(self, entry: SpecEntryBase, message: str) -> None:
        """Report an entry-level failure; fatal in strict mode."""
        if self.strict:
            raise LayoutEntryError(
                f"{entry.kind} entry {entry.id}: {message}", entry.id, entry.kind
            )
        self.warn(entry, message)

    def evaluate(self, entry: SpecEntryBase, expression: str) -> Optional[SelectorValue]:
        """Evaluate a selector for an entry, None if it fails."""
        if expression not in self._values:
            try:
                self._values[expression] = self.evaluator.evaluate(expression)
            except SelectorError as e:
                self._values[expression] = e
        cached = self._values[expression]
        if isinstance(cached, SelectorError):
            self.problem(entry, str(cached))
            return None
        return cached

    def selected_atoms(self, entry: SpecEntryBase, expression: Optional[str]) -> Optional[Set[str]]:
        """Atoms selected by an optional selector; None means all atoms."""
        if expression is None:
            return None
        value = self.evaluate(entry, expression)
        if value is None:
            raise _SkipEntry()
        return set(value.selected_atoms())

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def run(self, projections: Optional[Dict[str, str]]) -> LayoutResult:
        self._apply_projections(projections or {})

        graph = self.instance.generate_graph(
            self.spec.has_flag("hideDisconnected"),
            self.spec.has_flag("hideDisconnectedBuiltIns"),
        )

        attributes = self._apply_field_directives(graph)
        icons = self._icon_map(graph)
        colors = self._color_map(graph)
        sizes = self._size_map(graph)
        self._add_inferred_edges(graph)
        groups = self._generate_groups(graph)
        self._remove_hidden_nodes(graph)
        self._apply_tags(graph, attributes)

        disconnected = [n for n in graph.nodes if graph.degree(n) == 0]
        group_list = self._finish_groups(groups, graph)
        nodes = self._build_nodes(graph, attributes, icons, colors, sizes, group_list)

        builder = ConstraintBuilder(
            graph,
            self.strategy,
            prune=is_enabled("prune_alignment_edges"),
        )
        self._apply_orientation(graph, builder)
        builder.prune_alignment_edges()
        disjunctions = self._apply_cyclic(graph)

        edges = self._build_edges(graph)
        group_list += [
            LayoutGroup(
                name=f"{DISCONNECTED_PREFIX}{node_id}",
                node_ids=[node_id],
                key_node_id=node_id,
                show_label=False,
            )
            for node_id in disconnected
        ]

        logger.debug(
            f"Generated layout with {len(nodes)} nodes, {len(edges)} edges, "
            f"{len(builder.constraints)} constraints, {len(disjunctions)} disjunctions"
        )
        return LayoutResult(
            nodes=nodes,
            edges=edges,
            groups=group_list,
            constraints=builder.constraints,
            disjunctive_constraints=disjunctions,
        )

    # ------------------------------------------------------------------
    # 1. Projections
    # ------------------------------------------------------------------

    def _ordered_atoms(self, entry: ProjectionDirective, atoms: List[str]) -> List[str]:
        if not entry.order_by:
            return atoms
        value = self.evaluate(entry, entry.order_by)
        if value is None:
            return atoms
        index = {atom: i for i, atom in enumerate(atoms)}
        order = nx.DiGraph()
        order.add_nodes_from(atoms)
        order.add_edges_from(
            (a, b) for a, b in value.selected_pairs() if a in index and b in index and a != b
        )
        try:
            return list(nx.lexicographical_topological_sort(order, key=index.get))
        except nx.NetworkXUnfeasible:
            self.warn(entry, f"orderBy '{entry.order_by}' is cyclic; using instance order")
            return atoms

    def _apply_projections(self, requested: Dict[str, str]) -> None:
        entries = [e for e in self.spec.directives if isinstance(e, ProjectionDirective)]
        if not entries:
            return

        chosen: List[str] = []
        choices: List[ProjectionChoice] = []
        for entry in entries:
            if self.instance.get_type(entry.sig) is None:
                self.problem(entry, f"unknown type '{entry.sig}'")
                continue
            atoms = self._ordered_atoms(
                entry, [a.id for a in self.instance.atoms_of_type(entry.sig)]
            )
            if not atoms:
                continue
            atom_id = requested.get(entry.sig)
            if atom_id is not None and atom_id not in atoms:
                self.warn(entry, f"atom '{atom_id}' is not a {entry.sig}; using '{atoms[0]}'")
                atom_id = None
            atom_id = atom_id or atoms[0]
            chosen.append(atom_id)
            choices.append(ProjectionChoice(type=entry.sig, projected_atom=atom_id, atoms=atoms))

        if not chosen:
            return
        try:
            projected = self.instance.apply_projections(chosen)
        except ValueError as e:
            self.problem(entries[-1], str(e))
            return
        self.instance = projected
        self.evaluator = SelectorEvaluator(projected)
        self._values = {}
        self.projection_choices = choices

    # ------------------------------------------------------------------
    # 3. Field directives
    # ------------------------------------------------------------------

    def _edge_rules(self, entry_type: type) -> List[_EdgeRule]:
        rules = []
        for entry in self.spec.directives:
            if not isinstance(entry, entry_type):
                continue
            try:
                atoms = self.selected_atoms(entry, entry.selector)
                tuples = None
                filter_expr = getattr(entry, "filter", None)
                if filter_expr is not None:
                    value = self.evaluate(entry, filter_expr)
                    if value is None:
                        continue
                    tuples = set(value.tuples)
            except _SkipEntry:
                continue
            rules.append(_EdgeRule(entry=entry, atoms=atoms, tuples=tuples))
        return rules

    def _apply_field_directives(self, graph: nx.MultiDiGraph) -> Attributes:
        hide_rules = self._edge_rules(HideFieldDirective)
        attribute_rules = self._edge_rules(AttributeDirective)
        attributes: Attributes = {}

        for u, v, key, data in list(graph.edges(keys=True, data=True)):
            relation, atoms = data["relation"], data["atoms"]
            hidden = any(rule.matches(relation, atoms) for rule in hide_rules)
            attribute_rule = next(
                (rule for rule in attribute_rules if rule.matches(relation, atoms)), None
            )
            if hidden and attribute_rule is not None:
                self.problem(
                    attribute_rule.entry,
                    f"'{relation}' cannot be both an attribute and a hidden field",
                )
            if hidden:
                graph.remove_edge(u, v, key=key)
                continue
            if attribute_rule is not None:
                values = attributes.setdefault(u, {}).setdefault(data["label"], [])
                values.append(graph.nodes[v]["label"])
                graph.remove_edge(u, v, key=key)
        return attributes

    # ------------------------------------------------------------------
    # 4. Node decorations
    # ------------------------------------------------------------------

    def _decorate(self, graph: nx.MultiDiGraph, entry_type: type, value_of, what: str) -> Dict[str, Any]:
        decorations: Dict[str, Any] = {}
        for entry in self.spec.entries():
            if not isinstance(entry, entry_type):
                continue
            selected = self.evaluate(entry, entry.selector)
            if selected is None:
                continue
            value = value_of(entry)
            for atom in selected.selected_atoms():
                if atom not in graph:
                    continue
                existing = decorations.get(atom)
                if existing is not None and existing != value:
                    self.problem(
                        entry,
                        f"{what} conflict: '{atom}' cannot have multiple {what}s: "
                        f"{existing}, {value}",
                    )
                    continue
                decorations[atom] = value
        return decorations

    def _icon_map(self, graph: nx.MultiDiGraph) -> Dict[str, Tuple[str, bool]]:
        return self._decorate(graph, IconDirective, lambda e: (e.path, e.show_labels), "icon")

    def _color_map(self, graph: nx.MultiDiGraph) -> Dict[str, str]:
        return self._decorate(graph, AtomColorDirective, lambda e: e.value, "color")

    def _size_map(self, graph: nx.MultiDiGraph) -> Dict[str, Tuple[float, float]]:
        return self._decorate(graph, SizeConstraint, lambda e: (e.width, e.height), "size")

    # ------------------------------------------------------------------
    # 5. Inferred edges
    # ------------------------------------------------------------------

    def _add_inferred_edges(self, graph: nx.MultiDiGraph) -> None:
        for entry in self.spec.directives:
            if not isinstance(entry, InferredEdgeDirective):
                continue
            value = self.evaluate(entry, entry.selector)
            if value is None:
                continue
            for atoms in value.selected_tuples():
                source, target = atoms[0], atoms[-1]
                if source not in graph or target not in graph:
                    continue
                label = entry.name
                if len(atoms) > 2:
                    middle = ",".join(self.instance.label_of(a) for a in atoms[1:-1])
                    label = f"{label}[{middle}]"
                key = f"{INFERRED_EDGE_PREFIX}<:{entry.name}<:{'->'.join(atoms)}"
                graph.add_edge(
                    source, target, key=key,
                    relation=entry.name, label=label, atoms=tuple(atoms), inferred_by=entry,
                )

    # ------------------------------------------------------------------
    # 6. Groups
    # ------------------------------------------------------------------

    def _group_label(self, graph: nx.MultiDiGraph, node_id: str) -> str:
        label = graph.nodes[node_id]["label"] if node_id in graph else node_id
        return label if label == node_id else f"{label}:{node_id}"

    def _generate_groups(self, graph: nx.MultiDiGraph) -> Dict[str, _GroupDraft]:
        groups: Dict[str, _GroupDraft] = {}

        for entry in self.spec.constraints:
            if not isinstance(entry, GroupBySelectorConstraint):
                continue
            value = self.evaluate(entry, entry.selector)
            if value is None:
                continue
            pairs = value.selected_pairs()
            if pairs:
                for key_node, member in pairs:
                    name = f"{entry.name}[{self._group_label(graph, key_node)}]"
                    group = groups.setdefault(name, _GroupDraft(name, key_node))
                    group.add(member)
                    if entry.add_edge and key_node in graph and member in graph:
                        graph.add_edge(
                            key_node, member, key=f"_g_0_1_{name}:{key_node}->{member}",
                            relation=entry.name, label=name, atoms=(key_node, member),
                        )
            else:
                atoms = value.selected_atoms()
                if not atoms:
                    continue
                group = groups.setdefault(entry.name, _GroupDraft(entry.name, atoms[0]))
                for atom in atoms:
                    group.add(atom)

        for entry in self.spec.constraints:
            if not isinstance(entry, GroupByFieldConstraint):
                continue
            try:
                self._group_by_field(graph, entry, groups)
            except _SkipEntry:
                continue
        return groups

    def _group_by_field(
        self,
        graph: nx.MultiDiGraph,
        entry: GroupByFieldConstraint,
        groups: Dict[str, _GroupDraft],
    ) -> None:
        selected = self.selected_atoms(entry, entry.selector)
        for u, v, key, data in list(graph.edges(keys=True, data=True)):
            if data["relation"] != entry.field or is_alignment_edge(key):
                continue
            if selected is not None and u not in selected:
                continue
            atoms = data["atoms"]
            arity = len(atoms)
            if arity < 2 or entry.group_on >= arity or entry.add_to_group >= arity:
                self.problem(
                    entry,
                    f"invalid grouping groupOn={entry.group_on} and "
                    f"addToGroup={entry.add_to_group} for {arity}-ary relation "
                    f"{entry.field}; both must be between 0 and {arity - 1}",
                )
                raise _SkipEntry()

            key_node = atoms[entry.group_on]
            member = atoms[entry.add_to_group]
            pattern = ",".join(
                a if i == entry.group_on else "_" for i, a in enumerate(atoms)
            )
            name = f"{entry.field}[{pattern}]"
            graph.remove_edge(u, v, key=key)
            if name in groups:
                groups[name].add(member)
                continue
            group = _GroupDraft(name, key_node)
            group.add(member)
            groups[name] = group
            graph.add_edge(
                u, v, key=f"_g_{entry.group_on}_{entry.add_to_group}_{key}",
                relation=entry.field, label=name, atoms=atoms,
            )

    def _finish_groups(
        self, groups: Dict[str, _GroupDraft], graph: nx.MultiDiGraph
    ) -> List[LayoutGroup]:
        result = []
        for group in groups.values():
            members = [n for n in group.node_ids if n in graph]
            if not members:
                continue
            result.append(LayoutGroup(
                name=group.name, node_ids=members, key_node_id=group.key_node_id,
            ))
        return result

    # ------------------------------------------------------------------
    # 7. Hidden nodes
    # ------------------------------------------------------------------

    def _remove_hidden_nodes(self, graph: nx.MultiDiGraph) -> None:
        hidden: Set[str] = set()
        for entry in self.spec.constraints:
            if not isinstance(entry, HideAtomConstraint):
                continue
            value = self.evaluate(entry, entry.selector)
            if value is not None:
                hidden.update(value.selected_atoms())
        graph.remove_nodes_from([n for n in list(graph.nodes) if n in hidden])

        # Field directives and hidden atoms can leave new isolated nodes
        hide_disconnected = self.spec.has_flag("hideDisconnected")
        hide_builtins = self.spec.has_flag("hideDisconnectedBuiltIns")
        graph.remove_nodes_from([
            node for node, data in list(graph.nodes(data=True))
            if graph.degree(node) == 0
            and (hide_disconnected or (hide_builtins and data.get("is_builtin")))
        ])

    # ------------------------------------------------------------------
    # 8. Tags
    # ------------------------------------------------------------------

    def _apply_tags(self, graph: nx.MultiDiGraph, attributes: Attributes) -> None:
        for entry in self.spec.directives:
            if not isinstance(entry, TagDirective):
                continue
            targets = self.evaluate(entry, entry.to_tag)
            values = self.evaluate(entry, entry.value) if targets is not None else None
            if targets is None or values is None:
                continue
            by_first: Dict[str, List[Tuple[str, ...]]] = {}
            for row in values.selected_tuples():
                by_first.setdefault(row[0], []).append(row)
            for atom in targets.selected_atoms():
                if atom not in graph:
                    continue
                for row in by_first.get(atom, []):
                    key = entry.name + "".join(
                        f"[{self.instance.label_of(a)}]" for a in row[1:-1]
                    )
                    attributes.setdefault(atom, {}).setdefault(key, []).append(
                        self.instance.label_of(row[-1])
                    )

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _build_nodes(
        self,
        graph: nx.MultiDiGraph,
        attributes: Attributes,
        icons: Dict[str, Tuple[str, bool]],
        colors: Dict[str, str],
        sizes: Dict[str, Tuple[float, float]],
        groups: List[LayoutGroup],
    ) -> List[NodeLayout]:
        defaults = type_colors([t.id for t in self.instance.types])
        nodes = []
        for node_id, data in graph.nodes(data=True):
            hierarchy = self.instance.type_hierarchy(data["type"])
            types = hierarchy + ([UNIVERSAL_TYPE] if UNIVERSAL_TYPE not in hierarchy else [])
            icon_path, show_labels = icons.get(node_id, (None, True))
            width, height = sizes.get(node_id, (DEFAULT_NODE_WIDTH, DEFAULT_NODE_HEIGHT))
            nodes.append(NodeLayout(
                id=node_id,
                type=hierarchy[0],
                types=types,
                label=data["label"],
                width=width,
                height=height,
                color=colors.get(node_id) or defaults.get(hierarchy[0], DEFAULT_NODE_COLOR),
                icon=icon_path,
                show_labels=show_labels,
                attributes=attributes.get(node_id, {}),
                groups=[g.name for g in groups if node_id in g.node_ids],
            ))
        return nodes

    # ------------------------------------------------------------------
    # 9. Positional constraints
    # ------------------------------------------------------------------

    def _visible_pairs(
        self, entry: SpecEntryBase, value: SelectorValue, graph: nx.MultiDiGraph
    ) -> List[Tuple[str, str]]:
        pairs = []
        skipped = 0
        for source, target in value.selected_pairs():
            if source == target:
                continue
            if source not in graph or target not in graph:
                skipped += 1
                continue
            pairs.append((source, target))
        if skipped:
            self.warn(entry, f"skipped {skipped} tuple(s) referencing atoms that are not visible")
        return pairs

    def _apply_orientation(self, graph: nx.MultiDiGraph, builder: ConstraintBuilder) -> None:
        for entry in self.spec.constraints:
            if isinstance(entry, OrientationConstraint):
                value = self.evaluate(entry, entry.selector)
                if value is not None:
                    builder.add_orientation(
                        entry.id, self._visible_pairs(entry, value, graph), entry.directions
                    )
        for entry in self.spec.constraints:
            if isinstance(entry, AlignConstraint):
                value = self.evaluate(entry, entry.selector)
                if value is not None:
                    builder.add_alignment(
                        entry.id, self._visible_pairs(entry, value, graph), entry.direction
                    )

    def _apply_cyclic(self, graph: nx.MultiDiGraph) -> List[DisjunctiveConstraint]:
        disjunctions: List[DisjunctiveConstraint] = []
        for entry in self.spec.constraints:
            if not isinstance(entry, CyclicConstraint):
                continue
            value = self.evaluate(entry, entry.selector)
            if value is None:
                continue
            disjunctions.extend(cyclic_disjunctions(
                entry.id, self._visible_pairs(entry, value, graph), entry.direction
            ))
        return disjunctions

    # ------------------------------------------------------------------
    # 10. Edges
    # ------------------------------------------------------------------

    def _build_edges(self, graph: nx.MultiDiGraph) -> List[EdgeLayout]:
        style_rules = self._edge_rules(EdgeColorDirective)
        edges = []
        for u, v, key, data in graph.edges(keys=True, data=True):
            if is_alignment_edge(key):
                edges.append(EdgeLayout(
                    id=key, relation_name=ALIGNMENT_EDGE_PREFIX, source=u, target=v,
                    label=key, show_label=False, hidden=True,
                ))
                continue

            relation, atoms = data["relation"], data["atoms"]
            matching = [rule.entry for rule in style_rules if rule.matches(relation, atoms)]
            if any(entry.hidden for entry in matching):
                continue
            first = matching[0] if matching else None
            inferred: Optional[InferredEdgeDirective] = data.get("inferred_by")

            color, style, weight, show_label = DEFAULT_EDGE_COLOR, "solid", None, True
            if inferred is not None:
                style = inferred.style or style
                weight = inferred.weight
            if first is not None:
                color = first.value
                style = first.style or style
                weight = first.weight if first.weight is not None else weight
                if first.show_label is not None:
                    show_label = first.show_label
            if inferred is not None and inferred.color:
                color = inferred.color

            edges.append(EdgeLayout(
                id=key,
                relation_name=relation,
                source=u,
                target=v,
                label=data["label"],
                color=color,
                style=style,
                weight=weight,
                show_label=show_label,
            ))
        return edges


class _SkipEntry(Exception):
    """Abandon the current entry; the problem was already reported."""


class LayoutGenerator:
    """Compiles one spec against data instances.

    Example:
        generator = LayoutGenerator(spec, SelectorEvaluator(instance))
        result = generator.generate(instance)
        if result.ok:
            render(result.layout)
    """

    def __init__(
        self,
        spec: LayoutSpec,
        evaluator: Any = None,
        strict: Optional[bool] = None,
        alignment_edge_strategy: Optional[AlignmentEdgeStrategy] = None,
    ):
        self.spec = spec
        self.evaluator = evaluator
        self.strict = is_enabled("strict_selector_errors") if strict is None else strict
        self.alignment_edge_strategy = alignment_edge_strategy or get_alignment_edge_strategy()

    def generate(
        self,
        instance: DataInstance,
        projections: Optional[Dict[str, str]] = None,
    ) -> LayoutGenerationResult:
        """Generate the layout for ``instance``.

        Args:
            instance: Data instance the evaluator is bound to
            projections: Chosen atom per projected type (defaults to the first)

        Returns:
            LayoutGenerationResult; ``layout`` is None only in strict mode
            after an entry-level failure
        """
        evaluator = self.evaluator if self.evaluator is not None else SelectorEvaluator(instance)
        compilation = _Compilation(
            self.spec, evaluator, instance, self.strict, self.alignment_edge_strategy
        )
        try:
            layout = compilation.run(projections)
        except LayoutEntryError as e:
            logger.error(f"Layout generation aborted: {e}")
            return LayoutGenerationResult(
                layout=None,
                warnings=compilation.warnings,
                error=str(e),
                projection_choices=compilation.projection_choices,
            )
        return LayoutGenerationResult(
            layout=layout,
            warnings=compilation.warnings,
            projection_choices=compilation.projection_choices,
        )


def generate_layout(
    spec: LayoutSpec,
    evaluator: Any,
    instance: DataInstance,
    projections: Optional[Dict[str, str]] = None,
    *,
    strict: Optional[bool] = None,
    alignment_edge_strategy: Optional[AlignmentEdgeStrategy] = None,
) -> LayoutGenerationResult:
    """Compile ``spec`` against ``instance``.

    Args:
        spec: Parsed layout spec
        evaluator: Object with ``evaluate(expression) -> SelectorValue`` bound
            to ``instance``; None builds a SelectorEvaluator
        instance: Data instance
        projections: Chosen atom per projected type
        strict: Abort on the first entry-level failure (defaults to the
            ``strict_selector_errors`` flag)
        alignment_edge_strategy: Helper edge policy (defaults to the
            environment setting)

    Returns:
        LayoutGenerationResult with layout, warnings and projection choices
    """
    return LayoutGenerator(
        spec, evaluator, strict=strict, alignment_edge_strategy=alignment_edge_strategy
    ).generate(instance, projections)

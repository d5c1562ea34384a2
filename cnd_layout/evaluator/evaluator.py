"""Relational selector evaluation over a data instance.

Identifiers resolve, in order, to a relation name, a type name (all atoms of
the type and its subtypes), a reserved constant (``univ``, ``none``, ``iden``,
``_``) or an atom id. Anything else raises ``EvaluationError``.

Operators never fail on shape: arity mismatches and joins with nothing to
match produce empty values.
"""

import logging
from typing import Dict, List, Tuple

from cnd_layout.evaluator.ast import Binary, BinaryOp, Expr, Identifier, Unary, UnaryOp
from cnd_layout.evaluator.errors import EvaluationError
from cnd_layout.evaluator.parser import parse_selector
from cnd_layout.evaluator.values import SelectorValue
from cnd_layout.models.instance import DataInstance

logger = logging.getLogger(__name__)

Row = Tuple[str, ...]

RESERVED = ("univ", "none", "iden", "_")


class SelectorEvaluator:
    """Evaluates selector expressions against one data instance.

    Parsed expressions are cached by text. The instance is treated as an
    immutable snapshot.

    Example:
        evaluator = SelectorEvaluator(instance)
        value = evaluator.evaluate("left & (Node3 -> univ)")
        pairs = value.selected_pairs()
    """

    def __init__(self, instance: DataInstance):
        self.instance = instance
        self._ast_cache: Dict[str, Expr] = {}

    def evaluate(self, expression: str) -> SelectorValue:
        """Evaluate a selector expression.

        Args:
            expression: Selector text

        Returns:
            SelectorValue with the selected tuples

        Raises:
            SelectorSyntaxError: If the expression is malformed
            EvaluationError: If an identifier cannot be resolved
        """
        expression = str(expression).strip()
        ast = self._ast_cache.get(expression)
        if ast is None:
            ast = parse_selector(expression)
            self._ast_cache[expression] = ast
        try:
            return self._eval(ast)
        except EvaluationError as e:
            if e.expression is None:
                raise EvaluationError(e.identifier, expression) from None
            raise

    # ------------------------------------------------------------------

    def _eval(self, expr: Expr) -> SelectorValue:
        if isinstance(expr, Identifier):
            return self._resolve(expr.name)
        if isinstance(expr, Unary):
            return self._eval_unary(expr.op, self._eval(expr.operand))
        if isinstance(expr, Binary):
            return self._eval_binary(expr.op, self._eval(expr.left), self._eval(expr.right))
        raise TypeError(f"Unsupported expression node: {expr!r}")

    def _universe(self) -> List[str]:
        return [a.id for a in self.instance.atoms]

    def _resolve(self, name: str) -> SelectorValue:
        relation = self.instance.get_relation(name)
        if relation is not None:
            return SelectorValue.of(
                max(relation.arity, 1), (t.atoms for t in relation.tuples)
            )

        if self.instance.get_type(name) is not None:
            return SelectorValue.of(
                1, ((a.id,) for a in self.instance.atoms_of_type(name))
            )

        if name in ("univ", "_"):
            return SelectorValue.of(1, ((a,) for a in self._universe()))
        if name == "none":
            return SelectorValue.empty(1)
        if name == "iden":
            return SelectorValue.of(2, ((a, a) for a in self._universe()))

        if self.instance.get_atom(name) is not None:
            return SelectorValue.of(1, [(name,)])

        raise EvaluationError(name)

    def _eval_unary(self, op: UnaryOp, value: SelectorValue) -> SelectorValue:
        if op is UnaryOp.TRANSPOSE:
            if value.arity != 2:
                return SelectorValue.empty(value.arity)
            return SelectorValue.of(2, ((b, a) for a, b in value.tuples))

        if value.arity != 2:
            return SelectorValue.empty(value.arity)
        closure = self._transitive_closure(list(value.tuples))
        if op is UnaryOp.CLOSURE:
            return SelectorValue.of(2, closure)
        identity = [(a, a) for a in self._universe()]
        return SelectorValue.of(2, identity + closure)

    def _transitive_closure(self, rows: List[Row]) -> List[Row]:
        result = list(dict.fromkeys(rows))
        known = set(result)
        successors: Dict[str, List[str]] = {}
        for a, b in rows:
            successors.setdefault(a, []).append(b)

        # Each round extends paths by one step; |univ| rounds reach the fixpoint
        for _ in range(max(len(self.instance.atoms), 1)):
            added = []
            for a, b in result:
                for c in successors.get(b, ()):
                    if (a, c) not in known:
                        known.add((a, c))
                        added.append((a, c))
            if not added:
                break
            result.extend(added)
        return result

    def _eval_binary(
        self, op: BinaryOp, left: SelectorValue, right: SelectorValue
    ) -> SelectorValue:
        if op is BinaryOp.JOIN:
            return self._join(left, right)
        if op is BinaryOp.PRODUCT:
            arity = left.arity + right.arity
            return SelectorValue.of(
                arity, (l + r for l in left.tuples for r in right.tuples)
            )

        if op is BinaryOp.UNION:
            if left.is_empty():
                return right
            if right.is_empty():
                return left
            if left.arity != right.arity:
                return SelectorValue.empty(left.arity)
            return SelectorValue.of(left.arity, left.tuples + right.tuples)

        if op is BinaryOp.DIFFERENCE:
            if left.is_empty() or right.is_empty():
                return left
            if left.arity != right.arity:
                return SelectorValue.empty(left.arity)
            removed = set(right.tuples)
            return SelectorValue.of(left.arity, (t for t in left.tuples if t not in removed))

        # intersection
        if left.arity != right.arity or left.is_empty() or right.is_empty():
            return SelectorValue.empty(left.arity)
        kept = set(right.tuples)
        return SelectorValue.of(left.arity, (t for t in left.tuples if t in kept))

    @staticmethod
    def _join(left: SelectorValue, right: SelectorValue) -> SelectorValue:
        arity = left.arity + right.arity - 2
        if arity < 1:
            return SelectorValue.empty(1)
        by_first: Dict[str, List[Row]] = {}
        for row in right.tuples:
            by_first.setdefault(row[0], []).append(row)
        rows = []
        for l in left.tuples:
            for r in by_first.get(l[-1], ()):
                rows.append(l[:-1] + r[1:])
        return SelectorValue.of(arity, rows)


def evaluate(expression: str, instance: DataInstance) -> SelectorValue:
    """Evaluate ``expression`` against ``instance``.

    Args:
        expression: Selector text
        instance: Data instance snapshot

    Returns:
        SelectorValue with the selected tuples

    Raises:
        SelectorSyntaxError: If the expression is malformed
        EvaluationError: If an identifier cannot be resolved
    """
    return SelectorEvaluator(instance).evaluate(expression)

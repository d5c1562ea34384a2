"""Relational selector evaluator.

Example:
    from cnd_layout.evaluator import evaluate

    value = evaluate("Person.age", instance)
    value.selected_pairs()
"""

from cnd_layout.evaluator.ast import Binary, BinaryOp, Expr, Identifier, Unary, UnaryOp
from cnd_layout.evaluator.errors import EvaluationError, SelectorError, SelectorSyntaxError
from cnd_layout.evaluator.evaluator import SelectorEvaluator, evaluate
from cnd_layout.evaluator.parser import parse_selector
from cnd_layout.evaluator.values import SelectorValue

__all__ = [
    "Binary",
    "BinaryOp",
    "Expr",
    "Identifier",
    "Unary",
    "UnaryOp",
    "EvaluationError",
    "SelectorError",
    "SelectorSyntaxError",
    "SelectorEvaluator",
    "SelectorValue",
    "evaluate",
    "parse_selector",
]

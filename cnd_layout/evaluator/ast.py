"""Typed syntax tree for selector expressions."""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class UnaryOp(str, Enum):
    TRANSPOSE = "~"
    REFLEXIVE_CLOSURE = "*"
    CLOSURE = "^"


class BinaryOp(str, Enum):
    UNION = "+"
    DIFFERENCE = "-"
    INTERSECTION = "&"
    PRODUCT = "->"
    JOIN = "."


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: "Expr"


@dataclass(frozen=True)
class Binary:
    op: BinaryOp
    left: "Expr"
    right: "Expr"


Expr = Union[Identifier, Unary, Binary]


def to_source(expr: Expr) -> str:
    """Render an expression fully parenthesized."""
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, Unary):
        return f"{expr.op.value}({to_source(expr.operand)})"
    return f"({to_source(expr.left)} {expr.op.value} {to_source(expr.right)})"

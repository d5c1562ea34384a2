"""Tokenizer and recursive-descent parser for selector expressions.

Precedence, loosest first:
    + -     union, difference (left-associative)
    &       intersection
    ->      cartesian product
    .       relational join
    ~ * ^   transpose and closures, prefix or postfix
    ( )     grouping
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from cnd_layout.evaluator.ast import Binary, BinaryOp, Expr, Identifier, Unary, UnaryOp
from cnd_layout.evaluator.errors import SelectorSyntaxError

IDENT_CHARS = r"[A-Za-z0-9_$@'/]"

TOKEN_PATTERN = re.compile(
    rf"\s*(?:(?P<ident>{IDENT_CHARS}+)|(?P<op>->|[+\-&.~*^()]))"
)

UNARY_OPS = {op.value: op for op in UnaryOp}


@dataclass(frozen=True)
class Token:
    kind: str  # "ident", "op" or "end"
    value: str
    position: int


def tokenize(expression: str) -> List[Token]:
    """Split an expression into tokens.

    Raises:
        SelectorSyntaxError: On a character that starts no token
    """
    tokens: List[Token] = []
    pos = 0
    length = len(expression)
    while pos < length:
        if expression[pos].isspace():
            pos += 1
            continue
        match = TOKEN_PATTERN.match(expression, pos)
        if match is None:
            raise SelectorSyntaxError(
                expression, f"unexpected character '{expression[pos]}'", pos
            )
        kind = match.lastgroup
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        pos = match.end()
    tokens.append(Token("end", "", length))
    return tokens


class SelectorParser:
    """Parses one expression into an ``Expr`` tree."""

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0

    def parse(self) -> Expr:
        if self.tokens[0].kind == "end":
            raise SelectorSyntaxError(self.expression, "empty expression", 0)
        expr = self._parse_union()
        token = self._peek()
        if token.kind != "end":
            raise SelectorSyntaxError(
                self.expression, f"unexpected '{token.value}'", token.position
            )
        return expr

    # -- helpers -------------------------------------------------------

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _accept(self, *values: str) -> Optional[Token]:
        token = self._peek()
        if token.kind == "op" and token.value in values:
            return self._advance()
        return None

    # -- grammar -------------------------------------------------------

    def _parse_union(self) -> Expr:
        left = self._parse_intersection()
        while True:
            token = self._accept("+", "-")
            if token is None:
                return left
            left = Binary(BinaryOp(token.value), left, self._parse_intersection())

    def _parse_intersection(self) -> Expr:
        left = self._parse_product()
        while self._accept("&"):
            left = Binary(BinaryOp.INTERSECTION, left, self._parse_product())
        return left

    def _parse_product(self) -> Expr:
        left = self._parse_join()
        while self._accept("->"):
            left = Binary(BinaryOp.PRODUCT, left, self._parse_join())
        return left

    def _parse_join(self) -> Expr:
        left = self._parse_unary()
        while self._accept("."):
            left = Binary(BinaryOp.JOIN, left, self._parse_unary())
        return left

    def _parse_unary(self) -> Expr:
        token = self._accept(*UNARY_OPS)
        if token is not None:
            return Unary(UNARY_OPS[token.value], self._parse_unary())
        expr = self._parse_primary()
        while True:
            token = self._accept(*UNARY_OPS)
            if token is None:
                return expr
            expr = Unary(UNARY_OPS[token.value], expr)

    def _parse_primary(self) -> Expr:
        token = self._advance()
        if token.kind == "ident":
            return Identifier(token.value)
        if token.kind == "op" and token.value == "(":
            expr = self._parse_union()
            if self._accept(")") is None:
                closing = self._peek()
                raise SelectorSyntaxError(
                    self.expression, "expected ')'", closing.position
                )
            return expr
        if token.kind == "end":
            raise SelectorSyntaxError(
                self.expression, "unexpected end of expression", token.position
            )
        raise SelectorSyntaxError(
            self.expression, f"unexpected '{token.value}'", token.position
        )


def parse_selector(expression: str) -> Expr:
    """Parse a selector expression.

    Args:
        expression: Selector text, e.g. ``"left & (Node3 -> univ)"``

    Returns:
        Expression tree

    Raises:
        SelectorSyntaxError: If the text is not a well-formed expression
    """
    return SelectorParser(expression).parse()

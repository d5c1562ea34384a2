"""Selector evaluation errors."""

from typing import Optional


class SelectorError(ValueError):
    """Base class for selector failures."""


class SelectorSyntaxError(SelectorError):
    """Raised when a selector expression cannot be parsed."""

    def __init__(self, expression: str, message: str, position: Optional[int] = None):
        self.expression = expression
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Syntax error in selector '{expression}'{where}: {message}")


class EvaluationError(SelectorError):
    """Raised when a selector names an identifier the instance does not define."""

    def __init__(self, identifier: str, expression: Optional[str] = None):
        self.identifier = identifier
        self.expression = expression
        context = f" in selector '{expression}'" if expression else ""
        super().__init__(f"Unknown identifier '{identifier}'{context}")

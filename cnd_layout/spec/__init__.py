"""Layout spec parsing and generation."""

from cnd_layout.spec.errors import SpecError, SpecSyntaxError, SpecValidationError
from cnd_layout.spec.generator import generate_layout_spec
from cnd_layout.spec.parser import ParseResult, parse_layout_spec, validate_layout_spec

__all__ = [
    "ParseResult",
    "SpecError",
    "SpecSyntaxError",
    "SpecValidationError",
    "generate_layout_spec",
    "parse_layout_spec",
    "validate_layout_spec",
]

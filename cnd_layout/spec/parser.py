"""Parse layout spec text into typed entries.

Spec text is YAML with two optional top-level sequences::

    constraints:
      # keep the tree readable
      - orientation: {selector: left, directions: [below, left]}
      - group: {selector: "Person.owns", name: owned}

    directives:
      - atomColor: {selector: Person, value: "#ff0000"}
      - flag: hideDisconnectedBuiltIns

Each item is a single-key mapping naming the kind. A run of comment lines
directly above an item becomes that item's ``comment``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from cnd_layout.models.layout_spec import (
    CONSTRAINT_KINDS,
    DIRECTIVE_KINDS,
    DUAL_USE_KINDS,
    CyclicConstraint,
    LayoutSpec,
    SpecEntry,
    UnknownEntry,
    get_entry_type,
)
from cnd_layout.spec.errors import SpecError, SpecSyntaxError, SpecValidationError

logger = logging.getLogger(__name__)

SECTIONS = ("constraints", "directives")

SECTION_KINDS = {
    "constraints": set(CONSTRAINT_KINDS),
    "directives": set(DIRECTIVE_KINDS) | set(DUAL_USE_KINDS),
}

SECTION_LABELS = {"constraints": "constraint", "directives": "directive"}

_TOP_LEVEL_KEY = re.compile(r"^([A-Za-z_][\w-]*)\s*:")


@dataclass
class ParseResult:
    """Parsed spec plus non-fatal warnings."""

    spec: LayoutSpec
    warnings: List[str] = field(default_factory=list)


# =============================================================================
# Comment extraction
# =============================================================================


def extract_comments(text: str) -> Dict[str, Dict[int, str]]:
    """Map each section to ``{item index: comment}``.

    Consecutive comment lines directly above a list item are joined with a
    single space. A blank or content line breaks the run.
    """
    comments: Dict[str, Dict[int, str]] = {s: {} for s in SECTIONS}
    section: Optional[str] = None
    item_indent: Optional[int] = None
    index = -1
    pending: List[str] = []

    for line in text.splitlines():
        stripped = line.strip()
        indent = len(line) - len(line.lstrip())

        if indent == 0 and stripped and not stripped.startswith(("#", "-")):
            match = _TOP_LEVEL_KEY.match(stripped)
            section = match.group(1) if match and match.group(1) in SECTIONS else None
            item_indent = None
            index = -1
            pending = []
            continue

        if section is None:
            continue
        if not stripped:
            pending = []
            continue
        if stripped.startswith("#"):
            pending.append(stripped.lstrip("#").strip())
            continue
        if stripped.startswith("-") and (item_indent is None or indent == item_indent):
            item_indent = indent
            index += 1
            text_parts = [p for p in pending if p]
            if text_parts:
                comments[section][index] = " ".join(text_parts)
        pending = []

    return comments


# =============================================================================
# Entry construction
# =============================================================================


def _format_validation_error(error: ValidationError) -> List[str]:
    problems = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        problems.append(f"{loc}: {msg}" if loc else msg)
    return problems


def _resolve_kind(key: str, value: Any) -> str:
    if key == "group":
        if isinstance(value, dict) and "field" in value:
            return "groupfield"
        return "groupselector"
    if key == "groupby":
        return "groupselector"
    return key


def _build_entry(
    section: str,
    item: Any,
    number: int,
    comment: Optional[str],
    warnings: List[str],
) -> SpecEntry:
    if not isinstance(item, dict) or len(item) != 1:
        raise SpecSyntaxError(
            f"each item under '{section}' must be a single-key mapping naming its kind, "
            f"got {item!r}"
        )

    key, value = next(iter(item.items()))
    key = str(key)
    kind = _resolve_kind(key, value)
    entry_id = f"{kind}-{number}"

    if kind not in SECTION_KINDS[section]:
        label = SECTION_LABELS[section]
        message = f"Unknown {label} kind '{key}' was kept but will be ignored"
        logger.warning(message)
        warnings.append(message)
        return UnknownEntry(id=entry_id, kind=key, raw_params=value, comment=comment)

    if kind == "flag" and not isinstance(value, dict):
        params: Dict[str, Any] = {"flag": value}
    elif value is None:
        params = {}
    elif isinstance(value, dict):
        params = {str(k): v for k, v in value.items()}
    else:
        raise SpecValidationError(
            kind, [f"parameters must be a mapping, got {value!r}"], section
        )

    entry_type = get_entry_type(kind)
    known = set(entry_type.param_names())
    for name in params:
        if name not in known:
            message = f"Ignoring unknown parameter '{name}' on {kind} entry"
            logger.warning(message)
            warnings.append(message)

    try:
        return entry_type.model_validate({**params, "id": entry_id, "comment": comment})
    except ValidationError as e:
        raise SpecValidationError(kind, _format_validation_error(e), section) from e


def _section_items(data: Dict[str, Any], section: str) -> List[Any]:
    raw = data.get(section)
    if raw is None:
        return []
    if isinstance(raw, dict):
        # Mapping form: one item per key
        return [{k: v} for k, v in raw.items()]
    if not isinstance(raw, list):
        raise SpecSyntaxError(f"'{section}' must be a list of entries, got {type(raw).__name__}")
    return raw


def _dedupe(entries: List[SpecEntry]) -> List[SpecEntry]:
    seen = set()
    unique = []
    for entry in entries:
        key = (entry.kind, yaml.safe_dump(entry.params, sort_keys=True))
        if key in seen:
            logger.debug(f"Dropping duplicate {entry.kind} entry {entry.id}")
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def _check_cyclic_conflicts(entries: List[SpecEntry]) -> None:
    directions: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, CyclicConstraint):
            continue
        previous = directions.setdefault(entry.selector, entry.direction)
        if previous != entry.direction:
            raise SpecValidationError(
                "cyclic",
                [
                    f"selector '{entry.selector}' is both {previous} "
                    f"and {entry.direction}"
                ],
                "constraints",
            )


# =============================================================================
# Public API
# =============================================================================


def parse_layout_spec(text: Optional[str]) -> ParseResult:
    """Parse spec text into a LayoutSpec.

    ``size`` and ``hideAtom`` entries written under ``directives`` are moved
    to the end of ``constraints``.

    Args:
        text: YAML spec text (empty or None gives an empty spec)

    Returns:
        ParseResult with the spec and any warnings

    Raises:
        SpecSyntaxError: If the text is not valid YAML or not shaped as a spec
        SpecValidationError: If a known entry has invalid parameters
    """
    if text is None or not text.strip():
        return ParseResult(spec=LayoutSpec())

    try:
        data = yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        line = mark.line + 1 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        raise SpecSyntaxError(e.problem or str(e), line, column) from e
    except yaml.YAMLError as e:
        raise SpecSyntaxError(str(e)) from e

    if data is None:
        return ParseResult(spec=LayoutSpec())
    if not isinstance(data, dict):
        raise SpecSyntaxError(
            f"spec must be a mapping with 'constraints' and/or 'directives', "
            f"got {type(data).__name__}"
        )

    warnings: List[str] = []
    for key in data:
        if key not in SECTIONS:
            message = f"Unknown top-level key '{key}' was ignored"
            logger.warning(message)
            warnings.append(message)

    comments = extract_comments(text)
    counter = 0
    sections: Dict[str, List[SpecEntry]] = {}
    for section in SECTIONS:
        items = _section_items(data, section)
        # Comment positions are only meaningful for sequence sections
        section_comments = comments[section] if isinstance(data.get(section), list) else {}
        entries = []
        for index, item in enumerate(items):
            counter += 1
            entry = _build_entry(
                section,
                item,
                counter,
                section_comments.get(index),
                warnings,
            )
            entries.append(entry)
        sections[section] = entries

    constraints = sections["constraints"]
    directives: List[SpecEntry] = []
    for entry in sections["directives"]:
        if entry.kind in DUAL_USE_KINDS:
            constraints.append(entry)
        else:
            directives.append(entry)

    constraints = _dedupe(constraints)
    directives = _dedupe(directives)
    _check_cyclic_conflicts(constraints)

    spec = LayoutSpec(constraints=constraints, directives=directives)
    logger.debug(
        f"Parsed spec with {len(spec.constraints)} constraints, "
        f"{len(spec.directives)} directives, {len(warnings)} warnings"
    )
    return ParseResult(spec=spec, warnings=warnings)


def validate_layout_spec(text: Optional[str]) -> Dict[str, Any]:
    """Check spec text without raising.

    Returns:
        ``{"is_valid": bool, "error": str | None, "warnings": [...]}``
    """
    try:
        result = parse_layout_spec(text)
    except SpecError as e:
        return {"is_valid": False, "error": str(e), "warnings": []}
    return {"is_valid": True, "error": None, "warnings": result.warnings}


__all__ = [
    "ParseResult",
    "extract_comments",
    "parse_layout_spec",
    "validate_layout_spec",
]

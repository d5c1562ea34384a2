"""Render a LayoutSpec back to spec text.

Output is stable: ``constraints:`` first, then a blank line and
``directives:``, each entry on one line in YAML flow style with its comment
on the line above.
"""

import logging
from typing import Any, List

import yaml

from cnd_layout.models.layout_spec import FlagDirective, LayoutSpec, SpecEntry, UnknownEntry

logger = logging.getLogger(__name__)

INDENT = "  "


def _flow(value: Any) -> str:
    return yaml.safe_dump(
        value, default_flow_style=True, sort_keys=False, width=float("inf")
    ).strip()


def render_entry(entry: SpecEntry) -> str:
    """Single ``key: params`` line for an entry, without list marker."""
    if isinstance(entry, FlagDirective):
        return f"flag: {entry.flag}"
    if isinstance(entry, UnknownEntry):
        mapping = {entry.kind: entry.raw_params}
    else:
        mapping = {entry.yaml_key: entry.params}
    # Strip the braces of the single-key outer mapping
    return _flow(mapping)[1:-1]


def _render_section(name: str, entries: List[SpecEntry]) -> List[str]:
    lines = [f"{name}:"]
    for entry in entries:
        if entry.comment:
            for comment_line in entry.comment.splitlines():
                lines.append(f"{INDENT}# {comment_line}".rstrip())
        lines.append(f"{INDENT}- {render_entry(entry)}")
    return lines


def generate_layout_spec(spec: LayoutSpec) -> str:
    """Generate spec text that parses back to an equivalent spec.

    Args:
        spec: Parsed or hand-built LayoutSpec

    Returns:
        YAML spec text, empty for an empty spec
    """
    blocks = []
    if spec.constraints:
        blocks.append("\n".join(_render_section("constraints", spec.constraints)))
    if spec.directives:
        blocks.append("\n".join(_render_section("directives", spec.directives)))
    if not blocks:
        return ""
    text = "\n\n".join(blocks) + "\n"
    logger.debug(f"Generated spec text with {len(spec.entries())} entries")
    return text

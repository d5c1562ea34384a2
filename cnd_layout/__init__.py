"""Selector-driven layout engine.

Turns a relational data instance (atoms and named tuples) into a node/edge
diagram description according to a declarative YAML layout spec.

Example:
    from cnd_layout import DataInstance, build_layout

    response = build_layout(spec_text, DataInstance.from_dict(data))
    if response["ok"]:
        layout = response["data"]["layout"]
"""

from cnd_layout.evaluator import SelectorEvaluator, evaluate
from cnd_layout.layout import LayoutGenerator, generate_layout
from cnd_layout.models import DataInstance, LayoutResult, LayoutSpec
from cnd_layout.pipeline import build_layout, check_spec
from cnd_layout.spec import generate_layout_spec, parse_layout_spec
from cnd_layout.temporal import resolve_temporal_policy

__version__ = "0.1.0"

__all__ = [
    "DataInstance",
    "LayoutGenerator",
    "LayoutResult",
    "LayoutSpec",
    "SelectorEvaluator",
    "build_layout",
    "check_spec",
    "evaluate",
    "generate_layout",
    "generate_layout_spec",
    "parse_layout_spec",
    "resolve_temporal_policy",
]

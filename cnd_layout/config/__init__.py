"""Configuration for the layout engine."""

from cnd_layout.config.settings import (
    DEFAULT_EDGE_COLOR,
    DEFAULT_NODE_COLOR,
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    FEATURE_FLAGS,
    MIN_SEPARATION,
    AlignmentEdgeStrategy,
    get_alignment_edge_strategy,
    get_all_flags,
    is_enabled,
    set_flag,
)

__all__ = [
    "DEFAULT_EDGE_COLOR",
    "DEFAULT_NODE_COLOR",
    "DEFAULT_NODE_HEIGHT",
    "DEFAULT_NODE_WIDTH",
    "FEATURE_FLAGS",
    "MIN_SEPARATION",
    "AlignmentEdgeStrategy",
    "get_alignment_edge_strategy",
    "get_all_flags",
    "is_enabled",
    "set_flag",
]

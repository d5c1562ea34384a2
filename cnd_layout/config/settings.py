"""
Engine Settings and Feature Flags

Flags are read once from environment variables at import time so a deployment
can switch behavior without code changes. Everything else in this module is a
plain constant shared by the layout generator and the routing helpers.

Usage:
    from cnd_layout.config.settings import is_enabled

    if is_enabled('strict_selector_errors'):
        # abort the whole layout call on the first bad selector
        ...

Environment Variables:
    CND_STRICT=true/false                    - Abort layout on selector errors
    CND_PRUNE_ALIGNMENT_EDGES=true/false     - Drop redundant helper edges
    CND_ALIGNMENT_EDGE_STRATEGY=never|direct|connected
"""

import os
from enum import Enum
from typing import Dict


# Node sizing used when no size constraint matches an atom
DEFAULT_NODE_WIDTH = 100
DEFAULT_NODE_HEIGHT = 60

# Minimum separation between nodes in left/top constraints
MIN_SEPARATION = 15

DEFAULT_EDGE_COLOR = "black"
DEFAULT_NODE_COLOR = "black"

# Edge routing
TOUCH_EPSILON = 5.0
ROUTE_OFFSET = 20.0


# Feature flags with environment variable overrides
FEATURE_FLAGS: Dict[str, bool] = {
    # Selector failures abort generate_layout instead of skipping the entry
    'strict_selector_errors': os.getenv('CND_STRICT', 'false').lower() == 'true',

    # Remove helper alignment edges whose endpoints are already connected
    'prune_alignment_edges': os.getenv('CND_PRUNE_ALIGNMENT_EDGES', 'true').lower() == 'true',
}


class AlignmentEdgeStrategy(str, Enum):
    """How hidden helper edges are added between aligned nodes.

    The external solver only pulls connected nodes together, so aligned
    nodes without a path between them can drift apart.
    """
    NEVER = "never"
    DIRECT = "direct"
    CONNECTED = "connected"


def get_alignment_edge_strategy() -> AlignmentEdgeStrategy:
    """Read the alignment edge strategy from the environment.

    Returns:
        Configured strategy, CONNECTED when unset

    Raises:
        ValueError: If the variable holds an unknown strategy name
    """
    raw = os.getenv('CND_ALIGNMENT_EDGE_STRATEGY', AlignmentEdgeStrategy.CONNECTED.value)
    try:
        return AlignmentEdgeStrategy(raw.lower())
    except ValueError:
        available = ', '.join(s.value for s in AlignmentEdgeStrategy)
        raise ValueError(
            f"Unknown alignment edge strategy: '{raw}'. "
            f"Available strategies: {available}"
        )


def is_enabled(flag: str) -> bool:
    """
    Check if a feature flag is enabled.

    Args:
        flag: Feature flag name (e.g., 'strict_selector_errors')

    Returns:
        True if flag is enabled, False otherwise

    Raises:
        KeyError: If flag name is not recognized
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    return FEATURE_FLAGS[flag]


def get_all_flags() -> Dict[str, bool]:
    """Get all feature flags and their current state."""
    return FEATURE_FLAGS.copy()


def set_flag(flag: str, enabled: bool) -> None:
    """
    Programmatically set a feature flag (for testing only).

    Args:
        flag: Feature flag name
        enabled: True to enable, False to disable

    Raises:
        KeyError: If flag name is not recognized
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    FEATURE_FLAGS[flag] = enabled

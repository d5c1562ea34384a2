"""Temporal policies registry.

Available policies:
- baseline: previous positions, else default seeds
- transport_pan_zoom: previous positions rescaled onto the new seeds
- change_emphasis: stable survivors, jittered changed nodes
"""

from typing import Any, Dict, Optional

from cnd_layout.temporal.base import (
    HintResult,
    Position,
    PositionHint,
    TemporalPolicy,
    TransformInfo,
    UnknownPolicyError,
    Viewport,
)
from cnd_layout.temporal.policies import (
    BaselinePolicy,
    ChangeEmphasisPolicy,
    TransportPanZoomPolicy,
)

# Policy registry
POLICIES = {
    "baseline": BaselinePolicy,
    "transport_pan_zoom": TransportPanZoomPolicy,
    "change_emphasis": ChangeEmphasisPolicy,
}


def resolve_temporal_policy(
    name: str = "baseline",
    options: Optional[Dict[str, Any]] = None,
) -> TemporalPolicy:
    """Get a configured temporal policy by name.

    Args:
        name: Policy name ('baseline', 'transport_pan_zoom', 'change_emphasis')
        options: Policy options, e.g. {"changed_ids": [...]}

    Returns:
        TemporalPolicy instance

    Raises:
        UnknownPolicyError: If policy not found
    """
    if name not in POLICIES:
        raise UnknownPolicyError(name, list(POLICIES.keys()))
    return POLICIES[name](options)


__all__ = [
    "BaselinePolicy",
    "ChangeEmphasisPolicy",
    "HintResult",
    "POLICIES",
    "Position",
    "PositionHint",
    "TemporalPolicy",
    "TransformInfo",
    "TransportPanZoomPolicy",
    "UnknownPolicyError",
    "Viewport",
    "resolve_temporal_policy",
]

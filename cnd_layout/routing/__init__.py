"""Edge routing around touching and blocking nodes."""

from cnd_layout.routing.geometry import (
    BlockingNode,
    EdgeEndpoints,
    NodeBox,
    PerpendicularRoute,
    Point,
    Rect,
    choose_boundary_point,
    compute_perpendicular_route,
    compute_route_around_blocking_nodes,
    find_blocking_nodes,
    get_near_touch_perpendicular_route,
    get_touch_direction,
    line_intersects_rect,
)

__all__ = [
    "BlockingNode",
    "EdgeEndpoints",
    "NodeBox",
    "PerpendicularRoute",
    "Point",
    "Rect",
    "choose_boundary_point",
    "compute_perpendicular_route",
    "compute_route_around_blocking_nodes",
    "find_blocking_nodes",
    "get_near_touch_perpendicular_route",
    "get_touch_direction",
    "line_intersects_rect",
]

"""Edge routing geometry for already-positioned nodes.

The constraint solver returns node centers and sizes. Straight edges between
them are fine except in two cases:

- Touching nodes: two rectangles separated by a gap no larger than
  ``epsilon`` on one axis while overlapping on the other. A straight edge
  would run flush along the shared boundary, so it detours around the pair
  on the perpendicular axis.
- Blocked edges: other nodes sit on the straight segment between the
  endpoint centers. The edge detours around all of them at once.

Every function is pure: it reads only its arguments.

Coordinates: y grows downward. ``Rect`` is anchored at its top-left corner,
``NodeBox`` at its center.
"""

import logging
import math
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from cnd_layout.config.settings import ROUTE_OFFSET, TOUCH_EPSILON

logger = logging.getLogger(__name__)

TouchDirection = Literal["horizontal", "vertical", "none"]

# Tie-break order for boundary point candidates
FACE_ORDER = ("top", "left", "bottom", "right")


class Point(BaseModel):
    """A 2D point."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Rect(BaseModel):
    """Axis-aligned rectangle anchored at its top-left corner.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent
        height: Vertical extent
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Left edge")
    y: float = Field(..., description="Top edge")
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def face_midpoint(self, face: str) -> Point:
        center = self.center
        if face == "top":
            return Point(x=center.x, y=self.top)
        if face == "bottom":
            return Point(x=center.x, y=self.bottom)
        if face == "left":
            return Point(x=self.left, y=center.y)
        if face == "right":
            return Point(x=self.right, y=center.y)
        raise ValueError(f"Unknown face: {face}. Available: {list(FACE_ORDER)}")


class NodeBox(BaseModel):
    """A positioned node as reported by the solver (center coordinates)."""

    model_config = ConfigDict(frozen=True)

    id: str
    x: float = Field(..., description="Center x")
    y: float = Field(..., description="Center y")
    width: float
    height: float

    @property
    def bounds(self) -> Rect:
        return Rect(
            x=self.x - self.width / 2,
            y=self.y - self.height / 2,
            width=self.width,
            height=self.height,
        )

    @property
    def center(self) -> Point:
        return Point(x=self.x, y=self.y)


class EdgeEndpoints(BaseModel):
    """Source and target boxes of one edge."""

    model_config = ConfigDict(frozen=True)

    source: NodeBox
    target: NodeBox


class BlockingNode(BaseModel):
    """A node on the straight path of an edge."""

    model_config = ConfigDict(frozen=True)

    node: NodeBox
    bounds: Rect
    distance: float = Field(..., description="Center distance from the edge source")


class PerpendicularRoute(BaseModel):
    """Endpoints on node boundaries plus the bends between them."""

    model_config = ConfigDict(frozen=True)

    source_point: Point
    target_point: Point
    middle_points: List[Point] = Field(default_factory=list)

    def points(self) -> List[Point]:
        return [self.source_point, *self.middle_points, self.target_point]


# =============================================================================
# Primitives
# =============================================================================


def line_intersects_rect(p1: Point, p2: Point, rect: Rect) -> bool:
    """Whether segment p1-p2 touches or crosses ``rect``.

    Liang-Barsky clipping: the segment is parameterized as p1 + t(p2 - p1),
    t in [0, 1], and clipped against each of the four half-planes.

    Args:
        p1: Segment start
        p2: Segment end
        rect: Rectangle to test

    Returns:
        True if any point of the segment lies in the closed rectangle
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    t_enter, t_exit = 0.0, 1.0
    for p, q in (
        (-dx, p1.x - rect.left),
        (dx, rect.right - p1.x),
        (-dy, p1.y - rect.top),
        (dy, rect.bottom - p1.y),
    ):
        if p == 0:
            if q < 0:
                return False
            continue
        t = q / p
        if p < 0:
            t_enter = max(t_enter, t)
        else:
            t_exit = min(t_exit, t)
        if t_enter > t_exit:
            return False
    return True


def _crossed_face(bounds: Rect, dx: float, dy: float) -> Optional[str]:
    """Face through which a ray from the center in direction (dx, dy) leaves."""
    if dx == 0 and dy == 0:
        return None
    if abs(dx) * bounds.height >= abs(dy) * bounds.width:
        return "right" if dx > 0 else "left"
    return "bottom" if dy > 0 else "top"


def choose_boundary_point(center_x: float, center_y: float, bounds: Rect, other: Point) -> Point:
    """Pick the face midpoint where an edge toward ``other`` should attach.

    The face crossed by the ray from the center toward ``other`` is the one
    hidden against the other node, so it is excluded. Of the remaining face
    midpoints the one nearest ``other`` wins; equal distances are broken by
    the order top, left, bottom, right.

    Args:
        center_x: Center x of the node
        center_y: Center y of the node
        bounds: Node rectangle
        other: Center of the node at the other end of the edge

    Returns:
        Midpoint of the chosen face
    """
    hidden = _crossed_face(bounds, other.x - center_x, other.y - center_y)
    candidates = []
    for order, face in enumerate(FACE_ORDER):
        if face == hidden:
            continue
        point = bounds.face_midpoint(face)
        distance = math.hypot(point.x - other.x, point.y - other.y)
        candidates.append((round(distance, 9), order, point))
    return min(candidates, key=lambda c: (c[0], c[1]))[2]


def get_touch_direction(a: Rect, b: Rect, epsilon: float = TOUCH_EPSILON) -> TouchDirection:
    """Classify two rectangles as touching side by side, stacked, or neither.

    Args:
        a: First rectangle
        b: Second rectangle
        epsilon: Largest gap still treated as touching

    Returns:
        ``horizontal`` when side by side, ``vertical`` when stacked,
        ``none`` otherwise
    """
    horizontal_gap = max(b.left - a.right, a.left - b.right)
    vertical_gap = max(b.top - a.bottom, a.top - b.bottom)
    horizontal_overlap = min(a.right, b.right) - max(a.left, b.left)
    vertical_overlap = min(a.bottom, b.bottom) - max(a.top, b.top)

    if abs(horizontal_gap) <= epsilon and vertical_overlap > 0:
        return "horizontal"
    if abs(vertical_gap) <= epsilon and horizontal_overlap > 0:
        return "vertical"
    return "none"


def compute_perpendicular_route(
    source: Rect,
    target: Rect,
    direction: TouchDirection,
    offset: float = ROUTE_OFFSET,
) -> PerpendicularRoute:
    """Route between touching rectangles around the outside of the pair.

    Side-by-side pairs are connected over the top (or bottom) faces, stacked
    pairs over the left (or right) faces; the bend sits ``offset`` beyond the
    outermost face so no segment runs along the shared boundary.

    Args:
        source: Source rectangle
        target: Target rectangle
        direction: Result of ``get_touch_direction``
        offset: Distance of the detour from the pair

    Returns:
        PerpendicularRoute with two middle points
    """
    source_center, target_center = source.center, target.center
    source_point = choose_boundary_point(source_center.x, source_center.y, source, target_center)
    target_point = choose_boundary_point(target_center.x, target_center.y, target, source_center)

    if direction == "horizontal":
        if source_point.y <= source_center.y:
            y = min(source.top, target.top) - offset
        else:
            y = max(source.bottom, target.bottom) + offset
        middle = [Point(x=source_point.x, y=y), Point(x=target_point.x, y=y)]
    else:
        if source_point.x <= source_center.x:
            x = min(source.left, target.left) - offset
        else:
            x = max(source.right, target.right) + offset
        middle = [Point(x=x, y=source_point.y), Point(x=x, y=target_point.y)]

    return PerpendicularRoute(
        source_point=source_point, target_point=target_point, middle_points=middle
    )


def find_blocking_nodes(
    source: NodeBox,
    target: NodeBox,
    source_id: str,
    target_id: str,
    nodes: Iterable[NodeBox],
) -> List[BlockingNode]:
    """Nodes whose rectangles the straight source-target segment crosses.

    Args:
        source: Edge source box
        target: Edge target box
        source_id: Id excluded as the source
        target_id: Id excluded as the target
        nodes: Every positioned node

    Returns:
        Blocking nodes nearest the source first; ties broken by id
    """
    start, end = source.center, target.center
    blocking = []
    for node in nodes:
        if node.id in (source_id, target_id):
            continue
        bounds = node.bounds
        if bounds.is_degenerate:
            continue
        if line_intersects_rect(start, end, bounds):
            blocking.append(BlockingNode(
                node=node,
                bounds=bounds,
                distance=math.hypot(node.x - start.x, node.y - start.y),
            ))
    blocking.sort(key=lambda b: (b.distance, b.node.id))
    return blocking


def compute_route_around_blocking_nodes(
    source: Rect,
    target: Rect,
    blocking: List[BlockingNode],
    padding: float = ROUTE_OFFSET,
) -> PerpendicularRoute:
    """Detour around the union of all blocking rectangles.

    Vertically arranged edges detour to the left or right, horizontally
    arranged ones above or below. The side with the shorter detour wins;
    left and top win ties.

    Args:
        source: Source rectangle
        target: Target rectangle
        blocking: Output of ``find_blocking_nodes``
        padding: Clearance beyond the outermost rectangle

    Returns:
        PerpendicularRoute with two middle points
    """
    rects = [source, target] + [b.bounds for b in blocking]
    source_center, target_center = source.center, target.center
    vertical = abs(target_center.y - source_center.y) >= abs(target_center.x - source_center.x)

    if vertical:
        left_x = min(r.left for r in rects) - padding
        right_x = max(r.right for r in rects) + padding
        left_cost = (source_center.x - left_x) + (target_center.x - left_x)
        right_cost = (right_x - source_center.x) + (right_x - target_center.x)
        if left_cost <= right_cost:
            x, source_x, target_x = left_x, source.left, target.left
        else:
            x, source_x, target_x = right_x, source.right, target.right
        return PerpendicularRoute(
            source_point=Point(x=source_x, y=source_center.y),
            target_point=Point(x=target_x, y=target_center.y),
            middle_points=[Point(x=x, y=source_center.y), Point(x=x, y=target_center.y)],
        )

    top_y = min(r.top for r in rects) - padding
    bottom_y = max(r.bottom for r in rects) + padding
    top_cost = (source_center.y - top_y) + (target_center.y - top_y)
    bottom_cost = (bottom_y - source_center.y) + (bottom_y - target_center.y)
    if top_cost <= bottom_cost:
        y, source_y, target_y = top_y, source.top, target.top
    else:
        y, source_y, target_y = bottom_y, source.bottom, target.bottom
    return PerpendicularRoute(
        source_point=Point(x=source_center.x, y=source_y),
        target_point=Point(x=target_center.x, y=target_y),
        middle_points=[Point(x=source_center.x, y=y), Point(x=target_center.x, y=y)],
    )


def _overlaps(a: Rect, b: Rect) -> bool:
    return (
        min(a.right, b.right) > max(a.left, b.left)
        and min(a.bottom, b.bottom) > max(a.top, b.top)
    )


def get_near_touch_perpendicular_route(
    edge: EdgeEndpoints,
    nodes: Iterable[NodeBox],
    epsilon: float = TOUCH_EPSILON,
) -> Optional[List[Point]]:
    """Route one edge, or None when a straight line is acceptable.

    Touching endpoints take a perpendicular detour; otherwise blocking nodes
    on the straight path are routed around. Zero-size or overlapping
    endpoint boxes fall back to a straight line.

    Args:
        edge: Source and target boxes
        nodes: Every positioned node (endpoints included)
        epsilon: Touch tolerance

    Returns:
        Ordered route points, or None for a straight line
    """
    source_bounds = edge.source.bounds
    target_bounds = edge.target.bounds
    if source_bounds.is_degenerate or target_bounds.is_degenerate:
        logger.debug(f"Degenerate bounds on edge {edge.source.id}->{edge.target.id}")
        return None
    if _overlaps(source_bounds, target_bounds):
        logger.debug(f"Overlapping endpoints on edge {edge.source.id}->{edge.target.id}")
        return None

    direction = get_touch_direction(source_bounds, target_bounds, epsilon)
    if direction != "none":
        return compute_perpendicular_route(source_bounds, target_bounds, direction).points()

    blocking = find_blocking_nodes(
        edge.source, edge.target, edge.source.id, edge.target.id, nodes
    )
    if not blocking:
        return None
    return compute_route_around_blocking_nodes(source_bounds, target_bounds, blocking).points()

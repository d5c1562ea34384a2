"""Tests for edge routing around touching and blocking nodes.

Tests cover:
- Touch classification
- Perpendicular routes between touching rectangles
- Segment/rectangle intersection
- Blocking node detection and detours
- The combined routing entry point
"""

import pytest

from cnd_layout.routing import (
    BlockingNode,
    EdgeEndpoints,
    NodeBox,
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


def box(node_id, x, y, width=50, height=30):
    return NodeBox(id=node_id, x=x, y=y, width=width, height=height)


def coords(points):
    return [(p.x, p.y) for p in points]


# =============================================================================
# Touch Detection
# =============================================================================


class TestTouchDirection:
    """Test classification of rectangle pairs."""

    def test_horizontal_touch(self):
        a = Rect(x=0, y=0, width=50, height=30)
        b = Rect(x=52, y=5, width=50, height=30)
        assert get_touch_direction(a, b, 5) == "horizontal"

    def test_vertical_touch(self):
        a = Rect(x=10, y=0, width=50, height=30)
        b = Rect(x=15, y=33, width=50, height=30)
        assert get_touch_direction(a, b, 5) == "vertical"

    def test_far_apart(self):
        a = Rect(x=0, y=0, width=50, height=30)
        b = Rect(x=100, y=100, width=50, height=30)
        assert get_touch_direction(a, b, 5) == "none"

    def test_gap_beyond_epsilon(self):
        a = Rect(x=0, y=0, width=50, height=30)
        b = Rect(x=60, y=0, width=50, height=30)
        assert get_touch_direction(a, b, 5) == "none"

    def test_diagonal_neighbors_do_not_touch(self):
        """A small gap on one axis without overlap on the other is not a touch."""
        a = Rect(x=0, y=0, width=50, height=30)
        b = Rect(x=52, y=40, width=50, height=30)
        assert get_touch_direction(a, b, 5) == "none"


# =============================================================================
# Perpendicular Routes
# =============================================================================


class TestPerpendicularRoute:
    """Test routes between touching rectangles."""

    def test_side_by_side_routes_over_top(self):
        source = Rect(x=0, y=0, width=50, height=30)
        target = Rect(x=52, y=0, width=50, height=30)
        route = compute_perpendicular_route(source, target, "horizontal")
        assert (route.source_point.x, route.source_point.y) == (25, 0)
        assert (route.target_point.x, route.target_point.y) == (77, 0)
        assert coords(route.middle_points) == [(25, -20), (77, -20)]

    def test_stacked_routes_along_left(self):
        source = Rect(x=0, y=0, width=50, height=30)
        target = Rect(x=0, y=33, width=50, height=30)
        route = compute_perpendicular_route(source, target, "vertical")
        assert route.source_point.x == 0
        assert route.target_point.x == 0
        assert coords(route.middle_points) == [(-20, 15), (-20, 48)]

    def test_custom_offset(self):
        source = Rect(x=0, y=0, width=50, height=30)
        target = Rect(x=52, y=0, width=50, height=30)
        route = compute_perpendicular_route(source, target, "horizontal", offset=5)
        assert route.middle_points[0].y == -5

    def test_points_in_order(self):
        source = Rect(x=0, y=0, width=50, height=30)
        target = Rect(x=52, y=0, width=50, height=30)
        route = compute_perpendicular_route(source, target, "horizontal")
        assert coords(route.points()) == [(25, 0), (25, -20), (77, -20), (77, 0)]


class TestBoundaryPoint:
    """Test face selection for edge attachment."""

    def test_crossed_face_excluded(self):
        """The face pointing at the other node is never chosen."""
        bounds = Rect(x=0, y=0, width=50, height=30)
        point = choose_boundary_point(25, 15, bounds, Point(x=200, y=15))
        assert (point.x, point.y) == (25, 0)

    def test_nearest_face_wins(self):
        bounds = Rect(x=0, y=0, width=50, height=30)
        point = choose_boundary_point(25, 15, bounds, Point(x=200, y=25))
        assert (point.x, point.y) == (25, 30)

    def test_unknown_face(self):
        with pytest.raises(ValueError, match="Unknown face: middle"):
            Rect(x=0, y=0, width=1, height=1).face_midpoint("middle")


# =============================================================================
# Blocking Nodes
# =============================================================================


class TestLineIntersectsRect:
    """Test segment clipping."""

    RECT = Rect(x=40, y=40, width=20, height=20)

    def test_horizontal_line_through(self):
        assert line_intersects_rect(Point(x=0, y=50), Point(x=100, y=50), self.RECT)

    def test_line_misses(self):
        assert not line_intersects_rect(Point(x=0, y=0), Point(x=100, y=0), self.RECT)

    def test_vertical_line_through(self):
        assert line_intersects_rect(Point(x=50, y=0), Point(x=50, y=100), self.RECT)

    def test_segment_stops_short(self):
        assert not line_intersects_rect(Point(x=0, y=50), Point(x=30, y=50), self.RECT)


class TestFindBlockingNodes:
    """Test detection of nodes on the straight path."""

    def test_single_blocker(self):
        a, b, c = box("A", 50, 15), box("B", 50, 65), box("C", 50, 115)
        blocking = find_blocking_nodes(a, c, "A", "C", [a, b, c])
        assert [bl.node.id for bl in blocking] == ["B"]

    def test_no_blocker(self):
        a, b, c = box("A", 25, 50), box("B", 125, 50), box("C", 75, 150)
        assert find_blocking_nodes(a, b, "A", "B", [a, b, c]) == []

    def test_sorted_by_distance(self):
        a, b, c, d = box("A", 50, 15), box("B", 50, 65), box("C", 50, 115), box("D", 50, 165)
        blocking = find_blocking_nodes(a, d, "A", "D", [d, c, b, a])
        assert [bl.node.id for bl in blocking] == ["B", "C"]
        assert blocking[0].distance == 50

    def test_zero_size_nodes_ignored(self):
        a, c = box("A", 50, 15), box("C", 50, 115)
        empty = box("E", 50, 65, width=0, height=0)
        assert find_blocking_nodes(a, c, "A", "C", [a, empty, c]) == []


class TestRouteAroundBlockingNodes:
    """Test detours around blockers."""

    def test_vertical_detour_left(self):
        source = Rect(x=25, y=0, width=50, height=30)
        target = Rect(x=25, y=100, width=50, height=30)
        blocker = Rect(x=25, y=50, width=50, height=30)
        route = compute_route_around_blocking_nodes(
            source, target, [BlockingNode(node=box("B", 50, 65), bounds=blocker, distance=50)]
        )
        assert coords(route.points()) == [(25, 15), (5, 15), (5, 115), (25, 115)]

    def test_horizontal_detour_top(self):
        source = Rect(x=0, y=25, width=50, height=30)
        target = Rect(x=150, y=25, width=50, height=30)
        blocker = Rect(x=75, y=25, width=50, height=30)
        route = compute_route_around_blocking_nodes(
            source, target, [BlockingNode(node=box("B", 100, 40), bounds=blocker, distance=75)]
        )
        assert (route.source_point.x, route.source_point.y) == (25, 25)
        assert coords(route.middle_points) == [(25, 5), (175, 5)]

    def test_shorter_side_wins(self):
        """A blocker sticking out to the left pushes the detour right."""
        source = Rect(x=25, y=0, width=50, height=30)
        target = Rect(x=25, y=100, width=50, height=30)
        blocker = Rect(x=-100, y=50, width=150, height=30)
        route = compute_route_around_blocking_nodes(
            source, target, [BlockingNode(node=box("B", -25, 65, 150), bounds=blocker, distance=50)]
        )
        assert route.middle_points[0].x == 95
        assert route.source_point.x == 75


# =============================================================================
# Combined Routing
# =============================================================================


class TestNearTouchRoute:
    """Test the routing entry point."""

    def test_straight_when_clear(self):
        a, c = box("A", 25, 15), box("C", 200, 200)
        assert get_near_touch_perpendicular_route(EdgeEndpoints(source=a, target=c), [a, c]) is None

    def test_detour_around_blocker(self):
        a, b, c = box("A", 50, 15), box("B", 50, 65), box("C", 50, 115)
        route = get_near_touch_perpendicular_route(EdgeEndpoints(source=a, target=c), [a, b, c])
        assert coords(route) == [(25, 15), (5, 15), (5, 115), (25, 115)]

    def test_touching_nodes(self):
        a, b = box("A", 25, 15), box("B", 77, 15)
        route = get_near_touch_perpendicular_route(EdgeEndpoints(source=a, target=b), [a, b])
        assert coords(route) == [(25, 0), (25, -20), (77, -20), (77, 0)]

    def test_overlapping_endpoints(self):
        a, b = box("A", 25, 15), box("B", 30, 15)
        assert get_near_touch_perpendicular_route(EdgeEndpoints(source=a, target=b), [a, b]) is None

    def test_degenerate_endpoint(self):
        a, b = box("A", 25, 15, width=0), box("B", 200, 15)
        assert get_near_touch_perpendicular_route(EdgeEndpoints(source=a, target=b), [a, b]) is None

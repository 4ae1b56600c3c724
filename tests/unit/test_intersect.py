"""Unit tests for intersection queries."""

import math

import pytest

from spatium.core.bounds import Box, Sphere
from spatium.core.plane import Plane
from spatium.core.vector import Vector3, ZERO_VECTOR
from spatium.geometry.intersect import (
    BOX_SIDE_THRESHOLD,
    get_azimuth_and_elevation,
    get_distance_within_cone_segment,
    get_dot_distance,
    get_t_for_segment_plane_intersect,
    intersect_planes2,
    intersect_planes3,
    line_box_intersection,
    line_extent_box_intersection,
    line_plane_intersection,
    line_sphere_intersection,
    plane_aabb_intersection,
    point_box_intersection,
    segment_plane_intersection,
    sphere_aabb_intersection,
    sphere_cone_intersection,
    sphere_dist_to_line,
)

X_AXIS = Vector3(1.0, 0.0, 0.0)
Y_AXIS = Vector3(0.0, 1.0, 0.0)
Z_AXIS = Vector3(0.0, 0.0, 1.0)
UNIT_BOX = Box(Vector3(-1.0, -1.0, -1.0), Vector3(1.0, 1.0, 1.0))
PLANE_Z2 = Plane(0.0, 0.0, 1.0, 2.0)


class TestPlaneIntersections:
    """Tests for segment, line and plane-plane queries."""

    def test_segment_crosses_plane(self) -> None:
        """Test a segment crossing the plane at its midpoint."""
        hit, point = segment_plane_intersection(ZERO_VECTOR, Vector3(0.0, 0.0, 4.0), PLANE_Z2)
        assert hit
        assert point == Vector3(0.0, 0.0, 2.0)

    def test_segment_stops_short(self) -> None:
        """Test a segment ending before the plane."""
        assert segment_plane_intersection(ZERO_VECTOR, Vector3(0.0, 0.0, 1.0), PLANE_Z2) == (
            False,
            None,
        )

    def test_parallel_segment(self) -> None:
        """Test a parallel segment gives the out-of-range parameter and no hit."""
        t = get_t_for_segment_plane_intersect(ZERO_VECTOR, X_AXIS, PLANE_Z2)
        assert t == -1.0
        assert segment_plane_intersection(ZERO_VECTOR, X_AXIS, PLANE_Z2) == (False, None)

    def test_segment_lying_in_plane(self) -> None:
        """Test a segment inside the plane gives a finite parameter and no hit."""
        start = Vector3(0.0, 0.0, 2.0)
        end = Vector3(1.0, 0.0, 2.0)
        t = get_t_for_segment_plane_intersect(start, end, PLANE_Z2)
        assert math.isfinite(t)
        assert t == -1.0
        assert segment_plane_intersection(start, end, PLANE_Z2) == (False, None)

    def test_line_plane_intersection_forms(self) -> None:
        """Test the plane and origin/normal forms agree beyond the segment."""
        by_plane = line_plane_intersection(ZERO_VECTOR, Z_AXIS, PLANE_Z2)
        by_origin = line_plane_intersection(ZERO_VECTOR, Z_AXIS, Vector3(5.0, 5.0, 2.0), Z_AXIS)
        assert by_plane == Vector3(0.0, 0.0, 2.0)
        assert by_origin == Vector3(0.0, 0.0, 2.0)

    def test_line_parallel_to_plane_returns_first_point(self) -> None:
        """Test a parallel line returns its first point."""
        p1 = Vector3(1.0, 1.0, 0.0)
        assert line_plane_intersection(p1, Vector3(2.0, 1.0, 0.0), PLANE_Z2) == p1

    def test_line_plane_requires_normal(self) -> None:
        """Test an origin without a normal is rejected."""
        with pytest.raises(TypeError):
            line_plane_intersection(ZERO_VECTOR, Z_AXIS, Vector3(0.0, 0.0, 2.0))

    @pytest.mark.parametrize(
        "plane,expected",
        [
            (Plane(0.0, 0.0, 1.0, 0.0), True),
            (Plane(0.0, 0.0, 1.0, 1.0), True),
            (Plane(0.0, 0.0, 1.0, 2.0), False),
            (Plane(0.0, 0.0, -1.0, 0.5), True),
        ],
    )
    def test_plane_aabb(self, plane: Plane, expected: bool) -> None:
        """Test planes cutting, touching and missing a box."""
        assert plane_aabb_intersection(plane, UNIT_BOX) is expected

    def test_intersect_two_planes(self) -> None:
        """Test the line shared by z = 0 and x = 1."""
        hit, point, direction = intersect_planes2(
            Plane(0.0, 0.0, 1.0, 0.0), Plane(1.0, 0.0, 0.0, 1.0)
        )
        assert hit
        assert point.equals(Vector3(1.0, 0.0, 0.0))
        assert direction.equals(Y_AXIS)

    def test_intersect_two_parallel_planes(self) -> None:
        """Test parallel planes do not intersect."""
        result = intersect_planes2(Plane(0.0, 0.0, 1.0, 0.0), Plane(0.0, 0.0, 1.0, 3.0))
        assert result == (False, ZERO_VECTOR, ZERO_VECTOR)

    def test_intersect_three_planes(self) -> None:
        """Test the common point of x = 1, y = 2 and z = 3."""
        hit, point = intersect_planes3(
            Plane(1.0, 0.0, 0.0, 1.0), Plane(0.0, 1.0, 0.0, 2.0), Plane(0.0, 0.0, 1.0, 3.0)
        )
        assert hit
        assert point.equals(Vector3(1.0, 2.0, 3.0))

    def test_intersect_three_planes_with_parallel_pair(self) -> None:
        """Test a parallel pair leaves no common point."""
        result = intersect_planes3(
            Plane(1.0, 0.0, 0.0, 1.0), Plane(1.0, 0.0, 0.0, 2.0), Plane(0.0, 0.0, 1.0, 3.0)
        )
        assert result == (False, ZERO_VECTOR)


class TestBoxIntersections:
    """Tests for box queries."""

    def test_point_box_is_strict(self) -> None:
        """Test a point on a face is not inside."""
        assert point_box_intersection(ZERO_VECTOR, UNIT_BOX)
        assert not point_box_intersection(X_AXIS, UNIT_BOX)

    def test_sphere_aabb(self) -> None:
        """Test touching and separated spheres."""
        assert sphere_aabb_intersection(Sphere(Vector3(3.0, 0.0, 0.0), 2.0), UNIT_BOX)
        assert not sphere_aabb_intersection(Sphere(Vector3(3.0, 0.0, 0.0), 1.9), UNIT_BOX)
        assert sphere_aabb_intersection(Vector3(2.0, 2.0, 0.0), UNIT_BOX, 2.0)

    def test_sphere_aabb_requires_radius(self) -> None:
        """Test a bare center without a radius is rejected."""
        with pytest.raises(TypeError):
            sphere_aabb_intersection(ZERO_VECTOR, UNIT_BOX)

    def test_line_box_through(self) -> None:
        """Test a segment passing straight through."""
        assert line_box_intersection(UNIT_BOX, Vector3(-5.0, 0.0, 0.0), Vector3(5.0, 0.0, 0.0))

    def test_line_box_start_inside(self) -> None:
        """Test a segment starting inside the box."""
        assert line_box_intersection(UNIT_BOX, ZERO_VECTOR, Vector3(10.0, 10.0, 10.0))

    @pytest.mark.parametrize(
        "start,end",
        [
            (Vector3(-5.0, 3.0, 0.0), Vector3(5.0, 3.0, 0.0)),
            (Vector3(-5.0, 0.0, 0.0), Vector3(-3.0, 0.0, 0.0)),
            (Vector3(-5.0, 0.0, 0.0), Vector3(0.0, 5.0, 0.0)),
        ],
    )
    def test_line_box_misses(self, start: Vector3, end: Vector3) -> None:
        """Test segments passing beside, stopping short of, and skimming past the box."""
        assert not line_box_intersection(UNIT_BOX, start, end)

    def test_line_box_explicit_direction(self) -> None:
        """Test precomputed direction data gives the same answer."""
        start = Vector3(-5.0, 0.5, 0.5)
        end = Vector3(5.0, 0.5, 0.5)
        direction = end - start
        assert line_box_intersection(UNIT_BOX, start, end, direction, direction.reciprocal())

    def test_side_threshold(self) -> None:
        """Test the face slack constant."""
        assert BOX_SIDE_THRESHOLD == 0.1

    def test_extent_sweep_hit(self) -> None:
        """Test a swept box hitting the grown face."""
        hit, location, normal, time = line_extent_box_intersection(
            UNIT_BOX, Vector3(-5.0, 0.0, 0.0), Vector3(5.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0)
        )
        assert hit
        assert location.equals(Vector3(-2.0, 0.0, 0.0))
        assert normal == Vector3(-1.0, 0.0, 0.0)
        assert time == pytest.approx(0.3)

    def test_extent_sweep_starting_in_contact(self) -> None:
        """Test a sweep starting inside reports the start."""
        start = Vector3(1.5, 0.0, 0.0)
        result = line_extent_box_intersection(UNIT_BOX, start, Vector3(5.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0))
        assert result == (True, start, Z_AXIS, 0.0)

    def test_extent_sweep_moving_away(self) -> None:
        """Test a sweep moving away misses."""
        start = Vector3(-5.0, 0.0, 0.0)
        result = line_extent_box_intersection(UNIT_BOX, start, Vector3(-10.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0))
        assert result == (False, start, ZERO_VECTOR, 0.0)


class TestSpheresAndCones:
    """Tests for sphere and cone queries."""

    def test_line_sphere(self) -> None:
        """Test entering, missing and stopping short of a sphere."""
        start = Vector3(-5.0, 0.0, 0.0)
        assert line_sphere_intersection(start, X_AXIS, 10.0, ZERO_VECTOR, 1.0)
        assert not line_sphere_intersection(Vector3(-5.0, 2.0, 0.0), X_AXIS, 10.0, ZERO_VECTOR, 1.0)
        assert not line_sphere_intersection(start, X_AXIS, 3.0, ZERO_VECTOR, 1.0)

    def test_line_sphere_zero_length(self) -> None:
        """Test a zero-length segment never intersects."""
        assert not line_sphere_intersection(ZERO_VECTOR, X_AXIS, 0.0, ZERO_VECTOR, 1.0)

    def test_sphere_cone(self) -> None:
        """Test spheres along, beside and behind a 30 degree cone."""
        sin30, cos30 = 0.5, math.sqrt(3.0) / 2.0
        assert sphere_cone_intersection(Vector3(10.0, 0.0, 0.0), 1.0, X_AXIS, sin30, cos30)
        assert not sphere_cone_intersection(Vector3(10.0, 10.0, 0.0), 1.0, X_AXIS, sin30, cos30)
        assert not sphere_cone_intersection(Vector3(-10.0, 0.0, 0.0), 1.0, X_AXIS, sin30, cos30)
        assert sphere_cone_intersection(Vector3(-0.5, 0.0, 0.0), 1.0, X_AXIS, sin30, cos30)

    def test_sphere_cone_zero_angle(self) -> None:
        """Test a zero half-angle cone never intersects."""
        assert not sphere_cone_intersection(Vector3(10.0, 0.0, 0.0), 1.0, X_AXIS, 0.0, 1.0)

    def test_sphere_dist_to_line_crossing(self) -> None:
        """Test the nearer crossing is returned."""
        result = sphere_dist_to_line(ZERO_VECTOR, 1.0, Vector3(-5.0, 0.0, 0.0), X_AXIS)
        assert result.equals(Vector3(-1.0, 0.0, 0.0))

    def test_sphere_dist_to_line_miss(self) -> None:
        """Test a missing line gives the facing surface point."""
        result = sphere_dist_to_line(ZERO_VECTOR, 1.0, Vector3(-5.0, 3.0, 0.0), X_AXIS)
        assert result.equals(Y_AXIS)

    def test_sphere_dist_to_line_zero_direction(self) -> None:
        """Test a zero direction faces the line origin."""
        result = sphere_dist_to_line(ZERO_VECTOR, 2.0, Vector3(0.0, 5.0, 0.0), ZERO_VECTOR)
        assert result.equals(Vector3(0.0, 2.0, 0.0))

    @pytest.mark.parametrize(
        "point,inside,percent",
        [
            (Vector3(5.0, 0.0, 0.0), True, 1.0),
            (Vector3(5.0, 1.0, 0.0), True, 0.5),
            (Vector3(5.0, 3.0, 0.0), False, 0.0),
            (Vector3(12.0, 0.0, 0.0), False, 0.0),
        ],
    )
    def test_distance_within_cone_segment(self, point: Vector3, inside: bool, percent: float) -> None:
        """Test depth inside a cylinder-shaped cone segment."""
        result = get_distance_within_cone_segment(point, ZERO_VECTOR, Vector3(10.0, 0.0, 0.0), 2.0, 2.0)
        assert result[0] is inside
        assert result[1] == pytest.approx(percent)

    def test_distance_within_tapered_cone(self) -> None:
        """Test the radius is interpolated along the axis."""
        inside, percent = get_distance_within_cone_segment(
            Vector3(5.0, 1.0, 0.0), ZERO_VECTOR, Vector3(10.0, 0.0, 0.0), 0.0, 4.0
        )
        assert inside
        assert percent == pytest.approx(0.5)

    def test_distance_within_zero_length_cone(self) -> None:
        """Test a zero-length cone contains nothing."""
        assert get_distance_within_cone_segment(ZERO_VECTOR, ZERO_VECTOR, ZERO_VECTOR, 1.0, 1.0) == (
            False,
            0.0,
        )


class TestDirectionMeasures:
    """Tests for dot distance, azimuth and elevation."""

    def test_dot_distance(self) -> None:
        """Test signed azimuth cosine and elevation sine."""
        s = math.sqrt(0.5)
        in_front, (x, y) = get_dot_distance(Vector3(1.0, 1.0, 0.0), X_AXIS, Y_AXIS, Z_AXIS)
        assert in_front
        assert x == pytest.approx(s)
        assert y == pytest.approx(0.0)

        in_front, (x, y) = get_dot_distance(Vector3(1.0, -1.0, 0.0), X_AXIS, Y_AXIS, Z_AXIS)
        assert x == pytest.approx(-s)

        in_front, (x, y) = get_dot_distance(Vector3(1.0, 0.0, 1.0), X_AXIS, Y_AXIS, Z_AXIS)
        assert y == pytest.approx(s)

    def test_dot_distance_behind(self) -> None:
        """Test a direction behind the forward axis."""
        in_front, _ = get_dot_distance(Vector3(-1.0, 0.0, 0.0), X_AXIS, Y_AXIS, Z_AXIS)
        assert not in_front

    @pytest.mark.parametrize(
        "direction,azimuth,elevation",
        [
            (Vector3(1.0, 1.0, 0.0), math.pi / 4, 0.0),
            (Vector3(0.0, -1.0, 0.0), -math.pi / 2, 0.0),
            (Vector3(1.0, 0.0, 1.0), 0.0, math.pi / 4),
        ],
    )
    def test_azimuth_and_elevation(self, direction: Vector3, azimuth: float, elevation: float) -> None:
        """Test angles in radians relative to the frame."""
        result = get_azimuth_and_elevation(direction, X_AXIS, Y_AXIS, Z_AXIS)
        assert result[0] == pytest.approx(azimuth)
        assert result[1] == pytest.approx(elevation)

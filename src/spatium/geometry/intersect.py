"""
Intersection tests for Spatium.

Provides segment/line versus plane, plane/line/point/sphere versus box,
sphere versus cone and plane-plane intersections, plus the cone and
direction measures built on them. Tests return a bool, paired with the
hit data where there is any.
"""

import math
from typing import Optional, Union

from spatium.core import scalar
from spatium.core.bounds import Box, Sphere
from spatium.core.constants import KINDA_SMALL_NUMBER
from spatium.core.plane import Plane
from spatium.core.vector import Vector3, ZERO_VECTOR
from spatium.geometry.closest import point_dist_to_line
from spatium.logging.setup import get_logger

logger = get_logger(__name__)

# Slack allowed around a box face when confirming a swept hit.
BOX_SIDE_THRESHOLD: float = 0.1

# Plane pairs/triples whose cross products fall below this are parallel.
PLANE_PARALLEL_THRESHOLD: float = 0.001


# ----------------------------------------------------------------------
# Planes
# ----------------------------------------------------------------------


def get_t_for_segment_plane_intersect(start: Vector3, end: Vector3, plane: Plane) -> float:
    """
    Parameter t where the line through start and end crosses the plane.

    A segment parallel to the plane (including one lying in it) has no
    single crossing and gives -1.0, outside the [0, 1] segment range.
    """
    denominator = (end - start).dot(plane.normal)
    if denominator == 0.0:
        logger.debug("segment_parallel_to_plane")
        return -1.0
    return (plane.w - start.dot(plane.normal)) / denominator


def segment_plane_intersection(
    start: Vector3, end: Vector3, plane: Plane
) -> tuple[bool, Optional[Vector3]]:
    """
    Intersect a segment with a plane.

    Args:
        start: Segment start.
        end: Segment end.
        plane: Plane to test against.

    Returns:
        Tuple (hit, point). The point is None when t falls outside
        [0, 1] (widened by KINDA_SMALL_NUMBER), which includes a segment
        parallel to the plane.
    """
    t = get_t_for_segment_plane_intersect(start, end, plane)
    if -KINDA_SMALL_NUMBER < t < 1.0 + KINDA_SMALL_NUMBER:
        return True, start + (end - start) * t
    return False, None


def line_plane_intersection(
    point1: Vector3,
    point2: Vector3,
    plane_or_origin: Union[Plane, Vector3],
    plane_normal: Optional[Vector3] = None,
) -> Vector3:
    """
    Point where the infinite line through point1 and point2 meets a plane.

    The plane is either a Plane, or an origin followed by plane_normal.
    A line parallel to the plane has no single crossing; point1 is
    returned.

    Args:
        point1: First point on the line.
        point2: Second point on the line.
        plane_or_origin: Plane, or a point on the plane.
        plane_normal: Plane normal when plane_or_origin is a point.

    Returns:
        Intersection point.
    """
    direction = point2 - point1
    if isinstance(plane_or_origin, Plane):
        normal = plane_or_origin.normal
        numerator = plane_or_origin.w - point1.dot(normal)
    else:
        if plane_normal is None:
            raise TypeError("plane_normal is required when a plane origin is given")
        normal = plane_normal
        numerator = (plane_or_origin - point1).dot(normal)

    denominator = direction.dot(normal)
    if denominator == 0.0:
        logger.debug("line_parallel_to_plane")
        return point1
    return point1 + direction * (numerator / denominator)


def plane_aabb_intersection(plane: Plane, aabb: Box) -> bool:
    """
    Check whether a plane cuts an axis-aligned box.

    Picks the box diagonal most closely aligned with the plane normal; the
    plane intersects the box if the diagonal's ends straddle it (or touch).
    """
    v_min = []
    v_max = []
    for n, lo, hi in zip(plane.normal, aabb.min, aabb.max):
        if n >= 0.0:
            v_min.append(lo)
            v_max.append(hi)
        else:
            v_min.append(hi)
            v_max.append(lo)

    d_max = plane.plane_dot(Vector3(*v_max))
    d_min = plane.plane_dot(Vector3(*v_min))
    return d_max >= 0.0 and d_min <= 0.0


def intersect_planes2(p1: Plane, p2: Plane) -> tuple[bool, Vector3, Vector3]:
    """
    Line of intersection of two planes.

    Args:
        p1: First plane.
        p2: Second plane.

    Returns:
        Tuple (hit, point on the line, unit line direction). Parallel
        planes give (False, zero, zero).
    """
    direction = p1.normal.cross(p2.normal)
    dd = direction.size_squared()
    if dd < PLANE_PARALLEL_THRESHOLD ** 2:
        return False, ZERO_VECTOR, ZERO_VECTOR

    point = (
        p2.normal.cross(direction) * p1.w + direction.cross(p1.normal) * p2.w
    ) / dd
    return True, point, direction.safe_normal()


def intersect_planes3(p1: Plane, p2: Plane, p3: Plane) -> tuple[bool, Vector3]:
    """
    Common point of three planes.

    Returns:
        Tuple (hit, point). When any two planes are parallel the
        determinant vanishes and (False, zero) is returned.
    """
    det = p1.normal.cross(p2.normal).dot(p3.normal)
    if det * det < PLANE_PARALLEL_THRESHOLD ** 2:
        return False, ZERO_VECTOR

    point = (
        p2.normal.cross(p3.normal) * p1.w
        + p3.normal.cross(p1.normal) * p2.w
        + p1.normal.cross(p2.normal) * p3.w
    ) / det
    return True, point


# ----------------------------------------------------------------------
# Boxes
# ----------------------------------------------------------------------


def point_box_intersection(point: Vector3, box: Box) -> bool:
    """Strict containment; points on a face do not intersect."""
    return box.is_inside(point)


def sphere_aabb_intersection(
    sphere_or_center: Union[Sphere, Vector3], aabb: Box, radius_squared: Optional[float] = None
) -> bool:
    """
    Check whether a sphere touches an axis-aligned box.

    Args:
        sphere_or_center: Sphere, or its center when radius_squared is given.
        aabb: Box to test against.
        radius_squared: Squared radius when a center is passed.

    Returns:
        True if the squared distance from the center to the box is within
        the squared radius.
    """
    if isinstance(sphere_or_center, Sphere):
        center = sphere_or_center.center
        radius_squared = sphere_or_center.w ** 2
    else:
        if radius_squared is None:
            raise TypeError("radius_squared is required when a center is given")
        center = sphere_or_center

    dist_squared = 0.0
    for c, lo, hi in zip(center, aabb.min, aabb.max):
        if c < lo:
            dist_squared += (c - lo) ** 2
        elif c > hi:
            dist_squared += (c - hi) ** 2
    return dist_squared <= radius_squared


def _within_box_slack(point: Vector3, box: Box) -> bool:
    return (
        box.min.x - BOX_SIDE_THRESHOLD < point.x < box.max.x + BOX_SIDE_THRESHOLD
        and box.min.y - BOX_SIDE_THRESHOLD < point.y < box.max.y + BOX_SIDE_THRESHOLD
        and box.min.z - BOX_SIDE_THRESHOLD < point.z < box.max.z + BOX_SIDE_THRESHOLD
    )


def line_box_intersection(
    box: Box,
    start: Vector3,
    end: Vector3,
    direction: Optional[Vector3] = None,
    one_over_direction: Optional[Vector3] = None,
) -> bool:
    """
    Check whether the segment start-end touches a box.

    Args:
        box: Box to test against.
        start: Segment start.
        end: Segment end.
        direction: end - start, derived when omitted.
        one_over_direction: Component-wise reciprocal of direction,
            derived when omitted.

    Returns:
        True if the segment starts inside the box or enters it.
    """
    if direction is None:
        direction = end - start
    if one_over_direction is None:
        one_over_direction = direction.reciprocal()

    times = []
    start_is_outside = False
    for s, e, inv, lo, hi in zip(start, end, one_over_direction, box.min, box.max):
        if s < lo:
            start_is_outside = True
            if e < lo:
                return False
            times.append((lo - s) * inv)
        elif s > hi:
            start_is_outside = True
            if e > hi:
                return False
            times.append((hi - s) * inv)
        else:
            times.append(0.0)

    if not start_is_outside:
        return True

    max_time = max(times)
    if 0.0 <= max_time <= 1.0:
        return _within_box_slack(start + direction * max_time, box)
    return False


def line_extent_box_intersection(
    box: Box, start: Vector3, end: Vector3, extent: Vector3
) -> tuple[bool, Vector3, Vector3, float]:
    """
    Sweep a box of half-size ``extent`` from start to end against ``box``.

    Args:
        box: Static box.
        start: Sweep start (center of the moving box).
        end: Sweep end.
        extent: Half-size of the moving box.

    Returns:
        Tuple (hit, location, normal, time). A sweep starting in contact
        reports the start, an up normal and time 0. A miss reports the
        start, a zero normal and time 0.
    """
    grown = Box(box.min - extent, box.max + extent, box.is_valid)
    direction = end - start

    times = [0.0, 0.0, 0.0]
    face_dir = [1.0, 1.0, 1.0]
    inside = True

    for i, (s, d, lo, hi) in enumerate(zip(start, direction, grown.min, grown.max)):
        if s < lo:
            if d <= 0.0:
                return False, start, ZERO_VECTOR, 0.0
            inside = False
            face_dir[i] = -1.0
            times[i] = (lo - s) / d
        elif s > hi:
            if d >= 0.0:
                return False, start, ZERO_VECTOR, 0.0
            inside = False
            times[i] = (hi - s) / d

    if inside:
        return True, start, Vector3(0.0, 0.0, 1.0), 0.0

    if times[1] > times[2]:
        hit_time = times[1]
        hit_normal = Vector3(0.0, face_dir[1], 0.0)
    else:
        hit_time = times[2]
        hit_normal = Vector3(0.0, 0.0, face_dir[2])

    if times[0] > hit_time:
        hit_time = times[0]
        hit_normal = Vector3(face_dir[0], 0.0, 0.0)

    if 0.0 <= hit_time <= 1.0:
        hit_location = start + direction * hit_time
        if _within_box_slack(hit_location, grown):
            return True, hit_location, hit_normal, hit_time

    return False, start, ZERO_VECTOR, 0.0


# ----------------------------------------------------------------------
# Spheres and cones
# ----------------------------------------------------------------------


def line_sphere_intersection(
    start: Vector3, direction: Vector3, length: float, origin: Vector3, radius: float
) -> bool:
    """
    Check whether a segment enters a sphere.

    Args:
        start: Segment start.
        direction: Unit direction of the segment.
        length: Segment length.
        origin: Sphere center.
        radius: Sphere radius.

    Returns:
        True if the first crossing of the sphere surface lies within the
        segment.
    """
    if length <= 0.0:
        return False

    eo = start - origin
    v = direction.dot(origin - start)
    disc = radius * radius - (eo.dot(eo) - v * v)
    if disc < 0.0:
        return False

    time = (v - math.sqrt(disc)) / length
    return 0.0 <= time <= 1.0


def sphere_cone_intersection(
    sphere_center: Vector3,
    sphere_radius: float,
    cone_axis: Vector3,
    cone_angle_sin: float,
    cone_angle_cos: float,
) -> bool:
    """
    Check whether a sphere touches an infinite cone with its tip at the origin.

    Args:
        sphere_center: Sphere center relative to the cone tip.
        sphere_radius: Sphere radius.
        cone_axis: Unit cone axis.
        cone_angle_sin: Sine of the cone half-angle.
        cone_angle_cos: Cosine of the cone half-angle.

    Returns:
        True on intersection. A zero half-angle cone never intersects.
    """
    if cone_angle_sin <= 0.0:
        logger.debug("degenerate_cone", cone_angle_sin=cone_angle_sin)
        return False

    u = cone_axis * (-sphere_radius / cone_angle_sin)
    d = sphere_center - u
    dsqr = d.dot(d)
    e = cone_axis.dot(d)

    if e > 0.0 and e * e >= dsqr * cone_angle_cos ** 2:
        dsqr = sphere_center.dot(sphere_center)
        e = -cone_axis.dot(sphere_center)
        if e > 0.0 and e * e >= dsqr * cone_angle_sin ** 2:
            return dsqr <= sphere_radius ** 2
        return True
    return False


def sphere_dist_to_line(
    sphere_origin: Vector3, sphere_radius: float, line_origin: Vector3, line_dir: Vector3
) -> Vector3:
    """
    Point on a sphere closest to a line, or the line's nearer crossing.

    Args:
        sphere_origin: Sphere center.
        sphere_radius: Sphere radius.
        line_origin: A point on the line.
        line_dir: Line direction.

    Returns:
        When the line misses (or grazes) the sphere, the surface point
        facing the line. Otherwise the crossing closest to line_origin.
    """
    a = line_dir.dot(line_dir)
    if a == 0.0:
        return sphere_origin + (line_origin - sphere_origin).safe_normal() * sphere_radius

    b = 2.0 * line_dir.dot(line_origin - sphere_origin)
    c = (
        sphere_origin.dot(sphere_origin)
        + line_origin.dot(line_origin)
        - 2.0 * sphere_origin.dot(line_origin)
        - sphere_radius ** 2
    )
    d = b * b - 4.0 * a * c

    if d <= KINDA_SMALL_NUMBER:
        point_on_line = line_origin + line_dir * (-b / (2.0 * a))
        return sphere_origin + (point_on_line - sphere_origin).safe_normal() * sphere_radius

    e = math.sqrt(d)
    t1 = (-b + e) / (2.0 * a)
    t2 = (-b - e) / (2.0 * a)
    t = t1 if abs(t1) < abs(t2) else t2
    return line_origin + line_dir * t


def get_distance_within_cone_segment(
    point: Vector3,
    cone_start: Vector3,
    cone_line: Vector3,
    radius_at_start: float,
    radius_at_end: float,
) -> tuple[bool, float]:
    """
    Check whether a point lies in a truncated cone, and how deep.

    Args:
        point: Query point.
        cone_start: Cone start point.
        cone_line: Vector from the start to the end of the cone.
        radius_at_start: Radius at cone_start.
        radius_at_end: Radius at cone_start + cone_line.

    Returns:
        Tuple (inside, percentage). The percentage is 1 on the axis and
        falls to 0 at the surface; it is 0 whenever the point is outside.
    """
    distance, point_on_cone = point_dist_to_line(point, cone_line, cone_start)

    cone_length_sq = cone_line.size_squared()
    dist_to_start_sq = (cone_start - point_on_cone).size_squared()
    dist_to_end_sq = (cone_start + cone_line - point_on_cone).size_squared()

    if cone_length_sq == 0.0:
        return False, 0.0

    if dist_to_start_sq > cone_length_sq or dist_to_end_sq > cone_length_sq:
        return False, 0.0

    percent_along = math.sqrt(dist_to_start_sq) / math.sqrt(cone_length_sq)
    radius_at_point = radius_at_start + (radius_at_end - radius_at_start) * percent_along

    if distance > radius_at_point:
        return False, 0.0

    if radius_at_point > 0.0:
        return True, (radius_at_point - distance) / radius_at_point
    return True, 1.0


# ----------------------------------------------------------------------
# Direction measures
# ----------------------------------------------------------------------


def _project_off_axis(direction: Vector3, axis_z: Vector3) -> tuple[Vector3, Vector3]:
    normal_dir = direction.safe_normal()
    no_z = (normal_dir - axis_z * normal_dir.dot(axis_z)).safe_normal()
    return normal_dir, no_z


def get_dot_distance(
    direction: Vector3, axis_x: Vector3, axis_y: Vector3, axis_z: Vector3
) -> tuple[bool, tuple[float, float]]:
    """
    Dot-product distances of a direction within an orthonormal frame.

    Args:
        direction: Direction to measure.
        axis_x: Forward axis.
        axis_y: Right axis.
        axis_z: Up axis.

    Returns:
        Tuple (in_front, (x, y)). x is the cosine of the azimuth, signed
        by which side of axis_x it falls on; y is the sine of the
        elevation. in_front is True when the direction does not point
        behind axis_x.
    """
    normal_dir, no_z = _project_off_axis(direction, axis_z)
    azimuth_sign = -1.0 if no_z.dot(axis_y) < 0.0 else 1.0
    dir_dot_x = no_z.dot(axis_x)
    return dir_dot_x >= 0.0, (azimuth_sign * abs(dir_dot_x), normal_dir.dot(axis_z))


def get_azimuth_and_elevation(
    direction: Vector3, axis_x: Vector3, axis_y: Vector3, axis_z: Vector3
) -> tuple[float, float]:
    """Azimuth and elevation of a direction in radians."""
    normal_dir, no_z = _project_off_axis(direction, axis_z)
    azimuth_sign = -1.0 if no_z.dot(axis_y) < 0.0 else 1.0
    elevation_sin = scalar.clamp(normal_dir.dot(axis_z), -1.0, 1.0)
    azimuth_cos = scalar.clamp(no_z.dot(axis_x), -1.0, 1.0)
    return math.acos(azimuth_cos) * azimuth_sign, math.asin(elevation_sin)

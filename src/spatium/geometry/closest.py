"""
Closest-point queries for Spatium.

Provides point/line/segment distances, segment-to-segment closest points,
and closest points on triangles and tetrahedra. The triangle and
tetrahedron queries classify the point against each bounding plane (one
bit per plane) and dispatch the resulting mask through a region table.
"""

from enum import IntEnum
from typing import Callable

from spatium.core.constants import KINDA_SMALL_NUMBER, SMALL_NUMBER
from spatium.core.plane import Plane
from spatium.core.vector import Vector3
from spatium.logging.setup import get_logger

logger = get_logger(__name__)


# ----------------------------------------------------------------------
# Lines and segments
# ----------------------------------------------------------------------


def closest_point_on_line(line_start: Vector3, line_end: Vector3, point: Vector3) -> Vector3:
    """
    Closest point to ``point`` on the line through start and end, limited
    to the span between them.

    A zero-length line returns line_start.
    """
    direction = line_end - line_start
    length_squared = direction.size_squared()
    if length_squared == 0.0:
        return line_start
    a = (line_start - point).dot(direction)
    t = min(max(-a / length_squared, 0.0), 1.0)
    return line_start + direction * t


def closest_point_on_segment(point: Vector3, start: Vector3, end: Vector3) -> Vector3:
    """
    Closest point to ``point`` on the segment start-end.

    Args:
        point: Query point.
        start: Segment start.
        end: Segment end.

    Returns:
        Start when the projection falls before it (or the segment has zero
        length), end when it falls past it, otherwise the projection.
    """
    segment = end - start
    to_point = point - start

    dot1 = to_point.dot(segment)
    if dot1 <= 0.0:
        return start

    dot2 = segment.dot(segment)
    if dot2 <= dot1:
        return end

    return start + segment * (dot1 / dot2)


def point_dist_to_segment(point: Vector3, start: Vector3, end: Vector3) -> float:
    return (point - closest_point_on_segment(point, start, end)).size()


def point_dist_to_segment_squared(point: Vector3, start: Vector3, end: Vector3) -> float:
    return (point - closest_point_on_segment(point, start, end)).size_squared()


def point_dist_to_line(
    point: Vector3, direction: Vector3, origin: Vector3
) -> tuple[float, Vector3]:
    """
    Distance from a point to an infinite line.

    Args:
        point: Query point.
        direction: Line direction (any length).
        origin: A point on the line.

    Returns:
        Tuple (distance, closest point on the line).
    """
    safe_dir = direction.safe_normal()
    closest = origin + safe_dir * (point - origin).dot(safe_dir)
    return (closest - point).size(), closest


def _segment_closest_points(
    a1: Vector3,
    b1: Vector3,
    a2: Vector3,
    b2: Vector3,
    parallel: bool,
) -> tuple[Vector3, Vector3]:
    s1 = b1 - a1
    s2 = b2 - a2
    s3 = a1 - a2

    dot11 = s1.dot(s1)
    dot22 = s2.dot(s2)
    dot12 = s1.dot(s2)
    dot13 = s1.dot(s3)
    dot23 = s2.dot(s3)

    d = dot11 * dot22 - dot12 * dot12
    d1 = d
    d2 = d

    if parallel or d < KINDA_SMALL_NUMBER:
        # Pin the first segment at its start and solve for the second.
        n1 = 0.0
        d1 = 1.0
        n2 = dot23
        d2 = dot22
    else:
        n1 = dot12 * dot23 - dot22 * dot13
        n2 = dot11 * dot23 - dot12 * dot13

        if n1 < 0.0:
            n1 = 0.0
            n2 = dot23
            d2 = dot22
        elif n1 > d1:
            n1 = d1
            n2 = dot23 + dot12
            d2 = dot22

    if n2 < 0.0:
        n2 = 0.0
        if -dot13 < 0.0:
            n1 = 0.0
        elif -dot13 > dot11:
            n1 = d1
        else:
            n1 = -dot13
            d1 = dot11
    elif n2 > d2:
        n2 = d2
        if -dot13 + dot12 < 0.0:
            n1 = 0.0
        elif -dot13 + dot12 > dot11:
            n1 = d1
        else:
            n1 = -dot13 + dot12
            d1 = dot11

    t1 = 0.0 if abs(n1) < KINDA_SMALL_NUMBER else n1 / d1
    t2 = 0.0 if abs(n2) < KINDA_SMALL_NUMBER or d2 == 0.0 else n2 / d2

    return a1 + s1 * t1, a2 + s2 * t2


def segment_dist_to_segment(
    a1: Vector3, b1: Vector3, a2: Vector3, b2: Vector3
) -> tuple[Vector3, Vector3]:
    """
    Closest points between segments a1-b1 and a2-b2.

    Near-parallel segments (2x2 determinant below KINDA_SMALL_NUMBER) are
    resolved by pinning the first segment at a1 and clamping the second.

    Args:
        a1: Start of the first segment.
        b1: End of the first segment.
        a2: Start of the second segment.
        b2: End of the second segment.

    Returns:
        Tuple (closest point on the first segment, closest point on the
        second segment).
    """
    return _segment_closest_points(a1, b1, a2, b2, parallel=False)


def segment_dist_to_segment_safe(
    a1: Vector3, b1: Vector3, a2: Vector3, b2: Vector3
) -> tuple[Vector3, Vector3]:
    """
    segment_dist_to_segment() that also treats long, nearly parallel
    segments as parallel.

    The raw determinant grows with segment length, so the parallel test is
    repeated on the normalized directions.
    """
    n1 = (b1 - a1).safe_normal()
    n2 = (b2 - a2).safe_normal()
    d_norm = n1.dot(n1) * n2.dot(n2) - n1.dot(n2) ** 2
    return _segment_closest_points(a1, b1, a2, b2, parallel=d_norm < KINDA_SMALL_NUMBER)


# ----------------------------------------------------------------------
# Triangles
# ----------------------------------------------------------------------


class TriangleRegion(IntEnum):
    """Voronoi region of a point relative to a triangle, as a plane bitmask."""

    INSIDE = 0
    EDGE_BA = 1
    EDGE_AC = 2
    VERTEX_A = 3
    EDGE_CB = 4
    VERTEX_B = 5
    VERTEX_C = 6
    IMPOSSIBLE = 7


def _nearest(point: Vector3, candidates: tuple[Vector3, ...]) -> Vector3:
    return min(candidates, key=lambda c: (c - point).size_squared())


_TriangleResolver = Callable[[Vector3, Vector3, Vector3, Vector3], Vector3]

TRIANGLE_RESOLVERS: dict[TriangleRegion, _TriangleResolver] = {
    TriangleRegion.INSIDE: lambda p, a, b, c: Vector3.point_plane_project_points(p, a, b, c),
    TriangleRegion.EDGE_BA: lambda p, a, b, c: closest_point_on_segment(p, b, a),
    TriangleRegion.EDGE_AC: lambda p, a, b, c: closest_point_on_segment(p, a, c),
    TriangleRegion.VERTEX_A: lambda p, a, b, c: a,
    TriangleRegion.EDGE_CB: lambda p, a, b, c: closest_point_on_segment(p, b, c),
    TriangleRegion.VERTEX_B: lambda p, a, b, c: b,
    TriangleRegion.VERTEX_C: lambda p, a, b, c: c,
    TriangleRegion.IMPOSSIBLE: lambda p, a, b, c: _nearest(p, (a, b, c)),
}


def _triangle_normal(a: Vector3, b: Vector3, c: Vector3) -> Vector3:
    return (a - b).cross(b - c)


def classify_triangle_region(
    point: Vector3, a: Vector3, b: Vector3, c: Vector3
) -> TriangleRegion:
    """
    Region of ``point`` relative to triangle abc.

    Each edge contributes one bit, set when the point lies strictly on the
    outer side of the plane through that edge perpendicular to the
    triangle.
    """
    ba = a - b
    ac = c - a
    cb = b - c
    normal = ba.cross(cb)

    planes = (
        Plane.from_point_normal(b, normal.cross(ba)),
        Plane.from_point_normal(a, normal.cross(ac)),
        Plane.from_point_normal(c, normal.cross(cb)),
    )

    mask = 0
    for bit, plane in enumerate(planes):
        if plane.plane_dot(point) > 0.0:
            mask |= 1 << bit
    return TriangleRegion(mask)


def closest_point_on_triangle_to_point(
    point: Vector3, a: Vector3, b: Vector3, c: Vector3
) -> Vector3:
    """
    Closest point on triangle abc (including its interior) to ``point``.

    The region comes from the edge half-spaces alone, so outside an obtuse
    vertex a point lying outside both adjacent edges resolves to that
    vertex even when a point on one of those edges is nearer. For
    B=(0,0,0), A=(1,0,0), C=(-1,1,0) the query (-0.9,-0.1,0) returns B
    (distance ~0.906) although (-0.4,0.4,0) on edge BC is at ~0.707.

    Args:
        point: Query point.
        a: First vertex.
        b: Second vertex.
        c: Third vertex.

    Returns:
        Closest point. A zero-area triangle is treated as its three edges.
    """
    if _triangle_normal(a, b, c).size_squared() <= SMALL_NUMBER:
        logger.debug("degenerate_triangle_closest_point")
        return _nearest(
            point,
            (
                closest_point_on_segment(point, a, b),
                closest_point_on_segment(point, b, c),
                closest_point_on_segment(point, c, a),
            ),
        )

    region = classify_triangle_region(point, a, b, c)
    if region == TriangleRegion.IMPOSSIBLE:
        logger.debug("impossible_triangle_region", mask=int(region))
    return TRIANGLE_RESOLVERS[region](point, a, b, c)


# ----------------------------------------------------------------------
# Tetrahedra
# ----------------------------------------------------------------------


class TetrahedronRegion(IntEnum):
    """
    Region of a point relative to a tetrahedron, as a face-plane bitmask.

    Bits follow the faces DCA, DBC, DAB and ACB, in that order, with the
    vertices reordered so that every face winds counter-clockwise seen
    from outside.
    """

    INSIDE = 0
    FACE_DCA = 1
    FACE_DBC = 2
    EDGE_DC = 3
    FACE_DAB = 4
    EDGE_DA = 5
    EDGE_DB = 6
    VERTEX_D = 7
    FACE_ACB = 8
    EDGE_AC = 9
    EDGE_BC = 10
    VERTEX_C = 11
    EDGE_BA = 12
    VERTEX_A = 13
    VERTEX_B = 14
    IMPOSSIBLE = 15


_TetrahedronResolver = Callable[[Vector3, Vector3, Vector3, Vector3, Vector3], Vector3]

_tri = closest_point_on_triangle_to_point
_seg = closest_point_on_segment

TETRAHEDRON_RESOLVERS: dict[TetrahedronRegion, _TetrahedronResolver] = {
    TetrahedronRegion.INSIDE: lambda p, a, b, c, d: p,
    TetrahedronRegion.FACE_DCA: lambda p, a, b, c, d: _tri(p, d, c, a),
    TetrahedronRegion.FACE_DBC: lambda p, a, b, c, d: _tri(p, d, b, c),
    TetrahedronRegion.EDGE_DC: lambda p, a, b, c, d: _seg(p, d, c),
    TetrahedronRegion.FACE_DAB: lambda p, a, b, c, d: _tri(p, d, a, b),
    TetrahedronRegion.EDGE_DA: lambda p, a, b, c, d: _seg(p, d, a),
    TetrahedronRegion.EDGE_DB: lambda p, a, b, c, d: _seg(p, d, b),
    TetrahedronRegion.VERTEX_D: lambda p, a, b, c, d: d,
    TetrahedronRegion.FACE_ACB: lambda p, a, b, c, d: _tri(p, a, c, b),
    TetrahedronRegion.EDGE_AC: lambda p, a, b, c, d: _seg(p, a, c),
    TetrahedronRegion.EDGE_BC: lambda p, a, b, c, d: _seg(p, b, c),
    TetrahedronRegion.VERTEX_C: lambda p, a, b, c, d: c,
    TetrahedronRegion.EDGE_BA: lambda p, a, b, c, d: _seg(p, b, a),
    TetrahedronRegion.VERTEX_A: lambda p, a, b, c, d: a,
    TetrahedronRegion.VERTEX_B: lambda p, a, b, c, d: b,
    TetrahedronRegion.IMPOSSIBLE: lambda p, a, b, c, d: _nearest(p, (a, b, c, d)),
}


def _ordered_tetrahedron(
    a: Vector3, b: Vector3, c: Vector3, d: Vector3
) -> tuple[Vector3, Vector3, Vector3, Vector3]:
    # D must lie on the positive side of ABC; swapping C and D fixes the winding.
    if Plane.from_points(a, b, c).plane_dot(d) < 0.0:
        return a, b, d, c
    return a, b, c, d


def classify_tetrahedron_region(
    point: Vector3, a: Vector3, b: Vector3, c: Vector3, d: Vector3
) -> TetrahedronRegion:
    """Region of ``point`` relative to tetrahedron abcd."""
    a, b, c, d = _ordered_tetrahedron(a, b, c, d)
    planes = (
        Plane.from_points(d, c, a),
        Plane.from_points(d, b, c),
        Plane.from_points(d, a, b),
        Plane.from_points(a, c, b),
    )

    mask = 0
    for bit, plane in enumerate(planes):
        if plane.plane_dot(point) > 0.0:
            mask |= 1 << bit
    return TetrahedronRegion(mask)


def closest_point_on_tetrahedron_to_point(
    point: Vector3, a: Vector3, b: Vector3, c: Vector3, d: Vector3
) -> Vector3:
    """
    Closest point on the solid tetrahedron abcd to ``point``.

    Args:
        point: Query point.
        a: First vertex.
        b: Second vertex.
        c: Third vertex.
        d: Fourth vertex.

    Returns:
        The point itself when inside, otherwise the closest point on a
        face, edge or vertex. A flat (zero-volume) tetrahedron is treated
        as its four faces.
    """
    if abs(Vector3.triple(b - a, c - a, d - a)) <= SMALL_NUMBER:
        logger.debug("degenerate_tetrahedron_closest_point")
        return _nearest(
            point,
            (
                closest_point_on_triangle_to_point(point, a, b, c),
                closest_point_on_triangle_to_point(point, a, b, d),
                closest_point_on_triangle_to_point(point, a, c, d),
                closest_point_on_triangle_to_point(point, b, c, d),
            ),
        )

    region = classify_tetrahedron_region(point, a, b, c, d)
    if region == TetrahedronRegion.IMPOSSIBLE:
        logger.debug("impossible_tetrahedron_region", mask=int(region))

    a, b, c, d = _ordered_tetrahedron(a, b, c, d)
    return TETRAHEDRON_RESOLVERS[region](point, a, b, c, d)

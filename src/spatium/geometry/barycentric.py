"""
Barycentric coordinates for Spatium.

Weights are returned in vertex order, so a point P inside triangle ABC
satisfies P = a*A + b*B + c*C for the returned (a, b, c).
"""

from spatium.core.matrix import Matrix
from spatium.core.vector import Vector3, ZERO_VECTOR
from spatium.core.vector4 import Vector4
from spatium.logging.setup import get_logger

logger = get_logger(__name__)

_ALL_ON_A = Vector3(1.0, 0.0, 0.0)


def get_bary_centric_2d(point: Vector3, a: Vector3, b: Vector3, c: Vector3) -> Vector3:
    """
    Barycentric weights of a point in the XY projection of a triangle.

    Z is ignored. A triangle that is degenerate in XY puts every weight on a.
    """
    denominator = (b.y - c.y) * (a.x - c.x) + (c.x - b.x) * (a.y - c.y)
    if denominator == 0.0:
        logger.debug("degenerate_triangle_barycentric", plane="xy")
        return _ALL_ON_A

    wa = ((b.y - c.y) * (point.x - c.x) + (c.x - b.x) * (point.y - c.y)) / denominator
    wb = ((c.y - a.y) * (point.x - c.x) + (a.x - c.x) * (point.y - c.y)) / denominator
    return Vector3(wa, wb, 1.0 - wa - wb)


def compute_bary_centric_2d(point: Vector3, a: Vector3, b: Vector3, c: Vector3) -> Vector3:
    """
    Barycentric weights of a point relative to a triangle in 3D.

    The point is implicitly projected onto the triangle's plane; each
    weight is the signed area of the opposite sub-triangle over the
    whole area.

    Args:
        point: Query point.
        a: First vertex.
        b: Second vertex.
        c: Third vertex.

    Returns:
        Weights (a, b, c) summing to 1. A zero-area triangle puts every
        weight on a.
    """
    tri_norm = (b - a).cross(c - a)
    n = tri_norm.safe_normal()
    area = n.dot(tri_norm)
    if area == 0.0:
        logger.debug("degenerate_triangle_barycentric", plane="triangle")
        return _ALL_ON_A

    area_inv = 1.0 / area
    wa = n.dot((b - point).cross(c - point)) * area_inv
    wb = n.dot((c - point).cross(a - point)) * area_inv
    return Vector3(wa, wb, 1.0 - wa - wb)


def compute_bary_centric_3d(
    point: Vector3, a: Vector3, b: Vector3, c: Vector3, d: Vector3
) -> Vector4:
    """
    Barycentric weights of a point relative to a tetrahedron.

    Solves for the weights of the edge vectors AB, AC and AD through the
    safe matrix inverse, so a flat tetrahedron degrades to the identity
    solve instead of producing nan.

    Args:
        point: Query point.
        a: First vertex.
        b: Second vertex.
        c: Third vertex.
        d: Fourth vertex.

    Returns:
        Vector4 of weights (a, b, c, d) summing to 1.
    """
    basis = Matrix.from_axes(b - a, c - a, d - a, ZERO_VECTOR)
    weights = basis.inverse_safe().transform_vector(point - a)
    return Vector4(1.0 - weights.x - weights.y - weights.z, weights.x, weights.y, weights.z)

"""Geometric queries for Spatium."""

from spatium.geometry.closest import (
    TetrahedronRegion,
    TriangleRegion,
    closest_point_on_segment,
    closest_point_on_tetrahedron_to_point,
    closest_point_on_triangle_to_point,
    segment_dist_to_segment,
)
from spatium.geometry.intersect import (
    line_box_intersection,
    plane_aabb_intersection,
    segment_plane_intersection,
)
from spatium.geometry.barycentric import compute_bary_centric_2d, compute_bary_centric_3d

__all__ = [
    "TetrahedronRegion",
    "TriangleRegion",
    "closest_point_on_segment",
    "closest_point_on_tetrahedron_to_point",
    "closest_point_on_triangle_to_point",
    "segment_dist_to_segment",
    "line_box_intersection",
    "plane_aabb_intersection",
    "segment_plane_intersection",
    "compute_bary_centric_2d",
    "compute_bary_centric_3d",
]

"""
Bounding volumes for Spatium.

Provides the axis-aligned Box and the Sphere used by the intersection
queries.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Iterable

from spatium.core.constants import KINDA_SMALL_NUMBER
from spatium.core.vector import Vector3, ZERO_VECTOR

if TYPE_CHECKING:
    from spatium.core.matrix import Matrix
    from spatium.core.transform import Transform


@dataclass(frozen=True)
class Box:
    """
    Axis-aligned bounding box.

    Attributes:
        min: Minimum corner.
        max: Maximum corner.
        is_valid: False for an empty box that holds no points yet.
    """

    min: Vector3 = ZERO_VECTOR
    max: Vector3 = ZERO_VECTOR
    is_valid: bool = True

    @classmethod
    def empty(cls) -> "Box":
        """Invalid box ready to be grown with expand_to_include."""
        return cls(ZERO_VECTOR, ZERO_VECTOR, False)

    @classmethod
    def from_points(cls, points: Iterable[Vector3]) -> "Box":
        """Smallest box containing every point (invalid if none)."""
        box = cls.empty()
        for point in points:
            box = box.expand_to_include(point)
        return box

    @classmethod
    def build_aabb(cls, origin: Vector3, extent: Vector3) -> "Box":
        """Box centered on origin with the given half extents."""
        return cls(origin - extent, origin + extent, True)

    def expand_to_include(self, point: Vector3) -> "Box":
        if not self.is_valid:
            return Box(point, point, True)
        return Box(self.min.component_min(point), self.max.component_max(point), True)

    def expand_by(self, amount: float) -> "Box":
        """Grow the box by amount in every direction."""
        offset = Vector3.splat(amount)
        return Box(self.min - offset, self.max + offset, self.is_valid)

    def get_center(self) -> Vector3:
        return (self.min + self.max) * 0.5

    def get_extent(self) -> Vector3:
        return (self.max - self.min) * 0.5

    def is_inside(self, point: Vector3) -> bool:
        """Strict containment test (points on a face are outside)."""
        return (
            self.min.x < point.x < self.max.x
            and self.min.y < point.y < self.max.y
            and self.min.z < point.z < self.max.z
        )


@dataclass(frozen=True)
class Sphere:
    """
    Bounding sphere.

    Attributes:
        center: Sphere center.
        w: Sphere radius.
    """

    center: Vector3 = ZERO_VECTOR
    w: float = 0.0

    @classmethod
    def from_points(cls, points: list[Vector3]) -> "Sphere":
        """
        Bounding sphere around the center of the points' box.

        The radius is padded by 0.1% so every point is strictly inside.

        Args:
            points: Points to enclose.

        Returns:
            Enclosing sphere, or a zero sphere for no points.
        """
        if not points:
            return cls(ZERO_VECTOR, 0.0)

        center = Box.from_points(points).get_center()
        radius_sq = max(Vector3.dist_squared(p, center) for p in points)
        return cls(center, math.sqrt(radius_sq) * 1.001)

    def equals(self, other: "Sphere", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return self.center.equals(other.center, tolerance) and abs(self.w - other.w) < tolerance

    def is_inside(self, other: "Sphere", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Check whether this sphere lies entirely inside other."""
        if self.w > other.w - tolerance:
            return False
        return (self.center - other.center).size_squared() <= (other.w - tolerance - self.w) ** 2

    def transform_by(self, m: "Matrix") -> "Sphere":
        """Transform by a matrix; the radius grows by the largest axis scale."""
        x_axis, y_axis, z_axis = m.get_scaled_axes()
        scale_sq = max(x_axis.size_squared(), y_axis.size_squared(), z_axis.size_squared())
        return Sphere(m.transform_position(self.center), math.sqrt(scale_sq) * self.w)

    def transform_by_transform(self, transform: "Transform") -> "Sphere":
        """Transform by a QST transform."""
        return Sphere(
            transform.transform_position(self.center),
            transform.get_maximum_axis_scale() * self.w,
        )

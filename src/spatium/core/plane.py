"""
Plane type for Spatium.

A plane is stored as a normal (x, y, z) and a scalar w such that points P
on the plane satisfy N.P == W.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import NDArray

from spatium.core.constants import KINDA_SMALL_NUMBER
from spatium.core.vector import Vector3
from spatium.core.vector4 import Vector4

if TYPE_CHECKING:
    from spatium.core.matrix import Matrix


@dataclass(frozen=True)
class Plane:
    """
    Immutable plane N.P = W.

    Attributes:
        x: Normal X component.
        y: Normal Y component.
        z: Normal Z component.
        w: Plane offset along the normal.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    @classmethod
    def from_normal_w(cls, normal: Vector3, w: float) -> "Plane":
        """Plane from a normal and an offset."""
        return cls(normal.x, normal.y, normal.z, w)

    @classmethod
    def from_point_normal(cls, base: Vector3, normal: Vector3) -> "Plane":
        """Plane through base with the given normal (W = base . normal)."""
        return cls(normal.x, normal.y, normal.z, base.dot(normal))

    @classmethod
    def from_points(cls, a: Vector3, b: Vector3, c: Vector3) -> "Plane":
        """
        Plane through three points, wound counter-clockwise.

        A degenerate (collinear) triple gives a zero normal and w = 0.

        Args:
            a: First point.
            b: Second point.
            c: Third point.

        Returns:
            Plane with normal safe_normal((b - a) x (c - a)).
        """
        normal = (b - a).cross(c - a).safe_normal()
        return cls(normal.x, normal.y, normal.z, a.dot(normal))

    @classmethod
    def from_vector4(cls, v: Vector4) -> "Plane":
        return cls(v.x, v.y, v.z, v.w)

    @property
    def normal(self) -> Vector3:
        """Plane normal as a Vector3."""
        return Vector3(self.x, self.y, self.z)

    def to_vector4(self) -> Vector4:
        return Vector4(self.x, self.y, self.z, self.w)

    def to_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    def plane_dot(self, point: Vector3) -> float:
        """Signed distance-like value N.P - W (positive in front)."""
        return self.x * point.x + self.y * point.y + self.z * point.z - self.w

    def flip(self) -> "Plane":
        """Plane facing the opposite direction."""
        return Plane(-self.x, -self.y, -self.z, -self.w)

    def dot4(self, other: "Plane") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def __add__(self, other: "Plane") -> "Plane":
        if not isinstance(other, Plane):
            return NotImplemented
        return Plane(self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w)

    def __sub__(self, other: "Plane") -> "Plane":
        if not isinstance(other, Plane):
            return NotImplemented
        return Plane(self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w)

    def __mul__(self, other: Union[float, "Plane"]) -> "Plane":
        if isinstance(other, Plane):
            return Plane(self.x * other.x, self.y * other.y, self.z * other.z, self.w * other.w)
        if isinstance(other, (int, float)):
            return Plane(self.x * other, self.y * other, self.z * other, self.w * other)
        return NotImplemented

    def equals(self, other: "Plane", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return (
            abs(self.x - other.x) < tolerance
            and abs(self.y - other.y) < tolerance
            and abs(self.z - other.z) < tolerance
            and abs(self.w - other.w) < tolerance
        )

    def contains_nan(self) -> bool:
        return not all(math.isfinite(c) for c in (self.x, self.y, self.z, self.w))

    def transform_by(self, m: "Matrix") -> "Plane":
        """
        Transform the plane by a matrix.

        Args:
            m: Matrix to transform with.

        Returns:
            Transformed plane.
        """
        return self.transform_by_using_adjoint_t(m, m.determinant(), m.transpose_adjoint())

    def transform_by_using_adjoint_t(
        self, m: "Matrix", det_m: float, ta: "Matrix"
    ) -> "Plane":
        """
        Transform the plane with a precomputed transpose-adjoint.

        The normal goes through the transpose-adjoint and is flipped for a
        mirroring (negative determinant) matrix. The point N*W is carried
        through m as a position.

        Args:
            m: Matrix to transform with.
            det_m: Determinant of m.
            ta: Transpose-adjoint of m.

        Returns:
            Transformed plane.
        """
        new_normal = ta.transform_vector(self.normal).safe_normal()
        if det_m < 0.0:
            new_normal = -new_normal

        return Plane.from_point_normal(m.transform_position(self.normal * self.w), new_normal)

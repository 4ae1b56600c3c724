"""
Three-component vector for Spatium.

Provides the Vector3 value type with arithmetic, dot/cross products,
safe normalization and the point/plane helpers the geometric queries are
built from.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, ClassVar, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from spatium.core import scalar
from spatium.core.constants import (
    BIG_NUMBER,
    DELTA,
    KINDA_SMALL_NUMBER,
    PI,
    SMALL_NUMBER,
    THRESH_POINT_ON_PLANE,
    THRESH_POINTS_ARE_SAME,
    THRESH_VECTOR_NORMALIZED,
    THRESH_VECTORS_ARE_PARALLEL,
)

if TYPE_CHECKING:
    from spatium.core.plane import Plane
    from spatium.core.rotator import Rotator


@dataclass(frozen=True)
class Vector3:
    """
    Immutable 3D vector.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    ZERO: ClassVar["Vector3"]
    ONE: ClassVar["Vector3"]
    UP: ClassVar["Vector3"]
    FORWARD: ClassVar["Vector3"]
    RIGHT: ClassVar["Vector3"]

    # ------------------------------------------------------------------
    # Construction and interop
    # ------------------------------------------------------------------

    @classmethod
    def splat(cls, value: float) -> "Vector3":
        """Vector with all three components set to value."""
        return cls(value, value, value)

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Vector3":
        """
        Create a vector from any 3-element array-like.

        Args:
            values: Sequence or numpy array of length 3.

        Returns:
            Vector3 instance.
        """
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != 3:
            raise ValueError(f"Expected 3 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to a numpy array of shape (3,)."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert to a plain tuple."""
        return (self.x, self.y, self.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: "Vector3") -> "Vector3":
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, other: Union[float, "Vector3"]) -> "Vector3":
        if isinstance(other, Vector3):
            return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)
        if isinstance(other, (int, float)):
            return Vector3(self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __rmul__(self, other: float) -> "Vector3":
        if isinstance(other, (int, float)):
            return Vector3(self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __truediv__(self, other: Union[float, "Vector3"]) -> "Vector3":
        if isinstance(other, Vector3):
            return Vector3(
                scalar.ieee_divide(self.x, other.x),
                scalar.ieee_divide(self.y, other.y),
                scalar.ieee_divide(self.z, other.z),
            )
        if isinstance(other, (int, float)):
            return Vector3(
                scalar.ieee_divide(self.x, other),
                scalar.ieee_divide(self.y, other),
                scalar.ieee_divide(self.z, other),
            )
        return NotImplemented

    def dot(self, other: "Vector3") -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        """Cross product self x other."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    # ------------------------------------------------------------------
    # Magnitude and normalization
    # ------------------------------------------------------------------

    def size(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def size_squared(self) -> float:
        """Squared Euclidean length."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def size_2d(self) -> float:
        """Length of the XY projection."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def size_squared_2d(self) -> float:
        """Squared length of the XY projection."""
        return self.x * self.x + self.y * self.y

    def safe_normal(self, tolerance: float = SMALL_NUMBER) -> "Vector3":
        """
        Unit-length copy of this vector, or zero if it is too short.

        Args:
            tolerance: Minimum squared length to normalize.

        Returns:
            Normalized vector, or the zero vector when the squared length is
            below tolerance.
        """
        square_sum = self.size_squared()
        if square_sum == 1.0:
            return self
        if square_sum < tolerance:
            return ZERO_VECTOR
        scale = 1.0 / math.sqrt(square_sum)
        return Vector3(self.x * scale, self.y * scale, self.z * scale)

    def safe_normal_2d(self, tolerance: float = SMALL_NUMBER) -> "Vector3":
        """Unit-length XY projection with z = 0, or zero if too short."""
        square_sum = self.size_squared_2d()
        if square_sum == 1.0:
            if self.z == 0.0:
                return self
            return Vector3(self.x, self.y, 0.0)
        if square_sum < tolerance:
            return ZERO_VECTOR
        scale = 1.0 / math.sqrt(square_sum)
        return Vector3(self.x * scale, self.y * scale, 0.0)

    def unsafe_normal(self) -> "Vector3":
        """Unit-length copy without a zero check (IEEE result for zero)."""
        return self / self.size()

    def is_nearly_zero(self, tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Check whether every component is within tolerance of zero."""
        return (
            abs(self.x) <= tolerance
            and abs(self.y) <= tolerance
            and abs(self.z) <= tolerance
        )

    def is_zero(self) -> bool:
        """Check whether every component is exactly zero."""
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def is_unit(self, length_squared_tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Check whether the squared length is within tolerance of one."""
        return abs(1.0 - self.size_squared()) < length_squared_tolerance

    def is_normalized(self) -> bool:
        """Check whether the vector is normalized within THRESH_VECTOR_NORMALIZED."""
        return abs(1.0 - self.size_squared()) < THRESH_VECTOR_NORMALIZED

    def is_uniform(self, tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Check whether all components are nearly the same value."""
        return abs(self.x - self.y) <= tolerance and abs(self.y - self.z) <= tolerance

    def equals(self, other: "Vector3", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Component-wise comparison within tolerance."""
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )

    def all_components_equal(self, tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Check whether x, y and z are equal within tolerance."""
        return (
            abs(self.x - self.y) <= tolerance
            and abs(self.x - self.z) <= tolerance
            and abs(self.y - self.z) <= tolerance
        )

    def contains_nan(self) -> bool:
        """Check for NaN or infinite components."""
        return not (
            math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)
        )

    # ------------------------------------------------------------------
    # Component helpers
    # ------------------------------------------------------------------

    def get_max(self) -> float:
        return max(self.x, self.y, self.z)

    def get_min(self) -> float:
        return min(self.x, self.y, self.z)

    def get_abs_max(self) -> float:
        return max(abs(self.x), abs(self.y), abs(self.z))

    def get_abs_min(self) -> float:
        return min(abs(self.x), abs(self.y), abs(self.z))

    def get_abs(self) -> "Vector3":
        return Vector3(abs(self.x), abs(self.y), abs(self.z))

    def component_min(self, other: "Vector3") -> "Vector3":
        return Vector3(min(self.x, other.x), min(self.y, other.y), min(self.z, other.z))

    def component_max(self, other: "Vector3") -> "Vector3":
        return Vector3(max(self.x, other.x), max(self.y, other.y), max(self.z, other.z))

    def reciprocal(self) -> "Vector3":
        """Component-wise reciprocal; zero components map to BIG_NUMBER."""
        return Vector3(
            1.0 / self.x if self.x != 0.0 else BIG_NUMBER,
            1.0 / self.y if self.y != 0.0 else BIG_NUMBER,
            1.0 / self.z if self.z != 0.0 else BIG_NUMBER,
        )

    def projection(self) -> "Vector3":
        """Project onto the z = 1 plane (x/z, y/z, 1)."""
        rz = scalar.ieee_divide(1.0, self.z)
        return Vector3(self.x * rz, self.y * rz, 1.0)

    def project_on_to(self, other: "Vector3") -> "Vector3":
        """Projection of this vector onto other (other need not be unit)."""
        return other * scalar.ieee_divide(self.dot(other), other.dot(other))

    def project_on_to_normal(self, normal: "Vector3") -> "Vector3":
        """Projection of this vector onto a unit normal."""
        return normal * self.dot(normal)

    def mirror_by_vector(self, mirror_normal: "Vector3") -> "Vector3":
        """Reflect this vector across the plane with the given unit normal."""
        return self - mirror_normal * (2.0 * self.dot(mirror_normal))

    def mirror_by_plane(self, plane: "Plane") -> "Vector3":
        """Mirror this point across a plane."""
        return self - plane.normal * (2.0 * plane.plane_dot(self))

    def rotate_angle_axis(self, angle_deg: float, axis: "Vector3") -> "Vector3":
        """
        Rotate around an axis.

        Args:
            angle_deg: Angle in degrees.
            axis: Unit rotation axis.

        Returns:
            Rotated vector.
        """
        s = math.sin(angle_deg * PI / 180.0)
        c = math.cos(angle_deg * PI / 180.0)

        xx = axis.x * axis.x
        yy = axis.y * axis.y
        zz = axis.z * axis.z

        xy = axis.x * axis.y
        yz = axis.y * axis.z
        zx = axis.z * axis.x

        xs = axis.x * s
        ys = axis.y * s
        zs = axis.z * s

        omc = 1.0 - c

        return Vector3(
            (omc * xx + c) * self.x + (omc * xy - zs) * self.y + (omc * zx + ys) * self.z,
            (omc * xy + zs) * self.x + (omc * yy + c) * self.y + (omc * yz - xs) * self.z,
            (omc * zx - ys) * self.x + (omc * yz + xs) * self.y + (omc * zz + c) * self.z,
        )

    def grid_snap(self, grid_size: float) -> "Vector3":
        return Vector3(
            scalar.grid_snap(self.x, grid_size),
            scalar.grid_snap(self.y, grid_size),
            scalar.grid_snap(self.z, grid_size),
        )

    def bound_to_cube(self, radius: float) -> "Vector3":
        """Clamp every component into [-radius, radius]."""
        return Vector3(
            scalar.clamp(self.x, -radius, radius),
            scalar.clamp(self.y, -radius, radius),
            scalar.clamp(self.z, -radius, radius),
        )

    def get_clamped_to_size(self, min_size: float, max_size: float) -> "Vector3":
        """Copy with its length clamped into [min_size, max_size]."""
        length = self.size()
        if length > SMALL_NUMBER:
            return self * (scalar.clamp(length, min_size, max_size) / length)
        return ZERO_VECTOR

    def get_clamped_to_max_size(self, max_size: float) -> "Vector3":
        """Copy with its length clamped to at most max_size."""
        if max_size < KINDA_SMALL_NUMBER:
            return ZERO_VECTOR

        square_size = self.size_squared()
        if square_size > max_size * max_size:
            return self * (max_size / math.sqrt(square_size))
        return self

    def unwind_euler(self) -> "Vector3":
        """Unwind each component (degrees) into [-180, 180]."""
        return Vector3(
            scalar.unwind_degrees(self.x),
            scalar.unwind_degrees(self.y),
            scalar.unwind_degrees(self.z),
        )

    def heading_angle(self) -> float:
        """Angle in radians of the XY projection around the Z axis."""
        plane_dir = Vector3(self.x, self.y, 0.0).safe_normal()
        angle = math.acos(scalar.clamp(plane_dir.x, -1.0, 1.0))
        if plane_dir.y < 0.0:
            angle = -angle
        return angle

    # ------------------------------------------------------------------
    # Basis helpers
    # ------------------------------------------------------------------

    def find_best_axis_vectors(self) -> tuple["Vector3", "Vector3"]:
        """
        Find two axes orthogonal to this (unit) vector.

        Returns:
            Tuple (axis1, axis2) completing an orthogonal basis.
        """
        nx = abs(self.x)
        ny = abs(self.y)
        nz = abs(self.z)

        if nz > nx and nz > ny:
            axis1 = Vector3(1.0, 0.0, 0.0)
        else:
            axis1 = Vector3(0.0, 0.0, 1.0)

        axis1 = (axis1 - self * axis1.dot(self)).safe_normal()
        axis2 = axis1.cross(self)
        return axis1, axis2

    @staticmethod
    def create_orthonormal_basis(
        x_axis: "Vector3", y_axis: "Vector3", z_axis: "Vector3"
    ) -> tuple["Vector3", "Vector3", "Vector3"]:
        """
        Orthonormalize three axes around the Z axis.

        X and Y are projected onto the plane perpendicular to Z. An axis
        that collapses because it was parallel to Z is rebuilt from the
        cross product of the other two.

        Args:
            x_axis: Approximate X axis.
            y_axis: Approximate Y axis.
            z_axis: Z axis (kept, only normalized).

        Returns:
            Normalized (x, y, z) axes.
        """
        zz = z_axis.dot(z_axis)
        x_axis = x_axis - z_axis * scalar.ieee_divide(x_axis.dot(z_axis), zz)
        y_axis = y_axis - z_axis * scalar.ieee_divide(y_axis.dot(z_axis), zz)

        if x_axis.size_squared() < DELTA * DELTA:
            x_axis = y_axis.cross(z_axis)

        if y_axis.size_squared() < DELTA * DELTA:
            y_axis = x_axis.cross(z_axis)

        return x_axis.safe_normal(), y_axis.safe_normal(), z_axis.safe_normal()

    def to_rotator(self) -> "Rotator":
        """Rotator pointing along this direction (roll is zero)."""
        from spatium.core.rotator import Rotator

        return Rotator.from_direction(self)

    # ------------------------------------------------------------------
    # Point / plane helpers
    # ------------------------------------------------------------------

    @staticmethod
    def dist(v1: "Vector3", v2: "Vector3") -> float:
        return (v2 - v1).size()

    @staticmethod
    def dist_squared(v1: "Vector3", v2: "Vector3") -> float:
        return (v2 - v1).size_squared()

    @staticmethod
    def triple(x: "Vector3", y: "Vector3", z: "Vector3") -> float:
        """Scalar triple product x . (y x z)."""
        return x.dot(y.cross(z))

    @staticmethod
    def point_plane_dist(
        point: "Vector3", plane_base: "Vector3", plane_normal: "Vector3"
    ) -> float:
        """Signed distance from a point to a plane given by base and normal."""
        return (point - plane_base).dot(plane_normal)

    @staticmethod
    def point_plane_project(point: "Vector3", plane: "Plane") -> "Vector3":
        """Project a point onto a plane along the plane normal."""
        return point - plane.normal * plane.plane_dot(point)

    @staticmethod
    def point_plane_project_points(
        point: "Vector3", a: "Vector3", b: "Vector3", c: "Vector3"
    ) -> "Vector3":
        """Project a point onto the plane through three points."""
        from spatium.core.plane import Plane

        return Vector3.point_plane_project(point, Plane.from_points(a, b, c))

    @staticmethod
    def vector_plane_project(v: "Vector3", plane_normal: "Vector3") -> "Vector3":
        """Remove the component of v along plane_normal."""
        return v - v.project_on_to_normal(plane_normal)

    @staticmethod
    def points_are_same(p: "Vector3", q: "Vector3") -> bool:
        return (
            abs(p.x - q.x) < THRESH_POINTS_ARE_SAME
            and abs(p.y - q.y) < THRESH_POINTS_ARE_SAME
            and abs(p.z - q.z) < THRESH_POINTS_ARE_SAME
        )

    @staticmethod
    def points_are_near(p1: "Vector3", p2: "Vector3", dist: float) -> bool:
        return (
            abs(p1.x - p2.x) < dist
            and abs(p1.y - p2.y) < dist
            and abs(p1.z - p2.z) < dist
        )

    @staticmethod
    def parallel(normal1: "Vector3", normal2: "Vector3") -> bool:
        """Check whether two unit normals point the same way."""
        return abs(normal1.dot(normal2) - 1.0) <= THRESH_VECTORS_ARE_PARALLEL

    @staticmethod
    def coplanar(
        base1: "Vector3", normal1: "Vector3", base2: "Vector3", normal2: "Vector3"
    ) -> bool:
        """Check whether two planes given by base and normal coincide."""
        if not Vector3.parallel(normal1, normal2):
            return False
        if abs(Vector3.point_plane_dist(base2, base1, normal1)) > THRESH_POINT_ON_PLANE:
            return False
        return True


ZERO_VECTOR = Vector3(0.0, 0.0, 0.0)
ONE_VECTOR = Vector3(1.0, 1.0, 1.0)
UP_VECTOR = Vector3(0.0, 0.0, 1.0)
FORWARD_VECTOR = Vector3(1.0, 0.0, 0.0)
RIGHT_VECTOR = Vector3(0.0, 1.0, 0.0)

Vector3.ZERO = ZERO_VECTOR
Vector3.ONE = ONE_VECTOR
Vector3.UP = UP_VECTOR
Vector3.FORWARD = FORWARD_VECTOR
Vector3.RIGHT = RIGHT_VECTOR

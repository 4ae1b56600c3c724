"""
Quaternion algebra for Spatium.

Provides the Quaternion value type, rotation composition, logarithm and
exponential maps, and the slerp/squad interpolation family.

Composition order: compose(first, second) returns the rotation that
applies ``first`` and then ``second``, which is the Hamilton product
``second * first``.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from spatium.core import scalar
from spatium.core.constants import (
    KINDA_SMALL_NUMBER,
    PI,
    SMALL_NUMBER,
    THRESH_QUAT_NORMALIZED,
)
from spatium.core.vector import Vector3
from spatium.core.vector4 import Vector4
from spatium.logging.setup import get_logger

if TYPE_CHECKING:
    from spatium.core.matrix import Matrix
    from spatium.core.rotator import Rotator

logger = get_logger(__name__)

# Below this cosine slerp switches to the sine formula.
SLERP_LINEAR_THRESHOLD = 0.9999


@dataclass(frozen=True)
class Quaternion:
    """
    Immutable quaternion (x, y, z, w).

    When used as a rotation the quaternion is expected to be unit length.
    The identity is (0, 0, 0, 1).

    Attributes:
        x: X component of the vector part.
        y: Y component of the vector part.
        z: Z component of the vector part.
        w: Scalar part.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle_rad: float) -> "Quaternion":
        """
        Rotation of angle_rad radians around a unit axis.

        Args:
            axis: Unit rotation axis.
            angle_rad: Rotation angle in radians.

        Returns:
            Unit quaternion.
        """
        half = 0.5 * angle_rad
        s = math.sin(half)
        return cls(s * axis.x, s * axis.y, s * axis.z, math.cos(half))

    @classmethod
    def from_matrix(cls, m: "Matrix") -> "Quaternion":
        """
        Rotation part of a matrix.

        Uses the trace when positive, otherwise the largest diagonal element,
        to keep the square root well conditioned. A matrix whose three axes
        are all nearly zero yields the identity.

        Args:
            m: Matrix with an orthonormal upper 3x3.

        Returns:
            Quaternion for the matrix rotation.
        """
        mm = m.m
        x_axis, y_axis, z_axis = m.get_scaled_axes()
        if x_axis.is_nearly_zero() and y_axis.is_nearly_zero() and z_axis.is_nearly_zero():
            logger.debug("zero_matrix_to_quat")
            return IDENTITY_QUAT

        trace = float(mm[0, 0] + mm[1, 1] + mm[2, 2])
        if trace > 0.0:
            inv_s = 1.0 / math.sqrt(trace + 1.0)
            w = 0.5 / inv_s
            s = 0.5 * inv_s
            return cls(
                float(mm[1, 2] - mm[2, 1]) * s,
                float(mm[2, 0] - mm[0, 2]) * s,
                float(mm[0, 1] - mm[1, 0]) * s,
                w,
            )

        i = 0
        if mm[1, 1] > mm[0, 0]:
            i = 1
        if mm[2, 2] > mm[i, i]:
            i = 2

        nxt = (1, 2, 0)
        j = nxt[i]
        k = nxt[j]

        s = float(mm[i, i] - mm[j, j] - mm[k, k]) + 1.0
        inv_s = 1.0 / math.sqrt(s)

        qt = [0.0, 0.0, 0.0, 0.0]
        qt[i] = 0.5 / inv_s
        s = 0.5 * inv_s
        qt[3] = float(mm[j, k] - mm[k, j]) * s
        qt[j] = float(mm[i, j] + mm[j, i]) * s
        qt[k] = float(mm[i, k] + mm[k, i]) * s

        return cls(qt[0], qt[1], qt[2], qt[3])

    @classmethod
    def from_rotator(cls, rotator: "Rotator") -> "Quaternion":
        """Quaternion for an Euler rotation."""
        return rotator.to_quat()

    @classmethod
    def make_from_euler(cls, euler: Vector3) -> "Quaternion":
        """Quaternion from (roll, pitch, yaw) degrees, via the rotation matrix."""
        from spatium.core.matrix_builders import rotation_matrix
        from spatium.core.rotator import Rotator

        return cls.from_matrix(rotation_matrix(Rotator.make_from_euler(euler)))

    @classmethod
    def find_between(cls, a: Vector3, b: Vector3) -> "Quaternion":
        """
        Shortest rotation taking direction a onto direction b.

        Parallel vectors give the identity. Opposite vectors give a half
        turn around an axis orthogonal to both.

        Args:
            a: Start direction (unit length).
            b: End direction (unit length).

        Returns:
            Unit quaternion rotating a onto b.
        """
        cross = a.cross(b)
        cross_mag = cross.size()

        if cross_mag < KINDA_SMALL_NUMBER:
            if a.dot(b) > -KINDA_SMALL_NUMBER:
                return IDENTITY_QUAT

            vec = a if a.size_squared() > b.size_squared() else b
            axis, _ = vec.safe_normal().find_best_axis_vectors()
            return cls(axis.x, axis.y, axis.z, 0.0)

        angle = math.asin(min(cross_mag, 1.0))
        if a.dot(b) < 0.0:
            angle = PI - angle

        sin_half = math.sin(0.5 * angle)
        cos_half = math.cos(0.5 * angle)
        axis = cross / cross_mag
        return cls(sin_half * axis.x, sin_half * axis.y, sin_half * axis.z, cos_half)

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Quaternion":
        """Create from an (x, y, z, w) array-like."""
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != 4:
            raise ValueError(f"Expected 4 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]), float(arr[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to an (x, y, z, w) numpy array."""
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def multiply(self, other: "Quaternion") -> "Quaternion":
        """
        Hamilton product self * other.

        As a rotation the result applies ``other`` first and then ``self``.
        Prefer compose() where the order should be explicit.
        """
        return Quaternion(
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def __add__(self, other: "Quaternion") -> "Quaternion":
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion(
            self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w
        )

    def __sub__(self, other: "Quaternion") -> "Quaternion":
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion(
            self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w
        )

    def __neg__(self) -> "Quaternion":
        return Quaternion(-self.x, -self.y, -self.z, -self.w)

    def __mul__(self, other: float) -> "Quaternion":
        # Scalar scaling only; rotation composition goes through compose().
        if isinstance(other, (int, float)):
            return Quaternion(self.x * other, self.y * other, self.z * other, self.w * other)
        return NotImplemented

    def __rmul__(self, other: float) -> "Quaternion":
        return self.__mul__(other)

    def __truediv__(self, other: float) -> "Quaternion":
        if isinstance(other, (int, float)):
            return Quaternion(
                scalar.ieee_divide(self.x, other),
                scalar.ieee_divide(self.y, other),
                scalar.ieee_divide(self.z, other),
                scalar.ieee_divide(self.w, other),
            )
        return NotImplemented

    def dot(self, other: "Quaternion") -> float:
        """Four-component dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def inverse(self) -> "Quaternion":
        """Inverse of a unit quaternion (its conjugate)."""
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def size(self) -> float:
        return math.sqrt(self.size_squared())

    def size_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w

    def normalized(self, tolerance: float = SMALL_NUMBER) -> "Quaternion":
        """
        Unit-length copy.

        Args:
            tolerance: Minimum squared size to normalize.

        Returns:
            Normalized quaternion, or the identity when too short.
        """
        square_sum = self.size_squared()
        if square_sum >= tolerance:
            scale = 1.0 / math.sqrt(square_sum)
            return Quaternion(self.x * scale, self.y * scale, self.z * scale, self.w * scale)
        return IDENTITY_QUAT

    def is_normalized(self) -> bool:
        return abs(1.0 - self.size_squared()) < THRESH_QUAT_NORMALIZED

    def equals(self, other: "Quaternion", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """True if other is within tolerance of this quaternion or its negation."""
        same = (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
            and abs(self.w - other.w) <= tolerance
        )
        opposite = (
            abs(self.x + other.x) <= tolerance
            and abs(self.y + other.y) <= tolerance
            and abs(self.z + other.z) <= tolerance
            and abs(self.w + other.w) <= tolerance
        )
        return same or opposite

    def contains_nan(self) -> bool:
        return not all(math.isfinite(c) for c in (self.x, self.y, self.z, self.w))

    def enforce_shortest_arc_with(self, other: "Quaternion") -> "Quaternion":
        """Negate this quaternion if it lies on the far hemisphere from other."""
        if self.dot(other) < 0.0:
            return -self
        return self

    # ------------------------------------------------------------------
    # Rotation of vectors
    # ------------------------------------------------------------------

    def rotate_vector(self, v: Vector3) -> Vector3:
        """
        Rotate a vector by this (unit) quaternion.

        Args:
            v: Vector to rotate.

        Returns:
            q * v * q^-1.
        """
        q = Vector3(self.x, self.y, self.z)
        t = q.cross(v) * 2.0
        return v + t * self.w + q.cross(t)

    def unrotate_vector(self, v: Vector3) -> Vector3:
        """Rotate a vector by the inverse of this quaternion."""
        return self.inverse().rotate_vector(v)

    def rotate_vector4(self, v: Vector4) -> Vector4:
        """Rotate the xyz part of a Vector4, keeping w."""
        return Vector4.from_vector3(self.rotate_vector(v.to_vector3()), v.w)

    def get_axis_x(self) -> Vector3:
        return self.rotate_vector(Vector3(1.0, 0.0, 0.0))

    def get_axis_y(self) -> Vector3:
        return self.rotate_vector(Vector3(0.0, 1.0, 0.0))

    def get_axis_z(self) -> Vector3:
        return self.rotate_vector(Vector3(0.0, 0.0, 1.0))

    # ------------------------------------------------------------------
    # Axis-angle and distance
    # ------------------------------------------------------------------

    def get_angle(self) -> float:
        """Rotation angle in radians, in [0, 2*pi]."""
        return 2.0 * math.acos(scalar.clamp(self.w, -1.0, 1.0))

    def get_rotation_axis(self) -> Vector3:
        """Rotation axis; (1, 0, 0) when the angle is nearly zero."""
        s = math.sqrt(max(1.0 - self.w * self.w, 0.0))
        if s >= 0.0001:
            return Vector3(self.x / s, self.y / s, self.z / s)
        return Vector3(1.0, 0.0, 0.0)

    def to_axis_and_angle(self) -> tuple[Vector3, float]:
        """Decompose into (unit axis, angle in radians)."""
        return self.get_rotation_axis(), self.get_angle()

    def angular_distance(self, other: "Quaternion") -> float:
        """Angle in radians between two rotations."""
        inner = self.dot(other)
        return math.acos(scalar.clamp(2.0 * inner * inner - 1.0, -1.0, 1.0))

    # ------------------------------------------------------------------
    # Log / exp
    # ------------------------------------------------------------------

    def log(self) -> "Quaternion":
        """
        Logarithm of a unit quaternion.

        Returns:
            Pure quaternion (w = 0) holding axis * angle. For a nearly zero
            angle the vector part is copied through unchanged.
        """
        if abs(self.w) < 1.0:
            angle = math.acos(self.w)
            sin_angle = math.sin(angle)
            if abs(sin_angle) >= SMALL_NUMBER:
                scale = angle / sin_angle
                return Quaternion(scale * self.x, scale * self.y, scale * self.z, 0.0)

        return Quaternion(self.x, self.y, self.z, 0.0)

    def exp(self) -> "Quaternion":
        """
        Exponential of a pure quaternion.

        Returns:
            Unit quaternion. For a nearly zero angle the vector part is
            copied through unchanged.
        """
        angle = math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)
        sin_angle = math.sin(angle)
        w = math.cos(angle)

        if abs(sin_angle) >= SMALL_NUMBER:
            scale = sin_angle / angle
            return Quaternion(scale * self.x, scale * self.y, scale * self.z, w)

        return Quaternion(self.x, self.y, self.z, w)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_matrix(self) -> "Matrix":
        """Rotation matrix for this quaternion (no translation)."""
        from spatium.core.matrix_builders import quat_rotation_translation_matrix
        from spatium.core.vector import ZERO_VECTOR

        return quat_rotation_translation_matrix(self, ZERO_VECTOR)

    def to_rotator(self) -> "Rotator":
        """Euler rotation for this quaternion, decomposed from the matrix."""
        return self.to_matrix().to_rotator()

    def euler(self) -> Vector3:
        """Euler angles as (roll, pitch, yaw) degrees."""
        return self.to_rotator().euler()


IDENTITY_QUAT = Quaternion(0.0, 0.0, 0.0, 1.0)


def compose(first: Quaternion, second: Quaternion) -> Quaternion:
    """
    Rotation that applies ``first`` and then ``second``.

    Args:
        first: Rotation applied first.
        second: Rotation applied second.

    Returns:
        The Hamilton product second * first.
    """
    return second.multiply(first)


def slerp(quat1: Quaternion, quat2: Quaternion, alpha: float) -> Quaternion:
    """
    Spherical linear interpolation along the shortest arc.

    A negative dot product flips the sign of the second weight, so the
    interpolation never takes the long way round. Nearly identical
    rotations fall back to linear weights. The result is not renormalized.

    Args:
        quat1: Start rotation.
        quat2: End rotation.
        alpha: Interpolation parameter in [0, 1].

    Returns:
        Interpolated quaternion.
    """
    if quat1 == quat2:
        return quat1

    raw_cosom = quat1.dot(quat2)
    cosom = raw_cosom if raw_cosom >= 0.0 else -raw_cosom

    if cosom < SLERP_LINEAR_THRESHOLD:
        omega = math.acos(cosom)
        inv_sin = 1.0 / math.sin(omega)
        scale0 = math.sin((1.0 - alpha) * omega) * inv_sin
        scale1 = math.sin(alpha * omega) * inv_sin
    else:
        scale0 = 1.0 - alpha
        scale1 = alpha

    if raw_cosom < 0.0:
        scale1 = -scale1

    return Quaternion(
        scale0 * quat1.x + scale1 * quat2.x,
        scale0 * quat1.y + scale1 * quat2.y,
        scale0 * quat1.z + scale1 * quat2.z,
        scale0 * quat1.w + scale1 * quat2.w,
    )


def slerp_full_path(quat1: Quaternion, quat2: Quaternion, alpha: float) -> Quaternion:
    """
    Spherical interpolation without the shortest-path correction.

    Args:
        quat1: Start rotation.
        quat2: End rotation.
        alpha: Interpolation parameter in [0, 1].

    Returns:
        Interpolated quaternion, or quat1 unchanged when the angle between
        the operands is below KINDA_SMALL_NUMBER.
    """
    cos_angle = scalar.clamp(quat1.dot(quat2), -1.0, 1.0)
    angle = math.acos(cos_angle)

    if abs(angle) < KINDA_SMALL_NUMBER:
        return quat1

    inv_sin_angle = 1.0 / math.sin(angle)
    scale0 = math.sin((1.0 - alpha) * angle) * inv_sin_angle
    scale1 = math.sin(alpha * angle) * inv_sin_angle

    return quat1 * scale0 + quat2 * scale1


def squad(
    quat1: Quaternion,
    tang1: Quaternion,
    quat2: Quaternion,
    tang2: Quaternion,
    alpha: float,
) -> Quaternion:
    """
    Spherical quadrangle (cubic) interpolation.

    Args:
        quat1: Start rotation.
        tang1: Tangent control rotation at the start.
        quat2: End rotation.
        tang2: Tangent control rotation at the end.
        alpha: Interpolation parameter in [0, 1].

    Returns:
        Interpolated quaternion.
    """
    q1 = slerp_full_path(quat1, quat2, alpha)
    q2 = slerp_full_path(tang1, tang2, alpha)
    return slerp_full_path(q1, q2, 2.0 * alpha * (1.0 - alpha))


def fast_lerp(a: Quaternion, b: Quaternion, alpha: float) -> Quaternion:
    """
    Linear blend that flips a to b's hemisphere. Not normalized.

    Args:
        a: Start rotation.
        b: End rotation.
        alpha: Blend weight of b.

    Returns:
        Unnormalized blended quaternion.
    """
    bias = 1.0 if a.dot(b) >= 0.0 else -1.0
    return b * alpha + a * (bias * (1.0 - alpha))


def fast_bilerp(
    p00: Quaternion,
    p10: Quaternion,
    p01: Quaternion,
    p11: Quaternion,
    frac_x: float,
    frac_y: float,
) -> Quaternion:
    """Bilinear version of fast_lerp. Not normalized."""
    return fast_lerp(
        fast_lerp(p00, p10, frac_x),
        fast_lerp(p01, p11, frac_x),
        frac_y,
    )


def calc_tangents(
    prev_p: Quaternion, p: Quaternion, next_p: Quaternion, tension: float
) -> Quaternion:
    """
    Squad tangent at p from its neighbours.

    Args:
        prev_p: Previous key rotation.
        p: Key rotation.
        next_p: Next key rotation.
        tension: Currently ignored.

    Returns:
        Tangent quaternion for use with squad().
    """
    inv_p = p.inverse()
    part1 = inv_p.multiply(prev_p).log()
    part2 = inv_p.multiply(next_p).log()

    pre_exp = (part1 + part2) * -0.5
    return p.multiply(pre_exp.exp())

"""
Euler rotations for Spatium.

A Rotator holds pitch (about Y), yaw (about Z) and roll (about X) in
degrees. The same orientation has many Rotator spellings; normalization
maps each axis into (-180, 180] and winding can be split off separately.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, ClassVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

from spatium.core import scalar
from spatium.core.constants import Axis, KINDA_SMALL_NUMBER
from spatium.core.vector import Vector3

if TYPE_CHECKING:
    from spatium.core.matrix import Matrix
    from spatium.core.quat import Quaternion


@dataclass(frozen=True)
class Rotator:
    """
    Immutable Euler rotation in degrees.

    Attributes:
        pitch: Rotation about the right (Y) axis; nose up is positive.
        yaw: Rotation about the up (Z) axis; turning right is positive.
        roll: Rotation about the forward (X) axis; right wing down is positive.
    """

    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0

    ZERO: ClassVar["Rotator"]

    @classmethod
    def from_direction(cls, direction: Vector3) -> "Rotator":
        """
        Rotator that points the X axis along a direction.

        Roll is always zero; a direction carries no twist.

        Args:
            direction: Any non-zero vector.

        Returns:
            Rotator with pitch and yaw set.
        """
        yaw = math.degrees(math.atan2(direction.y, direction.x))
        pitch = math.degrees(
            math.atan2(direction.z, math.sqrt(direction.x ** 2 + direction.y ** 2))
        )
        return cls(pitch, yaw, 0.0)

    @classmethod
    def make_from_euler(cls, euler: Vector3) -> "Rotator":
        """Rotator from (roll, pitch, yaw) packed in x, y, z."""
        return cls(euler.y, euler.z, euler.x)

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Rotator":
        """Create from a (pitch, yaw, roll) array-like."""
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != 3:
            raise ValueError(f"Expected 3 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to a (pitch, yaw, roll) numpy array."""
        return np.array([self.pitch, self.yaw, self.roll], dtype=np.float64)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: "Rotator") -> "Rotator":
        if not isinstance(other, Rotator):
            return NotImplemented
        return Rotator(self.pitch + other.pitch, self.yaw + other.yaw, self.roll + other.roll)

    def __sub__(self, other: "Rotator") -> "Rotator":
        if not isinstance(other, Rotator):
            return NotImplemented
        return Rotator(self.pitch - other.pitch, self.yaw - other.yaw, self.roll - other.roll)

    def __neg__(self) -> "Rotator":
        return Rotator(-self.pitch, -self.yaw, -self.roll)

    def __mul__(self, scale: float) -> "Rotator":
        if not isinstance(scale, (int, float)):
            return NotImplemented
        return Rotator(self.pitch * scale, self.yaw * scale, self.roll * scale)

    def __rmul__(self, scale: float) -> "Rotator":
        return self.__mul__(scale)

    def add(self, delta_pitch: float, delta_yaw: float, delta_roll: float) -> "Rotator":
        return Rotator(self.pitch + delta_pitch, self.yaw + delta_yaw, self.roll + delta_roll)

    def grid_snap(self, rot_grid: "Rotator") -> "Rotator":
        """Snap each axis to the matching axis of rot_grid."""
        return Rotator(
            scalar.grid_snap(self.pitch, rot_grid.pitch),
            scalar.grid_snap(self.yaw, rot_grid.yaw),
            scalar.grid_snap(self.roll, rot_grid.roll),
        )

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def equals(self, other: "Rotator", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """
        Compare orientations axis by axis, ignoring whole turns.

        Args:
            other: Rotator to compare with.
            tolerance: Allowed difference per axis in degrees.

        Returns:
            True if every normalized axis difference is within tolerance.
        """
        return (
            abs(self.normalize_axis(self.pitch - other.pitch)) < tolerance
            and abs(self.normalize_axis(self.yaw - other.yaw)) < tolerance
            and abs(self.normalize_axis(self.roll - other.roll)) < tolerance
        )

    def is_nearly_zero(self, tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return (
            abs(self.normalize_axis(self.pitch)) < tolerance
            and abs(self.normalize_axis(self.yaw)) < tolerance
            and abs(self.normalize_axis(self.roll)) < tolerance
        )

    def is_zero(self) -> bool:
        return (
            self.clamp_axis(self.pitch) == 0.0
            and self.clamp_axis(self.yaw) == 0.0
            and self.clamp_axis(self.roll) == 0.0
        )

    def contains_nan(self) -> bool:
        return not all(math.isfinite(a) for a in (self.pitch, self.yaw, self.roll))

    # ------------------------------------------------------------------
    # Axis ranges
    # ------------------------------------------------------------------

    @staticmethod
    def clamp_axis(angle: float) -> float:
        """Angle mapped into [0, 360)."""
        return scalar.clamp_axis(angle)

    @staticmethod
    def normalize_axis(angle: float) -> float:
        """Angle mapped into (-180, 180]."""
        return scalar.normalize_axis(angle)

    def clamp(self) -> "Rotator":
        """Every axis mapped into [0, 360)."""
        return Rotator(
            self.clamp_axis(self.pitch), self.clamp_axis(self.yaw), self.clamp_axis(self.roll)
        )

    def get_normalized(self) -> "Rotator":
        """Every axis mapped into (-180, 180]: the shortest-route spelling."""
        return Rotator(
            self.normalize_axis(self.pitch),
            self.normalize_axis(self.yaw),
            self.normalize_axis(self.roll),
        )

    def get_denormalized(self) -> "Rotator":
        return self.clamp()

    def get_winding_and_remainder(self) -> tuple["Rotator", "Rotator"]:
        """
        Split into whole turns and a normalized remainder.

        Returns:
            Tuple (winding, remainder). Each winding axis is a multiple of
            360, each remainder axis lies in (-180, 180], and
            winding + remainder equals this rotator.
        """
        remainder = self.get_normalized()
        winding = Rotator(
            self.pitch - remainder.pitch,
            self.yaw - remainder.yaw,
            self.roll - remainder.roll,
        )
        return winding, remainder

    # ------------------------------------------------------------------
    # Compression
    # ------------------------------------------------------------------

    @staticmethod
    def compress_axis_to_byte(angle: float) -> int:
        """Map [0, 360) onto [0, 256), masking off winding."""
        return int(math.floor(angle * 256.0 / 360.0 + 0.5)) & 0xFF

    @staticmethod
    def decompress_axis_from_byte(angle: int) -> float:
        return angle * 360.0 / 256.0

    @staticmethod
    def compress_axis_to_short(angle: float) -> int:
        """Map [0, 360) onto [0, 65536), masking off winding."""
        return int(math.floor(angle * 65536.0 / 360.0 + 0.5)) & 0xFFFF

    @staticmethod
    def decompress_axis_from_short(angle: int) -> float:
        return angle * 360.0 / 65536.0

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_matrix(self) -> "Matrix":
        from spatium.core.matrix_builders import rotation_matrix

        return rotation_matrix(self)

    def to_quat(self) -> "Quaternion":
        """
        Quaternion for this rotation, built from half-angle products.

        Returns:
            Unit quaternion.
        """
        from spatium.core.quat import Quaternion

        half = math.radians(0.5)
        cr, sr = math.cos(self.roll * half), math.sin(self.roll * half)
        cp, sp = math.cos(self.pitch * half), math.sin(self.pitch * half)
        cy, sy = math.cos(self.yaw * half), math.sin(self.yaw * half)

        return Quaternion(
            cr * sp * sy - sr * cp * cy,
            -cr * sp * cy - sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
            cr * cp * cy + sr * sp * sy,
        )

    def vector(self) -> Vector3:
        """Unit direction the rotated X axis points along."""
        return self.to_matrix().get_scaled_axis(Axis.X)

    def euler(self) -> Vector3:
        """Angles packed as (roll, pitch, yaw)."""
        return Vector3(self.roll, self.pitch, self.yaw)

    def rotate_vector(self, v: Vector3) -> Vector3:
        return self.to_matrix().transform_vector(v)

    def unrotate_vector(self, v: Vector3) -> Vector3:
        """Apply the inverse rotation (the transposed rotation matrix)."""
        return self.to_matrix().get_transposed().transform_vector(v)


ZERO_ROTATOR = Rotator(0.0, 0.0, 0.0)
Rotator.ZERO = ZERO_ROTATOR

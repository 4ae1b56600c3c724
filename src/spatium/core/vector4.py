"""
Four-component vector for Spatium.

Vector4 carries homogeneous coordinates: w is conventionally 1 for
positions and 0 for directions, but the type itself does not enforce it.
"""

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from spatium.core import scalar
from spatium.core.constants import KINDA_SMALL_NUMBER, SMALL_NUMBER
from spatium.core.vector import Vector3

if TYPE_CHECKING:
    from spatium.core.rotator import Rotator


@dataclass(frozen=True)
class Vector4:
    """
    Immutable 4D vector.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
        w: W component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def from_vector3(cls, v: Vector3, w: float = 1.0) -> "Vector4":
        """Extend a Vector3 with the given w."""
        return cls(v.x, v.y, v.z, w)

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Vector4":
        """Create from a 4-element array-like."""
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != 4:
            raise ValueError(f"Expected 4 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]), float(arr[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to a numpy array of shape (4,)."""
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    def to_vector3(self) -> Vector3:
        """Drop the w component."""
        return Vector3(self.x, self.y, self.z)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z, self.w)[index]

    def __add__(self, other: "Vector4") -> "Vector4":
        if not isinstance(other, Vector4):
            return NotImplemented
        return Vector4(
            self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w
        )

    def __sub__(self, other: "Vector4") -> "Vector4":
        if not isinstance(other, Vector4):
            return NotImplemented
        return Vector4(
            self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w
        )

    def __neg__(self) -> "Vector4":
        return Vector4(-self.x, -self.y, -self.z, -self.w)

    def __mul__(self, other: Union[float, "Vector4"]) -> "Vector4":
        if isinstance(other, Vector4):
            return Vector4(
                self.x * other.x, self.y * other.y, self.z * other.z, self.w * other.w
            )
        if isinstance(other, (int, float)):
            return Vector4(self.x * other, self.y * other, self.z * other, self.w * other)
        return NotImplemented

    def __rmul__(self, other: float) -> "Vector4":
        if isinstance(other, (int, float)):
            return Vector4(self.x * other, self.y * other, self.z * other, self.w * other)
        return NotImplemented

    def __truediv__(self, other: Union[float, "Vector4"]) -> "Vector4":
        if isinstance(other, Vector4):
            return Vector4(
                scalar.ieee_divide(self.x, other.x),
                scalar.ieee_divide(self.y, other.y),
                scalar.ieee_divide(self.z, other.z),
                scalar.ieee_divide(self.w, other.w),
            )
        if isinstance(other, (int, float)):
            return Vector4(
                scalar.ieee_divide(self.x, other),
                scalar.ieee_divide(self.y, other),
                scalar.ieee_divide(self.z, other),
                scalar.ieee_divide(self.w, other),
            )
        return NotImplemented

    def cross(self, other: "Vector4") -> "Vector4":
        """Cross product of the xyz parts; w of the result is 0."""
        return Vector4(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
            0.0,
        )

    def dot3(self, other: "Vector4") -> float:
        """Dot product of the xyz parts."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def dot4(self, other: "Vector4") -> float:
        """Full four-component dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def size(self) -> float:
        return math.sqrt(self.size_squared())

    def size_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w

    def size3(self) -> float:
        return math.sqrt(self.size_squared3())

    def size_squared3(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def is_unit3(self, length_squared_tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return abs(1.0 - self.size_squared3()) < length_squared_tolerance

    def is_nearly_zero3(self, tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return abs(self.x) < tolerance and abs(self.y) < tolerance and abs(self.z) < tolerance

    def safe_normal(self, tolerance: float = SMALL_NUMBER) -> "Vector4":
        """
        Normalize the xyz part as a direction.

        Args:
            tolerance: Minimum squared xyz length to normalize.

        Returns:
            Unit direction with w = 0, or all zeros when too short.
        """
        square_sum = self.size_squared3()
        if square_sum > tolerance:
            scale = 1.0 / math.sqrt(square_sum)
            return Vector4(self.x * scale, self.y * scale, self.z * scale, 0.0)
        return Vector4(0.0, 0.0, 0.0, 0.0)

    def unsafe_normal3(self) -> "Vector4":
        """Normalize the xyz part without a zero check; w = 0."""
        length = self.size3()
        return Vector4(
            scalar.ieee_divide(self.x, length),
            scalar.ieee_divide(self.y, length),
            scalar.ieee_divide(self.z, length),
            0.0,
        )

    def reflect3(self, normal: "Vector4") -> "Vector4":
        """Reflect this vector about a unit normal (2(v.n)n - v)."""
        return normal * (2.0 * self.dot3(normal)) - self

    def find_best_axis_vectors3(self) -> tuple["Vector4", "Vector4"]:
        """Two axes orthogonal to the xyz part of this vector."""
        nx = abs(self.x)
        ny = abs(self.y)
        nz = abs(self.z)

        if nz > nx and nz > ny:
            axis1 = Vector4(1.0, 0.0, 0.0, 1.0)
        else:
            axis1 = Vector4(0.0, 0.0, 1.0, 1.0)

        axis1 = (axis1 - self * axis1.dot3(self)).safe_normal()
        axis2 = axis1.cross(self)
        return axis1, axis2

    def equals(self, other: "Vector4", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return (
            abs(self.x - other.x) < tolerance
            and abs(self.y - other.y) < tolerance
            and abs(self.z - other.z) < tolerance
            and abs(self.w - other.w) < tolerance
        )

    def contains_nan(self) -> bool:
        return not all(math.isfinite(c) for c in (self.x, self.y, self.z, self.w))

    def to_rotator(self) -> "Rotator":
        """Rotator pointing along the xyz direction (roll is zero)."""
        from spatium.core.rotator import Rotator

        return Rotator.from_direction(self.to_vector3())

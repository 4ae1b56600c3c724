"""
4x4 matrix algebra for Spatium.

Matrices are row-major (``m[row][col]``) and act on row vectors, so a
point transforms as ``p' = p @ M`` and the translation lives in row 3.
The product ``A.multiply(B)`` is the plain elementwise
``sum_k A[i][k] * B[k][j]``; acting on row vectors it applies A first and
B second. compose(first, second) names that order explicitly.
"""

from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from spatium.core import scalar
from spatium.core.constants import Axis, DELTA, KINDA_SMALL_NUMBER, SMALL_NUMBER
from spatium.core.plane import Plane
from spatium.core.vector import Vector3
from spatium.core.vector4 import Vector4
from spatium.logging.setup import get_logger

if TYPE_CHECKING:
    from spatium.core.quat import Quaternion
    from spatium.core.rotator import Rotator

logger = get_logger(__name__)

_AXIS_ROW = {Axis.X: 0, Axis.Y: 1, Axis.Z: 2}


def _identity_array() -> NDArray[np.float64]:
    return np.eye(4, dtype=np.float64)


def _det3(a: list[list[float]], rows: tuple[int, int, int], cols: tuple[int, int, int]) -> float:
    """Determinant of the 3x3 minor picked out by rows and cols."""
    r0, r1, r2 = rows
    c0, c1, c2 = cols
    return (
        a[r0][c0] * (a[r1][c1] * a[r2][c2] - a[r1][c2] * a[r2][c1])
        - a[r0][c1] * (a[r1][c0] * a[r2][c2] - a[r1][c2] * a[r2][c0])
        + a[r0][c2] * (a[r1][c0] * a[r2][c1] - a[r1][c1] * a[r2][c0])
    )


def _others(index: int) -> tuple[int, int, int]:
    return tuple(i for i in range(4) if i != index)  # type: ignore[return-value]


@dataclass(frozen=True, eq=False)
class Matrix:
    """
    Immutable 4x4 matrix.

    Attributes:
        m: Read-only (4, 4) float64 array, indexed ``m[row, col]``.
    """

    m: NDArray[np.float64] = field(default_factory=_identity_array)

    def __post_init__(self) -> None:
        arr = np.array(self.m, dtype=np.float64).reshape(4, 4)
        arr.setflags(write=False)
        object.__setattr__(self, "m", arr)

    # ------------------------------------------------------------------
    # Construction and interop
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(
        cls, x: Vector4, y: Vector4, z: Vector4, w: Vector4
    ) -> "Matrix":
        """Matrix from four row vectors."""
        return cls(np.array([x.to_array(), y.to_array(), z.to_array(), w.to_array()]))

    @classmethod
    def from_axes(
        cls, x_axis: Vector3, y_axis: Vector3, z_axis: Vector3, origin: Vector3
    ) -> "Matrix":
        """
        Affine matrix from three axis rows and an origin row.

        Args:
            x_axis: Row 0 (w = 0).
            y_axis: Row 1 (w = 0).
            z_axis: Row 2 (w = 0).
            origin: Row 3 (w = 1).

        Returns:
            Matrix instance.
        """
        return cls(
            np.array(
                [
                    [x_axis.x, x_axis.y, x_axis.z, 0.0],
                    [y_axis.x, y_axis.y, y_axis.z, 0.0],
                    [z_axis.x, z_axis.y, z_axis.z, 0.0],
                    [origin.x, origin.y, origin.z, 1.0],
                ]
            )
        )

    @classmethod
    def from_array(cls, values: ArrayLike) -> "Matrix":
        """Matrix from any 16-element array-like, row-major."""
        return cls(np.asarray(values, dtype=np.float64))

    def to_array(self) -> NDArray[np.float64]:
        """Writable copy of the underlying (4, 4) array."""
        return np.array(self.m, dtype=np.float64)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.array_equal(self.m, other.m))

    def __hash__(self) -> int:
        return hash(self.m.tobytes())

    def __repr__(self) -> str:
        rows = ", ".join(str(list(row)) for row in self.m.tolist())
        return f"Matrix([{rows}])"

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def multiply(self, other: "Matrix") -> "Matrix":
        """
        Elementwise product ``sum_k self[i][k] * other[k][j]``.

        On row vectors the result applies self first, then other.
        """
        return Matrix(self.m @ other.m)

    def add(self, other: "Matrix") -> "Matrix":
        return Matrix(self.m + other.m)

    def scale_by(self, factor: float) -> "Matrix":
        """Multiply every element by factor."""
        return Matrix(self.m * factor)

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __mul__(self, other: float) -> "Matrix":
        # Scalar scaling only; composition goes through compose().
        if isinstance(other, (int, float)):
            return self.scale_by(float(other))
        return NotImplemented

    def equals(self, other: "Matrix", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        """Element-wise comparison within tolerance."""
        return bool(np.all(np.abs(self.m - other.m) <= tolerance))

    def get_transposed(self) -> "Matrix":
        return Matrix(self.m.T)

    def contains_nan(self) -> bool:
        """Check for NaN or infinite elements."""
        return not bool(np.all(np.isfinite(self.m)))

    # ------------------------------------------------------------------
    # Transforming vectors
    # ------------------------------------------------------------------

    def transform_vector4(self, v: Vector4) -> Vector4:
        """Row vector times matrix."""
        return Vector4.from_array(v.to_array() @ self.m)

    def transform_position(self, v: Vector3) -> Vector3:
        """Transform a point (w = 1), dropping the resulting w."""
        return self.transform_vector4(Vector4.from_vector3(v, 1.0)).to_vector3()

    def transform_vector(self, v: Vector3) -> Vector3:
        """Transform a direction (w = 0); translation is ignored."""
        return self.transform_vector4(Vector4.from_vector3(v, 0.0)).to_vector3()

    def inverse_transform_position(self, v: Vector3) -> Vector3:
        """Transform a point by the safe inverse of this matrix."""
        return self.inverse_safe().transform_position(v)

    def inverse_transform_vector(self, v: Vector3) -> Vector3:
        """Transform a direction by the safe inverse of this matrix."""
        return self.inverse_safe().transform_vector(v)

    # ------------------------------------------------------------------
    # Determinants and inverses
    # ------------------------------------------------------------------

    def determinant(self) -> float:
        """Determinant by cofactor expansion along row 0."""
        a = self.m.tolist()
        result = 0.0
        for col in range(4):
            sign = 1.0 if col % 2 == 0 else -1.0
            result += sign * a[0][col] * _det3(a, (1, 2, 3), _others(col))
        return result

    def rot_determinant(self) -> float:
        """Determinant of the upper-left 3x3 block."""
        return _det3(self.m.tolist(), (0, 1, 2), (0, 1, 2))

    def inverse(self) -> "Matrix":
        """
        Fast closed-form inverse.

        Assumes the matrix is invertible. A singular matrix produces
        inf/nan elements rather than an exception; use inverse_safe() when
        that can happen.

        Returns:
            Inverse matrix.
        """
        (a00, a01, a02, a03), (a10, a11, a12, a13), (a20, a21, a22, a23), (
            a30,
            a31,
            a32,
            a33,
        ) = self.m.tolist()

        s0 = a00 * a11 - a10 * a01
        s1 = a00 * a12 - a10 * a02
        s2 = a00 * a13 - a10 * a03
        s3 = a01 * a12 - a11 * a02
        s4 = a01 * a13 - a11 * a03
        s5 = a02 * a13 - a12 * a03

        c5 = a22 * a33 - a32 * a23
        c4 = a21 * a33 - a31 * a23
        c3 = a21 * a32 - a31 * a22
        c2 = a20 * a33 - a30 * a23
        c1 = a20 * a32 - a30 * a22
        c0 = a20 * a31 - a30 * a21

        det = s0 * c5 - s1 * c4 + s2 * c3 + s3 * c2 - s4 * c1 + s5 * c0
        inv_det = scalar.ieee_divide(1.0, det)

        adjugate = np.array(
            [
                [
                    a11 * c5 - a12 * c4 + a13 * c3,
                    -a01 * c5 + a02 * c4 - a03 * c3,
                    a31 * s5 - a32 * s4 + a33 * s3,
                    -a21 * s5 + a22 * s4 - a23 * s3,
                ],
                [
                    -a10 * c5 + a12 * c2 - a13 * c1,
                    a00 * c5 - a02 * c2 + a03 * c1,
                    -a30 * s5 + a32 * s2 - a33 * s1,
                    a20 * s5 - a22 * s2 + a23 * s1,
                ],
                [
                    a10 * c4 - a11 * c2 + a13 * c0,
                    -a00 * c4 + a01 * c2 - a03 * c0,
                    a30 * s4 - a31 * s2 + a33 * s0,
                    -a20 * s4 + a21 * s2 - a23 * s0,
                ],
                [
                    -a10 * c3 + a11 * c1 - a12 * c0,
                    a00 * c3 - a01 * c1 + a02 * c0,
                    -a30 * s3 + a31 * s1 - a32 * s0,
                    a20 * s3 - a21 * s1 + a22 * s0,
                ],
            ],
            dtype=np.float64,
        )
        with np.errstate(invalid="ignore", over="ignore"):
            return Matrix(adjugate * inv_det)

    def inverse_safe(self) -> "Matrix":
        """
        Inverse that substitutes the identity for a singular matrix.

        The matrix counts as singular when its determinant is not finite or
        its magnitude is below SMALL_NUMBER.

        Returns:
            Inverse matrix, or the identity.
        """
        det = self.determinant()
        if not math.isfinite(det) or abs(det) < SMALL_NUMBER:
            logger.debug("singular_matrix_inverse", determinant=det)
            return IDENTITY_MATRIX
        return self.inverse()

    def inverse_slow(self) -> "Matrix":
        """
        Reference inverse by explicit cofactor expansion.

        Returns:
            Inverse matrix, or the identity when the determinant is zero.
        """
        det = self.determinant()
        if det == 0.0:
            logger.debug("singular_matrix_inverse_slow")
            return IDENTITY_MATRIX

        a = self.m.tolist()
        r_det = 1.0 / det
        result = np.zeros((4, 4), dtype=np.float64)
        for row in range(4):
            for col in range(4):
                sign = 1.0 if (row + col) % 2 == 0 else -1.0
                # Inverse is the transposed cofactor matrix over det.
                result[col, row] = sign * _det3(a, _others(row), _others(col)) * r_det
        return Matrix(result)

    def transpose_adjoint(self) -> "Matrix":
        """
        Transpose of the adjoint of the upper 3x3.

        Each row is the cross product of the other two rows, so normals
        transformed by it stay perpendicular to transformed surfaces.

        Returns:
            Affine matrix with zero translation.
        """
        x_axis, y_axis, z_axis = self.get_scaled_axes()
        return Matrix.from_axes(
            y_axis.cross(z_axis),
            z_axis.cross(x_axis),
            x_axis.cross(y_axis),
            Vector3(0.0, 0.0, 0.0),
        )

    # ------------------------------------------------------------------
    # Scale
    # ------------------------------------------------------------------

    def _row_square_sums(self) -> NDArray[np.float64]:
        return np.sum(self.m[:3, :3] ** 2, axis=1)

    def remove_scaling(self, tolerance: float = SMALL_NUMBER) -> "Matrix":
        """Normalize the three axis rows; rows below tolerance are kept as is."""
        arr = self.to_array()
        for row, square_sum in enumerate(self._row_square_sums()):
            if square_sum - tolerance >= 0.0:
                arr[row, :3] *= 1.0 / math.sqrt(square_sum)
        return Matrix(arr)

    def get_matrix_without_scale(self, tolerance: float = SMALL_NUMBER) -> "Matrix":
        return self.remove_scaling(tolerance)

    def extract_scaling(self, tolerance: float = SMALL_NUMBER) -> tuple[Vector3, "Matrix"]:
        """
        Split off the per-axis scale.

        Each axis row with squared length above tolerance is normalized
        and its length reported. Rows below tolerance are left unmodified
        and report a scale of zero.

        Args:
            tolerance: Minimum squared row length.

        Returns:
            Tuple (scale vector, matrix with normalized rows).
        """
        arr = self.to_array()
        scale = [0.0, 0.0, 0.0]
        for row, square_sum in enumerate(self._row_square_sums()):
            if square_sum > tolerance:
                length = math.sqrt(square_sum)
                scale[row] = length
                arr[row, :3] *= 1.0 / length
        return Vector3(*scale), Matrix(arr)

    def get_scale_vector(self, tolerance: float = SMALL_NUMBER) -> Vector3:
        """Length of each axis row (0 below tolerance)."""
        sums = self._row_square_sums()
        return Vector3(
            *(math.sqrt(s) if s > tolerance else 0.0 for s in sums.tolist())
        )

    def get_maximum_axis_scale(self) -> float:
        return math.sqrt(float(np.max(self._row_square_sums())))

    def apply_scale(self, scale: float) -> "Matrix":
        """Uniformly scale the three axis rows (translation is unchanged)."""
        arr = self.to_array()
        arr[:3, :] *= scale
        return Matrix(arr)

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def get_origin(self) -> Vector3:
        return Vector3(float(self.m[3, 0]), float(self.m[3, 1]), float(self.m[3, 2]))

    def set_origin(self, origin: Vector3) -> "Matrix":
        arr = self.to_array()
        arr[3, :3] = origin.to_array()
        return Matrix(arr)

    def remove_translation(self) -> "Matrix":
        return self.set_origin(Vector3(0.0, 0.0, 0.0))

    def concat_translation(self, translation: Vector3) -> "Matrix":
        """Add a translation to the origin row."""
        return self.set_origin(self.get_origin() + translation)

    def scale_translation(self, scale3d: Vector3) -> "Matrix":
        """Scale the origin row component-wise."""
        return self.set_origin(self.get_origin() * scale3d)

    # ------------------------------------------------------------------
    # Axes
    # ------------------------------------------------------------------

    def get_scaled_axis(self, axis: Axis) -> Vector3:
        """Axis row including its scale."""
        row = _AXIS_ROW.get(axis)
        if row is None:
            return Vector3(0.0, 0.0, 0.0)
        return Vector3.from_array(self.m[row, :3])

    def get_scaled_axes(self) -> tuple[Vector3, Vector3, Vector3]:
        return (
            Vector3.from_array(self.m[0, :3]),
            Vector3.from_array(self.m[1, :3]),
            Vector3.from_array(self.m[2, :3]),
        )

    def get_unit_axis(self, axis: Axis) -> Vector3:
        return self.get_scaled_axis(axis).safe_normal()

    def get_unit_axes(self) -> tuple[Vector3, Vector3, Vector3]:
        x_axis, y_axis, z_axis = self.get_scaled_axes()
        return x_axis.safe_normal(), y_axis.safe_normal(), z_axis.safe_normal()

    def set_axis(self, index: int, axis: Vector3) -> "Matrix":
        """Copy with axis row ``index`` (0-2) replaced."""
        if not 0 <= index <= 2:
            raise IndexError(f"Axis index out of range: {index}")
        arr = self.to_array()
        arr[index, :3] = axis.to_array()
        return Matrix(arr)

    def get_column(self, index: int) -> Vector3:
        """First three elements of column ``index``."""
        return Vector3.from_array(self.m[:3, index])

    def mirror(self, mirror_axis: Axis, flip_axis: Axis) -> "Matrix":
        """
        Mirror across an axis, then flip another axis row.

        Args:
            mirror_axis: Column to negate (including the translation).
            flip_axis: Axis row to negate.

        Returns:
            Mirrored matrix.
        """
        arr = self.to_array()
        col = _AXIS_ROW.get(mirror_axis)
        if col is not None:
            arr[:, col] *= -1.0
        row = _AXIS_ROW.get(flip_axis)
        if row is not None:
            arr[row, :3] *= -1.0
        return Matrix(arr)

    def to_3x4_matrix_transpose(self) -> NDArray[np.float64]:
        """First three columns as a (3, 4) array, for GPU upload."""
        return np.array(self.m.T[:3, :], dtype=np.float64)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_rotator(self) -> "Rotator":
        """
        Euler rotation of this matrix.

        Pitch and yaw come from the X axis. Roll is then measured between
        the actual Y/Z axes and the Y axis implied by pitch and yaw alone.

        Returns:
            Rotator in degrees.
        """
        from spatium.core.matrix_builders import rotation_matrix
        from spatium.core.rotator import Rotator

        x_axis, y_axis, z_axis = self.get_scaled_axes()

        pitch = math.degrees(math.atan2(x_axis.z, math.sqrt(x_axis.x ** 2 + x_axis.y ** 2)))
        yaw = math.degrees(math.atan2(x_axis.y, x_axis.x))

        sy_axis = rotation_matrix(Rotator(pitch, yaw, 0.0)).get_scaled_axis(Axis.Y)
        roll = math.degrees(math.atan2(z_axis.dot(sy_axis), y_axis.dot(sy_axis)))

        return Rotator(pitch, yaw, roll)

    def to_quat(self) -> "Quaternion":
        from spatium.core.quat import Quaternion

        return Quaternion.from_matrix(self)

    # ------------------------------------------------------------------
    # Frustum planes
    # ------------------------------------------------------------------

    def get_frustum_near_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(m[0, 2], m[1, 2], m[2, 2], m[3, 2])

    def get_frustum_far_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(
            m[0, 3] - m[0, 2], m[1, 3] - m[1, 2], m[2, 3] - m[2, 2], m[3, 3] - m[3, 2]
        )

    def get_frustum_left_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(
            -m[0, 3] - m[0, 0], -m[1, 3] - m[1, 0], -m[2, 3] - m[2, 0], -m[3, 3] - m[3, 0]
        )

    def get_frustum_right_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(
            m[0, 0] - m[0, 3], m[1, 0] - m[1, 3], m[2, 0] - m[2, 3], m[3, 0] - m[3, 3]
        )

    def get_frustum_top_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(
            m[0, 1] - m[0, 3], m[1, 1] - m[1, 3], m[2, 1] - m[2, 3], m[3, 1] - m[3, 3]
        )

    def get_frustum_bottom_plane(self) -> Optional[Plane]:
        m = self.m
        return _make_frustum_plane(
            -m[0, 3] - m[0, 1], -m[1, 3] - m[1, 1], -m[2, 3] - m[2, 1], -m[3, 3] - m[3, 1]
        )


def _make_frustum_plane(a: float, b: float, c: float, d: float) -> Optional[Plane]:
    """Normalized frustum plane, or None when the normal is degenerate."""
    length_squared = float(a * a + b * b + c * c)
    if length_squared > DELTA * DELTA:
        inv_length = 1.0 / math.sqrt(length_squared)
        return Plane(
            float(-a * inv_length),
            float(-b * inv_length),
            float(-c * inv_length),
            float(d * inv_length),
        )
    return None


IDENTITY_MATRIX = Matrix(np.eye(4, dtype=np.float64))


def compose(first: Matrix, second: Matrix) -> Matrix:
    """
    Matrix that applies ``first`` and then ``second`` to row vectors.

    Args:
        first: Transform applied first.
        second: Transform applied second.

    Returns:
        The matrix product first.multiply(second).
    """
    return first.multiply(second)


def compose_all(*matrices: Matrix) -> Matrix:
    """Compose any number of matrices, applied left to right."""
    result = IDENTITY_MATRIX
    for matrix in matrices:
        result = compose(result, matrix)
    return result


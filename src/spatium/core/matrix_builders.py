"""
Matrix factories for Spatium.

Provides translation, scale and rotation matrices, orthographic
projections, basis and look-at matrices, and the ``make_from_*`` family
that builds a rotation from one or two prescribed axes.
"""

import math
from typing import TYPE_CHECKING

import numpy as np

from spatium.core.constants import KINDA_SMALL_NUMBER
from spatium.core.matrix import Matrix
from spatium.core.vector import Vector3, ONE_VECTOR, ZERO_VECTOR

if TYPE_CHECKING:
    from spatium.core.quat import Quaternion
    from spatium.core.rotator import Rotator


def _sin_cos_degrees(angle_deg: float) -> tuple[float, float]:
    rad = math.radians(angle_deg)
    return math.sin(rad), math.cos(rad)


def translation_matrix(delta: Vector3) -> Matrix:
    """Identity with ``delta`` in the origin row."""
    return Matrix.from_axes(
        Vector3(1.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0), Vector3(0.0, 0.0, 1.0), delta
    )


def scale_matrix(scale: Vector3) -> Matrix:
    """Diagonal scale matrix."""
    return Matrix(np.diag([scale.x, scale.y, scale.z, 1.0]))


def scale_rotation_translation_matrix(
    scale: Vector3, rotator: "Rotator", origin: Vector3
) -> Matrix:
    """
    Matrix that scales, then rotates, then translates.

    Args:
        scale: Per-axis scale, applied to the axis rows.
        rotator: Euler rotation in degrees.
        origin: Translation.

    Returns:
        Affine matrix.
    """
    sp, cp = _sin_cos_degrees(rotator.pitch)
    sy, cy = _sin_cos_degrees(rotator.yaw)
    sr, cr = _sin_cos_degrees(rotator.roll)

    return Matrix(
        np.array(
            [
                [cp * cy * scale.x, cp * sy * scale.x, sp * scale.x, 0.0],
                [
                    (sr * sp * cy - cr * sy) * scale.y,
                    (sr * sp * sy + cr * cy) * scale.y,
                    -sr * cp * scale.y,
                    0.0,
                ],
                [
                    -(cr * sp * cy + sr * sy) * scale.z,
                    (cy * sr - cr * sp * sy) * scale.z,
                    cr * cp * scale.z,
                    0.0,
                ],
                [origin.x, origin.y, origin.z, 1.0],
            ],
            dtype=np.float64,
        )
    )


def rotation_translation_matrix(rotator: "Rotator", origin: Vector3) -> Matrix:
    return scale_rotation_translation_matrix(ONE_VECTOR, rotator, origin)


def rotation_matrix(rotator: "Rotator") -> Matrix:
    """Pure rotation matrix for an Euler rotation."""
    return scale_rotation_translation_matrix(ONE_VECTOR, rotator, ZERO_VECTOR)


def quat_rotation_translation_matrix(q: "Quaternion", origin: Vector3) -> Matrix:
    """
    Rotation matrix of a unit quaternion with a translation row.

    Args:
        q: Unit quaternion.
        origin: Translation.

    Returns:
        Affine matrix.
    """
    x2 = q.x + q.x
    y2 = q.y + q.y
    z2 = q.z + q.z
    xx = q.x * x2
    xy = q.x * y2
    xz = q.x * z2
    yy = q.y * y2
    yz = q.y * z2
    zz = q.z * z2
    wx = q.w * x2
    wy = q.w * y2
    wz = q.w * z2

    return Matrix(
        np.array(
            [
                [1.0 - (yy + zz), xy + wz, xz - wy, 0.0],
                [xy - wz, 1.0 - (xx + zz), yz + wx, 0.0],
                [xz + wy, yz - wx, 1.0 - (xx + yy), 0.0],
                [origin.x, origin.y, origin.z, 1.0],
            ],
            dtype=np.float64,
        )
    )


def quat_rotation_matrix(q: "Quaternion") -> Matrix:
    return quat_rotation_translation_matrix(q, ZERO_VECTOR)


def scale_quat_translation_matrix(
    scale: Vector3, q: "Quaternion", origin: Vector3
) -> Matrix:
    """Quaternion rotation matrix with per-axis scale on the axis rows."""
    arr = quat_rotation_translation_matrix(q, origin).to_array()
    arr[0, :3] *= scale.x
    arr[1, :3] *= scale.y
    arr[2, :3] *= scale.z
    return Matrix(arr)


def ortho_matrix(width: float, height: float, z_scale: float, z_offset: float) -> Matrix:
    """
    Orthographic projection.

    Args:
        width: Half-width of the view volume.
        height: Half-height of the view volume.
        z_scale: Depth scale.
        z_offset: Depth offset, applied before scaling.

    Returns:
        Projection matrix.
    """
    return Matrix(
        np.array(
            [
                [1.0 / width if width else 1.0, 0.0, 0.0, 0.0],
                [0.0, 1.0 / height if height else 1.0, 0.0, 0.0],
                [0.0, 0.0, z_scale, 0.0],
                [0.0, 0.0, z_offset * z_scale, 1.0],
            ],
            dtype=np.float64,
        )
    )


def reversed_z_ortho_matrix(
    width: float, height: float, z_scale: float, z_offset: float
) -> Matrix:
    """Orthographic projection with depth mapped far-to-near."""
    return Matrix(
        np.array(
            [
                [1.0 / width if width else 1.0, 0.0, 0.0, 0.0],
                [0.0, 1.0 / height if height else 1.0, 0.0, 0.0],
                [0.0, 0.0, -z_scale, 0.0],
                [0.0, 0.0, 1.0 - z_offset * z_scale, 1.0],
            ],
            dtype=np.float64,
        )
    )


def _columns(
    x_axis: Vector3, y_axis: Vector3, z_axis: Vector3, offset: Vector3
) -> Matrix:
    return Matrix(
        np.array(
            [
                [x_axis.x, y_axis.x, z_axis.x, 0.0],
                [x_axis.y, y_axis.y, z_axis.y, 0.0],
                [x_axis.z, y_axis.z, z_axis.z, 0.0],
                [offset.dot(x_axis), offset.dot(y_axis), offset.dot(z_axis), 1.0],
            ],
            dtype=np.float64,
        )
    )


def basis_vector_matrix(
    x_axis: Vector3, y_axis: Vector3, z_axis: Vector3, origin: Vector3
) -> Matrix:
    """
    Matrix with the three axes as its columns.

    A point maps to its projections onto each axis. The origin row holds
    the projections of ``origin`` onto the axes, which are added.
    """
    return _columns(x_axis, y_axis, z_axis, origin)


def look_at_matrix(eye: Vector3, look_at: Vector3, up: Vector3) -> Matrix:
    """
    View matrix looking from ``eye`` toward ``look_at`` (left-handed, +Z forward).

    Args:
        eye: Camera position.
        look_at: Target point.
        up: Approximate up direction.

    Returns:
        View matrix; the eye maps to the origin.
    """
    z_axis = (look_at - eye).safe_normal()
    x_axis = up.cross(z_axis).safe_normal()
    y_axis = z_axis.cross(x_axis)
    return _columns(x_axis, y_axis, z_axis, -eye)


# ----------------------------------------------------------------------
# Rotations from prescribed axes
# ----------------------------------------------------------------------


def _up_for(axis: Vector3) -> Vector3:
    # Any reference not parallel to the axis works; prefer world up.
    if abs(axis.z) < 1.0 - KINDA_SMALL_NUMBER:
        return Vector3(0.0, 0.0, 1.0)
    return Vector3(1.0, 0.0, 0.0)


def _secondary(primary: Vector3, secondary: Vector3) -> Vector3:
    norm = secondary.safe_normal()
    if abs(primary.dot(norm)) >= 1.0 - KINDA_SMALL_NUMBER:
        return _up_for(primary)
    return norm


def _rows(x_axis: Vector3, y_axis: Vector3, z_axis: Vector3) -> Matrix:
    return Matrix.from_axes(x_axis, y_axis, z_axis, ZERO_VECTOR)


def make_from_x(x_axis: Vector3) -> Matrix:
    """Rotation whose X axis points along ``x_axis``; Y and Z are chosen."""
    new_x = x_axis.safe_normal()
    new_y = _up_for(new_x).cross(new_x).safe_normal()
    new_z = new_x.cross(new_y)
    return _rows(new_x, new_y, new_z)


def make_from_y(y_axis: Vector3) -> Matrix:
    new_y = y_axis.safe_normal()
    new_z = _up_for(new_y).cross(new_y).safe_normal()
    new_x = new_y.cross(new_z)
    return _rows(new_x, new_y, new_z)


def make_from_z(z_axis: Vector3) -> Matrix:
    new_z = z_axis.safe_normal()
    new_x = _up_for(new_z).cross(new_z).safe_normal()
    new_y = new_z.cross(new_x)
    return _rows(new_x, new_y, new_z)


def make_from_xy(x_axis: Vector3, y_axis: Vector3) -> Matrix:
    """
    Rotation with X exactly along ``x_axis`` and Y as close to ``y_axis`` as possible.

    When the two inputs are parallel a world reference axis replaces
    ``y_axis``.
    """
    new_x = x_axis.safe_normal()
    norm = _secondary(new_x, y_axis)
    new_z = new_x.cross(norm).safe_normal()
    new_y = new_z.cross(new_x)
    return _rows(new_x, new_y, new_z)


def make_from_xz(x_axis: Vector3, z_axis: Vector3) -> Matrix:
    new_x = x_axis.safe_normal()
    norm = _secondary(new_x, z_axis)
    new_y = norm.cross(new_x).safe_normal()
    new_z = new_x.cross(new_y)
    return _rows(new_x, new_y, new_z)


def make_from_yx(y_axis: Vector3, x_axis: Vector3) -> Matrix:
    new_y = y_axis.safe_normal()
    norm = _secondary(new_y, x_axis)
    new_z = norm.cross(new_y).safe_normal()
    new_x = new_y.cross(new_z)
    return _rows(new_x, new_y, new_z)


def make_from_yz(y_axis: Vector3, z_axis: Vector3) -> Matrix:
    new_y = y_axis.safe_normal()
    norm = _secondary(new_y, z_axis)
    new_x = new_y.cross(norm).safe_normal()
    new_z = new_x.cross(new_y)
    return _rows(new_x, new_y, new_z)


def make_from_zx(z_axis: Vector3, x_axis: Vector3) -> Matrix:
    new_z = z_axis.safe_normal()
    norm = _secondary(new_z, x_axis)
    new_y = new_z.cross(norm).safe_normal()
    new_x = new_y.cross(new_z)
    return _rows(new_x, new_y, new_z)


def make_from_zy(z_axis: Vector3, y_axis: Vector3) -> Matrix:
    new_z = z_axis.safe_normal()
    norm = _secondary(new_z, y_axis)
    new_x = norm.cross(new_z).safe_normal()
    new_y = new_z.cross(new_x)
    return _rows(new_x, new_y, new_z)

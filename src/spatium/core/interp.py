"""
Interpolation helpers for Spatium.

Frame-step interpolators (the ``*_interp_to`` family) move a current value
toward a target given a time step and a speed. The rest are plain
parametric blends plus cubic Bezier evaluation.
"""

import math
from typing import Sequence

import numpy as np

from spatium.core import scalar
from spatium.core.constants import KINDA_SMALL_NUMBER
from spatium.core.matrix_builders import quat_rotation_matrix
from spatium.core.quat import Quaternion, slerp
from spatium.core.rotator import Rotator
from spatium.core.vector import Vector3


def lerp_vector(a: Vector3, b: Vector3, alpha: float) -> Vector3:
    return scalar.lerp(a, b, alpha)


def lerp_rotator(a: Rotator, b: Rotator, alpha: float) -> Rotator:
    """Blend two rotators along the shortest route of each axis."""
    return a + (b - a).get_normalized() * alpha


def cubic_interp_vector(
    p0: Vector3, t0: Vector3, p1: Vector3, t1: Vector3, alpha: float
) -> Vector3:
    """Hermite interpolation between two points with tangents."""
    return scalar.cubic_interp(p0, t0, p1, t1, alpha)


# ----------------------------------------------------------------------
# Vector interpolators
# ----------------------------------------------------------------------


def v_interp_to(current: Vector3, target: Vector3, delta_time: float, speed: float) -> Vector3:
    """
    Exponential-style approach: step a fraction of the remaining distance.

    Args:
        current: Current value.
        target: Target value.
        delta_time: Time step.
        speed: Interpolation speed; <= 0 jumps straight to target.

    Returns:
        New value, never overshooting the target.
    """
    if speed <= 0.0:
        return target

    dist = target - current
    if dist.size_squared() < KINDA_SMALL_NUMBER:
        return target

    return current + dist * scalar.clamp(delta_time * speed, 0.0, 1.0)


def v_interp_constant_to(
    current: Vector3, target: Vector3, delta_time: float, speed: float
) -> Vector3:
    """
    Constant-speed approach: move at most ``speed * delta_time`` units.

    A non-positive step leaves current unchanged unless it already
    coincides with the target.
    """
    delta = target - current
    delta_size = delta.size()
    max_step = speed * delta_time

    if delta_size > max_step:
        if max_step > 0.0:
            return current + (delta / delta_size) * max_step
        return current

    return target


def v_interp_normal_rotation_to(
    current: Vector3, target: Vector3, delta_time: float, rotation_speed_deg: float
) -> Vector3:
    """
    Rotate a unit normal toward another at a bounded angular speed.

    Args:
        current: Current unit normal.
        target: Target unit normal.
        delta_time: Time step.
        rotation_speed_deg: Maximum rotation in degrees per unit time.

    Returns:
        Rotated normal, or target once it is within one step.
    """
    delta_quat = Quaternion.find_between(current, target)
    axis, angle = delta_quat.to_axis_and_angle()

    step = math.radians(rotation_speed_deg) * delta_time
    if abs(angle) > step:
        angle = scalar.clamp(angle, -step, step)
        limited = Quaternion.from_axis_angle(axis, angle)
        return quat_rotation_matrix(limited).transform_vector(current)

    return target


# ----------------------------------------------------------------------
# Rotation interpolators
# ----------------------------------------------------------------------


def r_interp_to(current: Rotator, target: Rotator, delta_time: float, speed: float) -> Rotator:
    """
    Rotator version of v_interp_to, along the shortest route per axis.

    Args:
        current: Current rotation.
        target: Target rotation.
        delta_time: Time step; 0 returns current unchanged.
        speed: Interpolation speed; <= 0 jumps straight to target.

    Returns:
        Normalized rotator.
    """
    if delta_time == 0.0 or current == target:
        return current

    if speed <= 0.0:
        return target

    delta_move = (target - current).get_normalized() * scalar.clamp(
        speed * delta_time, 0.0, 1.0
    )
    if delta_move.is_nearly_zero():
        return target

    return (current + delta_move).get_normalized()


def r_interp_constant_to(
    current: Rotator, target: Rotator, delta_time: float, speed: float
) -> Rotator:
    """Move each axis at most ``speed * delta_time`` degrees toward target."""
    if delta_time == 0.0 or current == target:
        return current

    if speed <= 0.0:
        return target

    step = speed * delta_time
    delta_move = (target - current).get_normalized()
    result = Rotator(
        current.pitch + scalar.clamp(delta_move.pitch, -step, step),
        current.yaw + scalar.clamp(delta_move.yaw, -step, step),
        current.roll + scalar.clamp(delta_move.roll, -step, step),
    )
    return result.get_normalized()


def q_interp_to(
    current: Quaternion, target: Quaternion, delta_time: float, speed: float
) -> Quaternion:
    """Slerp a fraction ``speed * delta_time`` of the way to target."""
    if speed <= 0.0:
        return target

    if current.equals(target):
        return target

    return slerp(current, target, scalar.clamp(speed * delta_time, 0.0, 1.0))


def q_interp_constant_to(
    current: Quaternion, target: Quaternion, delta_time: float, speed: float
) -> Quaternion:
    """
    Rotate toward target by at most ``speed * delta_time`` radians.

    Args:
        current: Current rotation.
        target: Target rotation.
        delta_time: Time step.
        speed: Angular speed in radians per unit time.

    Returns:
        Rotation no further than one step from current.
    """
    if speed <= 0.0:
        return target

    if current.equals(target):
        return target

    distance = current.angular_distance(target)
    step = speed * delta_time
    if distance <= step:
        return target

    return slerp(current, target, scalar.clamp(step / distance, 0.0, 1.0))


# ----------------------------------------------------------------------
# Curves
# ----------------------------------------------------------------------


def evaluate_bezier(
    control_points: Sequence[Vector3], num_points: int
) -> tuple[list[Vector3], float]:
    """
    Sample a cubic Bezier curve by forward differencing.

    Args:
        control_points: Exactly four control points.
        num_points: Number of samples, including both end points (>= 2).

    Returns:
        Tuple (sampled points, length of the sampled polyline).

    Raises:
        ValueError: If there are not four control points or fewer than two
            samples are requested.
    """
    if len(control_points) != 4:
        raise ValueError(f"Expected 4 control points, got {len(control_points)}")
    if num_points < 2:
        raise ValueError(f"num_points must be at least 2, got {num_points}")

    p0, p1, p2, p3 = (p.to_array() for p in control_points)
    q = 1.0 / (num_points - 1)

    # Polynomial coefficients a + b t + c t^2 + d t^3.
    b = 3.0 * (p1 - p0)
    c = 3.0 * (p2 - 2.0 * p1 + p0)
    d = p3 - 3.0 * p2 + 3.0 * p1 - p0

    s = p0.copy()
    u = b * q + c * q * q + d * q * q * q
    v = 2.0 * c * q * q + 6.0 * d * q * q * q
    w = 6.0 * d * q * q * q

    points = [control_points[0]]
    length = 0.0
    previous = s.copy()
    for _ in range(1, num_points):
        s = s + u
        u = u + v
        v = v + w
        length += float(np.linalg.norm(s - previous))
        previous = s
        points.append(Vector3.from_array(s))

    return points, length

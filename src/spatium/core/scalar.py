"""
Scalar math helpers for Spatium.

Provides clamping, interpolation, angle unwinding and the cubic Hermite
helpers used by the vector, rotator and quaternion types.
"""

import math
from typing import TypeVar

import numpy as np

from spatium.core.constants import PI, SMALL_NUMBER

T = TypeVar("T")


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp value into [min_value, max_value]."""
    if value < min_value:
        return min_value
    return value if value < max_value else max_value


def lerp(a: T, b: T, alpha: float) -> T:
    """Linear interpolation a + alpha * (b - a)."""
    return a + (b - a) * alpha  # type: ignore[operator]


def is_nearly_equal(a: float, b: float, tolerance: float = SMALL_NUMBER) -> bool:
    """Check whether two floats differ by less than tolerance."""
    return abs(a - b) < tolerance


def is_nearly_zero(value: float, tolerance: float = SMALL_NUMBER) -> bool:
    """Check whether a float is within tolerance of zero."""
    return abs(value) < tolerance


def ieee_divide(a: float, b: float) -> float:
    """
    Divide with IEEE-754 semantics.

    Division by zero yields +/-inf or nan instead of raising.

    Args:
        a: Dividend.
        b: Divisor.

    Returns:
        a / b as a Python float.
    """
    if b != 0.0:
        return a / b
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(a) / np.float64(b))


def grid_snap(location: float, grid: float) -> float:
    """Snap a value to the nearest multiple of grid (grid 0 is a no-op)."""
    if grid == 0.0:
        return location
    return math.floor((location + 0.5 * grid) / grid) * grid


def clamp_axis(angle: float) -> float:
    """Clamp an angle in degrees to the range [0, 360)."""
    angle = math.fmod(angle, 360.0)
    if angle < 0.0:
        angle += 360.0
        # Tiny negative inputs round up to exactly 360.
        if angle >= 360.0:
            angle -= 360.0
    return angle


def normalize_axis(angle: float) -> float:
    """Clamp an angle in degrees to the range (-180, 180]."""
    angle = clamp_axis(angle)
    if angle > 180.0:
        angle -= 360.0
    return angle


def unwind_degrees(angle: float) -> float:
    """Unwind an angle in degrees into [-180, 180]."""
    while angle > 180.0:
        angle -= 360.0
    while angle < -180.0:
        angle += 360.0
    return angle


def unwind_radians(angle: float) -> float:
    """Unwind an angle in radians into [-pi, pi]."""
    while angle > PI:
        angle -= 2.0 * PI
    while angle < -PI:
        angle += 2.0 * PI
    return angle


def find_delta_angle(a1: float, a2: float) -> float:
    """Smallest signed angle (radians) from heading a1 to heading a2."""
    delta = a2 - a1
    if delta > PI:
        delta -= 2.0 * PI
    elif delta < -PI:
        delta += 2.0 * PI
    return delta


def clamp_angle(angle: float, min_angle: float, max_angle: float) -> float:
    """
    Clamp an angle to the arc swept clockwise from min_angle to max_angle.

    Angles outside the arc snap to the nearest boundary.

    Args:
        angle: Angle to clamp in degrees.
        min_angle: Start of the valid arc in degrees.
        max_angle: End of the valid arc in degrees.

    Returns:
        Clamped angle in (-180, 180].
    """
    max_delta = clamp_axis(max_angle - min_angle) * 0.5
    range_center = clamp_axis(min_angle + max_delta)
    delta_from_center = normalize_axis(angle - range_center)

    if delta_from_center > max_delta:
        return normalize_axis(range_center + max_delta)
    if delta_from_center < -max_delta:
        return normalize_axis(range_center - max_delta)
    return normalize_axis(angle)


def fixed_turn(current: float, desired: float, delta_rate: float) -> float:
    """
    Turn an angle towards a desired angle by at most delta_rate degrees.

    Args:
        current: Current angle in degrees.
        desired: Desired angle in degrees.
        delta_rate: Maximum change in degrees.

    Returns:
        New angle in [0, 360).
    """
    if delta_rate == 0.0:
        return clamp_axis(current)

    result = clamp_axis(current)
    current = result
    desired = clamp_axis(desired)
    rate = abs(delta_rate)

    if current > desired:
        if current - desired < 180.0:
            result -= min(current - desired, rate)
        else:
            result += min(desired + 360.0 - current, rate)
    else:
        if desired - current < 180.0:
            result += min(desired - current, rate)
        else:
            result -= min(current + 360.0 - desired, rate)

    return clamp_axis(result)


def cartesian_to_polar(x: float, y: float) -> tuple[float, float]:
    """Convert (x, y) into (radius, angle in radians)."""
    return math.sqrt(x * x + y * y), math.atan2(y, x)


def polar_to_cartesian(radius: float, angle: float) -> tuple[float, float]:
    """Convert (radius, angle in radians) into (x, y)."""
    return radius * math.cos(angle), radius * math.sin(angle)


def get_range_pct(min_value: float, max_value: float, value: float) -> float:
    """Fraction of the way value lies from min_value to max_value."""
    return ieee_divide(value - min_value, max_value - min_value)


def get_mapped_range_value(
    input_range: tuple[float, float],
    output_range: tuple[float, float],
    value: float,
) -> float:
    """
    Map value from input_range onto output_range, clamped to the output.

    Args:
        input_range: (min, max) of the input domain.
        output_range: (min, max) of the output domain.
        value: Value in the input domain.

    Returns:
        Corresponding value in the output domain.
    """
    pct = clamp(get_range_pct(input_range[0], input_range[1], value), 0.0, 1.0)
    return lerp(output_range[0], output_range[1], pct)


def cubic_interp(p0: T, t0: T, p1: T, t1: T, alpha: float) -> T:
    """
    Cubic Hermite interpolation.

    Works on floats and on any type supporting + and scalar *.

    Args:
        p0: Start point.
        t0: Tangent at the start point.
        p1: End point.
        t1: Tangent at the end point.
        alpha: Distance along the spline in [0, 1].

    Returns:
        Interpolated value.
    """
    a2 = alpha * alpha
    a3 = a2 * alpha
    return (
        p0 * (2.0 * a3 - 3.0 * a2 + 1.0)  # type: ignore[operator]
        + t0 * (a3 - 2.0 * a2 + alpha)
        + t1 * (a3 - a2)
        + p1 * (-2.0 * a3 + 3.0 * a2)
    )


def cubic_interp_derivative(p0: T, t0: T, p1: T, t1: T, alpha: float) -> T:
    """First derivative of cubic_interp with respect to alpha."""
    a = p0 * 6.0 + t0 * 3.0 + t1 * 3.0 - p1 * 6.0  # type: ignore[operator]
    b = p0 * -6.0 - t0 * 4.0 - t1 * 2.0 + p1 * 6.0  # type: ignore[operator]
    return a * (alpha * alpha) + b * alpha + t0


def cubic_interp_second_derivative(p0: T, t0: T, p1: T, t1: T, alpha: float) -> T:
    """Second derivative of cubic_interp with respect to alpha."""
    a = p0 * 12.0 + t0 * 6.0 + t1 * 6.0 - p1 * 12.0  # type: ignore[operator]
    b = p0 * -6.0 - t0 * 4.0 - t1 * 2.0 + p1 * 6.0  # type: ignore[operator]
    return a * alpha + b


def interp_ease_in_out(a: T, b: T, alpha: float, exponent: float) -> T:
    """Interpolate from a to b with an ease-in/ease-out curve."""
    if alpha < 0.5:
        modified = 0.5 * math.pow(2.0 * alpha, exponent)
    else:
        modified = 1.0 - 0.5 * math.pow(2.0 * (1.0 - alpha), exponent)
    return lerp(a, b, modified)


def smooth_step(a: float, b: float, x: float) -> float:
    """Hermite smooth step from 0 at x <= a to 1 at x >= b."""
    if x < a:
        return 0.0
    if x >= b:
        return 1.0
    fraction = (x - a) / (b - a)
    return fraction * fraction * (3.0 - 2.0 * fraction)


def f_interp_to(current: float, target: float, delta_time: float, speed: float) -> float:
    """
    Ease a float towards a target, proportional to the remaining distance.

    Args:
        current: Current value.
        target: Target value.
        delta_time: Time step.
        speed: Interpolation speed. Zero jumps straight to target.

    Returns:
        New value.
    """
    if speed == 0.0:
        return target

    dist = target - current
    if dist * dist < SMALL_NUMBER:
        return target

    return current + dist * clamp(delta_time * speed, 0.0, 1.0)


def f_interp_constant_to(
    current: float, target: float, delta_time: float, speed: float
) -> float:
    """Move a float towards a target with a constant step."""
    dist = target - current
    if dist * dist < SMALL_NUMBER:
        return target

    step = speed * delta_time
    return current + clamp(dist, -step, step)

"""
Numeric constants for Spatium.

Precision classes, geometric thresholds and the axis-flag table shared by
every value type. All values are module-level and never mutated.
"""

from enum import Enum
import math

PI: float = math.pi
INV_PI: float = 1.0 / math.pi
HALF_PI: float = math.pi / 2.0

# Precision classes
SMALL_NUMBER: float = 1.0e-8
KINDA_SMALL_NUMBER: float = 1.0e-4
BIG_NUMBER: float = 3.4e38
DELTA: float = 1.0e-5

FLOAT_NORMAL_THRESH: float = 1.0e-4

THRESH_POINT_ON_PLANE: float = 0.10
THRESH_POINT_ON_SIDE: float = 0.20
THRESH_POINTS_ARE_SAME: float = 0.00002
THRESH_POINTS_ARE_NEAR: float = 0.015
THRESH_NORMALS_ARE_SAME: float = 0.00002
THRESH_VECTORS_ARE_NEAR: float = 0.0004
THRESH_SPLIT_POLY_WITH_PLANE: float = 0.25
THRESH_SPLIT_POLY_PRECISELY: float = 0.01
THRESH_ZERO_NORM_SQUARED: float = 0.0001
THRESH_VECTORS_ARE_PARALLEL: float = 0.02
THRESH_VECTOR_NORMALIZED: float = 0.01
THRESH_QUAT_NORMALIZED: float = 0.01

ZERO_ANIMWEIGHT_THRESH: float = 0.0001

# BIT_FLAG[i] == 1 << i
BIT_FLAG: tuple[int, ...] = tuple(1 << i for i in range(32))


class Axis(str, Enum):
    """Coordinate axis selector."""

    NONE = "none"
    X = "x"
    Y = "y"
    Z = "z"

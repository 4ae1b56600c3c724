"""Core value types for Spatium."""

from spatium.core.constants import Axis
from spatium.core.vector import Vector3, ZERO_VECTOR, ONE_VECTOR
from spatium.core.vector4 import Vector4
from spatium.core.plane import Plane
from spatium.core.bounds import Box, Sphere
from spatium.core.quat import Quaternion, IDENTITY_QUAT, slerp
from spatium.core.matrix import Matrix, IDENTITY_MATRIX
from spatium.core.rotator import Rotator, ZERO_ROTATOR
from spatium.core.transform import Transform, IDENTITY_TRANSFORM

__all__ = [
    "Axis",
    "Vector3",
    "ZERO_VECTOR",
    "ONE_VECTOR",
    "Vector4",
    "Plane",
    "Box",
    "Sphere",
    "Quaternion",
    "IDENTITY_QUAT",
    "slerp",
    "Matrix",
    "IDENTITY_MATRIX",
    "Rotator",
    "ZERO_ROTATOR",
    "Transform",
    "IDENTITY_TRANSFORM",
]

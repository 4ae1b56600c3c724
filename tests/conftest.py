"""
Shared pytest fixtures for Spatium tests.
"""

import math

import pytest

from spatium.config.schema import SelfCheckConfig, SpatiumConfig
from spatium.core.quat import Quaternion
from spatium.core.transform import Transform
from spatium.core.vector import Vector3


@pytest.fixture
def unit_triangle() -> tuple[Vector3, Vector3, Vector3]:
    """Right triangle on the XY plane with legs along X and Y."""
    return Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0)


@pytest.fixture
def unit_tetrahedron() -> tuple[Vector3, Vector3, Vector3, Vector3]:
    """Corner tetrahedron spanned by the origin and the three unit axes."""
    return (
        Vector3(0.0, 0.0, 0.0),
        Vector3(1.0, 0.0, 0.0),
        Vector3(0.0, 1.0, 0.0),
        Vector3(0.0, 0.0, 1.0),
    )


@pytest.fixture
def quarter_turn_z() -> Quaternion:
    """90 degree rotation about +Z."""
    return Quaternion.from_axis_angle(Vector3(0.0, 0.0, 1.0), math.pi / 2)


@pytest.fixture
def sample_transform() -> Transform:
    """Transform with rotation, translation and non-uniform scale."""
    return Transform(
        Quaternion.from_axis_angle(Vector3(1.0, 2.0, 3.0).safe_normal(), 0.7),
        Vector3(4.0, -5.0, 6.0),
        Vector3(1.5, 2.0, 0.5),
    )


@pytest.fixture
def small_config() -> SpatiumConfig:
    """Default configuration with a reduced sample count."""
    return SpatiumConfig(selfcheck=SelfCheckConfig(samples=50))

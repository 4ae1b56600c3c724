"""
Randomized property checks for Spatium.

Each check draws seeded samples, evaluates one algebraic property over
them and reports the worst error seen against its tolerance.
"""

from dataclasses import dataclass
import math
from typing import Callable

import numpy as np

from spatium.config.schema import CheckName, SpatiumConfig
from spatium.core.matrix import IDENTITY_MATRIX, Matrix
from spatium.core.quat import IDENTITY_QUAT, Quaternion, slerp
from spatium.core.transform import IDENTITY_TRANSFORM, Transform, compose
from spatium.core.vector import Vector3, ZERO_VECTOR
from spatium.geometry.closest import (
    closest_point_on_segment,
    closest_point_on_triangle_to_point,
    segment_dist_to_segment,
)
from spatium.logging.setup import get_logger
from spatium.utils.time import Timer

logger = get_logger(__name__)


@dataclass
class CheckResult:
    """Outcome of one property check."""

    name: CheckName
    passed: bool
    samples: int
    worst_error: float
    tolerance: float
    elapsed_ms: float

    def to_dict(self) -> dict:
        return {
            "name": self.name.value,
            "passed": self.passed,
            "samples": self.samples,
            "worst_error": self.worst_error,
            "tolerance": self.tolerance,
            "elapsed_ms": self.elapsed_ms,
        }


class _Sampler:
    """Seeded generator of random value types."""

    def __init__(self, config: SpatiumConfig) -> None:
        self._rng = np.random.default_rng(config.selfcheck.seed)
        self._max_translation = config.selfcheck.max_translation
        self._min_scale = config.selfcheck.min_scale
        self._max_scale = config.selfcheck.max_scale

    def vector(self) -> Vector3:
        return Vector3.from_array(
            self._rng.uniform(-self._max_translation, self._max_translation, size=3)
        )

    def quat(self) -> Quaternion:
        q = self._rng.normal(size=4)
        return Quaternion.from_array(q / np.linalg.norm(q))

    def scale(self) -> Vector3:
        return Vector3.from_array(self._rng.uniform(self._min_scale, self._max_scale, size=3))

    def transform(self, unit_scale: bool = False) -> Transform:
        scale = Vector3(1.0, 1.0, 1.0) if unit_scale else self.scale()
        return Transform(self.quat(), self.vector(), scale)


def _quat_error(a: Quaternion, b: Quaternion) -> float:
    diff = np.abs(a.to_array() - b.to_array()).max()
    flipped = np.abs(a.to_array() + b.to_array()).max()
    return float(min(diff, flipped))


def _transform_error(a: Transform, b: Transform) -> float:
    return max(
        _quat_error(a.rotation, b.rotation),
        (a.translation - b.translation).get_abs_max(),
        (a.scale3d - b.scale3d).get_abs_max(),
    )


def _check_round_trip(sampler: _Sampler, samples: int) -> float:
    worst = 0.0
    for _ in range(samples):
        q = sampler.quat()
        worst = max(worst, _quat_error(q, Quaternion.from_matrix(q.to_matrix())))
    return worst


def _check_associativity(sampler: _Sampler, samples: int) -> float:
    worst = 0.0
    for _ in range(samples):
        a = sampler.transform(unit_scale=True)
        b = sampler.transform(unit_scale=True)
        c = sampler.transform(unit_scale=True)
        point = sampler.vector()
        left = compose(compose(a, b), c).transform_position(point)
        right = compose(a, compose(b, c)).transform_position(point)
        worst = max(worst, (left - right).size())
    return worst


def _check_identity(sampler: _Sampler, samples: int) -> float:
    worst = 0.0
    for _ in range(samples):
        t = sampler.transform()
        q = sampler.quat()
        m = t.to_matrix_with_scale()
        worst = max(
            worst,
            _transform_error(compose(IDENTITY_TRANSFORM, t), t),
            _transform_error(compose(t, IDENTITY_TRANSFORM), t),
            _quat_error(q.multiply(IDENTITY_QUAT), q),
            float(np.abs(m.multiply(IDENTITY_MATRIX).m - m.m).max()),
        )
    return worst


def _check_shortest_path(sampler: _Sampler, samples: int) -> float:
    worst = 0.0
    for _ in range(samples):
        q1 = sampler.quat()
        q2 = sampler.quat()
        half = q1.angular_distance(q2) * 0.5
        # Both signs of q2 describe the same rotation; the midpoint must not depend on it.
        for target in (q2, -q2):
            mid = slerp(q1, target, 0.5).normalized()
            worst = max(worst, abs(q1.angular_distance(mid) - half))
    return worst


def _check_segment_symmetry(sampler: _Sampler, samples: int) -> float:
    worst = 0.0
    for _ in range(samples):
        a1, b1, a2, b2 = (sampler.vector() for _ in range(4))
        x1, x2 = segment_dist_to_segment(a1, b1, a2, b2)
        y2, y1 = segment_dist_to_segment(a2, b2, a1, b1)
        worst = max(worst, abs(Vector3.dist(x1, x2) - Vector3.dist(y1, y2)))
    return worst


def _check_degenerate_safety(sampler: _Sampler, samples: int) -> float:
    failures = 0
    for _ in range(samples):
        p = sampler.vector()
        q = sampler.quat()
        zero_scale = Transform(q, p, ZERO_VECTOR)
        results = (
            ZERO_VECTOR.safe_normal(),
            closest_point_on_segment(sampler.vector(), p, p),
            closest_point_on_triangle_to_point(sampler.vector(), p, p, p),
            zero_scale.inverse_safe().translation,
            Quaternion.find_between(p.safe_normal(), -p.safe_normal()).rotate_vector(p),
        )
        singular = Matrix(np.zeros((4, 4))).inverse_safe()
        if any(r.contains_nan() for r in results) or singular != IDENTITY_MATRIX:
            failures += 1
    return float(failures)


_CHECKS: dict[CheckName, tuple[Callable[[_Sampler, int], float], Callable[[SpatiumConfig], float]]] = {
    CheckName.ROUND_TRIP: (_check_round_trip, lambda c: c.tolerances.round_trip),
    CheckName.ASSOCIATIVITY: (_check_associativity, lambda c: c.tolerances.associativity),
    CheckName.IDENTITY: (_check_identity, lambda c: c.tolerances.normalization),
    CheckName.SHORTEST_PATH: (_check_shortest_path, lambda c: c.tolerances.round_trip),
    CheckName.SEGMENT_SYMMETRY: (_check_segment_symmetry, lambda c: c.tolerances.round_trip),
    CheckName.DEGENERATE_SAFETY: (_check_degenerate_safety, lambda c: 0.0),
}


def run_selfcheck(config: SpatiumConfig) -> list[CheckResult]:
    """
    Run every enabled property check.

    Args:
        config: Configuration supplying the seed, sample count, sampling
            ranges, enabled checks and tolerances.

    Returns:
        One CheckResult per enabled check, in configuration order.
    """
    sampler = _Sampler(config)
    samples = config.selfcheck.samples
    results: list[CheckResult] = []

    for name in config.selfcheck.checks:
        check, tolerance_of = _CHECKS[name]
        tolerance = tolerance_of(config)

        with Timer() as timer:
            worst = check(sampler, samples)

        passed = math.isfinite(worst) and worst <= tolerance
        results.append(
            CheckResult(
                name=name,
                passed=passed,
                samples=samples,
                worst_error=worst,
                tolerance=tolerance,
                elapsed_ms=timer.elapsed_ms,
            )
        )
        logger.info(
            "selfcheck_result",
            check=name.value,
            passed=passed,
            worst_error=worst,
            tolerance=tolerance,
        )

    return results

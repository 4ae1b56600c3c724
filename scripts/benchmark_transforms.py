#!/usr/bin/env python3
"""
Latency Benchmark Utility for Spatium.

Measures per-call latency of the core operations: quaternion products and
slerp, matrix products and inverses, transform composition and the
closest-point queries.

Usage:
    python scripts/benchmark_transforms.py --config configs/default.yaml
"""

import argparse
from pathlib import Path
import statistics
import sys
from typing import Callable, List

import numpy as np

from spatium.config.loader import get_default_config, load_config
from spatium.core.quat import Quaternion, slerp
from spatium.core.transform import Transform, compose
from spatium.core.vector import Vector3
from spatium.geometry.closest import (
    closest_point_on_tetrahedron_to_point,
    closest_point_on_triangle_to_point,
    segment_dist_to_segment,
)
from spatium.utils.time import sample_latencies_us


def random_quat(rng: np.random.Generator) -> Quaternion:
    q = rng.normal(size=4)
    return Quaternion.from_array(q / np.linalg.norm(q))


def random_vector(rng: np.random.Generator, extent: float = 100.0) -> Vector3:
    return Vector3.from_array(rng.uniform(-extent, extent, size=3))


def random_transform(rng: np.random.Generator) -> Transform:
    return Transform(
        random_quat(rng),
        random_vector(rng),
        Vector3.from_array(rng.uniform(0.5, 2.0, size=3)),
    )


def build_cases(rng: np.random.Generator) -> dict[str, Callable[[], object]]:
    """
    Build the benchmark cases.

    Args:
        rng: Seeded random generator for the operands.

    Returns:
        Mapping of case name to a zero-argument callable.
    """
    q1, q2 = random_quat(rng), random_quat(rng)
    t1, t2 = random_transform(rng), random_transform(rng)
    m1, m2 = t1.to_matrix_with_scale(), t2.to_matrix_with_scale()
    a, b, c, d = (random_vector(rng) for _ in range(4))
    p = random_vector(rng)

    return {
        "Quaternion multiply": lambda: q1.multiply(q2),
        "Quaternion slerp": lambda: slerp(q1, q2, 0.3),
        "Quaternion to matrix": lambda: q1.to_matrix(),
        "Matrix multiply": lambda: m1.multiply(m2),
        "Matrix inverse": lambda: m1.inverse(),
        "Transform compose": lambda: compose(t1, t2),
        "Transform position": lambda: t1.transform_position(p),
        "Transform relative": lambda: t1.get_relative_transform(t2),
        "Segment to segment": lambda: segment_dist_to_segment(a, b, c, d),
        "Closest on triangle": lambda: closest_point_on_triangle_to_point(p, a, b, c),
        "Closest on tetrahedron": lambda: closest_point_on_tetrahedron_to_point(p, a, b, c, d),
    }


def print_statistics(name: str, latencies: List[float]) -> None:
    """Print latency statistics."""
    if not latencies:
        print(f"{name}: No data")
        return

    ordered = sorted(latencies)
    mean = statistics.mean(latencies)
    stdev = statistics.stdev(latencies) if len(latencies) > 1 else 0.0

    print(f"\n{name}")
    print("-" * 50)
    print(f"  Samples:     {len(latencies)}")
    print(f"  Mean:        {mean:.3f} us")
    print(f"  Median:      {statistics.median(latencies):.3f} us")
    print(f"  Std Dev:     {stdev:.3f} us")
    print(f"  Min:         {ordered[0]:.3f} us")
    print(f"  Max:         {ordered[-1]:.3f} us")
    print(f"  P95:         {ordered[int(len(ordered) * 0.95) - 1]:.3f} us")
    print(f"  P99:         {ordered[int(len(ordered) * 0.99) - 1]:.3f} us")
    print(f"  Throughput:  {1_000_000 / mean:.0f} ops/s")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Latency benchmark utility for the Spatium transform library.",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Configuration file supplying benchmark iterations and warmup",
    )

    parser.add_argument(
        "--iterations",
        "-n",
        type=int,
        default=None,
        help="Override the number of benchmark iterations",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for the operands",
    )

    args = parser.parse_args()

    cfg = load_config(args.config) if args.config else get_default_config()
    iterations = args.iterations or cfg.benchmark.iterations
    warmup = cfg.benchmark.warmup

    print("=" * 60)
    print("SPATIUM LATENCY BENCHMARK")
    print("=" * 60)
    print(f"Iterations: {iterations}")
    print(f"Warmup:     {warmup}")
    print(f"Seed:       {args.seed}")

    cases = build_cases(np.random.default_rng(args.seed))
    for name, fn in cases.items():
        print_statistics(name, sample_latencies_us(fn, iterations, warmup))

    print("\n" + "=" * 60)
    print("BENCHMARK COMPLETE")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())

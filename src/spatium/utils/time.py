"""
Time utilities for Spatium.

Provides the Timer context manager and a latency sampler used by the
self-check and the benchmark script.
"""

import time
from typing import Callable, Optional


class Timer:
    """
    Context manager for timing code blocks.

    Example:
        with Timer() as t:
            run_checks()
        print(f"Elapsed: {t.elapsed_ms:.2f} ms")
    """

    def __init__(self) -> None:
        self._start: float = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *args: object) -> None:
        self._end = time.perf_counter()

    @property
    def elapsed_s(self) -> float:
        """Elapsed time in seconds; still running while inside the block."""
        end = time.perf_counter() if self._end is None else self._end
        return end - self._start

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        return self.elapsed_s * 1000.0


def sample_latencies_us(
    fn: Callable[[], object], iterations: int, warmup: int = 0
) -> list[float]:
    """
    Time repeated calls of a zero-argument function.

    Args:
        fn: Function to call.
        iterations: Number of timed calls.
        warmup: Number of untimed calls made first.

    Returns:
        Per-call latency in microseconds, one entry per timed call.
    """
    for _ in range(warmup):
        fn()

    latencies: list[float] = []
    for _ in range(iterations):
        start = time.perf_counter()
        fn()
        latencies.append((time.perf_counter() - start) * 1_000_000.0)
    return latencies

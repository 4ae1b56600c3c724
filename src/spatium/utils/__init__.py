"""Utility modules for Spatium."""

from spatium.utils.time import Timer, sample_latencies_us
from spatium.utils.io import ensure_dir, load_yaml, save_yaml

__all__ = [
    "Timer",
    "sample_latencies_us",
    "ensure_dir",
    "load_yaml",
    "save_yaml",
]

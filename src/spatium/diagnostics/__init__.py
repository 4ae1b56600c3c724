"""Diagnostics module for Spatium."""

from spatium.diagnostics.selfcheck import CheckResult, run_selfcheck

__all__ = [
    "CheckResult",
    "run_selfcheck",
]

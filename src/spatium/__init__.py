"""
Spatium - Spatial-transform algebra for Python.

This package provides immutable vectors, quaternions, 4x4 matrices, Euler
rotators, planes and composite scale-rotation-translation transforms,
together with the closest-point, intersection and interpolation routines
that operate on them.
"""

from spatium.version import __version__

__all__ = ["__version__"]

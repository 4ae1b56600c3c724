"""Version information for Spatium."""

__version__ = "0.1.0"

"""Configuration module for Spatium."""

from spatium.config.schema import (
    BenchmarkConfig,
    CheckName,
    ProjectConfig,
    SelfCheckConfig,
    SpatiumConfig,
    ToleranceConfig,
)
from spatium.config.loader import get_default_config, load_config, save_config
from spatium.config.validation import ConfigurationError, validate_config

__all__ = [
    "BenchmarkConfig",
    "CheckName",
    "ProjectConfig",
    "SelfCheckConfig",
    "SpatiumConfig",
    "ToleranceConfig",
    "get_default_config",
    "load_config",
    "save_config",
    "ConfigurationError",
    "validate_config",
]

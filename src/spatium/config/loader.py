"""
Configuration loader for Spatium.

Handles YAML loading, validation and saving of configuration files.
"""

from pathlib import Path

from spatium.config.schema import SpatiumConfig
from spatium.config.validation import validate_config
from spatium.utils.io import load_yaml, save_yaml


def load_config(config_path: Path) -> SpatiumConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Validated SpatiumConfig instance.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ConfigurationError: If cross-field validation fails.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    config = SpatiumConfig(**load_yaml(config_path))
    validate_config(config)

    return config


def save_config(config: SpatiumConfig, output_path: Path) -> None:
    """
    Save configuration to a YAML file.

    Args:
        config: SpatiumConfig instance to save.
        output_path: Path to the output YAML file.
    """
    save_yaml(config.model_dump(mode="json"), Path(output_path))


def get_default_config() -> SpatiumConfig:
    """
    Get default configuration with all default values.

    Returns:
        SpatiumConfig instance with defaults.
    """
    return SpatiumConfig()

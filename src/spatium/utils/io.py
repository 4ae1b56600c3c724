"""
I/O utilities for Spatium.

Provides YAML loading/saving and directory creation.
"""

from pathlib import Path
from typing import Any

import yaml


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The same path for chaining.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping; an empty file loads as an empty dict.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def save_yaml(data: Any, path: Path) -> None:
    """
    Save data to YAML, creating parent directories.

    Args:
        data: Plain YAML-serializable data (dicts, lists, scalars).
        path: Output path.
    """
    path = ensure_dir(Path(path).parent) / Path(path).name

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

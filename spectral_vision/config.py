"""
Configuration management for Spectral Vision.

Loads VisionParameters from file with sensible defaults. No magic, no surprises.
"""

from __future__ import annotations

import json
import logging
import os

from pathlib import Path
from typing import Any

from .types import VisionParameters

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./spectral_vision_config.json"
CONFIG_ENV_VAR = "SPECTRAL_VISION_CONFIG"


def load_config(config_path: str | None = None) -> VisionParameters:
    """
    Load parameters from file, with fallback to defaults.

    Priority:
    1. Explicit config_path argument
    2. SPECTRAL_VISION_CONFIG environment variable
    3. Default path (./spectral_vision_config.json)
    4. Built-in defaults

    Raises:
        ValueError: If the file is not valid JSON or holds invalid parameters.
    """
    path = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)

    if Path(path).exists():
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e
        logger.debug(f"Loaded parameters from {path}")
        return _dict_to_params(data)

    if config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")

    return VisionParameters()


def save_config(params: VisionParameters, config_path: str | None = None) -> None:
    """
    Save parameters to file.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    Path(path).parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(params.to_dict(), f, indent=2)


def _dict_to_params(data: Any) -> VisionParameters:
    """Convert dictionary to VisionParameters, accepting a nested "parameters" block."""
    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a JSON object, got {type(data).__name__}")
    if "parameters" in data and isinstance(data["parameters"], dict):
        data = data["parameters"]
    return VisionParameters.from_dict(data)


def create_default_config_file(path: str = DEFAULT_CONFIG_PATH) -> None:
    """Create a default configuration file for users to customize."""
    save_config(VisionParameters(), path)
    print(f"Created default config at: {path}")

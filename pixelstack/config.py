"""
Configuration management for PixelStack
"""

import yaml
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

ROTATE_INTERPOLATIONS = ("nearest", "bilinear")


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """
    Recursively expand environment variables in config values.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        pattern = r'\$\{([^}]+)\}'
        def replace_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))  # Return original if not found
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def _merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from a loaded config with default values."""
    merged = dict(defaults)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses the packaged config.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        config = _expand_env_vars(config)
        return _merge_defaults(config, get_default_config())
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'engine': {
            'rotate_interpolation': 'bilinear',
            'blur_passes': 3,
            'min_buffer_size': 1,
            'incremental': True,
        },
        'export': {
            'format': 'WEBP',
            'quality': 90,
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    }


def save_config(config: Dict[str, Any], config_path: Path) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, indent=2)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation

    Args:
        config: Configuration dictionary
        key_path: Dot-separated key path (e.g., 'engine.blur_passes')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default


def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """
    Update a nested configuration value using dot notation

    Args:
        config: Configuration dictionary to update
        key_path: Dot-separated key path (e.g., 'engine.incremental')
        value: New value to set
    """
    keys = key_path.split('.')
    current = config

    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value


@dataclass(frozen=True)
class EngineSettings:
    """Tunables consumed by the composition engine."""
    rotate_interpolation: str = "bilinear"
    blur_passes: int = 3
    min_buffer_size: int = 1
    incremental: bool = True

    def __post_init__(self):
        if self.rotate_interpolation not in ROTATE_INTERPOLATIONS:
            raise ValueError(
                f"rotate_interpolation must be one of {ROTATE_INTERPOLATIONS}, "
                f"got {self.rotate_interpolation!r}"
            )
        if self.blur_passes < 1:
            raise ValueError(f"blur_passes must be >= 1, got {self.blur_passes}")
        if self.min_buffer_size < 1:
            raise ValueError(f"min_buffer_size must be >= 1, got {self.min_buffer_size}")

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'EngineSettings':
        """Build engine settings from a configuration dictionary."""
        if config is None:
            config = get_default_config()
        defaults = cls()
        return cls(
            rotate_interpolation=str(get_config_value(
                config, 'engine.rotate_interpolation', defaults.rotate_interpolation)).lower(),
            blur_passes=int(get_config_value(config, 'engine.blur_passes', defaults.blur_passes)),
            min_buffer_size=int(get_config_value(
                config, 'engine.min_buffer_size', defaults.min_buffer_size)),
            incremental=bool(get_config_value(config, 'engine.incremental', defaults.incremental)),
        )

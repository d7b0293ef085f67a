"""
Configuration loading utilities.
"""

from pathlib import Path
from typing import Any, Dict, List

import yaml


# Custom Exception Classes
class ConfigError(Exception):
    """Raised when there are issues with configuration."""
    pass


class DataError(Exception):
    """Raised when there are issues with data loading or parsing."""
    pass


class ValidationError(Exception):
    """Raised when data validation fails."""
    pass


class InvalidArgument(ValidationError, ValueError):
    """Raised by the estimation core for bad estimators, bandwidths or data."""
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'start_date': '2010-01-01',
        'end_date': '2017-12-31',
        'cache_dir': './data/cache',
        'cache_format': 'parquet',
        'cache_capacity': 8,
        'retry_attempts': 3,
        'rate_limit_delay': 1.0,
        'date_format': '%d/%m/%Y',
    },
    'volatility': {
        'default_estimator': 'YZ',
        'bandwidths': [30, 60, 90, 120],
        'quantiles': [0.25, 0.75],
        'comparison_bandwidth': 30,
        'annualization_factor': 252,
    },
    'output': {
        'charts_dir': './outputs/charts',
        'dpi': 150,
    },
    'logging': {
        'level': 'INFO',
        'file': None,
        'console': True,
    },
}


def load_config(config_path: str = 'config.yaml') -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigError: If config file cannot be loaded
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file must contain a mapping, got {type(config).__name__}")
    return config


def merge_config(config: Dict[str, Any], defaults: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Overlay a loaded configuration on top of the defaults, section by section.

    Args:
        config: Configuration loaded from file (may be partial)
        defaults: Default configuration (DEFAULT_CONFIG when omitted)

    Returns:
        New dictionary, defaults are not modified
    """
    defaults = DEFAULT_CONFIG if defaults is None else defaults
    merged = {}
    for section, values in defaults.items():
        merged[section] = dict(values) if isinstance(values, dict) else values
    for section, values in (config or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def validate_config(config: Dict[str, Any], required_keys: List[str]) -> None:
    """
    Validate that config contains required keys.

    Args:
        config: Configuration dictionary
        required_keys: List of required key names

    Raises:
        ConfigError: If required keys are missing
    """
    missing = [key for key in required_keys if key not in config]
    if missing:
        raise ConfigError(f"Missing required config keys: {missing}")

"""
grove.config - Configuration loading and defaults
"""

from grove.config.defaults import DEFAULT_CONFIG
from grove.config.loader import (
    GroveConfig,
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "GroveConfig",
    "find_config_file",
    "get_config",
    "load_config",
    "merge_configs",
    "validate_config",
]

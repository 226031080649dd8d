"""
grove.config.loader - Configuration file loading and merging

Configuration comes from three layers, later ones winning:
built-in defaults, a TOML file, and GROVE_SECTION_KEY environment
variables.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomlkit

from grove.config.defaults import COLOR_CHOICES, CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find a configuration file for start_path.

    Looks for .grove.toml in start_path and its parents, then for
    $XDG_CONFIG_HOME/grove/config.toml.

    Args:
        start_path: Directory to start searching from (default: cwd).

    Returns:
        Path to the config file, or None if not found.
    """
    current = Path(start_path or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

    user_config = _xdg_dir("XDG_CONFIG_HOME", ".config") / "config.toml"
    if user_config.is_file():
        return user_config
    return None


def _xdg_dir(variable: str, fallback: str) -> Path:
    base = os.environ.get(variable) or str(Path.home() / fallback)
    return Path(base) / "grove"


def default_database_path() -> Path:
    """Return $XDG_DATA_HOME/grove/graph.db (~/.local/share by default)."""
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / "graph.db"


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers."""
    return tomlkit.parse(content).unwrap()


def load_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration, merged over the defaults.

    Args:
        config_path: TOML file to read, or None for defaults only.

    Returns:
        Merged configuration dictionary with environment overrides applied.
    """
    user_config: dict[str, Any] = {}
    if config_path is not None:
        user_config = parse_toml(Path(config_path).read_text(encoding="utf-8"))
        _resolve_relative_paths(user_config, Path(config_path).parent)

    merged = merge_configs(DEFAULT_CONFIG, user_config)
    return _apply_env_overrides(merged)


def _resolve_relative_paths(config: dict[str, Any], base: Path) -> None:
    # A relative database path in a config file is relative to that file.
    database = config.get("database")
    if isinstance(database, dict):
        path = database.get("path")
        if isinstance(path, str) and path and not Path(path).expanduser().is_absolute():
            database["path"] = str(base / path)


def merge_configs(defaults: dict[str, Any], user: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge user over defaults without mutating either."""
    result = copy.deepcopy(defaults)
    for key, value in user.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Interpret an environment value.

    JSON lists and objects are decoded, true/false become booleans and
    numbers become ints or floats; anything else (including malformed JSON) is
    returned unchanged.
    """
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    for number in (int, float):
        try:
            return number(stripped)
        except ValueError:
            continue
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply GROVE_SECTION_KEY=value environment variables.

    The first underscore after the prefix separates section from key, so
    GROVE_DISPLAY_DAY_START sets display.day_start.
    """
    for name, value in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        rest = name[len(ENV_PREFIX):].lower()
        section, sep, key = rest.partition("_")
        if not sep or not section or not key:
            continue
        config.setdefault(section, {})
        if isinstance(config[section], dict):
            config[section][key] = _try_parse_env_value(value)
    return config


def validate_config(config: dict[str, Any]) -> list[str]:
    """Check a merged configuration.

    Returns:
        Human-readable problems; empty if the configuration is usable.
    """
    errors: list[str] = []

    database = config.get("database")
    if not isinstance(database, dict):
        errors.append("Missing [database] section")
    else:
        if not isinstance(database.get("path", ""), str):
            errors.append("database.path must be a string")
        timeout = database.get("timeout", 5.0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            errors.append("database.timeout must be a non-negative number")

    display = config.get("display")
    if not isinstance(display, dict):
        errors.append("Missing [display] section")
    else:
        if display.get("color", "auto") not in COLOR_CHOICES:
            errors.append(f"display.color must be one of: {', '.join(COLOR_CHOICES)}")
        day_start = display.get("day_start", 0)
        if isinstance(day_start, bool) or not isinstance(day_start, int) or not 0 <= day_start < 24:
            errors.append("display.day_start must be an hour between 0 and 23")

    return errors


@dataclass(frozen=True)
class GroveConfig:
    """Resolved settings handed to grove.app.App."""

    database_path: Path
    timeout: float = 5.0
    color: str = "auto"
    day_start: int = 0

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> GroveConfig:
        """Build from a merged configuration dictionary.

        Raises:
            ValueError: If validate_config reports problems.
        """
        errors = validate_config(config)
        if errors:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        path = config["database"].get("path") or ""
        return cls(
            database_path=Path(path).expanduser() if path else default_database_path(),
            timeout=float(config["database"].get("timeout", 5.0)),
            color=config["display"].get("color", "auto"),
            day_start=int(config["display"].get("day_start", 0)),
        )


def get_config(
    config_path: Path | None = None,
    start_path: Path | None = None,
) -> GroveConfig:
    """Locate, load and resolve configuration.

    Args:
        config_path: Explicit config file (skips discovery).
        start_path: Directory to start discovery from (default: cwd).
    """
    path = config_path or find_config_file(start_path)
    return GroveConfig.from_dict(load_config(path))

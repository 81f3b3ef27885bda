"""Configuration loading and merging for the insight explorer.

Handles TOML loading, config discovery, deep merging, and environment overlay.
"""

from __future__ import annotations

import os
import threading
import tomllib
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config_schema import ExplorerConfig
from .errors import ConfigError

CONFIG_FILENAME = "config.toml"

USER_CONFIG_DIR = ".insight-explorer"
PROJECT_CONFIG_DIR = ".insight-explorer"

# Environment variable -> (section path, key)
ENV_MAPPING: Dict[str, tuple[list[str], str]] = {
    # Disambiguation
    "INSIGHT_EXPLORER_HUB_THRESHOLD": (["disambiguation"], "hub_threshold"),
    "INSIGHT_EXPLORER_PAIR_OFFSET_UNIT": (["disambiguation"], "pair_offset_unit"),
    # Layout
    "INSIGHT_EXPLORER_LINK_DISTANCE": (["layout"], "link_distance"),
    "INSIGHT_EXPLORER_LINK_STRENGTH": (["layout"], "link_strength"),
    "INSIGHT_EXPLORER_CHARGE_STRENGTH": (["layout"], "charge_strength"),
    "INSIGHT_EXPLORER_COLLISION_PADDING": (["layout"], "collision_padding"),
    # Search
    "INSIGHT_EXPLORER_SEARCH_FUZZY": (["search"], "fuzzy"),
    "INSIGHT_EXPLORER_SEARCH_PREFIX": (["search"], "prefix"),
    "INSIGHT_EXPLORER_SEARCH_COMBINE": (["search"], "combine_with"),
    # Logging
    "INSIGHT_EXPLORER_LOG_LEVEL": (["logging"], "level"),
    "INSIGHT_EXPLORER_LOG_DIR": (["logging"], "dir"),
    "INSIGHT_EXPLORER_LOG_MAX_BYTES": (["logging"], "max_bytes"),
    "INSIGHT_EXPLORER_LOG_BACKUP_COUNT": (["logging"], "backup_count"),
    "INSIGHT_EXPLORER_LOG_DISABLE_FILE": (["logging"], "disable_file"),
}


def _get_user_config_dir() -> Path:
    """Get user-level config directory (~/.insight-explorer/)."""
    return Path.home() / USER_CONFIG_DIR


def _get_project_config_dir(project_path: Optional[Path] = None) -> Optional[Path]:
    """Get project-level config directory (.insight-explorer/).

    Searches upward from project_path to find .insight-explorer/ directory.
    """
    if project_path is None:
        project_path = Path.cwd()

    if not project_path.is_absolute():
        project_path = project_path.resolve()

    current = project_path
    while current != current.parent:
        config_dir = current / PROJECT_CONFIG_DIR
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    return None


def _load_toml(path: Path) -> Dict[str, Any]:
    """Load a TOML file.

    Raises:
        ConfigError: If file cannot be loaded or parsed
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries.

    Override values take precedence. Nested dicts are merged recursively.
    Lists are replaced, not merged.
    """
    result = base.copy()

    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overlay(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config dict."""
    result = _deep_merge({}, config_dict)

    for env_var, (section_path, key_name) in ENV_MAPPING.items():
        value = os.getenv(env_var)
        if value is None:
            continue

        current = result
        for section in section_path:
            if not isinstance(current.get(section), dict):
                current[section] = {}
            current = current[section]

        # Type conversion happens during Pydantic validation
        current[key_name] = value

    return result


def load_config(
    project_path: Optional[Path] = None,
    skip_env: bool = False,
) -> ExplorerConfig:
    """Load and merge explorer configuration.

    Discovery order (later sources override earlier):
    1. Built-in defaults
    2. User config (~/.insight-explorer/config.toml)
    3. Project config (.insight-explorer/config.toml)
    4. Environment variables (unless skip_env=True)

    Args:
        project_path: Project directory for config discovery
        skip_env: Skip environment variable overlay

    Returns:
        Merged ExplorerConfig

    Raises:
        ConfigError: If the project config or the merged result is invalid
    """
    config_dict: Dict[str, Any] = {}

    user_config_path = _get_user_config_dir() / CONFIG_FILENAME
    if user_config_path.exists():
        try:
            config_dict = _deep_merge(config_dict, _load_toml(user_config_path))
        except ConfigError as e:
            # User config is optional, warn but continue
            warnings.warn(
                f"Skipping invalid user config at {user_config_path}: {e}",
                UserWarning,
            )

    project_config_dir = _get_project_config_dir(project_path)
    if project_config_dir:
        project_config_path = project_config_dir / CONFIG_FILENAME
        if project_config_path.exists():
            try:
                config_dict = _deep_merge(config_dict, _load_toml(project_config_path))
            except ConfigError as e:
                raise ConfigError(f"Invalid project config: {e}")

    if not skip_env:
        config_dict = _apply_env_overlay(config_dict)

    try:
        return ExplorerConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed:\n{e}")


_cached_config: Optional[ExplorerConfig] = None
_cached_project_path: Optional[Path] = None
_config_lock = threading.Lock()


def get_config(project_path: Optional[Path] = None, force_reload: bool = False) -> ExplorerConfig:
    """Get cached config, loading if necessary."""
    global _cached_config, _cached_project_path

    normalized_path = project_path.resolve() if project_path and str(project_path) else None

    with _config_lock:
        if (
            force_reload
            or _cached_config is None
            or _cached_project_path != normalized_path
        ):
            _cached_config = load_config(project_path)
            _cached_project_path = normalized_path

        return _cached_config


def clear_config_cache() -> None:
    """Clear cached config."""
    global _cached_config, _cached_project_path
    with _config_lock:
        _cached_config = None
        _cached_project_path = None

"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import os
from pathlib import Path
from typing import Any

from .models import PlangraphConfig

# Global cache to avoid reloading config multiple times per session
_config_cache: PlangraphConfig | None = None

_FALSE_VALUES = ("false", "0", "no", "off")
_TRUE_VALUES = ("true", "1", "yes", "on")


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/plangraph/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "plangraph" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Project directory (defaults to current directory)

    Returns:
        Path to .plangraph.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".plangraph.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`; nested dicts
    are merged, not replaced.

    Example:
        >>> deep_merge({"paths": {"tasks": "tasks"}}, {"paths": {"tasks": "plans"}})
        {'paths': {'tasks': 'plans'}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        print(f"Warning: Failed to parse config at {path}: {e}")
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        PLANGRAPH_TASKS_DIR - overrides paths.tasks
        PLANGRAPH_TRUNK_BRANCH - overrides renumber.trunk_branch
        PLANGRAPH_BRANCH_AWARE - overrides renumber.branch_aware

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if tasks_dir := os.environ.get("PLANGRAPH_TASKS_DIR"):
        result["paths"] = {**result.get("paths", {}), "tasks": tasks_dir}

    if trunk := os.environ.get("PLANGRAPH_TRUNK_BRANCH"):
        result["renumber"] = {**result.get("renumber", {}), "trunk_branch": trunk}

    if aware_str := os.environ.get("PLANGRAPH_BRANCH_AWARE"):
        lowered = aware_str.strip().lower()
        if lowered in _TRUE_VALUES or lowered in _FALSE_VALUES:
            result["renumber"] = {
                **result.get("renumber", {}),
                "branch_aware": lowered in _TRUE_VALUES,
            }
        else:
            print(f"Warning: Invalid PLANGRAPH_BRANCH_AWARE value '{aware_str}', ignoring")

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "paths": {"tasks": "tasks"},
        "renumber": {"branch_aware": True, "trunk_branch": None},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> PlangraphConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (PLANGRAPH_*)
        2. Project config (.plangraph.json)
        3. User config (~/.config/plangraph/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .plangraph.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated PlangraphConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.renumber.branch_aware
        True
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = PlangraphConfig(**merged)
    _config_cache = config
    return config


def resolve_tasks_dir(project_dir: Path, config: PlangraphConfig) -> Path:
    """Absolute tasks directory for a project (absolute ``paths.tasks`` wins)."""
    tasks = Path(config.paths.tasks).expanduser()
    if tasks.is_absolute():
        return tasks
    return project_dir / tasks


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None

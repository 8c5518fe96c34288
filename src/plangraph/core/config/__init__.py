"""
Configuration models and loading.

Pydantic models for plangraph configuration with multi-layer merging:
defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
    resolve_tasks_dir,
)
from .models import PathsConfig, PlangraphConfig, RenumberConfig

__all__ = [
    # Models
    "PathsConfig",
    "PlangraphConfig",
    "RenumberConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "resolve_tasks_dir",
]

"""Layered .env loading for PLANGRAPH_* settings.

Only ``PLANGRAPH_``-prefixed variables are taken from .env files, so a
project's unrelated secrets never leak into the process. Precedence:

  os.environ (pre-existing) > project .env.local > project .env > user .env

The merged values are applied to ``os.environ``, where
``apply_env_overrides()`` picks them up.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "PLANGRAPH_"


def _read_plangraph_vars(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    values = {
        key: value
        for key, value in dotenv_values(path).items()
        if key and key.startswith(ENV_PREFIX) and value is not None
    }
    logger.debug("Loaded %d PLANGRAPH_* variables from %s", len(values), path)
    return values


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> None:
    """Apply PLANGRAPH_* variables from user and project .env files.

    Later files win over earlier ones; variables already set in the
    process environment are never replaced.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths
    """
    if project_dir is None:
        project_dir = Path.cwd()
    if user_env_paths is None:
        user_env_paths = [get_xdg_config_home() / "plangraph" / ".env"]
    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    merged: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        merged.update(_read_plangraph_vars(Path(path)))

    for key, value in merged.items():
        if key in os.environ:
            logger.debug("Keeping %s from the process environment", key)
            continue
        os.environ[key] = value

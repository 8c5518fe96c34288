"""
Pytest configuration and shared fixtures.

Provides temp tasks directories, a plan-file factory, and isolation from
the developer's own plangraph config and environment.
"""

from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from plangraph.core.config import clear_cache

WritePlan = Callable[..., Path]

# ==============================================================================
# Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, PLANGRAPH_* env vars and the config cache out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in ("PLANGRAPH_TASKS_DIR", "PLANGRAPH_TRUNK_BRANCH", "PLANGRAPH_BRANCH_AWARE"):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def plans_dir(tmp_path) -> Path:
    """Provide an empty tasks directory."""
    directory = tmp_path / "tasks"
    directory.mkdir()
    return directory


@pytest.fixture
def write_plan(plans_dir) -> WritePlan:
    """
    Factory that writes a raw plan file into ``plans_dir``.

    Fields are written as-is, so tests can create files with duplicate,
    missing or malformed ids.

    Example:
        write_plan("1-auth.yml", id=1, title="Auth", tasks=[{"title": "t"}])
    """

    def _write(name: str, **fields: Any) -> Path:
        path = plans_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(fields, sort_keys=False), encoding="utf-8")
        return path

    return _write


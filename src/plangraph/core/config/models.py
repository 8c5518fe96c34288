"""
Configuration data models for plangraph.

These models define the structure of .plangraph.json and
~/.config/plangraph/config.json files, validated with Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathsConfig(BaseModel):
    """Where plan files live."""

    tasks: str = Field(
        default="tasks",
        description="Tasks directory, relative to the project root",
    )

    @field_validator("tasks")
    @classmethod
    def validate_tasks(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("paths.tasks must not be empty")
        return v


class RenumberConfig(BaseModel):
    """
    Renumber behavior.

    With branch awareness on, plans changed on the current branch give up
    their id when they collide with a plan from trunk.
    """

    branch_aware: bool = Field(
        default=True,
        description="Use git branch changes to decide which duplicate keeps its id",
    )
    trunk_branch: str | None = Field(
        default=None,
        description="Trunk branch to diff against (auto-detects main, then master)",
    )


class PlangraphConfig(BaseModel):
    """
    Top-level plangraph configuration.

    Example:
        >>> config = PlangraphConfig()
        >>> config.paths.tasks
        'tasks'
    """

    model_config = ConfigDict(extra="ignore")

    paths: PathsConfig = Field(default_factory=PathsConfig)
    renumber: RenumberConfig = Field(default_factory=RenumberConfig)

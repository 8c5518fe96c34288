"""Core plangraph functionality: plan storage, renumbering and readiness."""

"""
Plan file store.

Reads and writes individual plan files and bulk-loads a plans directory.

Supported formats:
    - ``*.yml`` / ``*.yaml``: a YAML document, optionally preceded by the
      ``# plangraph-schema`` comment line.
    - ``*.plan.md``: YAML frontmatter followed by a markdown body, which is
      stored in the plan's ``details`` field.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import frontmatter  # type: ignore[import-untyped]
import yaml
from pydantic import ValidationError

from plangraph.core.plans.models import LoadedPlan, PlanCollection, PlanRecord

logger = logging.getLogger(__name__)

SCHEMA_COMMENT = "# plangraph-schema: plan/v1"

PLAN_FILE_SUFFIXES = (".plan.md", ".yml", ".yaml")


class PlanFileError(Exception):
    """Raised when a plan file cannot be read or parsed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


def is_plan_file(path: Path) -> bool:
    """Check whether a filename looks like a plan file."""
    return path.name.endswith(PLAN_FILE_SUFFIXES)


def _is_markdown(path: Path) -> bool:
    return path.name.endswith(".plan.md")


def _coerce_id(value: Any) -> int | None:
    """Return a positive integer id, or None if the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


def _parse_document(path: Path, content: str) -> dict[str, Any]:
    if _is_markdown(path):
        post = frontmatter.loads(content)
        data = dict(post.metadata)
        body = post.content.strip()
        if body:
            # Front-matter details and the body are both kept; writes emit one body.
            details = data.get("details")
            data["details"] = f"{details}\n\n{body}" if details else body
        return data

    data = yaml.safe_load(content)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PlanFileError(path, "plan document must be a mapping")
    return data


def _load(path: Path) -> LoadedPlan:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PlanFileError(path, f"failed to read: {e}") from e

    try:
        data = _parse_document(path, content)
    except yaml.YAMLError as e:
        raise PlanFileError(path, f"invalid YAML: {e}") from e

    raw_id = data.get("id")
    if "id" in data:
        coerced = _coerce_id(raw_id)
        if coerced is None:
            # Non-numeric or non-positive ids are treated as missing.
            data.pop("id")
        else:
            data["id"] = coerced

    try:
        record = PlanRecord.model_validate(data)
    except ValidationError as e:
        raise PlanFileError(path, f"invalid plan: {e}") from e

    return LoadedPlan(path=path, record=record, raw_id=raw_id)


def read_plan_file(path: Path) -> PlanRecord:
    """
    Read and validate a single plan file.

    Args:
        path: Path to a ``.yml``, ``.yaml`` or ``.plan.md`` file

    Returns:
        The validated PlanRecord

    Raises:
        PlanFileError: If the file is unreadable or malformed
    """
    return _load(Path(path)).record


def write_plan_file(path: Path, record: PlanRecord) -> None:
    """
    Serialize a plan deterministically and write it to ``path``.

    Parent directories are created as needed. For ``.plan.md`` files the
    ``details`` field becomes the markdown body. Reading merges front-matter
    ``details`` with an existing body, so no text is dropped on rewrite.
    """
    path = Path(path)
    document = record.to_document()

    if _is_markdown(path):
        body = document.pop("details", "")
        post = frontmatter.Post(body)
        post.metadata.update(document)
        text = frontmatter.dumps(post, sort_keys=False) + "\n"
    else:
        text = (
            SCHEMA_COMMENT
            + "\n"
            + yaml.safe_dump(
                document,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def scan_plan_files(directory: Path) -> list[Path]:
    """
    Recursively list plan files under a directory.

    Hidden files and directories (backups, VCS metadata) are skipped.

    Raises:
        FileNotFoundError: If the directory does not exist
        NotADirectoryError: If the path is not a directory
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    found: list[Path] = []
    for path in sorted(directory.rglob("*")):
        relative = path.relative_to(directory)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file() and is_plan_file(path):
            found.append(path)
    return found


def load_plan_files(directory: Path) -> list[LoadedPlan]:
    """
    Load every plan file in a directory, keeping duplicates.

    Files that fail to parse are logged and skipped.
    """
    loaded: list[LoadedPlan] = []
    logger.debug("Scanning %s for plan files", directory)
    for path in scan_plan_files(directory):
        try:
            loaded.append(_load(path))
        except PlanFileError as e:
            logger.warning("Skipping unreadable plan file %s", e)
    logger.debug("Loaded %d plan files from %s", len(loaded), directory)
    return loaded


def read_all_plans(directory: Path) -> PlanCollection:
    """
    Bulk-load plans keyed by id.

    Files without an id are skipped. When several files share an id the
    last one scanned wins; use load_plan_files() to see every duplicate.

    Example:
        >>> collection = read_all_plans(Path("tasks"))
        >>> collection.plans[12].record.title
        'Add login'
    """
    collection = PlanCollection()
    for loaded in load_plan_files(directory):
        plan_id = loaded.record.id
        if plan_id is None:
            continue
        collection.plans[plan_id] = loaded
        collection.max_numeric_id = max(collection.max_numeric_id, plan_id)
    return collection

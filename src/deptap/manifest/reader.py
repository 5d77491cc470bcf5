"""Read package.json and extract the declared dependency maps."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from deptap.errors import ManifestMissingError, ManifestParseError
from deptap.models import Manifest

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def manifest_path(project_path: Path | str) -> Path:
    return Path(project_path) / MANIFEST_NAME


def has_manifest(project_path: Path | str) -> bool:
    """Return True when a package.json file exists at the project root."""
    return manifest_path(project_path).is_file()


def read_manifest(project_path: Path | str) -> Manifest:
    """Read and parse the project's package.json.

    Returns:
        Manifest with ``dependencies`` and ``devDependencies`` (each empty
        when the field is absent or not an object) and the raw parsed data.

    Raises:
        ManifestMissingError: If there is no package.json at the root.
        ManifestParseError: If the file is unreadable, not JSON, or not an object.
    """
    path = manifest_path(project_path)
    if not path.is_file():
        raise ManifestMissingError(f"No {MANIFEST_NAME} found in {Path(project_path)}.")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestParseError(f"Error parsing {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestParseError(
            f"Error parsing {path}: expected a JSON object, got {type(data).__name__}."
        )

    return Manifest(
        dependencies=_dependency_map(data.get("dependencies")),
        dev_dependencies=_dependency_map(data.get("devDependencies")),
        raw=data,
    )


def load_manifest(project_path: Path | str) -> Manifest:
    """Read the manifest, degrading a parse failure to empty dependency maps.

    ManifestMissingError still propagates: a missing manifest is a distinct
    state for the caller, not an empty project.
    """
    try:
        manifest = read_manifest(project_path)
    except ManifestParseError as exc:
        logger.warning("%s", exc)
        return Manifest()

    logger.info(
        "Found %d dependencies and %d devDependencies",
        len(manifest.dependencies),
        len(manifest.dev_dependencies),
    )
    return manifest


def _dependency_map(section: object) -> dict[str, str]:
    if not isinstance(section, dict):
        return {}
    return {str(name): str(spec) for name, spec in section.items()}

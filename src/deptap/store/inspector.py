"""Inspect node_modules to find which declared packages are present."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from deptap.errors import StoreProbeError
from deptap.models import ERROR_VERSION, UNKNOWN_VERSION, InstalledSet, Manifest

logger = logging.getLogger(__name__)

STORE_NAME = "node_modules"


def store_path(project_path: Path | str) -> Path:
    return Path(project_path) / STORE_NAME


def has_dependency_store(project_path: Path | str) -> bool:
    """Return True when node_modules exists and is a directory.

    A missing store is the normal state before the first install, so every
    failure here is reported as False rather than raised.
    """
    path = store_path(project_path)
    try:
        if not path.exists():
            logger.info("%s directory not found", STORE_NAME)
            return False
        if not path.is_dir():
            logger.info("%s is not a directory", STORE_NAME)
            return False
    except OSError as exc:
        logger.warning("Error verifying %s: %s", STORE_NAME, exc)
        return False
    return True


def probe_installed(project_path: Path | str, manifest: Manifest) -> InstalledSet:
    """Map each declared package found in node_modules to its installed version.

    Packages without a node_modules entry are left out. A present package
    whose own package.json is missing (or has no version) maps to
    ``"unknown"``; one whose package.json cannot be read or parsed maps to
    ``"error"``.
    """
    root = store_path(project_path)
    installed: InstalledSet = {}

    for name in manifest.declared_names():
        package_dir = root / name
        if not package_dir.exists():
            continue
        try:
            installed[name] = _read_installed_version(package_dir)
        except StoreProbeError as exc:
            logger.warning("%s", exc)
            installed[name] = ERROR_VERSION

    logger.info("Found %d installed dependencies", len(installed))
    return installed


def inspect_install_state(project_path: Path | str, manifest: Manifest) -> InstalledSet:
    """Probe the dependency store, or return an empty set when there is none."""
    if not has_dependency_store(project_path):
        return {}
    return probe_installed(project_path, manifest)


def _read_installed_version(package_dir: Path) -> str:
    inner = package_dir / "package.json"
    if not inner.is_file():
        return UNKNOWN_VERSION
    try:
        data = json.loads(inner.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StoreProbeError(f"Cannot read installed manifest {inner}: {exc}") from exc

    version = data.get("version") if isinstance(data, dict) else None
    if not version:
        return UNKNOWN_VERSION
    return str(version)

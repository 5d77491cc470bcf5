"""Load deptap settings from .deptap.yaml and DEPTAP_* environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

import yaml

from deptap.errors import ConfigReadError
from deptap.models import AUTO, PackageManager, Settings

logger = logging.getLogger(__name__)

SETTINGS_FILE = ".deptap.yaml"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

# settings file key → (Settings field, environment variable)
_FIELDS: dict[str, tuple[str, str]] = {
    "autoInstall": ("auto_install", "DEPTAP_AUTO_INSTALL"),
    "preferredPackageManager": ("preferred_package_manager", "DEPTAP_PREFERRED_PACKAGE_MANAGER"),
    "validateVersions": ("validate_versions", "DEPTAP_VALIDATE_VERSIONS"),
}


def settings_path(project_path: Path | str) -> Path:
    return Path(project_path) / SETTINGS_FILE


def load_settings(project_path: Path | str, env: dict[str, str] | None = None) -> Settings:
    """Resolve effective settings for a project.

    Precedence, lowest first: defaults, ``.deptap.yaml`` in the project root,
    ``DEPTAP_*`` environment variables.

    Raises:
        ConfigReadError: If the settings file is not valid YAML or not a mapping.
    """
    settings = Settings()
    settings = _apply(settings, _read_file(settings_path(project_path)), source=SETTINGS_FILE)

    environ = os.environ if env is None else env
    env_values = {key: environ[var] for key, (_, var) in _FIELDS.items() if var in environ}
    return _apply(settings, env_values, source="environment")


def _read_file(path: Path) -> dict[str, object]:
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigReadError(f"Cannot read settings file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigReadError(f"Settings file {path} must be a mapping, got {type(data).__name__}.")
    return data


def _apply(settings: Settings, values: dict[str, object], *, source: str) -> Settings:
    changes: dict[str, object] = {}
    for key, value in values.items():
        if key not in _FIELDS:
            logger.warning("Ignoring unknown setting %r in %s", key, source)
            continue
        field_name = _FIELDS[key][0]
        if field_name == "preferred_package_manager":
            changes[field_name] = _coerce_manager(value, source)
        else:
            changes[field_name] = _coerce_bool(key, value, source)
    return replace(settings, **changes)


def _coerce_bool(key: str, value: object, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text not in _FALSE_VALUES:
        logger.warning("Setting %s=%r in %s is not a boolean, using false", key, value, source)
    return False


def _coerce_manager(value: object, source: str) -> str:
    text = str(value).strip() if value is not None else AUTO
    if not text or text == AUTO:
        return AUTO
    try:
        return PackageManager(text).value
    except ValueError:
        logger.warning("Unknown package manager %r in %s, using auto-detection", text, source)
        return AUTO

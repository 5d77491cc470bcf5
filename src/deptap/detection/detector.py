"""Pick the package manager that governs a project.

Detection is a fail-open cascade: rules are evaluated in order, the first
match wins, a rule that raises counts as "signal absent", and when nothing
matches the answer is npm. Lockfiles are only checked for presence, never
parsed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

from deptap.models import AUTO, PackageManager

logger = logging.getLogger(__name__)

_Predicate = Callable[[Path], bool]


def _has_file(*names: str) -> _Predicate:
    def check(root: Path) -> bool:
        return any((root / name).is_file() for name in names)

    return check


def _has_volta_pin(root: Path) -> bool:
    """volta.json, or a ``volta`` field in package.json.

    Any value other than null, false, 0 or "" counts as a pin, including
    an empty object.
    """
    if (root / "volta.json").is_file():
        return True
    manifest = root / "package.json"
    if not manifest.is_file():
        return False
    data = json.loads(manifest.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        return False
    return data.get("volta") not in (None, False, 0, "")


# (predicate, result, signal shown in logs) -- order is priority.
_RULES: list[tuple[_Predicate, PackageManager, str]] = [
    (_has_file("bun.lockb", "bun.lock"), PackageManager.BUN, "bun.lockb"),
    (_has_file("pnpm-lock.yaml"), PackageManager.PNPM, "pnpm-lock.yaml"),
    (_has_file("yarn.lock"), PackageManager.YARN, "yarn.lock"),
    (_has_file("package-lock.json"), PackageManager.NPM, "package-lock.json"),
    (_has_file("bower.json"), PackageManager.BOWER, "bower.json"),
    (_has_volta_pin, PackageManager.VOLTA, "volta configuration"),
]


def detect_package_manager(
    project_path: Path | str,
    preferred: PackageManager | str = AUTO,
) -> PackageManager:
    """Return the package manager to install with. Never raises.

    Args:
        project_path: Project root holding the lockfiles.
        preferred: User-configured manager; anything other than ``"auto"``
            short-circuits detection. Unrecognised names resolve to npm.
    """
    if preferred and preferred != AUTO:
        try:
            manager = PackageManager(preferred)
        except ValueError:
            logger.warning("Unknown preferred package manager %r, using npm", preferred)
            return PackageManager.NPM
        else:
            logger.info("Using preferred package manager: %s", manager.value)
            return manager

    root = Path(project_path)
    for predicate, manager, signal in _RULES:
        if _safe_check(predicate, root):
            logger.info("Detected %s as package manager (%s)", manager.value, signal)
            return manager

    logger.info("No specific package manager detected, using npm")
    return PackageManager.NPM


def _safe_check(predicate: _Predicate, root: Path) -> bool:
    try:
        return predicate(root)
    except (OSError, ValueError) as exc:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        logger.debug("Detection signal check failed in %s: %s", root, exc)
        return False

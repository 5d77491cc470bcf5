"""Diff declared dependencies against what is installed."""

from __future__ import annotations

import logging

from deptap.models import InstalledSet, Manifest, MissingDependencies

logger = logging.getLogger(__name__)


def find_missing(manifest: Manifest, installed: InstalledSet) -> MissingDependencies:
    """Return the declared dependencies that have no entry in ``installed``.

    Presence of a key is what counts: a package recorded with the
    ``"unknown"`` or ``"error"`` sentinel is installed. Version ranges are
    not checked.
    """
    missing = MissingDependencies(
        dependencies={
            name: spec for name, spec in manifest.dependencies.items() if name not in installed
        },
        dev_dependencies={
            name: spec
            for name, spec in manifest.dev_dependencies.items()
            if name not in installed
        },
    )
    logger.info("Found %d missing dependencies", missing.count)
    return missing

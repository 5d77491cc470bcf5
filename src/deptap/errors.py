"""Exception hierarchy for deptap.

All exceptions inherit from DeptapError (single catch point).
Messages are written for the person (or agent) reading tool output.
"""

from __future__ import annotations


class DeptapError(Exception):
    """Base exception for all deptap errors."""


class ManifestMissingError(DeptapError):
    """No package.json at the project root."""


class ManifestParseError(DeptapError):
    """package.json exists but is not a valid JSON object."""


class StoreProbeError(DeptapError):
    """Reading an installed package's own manifest failed."""


class ConfigReadError(DeptapError):
    """Error reading the deptap settings file."""


class RegistryError(DeptapError):
    """Error talking to the npm registry."""


class InstallError(DeptapError):
    """Package installation failed."""


class SpawnError(InstallError):
    """The install command could not be started."""


"""Domain models for deptap. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# ─── Sentinels ────────────────────────────────────────────────

UNKNOWN_VERSION = "unknown"
ERROR_VERSION = "error"

AUTO = "auto"

# Package name → resolved version, or one of the sentinels above.
InstalledSet = dict[str, str]


# ─── Enumerations ─────────────────────────────────────────────


class PackageManager(StrEnum):
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"
    BOWER = "bower"
    VOLTA = "volta run npm"
    JSPM = "jspm"
    IED = "ied"
    CNPM = "cnpm"
    NTL = "ntl"
    TNPM = "tnpm"
    COREPACK = "corepack"


class InstallStatus(StrEnum):
    INITIALIZING = "initializing"
    READY = "ready"
    NO_MANIFEST = "no_manifest"
    INSTALLING = "installing"
    SKIPPED = "skipped"
    FAILED = "failed"
    ERROR = "error"


class ConfirmChoice(StrEnum):
    INSTALL = "install"
    SKIP = "skip"
    SHOW_DETAILS = "show_details"
    CONFIGURE = "configure"


# ─── Manifest Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Manifest:
    """Declared dependencies of a project, plus the raw parsed package.json."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    raw: dict[str, object] = field(default_factory=dict)

    def declared_names(self) -> list[str]:
        """All declared names, runtime first, without duplicates."""
        names = list(self.dependencies)
        names.extend(n for n in self.dev_dependencies if n not in self.dependencies)
        return names


@dataclass(frozen=True, slots=True)
class MissingDependencies:
    """Declared dependencies with no entry in the dependency store."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.dependencies) + len(self.dev_dependencies)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def names(self) -> list[str]:
        return [*self.dependencies, *self.dev_dependencies]

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }


# ─── Settings ─────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Settings:
    """User configuration consumed (read-only) by the install pipeline."""

    auto_install: bool = False
    preferred_package_manager: str = AUTO
    validate_versions: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "autoInstall": self.auto_install,
            "preferredPackageManager": self.preferred_package_manager,
            "validateVersions": self.validate_versions,
        }


# ─── Install Models ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class InstallPlan:
    """What would run if the user accepted the install prompt."""

    package_manager: str
    command: str
    missing: MissingDependencies


@dataclass(frozen=True, slots=True)
class InstallResult:
    success: bool
    package_manager: str
    command: str
    message: str
    returncode: int | None = None
    command_output: str = ""


@dataclass(frozen=True, slots=True)
class TriggerReport:
    """Outcome of one pass through the check-and-install pipeline."""

    status: InstallStatus
    project_path: str
    message: str
    missing: MissingDependencies = field(default_factory=MissingDependencies)
    installed_count: int = 0
    plan: InstallPlan | None = None
    install: InstallResult | None = None
    prompt: str = ""


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Latest published version of a package, as reported by the registry."""

    name: str
    latest: str


# ─── Output Models ────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: str
    message: str
    show: bool = False

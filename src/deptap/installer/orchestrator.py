"""Install orchestrator -- check, confirm, and install missing dependencies.

One orchestrator is built per server and owns the only shared mutable state
in deptap: the single-flight flag, the current status, and the output
channel. Status moves Idle → Installing → {Ready, Failed} → Idle; a request
that arrives while an install is in flight is rejected, never queued.
"""

from __future__ import annotations

import logging
from pathlib import Path

from deptap.config.settings import settings_path
from deptap.detection.detector import detect_package_manager
from deptap.errors import ManifestMissingError, SpawnError
from deptap.installer.base import ConfirmationPort, NotifierPort, VersionCheckerPort
from deptap.installer.commands import build_install_command
from deptap.installer.subprocess import run_shell
from deptap.manifest.reader import load_manifest
from deptap.models import (
    ConfirmChoice,
    InstallPlan,
    InstallResult,
    InstallStatus,
    Manifest,
    MissingDependencies,
    Settings,
    TriggerReport,
)
from deptap.output import OutputChannel
from deptap.reconcile.reconciler import find_missing
from deptap.store.inspector import inspect_install_state

logger = logging.getLogger(__name__)

# Missing-dependency lists longer than this are summarised in the prompt.
_PROMPT_NAME_LIMIT = 5
_VERSION_CHECK_LIMIT = 5


def format_prompt(missing: MissingDependencies) -> str:
    """Build the install confirmation question for ``missing``."""
    total = missing.count
    noun = "dependency" if total == 1 else "dependencies"
    if total <= _PROMPT_NAME_LIMIT:
        return f"Missing {total} {noun}: {', '.join(missing.names())}. Install now?"
    return f"Found {total} missing {noun}. Install now?"


class InstallOrchestrator:
    """Sequences reconciliation, confirmation, and a single in-flight install."""

    def __init__(
        self,
        output: OutputChannel | None = None,
        version_checker: VersionCheckerPort | None = None,
    ) -> None:
        self.output = output if output is not None else OutputChannel()
        self._version_checker = version_checker
        self._installing = False
        self._status = InstallStatus.INITIALIZING

    # ─── State ────────────────────────────────────────────────

    @property
    def status(self) -> InstallStatus:
        return self._status

    @property
    def is_installing(self) -> bool:
        return self._installing

    def start(self) -> None:
        """Mark the orchestrator ready to take triggers."""
        self.output.append("deptap initialized")
        self._set_status(InstallStatus.READY)

    def _set_status(self, status: InstallStatus) -> None:
        if status != self._status:
            logger.debug("Status %s -> %s", self._status.value, status.value)
        self._status = status

    # ─── Read-only check ──────────────────────────────────────

    def check(self, project_path: Path | str, settings: Settings) -> TriggerReport:
        """Report what an install would do, without prompting or installing."""
        root = Path(project_path).resolve()
        try:
            manifest, installed_count, missing = self._reconcile(root)
        except ManifestMissingError as exc:
            return TriggerReport(
                status=InstallStatus.NO_MANIFEST, project_path=str(root), message=str(exc)
            )

        if missing.is_empty:
            message = "All dependencies are already installed."
        else:
            message = format_prompt(missing)
        return TriggerReport(
            status=self._status,
            project_path=str(root),
            message=message,
            missing=missing,
            installed_count=installed_count,
            plan=self.plan(root, missing, settings) if not missing.is_empty else None,
        )

    def plan(
        self, project_path: Path | str, missing: MissingDependencies, settings: Settings
    ) -> InstallPlan:
        """Detect the package manager and synthesize the command for ``missing``."""
        manager = detect_package_manager(project_path, settings.preferred_package_manager)
        return InstallPlan(
            package_manager=manager.value,
            command=build_install_command(manager, missing),
            missing=missing,
        )

    # ─── Full pipeline ────────────────────────────────────────

    async def trigger(
        self,
        project_path: Path | str,
        settings: Settings,
        confirmation: ConfirmationPort,
        notifier: NotifierPort | None = None,
    ) -> TriggerReport:
        """Run one check-and-install pass for a project.

        Every outcome is reported through the returned TriggerReport and
        the orchestrator status; nothing raises to the caller.
        """
        root = Path(project_path).resolve()
        if self._installing:
            self.output.append("Installation already in progress, skipping trigger")
            return TriggerReport(
                status=self._status,
                project_path=str(root),
                message="Installation already in progress.",
            )

        try:
            return await self._run_pipeline(root, settings, confirmation, notifier)
        except Exception as exc:
            logger.exception("Dependency pipeline failed for %s", root)
            self.output.append(f"Error in auto-install workflow: {exc}", show=True)
            self._set_status(InstallStatus.ERROR)
            return TriggerReport(
                status=InstallStatus.ERROR,
                project_path=str(root),
                message=f"Error in auto-install workflow: {exc}",
            )

    async def _run_pipeline(
        self,
        root: Path,
        settings: Settings,
        confirmation: ConfirmationPort,
        notifier: NotifierPort | None,
    ) -> TriggerReport:
        self.output.append(f"Checking dependencies in {root}")
        try:
            _manifest, installed_count, missing = self._reconcile(root)
        except ManifestMissingError as exc:
            self.output.append(str(exc))
            self._set_status(InstallStatus.NO_MANIFEST)
            return TriggerReport(
                status=InstallStatus.NO_MANIFEST, project_path=str(root), message=str(exc)
            )

        if missing.is_empty:
            self.output.append("All dependencies are already installed")
            self._set_status(InstallStatus.READY)
            return TriggerReport(
                status=InstallStatus.READY,
                project_path=str(root),
                message="All dependencies are already installed.",
                installed_count=installed_count,
            )

        await self._check_versions(missing, settings)
        plan = self.plan(root, missing, settings)

        prompt = ""
        if settings.auto_install:
            self.output.append("Auto-install is enabled, installing missing dependencies")
        else:
            self.output.append("Auto-install is disabled, asking for confirmation")
            prompt = format_prompt(missing)
            if not await self.confirm_install(root, prompt, plan, confirmation):
                self.output.append("Installation skipped by user")
                self._set_status(InstallStatus.SKIPPED)
                return TriggerReport(
                    status=InstallStatus.SKIPPED,
                    project_path=str(root),
                    message="Installation skipped.",
                    missing=missing,
                    installed_count=installed_count,
                    plan=plan,
                    prompt=prompt,
                )

        result = await self.install_missing(root, missing, settings, notifier)
        return TriggerReport(
            status=self._status,
            project_path=str(root),
            message=result.message,
            missing=missing,
            installed_count=installed_count,
            plan=plan,
            install=result,
            prompt=prompt,
        )

    def _reconcile(self, root: Path) -> tuple[Manifest, int, MissingDependencies]:
        manifest = load_manifest(root)
        self.output.append(
            f"Found {len(manifest.dependencies)} dependencies and "
            f"{len(manifest.dev_dependencies)} devDependencies"
        )
        installed = inspect_install_state(root, manifest)
        missing = find_missing(manifest, installed)
        self.output.append(f"Found {missing.count} missing dependencies")
        return manifest, len(installed), missing

    async def _check_versions(self, missing: MissingDependencies, settings: Settings) -> None:
        if not settings.validate_versions or self._version_checker is None:
            self.output.append("Version validation skipped (disabled in settings)")
            return

        self.output.append("Validating package versions...")
        versions = await self._version_checker.fetch_latest_versions(
            missing.names(), limit=_VERSION_CHECK_LIMIT
        )
        for info in versions:
            self.output.append(f"Validated version for {info.name}: {info.latest}")

    # ─── Confirmation ─────────────────────────────────────────

    async def confirm_install(
        self,
        project_path: Path | str,
        prompt: str,
        plan: InstallPlan,
        confirmation: ConfirmationPort,
    ) -> bool:
        """Ask until the user installs, skips, or goes to configure.

        ``show_details`` writes the missing list to the output and asks again.
        """
        while True:
            choice = await confirmation.ask(prompt, plan)
            if choice == ConfirmChoice.SHOW_DETAILS:
                self._log_details(plan.missing)
                continue
            if choice == ConfirmChoice.CONFIGURE:
                self.output.append(
                    f"Configure deptap in {settings_path(project_path)} "
                    "or with DEPTAP_* environment variables",
                    show=True,
                )
                return False
            return choice == ConfirmChoice.INSTALL

    def _log_details(self, missing: MissingDependencies) -> None:
        self.output.append("Missing dependencies:", show=True)
        if missing.dependencies:
            self.output.append("Dependencies:", show=True)
            for name, spec in missing.dependencies.items():
                self.output.append(f"  - {name}: {spec}", show=True)
        if missing.dev_dependencies:
            self.output.append("Dev Dependencies:", show=True)
            for name, spec in missing.dev_dependencies.items():
                self.output.append(f"  - {name}: {spec}", show=True)

    # ─── Install ──────────────────────────────────────────────

    async def install_missing(
        self,
        project_path: Path | str,
        missing: MissingDependencies,
        settings: Settings,
        notifier: NotifierPort | None = None,
    ) -> InstallResult:
        """Install ``missing`` with the detected package manager.

        Returns an unsuccessful result without touching any state when an
        install is already in flight. The single-flight flag is cleared
        before the outcome is surfaced, whatever happens.
        """
        if self._installing:
            self.output.append("Installation already in progress, skipping")
            return InstallResult(
                success=False,
                package_manager="",
                command="",
                message="Installation already in progress.",
            )

        self._installing = True
        try:
            result = await self._install(Path(project_path), missing, settings)
        except Exception:
            self._set_status(InstallStatus.FAILED)
            raise
        finally:
            self._installing = False

        await self._notify(result, notifier)
        return result

    async def _install(
        self, root: Path, missing: MissingDependencies, settings: Settings
    ) -> InstallResult:
        self._set_status(InstallStatus.INSTALLING)
        plan = self.plan(root, missing, settings)

        if not plan.command:
            self.output.append("No dependencies to install")
            self._set_status(InstallStatus.READY)
            return InstallResult(
                success=True,
                package_manager=plan.package_manager,
                command="",
                message="No dependencies to install.",
            )

        self.output.append(f"Installing dependencies with {plan.package_manager}")
        self.output.append(f"Executing command: {plan.command}")
        try:
            returncode, stdout, stderr = await run_shell(
                plan.command, root, on_line=self._stream_line
            )
        except SpawnError as exc:
            return self._failed(plan, str(exc))

        if returncode != 0:
            return self._failed(
                plan,
                f"Command failed with exit code {returncode}",
                returncode=returncode,
                output=stderr or stdout,
            )

        self.output.append("Dependencies installed successfully", show=True)
        self._set_status(InstallStatus.READY)
        return InstallResult(
            success=True,
            package_manager=plan.package_manager,
            command=plan.command,
            message="Dependencies installed successfully.",
            returncode=returncode,
            command_output=stdout,
        )

    def _failed(
        self,
        plan: InstallPlan,
        reason: str,
        *,
        returncode: int | None = None,
        output: str = "",
    ) -> InstallResult:
        self.output.append(f"Installation failed: {reason}", show=True)
        if output:
            self.output.append(f"stderr: {output}", show=True)
        self._set_status(InstallStatus.FAILED)
        message = f"Failed to install dependencies: {reason}"
        if output:
            message = f"{message}\n{output}"
        return InstallResult(
            success=False,
            package_manager=plan.package_manager,
            command=plan.command,
            message=message,
            returncode=returncode,
            command_output=output,
        )

    def _stream_line(self, stream: str, line: str) -> None:
        self.output.append(f"[{stream}] {line}")

    async def _notify(self, result: InstallResult, notifier: NotifierPort | None) -> None:
        if notifier is None or not result.command:
            return
        if result.success:
            await notifier.info(result.message)
        else:
            await notifier.error(result.message)

"""install_dependencies tool -- install whatever package.json declares but is missing."""

from __future__ import annotations

from dataclasses import dataclass, replace

from mcp.server.fastmcp import Context

from deptap.config.settings import load_settings
from deptap.errors import DeptapError
from deptap.models import ConfirmChoice, InstallPlan
from deptap.tools._helpers import get_context, report_to_dict


@dataclass
class ToolConfirmation:
    """Answers the install prompt with what the tool caller passed in.

    With ``show_details`` the first answer asks for the detailed list, so the
    missing dependencies are written to the output log before deciding.
    """

    confirm: bool
    show_details: bool = False
    asked: int = 0

    async def ask(self, prompt: str, plan: InstallPlan) -> ConfirmChoice:
        self.asked += 1
        if self.show_details and self.asked == 1:
            return ConfirmChoice.SHOW_DETAILS
        return ConfirmChoice.INSTALL if self.confirm else ConfirmChoice.SKIP


async def install_dependencies(
    ctx: Context,
    path: str = ".",
    confirm: bool = False,
    show_details: bool = False,
    auto_install: bool | None = None,
) -> dict[str, object]:
    """Install the dependencies declared in package.json that node_modules lacks.

    Detects the package manager from lockfiles (bun, pnpm, yarn, npm),
    bower.json or a volta pin, unless preferredPackageManager is configured,
    then runs a single install command in the project directory.

    Unless autoInstall is enabled, the install only runs when confirm=True.
    Call check_dependencies first, show the user what will be installed,
    and only pass confirm=True once they agree. With confirm=False the
    check is recorded as skipped and the prompt is returned.

    Only one install runs at a time; a call made while another install is
    in progress returns immediately without doing anything.

    Args:
        path: Project directory containing package.json. Defaults to ".".
        confirm: The user's answer to "Install now?".
        show_details: Write each missing dependency and its version range
            to the output log (see get_status) before installing.
        auto_install: Override the autoInstall setting for this call.

    Returns:
        Dict with: status (ready / skipped / failed / no_manifest / error),
        missing, package_manager, command, prompt, and install (the
        command result, including captured error output on failure).
    """
    try:
        app = get_context(ctx)
        settings = load_settings(path)
        if auto_install is not None:
            settings = replace(settings, auto_install=auto_install)

        report = await app.orchestrator.trigger(
            path,
            settings,
            ToolConfirmation(confirm=confirm, show_details=show_details),
            notifier=ctx,
        )
        return report_to_dict(report)
    except DeptapError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in install_dependencies: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}

"""check_dependencies tool -- report missing dependencies without installing."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from deptap.config.settings import load_settings
from deptap.errors import DeptapError
from deptap.tools._helpers import get_context, report_to_dict


async def check_dependencies(ctx: Context, path: str = ".") -> dict[str, object]:
    """Compare package.json against node_modules and show what is missing.

    Read-only: nothing is installed and the user is not prompted. The
    result includes the package manager deptap would use and the exact
    command install_dependencies would run.

    Args:
        path: Project directory containing package.json. Defaults to the
            current directory (".").

    Returns:
        Dict with: status, missing (dependencies / devDependencies with
        their version specifiers), missing_count, installed_count,
        package_manager, command, and a human-readable message.
    """
    try:
        app = get_context(ctx)
        settings = load_settings(path)
        report = app.orchestrator.check(path, settings)
        return report_to_dict(report)
    except DeptapError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in check_dependencies: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}

"""Helpers shared by the MCP tools: AppContext lookup and report serialisation."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

from deptap.models import TriggerReport

if TYPE_CHECKING:
    from deptap.server import AppContext


def get_context(ctx: Context) -> AppContext:
    """Extract AppContext from FastMCP's lifespan context.

    Raises TypeError if the lifespan context is not an AppContext instance.
    This catches misconfiguration early with a clear error message.
    """
    from deptap.server import AppContext

    app = ctx.request_context.lifespan_context
    if not isinstance(app, AppContext):
        msg = (
            f"Expected AppContext in lifespan_context, got {type(app).__name__}. "
            "Is the server configured with app_lifespan?"
        )
        raise TypeError(msg)
    return app


def report_to_dict(report: TriggerReport) -> dict[str, object]:
    """Flatten a TriggerReport into the JSON shape returned by tools."""
    plan = report.plan
    return {
        "success": report.status.value not in ("failed", "error"),
        "status": report.status.value,
        "path": report.project_path,
        "message": report.message,
        "missing": report.missing.to_dict(),
        "missing_count": report.missing.count,
        "installed_count": report.installed_count,
        "package_manager": plan.package_manager if plan else "",
        "command": plan.command if plan else "",
        "prompt": report.prompt,
        "install": asdict(report.install) if report.install else None,
    }

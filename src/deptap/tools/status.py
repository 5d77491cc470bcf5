"""get_status tool -- current install status and the recent output log."""

from __future__ import annotations

from dataclasses import asdict

from mcp.server.fastmcp import Context

from deptap.tools._helpers import get_context


async def get_status(ctx: Context, limit: int = 50) -> dict[str, object]:
    """Show deptap's status and the most recent output log entries.

    The log holds every step of the last checks and installs, including the
    package manager's own output streamed line by line.

    Args:
        limit: Maximum number of log entries to return (most recent last).

    Returns:
        Dict with: status, installing flag, and log entries (timestamp,
        message, show).
    """
    try:
        app = get_context(ctx)
        orchestrator = app.orchestrator
        return {
            "status": orchestrator.status.value,
            "installing": orchestrator.is_installing,
            "log": [asdict(entry) for entry in orchestrator.output.entries(limit)],
        }
    except Exception as exc:
        await ctx.error(f"Unexpected error in get_status: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}

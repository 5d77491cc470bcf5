"""get_settings tool -- effective deptap settings for a project."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from deptap.config.settings import load_settings, settings_path
from deptap.errors import DeptapError


async def get_settings(ctx: Context, path: str = ".") -> dict[str, object]:
    """Show the settings deptap will use for a project and where they come from.

    Settings are read from .deptap.yaml in the project directory, then
    overridden by DEPTAP_AUTO_INSTALL, DEPTAP_PREFERRED_PACKAGE_MANAGER and
    DEPTAP_VALIDATE_VERSIONS environment variables.

    Args:
        path: Project directory. Defaults to ".".

    Returns:
        Dict with: settings (autoInstall, preferredPackageManager,
        validateVersions), config_file, and whether it exists.
    """
    config_file = settings_path(path)
    try:
        settings = load_settings(path)
    except DeptapError as exc:
        return {"success": False, "error": str(exc), "config_file": str(config_file)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in get_settings: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}

    return {
        "success": True,
        "settings": settings.to_dict(),
        "config_file": str(config_file),
        "config_file_exists": config_file.is_file(),
    }

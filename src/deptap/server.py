"""MCP server that finds and installs missing Node.js project dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from deptap.installer.base import VersionCheckerPort
from deptap.installer.orchestrator import InstallOrchestrator
from deptap.output import OutputChannel
from deptap.registry.npm import NpmRegistryClient
from deptap.tools.check import check_dependencies
from deptap.tools.install import install_dependencies
from deptap.tools.settings import get_settings
from deptap.tools.status import get_status


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations.

    The orchestrator is the single owner of the install flag and status;
    every tool call goes through this one instance.
    """

    http_client: httpx.AsyncClient
    output: OutputChannel
    version_checker: VersionCheckerPort
    orchestrator: InstallOrchestrator


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage shared adapter lifecycle -- the composition root."""
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(15.0, connect=5.0),
        follow_redirects=True,
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        transport=httpx.AsyncHTTPTransport(retries=2),
    ) as http_client:
        output = OutputChannel()
        version_checker = NpmRegistryClient(http_client)
        orchestrator = InstallOrchestrator(output=output, version_checker=version_checker)
        orchestrator.start()

        yield AppContext(
            http_client=http_client,
            output=output,
            version_checker=version_checker,
            orchestrator=orchestrator,
        )


mcp = FastMCP(
    "deptap",
    instructions=(
        "deptap keeps a Node.js project's node_modules in sync with its package.json.\n\n"
        "## Workflow\n"
        "1. **check_dependencies** -- compare package.json with node_modules. Shows the "
        "missing dependencies, the package manager deptap detected (from lockfiles, "
        "bower.json, volta, or the preferredPackageManager setting) and the exact "
        "install command.\n"
        "2. Tell the user what is missing and which command will run.\n"
        "3. **install_dependencies** with confirm=True -- only after the user agrees, "
        "unless autoInstall is enabled in settings.\n"
        "4. **get_status** -- the output log, including the package manager's output. "
        "Use it to explain a failed install.\n\n"
        "Only one install runs at a time. deptap does not resolve versions: a package "
        "counts as installed when its directory exists in node_modules.\n"
        "- **get_settings** -- show autoInstall, preferredPackageManager and "
        "validateVersions, and the .deptap.yaml file they are read from."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(check_dependencies)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(get_status)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(get_settings)

# ─── Destructive tools ────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(install_dependencies)

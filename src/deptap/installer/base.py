"""Ports: the collaborators the install orchestrator talks to."""

from __future__ import annotations

from typing import Protocol

from deptap.models import ConfirmChoice, InstallPlan, VersionInfo


class NotifierPort(Protocol):
    """User-facing notifications. FastMCP's ``Context`` satisfies this."""

    async def info(self, message: str) -> None: ...

    async def error(self, message: str) -> None: ...


class ConfirmationPort(Protocol):
    """Asks the user whether to install the missing dependencies."""

    async def ask(self, prompt: str, plan: InstallPlan) -> ConfirmChoice:
        """Return the user's choice. May be asked again after show_details."""
        ...


class VersionCheckerPort(Protocol):
    """Optional remote lookup of the latest published versions."""

    async def fetch_latest_versions(
        self, names: list[str], *, limit: int = 5
    ) -> list[VersionInfo]:
        """Look up at most ``limit`` packages. Never raises."""
        ...

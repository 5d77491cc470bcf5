"""Tests for the MCP tools (tools/*.py)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from deptap.installer.orchestrator import InstallOrchestrator
from deptap.models import ConfirmChoice, InstallPlan, MissingDependencies
from deptap.output import OutputChannel
from deptap.server import AppContext
from deptap.tools._helpers import get_context
from deptap.tools.check import check_dependencies
from deptap.tools.install import ToolConfirmation, install_dependencies
from deptap.tools.settings import get_settings
from deptap.tools.status import get_status

# ─── Helpers ─────────────────────────────────────────────────


def _make_app() -> AppContext:
    output = OutputChannel()
    orchestrator = InstallOrchestrator(output=output)
    orchestrator.start()
    return AppContext(
        http_client=MagicMock(),
        output=output,
        version_checker=MagicMock(),
        orchestrator=orchestrator,
    )


def _make_ctx(app: AppContext | None = None) -> MagicMock:
    """Build a mock Context with async info/error methods."""
    ctx = MagicMock()
    ctx.info = AsyncMock()
    ctx.error = AsyncMock()
    ctx.request_context.lifespan_context = app if app is not None else _make_app()
    return ctx


_PLAN = InstallPlan(package_manager="npm", command="npm install x", missing=MissingDependencies())


# ═══════════════════════════════════════════════════════════════
# get_context
# ═══════════════════════════════════════════════════════════════


class TestGetContext:
    def test_returns_app_context(self):
        app = _make_app()
        assert get_context(_make_ctx(app)) is app

    def test_wrong_lifespan_context_raises(self):
        ctx = MagicMock()
        ctx.request_context.lifespan_context = {"not": "an app"}
        with pytest.raises(TypeError, match="AppContext"):
            get_context(ctx)


# ═══════════════════════════════════════════════════════════════
# ToolConfirmation
# ═══════════════════════════════════════════════════════════════


class TestToolConfirmation:
    async def test_confirm_installs(self):
        assert await ToolConfirmation(confirm=True).ask("?", _PLAN) is ConfirmChoice.INSTALL

    async def test_no_confirm_skips(self):
        assert await ToolConfirmation(confirm=False).ask("?", _PLAN) is ConfirmChoice.SKIP

    async def test_show_details_first(self):
        confirmation = ToolConfirmation(confirm=True, show_details=True)
        assert await confirmation.ask("?", _PLAN) is ConfirmChoice.SHOW_DETAILS
        assert await confirmation.ask("?", _PLAN) is ConfirmChoice.INSTALL


# ═══════════════════════════════════════════════════════════════
# check_dependencies
# ═══════════════════════════════════════════════════════════════


class TestCheckDependencies:
    async def test_reports_missing_and_command(self, write_manifest):
        root = write_manifest({"x": "^1.0.0"}, {"y": "^2.0.0"})
        (root / "yarn.lock").write_text("", encoding="utf-8")

        result = await check_dependencies(_make_ctx(), path=str(root))

        assert result["success"] is True
        assert result["missing"] == {
            "dependencies": {"x": "^1.0.0"},
            "devDependencies": {"y": "^2.0.0"},
        }
        assert result["missing_count"] == 2
        assert result["package_manager"] == "yarn"
        assert result["command"] == "yarn add x && yarn add -D y"

    async def test_no_manifest(self, tmp_path: Path):
        result = await check_dependencies(_make_ctx(), path=str(tmp_path))
        assert result["status"] == "no_manifest"
        assert result["command"] == ""

    async def test_bad_settings_file(self, write_manifest):
        root = write_manifest({"x": "1"})
        (root / ".deptap.yaml").write_text("- not a mapping\n", encoding="utf-8")

        result = await check_dependencies(_make_ctx(), path=str(root))

        assert result["success"] is False
        assert "mapping" in result["error"]

    async def test_unexpected_error_reported(self, tmp_path: Path):
        ctx = _make_ctx()
        with patch("deptap.tools.check.load_settings", side_effect=RuntimeError("boom")):
            result = await check_dependencies(ctx, path=str(tmp_path))
        assert result == {"success": False, "error": "Internal error: RuntimeError"}
        ctx.error.assert_awaited_once()


# ═══════════════════════════════════════════════════════════════
# install_dependencies
# ═══════════════════════════════════════════════════════════════


class TestInstallDependencies:
    @patch("deptap.installer.orchestrator.run_shell", new_callable=AsyncMock)
    async def test_without_confirm_skips(self, mock_run: AsyncMock, write_manifest):
        root = write_manifest({"x": "^1.0.0"})
        (root / "package-lock.json").write_text("{}", encoding="utf-8")
        app = _make_app()

        result = await install_dependencies(_make_ctx(app), path=str(root))

        assert result["status"] == "skipped"
        assert result["prompt"] == "Missing 1 dependency: x. Install now?"
        assert result["command"] == "npm install x"
        assert result["install"] is None
        assert app.orchestrator.status.value == "skipped"
        mock_run.assert_not_awaited()

    @patch("deptap.installer.orchestrator.run_shell", new_callable=AsyncMock)
    async def test_confirm_installs(self, mock_run: AsyncMock, write_manifest):
        mock_run.return_value = (0, "added 1 package", "")
        root = write_manifest({"x": "^1.0.0"})
        ctx = _make_ctx()

        result = await install_dependencies(ctx, path=str(root), confirm=True)

        assert result["status"] == "ready"
        assert result["install"]["success"] is True
        assert result["install"]["command"] == "npm install x"
        ctx.info.assert_awaited_once_with("Dependencies installed successfully.")

    @patch("deptap.installer.orchestrator.run_shell", new_callable=AsyncMock)
    async def test_auto_install_override(self, mock_run: AsyncMock, write_manifest):
        mock_run.return_value = (0, "", "")
        root = write_manifest({"x": "^1.0.0"})

        result = await install_dependencies(_make_ctx(), path=str(root), auto_install=True)

        assert result["status"] == "ready"
        mock_run.assert_awaited_once()

    @patch("deptap.installer.orchestrator.run_shell", new_callable=AsyncMock)
    async def test_auto_install_from_settings_file(self, mock_run: AsyncMock, write_manifest):
        mock_run.return_value = (0, "", "")
        root = write_manifest({"x": "^1.0.0"})
        (root / ".deptap.yaml").write_text(
            "autoInstall: true\npreferredPackageManager: pnpm\n", encoding="utf-8"
        )

        result = await install_dependencies(_make_ctx(), path=str(root))

        assert result["command"] == "pnpm add x"
        assert mock_run.call_args[0][0] == "pnpm add x"

    @patch("deptap.installer.orchestrator.run_shell", new_callable=AsyncMock)
    async def test_failure_surfaces_stderr(self, mock_run: AsyncMock, write_manifest):
        mock_run.return_value = (1, "", "npm ERR! code E404")
        root = write_manifest({"x": "^1.0.0"})
        ctx = _make_ctx()

        result = await install_dependencies(ctx, path=str(root), confirm=True)

        assert result["success"] is False
        assert result["status"] == "failed"
        assert "E404" in result["install"]["message"]
        ctx.error.assert_awaited_once()

    async def test_show_details_logs_missing(self, write_manifest):
        root = write_manifest({"x": "^1.0.0"})
        app = _make_app()

        await install_dependencies(_make_ctx(app), path=str(root), show_details=True)

        messages = [e.message for e in app.output.entries()]
        assert "  - x: ^1.0.0" in messages


# ═══════════════════════════════════════════════════════════════
# get_status / get_settings
# ═══════════════════════════════════════════════════════════════


class TestGetStatus:
    async def test_reports_status_and_log(self):
        app = _make_app()
        app.output.append("hello")

        result = await get_status(_make_ctx(app), limit=1)

        assert result["status"] == "ready"
        assert result["installing"] is False
        assert [e["message"] for e in result["log"]] == ["hello"]
        assert set(result["log"][0]) == {"timestamp", "message", "show"}


class TestGetSettings:
    async def test_defaults(self, tmp_path: Path):
        result = await get_settings(_make_ctx(), path=str(tmp_path))
        assert result["success"] is True
        assert result["settings"]["preferredPackageManager"] == "auto"
        assert result["config_file_exists"] is False
        assert result["config_file"].endswith(".deptap.yaml")

    async def test_reads_file(self, tmp_path: Path):
        (tmp_path / ".deptap.yaml").write_text("validateVersions: true\n", encoding="utf-8")
        result = await get_settings(_make_ctx(), path=str(tmp_path))
        assert result["settings"]["validateVersions"] is True
        assert result["config_file_exists"] is True

    async def test_invalid_file(self, tmp_path: Path):
        (tmp_path / ".deptap.yaml").write_text("a: [\n", encoding="utf-8")
        result = await get_settings(_make_ctx(), path=str(tmp_path))
        assert result["success"] is False

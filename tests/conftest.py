"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

WriteManifest = Callable[..., Path]


@pytest.fixture(autouse=True)
def _clear_deptap_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DEPTAP_* variables from the developer's shell out of the tests."""
    for var in (
        "DEPTAP_AUTO_INSTALL",
        "DEPTAP_PREFERRED_PACKAGE_MANAGER",
        "DEPTAP_VALIDATE_VERSIONS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def write_manifest(tmp_path: Path) -> WriteManifest:
    """Write a package.json into tmp_path and return the project root."""

    def _write(
        dependencies: dict[str, str] | None = None,
        dev_dependencies: dict[str, str] | None = None,
        **extra: object,
    ) -> Path:
        data: dict[str, object] = {"name": "fixture", "version": "1.0.0", **extra}
        if dependencies is not None:
            data["dependencies"] = dependencies
        if dev_dependencies is not None:
            data["devDependencies"] = dev_dependencies
        (tmp_path / "package.json").write_text(json.dumps(data), encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def install_package() -> Callable[..., Path]:
    """Create node_modules/<name> under a root, with an optional package.json."""

    def _install(root: Path, name: str, version: str | None = "1.0.0") -> Path:
        package_dir = root / "node_modules" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        if version is not None:
            (package_dir / "package.json").write_text(
                json.dumps({"name": name, "version": version}), encoding="utf-8"
            )
        return package_dir

    return _install

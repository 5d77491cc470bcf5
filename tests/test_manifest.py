"""Tests for manifest/reader.py."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from deptap.errors import ManifestMissingError, ManifestParseError
from deptap.manifest.reader import has_manifest, load_manifest, read_manifest
from deptap.models import Manifest


class TestReadManifest:
    def test_reads_both_dependency_classes(self, write_manifest):
        root = write_manifest({"react": "^18.0.0"}, {"jest": "^29.0.0"})
        manifest = read_manifest(root)
        assert manifest.dependencies == {"react": "^18.0.0"}
        assert manifest.dev_dependencies == {"jest": "^29.0.0"}
        assert manifest.raw["name"] == "fixture"

    def test_absent_fields_default_to_empty(self, write_manifest):
        root = write_manifest()
        manifest = read_manifest(root)
        assert manifest.dependencies == {}
        assert manifest.dev_dependencies == {}

    def test_non_object_field_treated_as_empty(self, write_manifest):
        root = write_manifest(dependencies=None, devDependencies=["jest"])
        manifest = read_manifest(root)
        assert manifest.dev_dependencies == {}

    def test_declared_order_preserved(self, write_manifest):
        root = write_manifest({"zeta": "1", "alpha": "2", "mid": "3"})
        assert list(read_manifest(root).dependencies) == ["zeta", "alpha", "mid"]

    def test_missing_manifest_raises(self, tmp_path: Path):
        with pytest.raises(ManifestMissingError):
            read_manifest(tmp_path)

    def test_directory_named_package_json_is_missing(self, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        with pytest.raises(ManifestMissingError):
            read_manifest(tmp_path)

    def test_invalid_json_raises_parse_error(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ManifestParseError):
            read_manifest(tmp_path)

    def test_top_level_array_raises_parse_error(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps(["a"]), encoding="utf-8")
        with pytest.raises(ManifestParseError, match="JSON object"):
            read_manifest(tmp_path)


class TestLoadManifest:
    def test_parse_error_degrades_to_empty(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{broken", encoding="utf-8")
        assert load_manifest(tmp_path) == Manifest()

    def test_missing_manifest_still_raises(self, tmp_path: Path):
        with pytest.raises(ManifestMissingError):
            load_manifest(tmp_path)

    def test_has_manifest(self, tmp_path: Path, write_manifest):
        assert has_manifest(tmp_path) is False
        write_manifest()
        assert has_manifest(tmp_path) is True


class TestDeclaredNames:
    def test_runtime_first_without_duplicates(self):
        manifest = Manifest(
            dependencies={"a": "1", "b": "1"},
            dev_dependencies={"b": "1", "c": "1"},
        )
        assert manifest.declared_names() == ["a", "b", "c"]

"""Tests for scan_package() and the PackageLayout snapshot."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import MemoryTree, write_plugin

from plugcat_cli.loader import JsonDocumentLoader
from plugcat_cli.validation.layout import SkillLayout, scan_package
from plugcat_cli.validation.probe import LocalFilesystemProbe


def _scan(path: Path):
    return scan_package(path, probe=LocalFilesystemProbe(), loader=JsonDocumentLoader())


class TestScanPackage:
    """Tests for scan_package() against the local filesystem."""

    @pytest.mark.unit
    def test_complete_plugin(self, tmp_path: Path) -> None:
        plugin = write_plugin(
            tmp_path / "my-plugin",
            files={
                "commands/run.md": "",
                "agents/helper.md": "",
                "skills/lint/SKILL.md": "",
                "hooks/hooks.json": "{}",
                ".mcp.json": '{"mcpServers": {}}',
            },
        )

        layout = _scan(plugin)

        assert layout.has_metadata_dir is True
        assert layout.manifest is not None
        assert layout.manifest.ok
        assert layout.manifest.data == {"name": "my-plugin"}
        assert layout.has_readme and layout.has_license
        assert layout.commands == ("run.md",)
        assert layout.agents == ("helper.md",)
        assert layout.skills == (SkillLayout("lint", True),)
        assert layout.has_hooks_dir and layout.hooks is not None and layout.hooks.ok
        assert layout.service_config is not None and layout.service_config.ok
        assert layout.io_failures == ()

    @pytest.mark.unit
    def test_absent_components_are_none(self, tmp_path: Path) -> None:
        plugin = write_plugin(tmp_path / "bare", metadata_dir=False, readme=False, license_file=False)

        layout = _scan(plugin)

        assert layout.has_metadata_dir is False
        assert layout.manifest is None
        assert layout.commands is None
        assert layout.agents is None
        assert layout.skills is None
        assert layout.hooks is None
        assert layout.service_config is None

    @pytest.mark.unit
    def test_empty_component_directories_are_empty_tuples(self, tmp_path: Path) -> None:
        plugin = write_plugin(
            tmp_path / "empty",
            dirs=["commands", "agents", "skills"],
            files={"commands/notes.txt": ""},
        )

        layout = _scan(plugin)

        assert layout.commands == ()
        assert layout.agents == ()
        assert layout.skills == ()

    @pytest.mark.unit
    def test_malformed_manifest_is_captured(self, tmp_path: Path) -> None:
        plugin = write_plugin(tmp_path / "broken", manifest="{not json")

        layout = _scan(plugin)

        assert layout.manifest is not None
        assert layout.manifest.ok is False
        assert layout.manifest.malformed is True
        assert layout.manifest_path == plugin / ".claude-plugin" / "plugin.json"


class TestScanPackageInMemory:
    """Tests for scan_package() against an in-memory tree."""

    @pytest.mark.unit
    def test_unlistable_directory_is_recorded(self) -> None:
        tree = MemoryTree(
            {"p/.claude-plugin/plugin.json": '{"name": "p"}', "p/commands/a.md": ""},
            unreadable=("p/commands",),
        )

        layout = scan_package(Path("p"), probe=tree, loader=tree)

        assert layout.commands is None
        assert len(layout.io_failures) == 1
        assert "Permission denied" in layout.io_failures[0]

    @pytest.mark.unit
    def test_unreadable_manifest_is_not_malformed(self) -> None:
        tree = MemoryTree({"p/.claude-plugin/plugin.json": "{}"}, unreadable=("p/.claude-plugin/plugin.json",))

        layout = scan_package(Path("p"), probe=tree, loader=tree)

        assert layout.manifest is not None
        assert layout.manifest.ok is False
        assert layout.manifest.malformed is False

    @pytest.mark.unit
    def test_uninspectable_readme_is_recorded_not_missing(self) -> None:
        tree = MemoryTree(
            {"p/.claude-plugin/plugin.json": '{"name": "p"}', "p/README.md": ""},
            inaccessible=("p/README.md",),
        )

        layout = scan_package(Path("p"), probe=tree, loader=tree)

        assert layout.has_readme is True
        assert layout.io_failures == ("Cannot inspect p/README.md: Permission denied",)

    @pytest.mark.unit
    def test_uninspectable_manifest_is_unreadable(self) -> None:
        tree = MemoryTree(
            {"p/.claude-plugin/plugin.json": "{}"},
            inaccessible=("p/.claude-plugin/plugin.json",),
        )

        layout = scan_package(Path("p"), probe=tree, loader=tree)

        assert layout.manifest is not None
        assert layout.manifest.ok is False
        assert layout.manifest.malformed is False
        assert layout.manifest.error == "Permission denied"

    @pytest.mark.unit
    def test_skill_without_skill_file(self) -> None:
        tree = MemoryTree({"p/skills/a/SKILL.md": "", "p/skills/b/notes.md": ""})

        layout = scan_package(Path("p"), probe=tree, loader=tree)

        assert layout.skills == (SkillLayout("a", True), SkillLayout("b", False))

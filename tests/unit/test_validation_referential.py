"""Tests for catalog cross-checks and plugin discovery."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import MemoryTree

from plugcat_cli.models import CatalogDocument
from plugcat_cli.validation.referential import (
    check_duplicates,
    check_sources,
    discover_packages,
    resolve_source,
)
from plugcat_cli.validation.results import Severity


def _catalog(*plugins: dict) -> CatalogDocument:
    return CatalogDocument.from_dict({"plugins": list(plugins)})


class TestCheckDuplicates:
    """Tests for check_duplicates()."""

    @pytest.mark.unit
    def test_unique_names_pass(self) -> None:
        catalog = _catalog({"name": "a"}, {"name": "b"})

        assert check_duplicates(catalog, subject="marketplace.json") == []

    @pytest.mark.unit
    def test_duplicate_reports_both_indices(self) -> None:
        catalog = _catalog({"name": "dup"}, {"name": "dup"})

        findings = check_duplicates(catalog, subject="marketplace.json")

        assert len(findings) == 1
        assert findings[0].severity == Severity.ERROR
        assert findings[0].message == 'Duplicate plugin name "dup" found at indices 0 and 1'
        assert findings[0].rule_name == "duplicate_names"

    @pytest.mark.unit
    def test_each_repeat_reported_against_first_occurrence(self) -> None:
        catalog = _catalog({"name": "x"}, {"name": "y"}, {"name": "x"}, {"name": "x"})

        messages = [f.message for f in check_duplicates(catalog, subject="c")]

        assert messages == [
            'Duplicate plugin name "x" found at indices 0 and 2',
            'Duplicate plugin name "x" found at indices 0 and 3',
        ]

    @pytest.mark.unit
    def test_names_compared_case_sensitively(self) -> None:
        catalog = _catalog({"name": "tool"}, {"name": "Tool"})

        assert check_duplicates(catalog, subject="c") == []

    @pytest.mark.unit
    def test_entries_without_names_are_ignored(self) -> None:
        catalog = _catalog({"source": "./a"}, {"source": "./b"})

        assert check_duplicates(catalog, subject="c") == []


class TestCheckSources:
    """Tests for check_sources() and resolve_source()."""

    @pytest.mark.unit
    def test_resolve_source(self) -> None:
        catalog = _catalog({"name": "a", "source": "./plugins/a"}, {"name": "b", "source": "https://x/b"})

        assert resolve_source(catalog.plugins[0], Path("root")) == Path("root/plugins/a")
        assert resolve_source(catalog.plugins[1], Path("root")) is None

    @pytest.mark.unit
    def test_existing_directory_passes(self) -> None:
        tree = MemoryTree({"root/plugins/a/README.md": ""})
        catalog = _catalog({"name": "a", "source": "./plugins/a"})

        assert check_sources(catalog, root=Path("root"), probe=tree) == []

    @pytest.mark.unit
    def test_missing_source(self) -> None:
        tree = MemoryTree({})
        catalog = _catalog({"name": "a", "source": "./plugins/a"})

        findings = check_sources(catalog, root=Path("root"), probe=tree)

        assert len(findings) == 1
        assert findings[0].subject == "a"
        assert findings[0].message == 'Plugin "a" source path does not exist: ./plugins/a'

    @pytest.mark.unit
    def test_source_is_a_file(self) -> None:
        tree = MemoryTree({"root/plugins/a": "not a dir"})
        catalog = _catalog({"name": "a", "source": "./plugins/a"})

        findings = check_sources(catalog, root=Path("root"), probe=tree)

        assert findings[0].message == 'Plugin "a" source path is not a directory: ./plugins/a'

    @pytest.mark.unit
    def test_remote_sources_are_not_probed(self) -> None:
        tree = MemoryTree({})
        catalog = _catalog(
            {"name": "a", "source": "https://example.com/a.git"},
            {"name": "b", "source": {"source": "github", "repo": "acme/b"}},
            {"name": "c", "source": "plugins/c"},
        )

        assert check_sources(catalog, root=Path("root"), probe=tree) == []

    @pytest.mark.unit
    def test_uninspectable_source_warns(self) -> None:
        tree = MemoryTree({"root/plugins/a/README.md": ""}, inaccessible=("root/plugins/a",))
        catalog = _catalog({"name": "a", "source": "./plugins/a"})

        findings = check_sources(catalog, root=Path("root"), probe=tree)

        assert [(f.severity, f.message) for f in findings] == [
            (Severity.WARNING, "Cannot inspect root/plugins/a: Permission denied")
        ]

    @pytest.mark.unit
    def test_unnamed_entry_uses_index_label(self) -> None:
        catalog = _catalog({"source": "./missing"})

        findings = check_sources(catalog, root=Path("root"), probe=MemoryTree({}))

        assert findings[0].subject == "plugins[0]"


class TestDiscoverPackages:
    """Tests for discover_packages()."""

    @pytest.mark.unit
    def test_two_level_layout(self) -> None:
        tree = MemoryTree(
            {
                "plugins/official/b-tool/README.md": "",
                "plugins/official/a-tool/README.md": "",
                "plugins/community/c-tool/README.md": "",
            }
        )

        packages, findings = discover_packages(Path("plugins"), probe=tree)

        assert findings == []
        assert [p.subject for p in packages] == ["community/c-tool", "official/a-tool", "official/b-tool"]
        assert packages[0].path == Path("plugins/community/c-tool")

    @pytest.mark.unit
    def test_namespace_categories_expand_one_level(self) -> None:
        tree = MemoryTree(
            {
                "plugins/specialized/data/etl/README.md": "",
                "plugins/specialized/web/scraper/README.md": "",
                "plugins/official/core/README.md": "",
            }
        )

        packages, _ = discover_packages(Path("plugins"), probe=tree, namespace_dirs=("specialized",))

        assert [(p.category, p.name) for p in packages] == [
            ("official", "core"),
            ("specialized/data", "etl"),
            ("specialized/web", "scraper"),
        ]

    @pytest.mark.unit
    def test_hidden_directories_and_files_are_skipped(self) -> None:
        tree = MemoryTree(
            {
                "plugins/.cache/x/README.md": "",
                "plugins/official/.hidden/README.md": "",
                "plugins/official/tool/README.md": "",
                "plugins/official/notes.txt": "",
            }
        )

        packages, _ = discover_packages(Path("plugins"), probe=tree)

        assert [p.subject for p in packages] == ["official/tool"]

    @pytest.mark.unit
    def test_missing_plugins_dir_warns(self) -> None:
        packages, findings = discover_packages(Path("plugins"), probe=MemoryTree({}))

        assert packages == []
        assert [f.severity for f in findings] == [Severity.WARNING]
        assert findings[0].rule_name == "discovery"

    @pytest.mark.unit
    def test_uninspectable_plugins_dir_warns(self) -> None:
        tree = MemoryTree({"plugins/official/a/README.md": ""}, inaccessible=("plugins",))

        packages, findings = discover_packages(Path("plugins"), probe=tree)

        assert packages == []
        assert [(f.severity, f.message) for f in findings] == [
            (Severity.WARNING, "Cannot inspect plugins: Permission denied")
        ]

    @pytest.mark.unit
    def test_empty_plugins_dir_warns(self) -> None:
        tree = MemoryTree({}, dirs=("plugins/official",))

        packages, findings = discover_packages(Path("plugins"), probe=tree)

        assert packages == []
        assert findings[0].message == "No plugins found in plugins"

    @pytest.mark.unit
    def test_unlistable_category_warns_and_continues(self) -> None:
        tree = MemoryTree(
            {"plugins/locked/a/README.md": "", "plugins/open/b/README.md": ""},
            unreadable=("plugins/locked",),
        )

        packages, findings = discover_packages(Path("plugins"), probe=tree)

        assert [p.subject for p in packages] == ["open/b"]
        assert len(findings) == 1
        assert findings[0].severity == Severity.WARNING
        assert findings[0].subject == "plugins/locked"

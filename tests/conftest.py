"""Shared pytest fixtures for plugcat tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from typing import Any

import pytest

from plugcat_cli.errors import DocumentMalformedError, DocumentNotFoundError, DocumentReadError
from plugcat_cli.loader import SchemaRepository
from plugcat_cli.validation.probe import DirEntry, IOFailure

# =============================================================================
# On-disk registry builders
# =============================================================================

PluginFactory = Callable[..., Path]


def write_plugin(
    directory: Path,
    *,
    manifest: Any = "default",
    metadata_dir: bool = True,
    readme: bool = True,
    license_file: bool = True,
    files: dict[str, str] | None = None,
    dirs: list[str] | None = None,
) -> Path:
    """Create a plugin directory.

    Args:
        directory: Plugin directory to create.
        manifest: Manifest content. "default" writes {"name": <dir name>},
            None writes nothing, a str is written verbatim, anything else as JSON.
        metadata_dir: Whether to create .claude-plugin/ at all.
        readme: Whether to write README.md.
        license_file: Whether to write LICENSE.
        files: Extra files (relative path -> content).
        dirs: Extra empty directories (relative paths).

    Returns:
        The plugin directory.
    """
    directory.mkdir(parents=True, exist_ok=True)
    if metadata_dir:
        (directory / ".claude-plugin").mkdir(exist_ok=True)
        if manifest is not None:
            if manifest == "default":
                manifest = {"name": directory.name}
            content = manifest if isinstance(manifest, str) else json.dumps(manifest)
            (directory / ".claude-plugin" / "plugin.json").write_text(content)
    if readme:
        (directory / "README.md").write_text(f"# {directory.name}\n")
    if license_file:
        (directory / "LICENSE").write_text("MIT\n")
    for rel in dirs or []:
        (directory / rel).mkdir(parents=True, exist_ok=True)
    for rel, content in (files or {}).items():
        path = directory / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return directory


def write_catalog(root: Path, plugins: list[Any], **extra: Any) -> Path:
    """Write .claude-plugin/marketplace.json under ``root``."""
    catalog_dir = root / ".claude-plugin"
    catalog_dir.mkdir(parents=True, exist_ok=True)
    path = catalog_dir / "marketplace.json"
    path.write_text(json.dumps({"name": "test-market", **extra, "plugins": plugins}, indent=2))
    return path


@pytest.fixture
def registry(tmp_path: Path) -> Path:
    """An empty registry root."""
    root = tmp_path / "registry"
    root.mkdir()
    return root


@pytest.fixture
def plugin_factory(registry: Path) -> PluginFactory:
    """Create plugins relative to the registry root."""

    def factory(rel: str, **kwargs: Any) -> Path:
        return write_plugin(registry / rel, **kwargs)

    return factory


@pytest.fixture
def schemas() -> SchemaRepository:
    """The schemas bundled with plugcat."""
    return SchemaRepository.bundled()


# =============================================================================
# In-memory tree (FilesystemProbe + DocumentLoader)
# =============================================================================


class MemoryTree:
    """A directory tree held in memory.

    Paths are POSIX strings; files map to their text content, and any
    parent of a file is a directory. Paths listed in ``unreadable`` raise
    on listing or loading; paths listed in ``inaccessible`` raise on any
    query, as a permission-denied stat would.
    """

    def __init__(
        self,
        files: dict[str, str],
        *,
        dirs: tuple[str, ...] = (),
        unreadable: tuple[str, ...] = (),
        inaccessible: tuple[str, ...] = (),
    ) -> None:
        self.files = {str(PurePosixPath(p)): c for p, c in files.items()}
        self.dirs: set[str] = {str(PurePosixPath(d)) for d in dirs}
        for path in list(self.files) + list(self.dirs):
            for parent in PurePosixPath(path).parents:
                self.dirs.add(str(parent))
        self.unreadable = {str(PurePosixPath(p)) for p in unreadable}
        self.inaccessible = {str(PurePosixPath(p)) for p in inaccessible}
        self.loads: list[str] = []

    def _key(self, path: Path) -> str:
        key = str(PurePosixPath(path))
        if key in self.inaccessible:
            raise IOFailure(path, "Permission denied")
        return key

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self.files or key in self.dirs

    def is_dir(self, path: Path) -> bool:
        return self._key(path) in self.dirs

    def list_entries(self, path: Path) -> list[DirEntry]:
        key = self._key(path)
        if key in self.unreadable:
            raise IOFailure(path, "Permission denied")
        names: dict[str, bool] = {}
        for candidate in list(self.files) + sorted(self.dirs):
            candidate_path = PurePosixPath(candidate)
            if str(candidate_path.parent) == key and candidate != key:
                names[candidate_path.name] = candidate in self.dirs
        return sorted((DirEntry(name, is_dir) for name, is_dir in names.items()), key=lambda e: e.name)

    def load(self, path: Path) -> Any:
        key = str(PurePosixPath(path))
        self.loads.append(key)
        if key in self.unreadable:
            raise DocumentReadError(key, "Permission denied")
        if key not in self.files:
            raise DocumentNotFoundError(key)
        try:
            return json.loads(self.files[key])
        except json.JSONDecodeError as e:
            raise DocumentMalformedError(key, e.msg) from e

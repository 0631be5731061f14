"""Read-only snapshot of one plugin directory.

scan_package() queries a FilesystemProbe (and a DocumentLoader for the few
JSON descriptors whose parseability matters) once, and captures the result
in a PackageLayout. Rules then inspect the snapshot without touching storage.
A layout is recomputed for every run and never mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from plugcat_cli.constants import (
    AGENTS_DIRNAME,
    COMMANDS_DIRNAME,
    DOCUMENT_SUFFIX,
    HOOKS_DIRNAME,
    HOOKS_FILENAME,
    LICENSE_FILENAME,
    MANIFEST_FILENAME,
    METADATA_DIRNAME,
    README_FILENAME,
    SERVICE_CONFIG_FILENAME,
    SKILL_FILENAME,
    SKILLS_DIRNAME,
)
from plugcat_cli.errors import DocumentLoadError, DocumentMalformedError
from plugcat_cli.loader import DocumentLoader
from plugcat_cli.validation.probe import FilesystemProbe, IOFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedDocument:
    """Outcome of loading one JSON descriptor.

    Attributes:
        path: Where the document lives.
        data: Parsed content (None when loading failed).
        error: Load error message, or None on success.
        malformed: True if the content was read but is not valid JSON.
    """

    path: Path
    data: Any = None
    error: str | None = None
    malformed: bool = False

    @property
    def ok(self) -> bool:
        """True if the document was loaded."""
        return self.error is None


@dataclass(frozen=True)
class SkillLayout:
    """One sub-directory of ``skills/``."""

    name: str
    has_skill_file: bool


@dataclass(frozen=True)
class PackageLayout:
    """Filesystem shape of one plugin directory.

    Component attributes are None when the component directory is absent,
    and an (possibly empty) tuple when it is present.

    Attributes:
        path: The plugin directory.
        has_metadata_dir: True if ``.claude-plugin/`` exists.
        manifest: The loaded manifest, or None if ``plugin.json`` is absent.
        has_readme: True if ``README.md`` exists.
        has_license: True if ``LICENSE`` exists.
        commands: Names of ``*.md`` files in ``commands/``.
        agents: Names of ``*.md`` files in ``agents/``.
        skills: Sub-directories of ``skills/``.
        has_hooks_dir: True if ``hooks/`` exists.
        hooks: The loaded ``hooks/hooks.json``, or None if absent.
        service_config: The loaded ``.mcp.json``, or None if absent.
        io_failures: Messages for paths that could not be inspected.
    """

    path: Path
    has_metadata_dir: bool = False
    manifest: LoadedDocument | None = None
    has_readme: bool = False
    has_license: bool = False
    commands: tuple[str, ...] | None = None
    agents: tuple[str, ...] | None = None
    skills: tuple[SkillLayout, ...] | None = None
    has_hooks_dir: bool = False
    hooks: LoadedDocument | None = None
    service_config: LoadedDocument | None = None
    io_failures: tuple[str, ...] = ()

    @property
    def manifest_path(self) -> Path:
        """Where the manifest is expected, whether or not it exists."""
        return self.path / METADATA_DIRNAME / MANIFEST_FILENAME


def load_document(loader: DocumentLoader, path: Path) -> LoadedDocument:
    """Load ``path`` and capture the outcome instead of raising."""
    try:
        return LoadedDocument(path=path, data=loader.load(path))
    except DocumentMalformedError as e:
        return LoadedDocument(path=path, error=e.context.get("reason", e.message), malformed=True)
    except DocumentLoadError as e:
        return LoadedDocument(path=path, error=e.message)


def _query(
    query: Callable[[Path], bool], path: Path, failures: list[str], *, on_failure: bool
) -> bool:
    """Run one probe query, recording an IOFailure and answering ``on_failure``."""
    try:
        return query(path)
    except IOFailure as e:
        failures.append(str(e))
        return on_failure


def _find_document(
    probe: FilesystemProbe, loader: DocumentLoader, path: Path
) -> LoadedDocument | None:
    """Load ``path`` if it exists; None if it does not."""
    try:
        present = probe.exists(path)
    except IOFailure as e:
        return LoadedDocument(path=path, error=e.reason)
    return load_document(loader, path) if present else None


def _list_documents(
    probe: FilesystemProbe, directory: Path, failures: list[str]
) -> tuple[str, ...] | None:
    if not _query(probe.is_dir, directory, failures, on_failure=False):
        return None
    try:
        entries = probe.list_entries(directory)
    except IOFailure as e:
        failures.append(str(e))
        return None
    return tuple(e.name for e in entries if not e.is_dir and e.name.endswith(DOCUMENT_SUFFIX))


def _list_skills(
    probe: FilesystemProbe, directory: Path, failures: list[str]
) -> tuple[SkillLayout, ...] | None:
    if not _query(probe.is_dir, directory, failures, on_failure=False):
        return None
    try:
        entries = probe.list_entries(directory)
    except IOFailure as e:
        failures.append(str(e))
        return None
    return tuple(
        SkillLayout(
            name=e.name,
            has_skill_file=_query(
                probe.exists, directory / e.name / SKILL_FILENAME, failures, on_failure=True
            ),
        )
        for e in entries
        if e.is_dir
    )


def scan_package(path: Path, *, probe: FilesystemProbe, loader: DocumentLoader) -> PackageLayout:
    """Take a snapshot of the plugin directory at ``path``.

    A path the probe cannot inspect is recorded in ``io_failures`` rather
    than reported missing: required files and the metadata directory count
    as present, component directories as absent, and descriptors as
    unreadable.

    Args:
        path: Plugin directory.
        probe: Storage queries.
        loader: Loader for the JSON descriptors.

    Returns:
        PackageLayout describing what is present.
    """
    logger.debug("Scanning package %s", path)
    failures: list[str] = []

    metadata_dir = path / METADATA_DIRNAME
    has_metadata_dir = _query(probe.is_dir, metadata_dir, failures, on_failure=True)
    manifest = None
    if has_metadata_dir:
        manifest = _find_document(probe, loader, metadata_dir / MANIFEST_FILENAME)

    hooks_dir = path / HOOKS_DIRNAME
    has_hooks_dir = _query(probe.is_dir, hooks_dir, failures, on_failure=False)
    hooks = None
    if has_hooks_dir:
        hooks = _find_document(probe, loader, hooks_dir / HOOKS_FILENAME)

    return PackageLayout(
        path=path,
        has_metadata_dir=has_metadata_dir,
        manifest=manifest,
        has_readme=_query(probe.exists, path / README_FILENAME, failures, on_failure=True),
        has_license=_query(probe.exists, path / LICENSE_FILENAME, failures, on_failure=True),
        commands=_list_documents(probe, path / COMMANDS_DIRNAME, failures),
        agents=_list_documents(probe, path / AGENTS_DIRNAME, failures),
        skills=_list_skills(probe, path / SKILLS_DIRNAME, failures),
        has_hooks_dir=has_hooks_dir,
        hooks=hooks,
        service_config=_find_document(probe, loader, path / SERVICE_CONFIG_FILENAME),
        io_failures=tuple(failures),
    )

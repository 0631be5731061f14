"""Cross-checks between the catalog and the plugin directories on disk.

The catalog and the filesystem are two independent sources of truth:
- check_duplicates() and check_sources() validate catalog entries,
- discover_packages() enumerates the plugin directories actually present.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from plugcat_cli.models import CatalogDocument, PluginEntry
from plugcat_cli.validation.probe import FilesystemProbe, IOFailure
from plugcat_cli.validation.results import Finding, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredPackage:
    """A plugin directory found by walking the plugins directory.

    Attributes:
        name: Directory name (the package identity).
        path: Plugin directory.
        category: Category path, e.g. "official" or "specialized/data".
    """

    name: str
    path: Path
    category: str

    @property
    def subject(self) -> str:
        return f"{self.category}/{self.name}"


def check_duplicates(catalog: CatalogDocument, *, subject: str) -> list[Finding]:
    """Report every repeated plugin name.

    Names are compared exactly (case-sensitive). Each repeat yields one
    ERROR naming the 0-based index of the first occurrence and of the repeat.

    Args:
        catalog: The loaded catalog.
        subject: Finding subject, normally the catalog path.
    """
    first_seen: dict[str, int] = {}
    findings: list[Finding] = []
    for entry in catalog.plugins:
        if entry.name is None:
            continue
        if entry.name in first_seen:
            findings.append(
                Finding(
                    severity=Severity.ERROR,
                    subject=subject,
                    message=(
                        f'Duplicate plugin name "{entry.name}" found at indices '
                        f"{first_seen[entry.name]} and {entry.index}"
                    ),
                    rule_name="duplicate_names",
                    fix_hint="Plugin names must be unique within the catalog",
                )
            )
        else:
            first_seen[entry.name] = entry.index
    return findings


def resolve_source(entry: PluginEntry, root: Path) -> Path | None:
    """Return the plugin directory of a relative entry, or None for remote sources."""
    if not entry.is_relative:
        return None
    return root / entry.source


def check_sources(catalog: CatalogDocument, *, root: Path, probe: FilesystemProbe) -> list[Finding]:
    """Check that relative sources point at existing directories.

    Remote references cannot be checked offline and are accepted as is. A
    source that cannot be inspected is a warning.

    Args:
        catalog: The loaded catalog.
        root: Registry root that relative sources resolve against.
        probe: Storage queries.
    """
    findings: list[Finding] = []
    for entry in catalog.plugins:
        path = resolve_source(entry, root)
        if path is None:
            continue
        severity = Severity.ERROR
        fix_hint = None
        try:
            if not probe.exists(path):
                message = f'Plugin "{entry.label}" source path does not exist: {entry.source}'
            elif not probe.is_dir(path):
                message = f'Plugin "{entry.label}" source path is not a directory: {entry.source}'
            else:
                continue
        except IOFailure as e:
            severity = Severity.WARNING
            message = str(e)
            fix_hint = "Check file permissions"
        findings.append(
            Finding(
                severity=severity,
                subject=entry.label,
                message=message,
                rule_name="source_path",
                fix_hint=fix_hint,
            )
        )
    return findings


def _child_dirs(probe: FilesystemProbe, path: Path) -> list[str]:
    return [e.name for e in probe.list_entries(path) if e.is_dir and not e.name.startswith(".")]


def discover_packages(
    plugins_dir: Path,
    *,
    probe: FilesystemProbe,
    namespace_dirs: Sequence[str] = (),
) -> tuple[list[DiscoveredPackage], list[Finding]]:
    """Enumerate plugin directories under ``plugins_dir``.

    Layout is ``<plugins_dir>/<category>/<plugin>``; a category named in
    ``namespace_dirs`` is expanded one extra level, giving
    ``<plugins_dir>/<category>/<domain>/<plugin>``. Hidden directories are
    skipped and every level is walked in name order.

    Args:
        plugins_dir: Directory holding the plugin categories.
        probe: Storage queries.
        namespace_dirs: Category names that group plugins by domain.

    Returns:
        Tuple of (packages in discovery order, warnings met while walking).
    """
    subject = plugins_dir.name + "/"
    try:
        present = probe.is_dir(plugins_dir)
        message = None if present else f"No plugins found: {plugins_dir} is not a directory"
    except IOFailure as e:
        message = str(e)
    if message is not None:
        return [], [
            Finding(
                severity=Severity.WARNING,
                subject=subject,
                message=message,
                rule_name="discovery",
            )
        ]

    packages: list[DiscoveredPackage] = []
    findings: list[Finding] = []

    def walk(directory: Path, category: str) -> list[str] | None:
        try:
            return _child_dirs(probe, directory)
        except IOFailure as e:
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    subject=f"{subject}{category}" if category else subject,
                    message=str(e),
                    rule_name="discovery",
                    fix_hint="Check file permissions",
                )
            )
            return None

    for category in walk(plugins_dir, "") or []:
        category_path = plugins_dir / category
        if category in namespace_dirs:
            domains = walk(category_path, category) or []
            groups = [(f"{category}/{domain}", category_path / domain) for domain in domains]
        else:
            groups = [(category, category_path)]

        for group, group_path in groups:
            for name in walk(group_path, group) or []:
                package = DiscoveredPackage(name=name, path=group_path / name, category=group)
                packages.append(package)

    logger.debug("Discovered %d plugin(s) under %s", len(packages), plugins_dir)
    if not packages and not findings:
        findings.append(
            Finding(
                severity=Severity.WARNING,
                subject=subject,
                message=f"No plugins found in {plugins_dir}",
                rule_name="discovery",
            )
        )
    return packages, findings

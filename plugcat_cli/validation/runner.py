"""Validation runner that executes every check against a registry.

Flow: load schemas and catalog (fatal on failure) -> catalog schema ->
duplicate names -> source paths -> package discovery -> structural rules for
each package. All findings merge into one ValidationReport; the caller
decides how to render it and which exit status to use.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from plugcat_cli.config import Settings
from plugcat_cli.errors import CatalogLoadError, DocumentLoadError
from plugcat_cli.loader import (
    CATALOG_SCHEMA_ID,
    DocumentLoader,
    JsonDocumentLoader,
    SchemaRepository,
)
from plugcat_cli.models import CatalogDocument, PluginEntry
from plugcat_cli.validation.layout import scan_package
from plugcat_cli.validation.probe import FilesystemProbe, IOFailure, LocalFilesystemProbe
from plugcat_cli.validation.referential import (
    check_duplicates,
    check_sources,
    discover_packages,
    resolve_source,
)
from plugcat_cli.validation.results import Finding, ValidationReport
from plugcat_cli.validation.rules import (
    PackageContext,
    PackageRule,
    apply_rules,
    default_rules,
)
from plugcat_cli.validation.schema import SchemaValidator, violations_to_findings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageTarget:
    """A plugin directory queued for structural validation."""

    path: Path
    context: PackageContext


@dataclass(frozen=True)
class _Run:
    root: Path
    settings: Settings
    probe: FilesystemProbe
    loader: DocumentLoader
    validator: SchemaValidator
    rules: Sequence[PackageRule]


def _prepare(
    root: Path,
    settings: Settings | None,
    probe: FilesystemProbe | None,
    loader: DocumentLoader | None,
    schemas: SchemaRepository | None,
    rules: Sequence[PackageRule] | None,
) -> _Run:
    settings = settings or Settings()
    loader = loader or JsonDocumentLoader()
    if schemas is None:
        schema_dir = root / settings.schema_dir if settings.schema_dir is not None else None
        schemas = SchemaRepository.load(schema_dir, loader=loader)
    validator = SchemaValidator(schemas)
    return _Run(
        root=root,
        settings=settings,
        probe=probe or LocalFilesystemProbe(),
        loader=loader,
        validator=validator,
        rules=tuple(rules) if rules is not None else default_rules(validator),
    )


def _path_key(path: Path) -> str:
    return os.path.normpath(path)


def load_catalog(path: Path, *, loader: DocumentLoader) -> CatalogDocument:
    """Load the catalog document.

    Raises:
        CatalogLoadError: If the catalog is missing, malformed or unreadable.
    """
    try:
        data = loader.load(path)
    except DocumentLoadError as e:
        raise CatalogLoadError(str(path), e) from e
    return CatalogDocument.from_dict(data)


def _check_catalog(run: _Run) -> tuple[CatalogDocument, ValidationReport]:
    subject = run.settings.catalog
    catalog = load_catalog(run.root / run.settings.catalog, loader=run.loader)
    logger.debug("Loaded catalog with %d plugin entries", len(catalog.plugins))

    report = ValidationReport()
    violations = run.validator.validate(catalog.raw, CATALOG_SCHEMA_ID)
    report.append(*violations_to_findings(violations, subject=subject, rule_name="catalog_schema"))
    report.append(*check_duplicates(catalog, subject=subject))
    report.append(*check_sources(catalog, root=run.root, probe=run.probe))
    return catalog, report


def _catalog_targets(catalog: CatalogDocument, run: _Run) -> dict[str, PackageTarget]:
    """Targets for relative catalog entries whose source is a directory.

    When several entries point at one directory the first entry wins. A
    source the probe cannot inspect is skipped; check_sources() reports it.
    """
    targets: dict[str, PackageTarget] = {}
    for entry in catalog.plugins:
        path = resolve_source(entry, run.root)
        if path is None:
            continue
        try:
            is_package = run.probe.is_dir(path)
        except IOFailure:
            is_package = False
        if not is_package:
            continue
        key = _path_key(path)
        if key not in targets:
            context = PackageContext(
                identity=Path(key).name,
                subject=entry.label,
                entry=entry,
                discovered=False,
            )
            targets[key] = PackageTarget(path=path, context=context)
    return targets


def _discovered_targets(
    run: _Run,
    entries_by_path: dict[str, PluginEntry],
) -> tuple[dict[str, PackageTarget], list[Finding]]:
    packages, findings = discover_packages(
        run.root / run.settings.plugins_dir,
        probe=run.probe,
        namespace_dirs=run.settings.namespace_dirs,
    )
    targets: dict[str, PackageTarget] = {}
    for package in packages:
        key = _path_key(package.path)
        context = PackageContext(
            identity=package.name,
            subject=package.subject,
            entry=entries_by_path.get(key),
        )
        targets[key] = PackageTarget(path=package.path, context=context)
    return targets, findings


def _validate_package(target: PackageTarget, run: _Run) -> list[Finding]:
    """Scan one plugin directory and apply the rule set to it."""
    layout = scan_package(target.path, probe=run.probe, loader=run.loader)
    findings = apply_rules(run.rules, layout, target.context)
    logger.debug("Validated %s: %d finding(s)", target.context.subject, len(findings))
    return findings


def _validate_targets(targets: Sequence[PackageTarget], run: _Run) -> ValidationReport:
    """Validate packages, serially or on worker threads.

    Findings are assembled in ``targets`` order either way, so the report
    does not depend on completion order.
    """
    report = ValidationReport()
    if run.settings.jobs > 1 and len(targets) > 1:
        with ThreadPoolExecutor(max_workers=run.settings.jobs) as executor:
            futures = [executor.submit(_validate_package, t, run) for t in targets]
            for future in futures:
                report.append(*future.result())
    else:
        for target in targets:
            report.append(*_validate_package(target, run))
    return report


def validate_catalog(
    root: Path,
    *,
    settings: Settings | None = None,
    probe: FilesystemProbe | None = None,
    loader: DocumentLoader | None = None,
    schemas: SchemaRepository | None = None,
    rules: Sequence[PackageRule] | None = None,
) -> ValidationReport:
    """Validate the catalog and the plugins its relative entries point at.

    Args:
        root: Registry root (relative sources resolve against it).
        settings: Resolved settings; defaults to built-in defaults.
        probe: Storage queries; defaults to the local filesystem.
        loader: Document loader; defaults to JSON files on disk.
        schemas: Schema source; defaults to the configured or bundled schemas.
        rules: Package rules; defaults to the standard rule set.

    Returns:
        ValidationReport with every finding.

    Raises:
        CatalogLoadError: If the catalog cannot be loaded.
        SchemaLoadError: If a schema cannot be loaded.
    """
    run = _prepare(root, settings, probe, loader, schemas, rules)
    catalog, report = _check_catalog(run)
    targets = _catalog_targets(catalog, run)
    return report.merge(_validate_targets(list(targets.values()), run))


def validate_packages(
    root: Path,
    *,
    settings: Settings | None = None,
    probe: FilesystemProbe | None = None,
    loader: DocumentLoader | None = None,
    schemas: SchemaRepository | None = None,
    rules: Sequence[PackageRule] | None = None,
) -> ValidationReport:
    """Validate every plugin directory found under the plugins directory.

    The catalog is not read; every package is held to the manifest
    presence rule.

    Raises:
        SchemaLoadError: If a schema cannot be loaded.
    """
    run = _prepare(root, settings, probe, loader, schemas, rules)
    targets, findings = _discovered_targets(run, {})
    report = ValidationReport(findings=list(findings))
    return report.merge(_validate_targets(list(targets.values()), run))


def validate_registry(
    root: Path,
    *,
    settings: Settings | None = None,
    probe: FilesystemProbe | None = None,
    loader: DocumentLoader | None = None,
    schemas: SchemaRepository | None = None,
    rules: Sequence[PackageRule] | None = None,
) -> ValidationReport:
    """Validate the catalog and every plugin directory, each exactly once.

    Discovered packages come first, in discovery order, carrying the
    catalog entry that points at them (if any), so both the manifest
    presence and the strict mode rules apply to them; catalog packages that
    discovery did not find follow in catalog order. The verdict equals
    that of validate_packages() and validate_catalog() combined.

    Raises:
        CatalogLoadError: If the catalog cannot be loaded.
        SchemaLoadError: If a schema cannot be loaded.
    """
    run = _prepare(root, settings, probe, loader, schemas, rules)
    catalog, report = _check_catalog(run)

    catalog_targets = _catalog_targets(catalog, run)
    entries_by_path = {
        key: target.context.entry
        for key, target in catalog_targets.items()
        if target.context.entry is not None
    }
    discovered, discovery_findings = _discovered_targets(run, entries_by_path)
    report.append(*discovery_findings)

    targets = list(discovered.values())
    targets.extend(t for key, t in catalog_targets.items() if key not in discovered)
    return report.merge(_validate_targets(targets, run))

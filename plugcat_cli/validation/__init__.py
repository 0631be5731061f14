"""Validation engine for plugin registries.

This module provides the public API for validating a registry:
- validate_registry(): Catalog plus every plugin directory
- validate_catalog(): Catalog and the plugins it references
- validate_packages(): Plugin directories found on disk
- ValidationReport: Aggregate of findings with a pass/fail verdict
- PackageRule: Base class for custom structural rules
"""

from plugcat_cli.validation.layout import PackageLayout, scan_package
from plugcat_cli.validation.probe import DirEntry, FilesystemProbe, IOFailure, LocalFilesystemProbe
from plugcat_cli.validation.results import Finding, Severity, ValidationReport
from plugcat_cli.validation.rules import PackageContext, PackageRule, default_rules
from plugcat_cli.validation.runner import validate_catalog, validate_packages, validate_registry
from plugcat_cli.validation.schema import SchemaValidator, SchemaViolation

__all__ = [
    "DirEntry",
    "FilesystemProbe",
    "Finding",
    "IOFailure",
    "LocalFilesystemProbe",
    "PackageContext",
    "PackageLayout",
    "PackageRule",
    "SchemaValidator",
    "SchemaViolation",
    "Severity",
    "ValidationReport",
    "default_rules",
    "scan_package",
    "validate_catalog",
    "validate_packages",
    "validate_registry",
]

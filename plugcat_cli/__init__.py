"""plugcat CLI - Validate plugin marketplace catalogs and plugin directories."""

from plugcat_cli.cli import cli
from plugcat_cli.validation import (
    Finding,
    Severity,
    ValidationReport,
    validate_catalog,
    validate_packages,
    validate_registry,
)

__all__ = [
    "Finding",
    "Severity",
    "ValidationReport",
    "cli",
    "validate_catalog",
    "validate_packages",
    "validate_registry",
]

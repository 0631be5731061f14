"""Structured error codes for plugcat.

All errors follow the format PLGCT-{category}{number}:
- PLGCT-LOD*: Document loading errors
- PLGCT-SCH*: Schema errors
- PLGCT-CAT*: Catalog errors
- PLGCT-CFG*: Configuration errors

These exceptions are reserved for conditions that stop a run. Problems found
while validating a registry are never raised; they are collected as findings
in a ValidationReport.
"""

from __future__ import annotations

from typing import Any


class PlugcatError(Exception):
    """Base class for all plugcat errors.

    All errors have:
    - code: Structured error code (e.g., PLGCT-LOD001)
    - message: Human-readable error message
    """

    code: str = "PLGCT-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a plugcat error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Document Loading Errors (PLGCT-LOD*)
class DocumentLoadError(PlugcatError):
    """Base class for errors raised while reading a structured document."""

    code = "PLGCT-LOD000"


class DocumentNotFoundError(DocumentLoadError):
    """Raised when a document does not exist.

    Error code: PLGCT-LOD001
    """

    code = "PLGCT-LOD001"

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}", path=path)


class DocumentMalformedError(DocumentLoadError):
    """Raised when a document exists but is not valid JSON.

    Error code: PLGCT-LOD002
    """

    code = "PLGCT-LOD002"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid JSON in {path}: {reason}", path=path, reason=reason)


class DocumentReadError(DocumentLoadError):
    """Raised when a document cannot be read for any other reason.

    Error code: PLGCT-LOD003
    """

    code = "PLGCT-LOD003"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}", path=path, reason=reason)


# Schema Errors (PLGCT-SCH*)
class SchemaError(PlugcatError):
    """Base class for schema-related errors."""

    code = "PLGCT-SCH000"


class SchemaLoadError(SchemaError):
    """Raised when a schema document is missing or unparseable.

    Error code: PLGCT-SCH001

    This is fatal: without the schema nothing can be validated.
    """

    code = "PLGCT-SCH001"

    def __init__(self, schema_id: str, cause: DocumentLoadError) -> None:
        super().__init__(
            f"Could not load schema '{schema_id}': {cause.message}",
            schema_id=schema_id,
            cause_code=cause.code,
        )


class UnknownSchemaError(SchemaError):
    """Raised when a schema is requested by an identifier that is not registered.

    Error code: PLGCT-SCH002
    """

    code = "PLGCT-SCH002"

    def __init__(self, schema_id: str) -> None:
        super().__init__(f"Unknown schema '{schema_id}'", schema_id=schema_id)


# Catalog Errors (PLGCT-CAT*)
class CatalogError(PlugcatError):
    """Base class for catalog-related errors."""

    code = "PLGCT-CAT000"


class CatalogLoadError(CatalogError):
    """Raised when the catalog document is missing or unparseable.

    Error code: PLGCT-CAT001
    """

    code = "PLGCT-CAT001"

    def __init__(self, path: str, cause: DocumentLoadError) -> None:
        super().__init__(
            f"Could not load catalog: {cause.message}",
            path=path,
            cause_code=cause.code,
        )


# Configuration Errors (PLGCT-CFG*)
class ConfigError(PlugcatError):
    """Base class for configuration-related errors."""

    code = "PLGCT-CFG000"


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Error code: PLGCT-CFG001
    """

    code = "PLGCT-CFG001"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


class ConfigInvalidStructureError(ConfigError):
    """Raised when a configuration file has an invalid structure.

    Error code: PLGCT-CFG002
    """

    code = "PLGCT-CFG002"

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Invalid config structure in {path}: {detail}",
            path=path,
            detail=detail,
        )

"""Document loading and schema source for registry validation.

Two collaborators live here:

- A document loader that reads a JSON file and tells "not found", "malformed"
  and "other I/O failure" apart through distinct exception types.
- SchemaRepository, which supplies the catalog and manifest schemas by fixed
  identifiers, either from a schema directory or from the schemas bundled
  with this package.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from plugcat_cli.errors import (
    DocumentLoadError,
    DocumentMalformedError,
    DocumentNotFoundError,
    DocumentReadError,
    SchemaLoadError,
    UnknownSchemaError,
)

logger = logging.getLogger(__name__)

CATALOG_SCHEMA_ID = "catalog-schema"
MANIFEST_SCHEMA_ID = "manifest-schema"

# Schema identifier -> file name inside a schema directory
SCHEMA_FILES: dict[str, str] = {
    CATALOG_SCHEMA_ID: "marketplace-schema.json",
    MANIFEST_SCHEMA_ID: "plugin-manifest-schema.json",
}


def load_json(path: Path) -> Any:
    """Read and parse a UTF-8 JSON document.

    Args:
        path: File to read.

    Returns:
        The parsed document.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        DocumentMalformedError: If the content is not valid JSON.
        DocumentReadError: For any other OS-level failure (e.g. permissions).
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DocumentNotFoundError(str(path)) from e
    except UnicodeDecodeError as e:
        raise DocumentMalformedError(str(path), f"not UTF-8 encoded ({e.reason})") from e
    except OSError as e:
        raise DocumentReadError(str(path), e.strerror or str(e)) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        reason = f"{e.msg} (line {e.lineno}, column {e.colno})"
        raise DocumentMalformedError(str(path), reason) from e
    except RecursionError as e:
        raise DocumentMalformedError(str(path), "nesting too deep") from e


@runtime_checkable
class DocumentLoader(Protocol):
    """Protocol for anything that can turn a path into parsed structured data."""

    def load(self, path: Path) -> Any:
        """Load the document at ``path``.

        Raises:
            DocumentLoadError: Subclass describing why the document could not be loaded.
        """
        ...


class JsonDocumentLoader:
    """DocumentLoader reading JSON documents from the local filesystem."""

    def load(self, path: Path) -> Any:
        logger.debug("Loading JSON document %s", path)
        return load_json(path)


@dataclass(frozen=True)
class SchemaRepository:
    """Schema documents keyed by their fixed identifiers.

    Attributes:
        schemas: Mapping of schema identifier to schema document.
        source: Where the schemas were loaded from (for diagnostics).
    """

    schemas: Mapping[str, Any]
    source: str = "<memory>"

    @classmethod
    def load(
        cls,
        schema_dir: Path | None = None,
        *,
        loader: DocumentLoader | None = None,
    ) -> SchemaRepository:
        """Load the catalog and manifest schemas.

        Args:
            schema_dir: Directory holding the schema files. None selects the
                schemas bundled with plugcat.
            loader: Loader used for schema_dir; defaults to JsonDocumentLoader.

        Returns:
            SchemaRepository holding both schemas.

        Raises:
            SchemaLoadError: If a schema is missing or unparseable.
        """
        if schema_dir is None:
            return cls.bundled()

        loader = loader or JsonDocumentLoader()
        schemas: dict[str, Any] = {}
        for schema_id, filename in SCHEMA_FILES.items():
            try:
                schemas[schema_id] = loader.load(schema_dir / filename)
            except DocumentLoadError as e:
                raise SchemaLoadError(schema_id, e) from e
        logger.debug("Loaded %d schemas from %s", len(schemas), schema_dir)
        return cls(schemas=schemas, source=str(schema_dir))

    @classmethod
    def bundled(cls) -> SchemaRepository:
        """Load the schemas shipped inside the plugcat_cli package."""
        package_dir = resources.files("plugcat_cli") / "schemas"
        schemas: dict[str, Any] = {}
        for schema_id, filename in SCHEMA_FILES.items():
            resource = package_dir / filename
            try:
                schemas[schema_id] = json.loads(resource.read_text(encoding="utf-8"))
            except FileNotFoundError as e:
                raise SchemaLoadError(schema_id, DocumentNotFoundError(str(resource))) from e
            except json.JSONDecodeError as e:
                cause = DocumentMalformedError(str(resource), e.msg)
                raise SchemaLoadError(schema_id, cause) from e
        return cls(schemas=schemas, source="bundled")

    def get(self, schema_id: str) -> Any:
        """Return the schema document registered under ``schema_id``.

        Raises:
            UnknownSchemaError: If no schema has that identifier.
        """
        try:
            return self.schemas[schema_id]
        except KeyError as e:
            raise UnknownSchemaError(schema_id) from e

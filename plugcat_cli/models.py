"""Catalog data model.

The catalog is the top-level document of a registry; it enumerates plugins
by name and tells where each one lives. Construction is deliberately lenient:
a catalog that fails schema validation is still walked so that every other
check can run and report its own findings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from plugcat_cli.constants import RELATIVE_SOURCE_PREFIX


@dataclass(frozen=True)
class PluginEntry:
    """One entry of the catalog's ``plugins`` array.

    Attributes:
        index: 0-based position of the entry in ``plugins``.
        name: Plugin name, or None if the entry has no string name.
        source: Relative path ("./...") or an opaque remote reference.
        strict: Whether missing plugin metadata is an error (default True).
    """

    index: int
    name: str | None
    source: Any
    strict: bool = True

    @property
    def is_relative(self) -> bool:
        """True if the source is a relative path this engine can check offline."""
        return isinstance(self.source, str) and self.source.startswith(RELATIVE_SOURCE_PREFIX)

    @property
    def label(self) -> str:
        """Human-readable identifier used as a finding subject."""
        return self.name if self.name is not None else f"plugins[{self.index}]"

    @classmethod
    def from_dict(cls, data: dict[str, Any], index: int) -> PluginEntry:
        """Create a PluginEntry from one catalog entry.

        Args:
            data: The entry mapping.
            index: Position of the entry in ``plugins``.

        Returns:
            PluginEntry instance.
        """
        name = data.get("name")
        strict = data.get("strict", True)
        return cls(
            index=index,
            name=name if isinstance(name, str) else None,
            source=data.get("source"),
            # A non-boolean value is a schema violation; treat it as the default
            strict=strict if isinstance(strict, bool) else True,
        )


@dataclass(frozen=True)
class CatalogDocument:
    """The registry catalog.

    Attributes:
        plugins: Entries in document order.
        raw: The parsed document, as loaded, for schema validation.
    """

    plugins: tuple[PluginEntry, ...] = ()
    raw: Any = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> CatalogDocument:
        """Create a CatalogDocument from a parsed catalog.

        Non-mapping entries keep their index slot but are skipped.

        Args:
            data: Parsed catalog document (any JSON value).

        Returns:
            CatalogDocument instance.
        """
        plugins = data.get("plugins") if isinstance(data, dict) else None
        if not isinstance(plugins, list):
            return cls(plugins=(), raw=data)
        entries = tuple(
            PluginEntry.from_dict(item, index)
            for index, item in enumerate(plugins)
            if isinstance(item, dict)
        )
        return cls(plugins=entries, raw=data)

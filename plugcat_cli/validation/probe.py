"""FilesystemProbe protocol for read-only storage queries.

Every storage query the validation engine makes goes through a probe, so the
engine can be exercised against an in-memory tree in tests.

Contract:
    exists() and is_dir() return False for a missing path and raise IOFailure
    when the path cannot be inspected (e.g. permission denied).
    list_entries() raises IOFailure for permission or transient errors.
    Callers convert IOFailure into a WARNING finding instead of aborting.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class IOFailure(Exception):
    """Raised by a probe when a path cannot be inspected.

    Attributes:
        path: The path being inspected.
        reason: Short description of the failure.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot inspect {path}: {reason}")


@dataclass(frozen=True)
class DirEntry:
    """One directory entry returned by list_entries().

    Attributes:
        name: Entry name (no path components).
        is_dir: True if the entry is a directory.
    """

    name: str
    is_dir: bool


@runtime_checkable
class FilesystemProbe(Protocol):
    """Protocol for the three storage queries used by the engine."""

    def exists(self, path: Path) -> bool:
        """Return True if ``path`` exists.

        Raises:
            IOFailure: If ``path`` cannot be inspected.
        """
        ...

    def is_dir(self, path: Path) -> bool:
        """Return True if ``path`` exists and is a directory.

        Raises:
            IOFailure: If ``path`` cannot be inspected.
        """
        ...

    def list_entries(self, path: Path) -> list[DirEntry]:
        """Return the entries of directory ``path`` sorted by name.

        Raises:
            IOFailure: If the directory cannot be listed.
        """
        ...


class LocalFilesystemProbe:
    """FilesystemProbe backed by the local filesystem.

    Only a missing path (or a path under a regular file) answers False;
    any other OSError is raised as IOFailure.
    """

    def _stat(self, path: Path) -> os.stat_result | None:
        try:
            return path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            logger.debug("Inspecting %s failed: %s", path, e)
            raise IOFailure(path, e.strerror or str(e)) from e

    def exists(self, path: Path) -> bool:
        return self._stat(path) is not None

    def is_dir(self, path: Path) -> bool:
        st = self._stat(path)
        return st is not None and stat.S_ISDIR(st.st_mode)

    def list_entries(self, path: Path) -> list[DirEntry]:
        try:
            entries = [DirEntry(name=child.name, is_dir=child.is_dir()) for child in path.iterdir()]
        except OSError as e:
            logger.debug("Listing %s failed: %s", path, e)
            raise IOFailure(path, e.strerror or str(e)) from e
        return sorted(entries, key=lambda entry: entry.name)

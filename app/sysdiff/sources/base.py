"""Abstract base class for package database sources.

This module defines the PackageSource interface that every package
manager backend must implement.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from sysdiff.errors import SysdiffError
from sysdiff.models.file import FileRecord


class PackageDatabaseError(SysdiffError):
    """Raised when the package database cannot be read."""


class PackageBackend(str, Enum):
    """Supported package managers."""

    PACMAN = "pacman"
    DPKG = "dpkg"

    @property
    def default_dbpath(self) -> Path:
        """Default database location for this package manager."""
        if self is PackageBackend.DPKG:
            return Path("/var/lib/dpkg")
        return Path("/var/lib/pacman")


class PackageSource(ABC):
    """Abstract base class for all package database sources.

    Sources read the local package database and yield the files installed
    packages own, and the backup (configuration) files together with the
    content hash recorded when they were installed.

    Names yielded are normalized (root-relative, no leading slash) so they
    compare directly with the other collections.

    Example:
        >>> source = PacmanSource(Path("/var/lib/pacman"))
        >>> for record in source.iter_backup_files():
        ...     print(record.name, record.hash)
    """

    def __init__(self, dbpath: Path) -> None:
        self.dbpath = dbpath

    @property
    @abstractmethod
    def backend(self) -> PackageBackend:
        """Return the package manager this source reads."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package database exists at dbpath.

        Returns:
            True if the database can be read, False otherwise.
        """

    @abstractmethod
    def iter_package_files(self) -> Iterator[FileRecord]:
        """Yield every file owned by an installed package.

        Directory entries are not yielded. Records carry no hash.

        Raises:
            PackageDatabaseError: If the database cannot be read.
        """

    @abstractmethod
    def iter_backup_files(self) -> Iterator[FileRecord]:
        """Yield every backup file with its recorded hash.

        Raises:
            PackageDatabaseError: If the database cannot be read.
        """

    def _require_available(self) -> None:
        if not self.is_available():
            msg = f"{self.backend.value} database not found at {self.dbpath}"
            raise PackageDatabaseError(msg)

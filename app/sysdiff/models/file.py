"""File models for reconciliation collections.

This module defines the record type shared by every collection the
reconciliation engine builds, together with the name normalization that
keeps collections comparable with each other.
"""

import posixpath
from dataclasses import dataclass, field


def normalize_name(path: str) -> str:
    """Normalize a path to the root-relative form used in every collection.

    Leading slashes are stripped and ``.``/duplicate separators collapsed,
    so "/etc//foo.conf", "etc/./foo.conf" and "etc/foo.conf" all become
    "etc/foo.conf".

    Args:
        path: Absolute or root-relative path.

    Returns:
        Root-relative path without a leading slash ("" for the root itself).
    """
    return posixpath.normpath("/" + path).lstrip("/")


@dataclass(frozen=True, slots=True)
class FileRecord:
    """A named file observed in some collection.

    Attributes:
        name: Root-relative path without leading slash (e.g. "etc/foo.conf").
        hash: Content digest, present only for collections that carry one
            (e.g. the hash a package manager recorded for a backup file).
    """

    name: str
    hash: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate file record data after initialization."""
        if not self.name:
            msg = "File name cannot be empty"
            raise ValueError(msg)
        if self.name.startswith("/"):
            msg = f"File name must be root-relative, got {self.name!r}"
            raise ValueError(msg)

    @property
    def path(self) -> str:
        """Absolute logical path of the file (independent of --root)."""
        return "/" + self.name


# Ordered, immutable sequence of records. Order follows the source that
# produced it; duplicates are kept.
FileSet = tuple[FileRecord, ...]

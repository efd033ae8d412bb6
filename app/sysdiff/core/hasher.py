"""Content hashing with typed outcomes.

A missing file is a normal condition during reconciliation (a package may
record a file that was deleted, a mirror may track a file the disk lacks),
and an unreadable file only costs that one file. Both are returned as
outcomes. Every other I/O error means the environment cannot be trusted
and is raised.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sysdiff.errors import SysdiffError

# Chunk size for streaming file content into the digest
_CHUNK_SIZE = 64 * 1024


class HashError(SysdiffError):
    """Raised on an unexpected I/O error while hashing a file."""


class HashOutcome(Enum):
    """Outcome of hashing one file.

    Attributes:
        OK: The file was read and a digest computed.
        NOT_FOUND: The path does not exist (or is not a regular file).
        PERMISSION_DENIED: The file exists but cannot be read.
    """

    OK = "ok"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"


@dataclass(frozen=True, slots=True)
class HashResult:
    """Result of hashing one file.

    Attributes:
        path: The path that was hashed.
        outcome: What happened.
        digest: Hex digest, set only when outcome is OK.
        error: OS error message for PERMISSION_DENIED.
    """

    path: Path
    outcome: HashOutcome
    digest: str | None = None
    error: str | None = None

    @property
    def missing(self) -> bool:
        """Check if the file was absent."""
        return self.outcome == HashOutcome.NOT_FOUND

    @property
    def denied(self) -> bool:
        """Check if the file could not be read for lack of permission."""
        return self.outcome == HashOutcome.PERMISSION_DENIED


def hash_file(path: Path) -> HashResult:
    """Compute the MD5 digest of a file's content.

    MD5 is the digest pacman and dpkg record for backup files, so digests
    compare directly with the package database.

    Args:
        path: File to hash.

    Returns:
        HashResult with outcome OK, NOT_FOUND or PERMISSION_DENIED.

    Raises:
        HashError: On any other I/O error.
    """
    try:
        with open(path, "rb") as f:
            digest = hashlib.md5(usedforsecurity=False)
            while chunk := f.read(_CHUNK_SIZE):
                digest.update(chunk)
    except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
        return HashResult(path=path, outcome=HashOutcome.NOT_FOUND)
    except PermissionError as e:
        return HashResult(path=path, outcome=HashOutcome.PERMISSION_DENIED, error=str(e))
    except OSError as e:
        msg = f"Cannot hash {path}: {e}"
        raise HashError(msg) from e

    return HashResult(path=path, outcome=HashOutcome.OK, digest=digest.hexdigest())

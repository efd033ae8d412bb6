"""Mirror repository source.

Lists the files tracked by the git index of the mirror directory. The
mirror lays files out the way the scope root does ("etc/foo.conf" in the
mirror mirrors /etc/foo.conf), so listed names compare directly with the
other collections.
"""

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from sysdiff.errors import SysdiffError
from sysdiff.models.file import FileRecord, normalize_name
from sysdiff.utils.shell import run_command

logger = logging.getLogger(__name__)


class RepoListingError(SysdiffError):
    """Raised when the mirror's tracked files cannot be listed."""


class GitRepoSource:
    """Lists tracked files of a git working tree.

    Args:
        repo: Path of the mirror working tree.
        timeout: Seconds to wait for git.
    """

    # NUL-terminated records are never C-quoted
    _LS_FILES = ["git", "ls-files", "-z"]

    def __init__(self, repo: Path, *, timeout: float = 120.0) -> None:
        self.repo = repo
        self._timeout = timeout

    def iter_files(self) -> Iterator[FileRecord]:
        """Yield tracked files in the order git lists them.

        Yields:
            FileRecord without hash for each tracked path.

        Raises:
            RepoListingError: If git is missing, the mirror does not exist,
                or git exits with an error.
        """
        if not self.repo.is_dir():
            msg = f"Mirror directory not found: {self.repo}"
            raise RepoListingError(msg)

        try:
            result = run_command(self._LS_FILES, cwd=str(self.repo), timeout=self._timeout)
        except FileNotFoundError as e:
            msg = "git is not installed"
            raise RepoListingError(msg) from e
        except (subprocess.TimeoutExpired, OSError) as e:
            msg = f"Error listing repo files: {e}"
            raise RepoListingError(msg) from e

        if not result.success:
            msg = f"Error listing repo files in {self.repo}: {result.error_summary}"
            raise RepoListingError(msg)

        for path in result.lines("\0"):
            if not path:
                continue
            yield FileRecord(name=normalize_name(path))

"""pacman local database source.

Reads ``<dbpath>/local/<pkgname>-<pkgver>/files`` directly. Each files
entry holds a ``%FILES%`` section (one path per line, directories end with
"/") and an optional ``%BACKUP%`` section (``path<TAB>md5`` per line).
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from sysdiff.models.file import FileRecord, normalize_name
from sysdiff.sources.base import PackageBackend, PackageDatabaseError, PackageSource

logger = logging.getLogger(__name__)


class PacmanSource(PackageSource):
    """Package source for pacman (Arch Linux) local databases."""

    @property
    def backend(self) -> PackageBackend:
        """Return pacman as the package backend."""
        return PackageBackend.PACMAN

    @property
    def local_dir(self) -> Path:
        """Directory holding one entry per installed package."""
        return self.dbpath / "local"

    def is_available(self) -> bool:
        """Check if the local database directory exists."""
        return self.local_dir.is_dir()

    def iter_package_files(self) -> Iterator[FileRecord]:
        """Yield every non-directory file listed under %FILES%."""
        for entry in self._package_entries():
            for path in self._read_section(entry, "%FILES%"):
                if path.endswith("/"):
                    continue
                yield FileRecord(name=normalize_name(path))

    def iter_backup_files(self) -> Iterator[FileRecord]:
        """Yield every %BACKUP% entry with its recorded MD5."""
        for entry in self._package_entries():
            for line in self._read_section(entry, "%BACKUP%"):
                path, sep, md5 = line.rpartition("\t")
                if not sep or not path:
                    logger.debug("Skipping malformed backup line in %s: %r", entry.name, line)
                    continue
                yield FileRecord(name=normalize_name(path), hash=md5.strip())

    def _package_entries(self) -> list[Path]:
        """List installed package directories in name order.

        Raises:
            PackageDatabaseError: If the local database cannot be listed.
        """
        self._require_available()
        try:
            return sorted(p for p in self.local_dir.iterdir() if p.is_dir())
        except OSError as e:
            msg = f"Cannot list pacman database {self.local_dir}: {e}"
            raise PackageDatabaseError(msg) from e

    def _read_section(self, entry: Path, section: str) -> list[str]:
        """Read the lines of one %SECTION% of a package's files entry.

        Args:
            entry: Package directory inside the local database.
            section: Section header, e.g. "%FILES%".

        Returns:
            Non-empty lines of the section, in file order.

        Raises:
            PackageDatabaseError: If the files entry cannot be read.
        """
        files_path = entry / "files"
        try:
            content = files_path.read_text(encoding="utf-8", errors="surrogateescape")
        except FileNotFoundError:
            logger.debug("Package entry without files list: %s", entry.name)
            return []
        except OSError as e:
            msg = f"Cannot read {files_path}: {e}"
            raise PackageDatabaseError(msg) from e

        lines: list[str] = []
        in_section = False
        for line in content.split("\n"):
            if line.startswith("%") and line.endswith("%"):
                in_section = line == section
                continue
            if in_section and line:
                lines.append(line)
        return lines

"""dpkg database source.

Reads the dpkg administrative directory directly:

- ``<dbpath>/status`` lists packages; installed ones carry a
  ``Conffiles:`` field with one `` /path md5 [flags]`` line per backup file.
- ``<dbpath>/info/<pkg>.list`` (or ``<pkg>:<arch>.list`` for multi-arch
  packages) lists the paths a package owns, directories included.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from sysdiff.models.file import FileRecord, normalize_name
from sysdiff.sources.base import PackageBackend, PackageDatabaseError, PackageSource

logger = logging.getLogger(__name__)

# Trailing flags dpkg may append to a Conffiles line
_CONFFILE_FLAGS = frozenset({"obsolete", "remove-on-upgrade"})

# Hash dpkg records for a conffile that was never installed
_NEW_CONFFILE = "newconffile"


@dataclass(slots=True)
class _Stanza:
    """The fields of one status file paragraph this source needs."""

    package: str = ""
    architecture: str = ""
    status: str = ""
    conffiles: list[str] = field(default_factory=list)

    @property
    def installed(self) -> bool:
        return self.status.split()[-1:] == ["installed"]


def _parse_status(content: str) -> Iterator[_Stanza]:
    """Parse the status file into stanzas, in file order."""
    stanza = _Stanza()
    current = ""
    for line in content.split("\n"):
        if not line.strip():
            if stanza.package:
                yield stanza
            stanza = _Stanza()
            current = ""
            continue
        if line[0] in " \t":
            if current == "conffiles":
                stanza.conffiles.append(line.strip())
            continue
        key, _, value = line.partition(":")
        current = key.strip().lower()
        value = value.strip()
        if current == "package":
            stanza.package = value
        elif current == "architecture":
            stanza.architecture = value
        elif current == "status":
            stanza.status = value
    if stanza.package:
        yield stanza


def _parse_conffile(line: str) -> tuple[str, str] | None:
    """Split a Conffiles line into (path, md5), or None if malformed."""
    tokens = line.split(" ")
    while tokens and tokens[-1] in _CONFFILE_FLAGS:
        tokens.pop()
    if len(tokens) < 2:
        return None
    return " ".join(tokens[:-1]), tokens[-1]


class DpkgSource(PackageSource):
    """Package source for dpkg (Debian, Ubuntu, Pop!_OS) databases.

    Only packages whose status ends in "installed" are considered.
    Owned paths include directories, since .list files do not mark them;
    they never match walked files, so set differences are unaffected.
    """

    @property
    def backend(self) -> PackageBackend:
        """Return dpkg as the package backend."""
        return PackageBackend.DPKG

    @property
    def status_path(self) -> Path:
        """Path of the dpkg status file."""
        return self.dbpath / "status"

    def is_available(self) -> bool:
        """Check if the status file exists."""
        return self.status_path.is_file()

    def iter_package_files(self) -> Iterator[FileRecord]:
        """Yield every path listed in the .list files of installed packages."""
        for stanza in self._installed():
            for path in self._read_list(stanza):
                name = normalize_name(path)
                if name:
                    yield FileRecord(name=name)

    def iter_backup_files(self) -> Iterator[FileRecord]:
        """Yield every conffile of installed packages with its recorded MD5."""
        for stanza in self._installed():
            for line in stanza.conffiles:
                parsed = _parse_conffile(line)
                if parsed is None:
                    logger.debug("Skipping malformed conffile line in %s: %r", stanza.package, line)
                    continue
                path, md5 = parsed
                if md5 == _NEW_CONFFILE:
                    logger.debug("Skipping uninstalled conffile %s (%s)", path, stanza.package)
                    continue
                yield FileRecord(name=normalize_name(path), hash=md5)

    def _installed(self) -> list[_Stanza]:
        """Read the status file and return installed package stanzas.

        Raises:
            PackageDatabaseError: If the status file cannot be read.
        """
        self._require_available()
        try:
            content = self.status_path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            msg = f"Cannot read dpkg status file {self.status_path}: {e}"
            raise PackageDatabaseError(msg) from e
        return [s for s in _parse_status(content) if s.installed]

    def _read_list(self, stanza: _Stanza) -> list[str]:
        """Read the owned-path list of one package.

        Raises:
            PackageDatabaseError: If the list exists but cannot be read.
        """
        info = self.dbpath / "info"
        candidates = [info / f"{stanza.package}.list"]
        if stanza.architecture:
            candidates.insert(0, info / f"{stanza.package}:{stanza.architecture}.list")

        for list_path in candidates:
            try:
                content = list_path.read_text(encoding="utf-8", errors="surrogateescape")
            except FileNotFoundError:
                continue
            except OSError as e:
                msg = f"Cannot read {list_path}: {e}"
                raise PackageDatabaseError(msg) from e
            return [line for line in content.split("\n") if line]

        logger.debug("No file list for installed package %s", stanza.package)
        return []

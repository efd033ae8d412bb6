"""Ignore rules for reconciliation.

Paths matching an ignore glob are excluded from every comparison. Globs
are absolute shell-style patterns matched segment by segment, so ``*``
never crosses a ``/``: "/etc/ssl/certs/*" matches "/etc/ssl/certs/ca.pem"
but not "/etc/ssl/certs/java/cacerts".

Two built-in profiles cover the usual scopes: ``system`` for a whole
filesystem and ``etc`` for reconciling /etc alone.
"""

import fnmatch
import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

from sysdiff.errors import SysdiffError

logger = logging.getLogger(__name__)


class IgnorePatternError(SysdiffError):
    """Raised when an ignore pattern is malformed."""


class IgnoreProfile(str, Enum):
    """Built-in ignore pattern lists."""

    SYSTEM = "system"
    ETC = "etc"
    NONE = "none"


# Volatile or machine-specific files under /etc.
ETC_IGNORE_PATTERNS: tuple[str, ...] = (
    "/etc/group",
    "/etc/gshadow",
    "/etc/passwd",
    "/etc/shadow",
    "/etc/shells",
    "/etc/.pwd.lock",
    "/etc/group-",
    "/etc/gshadow-",
    "/etc/ld.so.cache",
    "/etc/pacman.d/gnupg/*",
    "/etc/passwd-",
    "/etc/profile.d/locale.sh",
    "/etc/rndc.key",
    "/etc/shadow-",
    "/etc/ssh/ssh_host_*key*",
    "/etc/ssl/certs/*",
)

# Whole-filesystem scope: the /etc list plus runtime, cache and state paths.
SYSTEM_IGNORE_PATTERNS: tuple[str, ...] = (
    "/boot/grub/*stage*",
    "/boot/initramfs-linux-fallback.img",
    "/boot/initramfs-linux.img",
    "/dev/*",
    "/etc/mtab",
    *ETC_IGNORE_PATTERNS,
    "/home/*",
    "/lib/modules/*/modules*",
    "/proc/*",
    "/root/.bash_history",
    "/root/.ssh/authorized_keys2",
    "/root/.ssh/known_hosts",
    "/run/*",
    "/sys/*",
    "/tmp/*",
    "/usr/lib/gdk-pixbuf-2.0/2.10.0/loaders.cache",
    "/usr/lib/locale/locale-archive",
    "/usr/share/applications/mimeinfo.cache",
    "/usr/share/fonts/*/fonts.dir",
    "/usr/share/fonts/*/fonts.scale",
    "/usr/share/glib-2.0/schemas/gschemas.compiled",
    "/usr/share/info/dir",
    "/usr/share/mime/version",
    "/var/cache/fontconfig/*",
    "/var/cache/ldconfig/*",
    "/var/cache/man/*",
    "/var/cache/pacman/*",
    "/var/cache/apt/*",
    "/var/db/sudo/*",
    "/var/lib/apt/lists/*",
    "/var/lib/dbus/machine-id",
    "/var/lib/dhcpcd/dhcpcd-eth0.lease",
    "/var/lib/dpkg/*",
    "/var/lib/hwclock/adjtime",
    "/var/lib/logrotate.status",
    "/var/lib/misc/random-seed",
    "/var/lib/mlocate/mlocate.db",
    "/var/lib/pacman/*",
    "/var/lib/postgres/data/*",
    "/var/lib/random-seed",
    "/var/lib/redis/dump.rdb",
    "/var/lib/sudo/*",
    "/var/lib/syslog-ng/syslog-ng.persist",
    "/var/lock",
    "/var/log/*",
    "/var/run",
    "/var/spool/*",
)

_PROFILE_PATTERNS: dict[IgnoreProfile, tuple[str, ...]] = {
    IgnoreProfile.SYSTEM: SYSTEM_IGNORE_PATTERNS,
    IgnoreProfile.ETC: ETC_IGNORE_PATTERNS,
    IgnoreProfile.NONE: (),
}


def profile_patterns(profile: IgnoreProfile) -> tuple[str, ...]:
    """Return the pattern list of a built-in profile."""
    return _PROFILE_PATTERNS[profile]


def validate_pattern(pattern: str) -> str:
    """Check that an ignore glob is well formed.

    A pattern must be absolute, must not end in a lone escape character
    and must close every ``[`` character class it opens.

    Args:
        pattern: Glob to check.

    Returns:
        The pattern, unchanged.

    Raises:
        IgnorePatternError: If the pattern is malformed.
    """
    if not pattern:
        msg = "Ignore pattern cannot be empty"
        raise IgnorePatternError(msg)
    if not pattern.startswith("/"):
        msg = f"Ignore pattern must be absolute: {pattern!r}"
        raise IgnorePatternError(msg)

    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            if i + 1 >= len(pattern):
                msg = f"Ignore pattern ends with an escape character: {pattern!r}"
                raise IgnorePatternError(msg)
            i += 2
            continue
        if char == "[":
            j = i + 1
            if j < len(pattern) and pattern[j] in "!^":
                j += 1
            # A leading ']' is a literal member of the class
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            while j < len(pattern) and pattern[j] != "]":
                if pattern[j] == "/":
                    break
                j += 1
            if j >= len(pattern) or pattern[j] != "]":
                msg = f"Unterminated character class in ignore pattern: {pattern!r}"
                raise IgnorePatternError(msg)
            i = j + 1
            continue
        i += 1
    return pattern


def _segment_match(path_parts: Sequence[str], pattern_parts: Sequence[str]) -> bool:
    if len(path_parts) != len(pattern_parts):
        return False
    return all(
        fnmatch.fnmatchcase(part, glob)
        for part, glob in zip(path_parts, pattern_parts, strict=True)
    )


class IgnoreFilter:
    """Ordered list of ignore globs.

    Patterns are validated on construction; a malformed pattern is a
    configuration mistake and fails immediately rather than per file.

    Example:
        >>> ignore = IgnoreFilter(["/etc/ssl/certs/*"])
        >>> ignore.is_ignored("/etc/ssl/certs/ca.pem")
        True
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self._patterns: tuple[str, ...] = tuple(validate_pattern(p) for p in patterns)
        self._split: tuple[tuple[str, ...], ...] = tuple(
            tuple(p.split("/")) for p in self._patterns
        )

    @property
    def patterns(self) -> tuple[str, ...]:
        """Patterns in match order."""
        return self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def is_ignored(self, path: str, *, include_parents: bool = False) -> bool:
        """Check whether an absolute path matches any ignore glob.

        Patterns are tried in order and the first match wins.

        Args:
            path: Absolute logical path (e.g. "/etc/foo.conf").
            include_parents: Also report a match when any ancestor
                directory of the path matches. Used for files that are not
                reached by walking, where directory pruning never happened.

        Returns:
            True if the path (or, optionally, one of its parents) is ignored.
        """
        parts = path.rstrip("/").split("/") if path != "/" else [""]
        candidates = [parts]
        if include_parents:
            candidates.extend(parts[:n] for n in range(len(parts) - 1, 1, -1))

        for candidate in candidates:
            for split in self._split:
                if _segment_match(candidate, split):
                    return True
        return False


def load_ignore_dir(directory: Path) -> list[str]:
    """Read ignore patterns from every file in a directory.

    Files are read in name order, one glob per line. Blank lines and lines
    starting with ``#`` are skipped.

    Args:
        directory: Directory holding pattern files.

    Returns:
        Patterns in file then line order (not yet validated).

    Raises:
        IgnorePatternError: If the directory or one of its files cannot be read.
    """
    try:
        files = sorted(p for p in directory.iterdir() if p.is_file())
    except OSError as e:
        msg = f"Cannot read ignore directory {directory}: {e}"
        raise IgnorePatternError(msg) from e

    patterns: list[str] = []
    for pattern_file in files:
        try:
            content = pattern_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read ignore file {pattern_file}: {e}"
            raise IgnorePatternError(msg) from e
        for line in content.splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.append(line)
        logger.debug("Loaded ignore patterns from %s", pattern_file)
    return patterns

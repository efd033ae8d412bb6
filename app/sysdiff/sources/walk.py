"""Recursive directory walk with visitor-controlled pruning.

Entries are visited depth-first in lexical order, the directory before
its children. The visitor decides per entry whether to keep it, drop it,
or drop its whole subtree, so ignored directories are never read.
Symbolic links are reported as entries and never followed.
"""

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sysdiff.errors import SysdiffError

logger = logging.getLogger(__name__)


class WalkError(SysdiffError):
    """Raised when the walk hits an unexpected I/O error."""


class WalkAction(Enum):
    """Visitor decision for one entry.

    Attributes:
        DESCEND: Yield the entry and, for a directory, walk its children.
        SKIP_ENTRY: Do not yield the entry; still walk a directory's children.
        SKIP_SUBTREE: Yield neither the entry nor anything below it.
    """

    DESCEND = "descend"
    SKIP_ENTRY = "skip_entry"
    SKIP_SUBTREE = "skip_subtree"


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """An entry found while walking.

    Attributes:
        path: Full path of the entry.
        is_dir: True for real directories (not symlinks to directories).
    """

    path: Path
    is_dir: bool


Visitor = Callable[[WalkEntry], WalkAction]


def walk(top: Path, visit: Visitor) -> Iterator[WalkEntry]:
    """Walk a tree, yielding the entries the visitor keeps.

    Unreadable directories are skipped with a warning and entries that
    vanish mid-walk are skipped silently; the walk continues either way.
    Pending entries are kept on an explicit stack, so depth is not limited
    by the interpreter's recursion limit.

    Args:
        top: Directory to start from. It is passed to the visitor too.
        visit: Called once per entry, returns a WalkAction.

    Yields:
        WalkEntry for each entry the visitor answered DESCEND.

    Raises:
        WalkError: If top does not exist, or on any I/O error other than
            a permission error or a vanished entry.
    """
    try:
        mode = os.lstat(top).st_mode
    except OSError as e:
        msg = f"Cannot walk {top}: {e}"
        raise WalkError(msg) from e

    stack = [WalkEntry(path=top, is_dir=stat.S_ISDIR(mode))]
    while stack:
        entry = stack.pop()
        action = visit(entry)
        if action is WalkAction.SKIP_SUBTREE:
            continue
        if action is WalkAction.DESCEND:
            yield entry
        if entry.is_dir:
            # Reversed so the lexically first child is popped first
            stack.extend(reversed(_list_dir(entry.path)))


def _list_dir(directory: Path) -> list[WalkEntry]:
    """List the children of a directory in name order."""
    try:
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda e: e.name)
    except PermissionError as e:
        logger.warning("Skipping directory: %s", e)
        return []
    except (FileNotFoundError, NotADirectoryError) as e:
        logger.debug("Directory vanished during walk: %s", e)
        return []
    except OSError as e:
        msg = f"Error reading directory {directory}: {e}"
        raise WalkError(msg) from e

    entries: list[WalkEntry] = []
    for child in children:
        try:
            is_dir = child.is_dir(follow_symlinks=False)
        except PermissionError as e:
            logger.warning("Skipping file: %s", e)
            continue
        except FileNotFoundError as e:
            logger.debug("Entry vanished during walk: %s", e)
            continue
        except OSError as e:
            msg = f"Error reading {child.path}: {e}"
            raise WalkError(msg) from e
        entries.append(WalkEntry(path=Path(child.path), is_dir=is_dir))
    return entries

"""Reconciliation engine.

The Reconciler compares three views of one file hierarchy: the package
database, the files on disk under the scope root, and the files tracked
in a git mirror. Each comparison is a named collection derived from the
sources or from other collections:

    package-backups   backup files with their recorded hash
    package           every file owned by a package
    all               every file on disk under the scope root
    unpackaged        all - package
    modified-backups  package-backups whose disk hash differs
    repo              files tracked by the mirror
    different-in-repo repo files whose disk and mirror content differ
    missing-in-repo   (modified-backups + unpackaged) - repo
    deleted           package files no longer on disk

Collections are computed on first access and cached for the lifetime of
the Reconciler; nothing is computed that the caller does not ask for.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from sysdiff.core.hasher import HashResult, hash_file
from sysdiff.errors import SysdiffError
from sysdiff.models.file import FileRecord, FileSet, normalize_name
from sysdiff.sources import GitRepoSource, RepoListingError, get_package_source
from sysdiff.sources.walk import WalkAction, WalkEntry, WalkError, walk

if TYPE_CHECKING:
    from sysdiff.core.config import Settings
    from sysdiff.core.ignore import IgnoreFilter
    from sysdiff.sources.base import PackageSource

logger = logging.getLogger(__name__)


class UnknownCollectionError(SysdiffError):
    """Raised when a collection name is not recognized."""


class Collection(str, Enum):
    """Named collections the Reconciler can compute."""

    MISSING_IN_REPO = "missing-in-repo"
    DIFFERENT_IN_REPO = "different-in-repo"
    PACKAGE_BACKUPS = "package-backups"
    ALL = "all"
    PACKAGE = "package"
    MODIFIED_BACKUPS = "modified-backups"
    UNPACKAGED = "unpackaged"
    REPO = "repo"
    DELETED = "deleted"

    @classmethod
    def parse(cls, name: str | Collection) -> Collection:
        """Look up a collection by its list name.

        Raises:
            UnknownCollectionError: If the name is not a collection.
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownCollectionError(f"unknown list name: {name}") from None


class Reconciler:
    """Lazily computed, cached file collections for one run.

    Sources are created on first use from the settings unless given
    explicitly. A Reconciler is meant to live for one invocation: its
    cache is never invalidated.

    Args:
        settings: Run configuration.
        package_source: Package database source (default: from settings).
        repo_source: Mirror source (default: from settings.repo).
        ignore: Ignore filter (default: built from settings).

    Example:
        >>> reconciler = Reconciler(load_config())
        >>> for record in reconciler.missing_in_repo():
        ...     print(record.path)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        package_source: PackageSource | None = None,
        repo_source: GitRepoSource | None = None,
        ignore: IgnoreFilter | None = None,
    ) -> None:
        self.settings = settings
        self._package_source = package_source
        self._repo_source = repo_source
        self._ignore = ignore
        self._cache: dict[Collection, FileSet] = {}

    # -------------------------------------------------------------------------
    # Collaborators
    # -------------------------------------------------------------------------

    @property
    def ignore(self) -> IgnoreFilter:
        """Ignore filter, built from the settings on first use."""
        if self._ignore is None:
            self._ignore = self.settings.build_ignore_filter()
        return self._ignore

    @property
    def package_source(self) -> PackageSource:
        """Package database source, created on first use."""
        if self._package_source is None:
            self._package_source = get_package_source(
                self.settings.backend, self.settings.effective_dbpath
            )
        return self._package_source

    @property
    def repo_source(self) -> GitRepoSource:
        """Mirror source, created on first use.

        Raises:
            RepoListingError: If no mirror is configured.
        """
        if self._repo_source is None:
            if self.settings.repo is None:
                msg = "No mirror repository configured (use --repo)"
                raise RepoListingError(msg)
            self._repo_source = GitRepoSource(self.settings.repo)
        return self._repo_source

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def collection(self, name: str | Collection) -> FileSet:
        """Return a collection by name.

        Raises:
            UnknownCollectionError: If the name is not a collection.
        """
        accessors: dict[Collection, Callable[[], FileSet]] = {
            Collection.MISSING_IN_REPO: self.missing_in_repo,
            Collection.DIFFERENT_IN_REPO: self.modified_repo_files,
            Collection.PACKAGE_BACKUPS: self.package_backup_files,
            Collection.ALL: self.all_files_on_disk,
            Collection.PACKAGE: self.all_package_files,
            Collection.MODIFIED_BACKUPS: self.modified_backup_files,
            Collection.UNPACKAGED: self.unpackaged_files,
            Collection.REPO: self.repo_files,
            Collection.DELETED: self.deleted_package_files,
        }
        return accessors[Collection.parse(name)]()

    def package_backup_files(self) -> FileSet:
        """Backup files with the hash the package manager recorded."""
        return self._cached(Collection.PACKAGE_BACKUPS, self.package_source.iter_backup_files)

    def all_package_files(self) -> FileSet:
        """Every file owned by an installed package."""
        return self._cached(Collection.PACKAGE, self.package_source.iter_package_files)

    def all_files_on_disk(self) -> FileSet:
        """Every non-ignored file under the scope root."""
        return self._cached(Collection.ALL, self._walk_scope)

    def unpackaged_files(self) -> FileSet:
        """Files on disk that no package owns."""
        return self._cached(Collection.UNPACKAGED, self._compute_unpackaged)

    def modified_backup_files(self) -> FileSet:
        """Backup files whose content on disk differs from the recorded hash."""
        return self._cached(Collection.MODIFIED_BACKUPS, self._compute_modified_backups)

    def repo_files(self) -> FileSet:
        """Files tracked by the mirror, in git's order."""
        return self._cached(Collection.REPO, self.repo_source.iter_files)

    def modified_repo_files(self) -> FileSet:
        """Mirror files whose content differs between disk and mirror."""
        return self._cached(Collection.DIFFERENT_IN_REPO, self._compute_modified_repo)

    # Listed as "different-in-repo"
    diff_repo_files = modified_repo_files

    def missing_in_repo(self) -> FileSet:
        """Modified backup files and unpackaged files the mirror does not track."""
        return self._cached(Collection.MISSING_IN_REPO, self._compute_missing_in_repo)

    def deleted_package_files(self) -> FileSet:
        """Package files under the scope root that are gone from disk."""
        return self._cached(Collection.DELETED, self._compute_deleted)

    # -------------------------------------------------------------------------
    # Computation
    # -------------------------------------------------------------------------

    def _cached(self, key: Collection, compute: Callable[[], Iterable[FileRecord]]) -> FileSet:
        if key not in self._cache:
            logger.debug("Computing %s", key.value)
            self._cache[key] = tuple(compute())
            logger.debug("Computed %s: %d file(s)", key.value, len(self._cache[key]))
        return self._cache[key]

    def _name_for(self, path: Path) -> str:
        """Root-relative name of a path found under the root."""
        return normalize_name(path.relative_to(self.settings.root).as_posix())

    def _visit(self, entry: WalkEntry) -> WalkAction:
        if self.ignore.is_ignored("/" + self._name_for(entry.path)):
            return WalkAction.SKIP_SUBTREE if entry.is_dir else WalkAction.SKIP_ENTRY
        if entry.is_dir:
            return WalkAction.SKIP_ENTRY
        return WalkAction.DESCEND

    def _walk_scope(self) -> Iterator[FileRecord]:
        for entry in walk(self.settings.scope_dir, self._visit):
            yield FileRecord(name=self._name_for(entry.path))

    def _hash_all(self, paths: Sequence[Path]) -> list[HashResult]:
        """Hash paths, in parallel when jobs > 1, keeping input order."""
        jobs = self.settings.jobs
        if jobs <= 1 or len(paths) <= 1:
            return [hash_file(path) for path in paths]
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            return list(executor.map(hash_file, paths))

    def _compute_unpackaged(self) -> list[FileRecord]:
        owned = frozenset(record.name for record in self.all_package_files())
        return [record for record in self.all_files_on_disk() if record.name not in owned]

    def _compute_modified_backups(self) -> list[FileRecord]:
        candidates = [
            record
            for record in self.package_backup_files()
            if not self.ignore.is_ignored(record.path, include_parents=True)
        ]
        results = self._hash_all([self.settings.root / record.name for record in candidates])

        modified: list[FileRecord] = []
        for record, result in zip(candidates, results, strict=True):
            if result.denied:
                logger.warning("Skipping file: %s", result.error)
                continue
            if result.missing:
                # Reported by the deleted collection instead
                logger.debug("Backup file missing from disk: %s", record.path)
                continue
            if result.digest != record.hash:
                modified.append(record)
        return modified

    def _compute_modified_repo(self) -> list[FileRecord]:
        records = self.repo_files()
        repo = self.repo_source.repo

        on_disk = self._hash_all([self.settings.root / record.name for record in records])
        in_repo = self._hash_all([repo / record.name for record in records])

        different: list[FileRecord] = []
        for record, disk_result, repo_result in zip(records, on_disk, in_repo, strict=True):
            denied = next((r for r in (disk_result, repo_result) if r.denied), None)
            if denied is not None:
                logger.warning("Skipping file: %s", denied.error)
                continue
            if disk_result.missing and repo_result.missing:
                logger.debug("Tracked file absent on disk and in mirror: %s", record.path)
                continue
            if disk_result.digest != repo_result.digest:
                different.append(record)
        return different

    def _compute_missing_in_repo(self) -> list[FileRecord]:
        modified = self.modified_backup_files()
        unpackaged = self.unpackaged_files()
        tracked = frozenset(record.name for record in self.repo_files())
        return [record for record in (*modified, *unpackaged) if record.name not in tracked]

    def _compute_deleted(self) -> Iterator[FileRecord]:
        scope = self.settings.scope
        for record in self.all_package_files():
            if scope and record.name != scope and not record.name.startswith(scope + "/"):
                continue
            if self.ignore.is_ignored(record.path, include_parents=True):
                continue
            if not self._exists(self.settings.root / record.name):
                yield record

    @staticmethod
    def _exists(path: Path) -> bool:
        """Check presence without following symlinks.

        Unreadable parents count as present (with a warning) so that a
        permission problem is never reported as a deletion.

        Raises:
            WalkError: On any other I/O error.
        """
        try:
            os.lstat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except PermissionError as e:
            logger.warning("Skipping file: %s", e)
            return True
        except OSError as e:
            msg = f"Cannot check {path}: {e}"
            raise WalkError(msg) from e
        return True

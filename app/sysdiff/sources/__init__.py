"""Data sources for reconciliation.

This module exports the package database sources, the directory walk and
the mirror repository source.
"""

from pathlib import Path

from sysdiff.sources.base import PackageBackend, PackageDatabaseError, PackageSource
from sysdiff.sources.dpkg import DpkgSource
from sysdiff.sources.pacman import PacmanSource
from sysdiff.sources.repo import GitRepoSource, RepoListingError
from sysdiff.sources.walk import WalkAction, WalkEntry, WalkError, walk


def get_package_source(backend: PackageBackend, dbpath: Path | None = None) -> PackageSource:
    """Create the package source for a backend.

    Args:
        backend: Package manager to read.
        dbpath: Database location. If None, uses the backend's default.

    Returns:
        PackageSource instance for the backend.
    """
    path = dbpath or backend.default_dbpath
    if backend is PackageBackend.DPKG:
        return DpkgSource(path)
    return PacmanSource(path)


__all__ = [
    "DpkgSource",
    "GitRepoSource",
    "PackageBackend",
    "PackageDatabaseError",
    "PackageSource",
    "PacmanSource",
    "RepoListingError",
    "WalkAction",
    "WalkEntry",
    "WalkError",
    "get_package_source",
    "walk",
]

"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: a fake
installation root, a fake pacman local database, and a mirror directory.
"""

import hashlib
from collections.abc import Callable
from pathlib import Path

import pytest


def md5_of(content: str) -> str:
    """MD5 hex digest of a text file's content."""
    return hashlib.md5(content.encode()).hexdigest()


class FakePacmanDb:
    """Builds a pacman local database under a temporary directory."""

    def __init__(self, dbpath: Path) -> None:
        self.dbpath = dbpath
        (dbpath / "local").mkdir(parents=True)
        (dbpath / "local" / "ALPM_DB_VERSION").write_text("9\n")

    def add_package(
        self,
        name: str,
        files: list[str],
        backup: dict[str, str] | None = None,
        version: str = "1.0-1",
    ) -> Path:
        """Write a package entry with %FILES% and optional %BACKUP% sections."""
        entry = self.dbpath / "local" / f"{name}-{version}"
        entry.mkdir()
        lines = ["%FILES%", *files, ""]
        if backup:
            lines.extend(["%BACKUP%", *(f"{path}\t{md5}" for path, md5 in backup.items()), ""])
        (entry / "files").write_text("\n".join(lines) + "\n")
        (entry / "desc").write_text(f"%NAME%\n{name}\n\n%VERSION%\n{version}\n")
        return entry


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory so no user config is read."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def md5() -> Callable[[str], str]:
    """Expose md5_of to tests."""
    return md5_of


@pytest.fixture
def fs_root(tmp_path: Path) -> Path:
    """Empty installation root."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def mirror(tmp_path: Path) -> Path:
    """Empty mirror working tree."""
    repo = tmp_path / "mirror"
    repo.mkdir()
    return repo


@pytest.fixture
def pacman_db(tmp_path: Path) -> FakePacmanDb:
    """Empty pacman local database."""
    return FakePacmanDb(tmp_path / "pacman")


@pytest.fixture
def write_file() -> Callable[[Path, str, str], Path]:
    """Return a helper writing `content` to `base/name`, creating parents."""

    def _write(base: Path, name: str, content: str = "") -> Path:
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def sample_dpkg_status() -> str:
    """Sample dpkg status file with one installed and one removed package."""
    return """Package: openssh-server
Status: install ok installed
Priority: optional
Architecture: amd64
Version: 1:9.6p1-3
Conffiles:
 /etc/ssh/moduli 5f5a0f36b7d3bd1bcc5b1d3e1d1e7f3b
 /etc/ssh/sshd_config d41d8cd98f00b204e9800998ecf8427e
 /etc/pam.d/sshd 0123456789abcdef0123456789abcdef obsolete
Description: secure shell (SSH) server
 This is the portable version of OpenSSH.

Package: old-tool
Status: deinstall ok config-files
Architecture: all
Version: 0.1
Conffiles:
 /etc/old-tool.conf aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa

Package: libc6
Status: install ok installed
Architecture: amd64
Multi-Arch: same
Version: 2.39-0ubuntu8
Conffiles:
 /etc/ld.so.conf.d/x86_64-linux-gnu.conf newconffile
"""

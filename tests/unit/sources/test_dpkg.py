"""Unit tests for DpkgSource."""

from pathlib import Path

import pytest
from sysdiff.models.file import FileRecord
from sysdiff.sources import PackageBackend, get_package_source
from sysdiff.sources.base import PackageDatabaseError
from sysdiff.sources.dpkg import DpkgSource


@pytest.fixture
def dpkg_db(tmp_path: Path, sample_dpkg_status: str) -> Path:
    """dpkg admin directory with status file and .list files."""
    db = tmp_path / "dpkg"
    info = db / "info"
    info.mkdir(parents=True)
    (db / "status").write_text(sample_dpkg_status)
    (info / "openssh-server.list").write_text(
        "/.\n/etc\n/etc/ssh\n/etc/ssh/moduli\n/etc/ssh/sshd_config\n/usr/sbin/sshd\n"
    )
    (info / "libc6:amd64.list").write_text("/.\n/usr/lib/x86_64-linux-gnu/libc.so.6\n")
    (info / "old-tool.list").write_text("/usr/bin/old-tool\n")
    return db


class TestDpkgSource:
    """Tests for DpkgSource class."""

    def test_backend_is_dpkg(self, tmp_path: Path) -> None:
        """Source reports dpkg as backend."""
        assert DpkgSource(tmp_path).backend == PackageBackend.DPKG

    def test_is_available(self, dpkg_db: Path) -> None:
        """A directory with a status file is available."""
        assert DpkgSource(dpkg_db).is_available() is True

    def test_is_unavailable_without_status(self, tmp_path: Path) -> None:
        """A directory without status is not a dpkg database."""
        assert DpkgSource(tmp_path).is_available() is False

    def test_backup_files_from_conffiles(self, dpkg_db: Path) -> None:
        """Conffiles of installed packages are yielded with their hash."""
        records = list(DpkgSource(dpkg_db).iter_backup_files())

        assert records == [
            FileRecord(name="etc/ssh/moduli", hash="5f5a0f36b7d3bd1bcc5b1d3e1d1e7f3b"),
            FileRecord(name="etc/ssh/sshd_config", hash="d41d8cd98f00b204e9800998ecf8427e"),
            FileRecord(name="etc/pam.d/sshd", hash="0123456789abcdef0123456789abcdef"),
        ]

    def test_removed_packages_ignored(self, dpkg_db: Path) -> None:
        """Packages in config-files state are not installed."""
        names = [r.name for r in DpkgSource(dpkg_db).iter_backup_files()]
        assert "etc/old-tool.conf" not in names

        owned = [r.name for r in DpkgSource(dpkg_db).iter_package_files()]
        assert "usr/bin/old-tool" not in owned

    def test_newconffile_placeholder_skipped(self, dpkg_db: Path) -> None:
        """Conffiles recorded as newconffile have no usable hash."""
        names = [r.name for r in DpkgSource(dpkg_db).iter_backup_files()]
        assert "etc/ld.so.conf.d/x86_64-linux-gnu.conf" not in names

    def test_package_files_from_lists(self, dpkg_db: Path) -> None:
        """Owned paths come from .list files, normalized, root entry dropped."""
        names = [r.name for r in DpkgSource(dpkg_db).iter_package_files()]

        assert names == [
            "etc",
            "etc/ssh",
            "etc/ssh/moduli",
            "etc/ssh/sshd_config",
            "usr/sbin/sshd",
            "usr/lib/x86_64-linux-gnu/libc.so.6",
        ]

    def test_conffile_path_with_space(self, tmp_path: Path) -> None:
        """Paths containing spaces keep everything before the hash."""
        db = tmp_path / "dpkg"
        db.mkdir()
        (db / "status").write_text(
            "Package: odd\nStatus: install ok installed\nConffiles:\n /etc/odd dir/a.conf abc\n"
        )

        records = list(DpkgSource(db).iter_backup_files())

        assert records == [FileRecord(name="etc/odd dir/a.conf", hash="abc")]

    def test_missing_database_is_fatal(self, tmp_path: Path) -> None:
        """Reading a missing database raises PackageDatabaseError."""
        with pytest.raises(PackageDatabaseError, match="dpkg database not found"):
            list(DpkgSource(tmp_path).iter_backup_files())


class TestGetPackageSource:
    """Tests for get_package_source factory."""

    def test_dpkg_default_dbpath(self) -> None:
        """dpkg defaults to /var/lib/dpkg."""
        source = get_package_source(PackageBackend.DPKG)
        assert isinstance(source, DpkgSource)
        assert source.dbpath == Path("/var/lib/dpkg")

    def test_pacman_custom_dbpath(self, tmp_path: Path) -> None:
        """An explicit dbpath is used as given."""
        source = get_package_source(PackageBackend.PACMAN, tmp_path)
        assert source.backend == PackageBackend.PACMAN
        assert source.dbpath == tmp_path

"""Unit tests for the directory walk."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from sysdiff.sources.walk import WalkAction, WalkEntry, WalkError, walk


def keep_all(entry: WalkEntry) -> WalkAction:
    return WalkAction.DESCEND


def relative(entries, top: Path) -> list[str]:
    return [entry.path.relative_to(top).as_posix() for entry in entries]


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """Small tree: a/x, a/y/z, b, c/ (empty)."""
    (tmp_path / "a" / "y").mkdir(parents=True)
    (tmp_path / "a" / "x").write_text("x")
    (tmp_path / "a" / "y" / "z").write_text("z")
    (tmp_path / "b").write_text("b")
    (tmp_path / "c").mkdir()
    return tmp_path


class TestWalk:
    """Tests for walk function."""

    def test_lexical_depth_first_order(self, tree: Path) -> None:
        """Directories come before their children, siblings in name order."""
        entries = list(walk(tree, keep_all))

        assert relative(entries, tree) == [".", "a", "a/x", "a/y", "a/y/z", "b", "c"]
        assert [e.is_dir for e in entries] == [True, True, False, True, False, False, True]

    def test_skip_entry_still_descends(self, tree: Path) -> None:
        """SKIP_ENTRY drops the entry but walks its children."""

        def files_only(entry: WalkEntry) -> WalkAction:
            return WalkAction.SKIP_ENTRY if entry.is_dir else WalkAction.DESCEND

        assert relative(walk(tree, files_only), tree) == ["a/x", "a/y/z", "b"]

    def test_skip_subtree_prunes(self, tree: Path) -> None:
        """SKIP_SUBTREE drops the directory and never reads below it."""
        visited: list[str] = []

        def prune_a(entry: WalkEntry) -> WalkAction:
            visited.append(entry.path.name)
            return WalkAction.SKIP_SUBTREE if entry.path.name == "a" else WalkAction.DESCEND

        result = relative(walk(tree, prune_a), tree)

        assert result == [".", "b", "c"]
        assert "x" not in visited
        assert "z" not in visited

    def test_symlink_not_followed(self, tree: Path) -> None:
        """A symlink to a directory is an entry, not a directory."""
        (tree / "link").symlink_to(tree / "a")

        entries = {relative([e], tree)[0]: e for e in walk(tree, keep_all)}

        assert entries["link"].is_dir is False
        assert "link/x" not in entries

    def test_missing_top_is_fatal(self, tmp_path: Path) -> None:
        """Walking a path that does not exist raises WalkError."""
        with pytest.raises(WalkError, match="Cannot walk"):
            list(walk(tmp_path / "missing", keep_all))

    def test_top_file_yields_itself(self, tmp_path: Path) -> None:
        """Walking a regular file yields only that file."""
        path = tmp_path / "file"
        path.write_text("x")

        entries = list(walk(path, keep_all))

        assert entries == [WalkEntry(path=path, is_dir=False)]

    def test_unreadable_directory_skipped(self, tree: Path) -> None:
        """A directory that cannot be listed is skipped; the walk continues."""
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path).name == "a":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with patch("sysdiff.sources.walk.os.scandir", side_effect=fake_scandir):
            result = relative(walk(tree, keep_all), tree)

        assert result == [".", "a", "b", "c"]

    def test_vanished_directory_skipped(self, tree: Path) -> None:
        """A directory removed mid-walk is skipped silently."""
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path).name == "c":
                raise FileNotFoundError(2, "No such file or directory", str(path))
            return real_scandir(path)

        with patch("sysdiff.sources.walk.os.scandir", side_effect=fake_scandir):
            result = relative(walk(tree, keep_all), tree)

        assert result[-1] == "c"

    def test_other_error_is_fatal(self, tree: Path) -> None:
        """Unexpected errors while listing abort the walk."""
        with (
            patch("sysdiff.sources.walk.os.scandir", side_effect=OSError(5, "I/O error")),
            pytest.raises(WalkError, match="Error reading directory"),
        ):
            list(walk(tree, keep_all))

    def test_deep_tree(self, tmp_path: Path) -> None:
        """Nesting deeper than the interpreter's recursion limit is walked."""
        depth = 1200
        path = tmp_path
        for _ in range(depth):
            path = path / "d"
            path.mkdir()
        (path / "leaf").write_text("x")

        entries = list(walk(tmp_path, keep_all))

        assert len(entries) == depth + 2
        assert entries[-1].path == path / "leaf"

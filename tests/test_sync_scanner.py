"""Tests for the directory tree walker."""

import os
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from pymirror.exceptions import MirrorConfigError
from pymirror.log import SyncLog
from pymirror.sync.scanner import DirectoryScanner


def relative(paths, root):
    return {p.relative_to(root).as_posix() for p in paths}


class TestDirectoryScanner:
    """Tests for DirectoryScanner.walk."""

    def test_walk_empty_directory(self, source_dir):
        """Test walking an empty directory."""
        files, dirs = DirectoryScanner().walk(source_dir)

        assert files == []
        assert dirs == []

    def test_walk_nested_tree(self, source_dir, tree):
        """Test that files and directories at every depth are found."""
        tree.make(
            source_dir,
            {
                "top.txt": "top",
                "a/b.txt": "b",
                "a/deep/er/file.bin": "data",
                "empty": None,
            },
        )

        files, dirs = DirectoryScanner().walk(source_dir)

        assert relative(files, source_dir) == {
            "top.txt",
            "a/b.txt",
            "a/deep/er/file.bin",
        }
        assert relative(dirs, source_dir) == {"a", "a/deep", "a/deep/er", "empty"}
        assert all(p.is_absolute() for p in files + dirs)

    def test_walk_pattern_filters_files_only(self, source_dir, tree):
        """Test that the pattern applies to file names, not directories."""
        tree.make(
            source_dir,
            {"keep.txt": "1", "skip.log": "2", "sub/keep2.txt": "3", "logs": None},
        )

        files, dirs = DirectoryScanner().walk(source_dir, pattern="*.txt")

        assert relative(files, source_dir) == {"keep.txt", "sub/keep2.txt"}
        assert relative(dirs, source_dir) == {"sub", "logs"}

    def test_walk_non_recursive(self, source_dir, tree):
        """Test that recursive=False lists the top level only."""
        tree.make(source_dir, {"top.txt": "1", "sub/inner.txt": "2"})

        files, dirs = DirectoryScanner().walk(source_dir, recursive=False)

        assert relative(files, source_dir) == {"top.txt"}
        assert relative(dirs, source_dir) == {"sub"}

    def test_walk_missing_root_raises(self, temp_dir):
        """Test that a non-existent root is a configuration error."""
        with pytest.raises(MirrorConfigError, match="not found"):
            DirectoryScanner().walk(temp_dir / "missing")

    def test_walk_empty_root_raises(self):
        """Test that an empty root path is a configuration error."""
        with pytest.raises(MirrorConfigError, match="empty"):
            DirectoryScanner().walk("")

    def test_walk_file_root_raises(self, temp_dir):
        """Test that a file is not accepted as root."""
        path = temp_dir / "file.txt"
        path.write_text("x")

        with pytest.raises(MirrorConfigError):
            DirectoryScanner().walk(path)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_walk_does_not_follow_directory_symlinks(self, source_dir, temp_dir, tree):
        """Test that symlinked directories are neither reported nor descended."""
        outside = temp_dir / "outside"
        tree.make(outside, {"secret.txt": "s"})
        tree.make(source_dir, {"real.txt": "r"})
        try:
            os.symlink(outside, source_dir / "link", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        files, dirs = DirectoryScanner().walk(source_dir)

        assert relative(files, source_dir) == {"real.txt"}
        assert dirs == []

    def test_unreadable_directory_is_logged_and_skipped(self, source_dir, tree):
        """Test that a directory that cannot be listed does not abort the walk."""
        tree.make(
            source_dir,
            {"ok/file.txt": "1", "locked/hidden.txt": "2", "other.txt": "3"},
        )
        locked = source_dir / "locked"
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path) == locked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        log = Mock(spec=SyncLog)
        with patch("pymirror.sync.scanner.os.scandir", side_effect=fake_scandir):
            files, dirs = DirectoryScanner(log).walk(source_dir)

        assert relative(files, source_dir) == {"ok/file.txt", "other.txt"}
        # The directory itself was seen by its parent
        assert "locked" in relative(dirs, source_dir)
        log.error.assert_called_once()
        assert "locked" in log.error.call_args[0][0]

    def test_unreadable_directory_without_log_uses_logger(
        self, source_dir, tree, caplog
    ):
        """Test that errors go to the module logger when no sync log is set."""
        tree.make(source_dir, {"locked/hidden.txt": "2"})
        locked = source_dir / "locked"
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path) == locked:
                raise OSError(5, "Input/output error", str(path))
            return real_scandir(path)

        with patch("pymirror.sync.scanner.os.scandir", side_effect=fake_scandir):
            files, _ = DirectoryScanner().walk(source_dir)

        assert files == []
        assert "Cannot list directory" in caplog.text

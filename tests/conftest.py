"""Shared fixtures for pymirror tests."""

import os
import tempfile
from pathlib import Path
from typing import Optional

import pytest

from pymirror.log import SyncLog


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def source_dir(temp_dir):
    """Create an empty source root."""
    path = temp_dir / "source"
    path.mkdir()
    return path


@pytest.fixture
def replica_dir(temp_dir):
    """Create an empty replica root."""
    path = temp_dir / "replica"
    path.mkdir()
    return path


@pytest.fixture
def sync_log(temp_dir):
    """Create an opened sync log that does not echo to the console."""
    log = SyncLog(temp_dir / "logs" / "sync.log", echo=False).open()
    yield log
    log.close()


def make_tree(root: Path, entries: dict[str, Optional[str]]) -> None:
    """Create files and directories below root.

    Keys are relative POSIX paths; a value of None creates a directory,
    a string creates a file with that content.
    """
    for relative, content in entries.items():
        path = root / relative
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)


def tree_state(root: Path) -> tuple[set[str], set[str]]:
    """Return the relative (files, directories) found below root."""
    files: set[str] = set()
    dirs: set[str] = set()
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        for name in dirnames:
            dirs.add((base / name).relative_to(root).as_posix())
        for name in filenames:
            files.add((base / name).relative_to(root).as_posix())
    return files, dirs


def set_mtime(path: Path, mtime_ns: int) -> None:
    """Set both access and modification time of a path."""
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture
def tree():
    """Expose the tree helpers to tests."""

    class Helpers:
        make = staticmethod(make_tree)
        state = staticmethod(tree_state)
        set_mtime = staticmethod(set_mtime)

    return Helpers

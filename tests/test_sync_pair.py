"""Unit tests for sync pairs and the path policy."""

from pathlib import Path

import pytest

from pymirror.exceptions import MirrorConfigError
from pymirror.sync.pair import PathPolicy, SyncPair, validate_root


class TestPathPolicy:
    """Tests for PathPolicy class."""

    def test_case_sensitive_key_is_unchanged(self):
        policy = PathPolicy(case_sensitive=True)
        assert policy.key("Docs/Readme.TXT") == "Docs/Readme.TXT"

    def test_case_insensitive_key_is_folded(self):
        policy = PathPolicy(case_sensitive=False)
        assert policy.key("Docs/Readme.TXT") == "docs/readme.txt"
        assert policy.key("Docs/Readme.TXT") == policy.key("DOCS/readme.txt")

    @pytest.mark.parametrize(
        "platform,expected",
        [("linux", True), ("win32", False), ("darwin", False), ("freebsd13", True)],
    )
    def test_for_platform(self, platform, expected):
        """Test the platform default policy."""
        assert PathPolicy.for_platform(platform).case_sensitive is expected

    def test_policies_compare_by_value(self):
        assert PathPolicy(True) == PathPolicy(True)
        assert PathPolicy(True) != PathPolicy(False)


class TestValidateRoot:
    """Tests for validate_root function."""

    def test_resolves_relative_path(self, source_dir, monkeypatch):
        monkeypatch.chdir(source_dir.parent)
        assert validate_root("source", "Source") == source_dir

    def test_empty_path(self):
        with pytest.raises(MirrorConfigError, match="Source path is empty"):
            validate_root("", "Source")

    def test_missing_directory(self, temp_dir):
        with pytest.raises(MirrorConfigError, match="does not exist"):
            validate_root(temp_dir / "missing", "Replica")

    def test_file_is_rejected(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("x")
        with pytest.raises(MirrorConfigError, match="not a directory"):
            validate_root(path, "Source")


class TestSyncPair:
    """Tests for SyncPair class."""

    def test_create_sync_pair(self, source_dir, replica_dir):
        """Test creating a basic sync pair."""
        pair = SyncPair(source=source_dir, replica=replica_dir)

        assert pair.source == source_dir
        assert pair.replica == replica_dir
        assert pair.pattern == "*"
        assert pair.policy == PathPolicy.for_platform()

    def test_string_paths_are_converted(self, source_dir, replica_dir):
        """Test that string paths become resolved Paths."""
        pair = SyncPair(source=str(source_dir), replica=str(replica_dir))

        assert isinstance(pair.source, Path)
        assert pair.source.is_absolute()

    def test_case_override(self, source_dir, replica_dir):
        """Test forcing the path policy."""
        insensitive = SyncPair(source_dir, replica_dir, case_sensitive=False)
        sensitive = SyncPair(source_dir, replica_dir, case_sensitive=True)

        assert insensitive.policy.case_sensitive is False
        assert sensitive.policy.case_sensitive is True

    def test_empty_pattern_matches_all(self, source_dir, replica_dir):
        pair = SyncPair(source_dir, replica_dir, pattern="")
        assert pair.pattern == "*"

    def test_missing_source(self, temp_dir, replica_dir):
        with pytest.raises(MirrorConfigError, match="Source directory"):
            SyncPair(source=temp_dir / "nope", replica=replica_dir)

    def test_missing_replica(self, source_dir, temp_dir):
        with pytest.raises(MirrorConfigError, match="Replica directory"):
            SyncPair(source=source_dir, replica=temp_dir / "nope")

    def test_same_directory_rejected(self, source_dir):
        with pytest.raises(MirrorConfigError, match="nested"):
            SyncPair(source=source_dir, replica=source_dir)

    def test_replica_inside_source_rejected(self, source_dir):
        inner = source_dir / "replica"
        inner.mkdir()
        with pytest.raises(MirrorConfigError, match="nested"):
            SyncPair(source=source_dir, replica=inner)

    def test_source_inside_replica_rejected(self, replica_dir):
        inner = replica_dir / "source"
        inner.mkdir()
        with pytest.raises(MirrorConfigError, match="nested"):
            SyncPair(source=inner, replica=replica_dir)

"""Unit tests for utility functions."""

from pathlib import Path

from pymirror.utils import calculate_md5, format_size, is_nested, path_depth


class TestCalculateMd5:
    """Tests for calculate_md5 function."""

    def test_known_digest(self, temp_dir):
        """Test hash of a file with known content."""
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")
        assert calculate_md5(path) == "5d41402abc4b2a76b9719d911017c592"

    def test_empty_file(self, temp_dir):
        """Test hash of an empty file."""
        path = temp_dir / "empty"
        path.write_bytes(b"")
        assert calculate_md5(path) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_small_chunks_same_digest(self, temp_dir):
        """Test that the chunk size does not change the digest."""
        path = temp_dir / "data.bin"
        path.write_bytes(bytes(range(256)) * 100)
        assert calculate_md5(path, chunk_size=7) == calculate_md5(path)

    def test_accepts_string_path(self, temp_dir):
        """Test that plain string paths are accepted."""
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")
        assert calculate_md5(str(path)) == calculate_md5(path)


class TestPathDepth:
    """Tests for path_depth function."""

    def test_top_level(self):
        assert path_depth("a") == 0

    def test_nested(self):
        assert path_depth("a/b") == 1
        assert path_depth("a/b/c/d") == 3


class TestIsNested:
    """Tests for is_nested function."""

    def test_same_path(self):
        assert is_nested(Path("/data"), Path("/data")) is True

    def test_child(self):
        assert is_nested(Path("/data"), Path("/data/replica")) is True
        assert is_nested(Path("/data/replica"), Path("/data")) is True

    def test_siblings(self):
        assert is_nested(Path("/data/source"), Path("/data/replica")) is False

    def test_common_prefix_is_not_nesting(self):
        """Test that /data/src and /data/src2 are not nested."""
        assert is_nested(Path("/data/src"), Path("/data/src2")) is False


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(256) == "256 B"

    def test_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"

    def test_gigabytes(self):
        assert format_size(2 * 1024 * 1024 * 1024) == "2.0 GB"

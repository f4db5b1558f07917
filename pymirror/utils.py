"""Utility functions for pymirror."""

import hashlib
import os
from pathlib import Path
from typing import Union

# =============================================================================
# Constants
# =============================================================================

# Read size used when streaming file content through the hash (1 MB)
DEFAULT_HASH_CHUNK_SIZE: int = 1024 * 1024

# Upper bound for parallel file operations within one phase
MAX_WORKERS: int = 32

# Glob matching every file name
MATCH_ALL: str = "*"


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_md5(
    file_path: Union[str, os.PathLike], chunk_size: int = DEFAULT_HASH_CHUNK_SIZE
) -> str:
    """Calculate the MD5 hex digest of a file.

    The file is streamed in chunks so large files are never loaded into
    memory at once.

    Args:
        file_path: Path of the file to hash
        chunk_size: Number of bytes read per iteration

    Returns:
        Lowercase hexadecimal MD5 digest

    Raises:
        OSError: If the file cannot be opened or read

    Examples:
        >>> import tempfile, os
        >>> with tempfile.NamedTemporaryFile(delete=False) as f:
        ...     _ = f.write(b"hello")
        >>> calculate_md5(f.name)
        '5d41402abc4b2a76b9719d911017c592'
        >>> os.unlink(f.name)
    """
    md5 = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            md5.update(chunk)
    return md5.hexdigest()


# =============================================================================
# Path utilities
# =============================================================================


def path_depth(relative_path: str) -> int:
    """Return the number of separators in a root-relative POSIX path.

    Examples:
        >>> path_depth("a")
        0
        >>> path_depth("a/b/c")
        2
    """
    return relative_path.count("/")


def is_nested(first: Path, second: Path) -> bool:
    """Check whether one resolved path equals or lies inside the other.

    Examples:
        >>> is_nested(Path("/data/src"), Path("/data/src/replica"))
        True
        >>> is_nested(Path("/data/src"), Path("/data/replica"))
        False
    """
    return first == second or first in second.parents or second in first.parents


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"

"""Snapshot comparison and file change detection for sync operations."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..utils import calculate_md5
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiffResult:
    """Classification of every relative path of two snapshots.

    All members are sets of comparison keys. Keys of files present on both
    sides are only candidates: whether they are copied is decided by the
    ChangeDetector when the update phase runs.
    """

    dirs_to_create: frozenset[str] = field(default_factory=frozenset)
    """Directories present in the source only"""

    dirs_to_delete: frozenset[str] = field(default_factory=frozenset)
    """Directories present in the replica only"""

    files_to_copy: frozenset[str] = field(default_factory=frozenset)
    """Files present in the source only"""

    files_to_delete: frozenset[str] = field(default_factory=frozenset)
    """Files present in the replica only"""

    files_to_check: frozenset[str] = field(default_factory=frozenset)
    """Files present on both sides (update candidates)"""

    @property
    def total_actions(self) -> int:
        """Number of structural operations, excluding update candidates."""
        return (
            len(self.dirs_to_create)
            + len(self.dirs_to_delete)
            + len(self.files_to_copy)
            + len(self.files_to_delete)
        )

    @property
    def is_empty(self) -> bool:
        return self.total_actions == 0 and not self.files_to_check


def compute_diff(source: Snapshot, replica: Snapshot) -> DiffResult:
    """Compare two snapshots using set algebra over their keys.

    Args:
        source: Snapshot of the source root
        replica: Snapshot of the replica root

    Returns:
        DiffResult for converging the replica onto the source

    Raises:
        ValueError: If the snapshots were built with different path policies

    Examples:
        >>> diff = compute_diff(source_snapshot, replica_snapshot)
        >>> sorted(diff.files_to_copy)
        ['a/b.txt']
    """
    if source.policy != replica.policy:
        raise ValueError(
            "Snapshots must share one path policy "
            f"({source.policy} != {replica.policy})"
        )

    source_dirs = source.directories.keys()
    replica_dirs = replica.directories.keys()
    source_files = source.files.keys()
    replica_files = replica.files.keys()

    return DiffResult(
        dirs_to_create=frozenset(source_dirs - replica_dirs),
        dirs_to_delete=frozenset(replica_dirs - source_dirs),
        files_to_copy=frozenset(source_files - replica_files),
        files_to_delete=frozenset(replica_files - source_files),
        files_to_check=frozenset(source_files & replica_files),
    )


class FileChange(str, Enum):
    """Outcome of comparing a source file with its replica."""

    UNCHANGED = "unchanged"
    """Same size and timestamp, or same content"""

    MODIFIED = "modified"
    """Content differs; the replica must be overwritten"""

    TOUCHED = "touched"
    """Same content but different timestamp; only the timestamp is synced"""

    MISSING = "missing"
    """One side vanished during the pass; skipped until the next pass"""

    @property
    def needs_copy(self) -> bool:
        return self is FileChange.MODIFIED


class ChangeDetector:
    """Decides whether a file present on both sides actually changed.

    The check is tiered so that untouched files never have their content
    read:

    1. Equal size and equal modification time: unchanged.
    2. Different size: modified, without hashing.
    3. Equal size, different time: compare MD5 digests.
    """

    def detect(self, source_path: Path, replica_path: Path) -> FileChange:
        """Compare a source file with its replica.

        Args:
            source_path: Absolute path of the source file
            replica_path: Absolute path of the replica file

        Returns:
            FileChange describing what the update phase has to do

        Raises:
            OSError: If a file exists but cannot be read while hashing
        """
        try:
            source_stat = os.stat(source_path)
            replica_stat = os.stat(replica_path)
        except FileNotFoundError:
            logger.debug(f"File vanished before comparison: {source_path}")
            return FileChange.MISSING

        if source_stat.st_size != replica_stat.st_size:
            return FileChange.MODIFIED

        if source_stat.st_mtime_ns == replica_stat.st_mtime_ns:
            return FileChange.UNCHANGED

        try:
            source_hash = calculate_md5(source_path)
            replica_hash = calculate_md5(replica_path)
        except FileNotFoundError:
            logger.debug(f"File vanished while hashing: {source_path}")
            return FileChange.MISSING

        if source_hash != replica_hash:
            return FileChange.MODIFIED
        return FileChange.TOUCHED

    def needs_copy(self, source_path: Path, replica_path: Path) -> bool:
        """Return True if the replica content must be overwritten."""
        return self.detect(source_path, replica_path).needs_copy

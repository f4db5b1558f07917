"""Point-in-time snapshots of a directory tree.

A snapshot maps the comparison key of every root-relative path to its
absolute path, separately for files and for directories. Snapshots are
built fresh for every sync pass and never persisted.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from ..exceptions import MirrorConfigError
from ..utils import MATCH_ALL
from .pair import PathPolicy
from .scanner import DirectoryScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of one root at one instant."""

    root: Path
    """Absolute root the snapshot was taken from"""

    files: Mapping[str, Path]
    """Comparison key -> absolute path for every regular file"""

    directories: Mapping[str, Path]
    """Comparison key -> absolute path for every directory"""

    policy: PathPolicy
    """Path-equality policy the keys were built with"""

    def relative_path(self, absolute_path: Path) -> str:
        """Return the root-relative POSIX path of an entry of this snapshot."""
        return absolute_path.relative_to(self.root).as_posix()

    def __len__(self) -> int:
        return len(self.files) + len(self.directories)


def build_mapping(
    root: Path, paths: list[Path], policy: PathPolicy
) -> Mapping[str, Path]:
    """Build a read-only key -> absolute path mapping for paths under root.

    Args:
        root: Root the paths were found under
        paths: Absolute paths beneath the root
        policy: Path-equality policy producing the keys

    Returns:
        Read-only mapping from comparison key to absolute path
    """
    mapping: dict[str, Path] = {}
    for path in paths:
        key = policy.key(path.relative_to(root).as_posix())
        if key in mapping:
            # Two names differing only in case under a case-insensitive policy
            logger.warning(
                f"Ignoring {path}: collides with {mapping[key]} under "
                "case-insensitive comparison"
            )
            continue
        mapping[key] = path
    return MappingProxyType(mapping)


class SnapshotBuilder:
    """Builds snapshots by walking a root once."""

    def __init__(
        self,
        scanner: DirectoryScanner,
        policy: PathPolicy,
        pattern: str = MATCH_ALL,
    ):
        """Initialize snapshot builder.

        Args:
            scanner: Tree walker used to enumerate the root
            policy: Path-equality policy of the run
            pattern: Glob restricting which files are included
        """
        self.scanner = scanner
        self.policy = policy
        self.pattern = pattern

    def build(self, root: Path, label: Optional[str] = None) -> Snapshot:
        """Walk a root and return its snapshot.

        Args:
            root: Absolute root directory
            label: Name of the root used in debug output

        Returns:
            Snapshot of the root

        Raises:
            MirrorConfigError: If the root does not exist or is not a directory
        """
        if not root.is_dir():
            raise MirrorConfigError(f"Directory does not exist: {root}")

        root = root.resolve()
        scan_start = time.time()
        files, dirs = self.scanner.walk(root, pattern=self.pattern, recursive=True)
        scan_elapsed = time.time() - scan_start
        logger.debug(
            f"Snapshot of {label or root} took {scan_elapsed:.2f}s "
            f"({len(files)} files, {len(dirs)} directories)"
        )

        return Snapshot(
            root=root,
            files=build_mapping(root, files, self.policy),
            directories=build_mapping(root, dirs, self.policy),
            policy=self.policy,
        )

"""Directory tree walking for sync operations."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..exceptions import MirrorConfigError
from ..log import SyncLog
from ..utils import MATCH_ALL

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Enumerates every file and directory beneath a root.

    Directories that cannot be listed are reported to the sync log and
    skipped; the walk itself never fails because of them.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> files, dirs = scanner.walk(Path("/sync/folder"))

        >>> # Only mirror text files
        >>> files, dirs = scanner.walk(Path("/sync/folder"), pattern="*.txt")
    """

    def __init__(self, log: Optional[SyncLog] = None):
        """Initialize directory scanner.

        Args:
            log: Sync log receiving per-directory access errors
        """
        self.log = log

    def _report(self, message: str) -> None:
        if self.log is not None:
            self.log.error(message)
        else:
            logger.error(message)

    def walk(
        self,
        root: Union[str, Path],
        pattern: str = MATCH_ALL,
        recursive: bool = True,
    ) -> tuple[list[Path], list[Path]]:
        """Walk a directory tree.

        Args:
            root: Directory to walk
            pattern: Glob applied to file names (directories always match)
            recursive: Whether to descend into subdirectories

        Returns:
            Tuple of (files, directories), both absolute paths

        Raises:
            MirrorConfigError: If the root is empty or not an existing directory
        """
        if not str(root).strip():
            raise MirrorConfigError("Path is empty")

        root = Path(root).absolute()
        if not root.is_dir():
            raise MirrorConfigError(f"Directory not found: {root}")

        files: list[Path] = []
        dirs: list[Path] = []
        stack = [root]

        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as entries:
                    for entry in entries:
                        if entry.is_dir(follow_symlinks=False):
                            path = Path(entry.path)
                            dirs.append(path)
                            if recursive:
                                stack.append(path)
                        elif entry.is_file():
                            if pattern == MATCH_ALL or fnmatch.fnmatch(
                                entry.name, pattern
                            ):
                                files.append(Path(entry.path))
                        else:
                            # Directory symlinks, sockets, fifos, dangling links
                            logger.debug(f"Skipping special entry: {entry.path}")
            except OSError as e:
                # Permission denied, vanished directory, name too long, I/O error
                self._report(f"Cannot list directory {current}: {e}")

        logger.debug(
            f"Walked {root}: {len(files)} file(s), {len(dirs)} director(ies)"
        )
        return files, dirs

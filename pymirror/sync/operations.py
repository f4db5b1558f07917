"""Filesystem operation wrappers for the apply phases.

Every wrapper performs exactly one directory or file operation and reports
the outcome as an OperationResult instead of raising, so a failing item
never aborts the phase it belongs to.
"""

import errno
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .comparator import ChangeDetector, FileChange

# Windows ERROR_FILENAME_EXCED_RANGE
_WINERROR_PATH_TOO_LONG = 206


class OperationKind(str, Enum):
    """Kinds of filesystem operations performed by a sync pass."""

    CREATE_DIR = "create directory"
    COPY_FILE = "copy file"
    UPDATE_FILE = "update file"
    DELETE_FILE = "delete file"
    DELETE_DIR = "delete directory"


class ErrorKind(str, Enum):
    """Classification of a failed operation."""

    NONE = "none"
    NOT_FOUND = "not found"
    PERMISSION = "permission denied"
    PATH_TOO_LONG = "path too long"
    NOT_EMPTY = "directory not empty"
    IO = "i/o error"


def classify_error(error: OSError) -> ErrorKind:
    """Map an OSError onto an ErrorKind.

    Examples:
        >>> classify_error(PermissionError(errno.EACCES, "denied"))
        <ErrorKind.PERMISSION: 'permission denied'>
    """
    if isinstance(error, FileNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, PermissionError):
        return ErrorKind.PERMISSION
    if error.errno == errno.ENAMETOOLONG:
        return ErrorKind.PATH_TOO_LONG
    if getattr(error, "winerror", None) == _WINERROR_PATH_TOO_LONG:
        return ErrorKind.PATH_TOO_LONG
    if error.errno == errno.ENOTEMPTY:
        return ErrorKind.NOT_EMPTY
    return ErrorKind.IO


@dataclass
class OperationResult:
    """Outcome of a single filesystem operation."""

    kind: OperationKind
    """Operation that was attempted"""

    relative_path: str
    """Root-relative path of the item"""

    error_kind: ErrorKind = ErrorKind.NONE
    """Classification of the failure, NONE on success"""

    error: Optional[OSError] = None
    """Underlying exception of a failed operation"""

    change: Optional[FileChange] = None
    """Change detected for update operations"""

    skipped: bool = False
    """True if nothing had to be done (item already in the desired state)"""

    bytes_copied: int = 0
    """Number of bytes written to the replica"""

    @property
    def ok(self) -> bool:
        return self.error_kind is ErrorKind.NONE

    def describe_error(self) -> str:
        """Human-readable failure description for the sync log."""
        return (
            f"{self.kind.value.capitalize()} failed ({self.error_kind.value}): "
            f"{self.relative_path}. {self.error}"
        )


class SyncOperations:
    """Directory and file operations used by the apply phases."""

    def __init__(
        self,
        detector: Optional[ChangeDetector] = None,
        dry_run: bool = False,
    ):
        """Initialize sync operations.

        Args:
            detector: Change detector deciding whether candidates are updated
            dry_run: If True, decide what would be done but change nothing
        """
        self.detector = detector or ChangeDetector()
        self.dry_run = dry_run

    def _run(
        self,
        kind: OperationKind,
        relative_path: str,
        action: Callable[[], OperationResult],
        missing_ok: bool = False,
        source: Optional[Path] = None,
    ) -> OperationResult:
        try:
            return action()
        except FileNotFoundError as e:
            # Source removed since the snapshot was taken
            if missing_ok or (source is not None and not source.exists()):
                return OperationResult(kind, relative_path, skipped=True)
            return OperationResult(kind, relative_path, ErrorKind.NOT_FOUND, e)
        except OSError as e:
            return OperationResult(kind, relative_path, classify_error(e), e)

    def create_directory(self, path: Path, relative_path: str) -> OperationResult:
        """Create a replica directory whose parent already exists."""

        def action() -> OperationResult:
            if not self.dry_run:
                os.mkdir(path)
            return OperationResult(OperationKind.CREATE_DIR, relative_path)

        return self._run(OperationKind.CREATE_DIR, relative_path, action)

    def copy_file(
        self, source: Path, destination: Path, relative_path: str
    ) -> OperationResult:
        """Copy a new file, overwriting any file already at the destination.

        Content and timestamps are copied so the next fast check succeeds.
        A directory at the destination is never written into; the copy fails
        and succeeds on the next pass, once the directory has been deleted.
        A source that vanished is skipped.
        """

        def action() -> OperationResult:
            size = source.stat().st_size
            if not self.dry_run:
                shutil.copyfile(source, destination)
                shutil.copystat(source, destination)
            return OperationResult(
                OperationKind.COPY_FILE, relative_path, bytes_copied=size
            )

        return self._run(
            OperationKind.COPY_FILE, relative_path, action, source=source
        )

    def update_file(
        self, source: Path, destination: Path, relative_path: str
    ) -> OperationResult:
        """Bring an existing replica file in line with its source.

        Modified files are overwritten; files whose content is identical but
        whose timestamp differs only get the source timestamp. Files that
        vanished on either side are skipped.
        """

        def action() -> OperationResult:
            change = self.detector.detect(source, destination)
            result = OperationResult(
                OperationKind.UPDATE_FILE, relative_path, change=change
            )
            if change is FileChange.MISSING:
                result.skipped = True
                return result
            if change is FileChange.UNCHANGED:
                return result

            source_stat = source.stat()
            if change is FileChange.MODIFIED:
                result.bytes_copied = source_stat.st_size
                if not self.dry_run:
                    shutil.copyfile(source, destination)
            if not self.dry_run:
                os.utime(
                    destination,
                    ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns),
                )
            return result

        return self._run(
            OperationKind.UPDATE_FILE, relative_path, action, source=source
        )

    def delete_file(self, path: Path, relative_path: str) -> OperationResult:
        """Delete a stale replica file. A file already gone is skipped."""

        def action() -> OperationResult:
            if not self.dry_run:
                os.unlink(path)
            elif not path.exists():
                raise FileNotFoundError(errno.ENOENT, "No such file", str(path))
            return OperationResult(OperationKind.DELETE_FILE, relative_path)

        return self._run(
            OperationKind.DELETE_FILE, relative_path, action, missing_ok=True
        )

    def delete_directory(self, path: Path, relative_path: str) -> OperationResult:
        """Delete an empty replica directory. Never removes content."""

        def action() -> OperationResult:
            if not self.dry_run:
                os.rmdir(path)
            return OperationResult(OperationKind.DELETE_DIR, relative_path)

        return self._run(
            OperationKind.DELETE_DIR, relative_path, action, missing_ok=True
        )

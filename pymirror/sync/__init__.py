"""Sync engine for pymirror - one-way directory mirroring."""

from .comparator import ChangeDetector, DiffResult, FileChange, compute_diff
from .driver import DriverState, SyncDriver
from .engine import SyncEngine
from .operations import (
    ErrorKind,
    OperationKind,
    OperationResult,
    SyncOperations,
    classify_error,
)
from .pair import PathPolicy, SyncPair
from .scanner import DirectoryScanner
from .snapshot import Snapshot, SnapshotBuilder

__all__ = [
    "SyncEngine",
    "SyncDriver",
    "DriverState",
    "SyncPair",
    "PathPolicy",
    "DirectoryScanner",
    "Snapshot",
    "SnapshotBuilder",
    "DiffResult",
    "compute_diff",
    "ChangeDetector",
    "FileChange",
    "SyncOperations",
    "OperationKind",
    "OperationResult",
    "ErrorKind",
    "classify_error",
]

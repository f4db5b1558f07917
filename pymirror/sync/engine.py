"""Core sync engine for mirroring a source tree onto a replica."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from ..log import SyncLog
from ..output import OutputFormatter
from ..utils import format_size, path_depth
from .comparator import ChangeDetector, DiffResult, FileChange, compute_diff
from .operations import OperationKind, OperationResult, SyncOperations
from .pair import SyncPair
from .scanner import DirectoryScanner
from .snapshot import Snapshot, SnapshotBuilder

logger = logging.getLogger(__name__)

# Stage names reported to the on_stage callback of sync_pair
STAGE_SNAPSHOTTING = "snapshotting"
STAGE_DIFFING = "diffing"
STAGE_APPLYING = "applying"


class SyncEngine:
    """Core sync engine that converges a replica onto its source.

    One call to ``sync_pair`` is one sync pass: both roots are walked,
    the snapshots are compared, and the differences are applied in five
    phases:

    1. create directories, shallowest first
    2. copy new files
    3. update changed files
    4. delete stale files
    5. delete directories, deepest first

    Every phase completes before the next one starts. A failing item is
    logged and counted, never raised.
    """

    def __init__(
        self,
        log: SyncLog,
        output: Optional[OutputFormatter] = None,
        detector: Optional[ChangeDetector] = None,
    ):
        """Initialize sync engine.

        Args:
            log: Sync log receiving one line per operation
            output: Output formatter for displaying plan and summary
            detector: Change detector for files present on both sides
        """
        self.log = log
        self.output = output or OutputFormatter(quiet=True)
        self.detector = detector or ChangeDetector()
        self.scanner = DirectoryScanner(log)

    def take_snapshots(self, pair: SyncPair) -> tuple[Snapshot, Snapshot]:
        """Snapshot the source and replica roots of a pair.

        Args:
            pair: Sync pair to snapshot

        Returns:
            Tuple of (source snapshot, replica snapshot)
        """
        builder = SnapshotBuilder(self.scanner, pair.policy, pair.pattern)
        source = builder.build(pair.source, label="source")
        replica = builder.build(pair.replica, label="replica")
        return source, replica

    def sync_pair(
        self,
        pair: SyncPair,
        dry_run: bool = False,
        max_workers: int = 1,
        on_stage: Optional[Callable[[str], None]] = None,
    ) -> dict:
        """Run one sync pass for a pair.

        Args:
            pair: Sync pair to synchronize
            dry_run: If True, only log what would be done
            max_workers: Number of parallel workers for file phases
            on_stage: Called with the stage name when a stage starts

        Returns:
            Dictionary with sync statistics

        Examples:
            >>> engine = SyncEngine(SyncLog("/tmp/mirror.log").open())
            >>> pair = SyncPair(source=Path("/data"), replica=Path("/backup"))
            >>> stats = engine.sync_pair(pair)
            >>> print(f"Copied {stats['files_copied']} files")
        """
        start_time = time.time()
        self.log.info("Synchronization started")

        if on_stage:
            on_stage(STAGE_SNAPSHOTTING)
        source, replica = self.take_snapshots(pair)

        if on_stage:
            on_stage(STAGE_DIFFING)
        diff = compute_diff(source, replica)
        self._display_sync_plan(diff, dry_run)

        if on_stage:
            on_stage(STAGE_APPLYING)
        stats = self.apply(diff, source, replica, dry_run, max_workers)

        elapsed = time.time() - start_time
        logger.debug(f"Sync pass took {elapsed:.2f}s")

        if stats["errors"]:
            self.log.warning(
                f"Synchronization finished with {stats['errors']} error(s)"
            )
        else:
            self.log.info("Synchronization performed successfully")

        if not self.output.quiet:
            self._display_summary(stats, dry_run)

        return stats

    def apply(
        self,
        diff: DiffResult,
        source: Snapshot,
        replica: Snapshot,
        dry_run: bool = False,
        max_workers: int = 1,
    ) -> dict:
        """Apply a diff to the replica.

        Args:
            diff: Differences between the two snapshots
            source: Snapshot of the source root
            replica: Snapshot of the replica root
            dry_run: If True, only log what would be done
            max_workers: Number of parallel workers for file phases

        Returns:
            Dictionary with sync statistics
        """
        operations = SyncOperations(self.detector, dry_run=dry_run)
        stats = self._create_empty_stats()

        def replica_target(absolute_source: Path) -> tuple[Path, str]:
            relative = source.relative_path(absolute_source)
            return replica.root / relative, relative

        # Phase 1: directories, parents before children
        for key in sorted(diff.dirs_to_create, key=lambda k: (path_depth(k), k)):
            target, relative = replica_target(source.directories[key])
            result = operations.create_directory(target, relative)
            self._record(result, target, stats, dry_run)

        # Phase 2: new files
        def copy_task(key: str) -> tuple[OperationResult, Path, Path]:
            source_path = source.files[key]
            target, relative = replica_target(source_path)
            result = operations.copy_file(source_path, target, relative)
            return result, target, source_path

        self._run_phase(
            sorted(diff.files_to_copy), copy_task, stats, dry_run, max_workers
        )

        # Phase 3: files present on both sides
        def update_task(key: str) -> tuple[OperationResult, Path, Path]:
            source_path = source.files[key]
            target = replica.files[key]
            relative = source.relative_path(source_path)
            result = operations.update_file(source_path, target, relative)
            return result, target, source_path

        self._run_phase(
            sorted(diff.files_to_check), update_task, stats, dry_run, max_workers
        )

        # Phase 4: stale files
        def delete_task(key: str) -> tuple[OperationResult, Path, None]:
            target = replica.files[key]
            relative = replica.relative_path(target)
            return operations.delete_file(target, relative), target, None

        self._run_phase(
            sorted(diff.files_to_delete), delete_task, stats, dry_run, max_workers
        )

        # Phase 5: directories, children before parents
        for key in sorted(diff.dirs_to_delete, key=lambda k: (-path_depth(k), k)):
            target = replica.directories[key]
            relative = replica.relative_path(target)
            result = operations.delete_directory(target, relative)
            self._record(result, target, stats, dry_run)

        return stats

    def _run_phase(
        self,
        keys: list[str],
        task: Callable[[str], tuple[OperationResult, Path, Optional[Path]]],
        stats: dict,
        dry_run: bool,
        max_workers: int,
    ) -> None:
        """Run one file phase, in parallel if more than one worker is allowed.

        Returns only once every item of the phase has finished.

        Args:
            keys: Snapshot keys of the items, in processing order
            task: Performs the operation for one key, returning the result,
                the replica path and the source path (if any)
            stats: Statistics dictionary (modified in place)
            dry_run: Whether this is a dry run
            max_workers: Number of parallel workers
        """
        if max_workers <= 1 or len(keys) <= 1:
            for key in keys:
                result, target, origin = task(key)
                self._record(result, target, stats, dry_run, origin)
            return

        logger.debug(f"Executing {len(keys)} operations with {max_workers} workers")
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(task, key) for key in keys]
            for future in as_completed(futures):
                result, target, origin = future.result()
                self._record(result, target, stats, dry_run, origin)

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "dirs_created": 0,
            "files_copied": 0,
            "files_updated": 0,
            "timestamps_synced": 0,
            "files_deleted": 0,
            "dirs_deleted": 0,
            "unchanged": 0,
            "skipped": 0,
            "errors": 0,
            "bytes_copied": 0,
        }

    def _record(
        self,
        result: OperationResult,
        target: Path,
        stats: dict,
        dry_run: bool,
        origin: Optional[Path] = None,
    ) -> None:
        """Log the outcome of one operation and update the statistics.

        Args:
            result: Outcome of the operation
            target: Absolute replica path the operation acted on
            stats: Statistics dictionary (modified in place)
            dry_run: Whether this is a dry run
            origin: Absolute source path of copy and update operations
        """
        if not result.ok:
            stats["errors"] += 1
            self.log.error(result.describe_error())
            return

        if result.skipped:
            stats["skipped"] += 1
            logger.debug(f"Skipped {result.kind.value}: {result.relative_path}")
            return

        stats["bytes_copied"] += result.bytes_copied

        if result.kind is OperationKind.CREATE_DIR:
            stats["dirs_created"] += 1
            message = f"Directory created: {target}"
        elif result.kind is OperationKind.COPY_FILE:
            stats["files_copied"] += 1
            message = f"File copied: {origin} -> {target}"
        elif result.kind is OperationKind.UPDATE_FILE:
            if result.change is FileChange.MODIFIED:
                stats["files_updated"] += 1
                message = f"File updated: {origin} -> {target}"
            elif result.change is FileChange.TOUCHED:
                stats["timestamps_synced"] += 1
                message = f"Timestamp updated: {target}"
            else:
                stats["unchanged"] += 1
                return
        elif result.kind is OperationKind.DELETE_FILE:
            stats["files_deleted"] += 1
            message = f"File removed: {target}"
        else:
            stats["dirs_deleted"] += 1
            message = f"Directory deleted: {target}"

        if dry_run:
            message = f"[dry run] {message}"
        self.log.info(message)

    def _display_sync_plan(self, diff: DiffResult, dry_run: bool) -> None:
        """Display sync plan to user.

        Args:
            diff: Differences between source and replica
            dry_run: Whether this is a dry run
        """
        if self.output.quiet:
            return

        if dry_run:
            self.output.info("Dry run: No changes will be made")

        self.output.info("Sync plan:")
        if diff.dirs_to_create:
            self.output.info(f"  + Create: {len(diff.dirs_to_create)} director(ies)")
        if diff.files_to_copy:
            self.output.info(f"  → Copy: {len(diff.files_to_copy)} file(s)")
        if diff.files_to_check:
            self.output.info(f"  = Check: {len(diff.files_to_check)} file(s)")
        if diff.files_to_delete:
            self.output.info(f"  ✗ Delete: {len(diff.files_to_delete)} file(s)")
        if diff.dirs_to_delete:
            self.output.info(f"  ✗ Delete: {len(diff.dirs_to_delete)} director(ies)")
        self.output.print("")

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        if dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        total_actions = (
            stats["dirs_created"]
            + stats["files_copied"]
            + stats["files_updated"]
            + stats["timestamps_synced"]
            + stats["files_deleted"]
            + stats["dirs_deleted"]
        )

        if total_actions > 0:
            self.output.info(f"Total actions: {total_actions}")
            if stats["dirs_created"] > 0:
                self.output.info(f"  Directories created: {stats['dirs_created']}")
            if stats["files_copied"] > 0:
                self.output.info(f"  Files copied: {stats['files_copied']}")
            if stats["files_updated"] > 0:
                self.output.info(f"  Files updated: {stats['files_updated']}")
            if stats["timestamps_synced"] > 0:
                self.output.info(f"  Timestamps synced: {stats['timestamps_synced']}")
            if stats["files_deleted"] > 0:
                self.output.info(f"  Files deleted: {stats['files_deleted']}")
            if stats["dirs_deleted"] > 0:
                self.output.info(f"  Directories deleted: {stats['dirs_deleted']}")
            if stats["bytes_copied"] > 0:
                self.output.info(f"  Transferred: {format_size(stats['bytes_copied'])}")
        else:
            self.output.info("No changes needed - everything is in sync!")

        if stats["errors"] > 0:
            self.output.warning(f"⚠ {stats['errors']} operation(s) failed, see log")

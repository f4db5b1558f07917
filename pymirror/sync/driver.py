"""Interval driver running sync passes until cancelled."""

import logging
import signal
import threading
from enum import Enum
from typing import Any, Optional

from ..exceptions import MirrorConfigError
from ..log import SyncLog
from .engine import SyncEngine
from .pair import SyncPair

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    """States of the sync driver."""

    IDLE = "idle"
    SNAPSHOTTING = "snapshotting"
    DIFFING = "diffing"
    APPLYING = "applying"
    CANCELLED = "cancelled"


class SyncDriver:
    """Runs sync passes for one pair on a fixed interval.

    Passes never overlap. Cancellation is only observed between passes:
    a pass in flight always runs to completion, and a cancellation received
    while waiting for the next tick ends the loop immediately.

    Examples:
        >>> driver = SyncDriver(engine, pair, interval=30, log=log)
        >>> driver.install_signal_handlers()
        >>> driver.run()
    """

    def __init__(
        self,
        engine: SyncEngine,
        pair: SyncPair,
        interval: float,
        log: SyncLog,
        dry_run: bool = False,
        max_workers: int = 1,
    ):
        """Initialize sync driver.

        Args:
            engine: Engine executing each pass
            pair: Sync pair to keep mirrored
            interval: Seconds to wait between the end of a pass and the next
            log: Sync log
            dry_run: Passed to every pass
            max_workers: Number of parallel workers for file phases

        Raises:
            MirrorConfigError: If the interval is below one second
        """
        if interval < 1:
            raise MirrorConfigError("Synchronization interval cannot be less than 1")

        self.engine = engine
        self.pair = pair
        self.interval = interval
        self.log = log
        self.dry_run = dry_run
        self.max_workers = max_workers
        self.state = DriverState.IDLE
        self.passes = 0
        self._cancel_event = threading.Event()
        self._previous_handlers: dict[int, Any] = {}

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request the loop to stop before the next pass."""
        self._cancel_event.set()

    def _set_stage(self, stage: str) -> None:
        self.state = DriverState(stage)
        logger.debug(f"Driver state: {self.state.value}")

    def run_pass(self) -> dict:
        """Run a single sync pass and return its statistics."""
        try:
            stats = self.engine.sync_pair(
                self.pair,
                dry_run=self.dry_run,
                max_workers=self.max_workers,
                on_stage=self._set_stage,
            )
        finally:
            self.state = DriverState.IDLE
        self.passes += 1
        return stats

    def run(self, max_passes: Optional[int] = None) -> int:
        """Run passes until cancelled or ``max_passes`` passes have run.

        The first pass starts immediately.

        Args:
            max_passes: Stop after this many passes (None runs forever)

        Returns:
            Number of passes run
        """
        self.log.info(
            f"Mirroring {self.pair.source} -> {self.pair.replica} "
            f"every {self.interval}s"
        )
        while not self.cancelled:
            self.run_pass()
            if max_passes is not None and self.passes >= max_passes:
                break
            # Returns early once cancel() is called
            self._cancel_event.wait(self.interval)

        if self.cancelled:
            self.state = DriverState.CANCELLED
            self.log.info("Synchronization cancelled, shutting down")
        return self.passes

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to ``cancel()``.

        Must be called from the main thread.
        """

        def handle_signal(signum: int, frame: Any) -> None:
            logger.debug(f"Received signal {signum}")
            self.cancel()

        for signum in self._signals():
            self._previous_handlers[signum] = signal.signal(signum, handle_signal)

    def restore_signal_handlers(self) -> None:
        """Reinstall the handlers replaced by ``install_signal_handlers()``."""
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers = {}

    @staticmethod
    def _signals() -> list[int]:
        signums = [signal.SIGINT]
        if hasattr(signal, "SIGTERM"):
            signums.append(signal.SIGTERM)
        return signums

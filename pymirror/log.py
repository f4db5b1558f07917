"""Operator-facing sync log.

Every directory and file operation performed by a sync pass is recorded here,
both on the console and in an append-only text file. The log is an explicit
handle: the CLI opens it at startup and hands it to the engine and driver.
"""

import logging
import sys
import threading
from enum import Enum
from pathlib import Path
from typing import Optional, TextIO, Union

from .exceptions import MirrorConfigError, MirrorLoggerError

LOG_FORMAT = "[%(kind)s] %(asctime)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(str, Enum):
    """Severity of a sync log message."""

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"

    @property
    def logging_level(self) -> int:
        """Matching level of the standard logging module."""
        return {
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
        }[self]


class SyncLog:
    """Append-only sync log writing to a file and, optionally, the console.

    Writes are serialized so lines from parallel workers never interleave.
    Each record is flushed as soon as it is written, so no explicit close
    is needed for durability; ``close()`` only releases the file handle.

    Examples:
        >>> log = SyncLog("/var/log/pymirror.log").open()
        >>> log.info("Synchronization started")
        >>> log.close()
    """

    def __init__(
        self,
        path: Union[str, Path],
        echo: bool = True,
        stream: Optional[TextIO] = None,
    ):
        """Initialize the sync log.

        Args:
            path: Log file path; its parent directory is created on open
            echo: Whether to echo every record to the console
            stream: Console stream (defaults to stdout)
        """
        self.path = Path(path) if str(path).strip() else None
        self.echo = echo
        self.stream = stream
        self._lock = threading.Lock()
        self._logger: Optional[logging.Logger] = None
        self._handlers: list[logging.Handler] = []

    @property
    def is_open(self) -> bool:
        """Whether the log is ready to accept messages."""
        return self._logger is not None

    def open(self) -> "SyncLog":
        """Resolve the log file and attach the file and console handlers.

        Returns:
            This log, to allow ``log = SyncLog(path).open()``

        Raises:
            MirrorConfigError: If the path is empty, is a directory, or its
                parent directory cannot be created
        """
        if self.path is None:
            raise MirrorConfigError("Log file path is empty")

        path = self.path.expanduser().resolve()
        if path.is_dir():
            raise MirrorConfigError(f"Log file path is a directory: {path}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MirrorConfigError(
                f"Cannot create log directory {path.parent}: {e}"
            ) from e

        self.close()
        self.path = path

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        try:
            file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except OSError as e:
            raise MirrorConfigError(f"Cannot open log file {path}: {e}") from e
        file_handler.setFormatter(formatter)
        self._handlers.append(file_handler)

        if self.echo:
            console_handler = logging.StreamHandler(self.stream or sys.stdout)
            console_handler.setFormatter(formatter)
            self._handlers.append(console_handler)

        logger = logging.getLogger(f"{__name__}.{path}")
        logger.setLevel(logging.INFO)
        logger.propagate = False
        for handler in self._handlers:
            logger.addHandler(handler)

        self._logger = logger
        return self

    def close(self) -> None:
        """Detach and close all handlers. The log can be reopened."""
        with self._lock:
            if self._logger is not None:
                for handler in self._handlers:
                    self._logger.removeHandler(handler)
            for handler in self._handlers:
                handler.close()
            self._handlers = []
            self._logger = None

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        """Record a message.

        Args:
            message: Text of the message
            level: Severity of the message

        Raises:
            MirrorLoggerError: If the log has not been opened
        """
        with self._lock:
            if self._logger is None:
                raise MirrorLoggerError(
                    "Sync log is not initialized. Call SyncLog.open() first."
                )
            self._logger.log(
                level.logging_level, message, extra={"kind": level.value}
            )

    def info(self, message: str) -> None:
        self.log(message, LogLevel.INFO)

    def warning(self, message: str) -> None:
        self.log(message, LogLevel.WARNING)

    def error(self, message: str) -> None:
        self.log(message, LogLevel.ERROR)

    def __enter__(self) -> "SyncLog":
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

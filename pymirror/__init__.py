"""PyMirror - one-way directory mirroring on a fixed interval."""

from .exceptions import MirrorConfigError, MirrorError, MirrorLoggerError
from .log import LogLevel, SyncLog
from .output import OutputFormatter
from .utils import calculate_md5, format_size

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "MirrorError",
    "MirrorConfigError",
    "MirrorLoggerError",
    "LogLevel",
    "SyncLog",
    "OutputFormatter",
    "calculate_md5",
    "format_size",
]

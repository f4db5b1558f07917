"""Exceptions raised by pymirror."""


class MirrorError(Exception):
    """Base exception for all pymirror errors."""


class MirrorConfigError(MirrorError):
    """Invalid startup configuration (arguments, roots, interval, log path).

    Configuration errors are fatal: they abort startup before any sync pass
    runs and are never retried.
    """


class MirrorLoggerError(MirrorError):
    """The sync log was used before it was opened."""

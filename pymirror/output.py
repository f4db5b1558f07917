"""Console output formatting for pymirror."""

from typing import Optional

from rich.console import Console


class OutputFormatter:
    """Prints user-facing status messages with rich styling.

    In quiet mode everything except errors is suppressed.
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        """Initialize output formatter.

        Args:
            quiet: Suppress non-error output
            console: Rich console to print to (defaults to stdout)
        """
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.error_console = console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        if not self.quiet:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.error_console.print(message, style="bold red", markup=False)

"""CLI interface for pymirror."""

import logging
from typing import Any, Optional

import click

from . import __version__
from .exceptions import MirrorConfigError, MirrorError
from .log import SyncLog
from .output import OutputFormatter
from .sync import SyncDriver, SyncEngine, SyncPair
from .utils import MATCH_ALL, MAX_WORKERS

logger = logging.getLogger(__name__)

CASE_POLICIES = {"auto": None, "sensitive": True, "insensitive": False}


@click.command()
@click.argument("interval", type=int)
@click.argument("source", type=str)
@click.argument("replica", type=str)
@click.argument("log_file", type=str)
@click.option(
    "--workers",
    "-w",
    type=int,
    default=1,
    help="Number of parallel workers for file operations (default: 1)",
)
@click.option(
    "--pattern",
    "-p",
    default=MATCH_ALL,
    help="Only mirror files whose name matches this glob (default: *)",
)
@click.option("--once", is_flag=True, help="Run a single pass and exit")
@click.option(
    "--max-passes",
    type=int,
    default=None,
    help="Exit after this many passes (default: run until interrupted)",
)
@click.option(
    "--dry-run", is_flag=True, help="Log what would be changed without changing it"
)
@click.option(
    "--case",
    type=click.Choice(list(CASE_POLICIES)),
    default="auto",
    help="Path comparison policy (default: auto, by platform)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: Any,
    interval: int,
    source: str,
    replica: str,
    log_file: str,
    workers: int,
    pattern: str,
    once: bool,
    max_passes: Optional[int],
    dry_run: bool,
    case: str,
    quiet: bool,
    verbose: bool,
) -> None:
    """PyMirror - keep REPLICA an exact copy of SOURCE.

    Every INTERVAL seconds the replica is converged onto the source: missing
    directories and files are created, changed files are overwritten, and
    anything not present in the source is removed. Every operation is
    recorded in LOG_FILE.

    Examples:
        pymirror 30 ./source ./replica ./sync.log
        pymirror 60 /data /mnt/backup/data /var/log/pymirror.log -w 4
        pymirror 10 ./docs ./docs-copy sync.log --once --dry-run
    """
    out = OutputFormatter(quiet=quiet)

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pymirror").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    # Validate numeric options
    if interval < 1:
        out.error("Synchronization interval cannot be less than 1")
        ctx.exit(1)
    if workers < 1:
        out.error("Number of workers must be at least 1")
        ctx.exit(1)
    if workers > MAX_WORKERS:
        out.error(f"Number of workers cannot exceed {MAX_WORKERS}")
        ctx.exit(1)
    if max_passes is not None and max_passes < 1:
        out.error("Maximum number of passes must be at least 1")
        ctx.exit(1)

    log = SyncLog(log_file, echo=not quiet)
    try:
        log.open()
    except MirrorConfigError as e:
        out.error(f"Invalid log file: {e}")
        ctx.exit(1)

    try:
        pair = SyncPair(
            source=source,
            replica=replica,
            case_sensitive=CASE_POLICIES[case],
            pattern=pattern,
        )
    except MirrorConfigError as e:
        out.error(f"Invalid configuration: {e}")
        log.error(f"Invalid configuration: {e}")
        log.close()
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    engine = SyncEngine(log, OutputFormatter(quiet=quiet))
    driver = SyncDriver(
        engine,
        pair,
        interval=interval,
        log=log,
        dry_run=dry_run,
        max_workers=workers,
    )

    exit_code = 0
    driver.install_signal_handlers()
    try:
        passes = driver.run(max_passes=1 if once else max_passes)
        logger.debug(f"Driver stopped after {passes} pass(es)")
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        exit_code = 130  # Standard exit code for SIGINT
    except MirrorError as e:
        out.error(f"Error: {e}")
        log.error(f"Fatal error: {e}")
        exit_code = 1
    except Exception as e:
        out.error(f"Unexpected error: {e}")
        log.error(f"Unexpected error: {e!r}")
        exit_code = 1
    finally:
        driver.restore_signal_handlers()
        log.close()

    if exit_code:
        ctx.exit(exit_code)

    if not quiet and driver.cancelled:
        out.success("Stopped.")

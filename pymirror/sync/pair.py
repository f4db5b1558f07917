"""Source/replica pair definition for mirroring."""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..exceptions import MirrorConfigError
from ..utils import is_nested

# Platforms whose default filesystems compare names case-insensitively
CASE_INSENSITIVE_PLATFORMS = ("win32", "cygwin", "darwin")


@dataclass(frozen=True)
class PathPolicy:
    """Path-equality policy shared by both snapshots of a run."""

    case_sensitive: bool = True
    """Whether relative paths differing only in case are distinct"""

    @classmethod
    def for_platform(cls, platform: Optional[str] = None) -> "PathPolicy":
        """Build the policy matching the platform's filesystem semantics.

        Args:
            platform: Platform identifier (defaults to ``sys.platform``)

        Returns:
            Case-insensitive policy on Windows and macOS, case-sensitive
            elsewhere
        """
        platform = platform or sys.platform
        return cls(case_sensitive=platform not in CASE_INSENSITIVE_PLATFORMS)

    def key(self, relative_path: str) -> str:
        """Return the comparison key of a root-relative POSIX path."""
        if self.case_sensitive:
            return relative_path
        return relative_path.casefold()


def validate_root(path: Union[str, Path], name: str) -> Path:
    """Resolve a root directory to its absolute canonical form.

    Args:
        path: Directory path as given by the user
        name: Human-readable role of the root, used in error messages

    Returns:
        Absolute resolved path

    Raises:
        MirrorConfigError: If the path is empty, missing, or not a directory
    """
    if not str(path).strip():
        raise MirrorConfigError(f"{name} path is empty")

    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise MirrorConfigError(f"{name} directory does not exist: {resolved}")
    if not resolved.is_dir():
        raise MirrorConfigError(f"{name} path is not a directory: {resolved}")
    return resolved


@dataclass
class SyncPair:
    """A source directory mirrored one-way onto a replica directory.

    Both roots are validated and resolved once, when the pair is created.

    Examples:
        >>> pair = SyncPair(source="/data/projects", replica="/backup/projects")
        >>> pair.source
        PosixPath('/data/projects')
    """

    source: Path
    """Directory whose content is authoritative"""

    replica: Path
    """Directory converged onto the source"""

    case_sensitive: Optional[bool] = None
    """Path comparison policy; None selects the platform default"""

    pattern: str = "*"
    """Glob restricting which file names are mirrored"""

    policy: PathPolicy = field(init=False)

    def __post_init__(self) -> None:
        self.source = validate_root(self.source, "Source")
        self.replica = validate_root(self.replica, "Replica")

        if is_nested(self.source, self.replica):
            raise MirrorConfigError(
                "Source and replica must not be the same directory or nested "
                f"in one another: {self.source} / {self.replica}"
            )

        if not self.pattern:
            self.pattern = "*"

        if self.case_sensitive is None:
            self.policy = PathPolicy.for_platform()
        else:
            self.policy = PathPolicy(case_sensitive=self.case_sensitive)

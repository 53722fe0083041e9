"""Remote and local file metadata for sync operations."""

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..utils import datetime_to_ns


@dataclass(frozen=True)
class RemoteObject:
    """One entry of a bucket listing."""

    key: str
    """Full object key"""

    size: int
    """Object size in bytes"""

    last_modified: datetime
    """Last modification time reported by the store"""

    @property
    def is_directory_marker(self) -> bool:
        """True for zero-content keys ending in ``/`` that stand for folders."""
        return self.key.endswith("/")

    @property
    def mtime_ns(self) -> int:
        """Last modification time in nanoseconds since the epoch."""
        return datetime_to_ns(self.last_modified)

    def relative_path(self, prefix: str) -> str:
        """Key with the vault prefix stripped and the remainder cleaned.

        Empty and ``.`` segments are dropped, so ``vault/notes//a/./b.md``
        maps to ``a/b.md``. ``..`` segments are kept for the safety check.

        Args:
            prefix: Normalized vault prefix (with trailing slash)

        Returns:
            Relative path using forward slashes
        """
        relative = self.key
        if relative.startswith(prefix):
            relative = relative[len(prefix) :]
        return "/".join(part for part in relative.split("/") if part not in ("", "."))


@dataclass(frozen=True)
class LocalFileState:
    """Size and modification time of a local file, read fresh per run."""

    path: Path
    """Absolute or root-joined path to the file"""

    size: int
    """File size in bytes"""

    mtime_ns: int
    """Last modification time (nanoseconds since the epoch)"""

    @classmethod
    def from_path(cls, path: Path) -> Optional["LocalFileState"]:
        """Stat a path.

        Args:
            path: Path to inspect

        Any stat error (missing file, a regular file as parent component,
        name too long, permission denied) reads as "no local copy"; a real
        problem then shows up when the file is written.

        Returns:
            LocalFileState, or None if no regular file can be stat'ed there
        """
        try:
            st = path.stat()
        except OSError:
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return cls(path=path, size=st.st_size, mtime_ns=st.st_mtime_ns)


def is_safe_relative_path(relative_path: str) -> bool:
    """Check that a relative path stays inside the directory it is joined to.

    Args:
        relative_path: Path relative to the vault root (forward slashes)

    Returns:
        False for empty, absolute or parent-escaping paths
    """
    if not relative_path or relative_path.startswith("/"):
        return False
    if os.path.isabs(relative_path):
        return False
    parts = relative_path.split("/")
    return ".." not in parts


class DirectoryScanner:
    """Scans the local vault tree for regular files.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> paths = scanner.scan_local(Path("./vault/notes"))
        >>> sorted(paths)
        ['a.md', 'sub/b.md']
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def scan_local(self, directory: Path) -> dict[str, Path]:
        """Recursively collect regular files below a directory.

        Symlinks are neither followed nor reported; anything that is not a
        regular file is left out. Unreadable directories are logged and
        skipped.

        Args:
            directory: Root of the local vault

        Returns:
            Dictionary mapping relative path (forward slashes) to path
        """
        files: dict[str, Path] = {}
        if not directory.is_dir():
            return files

        def _on_error(error: OSError) -> None:
            self.logger.warning("Cannot scan %s: %s", error.filename, error)

        for dirpath, dirnames, filenames in os.walk(directory, onerror=_on_error):
            dirnames.sort()
            base = Path(dirpath)
            for filename in sorted(filenames):
                path = base / filename
                if not path.is_file() or path.is_symlink():
                    continue
                relative_path = path.relative_to(directory).as_posix()
                files[relative_path] = path
        return files

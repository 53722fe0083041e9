"""Timestamped tar.gz archives of a synced vault, with bounded retention."""

import glob
import logging
import os
import tarfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from ..exceptions import ArchiveError
from ..utils import ARCHIVE_EXTENSION, format_archive_timestamp, size_in_mb


@dataclass(frozen=True)
class ArchiveEntry:
    """An archive on disk that belongs to a vault."""

    path: Path
    """Path of the archive file"""

    mtime: float
    """Last modification time (Unix timestamp)"""


class ArchiveManager:
    """Creates vault archives and prunes old ones.

    Archives are named ``{name}-{timestamp}.{extension}`` where the timestamp
    uses a sortable layout, e.g. ``notes-2024-01-07_00-00-00.tar.gz``.
    """

    def __init__(
        self,
        extension: str = ARCHIVE_EXTENSION,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize archive manager.

        Args:
            extension: Archive file extension without the leading dot
            clock: Returns the time used in archive names (defaults to now)
            logger: Logger for archive events (defaults to the module logger)
        """
        self.extension = extension
        self.clock = clock or datetime.now
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def archive_filename(self, name: str, when: Optional[datetime] = None) -> str:
        """Build the archive filename for a vault."""
        timestamp = format_archive_timestamp(when or self.clock())
        return f"{name}-{timestamp}.{self.extension}"

    def create_archive(
        self,
        source_dir: Union[str, Path],
        name: str,
        target_dir: Union[str, Path, None] = None,
    ) -> tuple[Path, Path]:
        """Package a directory into a timestamped tar.gz archive.

        Entry names are relative to ``source_dir``; the archive root is the
        vault root. A partially written archive is removed on failure.

        Args:
            source_dir: Directory to archive
            name: Vault name used in the filename and for retention
            target_dir: Output directory (None or empty for the current one)

        Returns:
            Tuple of (output directory, archive path)

        Raises:
            ArchiveError: If the archive cannot be written
        """
        source_dir = Path(source_dir)
        if "/" in name or os.sep in name:
            raise ArchiveError(f"Archive name must not contain a separator: {name!r}")
        if not source_dir.is_dir():
            raise ArchiveError(f"Source directory does not exist: {source_dir}")

        output_dir = Path(target_dir) if target_dir else Path(".")
        if target_dir:
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ArchiveError(
                    f"Failed to create archive directory {output_dir}: {e}"
                ) from e

        archive_path = output_dir / self.archive_filename(name)

        self.logger.debug("Creating archive: %s", archive_path)
        try:
            self._write_archive(source_dir, archive_path)
        except (OSError, tarfile.TarError) as e:
            self._discard(archive_path)
            raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e

        try:
            size = archive_path.stat().st_size
        except OSError:
            self.logger.info("Archive created: %s", archive_path)
        else:
            self.logger.info(
                "Archive created: %s (%s MB)", archive_path, size_in_mb(size)
            )

        return output_dir, archive_path

    def _write_archive(self, source_dir: Path, archive_path: Path) -> None:
        archive_abs = archive_path.resolve()
        with tarfile.open(archive_path, "w:gz") as tar:
            for path in self._walk(source_dir):
                if path.resolve() == archive_abs:
                    continue
                if path == source_dir:
                    arcname = "."
                else:
                    arcname = path.relative_to(source_dir).as_posix()
                tar.add(str(path), arcname=arcname, recursive=False)

    def _walk(self, source_dir: Path) -> Iterator[Path]:
        """Yield the source directory, then every entry below it.

        Depth-first in lexical order: a subdirectory's subtree follows the
        subdirectory itself, before its next sibling. Symlinked directories
        are added as links and not descended into.
        """
        yield source_dir
        yield from self._walk_entries(source_dir)

    def _walk_entries(self, directory: Path) -> Iterator[Path]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
        for entry in entries:
            path = directory / entry.name
            yield path
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk_entries(path)

    def _discard(self, archive_path: Path) -> None:
        try:
            archive_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(
                "Failed to remove incomplete archive %s: %s", archive_path, e
            )

    def find_archives(
        self, target_dir: Union[str, Path], name: str
    ) -> list[ArchiveEntry]:
        """List archives of a vault, oldest first.

        Matches ``{name}-*.{extension}`` in ``target_dir``. Matches that
        disappear or cannot be stat'ed are ignored.
        """
        pattern = os.path.join(
            glob.escape(str(target_dir)), f"{glob.escape(name)}-*.{self.extension}"
        )
        entries: list[ArchiveEntry] = []
        for match in sorted(glob.glob(pattern)):
            try:
                mtime = os.stat(match).st_mtime
            except OSError:
                continue
            entries.append(ArchiveEntry(path=Path(match), mtime=mtime))
        # sorted() is stable: equal mtimes keep name order
        return sorted(entries, key=lambda entry: entry.mtime)

    def prune_archives(
        self, target_dir: Union[str, Path], name: str, keep_count: int
    ) -> list[Path]:
        """Delete the oldest archives of a vault beyond ``keep_count``.

        Pruning is best-effort: a failed deletion is logged and the remaining
        deletions still happen.

        Args:
            target_dir: Directory holding the archives
            name: Vault name
            keep_count: Number of archives to keep; 0 or less keeps all

        Returns:
            Paths that were deleted
        """
        if keep_count <= 0:
            return []

        self.logger.debug("Checking for old archives to clean up (keep %d)", keep_count)
        archives = self.find_archives(target_dir or ".", name)
        if len(archives) <= keep_count:
            return []

        removed: list[Path] = []
        for entry in archives[: len(archives) - keep_count]:
            self.logger.debug("Deleting old archive: %s", entry.path)
            try:
                entry.path.unlink()
            except OSError as e:
                self.logger.warning("Failed to delete archive %s: %s", entry.path, e)
                continue
            removed.append(entry.path)

        self.logger.info("Cleaned up %d old archive(s) of %s", len(removed), name)
        return removed

"""Core sync engine: mirror one bucket prefix into a local directory."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from ..exceptions import DeleteError, FetchError, MkdirError, WriteError
from ..output import OutputFormatter
from .comparator import FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .results import SyncOutcome, SyncResult, SyncStats
from .scanner import (
    DirectoryScanner,
    LocalFileState,
    RemoteObject,
    is_safe_relative_path,
)

if TYPE_CHECKING:
    from ..storage import S3Storage


class SyncEngine:
    """Core sync engine that orchestrates one-way (bucket to local) sync.

    The engine keeps no state between calls: every :meth:`sync` lists the
    bucket again, stats local files again and builds fresh statistics.
    """

    def __init__(
        self,
        storage: "S3Storage",
        output: Optional[OutputFormatter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize sync engine.

        Args:
            storage: Object store to list and fetch from
            output: Output formatter for progress and summaries
            logger: Logger for per-file events (defaults to the module logger)
        """
        self.storage = storage
        self.output = output or OutputFormatter()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.operations = SyncOperations(storage)
        self.comparator = FileComparator()
        self.scanner = DirectoryScanner(logger=self.logger)

    def sync(
        self,
        remote_prefix: str,
        local_root: Union[str, Path],
        delete_extraneous: bool = False,
        dry_run: bool = False,
    ) -> SyncStats:
        """Sync a bucket prefix into a local directory.

        Args:
            remote_prefix: Normalized prefix (no leading, one trailing slash)
            local_root: Local directory, created if missing
            delete_extraneous: Delete local files absent from the listing
            dry_run: Decide and count, but do not touch the filesystem

        Returns:
            SyncStats for this run

        Raises:
            ListError: If the bucket listing fails; nothing is synced
            MkdirError: If the local root cannot be created

        Examples:
            >>> engine = SyncEngine(storage)
            >>> stats = engine.sync("vault/notes/", Path("./vault/notes"))
            >>> print(f"Downloaded {stats.downloaded} files")
        """
        local_root = Path(local_root)

        remote_objects = self._list_remote(remote_prefix)

        if not dry_run:
            try:
                local_root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MkdirError(
                    local_root, f"failed to create vault directory: {e}"
                ) from e

        results: list[SyncResult] = []
        remote_paths: set[str] = set()

        with self._progress() as progress:
            task = progress.add_task("Syncing files...", total=len(remote_objects))
            for remote_object in remote_objects:
                result = self._process_remote_object(
                    remote_object, remote_prefix, local_root, remote_paths, dry_run
                )
                if result is not None:
                    results.append(result)
                progress.advance(task)

        if delete_extraneous:
            results.extend(
                self._delete_extraneous(local_root, remote_paths, dry_run=dry_run)
            )

        stats = SyncStats.from_results(results)
        if not self.output.quiet:
            self._display_summary(stats, dry_run)
        return stats

    def _list_remote(self, remote_prefix: str) -> list[RemoteObject]:
        """List remote objects behind a transient spinner."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=self.output.console,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Listing remote objects...", total=None)
            remote_objects = self.storage.list_objects(remote_prefix)
            progress.update(
                task, description=f"Found {len(remote_objects)} remote object(s)"
            )
        self.logger.debug(
            "Listed %d object(s) under %s", len(remote_objects), remote_prefix
        )
        return remote_objects

    def _progress(self) -> Progress:
        return Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            transient=True,
            console=self.output.console,
            disable=self.output.quiet,
        )

    def _process_remote_object(
        self,
        remote_object: RemoteObject,
        remote_prefix: str,
        local_root: Path,
        remote_paths: set[str],
        dry_run: bool,
    ) -> Optional[SyncResult]:
        """Decide and apply the action for one listed object.

        Args:
            remote_object: Object from the listing
            remote_prefix: Vault prefix stripped from the key
            local_root: Local vault root
            remote_paths: Relative paths seen so far (modified in place)
            dry_run: Only decide

        Returns:
            SyncResult, or None for directory markers
        """
        # Folder placeholders produce no file and are not recorded
        if remote_object.is_directory_marker:
            return None

        relative_path = remote_object.relative_path(remote_prefix)
        remote_paths.add(relative_path)

        if not is_safe_relative_path(relative_path):
            self.logger.warning(
                "Refusing to write %s outside of %s", remote_object.key, local_root
            )
            return SyncResult(
                relative_path, SyncOutcome.FAILED, error="unsafe relative path"
            )

        local_path = local_root / relative_path
        decision = self.comparator.compare(
            relative_path, remote_object, LocalFileState.from_path(local_path)
        )
        decision.local_path = local_path
        return self._execute_download(decision, remote_object, local_path, dry_run)

    def _execute_download(
        self,
        decision: SyncDecision,
        remote_object: RemoteObject,
        local_path: Path,
        dry_run: bool,
    ) -> SyncResult:
        """Apply a DOWNLOAD or SKIP decision.

        Per-object failures are logged and returned as FAILED results, never
        raised.
        """
        path = decision.relative_path

        if decision.action == SyncAction.SKIP:
            self.logger.debug("Skipping %s: %s", path, decision.reason)
            return SyncResult(path, SyncOutcome.SKIPPED)

        if dry_run:
            self.logger.info("Would download %s (%s)", path, decision.reason)
            return SyncResult(path, SyncOutcome.DOWNLOADED)

        self.logger.debug("Downloading %s -> %s", remote_object.key, local_path)
        try:
            self.operations.download_file(remote_object, local_path)
        except (MkdirError, FetchError, WriteError) as e:
            self.logger.warning("Failed to download %s: %s", remote_object.key, e)
            return SyncResult(path, SyncOutcome.FAILED, error=str(e))

        try:
            self.operations.set_mtime(local_path, remote_object)
        except OSError as e:
            self.logger.debug(
                "Could not set modification time on %s: %s", local_path, e
            )

        return SyncResult(path, SyncOutcome.DOWNLOADED)

    def _delete_extraneous(
        self, local_root: Path, remote_paths: set[str], dry_run: bool = False
    ) -> list[SyncResult]:
        """Delete local files that were not in the listing.

        Only regular files are removed; directories are left in place even
        when they end up empty. Failures are logged as DELETE_FAILED and do
        not count as sync failures.
        """
        self.logger.debug("Checking for local files to delete")
        local_files = self.scanner.scan_local(local_root)

        results: list[SyncResult] = []
        for decision in self.comparator.find_extraneous(local_files, remote_paths):
            path = decision.relative_path
            local_path = local_files[path]

            if dry_run:
                self.logger.info("Would delete %s", path)
                results.append(SyncResult(path, SyncOutcome.DELETED))
                continue

            self.logger.debug("Deleting local file not in S3: %s", local_path)
            try:
                self.operations.delete_local(local_path)
            except DeleteError as e:
                self.logger.warning("Failed to delete %s: %s", local_path, e)
                results.append(
                    SyncResult(path, SyncOutcome.DELETE_FAILED, error=str(e))
                )
            else:
                results.append(SyncResult(path, SyncOutcome.DELETED))
        return results

    def _display_summary(self, stats: SyncStats, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics of the finished run
            dry_run: Whether this was a dry run
        """
        title = "Dry Run Summary" if dry_run else "Sync Summary"
        self.output.print_summary(
            title,
            [
                ("Downloaded", stats.downloaded),
                ("Skipped", stats.skipped),
                ("Deleted", stats.deleted),
                ("Failed", stats.failed),
            ],
        )

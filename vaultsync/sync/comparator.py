"""File comparison logic for sync operations."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .scanner import LocalFileState, RemoteObject


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    DOWNLOAD = "download"
    """Download remote object to local"""

    SKIP = "skip"
    """Local copy is up to date"""

    DELETE_LOCAL = "delete_local"
    """Delete local file that has no remote counterpart"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Relative path of the file"""

    remote_object: Optional[RemoteObject] = None
    """Remote object (if listed)"""

    local_file: Optional[LocalFileState] = None
    """Local file state (if present)"""

    local_path: Optional[Path] = None
    """Path of the file below the local vault root"""


class FileComparator:
    """Decides per remote object whether the local copy is stale.

    A local file is up to date when it has exactly the remote size and the
    remote object is not newer than it. Equal timestamps count as up to
    date; any size difference forces a download.
    """

    def compare(
        self,
        relative_path: str,
        remote_object: RemoteObject,
        local_file: Optional[LocalFileState],
    ) -> SyncDecision:
        """Compare one remote object against its local counterpart.

        Args:
            relative_path: Path relative to the vault root
            remote_object: Object from the current listing
            local_file: Local state at the same relative path, if any

        Returns:
            SyncDecision with action DOWNLOAD or SKIP
        """
        if local_file is None:
            return SyncDecision(
                action=SyncAction.DOWNLOAD,
                reason="New remote file",
                relative_path=relative_path,
                remote_object=remote_object,
            )

        if local_file.size != remote_object.size:
            return SyncDecision(
                action=SyncAction.DOWNLOAD,
                reason=(
                    f"Size differs (local {local_file.size}, "
                    f"remote {remote_object.size})"
                ),
                relative_path=relative_path,
                remote_object=remote_object,
                local_file=local_file,
            )

        if remote_object.mtime_ns > local_file.mtime_ns:
            return SyncDecision(
                action=SyncAction.DOWNLOAD,
                reason="Remote file is newer",
                relative_path=relative_path,
                remote_object=remote_object,
                local_file=local_file,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Up to date (same size, remote not newer)",
            relative_path=relative_path,
            remote_object=remote_object,
            local_file=local_file,
        )

    def find_extraneous(
        self, local_files: dict[str, Path], remote_paths: set[str]
    ) -> list[SyncDecision]:
        """Select local files with no object in the current listing.

        Args:
            local_files: Mapping of relative path to local path
            remote_paths: Relative paths seen in the listing

        Returns:
            DELETE_LOCAL decisions, sorted by relative path
        """
        return [
            SyncDecision(
                action=SyncAction.DELETE_LOCAL,
                reason="File deleted from bucket",
                relative_path=path,
                local_path=local_files[path],
            )
            for path in sorted(local_files)
            if path not in remote_paths
        ]

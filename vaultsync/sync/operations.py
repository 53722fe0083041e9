"""Filesystem side of sync: download, timestamp and delete local files."""

import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import DeleteError, MkdirError, WriteError
from ..utils import DOWNLOAD_CHUNK_SIZE
from .scanner import RemoteObject

if TYPE_CHECKING:
    from ..storage import S3Storage


class SyncOperations:
    """Unified operations for applying sync decisions to the local tree."""

    def __init__(self, storage: "S3Storage"):
        """Initialize sync operations.

        Args:
            storage: Object store to fetch from
        """
        self.storage = storage

    def download_file(self, remote_object: RemoteObject, local_path: Path) -> Path:
        """Download a remote object to a local path.

        Parent directories are created as needed; an existing file is
        truncated and overwritten.

        Args:
            remote_object: Object to fetch
            local_path: Destination path

        Returns:
            Path where the file was saved

        Raises:
            MkdirError: If the parent directory cannot be created
            FetchError: If the object cannot be fetched or read
            WriteError: If the local file cannot be created or written
        """
        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MkdirError(
                local_path.parent, f"failed to create directory: {e}"
            ) from e

        with self.storage.get_object(remote_object.key) as body:
            try:
                fh = open(local_path, "wb")
            except OSError as e:
                raise WriteError(local_path, f"failed to create file: {e}") from e
            with fh:
                try:
                    shutil.copyfileobj(body, fh, DOWNLOAD_CHUNK_SIZE)
                except OSError as e:
                    raise WriteError(local_path, f"failed to write file: {e}") from e

        return local_path

    def set_mtime(self, local_path: Path, remote_object: RemoteObject) -> None:
        """Set a file's access and modification time to the remote one.

        Raises:
            OSError: If the timestamps cannot be changed
        """
        mtime_ns = remote_object.mtime_ns
        os.utime(local_path, ns=(mtime_ns, mtime_ns))

    def delete_local(self, local_path: Path) -> None:
        """Delete a local file.

        Raises:
            DeleteError: If the file cannot be removed
        """
        try:
            local_path.unlink()
        except OSError as e:
            raise DeleteError(local_path, f"failed to delete file: {e}") from e

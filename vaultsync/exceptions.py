"""Exceptions raised by vault-sync."""


class VaultSyncError(Exception):
    """Base exception for all vault-sync errors."""


class ConfigError(VaultSyncError):
    """Invalid settings, unknown AWS profile or missing credentials."""


class StorageError(VaultSyncError):
    """Error talking to the remote object store."""


class ListError(StorageError):
    """Listing the objects under a prefix failed."""


class FetchError(StorageError):
    """Fetching or reading a single object failed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


class LocalFileError(VaultSyncError):
    """Error touching the local filesystem."""

    def __init__(self, path: object, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class MkdirError(LocalFileError):
    """A parent directory could not be created."""


class WriteError(LocalFileError):
    """A local file could not be created or written."""


class DeleteError(LocalFileError):
    """A local file could not be deleted."""


class ArchiveError(VaultSyncError):
    """Creating a vault archive failed."""

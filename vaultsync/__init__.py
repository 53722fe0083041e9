"""vault-sync - mirror Obsidian vaults from S3 and keep rotating backups."""

from .archive import ArchiveEntry, ArchiveManager
from .config import SyncSettings, normalize_vault_path, vault_name_from_prefix
from .exceptions import (
    ArchiveError,
    ConfigError,
    DeleteError,
    FetchError,
    ListError,
    LocalFileError,
    MkdirError,
    StorageError,
    VaultSyncError,
    WriteError,
)
from .storage import S3Storage
from .sync import SyncEngine, SyncStats

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "ArchiveEntry",
    "ArchiveManager",
    "S3Storage",
    "SyncEngine",
    "SyncSettings",
    "SyncStats",
    "normalize_vault_path",
    "vault_name_from_prefix",
    "VaultSyncError",
    "ConfigError",
    "StorageError",
    "ListError",
    "FetchError",
    "LocalFileError",
    "MkdirError",
    "WriteError",
    "DeleteError",
    "ArchiveError",
]

"""Sync engine for vault-sync - one-way mirroring of a bucket prefix."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .operations import SyncOperations
from .results import SyncOutcome, SyncResult, SyncStats
from .scanner import (
    DirectoryScanner,
    LocalFileState,
    RemoteObject,
    is_safe_relative_path,
)

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "DirectoryScanner",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "SyncOutcome",
    "SyncResult",
    "SyncStats",
    "LocalFileState",
    "RemoteObject",
    "is_safe_relative_path",
]

"""Vault archives and their retention."""

from .manager import ArchiveEntry, ArchiveManager

__all__ = ["ArchiveEntry", "ArchiveManager"]

"""Utility functions for vault-sync."""

from datetime import datetime, timedelta, timezone
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Wall-clock budget for all remote calls of one run (seconds)
DEFAULT_TIMEOUT: float = 30.0

# Number of archives kept per vault (0 keeps all)
DEFAULT_TAR_KEEP: int = 5

DEFAULT_REGION: str = "us-east-1"
DEFAULT_VAULT_DIR: str = "./vault"

# Sortable layout: lexicographic order equals chronological order
ARCHIVE_TIMESTAMP_FORMAT: str = "%Y-%m-%d_%H-%M-%S"
ARCHIVE_EXTENSION: str = "tar.gz"

# Copy buffer for object downloads (1 MB)
DOWNLOAD_CHUNK_SIZE: int = 1024 * 1024

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NS_PER_MICROSECOND = 1000


# =============================================================================
# Timestamp utilities
# =============================================================================


def datetime_to_ns(dt: datetime) -> int:
    """Convert a datetime to integer nanoseconds since the Unix epoch.

    The conversion is exact (no float rounding), which keeps timestamps
    written with ``os.utime(ns=...)`` comparable to ``st_mtime_ns``.

    Args:
        dt: Timezone-aware datetime. Naive datetimes are taken as UTC,
            which is what S3 reports.

    Returns:
        Nanoseconds since 1970-01-01T00:00:00Z
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return ((dt - _EPOCH) // timedelta(microseconds=1)) * _NS_PER_MICROSECOND


def format_archive_timestamp(dt: Optional[datetime] = None) -> str:
    """Format a datetime for use in an archive filename.

    Args:
        dt: Time to format (defaults to now, local time)

    Returns:
        Timestamp such as ``2024-01-07_00-00-00``
    """
    if dt is None:
        dt = datetime.now()
    return dt.strftime(ARCHIVE_TIMESTAMP_FORMAT)


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "1.5 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def size_in_mb(size_bytes: int) -> str:
    """Size in megabytes with two decimals, as logged for archives."""
    return f"{size_bytes / (1024 * 1024):.2f}"

"""Run settings and vault path handling."""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from .exceptions import ConfigError
from .utils import (
    DEFAULT_REGION,
    DEFAULT_TAR_KEEP,
    DEFAULT_TIMEOUT,
    DEFAULT_VAULT_DIR,
)


def normalize_vault_path(vault_path: str) -> str:
    """Normalize a remote vault prefix.

    The prefix loses any leading slash and gains exactly one trailing slash,
    so ``/vault/notes`` and ``vault/notes/`` both become ``vault/notes/``.

    Args:
        vault_path: Prefix as typed by the user

    Returns:
        Normalized prefix

    Raises:
        ConfigError: If nothing is left after normalization
    """
    normalized = vault_path.strip().strip("/")
    if not normalized:
        raise ConfigError(f"Invalid vault path: {vault_path!r}")
    return normalized + "/"


def vault_name_from_prefix(prefix: str) -> str:
    """Return the vault name (last segment) of a normalized prefix."""
    return PurePosixPath(prefix.rstrip("/")).name


def split_vault_paths(values: Iterable[str]) -> list[str]:
    """Flatten repeated and comma separated ``--vault-path`` values.

    Duplicates are dropped, first occurrence wins.
    """
    paths: list[str] = []
    for value in values:
        for part in value.split(","):
            if not part.strip():
                continue
            normalized = normalize_vault_path(part)
            if normalized not in paths:
                paths.append(normalized)
    return paths


@dataclass
class SyncSettings:
    """Settings for one ``vault-sync run`` invocation."""

    bucket: str
    """S3 bucket holding the vaults"""

    vault_paths: list[str] = field(default_factory=list)
    """Normalized remote prefixes, one per vault"""

    aws_profile: Optional[str] = None
    """Named profile from ~/.aws/credentials (None uses the default chain)"""

    region: str = DEFAULT_REGION
    """AWS region"""

    create_archive: bool = False
    """Package each synced vault into a tar.gz archive"""

    delete: bool = False
    """Delete local files that no longer exist in the bucket"""

    vault_dir: Path = Path(DEFAULT_VAULT_DIR)
    """Parent directory of the local vault trees"""

    tar_dir: Optional[Path] = None
    """Directory for archives (None means the current directory)"""

    tar_keep: int = DEFAULT_TAR_KEEP
    """Archives kept per vault, 0 keeps all"""

    timeout: float = DEFAULT_TIMEOUT
    """Wall-clock budget in seconds for all remote calls of the run"""

    dry_run: bool = False
    """Only report what would change"""

    def __post_init__(self) -> None:
        if isinstance(self.vault_dir, str):
            self.vault_dir = Path(self.vault_dir)
        if isinstance(self.tar_dir, str):
            self.tar_dir = Path(self.tar_dir) if self.tar_dir else None
        self.validate()

    def validate(self) -> None:
        """Check the settings for consistency.

        Raises:
            ConfigError: If a setting is missing or out of range
        """
        if not self.bucket:
            raise ConfigError("A bucket is required")
        if not self.vault_paths:
            raise ConfigError("At least one vault path is required")
        if self.tar_keep < 0:
            raise ConfigError("--tar-keep must be 0 or greater")
        if self.timeout <= 0:
            raise ConfigError("--timeout must be greater than 0")

        names = [vault_name_from_prefix(p) for p in self.vault_paths]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigError(
                "Vault paths must have distinct names, duplicated: "
                + ", ".join(duplicates)
            )

    def local_dir_for(self, prefix: str) -> Path:
        """Local directory a vault prefix is mirrored into."""
        return self.vault_dir / vault_name_from_prefix(prefix)

"""CLI interface for vault-sync."""

import logging
from typing import Any, Optional

import click

from . import __version__
from .archive import ArchiveManager
from .config import SyncSettings, split_vault_paths, vault_name_from_prefix
from .exceptions import ArchiveError, ConfigError, ListError, MkdirError
from .output import OutputFormatter
from .storage import S3Storage
from .sync import SyncEngine
from .utils import (
    DEFAULT_REGION,
    DEFAULT_TAR_KEEP,
    DEFAULT_TIMEOUT,
    DEFAULT_VAULT_DIR,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Chatty third-party loggers, only shown at debug level
_QUIET_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def configure_logging(level_name: str) -> None:
    """Configure logging for a CLI run.

    Args:
        level_name: One of debug, info, warn, error
    """
    level = LOG_LEVELS[level_name.lower()]
    if level == logging.DEBUG:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("vaultsync").setLevel(level)


@click.group()
@click.version_option(version=__version__, prog_name="vault-sync")
def main() -> None:
    """vault-sync - Sync Obsidian vaults from S3 and manage tar backups."""


@main.command()
@click.option(
    "--bucket",
    "-b",
    envvar="VAULT_SYNC_BUCKET",
    required=True,
    help="S3 bucket to fetch the vaults from",
)
@click.option(
    "--vault-path",
    "-v",
    "vault_paths",
    multiple=True,
    required=True,
    help="Vault prefix in the bucket; repeat or comma separate for several vaults",
)
@click.option(
    "--aws-profile",
    "-p",
    envvar="AWS_PROFILE",
    default=None,
    help="AWS profile to use from ~/.aws/credentials",
)
@click.option(
    "--region",
    "-r",
    envvar="AWS_REGION",
    default=DEFAULT_REGION,
    show_default=True,
    help="AWS region",
)
@click.option(
    "--tar",
    "-t",
    "create_archive",
    is_flag=True,
    help="Create a tar.gz backup of each vault after syncing",
)
@click.option(
    "--delete",
    is_flag=True,
    help="Delete local files that no longer exist in S3",
)
@click.option(
    "--vault-dir",
    default=DEFAULT_VAULT_DIR,
    show_default=True,
    type=click.Path(file_okay=False),
    help="Directory the vaults are synced into (one subdirectory per vault)",
)
@click.option(
    "--tar-dir",
    default="",
    type=click.Path(file_okay=False),
    help="Directory for tar.gz backups (default: current directory)",
)
@click.option(
    "--tar-keep",
    type=int,
    default=DEFAULT_TAR_KEEP,
    show_default=True,
    help="Number of backups to keep per vault (0 keeps all)",
)
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Time budget in seconds for all S3 calls of the run",
)
@click.option(
    "--log-level",
    type=click.Choice(list(LOG_LEVELS), case_sensitive=False),
    default="info",
    show_default=True,
    help="Log level",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without syncing"
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def run(
    ctx: Any,
    bucket: str,
    vault_paths: tuple[str, ...],
    aws_profile: Optional[str],
    region: str,
    create_archive: bool,
    delete: bool,
    vault_dir: str,
    tar_dir: str,
    tar_keep: int,
    timeout: float,
    log_level: str,
    dry_run: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Sync vaults from S3 to local directories.

    Each vault prefix is mirrored into VAULT_DIR/<vault name>, where the
    vault name is the last segment of the prefix.

    Examples:
        vault-sync run -b my-bucket -v vaults/notes
        vault-sync run -b my-bucket -v vaults/notes,vaults/work --delete
        vault-sync run -b my-bucket -v vaults/notes --tar --tar-dir ./backups
        vault-sync run -b my-bucket -v vaults/notes --dry-run --json
    """
    configure_logging(log_level)
    out = OutputFormatter(json_output=json_output, quiet=quiet)

    try:
        settings = SyncSettings(
            bucket=bucket,
            vault_paths=split_vault_paths(vault_paths),
            aws_profile=aws_profile,
            region=region,
            create_archive=create_archive,
            delete=delete,
            vault_dir=vault_dir,
            tar_dir=tar_dir,
            tar_keep=tar_keep,
            timeout=timeout,
            dry_run=dry_run,
        )
        out.info("Loading AWS configuration...")
        storage = S3Storage.from_profile(
            settings.bucket,
            profile=settings.aws_profile,
            region=settings.region,
            timeout=settings.timeout,
        )
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    if settings.dry_run:
        out.info("Dry run: No changes will be made")

    logger.debug("Run settings: %s", settings)
    engine = SyncEngine(storage, out)
    archiver = ArchiveManager()

    reports = [
        _sync_vault(settings, prefix, engine, archiver, out)
        for prefix in settings.vault_paths
    ]
    failed = [r for r in reports if r["error"]]

    if json_output:
        out.output_json(
            {
                "bucket": settings.bucket,
                "dry_run": settings.dry_run,
                "vaults": reports,
            }
        )
    else:
        _display_run_summary(reports, out)

    if failed:
        ctx.exit(1)


def _sync_vault(
    settings: SyncSettings,
    prefix: str,
    engine: SyncEngine,
    archiver: ArchiveManager,
    out: OutputFormatter,
) -> dict:
    """Sync one vault and optionally archive it.

    Listing and archive failures are reported here and recorded in the
    returned report so the remaining vaults still run.

    Args:
        settings: Run settings
        prefix: Normalized vault prefix
        engine: Sync engine
        archiver: Archive manager
        out: Output formatter

    Returns:
        Report dictionary for this vault
    """
    name = vault_name_from_prefix(prefix)
    local_dir = settings.local_dir_for(prefix)
    report: dict[str, Any] = {
        "vault": name,
        "prefix": prefix,
        "local_dir": str(local_dir),
        "stats": None,
        "archive": None,
        "pruned": [],
        "error": None,
    }

    out.info(f"Syncing vault from s3://{settings.bucket}/{prefix} to {local_dir}")
    try:
        stats = engine.sync(
            prefix,
            local_dir,
            delete_extraneous=settings.delete,
            dry_run=settings.dry_run,
        )
    except (ListError, MkdirError) as e:
        out.error(f"Failed to sync {prefix}: {e}")
        report["error"] = str(e)
        return report

    report["stats"] = stats.to_dict()
    if stats.failed:
        out.warning(f"{stats.failed} file(s) of {name} could not be synced")
    out.success(f"✓ Vault sync completed: {local_dir}")

    if not settings.create_archive:
        return report
    if settings.dry_run:
        out.info("Dry run: skipping archive")
        return report

    try:
        output_dir, archive_path = archiver.create_archive(
            local_dir, name, settings.tar_dir
        )
    except ArchiveError as e:
        out.error(f"Failed to create archive for {name}: {e}")
        report["error"] = str(e)
        return report

    report["archive"] = str(archive_path)
    out.success(f"✓ Archive created: {archive_path}")

    removed = archiver.prune_archives(output_dir, name, settings.tar_keep)
    report["pruned"] = [str(path) for path in removed]
    return report


def _display_run_summary(reports: list[dict], out: OutputFormatter) -> None:
    """Print totals over all vaults of the run."""
    totals = {"downloaded": 0, "skipped": 0, "deleted": 0, "failed": 0}
    for report in reports:
        for key, value in (report["stats"] or {}).items():
            totals[key] += value

    ok = sum(1 for r in reports if not r["error"])
    rows: list[tuple[str, Any]] = [
        ("Vaults", f"{ok}/{len(reports)} succeeded"),
        ("Downloaded", totals["downloaded"]),
        ("Skipped", totals["skipped"]),
        ("Deleted", totals["deleted"]),
        ("Failed", totals["failed"]),
    ]
    archives = [r["archive"] for r in reports if r["archive"]]
    if archives:
        rows.append(("Archives", ", ".join(archives)))
    out.print_summary("Run Complete", rows)


if __name__ == "__main__":
    main()

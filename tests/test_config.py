"""Tests for run settings and vault path handling."""

from pathlib import Path

import pytest

from vaultsync.config import (
    SyncSettings,
    normalize_vault_path,
    split_vault_paths,
    vault_name_from_prefix,
)
from vaultsync.exceptions import ConfigError


class TestNormalizeVaultPath:
    @pytest.mark.parametrize(
        "value",
        ["vault/notes", "vault/notes/", "/vault/notes", "  /vault/notes//  "],
    )
    def test_normalized_forms(self, value):
        assert normalize_vault_path(value) == "vault/notes/"

    def test_single_segment(self):
        assert normalize_vault_path("notes") == "notes/"

    @pytest.mark.parametrize("value", ["", "/", "  ", "///"])
    def test_empty_is_rejected(self, value):
        with pytest.raises(ConfigError):
            normalize_vault_path(value)


class TestVaultName:
    def test_last_segment(self):
        assert vault_name_from_prefix("vault/notes/") == "notes"

    def test_single_segment(self):
        assert vault_name_from_prefix("work/") == "work"


class TestSplitVaultPaths:
    def test_comma_separated_and_repeated(self):
        values = ("vault/notes,vault/work", "archive/old")

        assert split_vault_paths(values) == [
            "vault/notes/",
            "vault/work/",
            "archive/old/",
        ]

    def test_duplicates_dropped(self):
        assert split_vault_paths(["a/b", "/a/b/", "a/b,c"]) == ["a/b/", "c/"]

    def test_blank_parts_ignored(self):
        assert split_vault_paths(["a, ,b,"]) == ["a/", "b/"]


class TestSyncSettings:
    def test_defaults(self):
        settings = SyncSettings(bucket="my-bucket", vault_paths=["vault/notes/"])

        assert settings.vault_dir == Path("./vault")
        assert settings.tar_dir is None
        assert settings.tar_keep == 5
        assert settings.timeout == 30.0
        assert settings.region == "us-east-1"
        assert not settings.delete
        assert not settings.create_archive

    def test_strings_become_paths(self):
        settings = SyncSettings(
            bucket="b", vault_paths=["n/"], vault_dir="/data", tar_dir="/backups"
        )

        assert settings.vault_dir == Path("/data")
        assert settings.tar_dir == Path("/backups")

    def test_empty_tar_dir_is_none(self):
        settings = SyncSettings(bucket="b", vault_paths=["n/"], tar_dir="")

        assert settings.tar_dir is None

    def test_local_dir_for(self):
        settings = SyncSettings(bucket="b", vault_paths=["v/notes/"], vault_dir="/d")

        assert settings.local_dir_for("v/notes/") == Path("/d/notes")

    def test_missing_bucket(self):
        with pytest.raises(ConfigError, match="bucket"):
            SyncSettings(bucket="", vault_paths=["n/"])

    def test_missing_vault_paths(self):
        with pytest.raises(ConfigError, match="vault path"):
            SyncSettings(bucket="b", vault_paths=[])

    def test_negative_tar_keep(self):
        with pytest.raises(ConfigError, match="tar-keep"):
            SyncSettings(bucket="b", vault_paths=["n/"], tar_keep=-1)

    def test_zero_tar_keep_allowed(self):
        assert SyncSettings(bucket="b", vault_paths=["n/"], tar_keep=0).tar_keep == 0

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError, match="timeout"):
            SyncSettings(bucket="b", vault_paths=["n/"], timeout=0)

    def test_duplicate_vault_names(self):
        """Two prefixes ending in the same name would share a directory."""
        with pytest.raises(ConfigError, match="notes"):
            SyncSettings(bucket="b", vault_paths=["a/notes/", "b/notes/"])

"""Tests for the directory scanner and file metadata."""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from vaultsync.sync import SyncOutcome, SyncResult, SyncStats
from vaultsync.sync.scanner import (
    DirectoryScanner,
    LocalFileState,
    RemoteObject,
    is_safe_relative_path,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestRemoteObject:
    """Tests for RemoteObject."""

    def test_relative_path_strips_prefix(self):
        obj = RemoteObject("vault/notes/sub/a.md", 1, datetime.now(timezone.utc))

        assert obj.relative_path("vault/notes/") == "sub/a.md"

    def test_relative_path_drops_empty_and_dot_segments(self):
        now = datetime.now(timezone.utc)
        leading = RemoteObject("vault/notes//x.md", 1, now)
        inner = RemoteObject("vault/notes/a//./b.md", 1, now)

        assert leading.relative_path("vault/notes/") == "x.md"
        assert inner.relative_path("vault/notes/") == "a/b.md"

    def test_relative_path_keeps_parent_segments(self):
        obj = RemoteObject("vault/notes/../x.md", 1, datetime.now(timezone.utc))

        assert obj.relative_path("vault/notes/") == "../x.md"

    def test_directory_marker(self):
        marker = RemoteObject("vault/notes/sub/", 0, datetime.now(timezone.utc))
        regular = RemoteObject("vault/notes/sub", 0, datetime.now(timezone.utc))

        assert marker.is_directory_marker
        assert not regular.is_directory_marker

    def test_mtime_ns(self):
        obj = RemoteObject("k", 1, datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))

        assert obj.mtime_ns == 1_000_000_000


class TestLocalFileState:
    """Tests for LocalFileState.from_path."""

    def test_regular_file(self, temp_dir):
        path = temp_dir / "a.md"
        path.write_bytes(b"12345")
        os.utime(path, ns=(1_500_000_000_000_000_000, 1_500_000_000_000_000_000))

        state = LocalFileState.from_path(path)

        assert state.size == 5
        assert state.mtime_ns == 1_500_000_000_000_000_000

    def test_missing_file(self, temp_dir):
        assert LocalFileState.from_path(temp_dir / "missing.md") is None

    def test_directory_is_not_a_file(self, temp_dir):
        (temp_dir / "sub").mkdir()

        assert LocalFileState.from_path(temp_dir / "sub") is None

    def test_parent_is_a_file(self, temp_dir):
        (temp_dir / "sub").write_text("file")

        assert LocalFileState.from_path(temp_dir / "sub" / "a.md") is None

    def test_name_too_long(self, temp_dir):
        """Stat errors other than a missing file also mean no local copy."""
        assert LocalFileState.from_path(temp_dir / ("x" * 300 + ".md")) is None


class TestIsSafeRelativePath:
    """Tests for is_safe_relative_path."""

    @pytest.mark.parametrize("path", ["a.md", "sub/a.md", "a..b.md", ".hidden/x"])
    def test_safe(self, path):
        assert is_safe_relative_path(path)

    @pytest.mark.parametrize("path", ["", "/etc/passwd", "../a.md", "sub/../../a"])
    def test_unsafe(self, path):
        assert not is_safe_relative_path(path)


class TestDirectoryScanner:
    """Tests for DirectoryScanner.scan_local."""

    def test_scan_nested_files(self, temp_dir):
        (temp_dir / "sub" / "deeper").mkdir(parents=True)
        (temp_dir / "a.md").write_text("a")
        (temp_dir / "sub" / "b.md").write_text("b")
        (temp_dir / "sub" / "deeper" / "c.md").write_text("c")

        files = DirectoryScanner().scan_local(temp_dir)

        assert list(files) == ["a.md", "sub/b.md", "sub/deeper/c.md"]
        assert files["sub/b.md"] == temp_dir / "sub" / "b.md"

    def test_directories_are_not_reported(self, temp_dir):
        (temp_dir / "empty").mkdir()

        assert DirectoryScanner().scan_local(temp_dir) == {}

    def test_missing_directory(self, temp_dir):
        assert DirectoryScanner().scan_local(temp_dir / "missing") == {}

    def test_symlinks_are_skipped(self, temp_dir):
        target = temp_dir / "target.md"
        target.write_text("t")
        (temp_dir / "link.md").symlink_to(target)

        files = DirectoryScanner().scan_local(temp_dir)

        assert list(files) == ["target.md"]


class TestSyncStats:
    """Tests for folding results into statistics."""

    def test_from_results(self):
        results = [
            SyncResult("a.md", SyncOutcome.DOWNLOADED),
            SyncResult("b.md", SyncOutcome.SKIPPED),
            SyncResult("c.md", SyncOutcome.FAILED, "boom"),
            SyncResult("d.md", SyncOutcome.DELETED),
            SyncResult("e.md", SyncOutcome.DELETE_FAILED, "denied"),
        ]

        stats = SyncStats.from_results(results)

        assert stats == SyncStats(downloaded=1, skipped=1, deleted=1, failed=1)
        assert [r.relative_path for r in stats.failures] == ["c.md"]
        assert stats.to_dict() == {
            "downloaded": 1,
            "skipped": 1,
            "deleted": 1,
            "failed": 1,
        }

    def test_empty(self):
        assert SyncStats.from_results([]) == SyncStats()

"""Per-file sync outcomes and the statistics folded from them."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class SyncOutcome(str, Enum):
    """What actually happened to one file."""

    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"
    """Deletion failed; logged, but not counted as a failure"""


@dataclass(frozen=True)
class SyncResult:
    """Outcome for one relative path."""

    relative_path: str
    outcome: SyncOutcome
    error: Optional[str] = None


@dataclass(frozen=True)
class SyncStats:
    """Counters for one sync run.

    Built once from the list of results at the end of the run and never
    mutated afterwards.
    """

    downloaded: int = 0
    skipped: int = 0
    deleted: int = 0
    failed: int = 0
    results: tuple[SyncResult, ...] = field(default=(), compare=False, repr=False)

    @classmethod
    def from_results(cls, results: Iterable[SyncResult]) -> "SyncStats":
        """Fold per-file results into counters."""
        results = tuple(results)
        counts = Counter(result.outcome for result in results)
        return cls(
            downloaded=counts[SyncOutcome.DOWNLOADED],
            skipped=counts[SyncOutcome.SKIPPED],
            deleted=counts[SyncOutcome.DELETED],
            failed=counts[SyncOutcome.FAILED],
            results=results,
        )

    @property
    def failures(self) -> list[SyncResult]:
        """Results that count towards ``failed``."""
        return [r for r in self.results if r.outcome == SyncOutcome.FAILED]

    def to_dict(self) -> dict:
        """Convert counters to a dictionary for JSON output."""
        return {
            "downloaded": self.downloaded,
            "skipped": self.skipped,
            "deleted": self.deleted,
            "failed": self.failed,
        }

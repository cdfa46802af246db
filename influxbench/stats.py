"""
Per-round timing history and the statistics derived from it.
"""

import statistics
from dataclasses import dataclass
from typing import List, Optional

from influxbench.errors import EmptyStatsError


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one completed round."""

    round_index: int
    elapsed_ms: int


@dataclass(frozen=True)
class RunStatistics:
    """Aggregate view over the recorded rounds."""

    rounds: int
    average_ms: float
    max_ms: int

    def __str__(self) -> str:
        return f"Avg:{self.average_ms:.2f} Max:{self.max_ms}"


class StatsAccumulator:
    """Append-only history of round elapsed times.

    Only the coordinating coroutine records into it, so it carries no locking.
    """

    def __init__(self):
        self._elapsed: List[int] = []

    def __len__(self) -> int:
        return len(self._elapsed)

    @property
    def elapsed(self) -> List[int]:
        return list(self._elapsed)

    def record(self, elapsed_ms: int) -> None:
        if elapsed_ms < 0:
            raise ValueError(f"Elapsed time cannot be negative: {elapsed_ms}")
        self._elapsed.append(elapsed_ms)

    def average(self) -> float:
        if not self._elapsed:
            raise EmptyStatsError("No rounds recorded")
        return statistics.fmean(self._elapsed)

    def max(self) -> int:
        if not self._elapsed:
            raise EmptyStatsError("No rounds recorded")
        return max(self._elapsed)

    def snapshot(self) -> Optional[RunStatistics]:
        """Current statistics, or None before the first round."""
        if not self._elapsed:
            return None
        return RunStatistics(rounds=len(self._elapsed), average_ms=self.average(), max_ms=self.max())

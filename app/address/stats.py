"""Process-wide correction statistics with a bounded history."""

import threading
from collections import deque
from datetime import UTC, datetime

from app.address.decomposer import split_segments
from app.address.types import (
    CorrectionCounters,
    CorrectionResult,
    HistoryEntry,
    StatsSnapshot,
)

DEFAULT_HISTORY_SIZE = 100
DEFAULT_RECENT_COUNT = 10


class StatsTracker:
    """Counters and rolling history of processed addresses.

    One instance is shared by every request in the process. Updates hold a
    lock and never await, so concurrent requests cannot lose an increment
    or interleave history trimming.
    """

    def __init__(
        self,
        history_size: int = DEFAULT_HISTORY_SIZE,
        recent_count: int = DEFAULT_RECENT_COUNT,
    ) -> None:
        if history_size <= 0:
            raise ValueError("History size must be positive")
        if recent_count <= 0:
            raise ValueError("Recent count must be positive")
        self.history_size = history_size
        self.recent_count = recent_count
        self._lock = threading.Lock()
        self._counters = CorrectionCounters()
        self._history: deque[HistoryEntry] = deque(maxlen=history_size)

    def record(self, original: str, result: CorrectionResult) -> HistoryEntry:
        """Record one correction call.

        Args:
            original: The raw address sent for correction
            result: The correction outcome, degraded or not

        Returns:
            The history entry that was appended
        """
        entry = HistoryEntry(
            original=original,
            corrected=result.corrected_address,
            timestamp=datetime.now(UTC).isoformat(),
        )
        added_components = len(split_segments(result.corrected_address)) > len(
            split_segments(original)
        )

        with self._lock:
            self._counters.total_processed += 1
            if result.corrections:
                self._counters.spelling_corrected += 1
            if added_components:
                self._counters.missing_components_added += 1
            self._history.append(entry)

        return entry

    def snapshot(self) -> StatsSnapshot:
        """Current counters plus the most recent history entries."""
        with self._lock:
            counters = self._counters.model_copy()
            recent = list(self._history)[-self.recent_count :]
        return StatsSnapshot(stats=counters, recent_addresses=recent)

    def history(self) -> list[HistoryEntry]:
        """Full retained history, oldest first."""
        with self._lock:
            return list(self._history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

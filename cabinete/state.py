"""
Shared progress counters updated by the organizer thread.
"""

import threading
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict

BucketKey = Tuple[str, ...]


class StateSnapshot(BaseModel):
    """Consistent copy of the counters taken under the lock."""
    model_config = ConfigDict(frozen=True)

    total_files: int = 0
    processed_files: int = 0
    failed_files: int = 0

    @property
    def pending_files(self) -> int:
        return max(self.total_files - self.processed_files - self.failed_files, 0)


class AggregateState:
    """Totals and per-bucket counts guarded by a single lock.

    The sum of bucket counts always equals processed_files: both are changed
    in the same critical section. Nothing in here does I/O.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.total_files = 0
        self.processed_files = 0
        self.failed_files = 0
        self.bucket_counts: Dict[BucketKey, int] = {}

    def _snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            total_files=self.total_files,
            processed_files=self.processed_files,
            failed_files=self.failed_files,
        )

    def set_total(self, total: int) -> StateSnapshot:
        with self._lock:
            self.total_files = total
            return self._snapshot()

    def record_moved(self, bucket: BucketKey) -> Tuple[int, StateSnapshot]:
        """Count a processed file; returns the bucket's new count and a snapshot."""
        with self._lock:
            count = self.bucket_counts.get(bucket, 0) + 1
            self.bucket_counts[bucket] = count
            self.processed_files += 1
            return count, self._snapshot()

    def record_failed(self) -> StateSnapshot:
        with self._lock:
            self.failed_files += 1
            return self._snapshot()

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return self._snapshot()

    def bucket_totals(self) -> Dict[BucketKey, int]:
        with self._lock:
            return dict(self.bucket_counts)

"""Thread-safe progress counter for one scan."""

import threading

from ..models.scan import ProgressSnapshot


class ProgressTracker:
    """Counts processed hosts against a total fixed at construction.

    Only integers are stored; the percentage is derived by whoever displays it.
    """

    def __init__(self, total: int):
        if total < 0:
            raise ValueError("Total must not be negative.")
        self.total = total
        self._processed = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Count one processed host and return the new count, capped at `total`."""
        with self._lock:
            if self._processed < self.total:
                self._processed += 1
            return self._processed

    @property
    def processed(self) -> int:
        with self._lock:
            return self._processed

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return ProgressSnapshot(processed=self._processed, total=self.total)

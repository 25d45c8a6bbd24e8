"""In-memory, append-only storage for normalized samples."""

from __future__ import annotations

from functools import lru_cache
from threading import Lock
from typing import List, Optional

from models.records import Sample


class SampleStore:
    """Append-only, in-memory sequence of samples in ingestion order.

    Nothing is ever evicted; the store grows for the lifetime of the process.
    """

    def __init__(self) -> None:
        self._samples: List[Sample] = []
        self._lock = Lock()

    def append(self, sample: Sample) -> None:
        with self._lock:
            self._samples.append(sample)

    def snapshot(self) -> list[Sample]:
        """Return a copy of the stored samples, safe to iterate while ingesting."""

        with self._lock:
            return list(self._samples)

    def latest(self) -> Optional[Sample]:
        with self._lock:
            if not self._samples:
                return None
            return self._samples[-1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)


@lru_cache
def build_default_store() -> SampleStore:
    return SampleStore()

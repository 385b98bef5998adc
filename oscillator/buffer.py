"""Real-time sample buffer: bounded FIFO window of solver outputs.

Owned by a single SimulationSession. append() and reset() are the only
mutators and assume a single writer; a multi-threaded host must guard
them with its own lock.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator

import numpy as np

from simulation import Sample

logger = logging.getLogger(__name__)

BUFFER_CAPACITY = 500


class SampleBuffer:
    """Sliding window holding the most recent *capacity* samples."""

    def __init__(self, capacity: int = BUFFER_CAPACITY):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._samples: deque[Sample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(tuple(self._samples))

    @property
    def latest(self) -> Sample | None:
        return self._samples[-1] if self._samples else None

    def append(self, sample: Sample) -> None:
        """Push one sample, evicting the oldest once at capacity."""
        self._samples.append(sample)

    def reset(self) -> None:
        self._samples.clear()
        logger.debug("Sample buffer cleared")

    def samples(self) -> tuple[Sample, ...]:
        """Snapshot of the window, oldest first."""
        return tuple(self._samples)

    def to_arrays(self) -> dict[str, np.ndarray]:
        """Columnar float64 arrays keyed by Sample field, for charting.

        The arrays are copies; writing to them never touches the buffer.
        """
        if not self._samples:
            return {name: np.empty(0, dtype=np.float64) for name in Sample._fields}
        table = np.array(self._samples, dtype=np.float64)  # (n, 8)
        return {name: table[:, i].copy() for i, name in enumerate(Sample._fields)}

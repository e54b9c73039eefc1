"""
Sample Window
=============

Fixed-capacity batch of (offset, latency) observations collected between
two averaging passes.
"""

from typing import List, NamedTuple

from .config import ConfigError


class Sample(NamedTuple):
    offset_ms: int
    latency_ms: int


class SampleWindow:
    """Ordered buffer of samples that is emptied as a whole.

    Args:
        capacity: Number of samples that makes the window full (>= 2).
    """

    def __init__(self, capacity: int):
        if capacity < 2:
            raise ConfigError(f"Window capacity must be >= 2, got {capacity}")
        self._capacity = capacity
        self._samples: List[Sample] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def full(self) -> bool:
        return len(self._samples) >= self._capacity

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, sample: Sample) -> bool:
        """Add a sample in arrival order.

        Returns:
            True once the window has reached capacity and should be drained.
        """
        if self.full:
            raise OverflowError(f"Window already holds {self._capacity} samples")
        self._samples.append(sample)
        return self.full

    def offsets(self) -> List[int]:
        return [s.offset_ms for s in self._samples]

    def latencies(self) -> List[int]:
        return [s.latency_ms for s in self._samples]

    def drain(self) -> List[Sample]:
        """Return all samples (arrival order) and empty the window."""
        samples, self._samples = self._samples, []
        return samples

"""
Statistics Tracker
==================

Debug view of the clock estimator: current virtual time and tick, latest
latency figures, and a sliding window of published latency averages.
"""

from collections import deque
from typing import Optional

from .compression import LZ4Codec
from .sync_processor import LatencySnapshot, SyncProcessor
from .virtual_clock import VirtualClock


class ClockStats:
    """Sliding-window latency history plus a one-line debug readout.

    Args:
        clock:     Clock whose time and tick are displayed.
        processor: Source of latency publications.
        codec:     Optional codec whose compression ratio is displayed.
        window:    Number of recent latency averages to keep.
    """

    def __init__(self, clock: VirtualClock, processor: SyncProcessor,
                 codec: Optional[LZ4Codec] = None, window: int = 20):
        self._clock = clock
        self._processor = processor
        self._codec = codec
        self._averages: deque[int] = deque(maxlen=window)
        self._jitters: deque[int] = deque(maxlen=window)
        self.publications: int = 0

    def attach(self):
        self._processor.add_latency_listener(self.record)

    def detach(self):
        self._processor.remove_latency_listener(self.record)

    def record(self, snapshot: LatencySnapshot):
        """Latency listener: store one published window result."""
        self._averages.append(snapshot.average_latency_ms)
        self._jitters.append(snapshot.jitter_ms)
        self.publications += 1

    @staticmethod
    def _avg(d: deque) -> float:
        """Average of a deque, or 0.0 if empty."""
        return sum(d) / len(d) if d else 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self._avg(self._averages)

    @property
    def avg_jitter_ms(self) -> float:
        return self._avg(self._jitters)

    def __str__(self) -> str:
        p = self._processor
        text = (
            f"time={self._clock.current_time_ms}ms tick={self._clock.current_tick} "
            f"lat={p.immediate_latency_ms}ms avg={p.average_latency_ms}ms "
            f"jitter={p.jitter_ms}ms "
            f"windows={p.windows_flushed} degenerate={p.degenerate_windows} "
            f"hist_lat={self.avg_latency_ms:.1f}ms"
        )
        if self._codec and self._codec.enabled:
            text += f" lz4={self._codec.ratio:.0%}"
        return text

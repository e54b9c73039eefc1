"""
Sync Processor
==============

Turns sync replies into clock corrections.

Per reply:
    latency = (now - client_send_time) / 2          (symmetric path assumed)
    offset  = (server_time - virtual_time) + latency

Samples accumulate in a fixed window. When the window fills, offsets and
latencies are each smoothed with the robust averager, the averaged offset
becomes the clock's one-shot correction, a LatencySnapshot is published to
listeners, and the window starts over.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .averaging import jitter, smooth_average, trunc_div
from .config import ClockConfig
from .sync_protocol import SyncMessage, current_time_ms
from .virtual_clock import VirtualClock
from .window import Sample, SampleWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatencySnapshot:
    """Published once per window flush."""
    average_latency_ms: int
    jitter_ms: int
    offset_ms: int


LatencyListener = Callable[[LatencySnapshot], None]


class SyncProcessor:
    """Windowed offset/latency estimator feeding a VirtualClock.

    Args:
        clock:       Clock that receives the averaged offset.
        config:      Window size and noise floor.
        time_source: Local millisecond clock (must match the probe sender's).
    """

    def __init__(
        self,
        clock: VirtualClock,
        config: Optional[ClockConfig] = None,
        time_source: Callable[[], int] = current_time_ms,
    ):
        self._config = config or ClockConfig()
        self._clock = clock
        self._now = time_source
        self._window = SampleWindow(self._config.sample_size)
        self._listeners: List[LatencyListener] = []
        self._detached = False

        self.immediate_latency_ms: int = 0
        self.average_latency_ms: int = 0
        self.jitter_ms: int = 0
        self.last_offset_ms: int = 0
        self.replies_received: int = 0
        self.windows_flushed: int = 0
        self.degenerate_windows: int = 0

    # ---- Observers -----------------------------------------------------------

    def add_latency_listener(self, listener: LatencyListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_latency_listener(self, listener: LatencyListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- Properties ----------------------------------------------------------

    @property
    def window(self) -> SampleWindow:
        return self._window

    @property
    def pending_samples(self) -> int:
        return len(self._window)

    # ---- Reply handling ------------------------------------------------------

    def on_reply(self, msg: SyncMessage):
        """Record one sync reply; flush the window when it fills."""
        if self._detached:
            return

        latency = trunc_div(self._now() - msg.client_send_time_ms, 2)
        offset = (msg.server_time_ms - self._clock.current_time_ms) + latency

        self.immediate_latency_ms = latency
        self.replies_received += 1

        full = self._window.append(Sample(offset, latency))
        logger.debug(
            f"Sync reply: offset={offset}ms latency={latency}ms "
            f"({len(self._window)}/{self._window.capacity})"
        )

        if full:
            self._flush()

    def _flush(self):
        offsets = self._window.offsets()
        latencies = self._window.latencies()
        self._window.drain()

        floor = self._config.min_latency_floor_ms
        offset_avg = smooth_average(offsets, floor)
        latency_avg = smooth_average(latencies, floor)

        if offset_avg.fallback or latency_avg.fallback:
            self.degenerate_windows += 1

        self.last_offset_ms = offset_avg.value
        self.average_latency_ms = latency_avg.value
        self.jitter_ms = jitter(latencies)
        self.windows_flushed += 1

        self._clock.set_pending_offset(offset_avg.value)

        logger.info(
            f"Clock sync: offset={offset_avg.value}ms latency={latency_avg.value}ms "
            f"jitter={self.jitter_ms}ms (trimmed {len(offset_avg.dropped)} offsets, "
            f"{len(latency_avg.dropped)} latencies)"
        )

        snapshot = LatencySnapshot(
            average_latency_ms=self.average_latency_ms,
            jitter_ms=self.jitter_ms,
            offset_ms=self.last_offset_ms,
        )
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Latency listener error: {e}")

    # ---- Teardown ------------------------------------------------------------

    def detach(self):
        """Drop listeners and ignore any reply that arrives afterwards."""
        self._detached = True
        self._listeners.clear()

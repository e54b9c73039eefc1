"""
Virtual Clock
=============

Server-aligned millisecond clock advanced once per frame.

Each advance adds the whole milliseconds of the frame delta plus any pending
one-shot correction from the sync processor. The fractional millisecond that
truncation throws away is collected in a drift accumulator and injected back
one millisecond at a time, so long runs stay accurate while scheduling only
ever sees integer time.

Correction convention:
    pending_offset = server_time - virtual_time (latency adjusted)
    virtual_time  += pending_offset   (applied once, on the next advance)
"""

import math


class VirtualClock:
    """Owned, drift-corrected virtual time starting at 0 ms.

    Args:
        ticks_per_second: Simulation tick rate used by current_tick.
    """

    def __init__(self, ticks_per_second: int = 60):
        if ticks_per_second <= 0:
            raise ValueError(f"ticks_per_second must be > 0, got {ticks_per_second}")
        self.tick_duration_ms: float = 1000.0 / ticks_per_second
        self.current_time_ms: int = 0
        self.pending_offset_ms: int = 0
        self.drift_accumulator_ms: float = 0.0

    def advance(self, delta_seconds: float):
        """Advance by one frame.

        Args:
            delta_seconds: Real time elapsed since the previous frame.
        """
        if delta_seconds < 0:
            raise ValueError(f"delta_seconds must be >= 0, got {delta_seconds}")

        exact_ms = delta_seconds * 1000.0
        ms_delta = math.floor(exact_ms)

        self.current_time_ms += ms_delta + self.pending_offset_ms

        self.drift_accumulator_ms += exact_ms - ms_delta
        if self.drift_accumulator_ms >= 1.0:
            self.current_time_ms += 1
            self.drift_accumulator_ms -= 1.0

        # One-shot: a correction is never applied twice
        self.pending_offset_ms = 0

    def set_pending_offset(self, offset_ms: int):
        """Schedule a correction for the next advance, replacing any unapplied one."""
        self.pending_offset_ms = int(offset_ms)

    @property
    def current_tick(self) -> int:
        return round(self.current_time_ms / self.tick_duration_ms)

    def get_current_time_ms(self) -> int:
        return self.current_time_ms

    def get_current_tick(self) -> int:
        return self.current_tick

    def __repr__(self) -> str:
        return (
            f"VirtualClock(time={self.current_time_ms}ms tick={self.current_tick} "
            f"pending={self.pending_offset_ms}ms drift={self.drift_accumulator_ms:.3f}ms)"
        )

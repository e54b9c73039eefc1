"""
Configuration
=============

Tunables for the clock estimator. Everything has a default; values are
validated once at construction and never changed at runtime.
"""

from dataclasses import dataclass


class ConfigError(ValueError):
    """Raised when a configuration value is out of range."""


@dataclass(frozen=True)
class ClockConfig:
    """Clock synchronization settings.

    Args:
        sample_size:          Replies collected per averaging window (>= 2).
        sample_rate_ms:       Interval between sync probes, ms.
        min_latency_floor_ms: Noise floor below which samples are never trimmed.
        ticks_per_second:     Simulation tick rate used by current_tick.
        frame_rate:           How often the frame driver advances the clock, Hz.
        sync_channel:         Transport channel reserved for sync probes.
        server_peer_id:       Transport id of the authoritative peer.
        compression:          LZ4-compress payloads on the wire.
        stats_interval_s:     Period of the debug stats log line.
    """

    sample_size: int = 11
    sample_rate_ms: float = 500
    min_latency_floor_ms: int = 20
    ticks_per_second: int = 60
    frame_rate: float = 60
    sync_channel: int = 1
    server_peer_id: int = 1
    compression: bool = True
    stats_interval_s: float = 5.0

    def __post_init__(self):
        if self.sample_size < 2:
            raise ConfigError(f"sample_size must be >= 2, got {self.sample_size}")
        if self.sample_rate_ms <= 0:
            raise ConfigError(f"sample_rate_ms must be > 0, got {self.sample_rate_ms}")
        if self.min_latency_floor_ms < 0:
            raise ConfigError(
                f"min_latency_floor_ms must be >= 0, got {self.min_latency_floor_ms}"
            )
        if self.ticks_per_second <= 0:
            raise ConfigError(f"ticks_per_second must be > 0, got {self.ticks_per_second}")
        if self.frame_rate <= 0:
            raise ConfigError(f"frame_rate must be > 0, got {self.frame_rate}")
        if self.sync_channel < 0:
            raise ConfigError(f"sync_channel must be >= 0, got {self.sync_channel}")
        if self.stats_interval_s <= 0:
            raise ConfigError(f"stats_interval_s must be > 0, got {self.stats_interval_s}")

    @property
    def tick_duration_ms(self) -> float:
        return 1000.0 / self.ticks_per_second

    @property
    def frame_interval_s(self) -> float:
        return 1.0 / self.frame_rate

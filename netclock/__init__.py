"""
Netclock Package
================

Client-side logical clock synchronized to an authoritative server over a
lossy, jittery link.

Modules:
    sync_protocol   - Binary sync request/reply encoding
    compression     - LZ4 block compression of payloads
    transport       - Transport interface and aiohttp websocket transport
    window          - Fixed-capacity sample window
    averaging       - Outlier-trimmed averaging and jitter
    sync_processor  - Reply handling, window flush, latency publication
    probe           - Periodic sync probe sender
    virtual_clock   - Drift-corrected per-frame virtual time
    stats           - Debug statistics readout
    client          - Orchestration of all of the above
"""

from .config import ClockConfig, ConfigError
from .sync_protocol import (
    MessageType,
    SyncMessage,
    decode_message,
    current_time_ms,
)
from .compression import LZ4Codec
from .transport import Reliability, Transport, WebSocketTransport
from .window import Sample, SampleWindow
from .averaging import SmoothedAverage, jitter, robust_average, smooth_average
from .virtual_clock import VirtualClock
from .sync_processor import LatencySnapshot, SyncProcessor
from .probe import ProbeScheduler
from .stats import ClockStats
from .client import ClockClient

__all__ = [
    "ClockConfig",
    "ConfigError",
    "MessageType",
    "SyncMessage",
    "decode_message",
    "current_time_ms",
    "LZ4Codec",
    "Reliability",
    "Transport",
    "WebSocketTransport",
    "Sample",
    "SampleWindow",
    "SmoothedAverage",
    "jitter",
    "robust_average",
    "smooth_average",
    "VirtualClock",
    "LatencySnapshot",
    "SyncProcessor",
    "ProbeScheduler",
    "ClockStats",
    "ClockClient",
]

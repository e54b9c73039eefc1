"""
Pytest configuration and fixtures for netclock tests.
"""

import pytest
import sys
from pathlib import Path

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from netclock.config import ClockConfig
from netclock.transport import Reliability, Transport
from netclock.virtual_clock import VirtualClock


class FakeTransport(Transport):
    """In-memory transport that records every send."""

    def __init__(self):
        super().__init__()
        self.sent = []
        self.connected = False
        self.closed = False

    async def connect(self) -> bool:
        self.connected = True
        return True

    async def send(self, payload, target_id, reliability=Reliability.RELIABLE, channel=0):
        self.sent.append((payload, target_id, reliability, channel))

    async def close(self):
        self.closed = True


class ManualTime:
    """Settable millisecond time source."""

    def __init__(self, now_ms: int = 0):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def local_time():
    return ManualTime(10_000)


@pytest.fixture
def config():
    """Defaults with a small window."""
    return ClockConfig(sample_size=3, min_latency_floor_ms=20)


@pytest.fixture
def clock():
    return VirtualClock(ticks_per_second=60)

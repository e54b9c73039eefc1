"""
Probe Scheduler
===============

Sends a sync request every ``sample_rate_ms`` over the unreliable sync
channel. A lost probe simply produces no reply; nothing is retried.
"""

import asyncio
import logging
from typing import Callable, Optional

from .compression import LZ4Codec
from .config import ClockConfig
from .sync_protocol import SyncMessage, current_time_ms
from .transport import Reliability, Transport

logger = logging.getLogger(__name__)


class ProbeScheduler:
    """Periodic sync probe sender.

    Args:
        transport:   Where probes are sent.
        config:      Probe interval, channel and target peer.
        codec:       Payload compression (pass-through when None).
        time_source: Local millisecond clock stamped into each probe.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[ClockConfig] = None,
        codec: Optional[LZ4Codec] = None,
        time_source: Callable[[], int] = current_time_ms,
    ):
        self._transport = transport
        self._config = config or ClockConfig()
        self._codec = codec or LZ4Codec(enabled=False)
        self._now = time_source
        self._running = False
        self.probes_sent: int = 0

    @property
    def running(self) -> bool:
        return self._running

    async def send_probe(self):
        """Send a single sync request stamped with the local time."""
        probe = SyncMessage(client_send_time_ms=self._now(), server_time_ms=0)
        payload = self._codec.compress(probe.encode())
        try:
            await self._transport.send(
                payload,
                self._config.server_peer_id,
                Reliability.UNRELIABLE,
                self._config.sync_channel,
            )
            self.probes_sent += 1
            logger.debug(f"Sync probe #{self.probes_sent} t={probe.client_send_time_ms}")
        except Exception as e:
            logger.error(f"Sync send error: {e}")

    async def run(self):
        """Emit probes until stop() is called or the task is cancelled."""
        self._running = True
        interval = self._config.sample_rate_ms / 1000.0
        try:
            while self._running:
                await self.send_probe()
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            pass
        finally:
            self._running = False

    def stop(self):
        self._running = False

"""
Clock Sync Client
=================

Connects to the authoritative server, probes its clock periodically, feeds
replies to the sync processor and advances the virtual clock every frame.

Everything runs on one asyncio loop: the frame driver, the probe scheduler
and the transport's receive loop are separate tasks, and each state change
happens synchronously inside one task step.
"""

import asyncio
import logging
from typing import Optional

from .compression import LZ4Codec
from .config import ClockConfig
from .probe import ProbeScheduler
from .stats import ClockStats
from .sync_processor import LatencyListener, SyncProcessor
from .sync_protocol import MessageType, decode_message
from .transport import Transport, WebSocketTransport
from .virtual_clock import VirtualClock

logger = logging.getLogger(__name__)


class ClockClient:
    """Client-side logical clock synchronized to a server.

    Handles:
      - Periodic unreliable sync probes
      - Decompressing and decoding replies, dropping anything undecodable
      - Windowed offset/latency estimation with outlier trimming
      - Per-frame virtual clock advance with drift compensation

    Args:
        url:       WebSocket URL of the server (ignored if transport is given).
        config:    Estimator settings.
        transport: Custom transport; defaults to a WebSocketTransport.
    """

    def __init__(
        self,
        url: str = "",
        config: Optional[ClockConfig] = None,
        transport: Optional[Transport] = None,
    ):
        self.config = config or ClockConfig()
        self._transport = transport or WebSocketTransport(url, server_id=self.config.server_peer_id)
        self._transport.on_message = self.handle_message

        self.codec = LZ4Codec(enabled=self.config.compression)
        self.clock = VirtualClock(self.config.ticks_per_second)
        self.processor = SyncProcessor(self.clock, self.config)
        self.scheduler = ProbeScheduler(self._transport, self.config, self.codec)
        self.stats = ClockStats(self.clock, self.processor, self.codec)
        self.stats.attach()

        self.decode_errors: int = 0
        self._tasks: list[asyncio.Task] = []
        self._running = False

    # ---- Properties ----------------------------------------------------------

    @property
    def current_time_ms(self) -> int:
        """Server-aligned virtual time (ms)."""
        return self.clock.current_time_ms

    @property
    def current_tick(self) -> int:
        return self.clock.current_tick

    def add_latency_listener(self, listener: LatencyListener):
        self.processor.add_latency_listener(listener)

    def remove_latency_listener(self, listener: LatencyListener):
        self.processor.remove_latency_listener(listener)

    # ---- Lifecycle -----------------------------------------------------------

    async def connect(self) -> bool:
        """Connect the transport and start background tasks.

        Returns:
            True if connection succeeded.
        """
        if not await self._transport.connect():
            return False
        self.start()
        return True

    def start(self):
        """Start the frame driver and probe scheduler on the running loop."""
        self._running = True
        self._tasks.append(asyncio.create_task(self._frame_loop()))
        self._tasks.append(asyncio.create_task(self.scheduler.run()))

    async def close(self):
        """Gracefully shut down the client."""
        logger.info("Closing...")
        self._running = False
        self.scheduler.stop()
        self.processor.detach()
        self._transport.on_message = None

        for task in self._tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()

        await self._transport.close()

    # ---- Frame driver --------------------------------------------------------

    async def _frame_loop(self):
        """Advance the virtual clock once per frame by the measured elapsed time."""
        loop = asyncio.get_running_loop()
        interval = self.config.frame_interval_s
        last = loop.time()
        try:
            while self._running:
                await asyncio.sleep(interval)
                now = loop.time()
                self.clock.advance(max(0.0, now - last))
                last = now
        except asyncio.CancelledError:
            pass

    # ---- Receive path --------------------------------------------------------

    def handle_message(self, sender_id: int, payload: bytes):
        """Decode an incoming payload and route sync replies to the processor."""
        try:
            msg_type, msg = decode_message(self.codec.decompress(payload))
        except ValueError as e:
            self.decode_errors += 1
            logger.error(f"Decode error from peer {sender_id}: {e} (size={len(payload)})")
            return

        if msg_type == MessageType.SYNC_REPLY:
            self.processor.on_reply(msg)
        else:
            logger.debug(f"Ignoring {msg_type.name} from peer {sender_id}")

"""
Transport
=========

Byte-payload delivery between this client and the authoritative peer.

The estimator only needs ``send(payload, target_id, reliability, channel)``
and an ``on_message(sender_id, payload)`` callback. WebSocketTransport
implements that over an aiohttp websocket; a websocket is always reliable and
ordered on a single stream, so reliability and channel are accepted for
interface compatibility only.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

import aiohttp

logger = logging.getLogger(__name__)

MessageHandler = Callable[[int, bytes], None]


class Reliability(Enum):
    RELIABLE = "reliable"
    UNRELIABLE = "unreliable"


class Transport(ABC):
    """Payload transport used by the probe scheduler and the client."""

    def __init__(self):
        self.on_message: Optional[MessageHandler] = None

    async def connect(self) -> bool:
        return True

    async def close(self):
        pass

    @abstractmethod
    async def send(self, payload: bytes, target_id: int,
                   reliability: Reliability = Reliability.RELIABLE, channel: int = 0):
        ...

    def deliver(self, sender_id: int, payload: bytes):
        """Hand an incoming payload to the registered handler."""
        if self.on_message:
            self.on_message(sender_id, payload)


class WebSocketTransport(Transport):
    """aiohttp websocket transport to a single server peer.

    Args:
        url:       WebSocket URL of the server.
        server_id: Peer id reported as the sender of every incoming message.
    """

    def __init__(self, url: str, server_id: int = 1):
        super().__init__()
        self.url = url
        self.server_id = server_id

        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._recv_task: Optional[asyncio.Task] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected and self._ws is not None

    async def connect(self) -> bool:
        """Open the websocket and start the receive loop.

        Returns:
            True if connection succeeded.
        """
        try:
            self._session = aiohttp.ClientSession()
            self._ws = await self._session.ws_connect(self.url, heartbeat=25.0)
            self._connected = True
            self._recv_task = asyncio.create_task(self._recv_loop())
            logger.info(f"Connected: {self.url}")
            return True
        except Exception as e:
            logger.error(f"Connect failed: {e}")
            await self.close()
            return False

    async def send(self, payload: bytes, target_id: int,
                   reliability: Reliability = Reliability.RELIABLE, channel: int = 0):
        if not self.connected:
            return
        logger.debug(
            f"Send {len(payload)}B to peer {target_id} "
            f"({reliability.value}, channel {channel})"
        )
        try:
            await self._ws.send_bytes(payload)
        except Exception as e:
            logger.error(f"Send error: {e}")

    async def _recv_loop(self):
        """Receive loop: binary frames go to on_message, text is logged."""
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.BINARY:
                    self.deliver(self.server_id, msg.data)
                elif msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                        notice = data.get("type", data) if isinstance(data, dict) else data
                        logger.info(f"Server notice: {notice}")
                    except ValueError:
                        logger.debug(f"Ignoring text frame: {msg.data[:64]!r}")
                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED,
                                  aiohttp.WSMsgType.ERROR):
                    break
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Recv error: {e}")
        self._connected = False

    async def close(self):
        """Cancel the receive loop and close the websocket and session."""
        self._connected = False
        if self._recv_task:
            self._recv_task.cancel()
            try:
                await self._recv_task
            except asyncio.CancelledError:
                pass
            self._recv_task = None

        if self._ws and not self._ws.closed:
            await self._ws.close()
        if self._session:
            await self._session.close()
        self._ws = None
        self._session = None

"""
Sync Protocol Module - Fixed-Size Binary Protocol
=================================================

Binary encoding/decoding for clock sync probes and replies.

SYNC MESSAGE FORMAT (17 bytes):
    [0]     uint8   message_type (0x03 request, 0x04 reply)
    [1-8]   int64   client_send_time_ms
    [9-16]  int64   server_time_ms

The client sends a request with server_time_ms = 0. The authoritative peer
echoes client_send_time_ms unchanged, fills in its own clock and flips the
type byte to SYNC_REPLY.

All integers are little-endian.
"""

import struct
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


# =================
# CONSTANTS
# =================

class MessageType(IntEnum):
    """Message type identifiers (first byte of every message)."""
    SYNC_REQUEST = 0x03
    SYNC_REPLY = 0x04


SYNC_FORMAT = '<Bqq'    # type + client_send_time + server_time
SYNC_SIZE = 17          # 1 + 8 + 8


# ===================
# UTILITY FUNCTIONS
# ===================

def current_time_ms() -> int:
    """Current time in milliseconds since Unix epoch."""
    return int(time.time() * 1000)


# =================
# DATA CLASSES
# =================

@dataclass
class SyncMessage:
    """Clock sync probe or reply (17 bytes)."""
    client_send_time_ms: int    # Client clock when the probe left
    server_time_ms: int = 0     # Authoritative clock, 0 on the outbound probe

    def encode(self, reply: bool = False) -> bytes:
        msg_type = MessageType.SYNC_REPLY if reply else MessageType.SYNC_REQUEST
        return struct.pack(SYNC_FORMAT, msg_type, self.client_send_time_ms, self.server_time_ms)

    @classmethod
    def decode(cls, data: bytes) -> 'SyncMessage':
        _, message = decode_message(data)
        return message


def decode_message(data: bytes) -> Tuple[MessageType, SyncMessage]:
    """Decode a tagged payload.

    Returns:
        Tuple of (message_type, message).

    Raises:
        ValueError: Payload is empty, truncated, or carries an unknown type.
    """
    if len(data) < 1:
        raise ValueError("Empty payload")

    try:
        msg_type = MessageType(data[0])
    except ValueError:
        raise ValueError(f"Unknown message type 0x{data[0]:02x}") from None

    if len(data) < SYNC_SIZE:
        raise ValueError(f"Too short: {len(data)} < {SYNC_SIZE} bytes")

    _, client_send, server = struct.unpack(SYNC_FORMAT, data[:SYNC_SIZE])
    return msg_type, SyncMessage(client_send_time_ms=client_send, server_time_ms=server)

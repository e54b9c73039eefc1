"""
LZ4 Payload Compression
=======================

Raw LZ4 block compression for transport payloads (no size prefix, no frame
header), so both ends only need to agree on a maximum decompressed size.
"""

import logging

import lz4.block

logger = logging.getLogger(__name__)

# Two MTU-sized datagrams
MAX_PAYLOAD_SIZE = 1500 * 2


class LZ4Codec:
    """Compress/decompress payloads and keep byte totals.

    Args:
        enabled:      When False both directions pass data through unchanged.
        safety_check: Decompress every compressed payload and compare sizes.
        max_payload:  Upper bound on a decompressed payload, bytes.
    """

    def __init__(self, enabled: bool = True, safety_check: bool = False,
                 max_payload: int = MAX_PAYLOAD_SIZE):
        self.enabled = enabled
        self.safety_check = safety_check
        self.max_payload = max_payload
        self.total_uncompressed: int = 0
        self.total_compressed: int = 0

    @property
    def ratio(self) -> float:
        """Compressed / uncompressed bytes so far, or 1.0 before any traffic."""
        if not self.total_uncompressed:
            return 1.0
        return self.total_compressed / self.total_uncompressed

    def compress(self, data: bytes) -> bytes:
        if not self.enabled:
            return data

        compressed = lz4.block.compress(data, store_size=False)
        self.total_uncompressed += len(data)
        self.total_compressed += len(compressed)

        if self.safety_check:
            restored = self.decompress(compressed)
            if len(restored) != len(data):
                raise ValueError(
                    f"LZ4 round-trip size mismatch: {len(data)} -> {len(restored)} bytes"
                )

        return compressed

    def decompress(self, data: bytes) -> bytes:
        """Decompress one payload.

        Raises:
            ValueError: Data is not a valid LZ4 block or exceeds max_payload.
        """
        if not self.enabled:
            return data
        try:
            return lz4.block.decompress(data, uncompressed_size=self.max_payload)
        except lz4.block.LZ4BlockError as e:
            raise ValueError(f"LZ4 decompress failed ({len(data)} bytes): {e}") from e

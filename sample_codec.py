"""Delta-PCM sample codec.

XM stores sample data as signed deltas. The linear value is the running sum
of those deltas with wrapping (not saturating) arithmetic.

Every conversion returns a freshly allocated array and leaves its input alone.
8-bit samples are widened to the 16-bit domain (value << 8) so that all
conversions start from the same signed 16-bit representation.
"""

import logging

import numpy as np

logger = logging.getLogger("tracker.sample_codec")


def native(raw: bytes) -> bytes:
    """Return the stored delta bytes unchanged (as a copy)."""
    return bytes(raw)


def delta_to_signed16(raw: bytes, is_16bit: bool) -> np.ndarray:
    """Decode delta bytes into linear signed 16-bit PCM."""
    if is_16bit:
        if len(raw) % 2:
            logger.debug(f"16-bit sample has odd length {len(raw)}, "
                         f"ignoring trailing byte")
        deltas = np.frombuffer(raw, dtype='<i2', count=len(raw) // 2)
        acc = np.cumsum(deltas, dtype=np.int64) & 0xFFFF
        return acc.astype(np.uint16).view(np.int16)

    deltas = np.frombuffer(raw, dtype=np.int8)
    acc = np.cumsum(deltas, dtype=np.int64) & 0xFF
    return acc.astype(np.uint8).view(np.int8).astype(np.int16) << 8


def signed16_to_unsigned16(values: np.ndarray) -> np.ndarray:
    """Shift signed 16-bit PCM into the unsigned range (+32768, wrapping)."""
    return ((values.astype(np.int32) + 0x8000) & 0xFFFF).astype(np.uint16)


def signed16_to_signed8(values: np.ndarray) -> np.ndarray:
    """Keep the top 8 bits of signed 16-bit PCM."""
    return (values.astype(np.int16) >> 8).astype(np.int8)


def unsigned16_to_unsigned8(values: np.ndarray) -> np.ndarray:
    """Keep the top 8 bits of unsigned 16-bit PCM."""
    return (values.astype(np.uint16) >> 8).astype(np.uint8)

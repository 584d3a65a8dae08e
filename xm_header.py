"""XM file verifier and header parser.

Validates the fixed 60-byte preamble of an Extended Module (magic string,
version 1.04, declared header size) and extracts the song-level scalars and
the pattern order list.
"""

import struct
import logging
from dataclasses import dataclass
from typing import Tuple

from errors import FormatError
from constants import (
    XM_MAGIC, XM_MIN_SIZE, XM_MODULE_NAME, XM_TRACKER_NAME, XM_EOF_MARKER, XM_NAME_LEN,
    XM_VERSION_MINOR, XM_VERSION_MAJOR, XM_HEADER_SIZE, XM_SEQUENCE_LEN,
    XM_RESTART_POS, XM_CHANNEL_COUNT, XM_PATTERN_COUNT, XM_INSTRUMENT_COUNT,
    XM_FREQ_TABLE_TYPE, XM_DEFAULT_TEMPO, XM_DEFAULT_BPM, XM_SEQUENCE_BEGIN,
    SUPPORTED_VERSION,
)

logger = logging.getLogger("tracker.xm_header")


# ============================================================================
# LOW-LEVEL READERS
# ============================================================================

def read_u16(data: bytes, offset: int) -> int:
    return struct.unpack_from('<H', data, offset)[0]


def read_u32(data: bytes, offset: int) -> int:
    return struct.unpack_from('<I', data, offset)[0]


def read_string(data: bytes, offset: int, length: int) -> str:
    """Read a fixed-width text field.

    Stops at the first NUL, replaces undecodable bytes and trims trailing
    whitespace.
    """
    raw = bytes(data[offset:offset + length]).split(b'\x00', 1)[0]
    return raw.decode('utf-8', errors='replace').rstrip()


# ============================================================================
# HEADER
# ============================================================================

@dataclass(frozen=True)
class XMHeader:
    """Song-level fields from the module header."""
    name: str
    tracker_name: str
    header_size: int
    sequence_length: int
    restart_position: int
    channel_count: int
    pattern_count: int
    instrument_count: int
    frequency_table: int
    default_tempo: int
    default_bpm: int
    order: Tuple[int, ...]

    @property
    def data_offset(self) -> int:
        """Offset of the first pattern header."""
        return XM_HEADER_SIZE + self.header_size


def verify_xm(data: bytes) -> None:
    """Raise FormatError unless ``data`` starts with a v1.04 XM header."""
    if len(data) < XM_MIN_SIZE:
        raise FormatError(f"File too small: {len(data)} bytes")

    if bytes(data[:len(XM_MAGIC)]) != XM_MAGIC:
        raise FormatError("Not an Extended Module (bad magic)")

    version = (data[XM_VERSION_MAJOR], data[XM_VERSION_MINOR])
    if version != SUPPORTED_VERSION:
        raise FormatError(f"Unsupported XM version {version[0]}.{version[1]:02d} "
                          f"(only 1.04 is supported)")

    header_size = read_u32(data, XM_HEADER_SIZE)
    if len(data) < XM_MIN_SIZE + header_size:
        raise FormatError(f"File truncated: header declares {header_size} bytes, "
                          f"only {len(data) - XM_MIN_SIZE} available")


def parse_header(data: bytes) -> XMHeader:
    """Verify ``data`` and extract the module header."""
    verify_xm(data)

    if len(data) < XM_SEQUENCE_BEGIN:
        raise FormatError(f"File truncated in song header ({len(data)} bytes)")

    sequence_length = read_u16(data, XM_SEQUENCE_LEN)
    order_end = XM_SEQUENCE_BEGIN + sequence_length
    if order_end > len(data):
        raise FormatError(f"Order list truncated: {sequence_length} entries declared")

    tracker_at = XM_TRACKER_NAME
    if data[tracker_at] == XM_EOF_MARKER:
        tracker_at += 1

    header = XMHeader(
        name=read_string(data, XM_MODULE_NAME, XM_NAME_LEN),
        tracker_name=read_string(data, tracker_at, XM_NAME_LEN),
        header_size=read_u32(data, XM_HEADER_SIZE),
        sequence_length=sequence_length,
        restart_position=read_u16(data, XM_RESTART_POS),
        channel_count=data[XM_CHANNEL_COUNT],
        pattern_count=data[XM_PATTERN_COUNT],
        instrument_count=data[XM_INSTRUMENT_COUNT],
        frequency_table=data[XM_FREQ_TABLE_TYPE],
        default_tempo=data[XM_DEFAULT_TEMPO],
        default_bpm=data[XM_DEFAULT_BPM],
        order=tuple(data[XM_SEQUENCE_BEGIN:order_end]),
    )

    logger.debug(f"Header: \"{header.name}\" by \"{header.tracker_name}\", "
                 f"{header.channel_count} channels, {header.pattern_count} patterns, "
                 f"{header.instrument_count} instruments")
    return header

"""XM pattern decoder.

Pattern cells are packed row by row, channel by channel. A control byte with
bit 7 set is a mask saying which of the five cell fields follow; any other
byte is a note and is followed by all four remaining fields.
"""

import logging
from typing import List, Optional

from errors import FormatError
from data_model import Pattern, Track
from xm_header import read_u16, read_u32
from constants import (
    PATTERN_HEADER_MIN, PATTERN_PACKING_TYPE, PATTERN_ROW_COUNT,
    PATTERN_PACKED_SIZE, MIN_ROWS, MAX_ROWS, CELL_PACKED, CELL_NOTE,
    CELL_INSTRUMENT, CELL_VOLUME, CELL_FX_COMMAND, CELL_FX_PARAM,
)

logger = logging.getLogger("tracker.xm_pattern")

# Field order inside a cell; also the order of the mask bits
_FIELD_BITS = (CELL_NOTE, CELL_INSTRUMENT, CELL_VOLUME, CELL_FX_COMMAND, CELL_FX_PARAM)


def pattern_size(data: bytes, offset: int) -> int:
    """Total bytes (header + packed cells) of the pattern starting at ``offset``."""
    if offset + PATTERN_HEADER_MIN > len(data):
        raise FormatError(f"Pattern header truncated at offset {offset:#x}")
    return read_u32(data, offset) + read_u16(data, offset + PATTERN_PACKED_SIZE)


def decode_pattern(data: bytes, channel_count: int) -> Pattern:
    """Decode one pattern record (header + packed cells) into a Pattern."""
    if len(data) < PATTERN_HEADER_MIN:
        raise FormatError(f"Pattern header truncated ({len(data)} bytes)")

    header_len = read_u32(data, 0)
    packing = data[PATTERN_PACKING_TYPE]
    n_rows = read_u16(data, PATTERN_ROW_COUNT)
    packed_size = read_u16(data, PATTERN_PACKED_SIZE)

    if header_len < PATTERN_HEADER_MIN:
        raise FormatError(f"Pattern header length {header_len} too small")
    if packing != 0:
        raise FormatError(f"Unsupported pattern packing type {packing}")
    if not MIN_ROWS <= n_rows <= MAX_ROWS:
        raise FormatError(f"Invalid pattern row count {n_rows}")
    if len(data) != header_len + packed_size:
        raise FormatError(f"Pattern data corrupt or incomplete: expected "
                          f"{header_len + packed_size} bytes, got {len(data)}")

    # columns[field][channel][row]
    columns: List[List[List[Optional[int]]]] = [
        [[None] * n_rows for _ in range(channel_count)]
        for _ in _FIELD_BITS
    ]

    if packed_size == 0:
        logger.debug(f"Empty pattern: {n_rows} rows")
    else:
        end = header_len + packed_size
        pos = header_len
        for row in range(n_rows):
            for ch in range(channel_count):
                ctrl = data[pos] if pos < end else None
                if ctrl is not None and ctrl & CELL_PACKED:
                    pos += 1
                    fields = [f for f, bit in enumerate(_FIELD_BITS) if ctrl & bit]
                else:
                    fields = list(range(len(_FIELD_BITS)))
                if ctrl is None or pos + len(fields) > end:
                    raise FormatError(f"Pattern cells overrun packed size "
                                      f"{packed_size} at row {row}, channel {ch}")
                for f in fields:
                    columns[f][ch][row] = data[pos]
                    pos += 1

        consumed = pos - header_len
        if consumed != packed_size:
            raise FormatError(f"Pattern packed size mismatch: declared {packed_size}, "
                              f"cells use {consumed}")

    notes, instruments, volumes, commands, params = columns
    tracks = tuple(
        Track(notes=tuple(notes[ch]), instruments=tuple(instruments[ch]),
              volumes=tuple(volumes[ch]), fx_commands=tuple(commands[ch]),
              fx_params=tuple(params[ch]))
        for ch in range(channel_count)
    )
    return Pattern(row_count=n_rows, tracks=tracks)

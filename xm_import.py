"""XM file importer.

Reads FastTracker II Extended Module (.XM, version 1.04) data and assembles
it into one immutable Module. The buffer is walked once, front to back:

    header -> pattern_count patterns -> instrument_count instruments

Any corruption raises FormatError and nothing is returned; there is no
partial import.
"""

import os
import logging

from errors import FormatError, ModuleIOError
from data_model import Module
from xm_header import parse_header
from xm_pattern import decode_pattern, pattern_size
from xm_instrument import instrument_extent, parse_instrument

logger = logging.getLogger("tracker.xm_import")


# ============================================================================
# CORE PARSER
# ============================================================================

def parse_xm(data: bytes) -> Module:
    """Parse raw XM file bytes into a Module."""
    header = parse_header(data)

    bad_orders = sorted({p for p in header.order if p >= header.pattern_count})
    if bad_orders:
        logger.debug(f"Order list references missing pattern(s) "
                     f"{', '.join(str(p) for p in bad_orders)} - ignored")

    # --- Patterns ---
    offset = header.data_offset
    patterns = []
    for pat_idx in range(header.pattern_count):
        size = pattern_size(data, offset)
        chunk = data[offset:offset + size]
        if len(chunk) != size:
            raise FormatError(f"Pattern {pat_idx} truncated: expected {size} bytes, "
                              f"got {len(chunk)}")
        try:
            patterns.append(decode_pattern(chunk, header.channel_count))
        except FormatError as e:
            raise FormatError(f"Pattern {pat_idx}: {e}") from e
        offset += size

    logger.debug(f"Decoded {len(patterns)} pattern(s), next offset {offset:#x}")

    # --- Instruments ---
    instruments = []
    for inst_idx in range(header.instrument_count):
        try:
            size = instrument_extent(data, offset)
            chunk = data[offset:offset + size]
            if len(chunk) != size:
                raise FormatError(f"record truncated: expected {size} bytes, "
                                  f"got {len(chunk)}")
            instruments.append(parse_instrument(chunk))
        except FormatError as e:
            raise FormatError(f"Instrument {inst_idx + 1}: {e}") from e
        offset += size

    if offset < len(data):
        logger.debug(f"{len(data) - offset} trailing byte(s) after last instrument")

    module = Module(
        name=header.name,
        tracker_name=header.tracker_name,
        header_size=header.header_size,
        sequence_length=header.sequence_length,
        restart_position=header.restart_position,
        channel_count=header.channel_count,
        pattern_count=header.pattern_count,
        instrument_count=header.instrument_count,
        frequency_table=header.frequency_table,
        default_tempo=header.default_tempo,
        default_bpm=header.default_bpm,
        order=header.order,
        patterns=tuple(patterns),
        instruments=tuple(instruments),
    )
    logger.info(f"Imported \"{module.name}\": {module.channel_count} channels, "
                f"{module.pattern_count} patterns, {module.instrument_count} instruments")
    return module


# ============================================================================
# PUBLIC API
# ============================================================================

def load_xm_file(path: str) -> Module:
    """Read an .XM file from disk and parse it.

    Raises:
        ModuleIOError: the file cannot be opened or read
        FormatError: the contents are not a valid v1.04 XM module
    """
    logger.info(f"Importing: {os.path.basename(path)}")
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise ModuleIOError(f"Cannot read {path}: {e}") from e

    return parse_xm(data)

"""XM instrument and sample parser.

Instrument record layout:
    header (declared length; 29 bytes when there are no samples)
    sample_count x 40-byte sample headers
    sample payloads, concatenated in header order
"""

import struct
import logging
from typing import List, Tuple

from errors import FormatError
from data_model import Envelope, Instrument, Sample, Vibrato
from xm_header import read_u16, read_u32, read_string
from constants import (
    INSTRUMENT_SHORT_HEADER, INSTRUMENT_NAME, INSTRUMENT_NAME_LEN, INSTRUMENT_TYPE,
    INSTRUMENT_SAMPLE_COUNT, INSTRUMENT_SAMPLE_MAP, SAMPLE_MAP_LEN,
    VOLUME_ENVELOPE, PANNING_ENVELOPE, VOLUME_POINT_COUNT, PANNING_POINT_COUNT,
    VOLUME_SUSTAIN, PANNING_SUSTAIN, VOLUME_TYPE, PANNING_TYPE, VIBRATO_TYPE,
    FADEOUT, INSTRUMENT_FULL_HEADER, MAX_ENVELOPE_POINTS, MAX_SAMPLES,
    SAMPLE_HEADER_SIZE, SAMPLE_LENGTH, SAMPLE_LOOP_START, SAMPLE_LOOP_LENGTH,
    SAMPLE_VOLUME, SAMPLE_FINETUNE, SAMPLE_TYPE, SAMPLE_PANNING,
    SAMPLE_RELATIVE_NOTE, SAMPLE_NAME, SAMPLE_NAME_LEN,
)

logger = logging.getLogger("tracker.xm_instrument")


def _sample_count(data: bytes, offset: int) -> Tuple[int, int]:
    """(header length, sample count) of the instrument at ``offset``."""
    if offset + INSTRUMENT_SHORT_HEADER > len(data):
        raise FormatError(f"Instrument header truncated at offset {offset:#x}")
    header_len = read_u32(data, offset)
    n_samples = data[offset + INSTRUMENT_SAMPLE_COUNT]
    if n_samples > MAX_SAMPLES:
        raise FormatError(f"Instrument declares {n_samples} samples "
                          f"(maximum {MAX_SAMPLES})")
    if n_samples == 0:
        if header_len < INSTRUMENT_SHORT_HEADER:
            raise FormatError(f"Instrument header length {header_len} too small")
    elif header_len < INSTRUMENT_FULL_HEADER:
        raise FormatError(f"Instrument header length {header_len} too small "
                          f"for {n_samples} sample(s)")
    return header_len, n_samples


def instrument_extent(data: bytes, offset: int) -> int:
    """Byte span of the whole instrument record starting at ``offset``."""
    header_len, n_samples = _sample_count(data, offset)
    if n_samples == 0:
        return header_len

    headers_end = offset + header_len + n_samples * SAMPLE_HEADER_SIZE
    if headers_end > len(data):
        raise FormatError(f"Sample headers truncated at offset {offset:#x}")
    payload = sum(read_u32(data, offset + header_len + i * SAMPLE_HEADER_SIZE)
                  for i in range(n_samples))
    return header_len + n_samples * SAMPLE_HEADER_SIZE + payload


def parse_sample_header(data: bytes, offset: int) -> dict:
    """Read one 40-byte sample header into a dict of Sample fields."""
    if offset + SAMPLE_HEADER_SIZE > len(data):
        raise FormatError(f"Sample header truncated at offset {offset:#x}")
    return {
        'length': read_u32(data, offset + SAMPLE_LENGTH),
        'loop_start': read_u32(data, offset + SAMPLE_LOOP_START),
        'loop_length': read_u32(data, offset + SAMPLE_LOOP_LENGTH),
        'volume': data[offset + SAMPLE_VOLUME],
        'finetune': struct.unpack_from('<b', data, offset + SAMPLE_FINETUNE)[0],
        'type_flags': data[offset + SAMPLE_TYPE],
        'panning': data[offset + SAMPLE_PANNING],
        'relative_note': struct.unpack_from('<b', data, offset + SAMPLE_RELATIVE_NOTE)[0],
        'name': read_string(data, offset + SAMPLE_NAME, SAMPLE_NAME_LEN),
    }


def _parse_envelope(data: bytes, points_at: int, count_at: int,
                    sustain_at: int, type_at: int, label: str) -> Envelope:
    n_points = data[count_at]
    if n_points > MAX_ENVELOPE_POINTS:
        logger.warning(f"{label} envelope declares {n_points} points, "
                       f"clamping to {MAX_ENVELOPE_POINTS}")
        n_points = MAX_ENVELOPE_POINTS
    points = tuple(struct.unpack_from('<HH', data, points_at + i * 4)
                   for i in range(n_points))
    return Envelope(
        points=points,
        sustain_point=data[sustain_at],
        loop_start_point=data[sustain_at + 1],
        loop_end_point=data[sustain_at + 2],
        flags=data[type_at],
    )


def parse_instrument(data: bytes) -> Instrument:
    """Parse one complete instrument record (see instrument_extent)."""
    header_len, n_samples = _sample_count(data, 0)
    name = read_string(data, INSTRUMENT_NAME, INSTRUMENT_NAME_LEN)
    inst_type = data[INSTRUMENT_TYPE]

    if header_len > len(data):
        raise FormatError(f"Instrument \"{name}\" header truncated: declares "
                          f"{header_len} bytes, got {len(data)}")

    if n_samples == 0:
        logger.debug(f"Instrument \"{name}\": no samples")
        return Instrument(name=name, instrument_type=inst_type, sample_count=0,
                          header_size=header_len)

    sample_map = tuple(data[INSTRUMENT_SAMPLE_MAP:INSTRUMENT_SAMPLE_MAP + SAMPLE_MAP_LEN])
    volume_env = _parse_envelope(data, VOLUME_ENVELOPE, VOLUME_POINT_COUNT,
                                 VOLUME_SUSTAIN, VOLUME_TYPE, "Volume")
    panning_env = _parse_envelope(data, PANNING_ENVELOPE, PANNING_POINT_COUNT,
                                  PANNING_SUSTAIN, PANNING_TYPE, "Panning")
    vibrato = Vibrato(*data[VIBRATO_TYPE:VIBRATO_TYPE + 4])
    fadeout = read_u16(data, FADEOUT)

    headers: List[dict] = [
        parse_sample_header(data, header_len + i * SAMPLE_HEADER_SIZE)
        for i in range(n_samples)
    ]

    samples: List[Sample] = []
    pos = header_len + n_samples * SAMPLE_HEADER_SIZE
    for hdr in headers:
        end = pos + hdr['length']
        if end > len(data):
            raise FormatError(f"Sample \"{hdr['name']}\" data truncated: expected "
                              f"{hdr['length']}, got {max(0, len(data) - pos)} bytes")
        samples.append(Sample(data=bytes(data[pos:end]), **hdr))
        pos = end

    logger.debug(f"Instrument \"{name}\": {n_samples} sample(s), "
                 f"{pos - header_len - n_samples * SAMPLE_HEADER_SIZE} bytes of sample data")

    return Instrument(
        name=name,
        instrument_type=inst_type,
        sample_count=n_samples,
        header_size=header_len,
        sample_map=sample_map,
        volume_envelope=volume_env,
        panning_envelope=panning_env,
        vibrato=vibrato,
        fadeout=fadeout,
        samples=tuple(samples),
    )

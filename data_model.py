"""XM Kit - Data Model

Read-only records produced by the parser. Everything is a frozen dataclass
holding tuples, so a decoded Module can be shared freely between threads.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

import numpy as np

import sample_codec
import track_query
from effects import Effect
from constants import (ENVELOPE_ON, ENVELOPE_SUSTAIN, ENVELOPE_LOOP,
                       SAMPLE_LOOP_NONE, SAMPLE_LOOP_FORWARD, SAMPLE_LOOP_PINGPONG,
                       SAMPLE_16BIT)

Column = Tuple[Optional[int], ...]


@dataclass(frozen=True)
class Track:
    """One channel's column of a pattern.

    Each field holds the raw byte coded on that row, or None when the row
    carries nothing for that field. Carry-over is worked out at query time.
    """
    notes: Column
    instruments: Column
    volumes: Column
    fx_commands: Column
    fx_params: Column

    @property
    def row_count(self) -> int:
        return len(self.notes)

    def _raw(self, column: Column, row: int) -> Optional[int]:
        track_query.check_row(row, self.row_count)
        return column[row]

    # === RAW ACCESS ===
    def note_raw(self, row: int) -> Optional[int]:
        return self._raw(self.notes, row)

    def instrument_raw(self, row: int) -> Optional[int]:
        return self._raw(self.instruments, row)

    def volume_raw(self, row: int) -> Optional[int]:
        return self._raw(self.volumes, row)

    def fx_command_raw(self, row: int) -> Optional[int]:
        return self._raw(self.fx_commands, row)

    def fx_param_raw(self, row: int) -> Optional[int]:
        return self._raw(self.fx_params, row)

    # === EFFECTIVE STATE ===
    def note(self, row: int) -> int:
        """Last note coded at or before ``row`` (0 if none)."""
        return track_query.last_value(self.notes, row)

    def instrument(self, row: int) -> int:
        """Last instrument coded at or before ``row`` (0 if none)."""
        return track_query.last_value(self.instruments, row)

    def volume(self, row: int) -> int:
        """Volume (0..0x40) of the note playing at ``row``."""
        return track_query.effective_volume(self.notes, self.volumes, row)

    def fx(self, effect: Union[Effect, str], row: int) -> int:
        """Active parameter of ``effect`` at ``row``."""
        return track_query.effect_value(self.notes, self.fx_commands,
                                        self.fx_params, effect, row)


@dataclass(frozen=True)
class Pattern:
    """Grid of rows x channels; one Track per channel."""
    row_count: int
    tracks: Tuple[Track, ...]

    @property
    def channel_count(self) -> int:
        return len(self.tracks)

    def track(self, channel: int) -> Track:
        return self.tracks[channel]

    def bpm(self, module: 'Module', row: int) -> int:
        """BPM in effect once ``row`` has played."""
        return track_query.speed_at(self.tracks, self.row_count, row,
                                    module.default_tempo, module.default_bpm)[1]

    def tempo(self, module: 'Module', row: int) -> int:
        """Tempo (ticks per row) in effect once ``row`` has played."""
        return track_query.speed_at(self.tracks, self.row_count, row,
                                    module.default_tempo, module.default_bpm)[0]


@dataclass(frozen=True)
class Envelope:
    """Volume or panning envelope of an instrument."""
    points: Tuple[Tuple[int, int], ...]
    sustain_point: int
    loop_start_point: int
    loop_end_point: int
    flags: int

    @property
    def enabled(self) -> bool:
        return bool(self.flags & ENVELOPE_ON)

    @property
    def sustain_enabled(self) -> bool:
        return bool(self.flags & ENVELOPE_SUSTAIN)

    @property
    def loop_enabled(self) -> bool:
        return bool(self.flags & ENVELOPE_LOOP)

    @property
    def sustain(self) -> Optional[int]:
        """Sustain point index, None for an envelope without points."""
        return self.sustain_point if self.points else None

    @property
    def loop(self) -> Optional[Tuple[int, int]]:
        """(start, end) point indices, None unless looping is switched on."""
        if not self.points or not self.loop_enabled:
            return None
        return self.loop_start_point, self.loop_end_point


@dataclass(frozen=True)
class Vibrato:
    """Instrument auto-vibrato settings."""
    type: int
    sweep: int
    depth: int
    rate: int


class LoopType(Enum):
    NONE = "none"
    FORWARD = "forward"
    PING_PONG = "ping-pong"


@dataclass(frozen=True)
class Sample:
    """Sample sub-header plus its still delta-encoded payload.

    Attributes:
        length: Payload size in bytes (not frames)
        finetune: Signed, -128..127 (1/128 semitone)
        relative_note: Signed semitone offset from C-4
        data: Raw delta bytes as stored in the file
    """
    length: int
    loop_start: int
    loop_length: int
    volume: int
    finetune: int
    type_flags: int
    panning: int
    relative_note: int
    name: str
    data: bytes = field(repr=False)

    @property
    def is_16bit(self) -> bool:
        return bool(self.type_flags & SAMPLE_16BIT)

    @property
    def loop_type(self) -> LoopType:
        if self.type_flags & SAMPLE_LOOP_NONE:
            return LoopType.NONE
        if self.type_flags & SAMPLE_LOOP_FORWARD:
            return LoopType.FORWARD
        if self.type_flags & SAMPLE_LOOP_PINGPONG:
            return LoopType.PING_PONG
        return LoopType.NONE

    @property
    def frame_count(self) -> int:
        return len(self.data) // 2 if self.is_16bit else len(self.data)

    # === PCM CONVERSIONS ===
    def data_native(self) -> bytes:
        """Payload in XM's native delta format; check is_16bit for its width."""
        return sample_codec.native(self.data)

    def data_signed16(self) -> np.ndarray:
        return sample_codec.delta_to_signed16(self.data, self.is_16bit)

    def data_unsigned16(self) -> np.ndarray:
        return sample_codec.signed16_to_unsigned16(self.data_signed16())

    def data_signed8(self) -> np.ndarray:
        return sample_codec.signed16_to_signed8(self.data_signed16())

    def data_unsigned8(self) -> np.ndarray:
        return sample_codec.unsigned16_to_unsigned8(self.data_unsigned16())


@dataclass(frozen=True)
class Instrument:
    """Instrument header and its samples.

    An instrument without samples carries only name, type and sample count;
    every other header field is None.
    """
    name: str
    instrument_type: int
    sample_count: int
    header_size: int
    sample_map: Optional[Tuple[int, ...]] = None
    volume_envelope: Optional[Envelope] = None
    panning_envelope: Optional[Envelope] = None
    vibrato: Optional[Vibrato] = None
    fadeout: Optional[int] = None
    samples: Tuple[Sample, ...] = ()

    def sample_for_note(self, note: int) -> Optional[Sample]:
        """Sample played for ``note`` (1..96), per the note-to-sample map."""
        if not self.sample_map or not 1 <= note <= len(self.sample_map):
            return None
        idx = self.sample_map[note - 1]
        return self.samples[idx] if idx < len(self.samples) else None


@dataclass(frozen=True)
class Module:
    """Complete decoded XM module."""
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
    patterns: Tuple[Pattern, ...]
    instruments: Tuple[Instrument, ...]

    @property
    def amiga_frequency_table(self) -> bool:
        return self.frequency_table == 0

    @property
    def linear_frequency_table(self) -> bool:
        return self.frequency_table != 0

    def get_pattern(self, idx: int) -> Optional[Pattern]:
        return self.patterns[idx] if 0 <= idx < len(self.patterns) else None

    def get_instrument(self, idx: int) -> Optional[Instrument]:
        return self.instruments[idx] if 0 <= idx < len(self.instruments) else None

    def pattern_used(self, idx: int) -> bool:
        """True if pattern ``idx`` is played somewhere in the order list."""
        return 0 <= idx < len(self.patterns) and idx in self.order

    def iter_song_patterns(self) -> Iterator[Tuple[int, Pattern]]:
        """Yield (position, pattern) in play order.

        Order entries naming a pattern that does not exist are skipped.
        """
        for pos, idx in enumerate(self.order):
            pattern = self.get_pattern(idx)
            if pattern is not None:
                yield pos, pattern

"""Track Query Engine.

Reconstructs the effective per-row state of a track (note, instrument,
volume, effect parameter) and of a whole pattern (tempo, BPM) from the
sparse values stored by the pattern decoder. Nothing stored is ever changed;
every answer is computed by scanning the raw columns.
"""

from typing import Optional, Sequence, Tuple, Union

from errors import RowOutOfRange
from effects import Effect, effect_rule
from constants import (
    NOTE_MIN, NOTE_MAX, VOLUME_SET_MIN, VOLUME_SET_MAX, DEFAULT_VOLUME,
    FX_SET_SPEED, BPM_THRESHOLD,
)


def check_row(row: int, row_count: int) -> None:
    if not 0 <= row < row_count:
        raise RowOutOfRange(row, row_count)


def is_note_trigger(note: Optional[int]) -> bool:
    """True for a real note (key-off and empty cells do not retrigger)."""
    return note is not None and NOTE_MIN <= note <= NOTE_MAX


def last_value(column: Sequence[Optional[int]], row: int, default: int = 0) -> int:
    """Nearest coded value at or before ``row``."""
    check_row(row, len(column))
    for r in range(row, -1, -1):
        if column[r] is not None:
            return column[r]
    return default


def effective_volume(notes: Sequence[Optional[int]],
                     volumes: Sequence[Optional[int]], row: int) -> int:
    """Volume in effect at ``row`` (0..0x40).

    Only volume-column bytes 0x10..0x50 set the volume. A volume lives only
    as long as its note, so the scan gives up at the row that triggered the
    current note.
    """
    check_row(row, len(volumes))
    for r in range(row, -1, -1):
        vol = volumes[r]
        if vol is not None and VOLUME_SET_MIN <= vol <= VOLUME_SET_MAX:
            return vol - VOLUME_SET_MIN
        if is_note_trigger(notes[r]):
            break
    return DEFAULT_VOLUME


def effect_value(notes: Sequence[Optional[int]],
                 commands: Sequence[Optional[int]],
                 params: Sequence[Optional[int]],
                 effect: Union[Effect, str], row: int) -> int:
    """Parameter of ``effect`` in effect at ``row``, honouring effect memory.

    A new note resets the effect to its default before the row's own command
    is looked at, so a command on the trigger row still applies.
    """
    rule = effect_rule(effect)
    check_row(row, len(commands))

    state = rule.default
    for r in range(row + 1):
        if is_note_trigger(notes[r]):
            state = rule.default
        command = commands[r]
        if command is None:
            continue
        param = params[r] or 0
        if rule.matches(command, param):
            value = rule.value(param)
            if value or not rule.memory:
                state = value
        elif not rule.memory:
            state = rule.default
    return state


def speed_at(tracks: Sequence, row_count: int, row: int,
             default_tempo: int, default_bpm: int) -> Tuple[int, int]:
    """(tempo, BPM) in effect after ``row`` has been played.

    Rows are scanned in playback order and, within a row, channels left to
    right, so the last Fxx reached wins.
    """
    check_row(row, row_count)

    tempo, bpm = default_tempo, default_bpm
    for r in range(row + 1):
        for track in tracks:
            if track.fx_commands[r] != FX_SET_SPEED:
                continue
            param = track.fx_params[r] or 0
            if param >= BPM_THRESHOLD:
                bpm = param
            else:
                tempo = param
    return tempo, bpm

"""XM effect identifiers.

Each Effect names one effect class as it is written in a tracker
(``"4"`` = vibrato, ``"E5"`` = set finetune, ``"X1"`` = extra fine porta up).
The rule table below says which command byte carries it, whether its
parameter is a sub-effect nibble of an extended family, whether the effect
remembers its last nonzero parameter, and what its resting value is.
"""

from enum import Enum
from typing import NamedTuple, Optional, Union

from errors import InvalidEffect

FX_EXTENDED = 0x0E          # E1x..EEx: high nibble picks the sub-effect
FX_EXTRA_FINE_PORTA = 0x21  # X1x / X2x


class Effect(Enum):
    ARPEGGIO = "0"
    PORTA_UP = "1"
    PORTA_DOWN = "2"
    TONE_PORTA = "3"
    VIBRATO = "4"
    TONE_PORTA_VOL_SLIDE = "5"
    VIBRATO_VOL_SLIDE = "6"
    TREMOLO = "7"
    SET_PANNING = "8"
    SAMPLE_OFFSET = "9"
    VOL_SLIDE = "A"
    POSITION_JUMP = "B"
    SET_VOLUME = "C"
    PATTERN_BREAK = "D"
    SET_SPEED = "F"
    FINE_PORTA_UP = "E1"
    FINE_PORTA_DOWN = "E2"
    GLISSANDO_CONTROL = "E3"
    VIBRATO_CONTROL = "E4"
    SET_FINETUNE = "E5"
    PATTERN_LOOP = "E6"
    TREMOLO_CONTROL = "E7"
    RETRIGGER = "E9"
    FINE_VOL_SLIDE_UP = "EA"
    FINE_VOL_SLIDE_DOWN = "EB"
    NOTE_CUT = "EC"
    NOTE_DELAY = "ED"
    PATTERN_DELAY = "EE"
    SET_GLOBAL_VOLUME = "G"
    GLOBAL_VOL_SLIDE = "H"
    KEY_OFF = "K"
    SET_ENVELOPE_POSITION = "L"
    PANNING_SLIDE = "P"
    MULTI_RETRIG = "R"
    TREMOR = "T"
    EXTRA_FINE_PORTA_UP = "X1"
    EXTRA_FINE_PORTA_DOWN = "X2"

    @classmethod
    def lookup(cls, identifier: Union["Effect", str]) -> "Effect":
        """Resolve an Effect, its enum name or its tracker notation."""
        if isinstance(identifier, cls):
            return identifier
        if isinstance(identifier, str):
            key = identifier.strip().upper()
            try:
                return cls(key)
            except ValueError:
                pass
            if key in cls.__members__:
                return cls.__members__[key]
        raise InvalidEffect(identifier)


class EffectRule(NamedTuple):
    command: int
    selector: Optional[int]     # High parameter nibble for extended families
    memory: bool
    default: int = 0

    def matches(self, command: int, param: int) -> bool:
        if command != self.command:
            return False
        return self.selector is None or (param >> 4) == self.selector

    def value(self, param: int) -> int:
        """Parameter as seen by this effect (low nibble for extended families)."""
        return param & 0x0F if self.selector is not None else param


EFFECT_RULES = {
    Effect.ARPEGGIO: EffectRule(0x00, None, False),
    Effect.PORTA_UP: EffectRule(0x01, None, True),
    Effect.PORTA_DOWN: EffectRule(0x02, None, True),
    Effect.TONE_PORTA: EffectRule(0x03, None, True),
    Effect.VIBRATO: EffectRule(0x04, None, True),
    Effect.TONE_PORTA_VOL_SLIDE: EffectRule(0x05, None, True),
    Effect.VIBRATO_VOL_SLIDE: EffectRule(0x06, None, True),
    Effect.TREMOLO: EffectRule(0x07, None, True),
    Effect.SET_PANNING: EffectRule(0x08, None, False),
    Effect.SAMPLE_OFFSET: EffectRule(0x09, None, True),
    Effect.VOL_SLIDE: EffectRule(0x0A, None, True),
    Effect.POSITION_JUMP: EffectRule(0x0B, None, False),
    Effect.SET_VOLUME: EffectRule(0x0C, None, False),
    Effect.PATTERN_BREAK: EffectRule(0x0D, None, False),
    Effect.SET_SPEED: EffectRule(0x0F, None, False),
    Effect.FINE_PORTA_UP: EffectRule(FX_EXTENDED, 0x1, True),
    Effect.FINE_PORTA_DOWN: EffectRule(FX_EXTENDED, 0x2, True),
    Effect.GLISSANDO_CONTROL: EffectRule(FX_EXTENDED, 0x3, False),
    Effect.VIBRATO_CONTROL: EffectRule(FX_EXTENDED, 0x4, False),
    Effect.SET_FINETUNE: EffectRule(FX_EXTENDED, 0x5, False, 8),  # 8 = no detune
    Effect.PATTERN_LOOP: EffectRule(FX_EXTENDED, 0x6, False),
    Effect.TREMOLO_CONTROL: EffectRule(FX_EXTENDED, 0x7, False),
    Effect.RETRIGGER: EffectRule(FX_EXTENDED, 0x9, False),
    Effect.FINE_VOL_SLIDE_UP: EffectRule(FX_EXTENDED, 0xA, True),
    Effect.FINE_VOL_SLIDE_DOWN: EffectRule(FX_EXTENDED, 0xB, True),
    Effect.NOTE_CUT: EffectRule(FX_EXTENDED, 0xC, False),
    Effect.NOTE_DELAY: EffectRule(FX_EXTENDED, 0xD, False),
    Effect.PATTERN_DELAY: EffectRule(FX_EXTENDED, 0xE, False),
    Effect.SET_GLOBAL_VOLUME: EffectRule(0x10, None, False),
    Effect.GLOBAL_VOL_SLIDE: EffectRule(0x11, None, True),
    Effect.KEY_OFF: EffectRule(0x14, None, False),
    Effect.SET_ENVELOPE_POSITION: EffectRule(0x15, None, False),
    Effect.PANNING_SLIDE: EffectRule(0x19, None, True),
    Effect.MULTI_RETRIG: EffectRule(0x1B, None, True),
    Effect.TREMOR: EffectRule(0x1D, None, True),
    Effect.EXTRA_FINE_PORTA_UP: EffectRule(FX_EXTRA_FINE_PORTA, 0x1, True),
    Effect.EXTRA_FINE_PORTA_DOWN: EffectRule(FX_EXTRA_FINE_PORTA, 0x2, True),
}


def effect_rule(identifier: Union[Effect, str]) -> EffectRule:
    return EFFECT_RULES[Effect.lookup(identifier)]


def effect_to_str(command: Optional[int], param: Optional[int]) -> str:
    """Format a command/parameter pair in tracker notation, ``---`` if empty."""
    if command is None and param is None:
        return "---"
    command = command or 0
    param = param or 0
    if command < 10:
        letter = f"{command:X}"
    elif command < 36:
        letter = chr(ord('A') + command - 10)
    else:
        letter = "?"
    return f"{letter}{param:02X}"

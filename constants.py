"""XM Kit - Constants"""

# === FILE HEADER ===
XM_MAGIC = b"Extended Module: "
XM_MIN_SIZE = 60           # Everything up to and including the header size field
XM_MODULE_NAME = 0x11
XM_TRACKER_NAME = 0x25
XM_EOF_MARKER = 0x1A      # FT2 writes this at 0x25 and the tracker name after it
XM_NAME_LEN = 20
XM_VERSION_MINOR = 0x3A
XM_VERSION_MAJOR = 0x3B
XM_HEADER_SIZE = 0x3C      # Stored size counts from this offset, not from 0
XM_SEQUENCE_LEN = 0x40
XM_RESTART_POS = 0x42
XM_CHANNEL_COUNT = 0x44
XM_PATTERN_COUNT = 0x46
XM_INSTRUMENT_COUNT = 0x48
XM_FREQ_TABLE_TYPE = 0x4A
XM_DEFAULT_TEMPO = 0x4C
XM_DEFAULT_BPM = 0x4E
XM_SEQUENCE_BEGIN = 0x50

SUPPORTED_VERSION = (1, 4)  # (major, minor) - only v1.04 files

# === PATTERNS ===
PATTERN_HEADER_MIN = 9
PATTERN_PACKING_TYPE = 4
PATTERN_ROW_COUNT = 5
PATTERN_PACKED_SIZE = 7
MIN_ROWS = 1
MAX_ROWS = 256

# Packed cell control byte
CELL_PACKED = 0x80
CELL_NOTE = 0x01
CELL_INSTRUMENT = 0x02
CELL_VOLUME = 0x04
CELL_FX_COMMAND = 0x08
CELL_FX_PARAM = 0x10

# === INSTRUMENTS ===
INSTRUMENT_SHORT_HEADER = 29    # Header size when the instrument has no samples
INSTRUMENT_NAME = 4
INSTRUMENT_NAME_LEN = 22
INSTRUMENT_TYPE = 26
INSTRUMENT_SAMPLE_COUNT = 27
INSTRUMENT_SAMPLE_MAP = 33
SAMPLE_MAP_LEN = 96
VOLUME_ENVELOPE = 129
PANNING_ENVELOPE = 177
VOLUME_POINT_COUNT = 225
PANNING_POINT_COUNT = 226
VOLUME_SUSTAIN = 227            # followed by loop start, loop end
PANNING_SUSTAIN = 230
VOLUME_TYPE = 233
PANNING_TYPE = 234
VIBRATO_TYPE = 235              # followed by sweep, depth, rate
FADEOUT = 239
INSTRUMENT_FULL_HEADER = 241    # Minimum header size when samples are present
MAX_ENVELOPE_POINTS = 12
MAX_SAMPLES = 16

ENVELOPE_ON = 0x01
ENVELOPE_SUSTAIN = 0x02
ENVELOPE_LOOP = 0x04

# === SAMPLES ===
SAMPLE_HEADER_SIZE = 40
SAMPLE_LENGTH = 0
SAMPLE_LOOP_START = 4
SAMPLE_LOOP_LENGTH = 8
SAMPLE_VOLUME = 12
SAMPLE_FINETUNE = 13
SAMPLE_TYPE = 14
SAMPLE_PANNING = 15
SAMPLE_RELATIVE_NOTE = 16
SAMPLE_NAME = 18
SAMPLE_NAME_LEN = 22

SAMPLE_LOOP_NONE = 0x01
SAMPLE_LOOP_FORWARD = 0x02
SAMPLE_LOOP_PINGPONG = 0x04
SAMPLE_16BIT = 0x10

# === NOTES / VOLUME ===
NOTE_MIN = 1
NOTE_MAX = 96               # C-0 .. B-7
NOTE_KEY_OFF = 97
NOTE_NAMES = ['C-', 'C#', 'D-', 'D#', 'E-', 'F-', 'F#', 'G-', 'G#', 'A-', 'A#', 'B-']

VOLUME_SET_MIN = 0x10       # Volume column 0x10..0x50 = set volume 0..0x40
VOLUME_SET_MAX = 0x50
DEFAULT_VOLUME = 0x40

# === SPEED COMMAND ===
FX_SET_SPEED = 0x0F
BPM_THRESHOLD = 0x20        # Fxx >= 0x20 sets BPM, below sets tempo (ticks/row)


def note_to_str(note: int) -> str:
    """Format an XM note value for display."""
    if note == NOTE_KEY_OFF:
        return "==="
    if not NOTE_MIN <= note <= NOTE_MAX:
        return "---"
    n = note - 1
    return f"{NOTE_NAMES[n % 12]}{n // 12}"

#!/usr/bin/env python3
"""XM File Analyzer - prints the structure of an Extended Module.

Usage: python xm_analyzer.py <file.xm> [--rows N] [--verbose]

Shows:
  - Header fields (name, tracker, channels, frequency table, speed)
  - Order list, with patterns that are never played
  - Pattern sizes and the effective tempo/BPM at the end of each pattern
  - Instruments, samples and envelopes
  - The first rows of the first played pattern, with effective state
"""

import sys
import logging
import argparse

from errors import XMError
from effects import effect_to_str
from constants import note_to_str
from version import get_version_string
from xm_import import load_xm_file


def print_header(module):
    print(f"Title: \"{module.name}\"")
    print(f"Tracker: \"{module.tracker_name}\"")
    print(f"Channels: {module.channel_count}")
    table = "Amiga" if module.amiga_frequency_table else "linear"
    print(f"Frequency table: {table}")
    print(f"Default tempo: {module.default_tempo}, BPM: {module.default_bpm}")
    print()


def print_order(module):
    print("=== SONG STRUCTURE ===")
    print(f"Song length: {module.sequence_length} positions")
    print(f"Restart position: {module.restart_position}")
    for i in range(0, len(module.order), 16):
        chunk = module.order[i:i + 16]
        line = ' '.join(f'{p:02X}' for p in chunk)
        print(f"  Pos {i:3d}-{i + len(chunk) - 1:3d}: {line}")
    missing = sorted({p for p in module.order if module.get_pattern(p) is None})
    if missing:
        print(f"  Missing patterns referenced: {missing}")
    unused = [i for i in range(module.pattern_count) if not module.pattern_used(i)]
    if unused:
        print(f"  Unused patterns: {unused}")
    print()


def print_patterns(module):
    print("=== PATTERNS ===")
    for idx, pat in enumerate(module.patterns):
        last = pat.row_count - 1
        print(f"  {idx:3d}: {pat.row_count:3d} rows, "
              f"end tempo {pat.tempo(module, last)}, end BPM {pat.bpm(module, last)}")
    print()


def print_instruments(module):
    print("=== INSTRUMENTS ===")
    for idx, inst in enumerate(module.instruments):
        print(f"  {idx + 1:3d}: \"{inst.name}\" ({inst.sample_count} samples)")
        if inst.sample_count == 0:
            continue
        env = inst.volume_envelope
        if env.enabled:
            loop = f" loop={env.loop}" if env.loop else ""
            print(f"       vol env: {len(env.points)} points, "
                  f"sustain={env.sustain}{loop}")
        if inst.fadeout:
            print(f"       fadeout: {inst.fadeout}")
        for smp in inst.samples:
            bits = 16 if smp.is_16bit else 8
            print(f"       \"{smp.name:22s}\" {smp.frame_count:7d} frames {bits}-bit "
                  f"vol={smp.volume:2d} loop={smp.loop_type.value} "
                  f"rel={smp.relative_note:+d} ft={smp.finetune:+d}")
    print()


def print_first_pattern(module, n_rows):
    played = next(module.iter_song_patterns(), None)
    if played is None:
        return
    pos, pat = played
    print(f"=== FIRST PLAYED PATTERN (position {pos}, rows 0-{n_rows - 1}) ===")
    for row in range(min(n_rows, pat.row_count)):
        cells = []
        for track in pat.tracks:
            note = track.note_raw(row)
            inst = track.instrument_raw(row)
            note_str = note_to_str(note) if note is not None else "..."
            inst_str = f"{inst:02X}" if inst is not None else ".."
            fx_str = effect_to_str(track.fx_command_raw(row), track.fx_param_raw(row))
            cells.append(f"{note_str} {inst_str} {fx_str} v{track.volume(row):02X}")
        print(f"    Row {row:3d}: {' | '.join(cells)}")
    print()


def analyze_xm(path, n_rows=8):
    module = load_xm_file(path)
    print(f"{'=' * 70}")
    print(f"XM ANALYZER: {path}")
    print(f"{'=' * 70}")
    print_header(module)
    print_order(module)
    print_patterns(module)
    print_instruments(module)
    print_first_pattern(module, n_rows)


def main(argv=None):
    parser = argparse.ArgumentParser(description=get_version_string())
    parser.add_argument('path', help="XM file to analyze")
    parser.add_argument('--rows', type=int, default=8,
                        help="rows of the first played pattern to show")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="log parser progress")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        analyze_xm(args.path, args.rows)
    except XMError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

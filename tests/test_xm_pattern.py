"""Tests for xm_pattern.py - packed cell decoding."""
import sys
import os
import struct
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from errors import FormatError
from xm_pattern import decode_pattern, pattern_size
from xm_fixtures import make_pattern, pack_cell


class TestDecodePattern(unittest.TestCase):

    def test_dimensions(self):
        pat = decode_pattern(make_pattern(n_rows=32, n_channels=6,
                                          cells={(0, 0): {'note': 49}}), 6)
        self.assertEqual(pat.row_count, 32)
        self.assertEqual(pat.channel_count, 6)
        for track in pat.tracks:
            self.assertEqual(len(track.notes), 32)
            self.assertEqual(len(track.instruments), 32)
            self.assertEqual(len(track.volumes), 32)
            self.assertEqual(len(track.fx_commands), 32)
            self.assertEqual(len(track.fx_params), 32)

    def test_mask_fields_and_absent(self):
        cells = {
            (0, 0): {'note': 49, 'inst': 1},
            (0, 1): {'vol': 0x30, 'param': 0x12},
            (2, 1): {'cmd': 0x0F},
        }
        pat = decode_pattern(make_pattern(n_rows=4, n_channels=2, cells=cells), 2)
        t0, t1 = pat.tracks
        self.assertEqual(t0.notes[0], 49)
        self.assertEqual(t0.instruments[0], 1)
        self.assertIsNone(t0.volumes[0])
        self.assertIsNone(t0.fx_commands[0])
        self.assertIsNone(t0.fx_params[0])
        self.assertIsNone(t1.notes[0])
        self.assertEqual(t1.volumes[0], 0x30)
        self.assertEqual(t1.fx_params[0], 0x12)
        self.assertEqual(t1.fx_commands[2], 0x0F)
        self.assertIsNone(t1.fx_params[2])
        self.assertEqual(t0.notes[1:], (None, None, None))

    def test_unpacked_cell(self):
        """A control byte below 0x80 is the note, followed by four bytes."""
        cells = {(1, 0): {'note': 25, 'inst': 3, 'vol': 0, 'cmd': 0, 'param': 0}}
        pat = decode_pattern(make_pattern(n_rows=2, n_channels=1, cells=cells,
                                          unpacked={(1, 0)}), 1)
        t = pat.tracks[0]
        self.assertEqual(t.notes[1], 25)
        self.assertEqual(t.instruments[1], 3)
        # Zero bytes are present values, not absent ones
        self.assertEqual(t.volumes[1], 0)
        self.assertEqual(t.fx_commands[1], 0)
        self.assertEqual(t.fx_params[1], 0)
        self.assertIsNone(t.notes[0])

    def test_row_major_channel_minor_order(self):
        body = bytearray()
        for row in range(2):
            for ch in range(3):
                body += pack_cell(note=row * 10 + ch + 1)
        data = struct.pack('<IBHH', 9, 0, 2, len(body)) + bytes(body)
        pat = decode_pattern(data, 3)
        self.assertEqual([t.notes[0] for t in pat.tracks], [1, 2, 3])
        self.assertEqual([t.notes[1] for t in pat.tracks], [11, 12, 13])

    def test_empty_pattern_zero_packed_size(self):
        data = struct.pack('<IBHH', 9, 0, 64, 0)
        pat = decode_pattern(data, 4)
        self.assertEqual(pat.row_count, 64)
        for track in pat.tracks:
            self.assertTrue(all(v is None for v in track.notes))
            self.assertTrue(all(v is None for v in track.fx_params))

    def test_longer_header(self):
        """Cell data starts at the declared header length."""
        body = pack_cell(note=5)
        data = struct.pack('<IBHH', 12, 0, 1, len(body)) + b'\xAA' * 3 + body
        pat = decode_pattern(data, 1)
        self.assertEqual(pat.tracks[0].notes[0], 5)

    def test_consumes_exact_packed_size(self):
        cells = {(r, c): {'note': 1 + r, 'cmd': 0xA, 'param': r}
                 for r in range(16) for c in range(4)}
        data = make_pattern(n_rows=16, n_channels=4, cells=cells)
        declared = struct.unpack_from('<H', data, 7)[0]
        self.assertEqual(len(data), 9 + declared)
        decode_pattern(data, 4)


class TestDecodePatternErrors(unittest.TestCase):

    def test_slice_length_mismatch(self):
        data = make_pattern(n_rows=4, n_channels=1, cells={(0, 0): {'note': 1}})
        with self.assertRaises(FormatError):
            decode_pattern(data + b'\x80', 1)
        with self.assertRaises(FormatError):
            decode_pattern(data[:-1], 1)

    def test_cells_overrun(self):
        """Declared size too small for the rows x channels grid."""
        body = pack_cell(note=1)
        data = struct.pack('<IBHH', 9, 0, 4, len(body)) + body
        with self.assertRaises(FormatError):
            decode_pattern(data, 2)

    def test_leftover_bytes(self):
        body = pack_cell(note=1) + b'\x80\x80'
        data = struct.pack('<IBHH', 9, 0, 1, len(body)) + body
        with self.assertRaises(FormatError):
            decode_pattern(data, 1)

    def test_unpacked_cell_past_end(self):
        body = bytes([0x30, 1, 2])
        data = struct.pack('<IBHH', 9, 0, 1, len(body)) + body
        with self.assertRaises(FormatError):
            decode_pattern(data, 1)

    def test_bad_packing_type(self):
        data = struct.pack('<IBHH', 9, 1, 64, 0)
        with self.assertRaises(FormatError):
            decode_pattern(data, 4)

    def test_row_count_limits(self):
        with self.assertRaises(FormatError):
            decode_pattern(struct.pack('<IBHH', 9, 0, 0, 0), 4)
        with self.assertRaises(FormatError):
            decode_pattern(struct.pack('<IBHH', 9, 0, 257, 0), 4)
        pat = decode_pattern(struct.pack('<IBHH', 9, 0, 256, 0), 4)
        self.assertEqual(pat.row_count, 256)

    def test_header_too_short(self):
        with self.assertRaises(FormatError):
            decode_pattern(b'\x09\x00\x00\x00\x00', 4)


class TestPatternSize(unittest.TestCase):

    def test_size(self):
        data = b'\x00' * 5 + make_pattern(n_rows=2, n_channels=1,
                                          cells={(0, 0): {'note': 1, 'inst': 2}})
        self.assertEqual(pattern_size(data, 5), 9 + 3 + 1)

    def test_truncated_header(self):
        with self.assertRaises(FormatError):
            pattern_size(b'\x09\x00\x00', 0)


if __name__ == '__main__':
    unittest.main()

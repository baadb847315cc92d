from bitarray import bitarray

from fdstick.codec import mfm
from fdstick.codec.mfm import SHORT, MEDIUM, LONG, GLITCH


def test_expand_table():
    assert mfm.expand == bytes.fromhex('aaa9a6a59a9996956a6966655a595655')

def test_writestream_layout():
    out = mfm.bin_to_writestream(b'\x80\x01', 16)
    assert out[:4] == b'\xaa' * 4
    assert out[4:] == bytes([0xaa, 0x6a, 0xa9, 0xaa])

def test_writestream_lead_in_rounds_down_to_bytes():
    assert mfm.bin_to_writestream(b'', 28300) == b'\xaa' * (28300 // 8 * 2)

def test_quantise_bands():
    raw = bytes([0x00, 0x2f, 0x30, 0x4f, 0x50, 0x6f, 0x70, 0x9f, 0xa0, 0xff])
    assert mfm.quantise(raw) == bytes([GLITCH, GLITCH, SHORT, SHORT,
                                       MEDIUM, MEDIUM, LONG, LONG,
                                       GLITCH, GLITCH])

def test_pulses_quantise_back_to_symbols():
    symbols = bytes([SHORT, MEDIUM, LONG, GLITCH] * 4)
    assert mfm.quantise(mfm.symbols_to_pulses(symbols)) == symbols

def test_decode_table():
    assert mfm.decode_symbol(0, SHORT) == ((0,), 0)
    assert mfm.decode_symbol(0, MEDIUM) == ((1,), 1)
    assert mfm.decode_symbol(1, SHORT) == ((1,), 1)
    assert mfm.decode_symbol(1, MEDIUM) == ((0, 0), 0)
    assert mfm.decode_symbol(1, LONG) == ((0, 1), 1)
    # Illegal: resynchronise on a zero.
    assert mfm.decode_symbol(0, LONG) == ((0,), 0)
    assert mfm.decode_symbol(1, GLITCH) == ((0,), 0)

def test_zero_bits_are_short_pulses():
    assert mfm.bin_to_symbols(b'', 24) == bytes([SHORT]) * 24

def test_gap_end_mark():
    # Seven zeros then a one, LSB first.
    assert mfm.bin_to_symbols(b'\x80') == bytes([SHORT]) * 7 + bytes([MEDIUM])

def test_interval_symbols():
    bits = bitarray('0101100', endian='little')
    assert mfm.bits_to_symbols(bits) == bytes([SHORT, MEDIUM, LONG, SHORT,
                                               MEDIUM])

def test_demodulate_inverts_modulate():
    dat = bytes(range(1, 256)) + b'\x55\xaa\xff\x00\x00'
    symbols = mfm.bin_to_symbols(dat)
    assert mfm.symbols_to_bin(symbols) == dat

def test_demodulate_positions():
    symbols = bytes([MEDIUM, MEDIUM, SHORT])
    assert list(mfm.demodulate(symbols, 0)) == [(0, 0), (0, 0), (1, 1),
                                                (1, 2)]

import pytest

from fdstick import error
from fdstick.codec import fds, mfm
from fdstick.codec.fds import Cursor, Side, BlockType

from conftest import disk_header


def modulate(dat: bytes, lead_in: int = fds.DEFAULT_LEAD_IN) -> bytes:
    return mfm.bin_to_symbols(dat, lead_in)


def test_decode_known_sequence(side, framed):
    back = fds.decode_known_sequence(modulate(framed))
    assert back.blocks == side.blocks
    assert back.diagnostics == []

def test_decode_block_cursors(side, framed):
    symbols = modulate(framed)
    out = bytearray(0x100)
    diags = []
    cur = fds.decode_block(symbols, Cursor(0, 0), out, 0x38,
                           BlockType.Disk, diags)
    assert cur.out == 0x38
    assert out[:0x38] == side.blocks[0].data
    # CRC slot is cleared.
    assert out[0x38:0x3a] == bytes(2)
    cur = fds.decode_block(symbols, cur, out, 2, BlockType.FileCount, diags)
    assert cur.out == 0x3a
    assert out[0x38:0x3a] == side.blocks[1].data
    assert diags == []

def test_decode_block_no_gap():
    with pytest.raises(error.GapNotFound):
        fds.decode_block(bytes(100), Cursor(0, 0), bytearray(0x100), 2,
                         BlockType.FileCount, [])

def test_decode_block_capacity(framed):
    with pytest.raises(error.CapacityExceeded):
        fds.decode_block(modulate(framed), Cursor(0, 0), bytearray(0x10),
                         0x38, BlockType.Disk, [])

def test_decode_block_type_mismatch(framed):
    symbols = modulate(framed)
    with pytest.raises(error.BlockTypeMismatch) as exc:
        fds.decode_block(symbols, Cursor(0, 0), bytearray(0x100), 2,
                         BlockType.FileCount, [])
    err = exc.value
    assert (err.found, err.expected) == (BlockType.Disk, BlockType.FileCount)
    assert err.cursor.out == 0
    assert err.cursor.inp > err.start

def test_bad_crc_is_reported_and_decoding_continues(side, framed):
    dat = bytearray(framed)
    # Corrupt the first file header's name.
    pos = 0x38 + 3 + fds.GAP + 2 + 3 + fds.GAP
    assert dat[pos:pos+2] == b'\x80\x03'
    dat[pos+5] ^= 0x20
    back = fds.decode_known_sequence(modulate(bytes(dat)))
    assert len(back.blocks) == len(side.blocks)
    assert back.blocks[3:] == side.blocks[3:]
    assert len(back.diagnostics) == 1
    assert isinstance(back.diagnostics[0], error.BadCrc)

def test_missing_block_is_skipped(side):
    # No file count block: the decoder resynchronises on following gaps.
    broken = Side([side.blocks[0]] + side.blocks[2:4])
    back = fds.decode_known_sequence(modulate(fds.frame_blocks(broken)))
    assert back.blocks == side.blocks[:1]
    assert [type(e) for e in back.diagnostics] == [error.BlockTypeMismatch] * 2

def test_garbage_after_last_block(side, framed):
    noise = bytes([mfm.GLITCH, mfm.LONG, mfm.SHORT] * 500)
    back = fds.decode_known_sequence(modulate(framed) + noise)
    assert back.blocks == side.blocks
    assert back.diagnostics == []

def test_two_block_side():
    side = Side([disk_header(), fds.Block(b'\x02\x00')])
    back = fds.decode_known_sequence(modulate(fds.frame_blocks(side)))
    assert back.blocks == side.blocks
    assert back.diagnostics == []

import pytest

from fdstick import convert, error
from fdstick.codec import fds, mfm
from fdstick.image.fds import FDS_MAGIC, write_fds_container
from fdstick.image.gd import GD_PREFIX, GD_TRAILER

from conftest import make_side


def gamedoctor_bytes(side) -> bytes:
    # Placeholder bytes in the CRC slots, as the copier leaves them.
    return (b'\x00\x00\x00'
            + b''.join(b.data + b'\xaa\x55' for b in side.blocks))

def test_fds_to_bin(side, framed):
    bins = convert.fds_to_bin(write_fds_container([side, side]))
    assert bins == [framed, framed]

def test_fds_to_bin_with_header(side, framed):
    dat = write_fds_container([side], header=True)
    assert dat[:5] == FDS_MAGIC + b'\x01'
    assert convert.fds_to_bin(dat) == [framed]

def test_bin_to_fds(side, framed):
    dat = convert.bin_to_fds([framed], header=True)
    assert dat == write_fds_container([side], header=True)
    assert len(dat) == fds.FDS_HEADER_SIZE + fds.FDS_SIDE_SIZE

def test_gamedoctor_to_bin(side, framed):
    dat = gamedoctor_bytes(side)
    assert dat[GD_PREFIX + 0x38 + GD_TRAILER] == fds.BlockType.FileCount
    assert convert.gamedoctor_to_bin(dat) == framed

def test_gamedoctor_bad_marker(side):
    dat = bytearray(gamedoctor_bytes(side))
    dat[GD_PREFIX + 0x38 + GD_TRAILER] = 0x03
    with pytest.raises(error.FormatError):
        convert.gamedoctor_to_bin(bytes(dat))

def test_bin_to_writestream(framed):
    out = convert.bin_to_writestream(framed)
    lead = fds.DEFAULT_LEAD_IN // 8 * 2
    assert len(out) == lead + 2 * len(framed)
    assert out[:lead] == b'\xaa' * lead
    # The gap-end mark: seven zero cells then a one cell.
    assert out[lead:lead+2] == bytes([mfm.expand[0], mfm.expand[8]])

def test_side_to_writestream_uses_side_lead_in(side, framed):
    side.lead_in = 800
    out = convert.side_to_writestream(side)
    assert out == mfm.bin_to_writestream(framed, 800)

def test_raw_round_trip(side):
    raw = convert.side_to_raw(side)
    back = convert.raw_to_side(raw)
    assert back.blocks == side.blocks
    assert back.diagnostics == []

def test_raw_to_bin(side, framed):
    rec = convert.raw_to_bin(convert.side_to_raw(side, 5000))
    assert rec.bin == framed
    assert rec.diagnostics == []

def test_bin_to_side(side, framed):
    back = convert.bin_to_side(framed, 1234)
    assert back.blocks == side.blocks
    assert back.lead_in == 1234

def test_capacity_is_reported():
    side = make_side(((b'BIG', fds.BIN_SIZE),))
    with pytest.raises(error.CapacityExceeded):
        convert.fds_to_bin(side.to_fds())

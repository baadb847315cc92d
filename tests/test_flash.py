import struct

import pytest

from fdstick import error, flash
from fdstick.codec import fds
from fdstick.flash import FlashHeader, FileFlash

from conftest import make_side


def test_header_layout():
    dat = FlashHeader('Zelda', 28300).pack()
    assert len(dat) == fds.FLASH_HEADER_SIZE
    assert dat[:12] == 'Zelda\0'.encode('utf-16-le')
    assert dat[0xf0:0xfe] == bytes(14)
    assert struct.unpack('<H', dat[0xfe:])[0] == 28300

def test_header_round_trip():
    hdr = FlashHeader.unpack(FlashHeader('Doki Doki Panic', 1000).pack())
    assert (hdr.name, hdr.lead_in, hdr.continuation) \
        == ('Doki Doki Panic', 1000, False)
    assert str(hdr) == 'Doki Doki Panic'

def test_header_name_is_terminated():
    dat = FlashHeader('x' * 200).pack()
    assert dat[0xee:0xf0] == bytes(2)
    assert FlashHeader.unpack(dat).name == 'x' * (flash.FILENAME_LENGTH - 1)

def test_empty_and_continuation_headers():
    empty = FlashHeader()
    assert empty.empty
    assert empty.pack() == b'\xff' * fds.FLASH_HEADER_SIZE
    assert FlashHeader.unpack(empty.pack()).empty
    cont = FlashHeader.unpack(FlashHeader(lead_in=500,
                                          continuation=True).pack())
    assert cont.continuation and not cont.empty
    assert cont.lead_in == 500
    assert str(cont) == '<continued>'

def test_zero_lead_in_means_default():
    dat = FlashHeader('A').pack()
    assert FlashHeader.unpack(dat).lead_in is None

def test_write_and_read_sides(side):
    dump = FileFlash()
    assert dump.nr_slots == flash.NR_SLOTS
    sides = [side, make_side(((b'SIDEB', 1000),))]
    sides[1].lead_in = 20000
    flash.write_sides(dump, 2, '/games/Metroid.fds', sides)
    hdrs = flash.list_slots(dump)
    assert [str(h) for h in hdrs[1:5]] \
        == ['<empty>', 'Metroid.fds', '<continued>', '<empty>']
    back = flash.read_sides(dump, 2)
    assert [s.blocks for s in back] == [s.blocks for s in sides]
    assert [s.lead_in for s in back] == [fds.DEFAULT_LEAD_IN, 20000]
    assert all(s.diagnostics == [] for s in back)

def test_read_empty_slot():
    with pytest.raises(error.Fatal):
        flash.read_sides(FileFlash(), 0)

def test_write_beyond_last_slot(side):
    with pytest.raises(error.Fatal):
        flash.write_sides(FileFlash(nr_slots=2), 1, 'A', [side, side])

def test_side_too_large_leaves_flash_untouched(side):
    dump = FileFlash()
    big = make_side(((b'BIG', fds.BIN_SIZE),))
    with pytest.raises(error.CapacityExceeded):
        flash.write_sides(dump, 0, 'A', [side, big])
    assert dump.dat == bytearray([0xff]) * len(dump.dat)

def test_flash_file(tmp_path, side):
    dump = FileFlash(nr_slots=2)
    flash.write_sides(dump, 1, 'A', [side])
    dump.to_file(str(tmp_path / 'flash.bin'))
    back = FileFlash.from_file(str(tmp_path / 'flash.bin'))
    assert back.nr_slots == 2
    assert flash.read_sides(back, 1)[0].blocks == side.blocks

def test_flash_bounds():
    dump = FileFlash(nr_slots=1)
    with pytest.raises(error.Fatal):
        dump.read(fds.SLOT_SIZE - 1, 2)
    with pytest.raises(error.Fatal):
        dump.write(fds.SLOT_SIZE, b'\x00')

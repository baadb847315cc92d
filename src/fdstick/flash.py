# fdstick/flash.py
#
# Disk slots in the adapter's flash memory. Each 64kB slot holds a 256-byte
# header followed by one disk side in gapped (bin) layout.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import List, Optional, Tuple

import os, struct

from fdstick import error
from fdstick.codec import fds
from fdstick.codec.fds import Side
from fdstick.codec.crc import GAP_END_MARK

FILENAME_LENGTH = 120 # UTF-16 code units, including terminator
NR_SLOTS = 8

class FlashHeader:
    """name: Title of the first side of a disk, or None for an empty slot.
    continuation: Slot holds a further side of the title in the previous slot.
    lead_in: Lead-in length in bits, or None for the drive default.
    """

    # filename, reserved, lead_in
    _fmt = '<%ds14xH' % (FILENAME_LENGTH * 2)

    def __init__(self, name: Optional[str] = None,
                 lead_in: Optional[int] = None,
                 continuation: bool = False) -> None:
        self.name = name
        self.lead_in = lead_in
        self.continuation = continuation

    @property
    def empty(self) -> bool:
        return self.name is None and not self.continuation

    def pack(self) -> bytes:
        if self.empty:
            return bytes([0xff]) * fds.FLASH_HEADER_SIZE
        name = b''
        if not self.continuation:
            assert self.name is not None
            name = self.name.encode('utf-16-le')
            # Last code unit is always the terminator.
            name = name[:(FILENAME_LENGTH-1)*2]
        return struct.pack(self._fmt, name, self.lead_in or 0)

    @classmethod
    def unpack(cls, dat: bytes) -> FlashHeader:
        error.check(len(dat) >= fds.FLASH_HEADER_SIZE,
                    'Flash header is truncated')
        units, lead_in = struct.unpack(cls._fmt,
                                      dat[:fds.FLASH_HEADER_SIZE])
        first, = struct.unpack('<H', units[:2])
        if first == 0xffff:
            return cls()
        if first == 0:
            return cls(lead_in = lead_in or None, continuation = True)
        name = units.decode('utf-16-le', 'replace')
        return cls(name.split('\0')[0], lead_in or None)

    def __str__(self) -> str:
        if self.empty:
            return '<empty>'
        if self.continuation:
            return '<continued>'
        return str(self.name)


class Flash:
    """Byte-addressed flash storage, laid out as SLOT_SIZE slots."""

    nr_slots = NR_SLOTS

    def read(self, offset: int, length: int) -> bytes:
        raise NotImplementedError

    ## Writes are page-aligned and erase as required.
    def write(self, offset: int, dat: bytes) -> None:
        raise NotImplementedError

    def erase(self, slot: int) -> None:
        raise NotImplementedError


class FileFlash(Flash):
    """Flash contents held in memory, optionally loaded from/saved to a
    flash dump file."""

    def __init__(self, dat: Optional[bytes] = None,
                 nr_slots: int = NR_SLOTS) -> None:
        if dat is not None:
            nr_slots = (len(dat) + fds.SLOT_SIZE - 1) // fds.SLOT_SIZE
        self.nr_slots = nr_slots
        self.dat = bytearray([0xff]) * (nr_slots * fds.SLOT_SIZE)
        if dat is not None:
            self.dat[:len(dat)] = dat

    @classmethod
    def from_file(cls, name: str) -> FileFlash:
        with open(name, 'rb') as f:
            return cls(f.read())

    def to_file(self, name: str) -> None:
        with open(name, 'wb') as f:
            f.write(self.dat)

    def read(self, offset: int, length: int) -> bytes:
        error.check(offset + length <= len(self.dat),
                    'Flash read beyond end of device (%X+%X)'
                    % (offset, length))
        return bytes(self.dat[offset:offset+length])

    def write(self, offset: int, dat: bytes) -> None:
        error.check(offset + len(dat) <= len(self.dat),
                    'Flash write beyond end of device (%X+%X)'
                    % (offset, len(dat)))
        self.dat[offset:offset+len(dat)] = dat

    def erase(self, slot: int) -> None:
        off = slot * fds.SLOT_SIZE
        self.dat[off:off+fds.SLOT_SIZE] = bytes([0xff]) * fds.SLOT_SIZE


def slot_image(side: Side, header: FlashHeader) -> bytes:
    """Header and framed side, padded to a whole slot."""
    dat = fds.frame_blocks(side)
    return (header.pack() + dat + bytes(fds.BIN_SIZE - len(dat)))

def write_sides(flash: Flash, slot: int, name: str,
                sides: List[Side]) -> None:
    """Store the sides of a disk in consecutive slots from slot."""
    error.check(slot + len(sides) <= flash.nr_slots,
                'Not enough flash slots for %d sides at slot %d'
                % (len(sides), slot + 1))
    # Frame everything first: nothing is written if a side does not fit.
    images = []
    for i, side in enumerate(sides):
        lead_in = side.lead_in or fds.DEFAULT_LEAD_IN
        if i == 0:
            hdr = FlashHeader(os.path.basename(name), lead_in)
        else:
            hdr = FlashHeader(lead_in = lead_in, continuation = True)
        images.append(slot_image(side, hdr))
    for i, dat in enumerate(images):
        flash.erase(slot + i)
        flash.write((slot + i) * fds.SLOT_SIZE, dat)

def read_header(flash: Flash, slot: int) -> FlashHeader:
    return FlashHeader.unpack(flash.read(slot * fds.SLOT_SIZE,
                                         fds.FLASH_HEADER_SIZE))

def read_side(flash: Flash, slot: int) -> Tuple[FlashHeader, Side]:
    off = slot * fds.SLOT_SIZE
    hdr = read_header(flash, slot)
    dat = flash.read(off + fds.FLASH_HEADER_SIZE, fds.BIN_SIZE)
    return hdr, fds.bin_to_side(dat, hdr.lead_in)

def read_sides(flash: Flash, slot: int) -> List[Side]:
    """Read the disk stored at slot, with all its continuation sides."""
    error.check(not read_header(flash, slot).empty,
                'Flash slot %d is empty' % (slot + 1))
    sides = [read_side(flash, slot)[1]]
    slot += 1
    while slot < flash.nr_slots:
        hdr = read_header(flash, slot)
        if not hdr.continuation:
            break
        sides.append(read_side(flash, slot)[1])
        slot += 1
    return sides

def list_slots(flash: Flash) -> List[FlashHeader]:
    return [read_header(flash, slot) for slot in range(flash.nr_slots)]

def is_dump(dat: bytes) -> bool:
    """Whether dat is laid out as whole flash slots. The first slot must be
    erased or hold a side starting right after its header."""
    if len(dat) == 0 or len(dat) % fds.SLOT_SIZE:
        return False
    if dat[:fds.FLASH_HEADER_SIZE] == bytes([0xff]) * fds.FLASH_HEADER_SIZE:
        return True
    return dat[fds.FLASH_HEADER_SIZE] == GAP_END_MARK


# Local variables:
# python-indent: 4
# End:

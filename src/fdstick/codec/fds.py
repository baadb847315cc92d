# fdstick/codec/fds.py
#
# Famicom Disk System block structure: framing into the gapped "bin"
# layout, and decoding from pulse symbols when the structure is known.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import List, NamedTuple, Optional, Tuple

import struct
from bitarray import bitarray

from fdstick import error
from fdstick.codec import mfm
from fdstick.codec.crc import crc16, crc16_bytes, GAP_END_MARK

DEFAULT_LEAD_IN   = 28300         # bits
GAP               = 976//8 - 1    # bytes of zeros after each block
MIN_GAP_SIZE      = 0x300         # bits
FDS_SIDE_SIZE     = 65500
FDS_HEADER_SIZE   = 16
SLOT_SIZE         = 0x10000
FLASH_HEADER_SIZE = 0x100
BIN_SIZE          = SLOT_SIZE - FLASH_HEADER_SIZE

# "\x01*NI..." as it appears on disk
DISK_SIGNATURE = b'\x01\x2a\x4e'

## Block types
class BlockType:
    Disk      = 1
    FileCount = 2
    File      = 3
    FileData  = 4
    str = {
        Disk: "Disk Header",
        FileCount: "File Count",
        File: "File Header",
        FileData: "File Data"
    }

block_size = { BlockType.Disk: 0x38,
               BlockType.FileCount: 2,
               BlockType.File: 16 }

next_type = { None: BlockType.Disk,
              BlockType.Disk: BlockType.FileCount,
              BlockType.FileCount: BlockType.File,
              BlockType.File: BlockType.FileData,
              BlockType.FileData: BlockType.File }

# Pulse symbols of the gap end and the start of every disk header block.
FIRST_BLOCK_SIGNATURE = bytes([1,0,1,0,0,0,0,0, 0,1,2,2,1,0,1,0,
                               0,1,1,2,1,1,1,1, 1,1,0,0,1,1,1,0])
SIGNATURE_WINDOW = 0x2000*8

gap_pattern = bytes([mfm.SHORT]) * MIN_GAP_SIZE + bytes([mfm.MEDIUM])


class Block:

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    @property
    def type(self) -> int:
        return self.data[0] if self.data else -1

    @property
    def file_size(self) -> int:
        """Declared size of the following file-data block (type 3 only)."""
        size, = struct.unpack('<H', self.data[13:15])
        return size

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, x) -> bool:
        return isinstance(x, Block) and self.data == x.data

    def __str__(self) -> str:
        s = BlockType.str.get(self.type, 'Unknown (%02X)' % self.type)
        if self.type == BlockType.File:
            name = self.data[3:11].decode('ascii', 'replace')
            s += ' #%d "%s" (%d bytes)' % (self.data[2], name,
                                          self.file_size)
        return s


def expected_size(btype: int, prev: Optional[Block]) -> Optional[int]:
    if btype == BlockType.FileData:
        if prev is None or prev.type != BlockType.File or len(prev) < 16:
            return None
        return 1 + prev.file_size
    return block_size.get(btype)


class Side:

    def __init__(self, blocks: Optional[List[Block]] = None,
                 lead_in: Optional[int] = None) -> None:
        self.blocks: List[Block] = blocks if blocks is not None else []
        self.lead_in = lead_in
        # Gapped layout this side was recovered from, if any.
        self.bin: Optional[bytes] = None
        self.diagnostics: List[error.BlockError] = []

    @property
    def nr_files(self) -> int:
        return len([b for b in self.blocks if b.type == BlockType.File])

    def summary_string(self) -> str:
        s = "FDS side (%d files, %d blocks" % (self.nr_files,
                                               len(self.blocks))
        if self.diagnostics:
            s += ", %d errors" % len(self.diagnostics)
        return s + ")"

    def to_fds(self) -> bytes:
        dat = b''.join(b.data for b in self.blocks)
        error.check(len(dat) <= FDS_SIDE_SIZE,
                    'Side is too large for an FDS image (%d bytes)'
                    % len(dat))
        return dat + bytes(FDS_SIDE_SIZE - len(dat))


def parse_blocks(dat: bytes, pos: int = 0, trailer: int = 0) -> Side:
    """Enumerate the 1, 2, (3, 4)* block sequence of a container side.

    trailer: Bytes following each block which are skipped.
    """
    blocks: List[Block] = []

    def take(size: int) -> Block:
        nonlocal pos
        if pos + size > len(dat):
            raise error.FormatError('Truncated block at offset %d' % pos)
        b = Block(dat[pos:pos+size])
        pos += size + trailer
        blocks.append(b)
        return b

    take(block_size[BlockType.Disk])
    take(block_size[BlockType.FileCount])
    while pos < len(dat) and dat[pos] == BlockType.File:
        hdr = take(block_size[BlockType.File])
        take(1 + hdr.file_size)
    return Side(blocks)


def frame_blocks(side: Side, capacity: int = BIN_SIZE) -> bytes:
    """Lay out blocks with gap-end marks, CRCs and gaps (bin format)."""
    out = bytearray()
    for b in side.blocks:
        out.append(GAP_END_MARK)
        out += b.data
        out += crc16_bytes(b.data)
        out += bytes(GAP)
    if len(out) > capacity:
        raise error.CapacityExceeded(len(out) - capacity,
                                     'reduce gap size or file count')
    return bytes(out)


def bin_to_side(dat: bytes, lead_in: Optional[int] = None) -> Side:
    """Walk a byte-aligned gapped layout back into blocks."""
    side = Side(lead_in = lead_in)
    side.bin = bytes(dat)
    pos, prev = 0, None
    while True:
        while pos < len(dat) and dat[pos] == 0:
            pos += 1
        if pos >= len(dat):
            break
        if dat[pos] != GAP_END_MARK:
            side.diagnostics.append(error.BadSpacing(
                pos, 'Unexpected byte %02X in gap' % dat[pos]))
            break
        btype = next_type[prev.type if prev is not None else None]
        found = dat[pos+1] if pos+1 < len(dat) else 0
        if found != btype:
            # A new file header is optional: anything else ends the side.
            if btype != BlockType.File:
                side.diagnostics.append(error.BlockTypeMismatch(
                    pos, found, btype))
            break
        size = expected_size(btype, prev)
        assert size is not None
        blk = dat[pos+1:pos+1+size+2]
        if len(blk) < size+2:
            side.diagnostics.append(error.BadSpacing(
                pos, 'Truncated block (%d<%d bytes)' % (len(blk), size+2)))
            break
        if crc16(blk) != 0:
            side.diagnostics.append(error.BadCrc(
                pos, struct.unpack('<H', blk[-2:])[0],
                crc16(blk[:-2])))
        prev = Block(blk[:-2])
        side.blocks.append(prev)
        pos += 1 + size + 2
    return side


## Known-structure decode

class Cursor(NamedTuple):
    inp: int # symbol offset
    out: int # output byte offset


def decode_block(symbols: bytes, cursor: Cursor, out: bytearray,
                 size: int, btype: int,
                 diagnostics: List[error.BlockError]) -> Cursor:
    """Decode the next block after cursor.inp into out[cursor.out:].

    Raises GapNotFound or BlockTypeMismatch. CRC errors are appended to
    diagnostics. The CRC bytes are cleared in the output.
    """
    if cursor.out + size + 2 > len(out):
        raise error.CapacityExceeded(cursor.out + size + 2 - len(out))

    pos = symbols.find(gap_pattern, cursor.inp)
    if pos < 0:
        raise error.GapNotFound(cursor.inp)
    start = pos + MIN_GAP_SIZE

    nbits = (size + 2) * 8
    bits, inp = bitarray(endian='little'), start + 1
    for b, inp in mfm.demodulate(symbols, start + 1):
        bits.append(b)
        if len(bits) >= nbits:
            break
    else:
        # Garbage at the end of the disk, most likely.
        raise error.GapNotFound(start)
    inp += 1
    blk = bits[:nbits].tobytes()

    if blk[0] != btype:
        raise error.BlockTypeMismatch(
            cursor.out, blk[0], btype, start, inp,
            cursor = Cursor(inp, cursor.out))

    if crc16(blk) != 0:
        diagnostics.append(error.BadCrc(
            cursor.out, struct.unpack('<H', blk[-2:])[0], crc16(blk[:-2])))

    out[cursor.out:cursor.out+size+2] = blk[:size] + bytes(2)
    return Cursor(inp, cursor.out + size)


def find_first_block(symbols: bytes) -> int:
    """Offset of the disk header's gap end in the capture, or -1."""
    return symbols.find(FIRST_BLOCK_SIGNATURE, 0,
                        SIGNATURE_WINDOW + len(FIRST_BLOCK_SIGNATURE))


def decode_known_sequence(symbols: bytes) -> Side:
    """Decode a standard 1, 2, (3, 4)* disk side from pulse symbols."""
    side = Side()
    out = bytearray(FDS_SIDE_SIZE + 2)

    # Lead-in varies a lot between drives: find the first block to get
    # our bearings.
    first = find_first_block(symbols)
    cursor = Cursor(max(0, first - MIN_GAP_SIZE), 0)

    prev: Optional[Block] = None
    while True:
        btype = next_type[prev.type if prev is not None else None]
        size = expected_size(btype, prev)
        assert size is not None
        try:
            nxt = decode_block(symbols, cursor, out, size, btype,
                               side.diagnostics)
        except error.GapNotFound:
            break
        except error.CapacityExceeded as err:
            side.diagnostics.append(error.BadSpacing(
                cursor.out, str(err)))
            break
        except error.BlockTypeMismatch as err:
            side.diagnostics.append(err)
            cursor = err.cursor
            continue
        prev = Block(out[cursor.out:nxt.out])
        side.blocks.append(prev)
        cursor = nxt

    return side

# Local variables:
# python-indent: 4
# End:

# fdstick/codec/heuristic.py
#
# Best-effort reconstruction of a gapped disk image from a raw capture,
# without trusting the disk to follow the standard block sequence.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import List, NamedTuple, Optional, Set, Tuple

import re
import struct
from bitarray import bitarray

from fdstick import error
from fdstick.codec import mfm, fds
from fdstick.codec.crc import crc16, crc16_new

class Thresholds:
    """Tuning of the reconstruction heuristics, from a colon-separated
    list of name=value settings, e.g. 'long_gap=900:short_gap=16'.

    glitch_window: Max symbols between a glitch and the gap it precedes
    short_gap:     Zero run that counts as a gap after a glitch, and
                   zero bits that must follow a CRC match
    long_gap:      Zero run across which gap starts are pulled back
    min_gap:       Zero bits before a gap-end mark, and smallest valid gap
    window:        Symbols searched for the first disk header
    """

    def __init__(self, spec: str = ''):
        self.glitch_window = 16
        self.short_gap = 16
        self.long_gap = 900
        self.min_gap = fds.MIN_GAP_SIZE
        self.window = fds.SIGNATURE_WINDOW
        for x in filter(None, spec.split(':')):
            k,v = x.split('=')
            if k not in self.__dict__:
                raise ValueError()
            setattr(self, k, int(v, 0))

    def __str__(self) -> str:
        return ':'.join('%s=%d' % kv for kv in self.__dict__.items())

    @property
    def gap_pattern(self) -> bytes:
        return bytes([mfm.SHORT]) * self.min_gap + bytes([mfm.MEDIUM])


class Reconstruction:

    def __init__(self) -> None:
        self.bin = bytes()
        # Output byte offset -> input symbol offset
        self.position_map: List[int] = []
        # (output offset, length) of each block, gap-end mark included
        self.blocks: List[Tuple[int,int]] = []
        self.diagnostics: List[error.BlockError] = []

    def summary_string(self) -> str:
        return ("Reconstructed (%d blocks, %d bytes, %d errors)"
                % (len(self.blocks), len(self.bin), len(self.diagnostics)))


## Step 1: Splices and track-start artifacts show up as a glitch just
## before a gap. Mark the start of such zero runs as gap starts.
def mark_glitch_gaps(symbols: bytes, marks: Set[int],
                     th: Thresholds) -> None:
    zero_run = re.compile(rb'\x00{%d,}' % (th.short_gap + 1))
    for g in re.finditer(rb'\x03', symbols):
        i = g.start()
        z = zero_run.search(symbols, i + 1,
                            i + th.glitch_window + th.short_gap + 2)
        if z is not None and z.start() <= i + th.glitch_window:
            marks.add(z.start())


## Step 2: The disk header always starts with the same bit pattern.
def find_start(symbols: bytes, th: Thresholds) -> int:
    sig = fds.FIRST_BLOCK_SIGNATURE
    pos = symbols.find(sig, 0, th.window + len(sig))
    if pos >= 0:
        return pos
    pos = symbols.find(th.gap_pattern)
    if pos < 0:
        raise error.GapNotFound(0)
    return pos + th.min_gap


## Step 3: CRC-driven block end detection.

class ScanResult(NamedTuple):
    end: Optional[int]    # symbol offset where the gap starts
    data: bytes           # block bytes decoded up to the end
    resume: Optional[int] # next gap-end mark, if already located
    crc_ok: bool

def _zeros_follow(symbols: bytes, pos: int, pending: Tuple[int,...],
                  prev: int, n: int) -> bool:
    if any(pending):
        return False
    count = len(pending)
    for b, _ in mfm.demodulate(symbols, pos, prev):
        if count >= n:
            break
        if b:
            return False
        count += 1
    return True

def scan_block(symbols: bytes, pos: int, th: Thresholds,
               prev_block: Optional[fds.Block] = None) -> ScanResult:
    """CRC-scan the block whose gap-end mark is at symbols[pos]."""
    crc = crc16_new()
    out = bytearray()
    prev, byte, nbit = 1, 0, 0
    zeros, zero_from = 0, pos + 1
    extent: Optional[int] = None
    for i in range(pos + 1, len(symbols)):
        bits, prev = mfm.decode_symbol(prev, symbols[i])
        for k, b in enumerate(bits):
            if b:
                # A full gap and a new mark, past the declared block end,
                # without a CRC match: the block ended where the gap began.
                if (zeros >= th.min_gap and extent is not None
                    and len(out) >= extent):
                    return ScanResult(zero_from, bytes(out), i, False)
                zeros = 0
            else:
                if zeros == 0:
                    zero_from = i
                zeros += 1
            byte |= b << nbit
            nbit += 1
            if nbit < 8:
                continue
            out.append(byte)
            crc.update(bytes([byte]))
            byte, nbit = 0, 0
            if len(out) == 1:
                size = fds.expected_size(out[0], prev_block)
                extent = 0 if size is None else size + 2
            if (len(out) >= 3 and crc.crcValue == 0
                and _zeros_follow(symbols, i+1, bits[k+1:], prev,
                                  th.short_gap)):
                return ScanResult(i+1, bytes(out), None, True)
    return ScanResult(None, bytes(out), None, False)

def mark_crc_ends(symbols: bytes, start: int, marks: Set[int],
                  th: Thresholds) -> None:
    pos: Optional[int] = start
    prev_block: Optional[fds.Block] = None
    while pos is not None:
        r = scan_block(symbols, pos, th, prev_block)
        if r.data:
            prev_block = fds.Block(r.data)
        if r.end is None:
            break
        marks.add(r.end)
        if r.resume is not None:
            pos = r.resume
            continue
        gap = symbols.find(th.gap_pattern, r.end)
        pos = None if gap < 0 else gap + th.min_gap


## Step 4: Pull gap starts back across long zero runs (and any splice
## glitches just before the mark) to the true end of the block.
def _zero_run_before(symbols: bytes, end: int) -> int:
    i = end
    while i > 0 and symbols[i-1] == mfm.SHORT:
        i -= 1
    return end - i

def consolidate_marks(symbols: bytes, marks: Set[int],
                      th: Thresholds) -> Set[int]:
    glitch = bytes([mfm.GLITCH])
    out = set()
    for m in marks:
        end = m
        while True:
            g = symbols.rfind(glitch, max(0, end - th.glitch_window), end)
            if g < 0:
                break
            end = g
        run = _zero_run_before(symbols, end)
        out.add(end - run if run > th.long_gap else m)
    return out


## Step 5: Decode with inline block verification.

def verify_block(data: bytes, prev: Optional[fds.Block],
                 gap: Optional[int], th: Thresholds,
                 offset: int = 0) -> List[error.BlockError]:
    """Check a reconstructed block and the gap following it.

    data: From the gap-end mark up to the next block's mark.
    gap: Zero bits before the next block's mark, if there is one.
    """
    errs: List[error.BlockError] = []
    payload = data[1:]
    if not payload:
        return [error.BadSpacing(offset, 'Empty block')]

    btype = payload[0]
    # Unknown previous type: expect a file header.
    expected = fds.next_type.get(prev.type if prev is not None else None,
                                 fds.BlockType.File)
    if btype != expected:
        errs.append(error.BlockTypeMismatch(offset, btype, expected))

    size = fds.expected_size(btype, prev)
    if size is None:
        # Unknown layout: the CRC scan ended the block on its CRC, which
        # may itself end in zero bytes.
        n = len(payload.rstrip(b'\x00'))
        for n in range(max(n, 3), min(n + 2, len(payload)) + 1):
            if crc16(payload[:n]) == 0:
                blk = payload[:n]
                break
        else:
            blk = payload
    elif len(payload) < size + 2:
        errs.append(error.BadSpacing(
            offset, 'Block truncated (%d<%d bytes)'
            % (len(payload), size + 2)))
        blk = payload
    else:
        blk = payload[:size+2]
        extra = len(payload[size+2:].rstrip(b'\x00'))
        if extra:
            errs.append(error.BadSpacing(
                offset, '%d bytes of data beyond block end' % extra))
    if len(blk) >= 2 and crc16(blk) != 0:
        errs.append(error.BadCrc(offset, struct.unpack('<H', blk[-2:])[0],
                                 crc16(blk[:-2])))

    if gap is not None and gap < th.min_gap:
        errs.append(error.BadSpacing(offset, 'Short gap (%d bits)' % gap))
    return errs


def assemble(symbols: bytes, start: int, marks: Set[int],
             th: Thresholds) -> Reconstruction:
    rec = Reconstruction()
    out = bitarray(endian='little')

    def emit(b: int, i: int) -> None:
        if len(out) % 8 == 0:
            rec.position_map.append(i)
        out.append(b)

    def verify(end: int, gap: Optional[int]) -> None:
        nonlocal prev_block
        if block_start is None:
            return
        data = out[block_start*8:end*8].tobytes()
        rec.diagnostics += verify_block(data, prev_block, gap, th,
                                        block_start)
        prev_block = fds.Block(data[1:])

    prev_block: Optional[fds.Block] = None
    block_start: Optional[int] = None
    in_gap, zeros, prev = True, th.min_gap, 0
    # Alignment bits still to be taken out of the current gap.
    debt = 0

    for i in range(start, len(symbols)):
        if i in marks and not in_gap:
            # Block end: byte-align the output.
            debt = -len(out) % 8
            for _ in range(debt):
                emit(0, i)
            assert block_start is not None
            rec.blocks.append((block_start, len(out)//8 - block_start))
            in_gap, zeros = True, 0
        bits, prev = mfm.decode_symbol(prev, symbols[i])
        if not in_gap:
            for b in bits:
                emit(b, i)
        elif bits == (1,) and zeros >= th.min_gap:
            # Gap end: place the mark bit so it reads back as 0x80.
            while len(out) % 8 != 7:
                emit(0, i)
            verify(len(out)//8, zeros)
            emit(1, i)
            block_start = len(out)//8 - 1
            in_gap, debt = False, 0
        else:
            # Gap noise decodes as zeros.
            for b in bits:
                zeros = 0 if b else zeros + 1
                if debt:
                    debt -= 1
                else:
                    emit(0, i)

    last = max(start, len(symbols) - 1)
    while len(out) % 8:
        emit(0, last)
    if not in_gap:
        assert block_start is not None
        rec.blocks.append((block_start, len(out)//8 - block_start))
    verify(len(out)//8, None)
    rec.bin = out.tobytes()
    return rec


def reconstruct(symbols: bytes,
                th: Optional[Thresholds] = None) -> Reconstruction:
    """Recover a bin image from pulse symbols of unknown structure."""
    if th is None:
        th = Thresholds()
    marks: Set[int] = set()
    mark_glitch_gaps(symbols, marks, th)
    start = find_start(symbols, th)
    mark_crc_ends(symbols, start, marks, th)
    marks = consolidate_marks(symbols, marks, th)
    return assemble(symbols, start, marks, th)

# Local variables:
# python-indent: 4
# End:

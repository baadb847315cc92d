# fdstick/codec/mfm.py
#
# Pulse-width symbols and the MFM bit rules used on the disk surface.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Dict, Iterator, Optional, Tuple

from bitarray import bitarray

## Pulse symbols: quantised flux-transition intervals
SHORT  = 0 # 1 bitcell
MEDIUM = 1 # 1.5 bitcells
LONG   = 2 # 2 bitcells
GLITCH = 3 # out of range

# Capture byte thresholds, as (upper bound, symbol).
quantise_bands = [ (0x30, GLITCH), (0x50, SHORT), (0x70, MEDIUM),
                   (0xa0, LONG), (0x100, GLITCH) ]

def _mk_quantise_table() -> bytes:
    t = bytearray()
    for x in range(256):
        t.append(next(sym for bound, sym in quantise_bands if x < bound))
    return bytes(t)
_quantise_table = _mk_quantise_table()

def quantise(raw: bytes) -> bytes:
    """Quantise a raw capture into pulse symbols."""
    return bytes(raw).translate(_quantise_table)

# Representative capture byte for each symbol (middle of its band).
symbol_pulse = bytes([0x40, 0x60, 0x88, 0x10])

def symbols_to_pulses(symbols: bytes) -> bytes:
    return bytes(symbols).translate(symbol_pulse + bytes(252))


## Decode: (previous bit, symbol) -> (decoded bits, new previous bit)
decode_table: Dict[Tuple[int,int], Tuple[Tuple[int,...],int]] = {
    (0, SHORT):  ((0,),   0),
    (0, MEDIUM): ((1,),   1),
    (1, SHORT):  ((1,),   1),
    (1, MEDIUM): ((0, 0), 0),
    (1, LONG):   ((0, 1), 1),
}
# Glitches, and LONG after a 0, are illegal. Emit a 0 and resync.
glitch_decode: Tuple[Tuple[int,...],int] = ((0,), 0)

def decode_symbol(prev: int, sym: int) -> Tuple[Tuple[int,...],int]:
    return decode_table.get((prev, sym), glitch_decode)

def demodulate(symbols: bytes, pos: int,
               prev: int = 1) -> Iterator[Tuple[int,int]]:
    """Yield (bit, symbol offset) for every bit decoded from symbols[pos:]."""
    for i in range(pos, len(symbols)):
        bits, prev = decode_symbol(prev, symbols[i])
        for b in bits:
            yield b, i

def symbols_to_bin(symbols: bytes, prev: int = 0) -> bytes:
    """Decode a whole symbol stream to bytes, LSB first."""
    bits = bitarray(endian='little')
    bits.extend(b for b, _ in demodulate(symbols, 0, prev))
    return bits.tobytes()


## Encode: (previous bit, bit) -> half-cell offset of the flux transition
## within the bitcell, or None if there is no transition.
transition_table: Dict[Tuple[int,int], Optional[int]] = {
    (0, 0): 0,    # clock transition between two zeros
    (0, 1): 1,
    (1, 0): None,
    (1, 1): 1,
}
# Half cells between transitions -> symbol.
interval_symbol = { 2: SHORT, 3: MEDIUM, 4: LONG }

def bits_to_symbols(bits: bitarray) -> bytes:
    out = bytearray()
    prev, last = 0, -2
    for i, bit in enumerate(bits):
        t = transition_table[prev, bit]
        if t is not None:
            pos = 2*i + t
            out.append(interval_symbol[pos - last])
            last = pos
        prev = bit
    return bytes(out)

def bin_to_symbols(dat: bytes, lead_in: int = 0) -> bytes:
    """Modulate a bin buffer, preceded by lead_in zero bits."""
    bits = bitarray(lead_in, endian='little')
    bits.setall(0)
    bits.frombytes(bytes(dat))
    return bits_to_symbols(bits)


## Write-head stream: each data bit becomes a 2-bit cell, LSB first.
def _expand(nibble: int) -> int:
    x = 0
    for i in range(4):
        x |= (0b01 if (nibble >> i) & 1 else 0b10) << (i*2)
    return x
expand = bytes(map(_expand, range(16)))

_expand_lo = bytes(expand[x & 15] for x in range(256))
_expand_hi = bytes(expand[x >> 4] for x in range(256))

LEAD_IN_FILL = 0xaa

def bin_to_writestream(dat: bytes, lead_in: int) -> bytes:
    """Expand a bin buffer into the byte stream driven to the write head."""
    dat = bytes(dat)
    out = bytearray(len(dat) * 2)
    out[0::2] = dat.translate(_expand_lo)
    out[1::2] = dat.translate(_expand_hi)
    return bytes([LEAD_IN_FILL]) * (lead_in // 8 * 2) + out

# Local variables:
# python-indent: 4
# End:

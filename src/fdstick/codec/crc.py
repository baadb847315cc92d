# fdstick/codec/crc.py
#
# Disk controller block CRC.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

import crcmod.predefined

GAP_END_MARK = 0x80

# The controller shifts the register right as bits stream past the head
# (poly 0x10810, seed 0x8000, CRC bytes appended as zeros). That is the
# reflected CCITT CRC with zero seed, run over the gap-end mark and payload.
_crc16 = crcmod.predefined.Crc('kermit')
_seeded = _crc16.new(bytes([GAP_END_MARK]))

def crc16_new() -> crcmod.Crc:
    """Fresh incremental CRC, already seeded with the gap-end mark."""
    return _seeded.copy()

def crc16(dat: bytes) -> int:
    """CRC of a block with payload dat (gap-end mark is implicit).

    Over a payload with its little-endian CRC appended the result is zero.
    """
    crc = crc16_new()
    crc.update(bytes(dat))
    return crc.crcValue

def crc16_bytes(dat: bytes) -> bytes:
    return crc16(dat).to_bytes(2, 'little')

# Local variables:
# python-indent: 4
# End:

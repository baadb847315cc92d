# fdstick/convert.py
#
# End-to-end conversions between disk containers, gapped bin layout, the
# write-head stream and raw captures.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import List, Optional

from fdstick.codec import fds, mfm, heuristic
from fdstick.codec.fds import Side
from fdstick.image.fds import read_fds_container, write_fds_container
from fdstick.image.gd import read_gamedoctor_container

def fds_to_bin(dat: bytes) -> List[bytes]:
    """One bin per side of an FDS image."""
    return [fds.frame_blocks(side) for side in read_fds_container(dat)]

def gamedoctor_to_bin(dat: bytes) -> bytes:
    side, = read_gamedoctor_container(dat)
    return fds.frame_blocks(side)

def bin_to_writestream(dat: bytes, lead_in: Optional[int] = None) -> bytes:
    if lead_in is None:
        lead_in = fds.DEFAULT_LEAD_IN
    return mfm.bin_to_writestream(dat, lead_in)

def side_to_writestream(side: Side) -> bytes:
    return bin_to_writestream(fds.frame_blocks(side), side.lead_in)

def raw_to_side(raw: bytes) -> Side:
    """Decode a capture of a disk which follows the standard block layout."""
    return fds.decode_known_sequence(mfm.quantise(raw))

def raw_to_bin(raw: bytes, thresholds: Optional[heuristic.Thresholds] = None
               ) -> heuristic.Reconstruction:
    """Reconstruct a capture of a disk of unknown layout."""
    return heuristic.reconstruct(mfm.quantise(raw), thresholds)

def bin_to_side(dat: bytes, lead_in: Optional[int] = None) -> Side:
    return fds.bin_to_side(dat, lead_in)

def bin_to_fds(bins: List[bytes], header: bool = False) -> bytes:
    return write_fds_container([fds.bin_to_side(b) for b in bins], header)

def side_to_raw(side: Side, lead_in: Optional[int] = None) -> bytes:
    """Simulated capture of a side, as read back by the adapter."""
    if lead_in is None:
        lead_in = side.lead_in or fds.DEFAULT_LEAD_IN
    symbols = mfm.bin_to_symbols(fds.frame_blocks(side), lead_in)
    return mfm.symbols_to_pulses(symbols)


# Local variables:
# python-indent: 4
# End:

# fdstick/image/fds.py
#
# Native FDS disk images, with or without the 16-byte "FDS\x1a" header.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import List

from fdstick import error
from fdstick.codec import fds
from fdstick.codec.fds import Side
from .image import Image, ImageOpts, yes_no

FDS_MAGIC = b'FDS\x1a'

def read_fds_container(dat: bytes) -> List[Side]:
    """Split an FDS image into sides and enumerate the blocks of each."""
    nr_sides = 0
    if dat[:4] == FDS_MAGIC:
        nr_sides = dat[4]
        dat = dat[fds.FDS_HEADER_SIZE:]
    if nr_sides == 0:
        nr_sides = (len(dat) + fds.FDS_SIDE_SIZE - 1) // fds.FDS_SIDE_SIZE
    if nr_sides == 0:
        raise error.FormatError('Empty FDS image')
    sides = []
    for i in range(nr_sides):
        sdat = dat[i*fds.FDS_SIDE_SIZE:(i+1)*fds.FDS_SIDE_SIZE]
        # Short trailing sides are zero padded.
        sdat += bytes(fds.FDS_SIDE_SIZE - len(sdat))
        if sdat[:3] != fds.DISK_SIGNATURE:
            raise error.FormatError('Side %d: Not an FDS disk side' % (i+1))
        try:
            sides.append(fds.parse_blocks(sdat))
        except error.FormatError as err:
            raise error.FormatError('Side %d: %s' % (i+1, err))
    return sides

def write_fds_container(sides: List[Side], header: bool = False) -> bytes:
    out = bytearray()
    if header:
        out += FDS_MAGIC + bytes([len(sides)])
        out += bytes(fds.FDS_HEADER_SIZE - len(out))
    for side in sides:
        out += side.to_fds()
    return bytes(out)


class FDSOpts(ImageOpts):
    """header: Emit the 16-byte FDS header when writing.
    """

    w_settings = [ 'header' ]

    def __init__(self) -> None:
        self._header = False

    @property
    def header(self) -> bool:
        return self._header
    @header.setter
    def header(self, header) -> None:
        self._header = yes_no('FDS', 'header', header)


class FDS(Image):

    opts: FDSOpts

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.opts = FDSOpts()

    def from_bytes(self, dat: bytes) -> None:
        self.sides = read_fds_container(dat)

    def get_image(self) -> bytes:
        error.check(len(self.sides) != 0, 'FDS: No disk sides to write')
        return write_fds_container(self.sides, self.opts.header)


# Local variables:
# python-indent: 4
# End:

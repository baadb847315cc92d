# fdstick/image/gd.py
#
# Game Doctor disk dumps. Each block is followed by two placeholder bytes
# where the disk CRC would be. They carry no information.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import List

from fdstick import error
from fdstick.codec import fds
from fdstick.codec.fds import Side, BlockType
from .image import Image

GD_PREFIX = 3
GD_TRAILER = 2

def read_gamedoctor_container(dat: bytes) -> List[Side]:
    marker = GD_PREFIX + fds.block_size[BlockType.Disk] + GD_TRAILER
    if (dat[GD_PREFIX:GD_PREFIX+3] != fds.DISK_SIGNATURE
        or len(dat) <= marker or dat[marker] != BlockType.FileCount):
        raise error.FormatError('Not a Game Doctor disk image')
    return [fds.parse_blocks(dat, GD_PREFIX, GD_TRAILER)]


class GameDoctor(Image):

    read_only = True

    def from_bytes(self, dat: bytes) -> None:
        self.sides = read_gamedoctor_container(dat)


# Local variables:
# python-indent: 4
# End:

# fdstick/image/bin.py
#
# Gapped disk layout, either bare (one side, starting at the first gap-end
# mark) or as a dump of 64kB flash slots each with a 256-byte header.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Optional

import os

from fdstick import error, flash
from fdstick.codec import fds
from .image import Image, ImageOpts, yes_no

class BINOpts(ImageOpts):
    """header: Write flash slots (header plus side) instead of a bare side.
    name: Title stored in the flash header (default: the image filename).
    """

    w_settings = [ 'header', 'name' ]

    def __init__(self) -> None:
        self._header = False
        self.name: Optional[str] = None

    @property
    def header(self) -> bool:
        return self._header
    @header.setter
    def header(self, header) -> None:
        self._header = yes_no('BIN', 'header', header)


class BIN(Image):

    opts: BINOpts

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.opts = BINOpts()

    def from_bytes(self, dat: bytes) -> None:
        if not flash.is_dump(dat):
            self.sides = [fds.bin_to_side(dat)]
            return
        slots = flash.FileFlash(dat)
        for slot, hdr in enumerate(flash.list_slots(slots)):
            if not hdr.empty:
                self.sides.append(flash.read_side(slots, slot)[1])
        error.check(len(self.sides) != 0,
                    '%s: No disk sides found' % self.filename)

    def get_image(self) -> bytes:
        error.check(len(self.sides) != 0, 'BIN: No disk sides to write')
        if not self.opts.header:
            error.check(len(self.sides) == 1, """\
BIN: A bare image holds one disk side: Use the 'header' option""")
            side = self.sides[0]
            if side.bin is not None:
                return side.bin
            return fds.frame_blocks(side)
        slots = flash.FileFlash(nr_slots = len(self.sides))
        name = self.opts.name or os.path.basename(self.filename)
        flash.write_sides(slots, 0, name, self.sides)
        return bytes(slots.dat)


# Local variables:
# python-indent: 4
# End:

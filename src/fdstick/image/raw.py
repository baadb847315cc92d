# fdstick/image/raw.py
#
# Raw disk captures: one pulse-width byte per flux transition, as streamed
# by the adapter when reading a disk.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Optional

from fdstick import error, convert
from fdstick.codec import fds
from fdstick.codec.heuristic import Thresholds, Reconstruction
from .image import Image, ImageOpts

class RAWOpts(ImageOpts):
    """mode: known (standard block sequence), heuristic (reconstruct an
    unknown layout) or auto (known, falling back to heuristic on errors).
    thresholds: Heuristic settings, e.g. 'long_gap=900:short_gap=16'.
    lead_in: Lead-in bits before the first block of a new capture.
    """

    r_settings = [ 'mode', 'thresholds' ]
    w_settings = [ 'lead_in' ]

    modes = [ 'auto', 'known', 'heuristic' ]

    def __init__(self) -> None:
        self._mode = 'auto'
        self._thresholds = Thresholds()
        self._lead_in: Optional[int] = None

    @property
    def mode(self) -> str:
        return self._mode
    @mode.setter
    def mode(self, mode: str) -> None:
        error.check(mode in self.modes,
                    "RAW: Invalid mode: '%s'\n" % mode
                    + 'Valid modes: ' + ', '.join(self.modes))
        self._mode = mode

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds
    @thresholds.setter
    def thresholds(self, thresholds) -> None:
        if isinstance(thresholds, Thresholds):
            self._thresholds = thresholds
            return
        try:
            self._thresholds = Thresholds(thresholds.replace(',', ':'))
        except ValueError:
            raise error.Fatal("RAW: Invalid thresholds: '%s'" % thresholds)

    @property
    def lead_in(self) -> Optional[int]:
        return self._lead_in
    @lead_in.setter
    def lead_in(self, lead_in) -> None:
        try:
            self._lead_in = int(lead_in)
            if self._lead_in < 0:
                raise ValueError
        except ValueError:
            raise error.Fatal("RAW: Invalid lead_in: '%s'" % lead_in)


class RAW(Image):

    opts: RAWOpts

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.opts = RAWOpts()
        self.reconstruction: Optional[Reconstruction] = None

    def from_bytes(self, dat: bytes) -> None:
        if self.opts.mode != 'heuristic':
            side = convert.raw_to_side(dat)
            if (self.opts.mode == 'known'
                or (side.blocks and not side.diagnostics)):
                self.sides = [side]
                return
            print('RAW: %s: Reconstructing disk layout'
                  % side.summary_string())
        rec = convert.raw_to_bin(dat, self.opts.thresholds)
        side = fds.bin_to_side(rec.bin)
        side.diagnostics = rec.diagnostics
        self.reconstruction = rec
        self.sides = [side]

    def get_image(self) -> bytes:
        error.check(len(self.sides) == 1,
                    'RAW: A capture holds exactly one disk side')
        return convert.side_to_raw(self.sides[0], self.opts.lead_in)


# Local variables:
# python-indent: 4
# End:

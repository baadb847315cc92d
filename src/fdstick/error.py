# fdstick/error.py
#
# Error management and reporting.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Optional

class Fatal(Exception):
    pass

def check(pred, desc):
    if not pred:
        raise Fatal(desc)


## FormatError: Container bytes are not in the expected disk format.
class FormatError(Fatal):
    pass


## CapacityExceeded: Encoded content does not fit the destination.
class CapacityExceeded(Fatal):

    def __init__(self, shortfall: int, hint: str = ''):
        self.shortfall = shortfall
        s = 'Out of space (%d bytes short)' % shortfall
        if hint:
            s += ', ' + hint
        super().__init__(s)


## GapNotFound: No gap end located before the end of the capture.
class GapNotFound(Fatal):

    def __init__(self, pos: int):
        self.pos = pos
        super().__init__('No gap found after symbol offset %d' % pos)


## TransportFault: The device transport failed or lost data.
class TransportFault(Fatal):
    pass


## BlockError: Per-block anomaly found while decoding a disk.
## These are usually collected as diagnostics rather than raised.
class BlockError(Fatal):

    def __init__(self, offset: int, desc: str):
        self.offset = offset
        super().__init__('Block @ %X: %s' % (offset, desc))


class BlockTypeMismatch(BlockError):

    def __init__(self, offset: int, found: int, expected: int,
                 start: Optional[int] = None, end: Optional[int] = None,
                 cursor=None):
        self.found, self.expected = found, expected
        self.start, self.end = start, end
        # Where a caller may resume decoding (fdstick.codec.fds.Cursor).
        self.cursor = cursor
        desc = 'Wrong block type %X (expected %X)' % (found, expected)
        if start is not None:
            desc += ' at symbols %X-%X' % (start, end)
        super().__init__(offset, desc)


class BadCrc(BlockError):

    def __init__(self, offset: int, expected: int, actual: int):
        self.expected, self.actual = expected, actual
        super().__init__(offset, 'Bad CRC (%04X!=%04X)' % (expected, actual))


class BadSpacing(BlockError):
    pass

# Local variables:
# python-indent: 4
# End:

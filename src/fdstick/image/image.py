# fdstick/image/image.py
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Optional, List, Dict

import os

from fdstick import error
from fdstick.codec.fds import Side

OptDict = Dict[str,str]

def yes_no(prefix: str, opt: str, val) -> bool:
    if isinstance(val, bool):
        return val
    if val.lower() in ['yes', 'true', 'on', '1']:
        return True
    if val.lower() in ['no', 'false', 'off', '0']:
        return False
    raise error.Fatal("%s: Invalid %s setting: '%s'" % (prefix, opt, val))

class ImageOpts:
    r_settings: List[str] = [] # r_set()
    w_settings: List[str] = [] # w_set()
    a_settings: List[str] = [] # r_set(), w_set()

    def _set(self, filename: str, opt: str, val: str,
             settings: List[str]) -> None:
        error.check(opt in settings,
                    "%s: Invalid file option: %s\n" % (filename, opt)
                    + 'Valid options: '
                    + (', '.join(settings) if settings else '<none>'))
        setattr(self, opt, val)

    def r_set(self, filename: str, opt: str, val: str) -> None:
        self._set(filename, opt, val, self.a_settings + self.r_settings)

    def w_set(self, filename: str, opt: str, val: str) -> None:
        self._set(filename, opt, val, self.a_settings + self.w_settings)

class Image:

    filename: str
    noclobber = False
    read_only = False
    opts = ImageOpts() # empty

    def __init__(self, name: str) -> None:
        self.filename = name
        self.sides: List[Side] = []

    def apply_r_opts(self, opts: OptDict) -> None:
        for opt, val in opts.items():
            self.opts.r_set(self.filename, opt, val)

    def apply_w_opts(self, opts: OptDict) -> None:
        for opt, val in opts.items():
            self.opts.w_set(self.filename, opt, val)

    ## Context manager for image objects created using .to_file()

    def __enter__(self) -> Image:
        self.file = open(self.filename, ('wb','xb')[self.noclobber])
        return self

    def __exit__(self, type, value, tb):
        save = type is None
        try:
            if save:
                # No error: Normal writeout.
                self.file.write(self.get_image())
        finally:
            # Always close the file.
            self.file.close()
        if not save:
            # An error occurred: We remove the target file.
            os.remove(self.filename)

    ## Default .to_file() constructor
    @classmethod
    def to_file(cls, name: str, noclobber: bool = False,
                opts: Optional[OptDict] = None) -> Image:
        error.check(not cls.read_only,
                    "%s: Cannot create %s image files" % (name, cls.__name__))
        obj = cls(name)
        obj.noclobber = noclobber
        obj.apply_w_opts(opts or dict())
        return obj

    ## Default .from_file() constructor
    @classmethod
    def from_file(cls, name: str, opts: Optional[OptDict] = None) -> Image:
        obj = cls(name)
        obj.apply_r_opts(opts or dict())
        with open(name, "rb") as f:
            obj.from_bytes(f.read())
        return obj

    ## Used by default .from_file constructor
    def from_bytes(self, dat: bytes) -> None:
        raise NotImplementedError

    def nr_sides(self) -> int:
        return len(self.sides)

    def get_side(self, nr: int) -> Optional[Side]:
        if nr >= len(self.sides):
            return None
        return self.sides[nr]

    ## Write support (if not cls.read_only):
    def emit_side(self, side: Side) -> None:
        self.sides.append(side)
    ## Plus get_image, or __enter__ / __exit__
    def get_image(self) -> bytes:
        raise NotImplementedError


# Local variables:
# python-indent: 4
# End:

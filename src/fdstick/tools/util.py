# fdstick/tools/util.py
#
# FDS control script: Utility functions.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

import argparse, os, re
import importlib
from collections import OrderedDict
import itertools as it

from fdstick import error
from fdstick.codec.fds import Side


def columnify(strings, columns=80, sep=2):
    max_len = max(len(s) for s in strings) + sep
    per_row = max(1, columns // max_len)
    return '\n'.join(map(lambda row: (f'{{:{max_len}}}'*per_row).format(*row),
                         it.zip_longest(*[iter(strings)]*per_row,
                                        fillvalue='')))


class CmdlineHelpFormatter(argparse.ArgumentDefaultsHelpFormatter,
                           argparse.RawDescriptionHelpFormatter):
    def _get_help_string(self, action):
        help = action.help
        if '%no_default' in help:
            return help.replace('%no_default', '')
        if ('%(default)' in help
            or action.default is None
            or action.default is False
            or action.default is argparse.SUPPRESS):
            return help
        return help + ' (default: %(default)s)'


class ArgumentParser(argparse.ArgumentParser):
    def __init__(self, formatter_class=CmdlineHelpFormatter, *args, **kwargs):
        return super().__init__(formatter_class=formatter_class,
                                allow_abbrev=False,
                                *args, **kwargs)

def min_int(_min):
    def x(value):
        ivalue = int(value)
        if ivalue < _min:
            raise argparse.ArgumentTypeError("must be %d or greater" % _min)
        return ivalue
    return x
uint = min_int(0)

sideset_desc = """\
SIDES: Comma-separated list of side numbers and ranges, e.g. '1,3-4'
"""

fileopts_desc = """\
FILE options, as FILE::opt=val:opt=val
  .fds  header=yes|no (write)    :: Emit the 16-byte FDS header
  .bin  header=yes|no (write)    :: Emit 64kB flash slots with headers
        name=TITLE (write)       :: Title in the flash header
  .raw  mode=auto|known|heuristic (read)
        thresholds=LIST (read)   :: Comma-separated heuristic settings:
          glitch_window=N, short_gap=N, long_gap=N, min_gap=N, window=N
        lead_in=BITS (write)     :: Lead-in before the first block
"""

class SideSet:
    """Set of 1-based disk side numbers."""

    def __init__(self, spec: str):
        self.spec = spec
        self.sides = set()
        for srange in spec.split(','):
            m = re.match(r'(\d+)(-(\d+))?$', srange)
            if m is None: raise ValueError()
            s = int(m.group(1))
            e = s if m.group(3) is None else int(m.group(3))
            if s < 1 or e < s: raise ValueError()
            self.sides.update(range(s, e+1))

    def __str__(self):
        return self.spec

    def __contains__(self, nr):
        return nr in self.sides

def split_opts(seq):
    """Splits a name from its list of options."""
    parts = seq.split('::')
    name, opts = parts[0], dict()
    for x in map(lambda x: x.split(':'), parts[1:]):
        for y in x:
            try:
                opt, val = y.split('=', 1)
            except ValueError:
                opt, val = y, 'yes'
            if opt:
                opts[opt] = val
    return name, opts


image_types = OrderedDict(
    { '.bin': 'BIN',
      '.fds': 'FDS',
      '.gd':  ('GameDoctor','gd'),
      '.raw': 'RAW' })

def get_image_class(name):
    _, ext = os.path.splitext(name)
    error.check(ext.lower() in image_types,
                "%s: Unrecognised file suffix '%s'\nKnown suffixes:\n%s"
                % (name, ext, columnify(image_types)))
    typespec = image_types[ext.lower()]
    if isinstance(typespec, tuple):
        typename, classname = typespec
    else:
        typename, classname = typespec, typespec.lower()
    mod = importlib.import_module('fdstick.image.' + classname)
    return mod.__dict__[typename]


def print_side(prefix: str, side: Side, verbose: bool = False) -> None:
    print('%s: %s' % (prefix, side.summary_string()))
    if verbose:
        for blk in side.blocks:
            print('%s:   %s' % (prefix, blk))
    for err in side.diagnostics:
        print('%s: WARNING: %s' % (prefix, err))


# Local variables:
# python-indent: 4
# End:

# fdstick/tools/flash.py
#
# FDS control script: Manage disk slots in a dump of the adapter's flash.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "List, store and fetch disks in a flash dump file."

import os

from fdstick.tools import util
from fdstick import error, flash

actions = [ 'list', 'write', 'read' ]

def list_slots(dump: flash.Flash) -> None:
    side = 0
    for slot, hdr in enumerate(flash.list_slots(dump)):
        if hdr.empty:
            print('%d:' % (slot+1))
        elif hdr.continuation:
            side += 1
            print('%d:    Side %d' % (slot+1, side))
        else:
            side = 1
            print('%d: %s' % (slot+1, hdr))

def main(argv) -> None:

    epilog = "ACTION: One of " + ', '.join(actions) + "\n"
    parser = util.ArgumentParser(
        usage='%(prog)s [options] action dump [slot [file]]', epilog=epilog)
    parser.add_argument("--slots", type=util.min_int(1), default=8,
                        help="number of slots in a new dump file")
    parser.add_argument("action", choices=actions, help="action to perform")
    parser.add_argument("dump", help="flash dump filename")
    parser.add_argument("slot", type=util.min_int(1), nargs='?',
                        help="first slot (1-based)")
    parser.add_argument("file", nargs='?', help="image filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    if args.action == 'write' and not os.path.exists(args.dump):
        dump = flash.FileFlash(nr_slots = args.slots)
    else:
        dump = flash.FileFlash.from_file(args.dump)

    if args.action == 'list':
        list_slots(dump)
        return

    error.check(args.slot is not None and args.file is not None,
                "%s: Action requires a slot and a file" % args.action)
    args.file, args.file_opts = util.split_opts(args.file)
    image_class = util.get_image_class(args.file)

    if args.action == 'write':
        image = image_class.from_file(args.file, args.file_opts)
        for nr in range(image.nr_sides()):
            side = image.get_side(nr)
            assert side is not None # mypy
            util.print_side('Side %d' % (nr+1), side)
        flash.write_sides(dump, args.slot-1, args.file, image.sides)
        dump.to_file(args.dump)
        print("Wrote %d sides at slot %d" % (image.nr_sides(), args.slot))
    else:
        sides = flash.read_sides(dump, args.slot-1)
        with image_class.to_file(args.file, False,
                                 args.file_opts) as image:
            for nr, side in enumerate(sides):
                util.print_side('Side %d' % (nr+1), side)
                image.emit_side(side)


# Local variables:
# python-indent: 4
# End:

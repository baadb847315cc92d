# fdstick/tools/convert.py
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Convert between disk image formats."

from typing import Type

from fdstick.tools import util
from fdstick.image.image import Image

def open_input_image(args, image_class: Type[Image]) -> Image:
    return image_class.from_file(args.in_file, args.in_file_opts)


def open_output_image(args, image_class: Type[Image]) -> Image:
    return image_class.to_file(args.out_file, args.no_clobber,
                               args.out_file_opts)


def convert(args, in_image: Image, out_image: Image) -> None:

    for nr in range(in_image.nr_sides()):
        if args.sides is not None and nr+1 not in args.sides:
            continue
        side = in_image.get_side(nr)
        assert side is not None # mypy
        util.print_side('Side %d' % (nr+1), side, args.verbose)
        out_image.emit_side(side)


def main(argv) -> None:

    epilog = (util.sideset_desc + "\n" + util.fileopts_desc
              + "\nSupported file suffixes:\n"
              + util.columnify(util.image_types))
    parser = util.ArgumentParser(usage='%(prog)s [options] in_file out_file',
                                 epilog=epilog)
    parser.add_argument("--sides", type=util.SideSet, metavar="SIDES",
                        help="which disk sides to convert (default: all)")
    parser.add_argument("-n", "--no-clobber", action="store_true",
                        help="do not overwrite an existing file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="list the blocks of each side")
    parser.add_argument("in_file", help="input filename")
    parser.add_argument("out_file", help="output filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    args.in_file, args.in_file_opts = util.split_opts(args.in_file)
    args.out_file, args.out_file_opts = util.split_opts(args.out_file)

    in_image_class = util.get_image_class(args.in_file)
    out_image_class = util.get_image_class(args.out_file)

    in_image = open_input_image(args, in_image_class)
    print("Converting %s -> %s" % (args.in_file, args.out_file))

    with open_output_image(args, out_image_class) as out_image:
        convert(args, in_image, out_image)


# Local variables:
# python-indent: 4
# End:

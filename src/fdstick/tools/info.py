# fdstick/tools/info.py
#
# FDS control script: Display the contents of a disk image.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Display the sides, blocks and errors of a disk image."

from fdstick.tools import util
from fdstick.image.raw import RAW
from fdstick import __version__

def print_info_line(name: str, value: str, tab=0) -> None:
    print(''.ljust(tab) + (name + ':').ljust(12-tab) + value)

def main(argv) -> None:

    parser = util.ArgumentParser(usage='%(prog)s [options] file',
                                 epilog=util.fileopts_desc)
    parser.add_argument("file", help="image filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    args.file, args.file_opts = util.split_opts(args.file)
    image_class = util.get_image_class(args.file)
    image = image_class.from_file(args.file, args.file_opts)

    print_info_line('Host Tools', '%s' % __version__)
    print_info_line('Image', '%s (%s)' % (args.file, image_class.__name__))
    print_info_line('Sides', '%d' % image.nr_sides())

    if isinstance(image, RAW) and image.reconstruction is not None:
        rec = image.reconstruction
        print_info_line('Layout', rec.summary_string())
        for off, length in rec.blocks:
            print('  Block @ %X: %d bytes from symbol %d'
                  % (off, length, rec.position_map[off]))

    for nr in range(image.nr_sides()):
        side = image.get_side(nr)
        assert side is not None # mypy
        util.print_side('Side %d' % (nr+1), side, verbose=True)


# Local variables:
# python-indent: 4
# End:

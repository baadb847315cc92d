# fdstick/usb.py
#
# Disk adapter transport, over USB HID reports.
#
# The caller opens the adapter with a HID library (e.g. the hidapi bindings)
# and hands the device to Unit. read_disk() returns the pulse bytes consumed
# by fdstick.convert.raw_to_side/raw_to_bin, and write_disk() takes the
# stream from fdstick.convert.side_to_writestream.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import List

from fdstick import error

## Report IDs
class Cmd:
    ReadIO          = 0x10
    DiskReadStart   = 0x11
    DiskRead        = 0x12
    DiskWriteStart  = 0x13
    DiskWrite       = 0x14
    SpiRead         = 0x01
    SpiReadStop     = 0x02
    SpiWrite        = 0x03
    Reset           = 0xf0
    UpdateFirmware  = 0xf1
    SelfTest        = 0xf2
    str = {
        ReadIO: "ReadIO",
        DiskReadStart: "DiskReadStart",
        DiskRead: "DiskRead",
        DiskWriteStart: "DiskWriteStart",
        DiskWrite: "DiskWrite",
        SpiRead: "SpiRead",
        SpiReadStop: "SpiReadStop",
        SpiWrite: "SpiWrite",
        Reset: "Reset",
        UpdateFirmware: "UpdateFirmware",
        SelfTest: "SelfTest"
    }

DISK_READMAX   = 254 # Data bytes per DiskRead report
DISK_WRITEMAX  = 255 # Data bytes per DiskWrite report

READBUF_SIZE   = 0x90000
WRITE_FILL     = 0xaa
WRITE_FILL_MAX = 0x20000


## CmdError: A report could not be sent or received.
class CmdError(error.TransportFault):

    def __init__(self, cmd: int, desc: str):
        self.cmd = cmd
        super().__init__('%s: %s' % (Cmd.str.get(cmd, '0x%02x' % cmd), desc))


class Unit:

    ## Unit information, instance variables:
    ##  read_sequence: Sequence number expected in the next DiskRead report

    ## Unit(dev):
    ## Accepts an opened HID device with the hidapi interface
    ## (send_feature_report, get_feature_report, write).
    def __init__(self, dev):
        self.dev = dev
        self.read_sequence = 1

    ## _send_feature:
    ## Send a feature report. Raise CmdError on failure.
    def _send_feature(self, cmd: int, dat: bytes = bytes(1)) -> None:
        if self.dev.send_feature_report(bytes([cmd]) + dat) < 0:
            raise CmdError(cmd, 'Feature report failed')

    ## reset:
    ## Reset the adapter. The adapter drops off the bus, so the result of
    ## the report is ignored.
    def reset(self) -> None:
        self.dev.send_feature_report(bytes([Cmd.Reset, 0]))

    ## read_start:
    ## Start streaming the disk surface.
    def read_start(self) -> None:
        self.read_sequence = 1
        self._send_feature(Cmd.DiskReadStart)

    ## read_chunk:
    ## Next chunk of captured pulse bytes. Empty at the end of the medium.
    ## A lost report is fatal for the session.
    def read_chunk(self) -> bytes:
        rsp = bytes(self.dev.get_feature_report(Cmd.DiskRead,
                                                DISK_READMAX + 2))
        if len(rsp) < 2:
            raise CmdError(Cmd.DiskRead, 'Timed out or bad read')
        if len(rsp) == 2:
            return bytes()
        if rsp[1] != self.read_sequence:
            raise CmdError(Cmd.DiskRead,
                           'Out of sequence (%d, expected %d): Data lost'
                           % (rsp[1], self.read_sequence))
        self.read_sequence = (self.read_sequence + 1) & 0xff
        return rsp[2:]

    ## write_start:
    ## Start writing the disk surface from its beginning.
    def write_start(self) -> None:
        self._send_feature(Cmd.DiskWriteStart)

    ## write_chunk:
    ## Write a full report of write-head stream. Returns False once the
    ## adapter stops accepting data (end of disk).
    def write_chunk(self, dat: bytes) -> bool:
        error.check(len(dat) == DISK_WRITEMAX,
                    'Disk writes must be %d bytes' % DISK_WRITEMAX)
        return self.dev.write(bytes([Cmd.DiskWrite]) + dat) >= 0


## read_disk:
## Capture a whole disk side as pulse bytes.
def read_disk(usb: Unit) -> bytes:
    usb.read_start()
    dat = bytearray()
    while len(dat) < READBUF_SIZE - DISK_READMAX:
        chunk = usb.read_chunk()
        dat += chunk
        if len(chunk) != DISK_READMAX:
            break
    return bytes(dat)


## write_disk:
## Write a write-head stream from the start of a disk side, then fill the
## remainder of the side until the adapter stalls.
def write_disk(usb: Unit, stream: bytes) -> int:
    usb.write_start()
    chunks: List[bytes] = [stream[i:i+DISK_WRITEMAX]
                           for i in range(0, len(stream), DISK_WRITEMAX)]
    for chunk in chunks:
        chunk += bytes([WRITE_FILL]) * (DISK_WRITEMAX - len(chunk))
        if not usb.write_chunk(chunk):
            raise error.TransportFault('Write error (disk full?)')
    fill = bytes([WRITE_FILL]) * DISK_WRITEMAX
    nr_fill = 0
    while nr_fill * DISK_WRITEMAX < WRITE_FILL_MAX:
        if not usb.write_chunk(fill):
            break
        nr_fill += 1
    return nr_fill


# Local variables:
# python-indent: 4
# End:

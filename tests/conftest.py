import struct

import pytest

from fdstick.codec import fds
from fdstick.codec.fds import Block, Side


def disk_header() -> Block:
    # Block type, "*NINTENDO-HVC*", then maker/title/version fields.
    dat = b'\x01*NINTENDO-HVC*' + bytes(range(0x38 - 15))
    return Block(dat)

def file_blocks(nr: int, name: bytes, payload: bytes):
    hdr = (bytes([3, nr, nr]) + name.ljust(8)[:8]
           + struct.pack('<HHB', 0x6000, len(payload), 0))
    return [Block(hdr), Block(b'\x04' + payload)]

def payload(n: int, seed: int = 1) -> bytes:
    # Deterministic bytes with no long zero runs.
    out, x = bytearray(), seed
    for _ in range(n):
        x = (x * 1103515245 + 12345) & 0x7fffffff
        out.append(((x >> 16) & 0xff) | 0x01)
    return bytes(out)

def make_side(files=((b'KYODAKU-', 0xe0), (b'MAIN', 300))) -> Side:
    blocks = [disk_header(), Block(bytes([2, len(files)]))]
    for nr, (name, size) in enumerate(files):
        blocks += file_blocks(nr, name, payload(size, nr + 1))
    return Side(blocks)


@pytest.fixture
def side() -> Side:
    return make_side()

@pytest.fixture
def framed(side) -> bytes:
    return fds.frame_blocks(side)

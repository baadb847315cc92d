import pytest

from fdstick import cli, convert, error, flash
from fdstick.codec import fds
from fdstick.image.fds import write_fds_container

from conftest import make_side


def run(*args):
    return cli.main(['fds', '--stdout'] + list(args))

def test_usage(capsys):
    assert run() == 1
    assert 'convert' in capsys.readouterr().out
    assert run('format') == 1

def test_convert_fds_to_raw_and_back(tmp_path, side, capsys):
    src, raw, dst = (str(tmp_path / n) for n in ('a.fds', 'a.raw', 'b.fds'))
    with open(src, 'wb') as f:
        f.write(write_fds_container([side]))
    assert run('convert', src, raw + '::lead_in=4000') == 0
    with open(raw, 'rb') as f:
        assert f.read() == convert.side_to_raw(side, 4000)
    assert run('convert', '-v', raw + '::mode=known', dst + '::header') == 0
    with open(dst, 'rb') as f:
        assert f.read() == write_fds_container([side], header=True)
    out = capsys.readouterr().out
    assert 'Converting' in out
    assert 'KYODAKU-' in out

def test_convert_selected_sides(tmp_path, side):
    other = make_side(((b'SIDEB', 10),))
    src, dst = str(tmp_path / 'a.fds'), str(tmp_path / 'b.fds')
    with open(src, 'wb') as f:
        f.write(write_fds_container([side, other]))
    assert run('convert', '--sides=2', src, dst) == 0
    with open(dst, 'rb') as f:
        assert f.read() == other.to_fds()

def test_convert_error(tmp_path, capsys):
    src, dst = str(tmp_path / 'a.fds'), str(tmp_path / 'b.fds')
    with open(src, 'wb') as f:
        f.write(bytes(100))
    assert run('convert', src, dst) == 1
    assert 'FATAL ERROR' in capsys.readouterr().out
    assert not (tmp_path / 'b.fds').exists()

def test_info(tmp_path, side, capsys):
    raw = str(tmp_path / 'a.raw')
    with open(raw, 'wb') as f:
        f.write(convert.side_to_raw(side))
    assert run('info', raw + '::mode=heuristic') == 0
    out = capsys.readouterr().out
    assert 'Reconstructed (6 blocks' in out
    assert 'File Header #1 "MAIN    "' in out

def test_flash(tmp_path, side, capsys):
    src, dump = str(tmp_path / 'Kid Icarus.fds'), str(tmp_path / 'dump.bin')
    with open(src, 'wb') as f:
        f.write(write_fds_container([side, side]))
    assert run('flash', '--slots=4', 'write', dump, '2', src) == 0
    assert flash.FileFlash.from_file(dump).nr_slots == 4
    assert run('flash', 'list', dump) == 0
    out = capsys.readouterr().out
    assert '2: Kid Icarus.fds' in out
    assert '3:    Side 2' in out
    dst = str(tmp_path / 'out.bin')
    assert run('flash', 'read', dump, '2', dst + '::header') == 0
    dump2 = flash.FileFlash.from_file(dst)
    assert [s.blocks for s in flash.read_sides(dump2, 0)] \
        == [side.blocks] * 2
    assert flash.read_header(dump2, 0).name == 'out.bin'
    assert len(flash.FileFlash.from_file(dst).dat) == 2 * fds.SLOT_SIZE

def test_backtrace_and_time(tmp_path, capsys):
    src, dst = str(tmp_path / 'a.fds'), str(tmp_path / 'b.fds')
    with open(src, 'wb') as f:
        f.write(bytes(100))
    with pytest.raises(error.FormatError):
        run('--bt', 'convert', src, dst)
    assert run('--time', 'convert', src, dst) == 1
    assert 'Time elapsed' in capsys.readouterr().out

def test_unknown_option(capsys):
    assert run('--verbose', 'info') == 1
    assert 'Usage' in capsys.readouterr().out

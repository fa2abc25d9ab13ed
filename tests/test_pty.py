import pytest

from sshproto.pty import Pty


def test_known_code():
    assert Pty.from_code(53) is Pty.ECHO


def test_speed_codes():
    assert Pty.from_code(128) is Pty.TTY_OP_ISPEED
    assert Pty.from_code(129) is Pty.TTY_OP_OSPEED


def test_end_marker_gives_none():
    assert Pty.from_code(0) is None


@pytest.mark.parametrize("code", [19, 29, 43, 63, 76, 94, 127, 130, 255])
def test_unknown_codes_give_none(code):
    assert Pty.from_code(code) is None


def test_every_mode_round_trips():
    for mode in Pty:
        if mode is Pty.TTY_OP_END:
            continue
        assert Pty.from_code(int(mode)) is mode
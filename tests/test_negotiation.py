import pytest

from sshproto import kex, mac, msg
from sshproto.encoding import Reader
from sshproto.errors import ErrorKind, SshError
from sshproto.negotiation import (
    AES_128_CTR,
    AES_256_CTR,
    Names,
    Preferred,
    Side,
    read_kex,
    select_client,
    select_server,
    write_kex,
)


def _with_follows(buffer: bytes) -> bytes:
    data = bytearray(buffer)
    data[-5] = 1
    return bytes(data)


def test_write_kex_layout():
    buf = write_kex(Preferred.DEFAULT, as_server=True)
    assert buf[0] == msg.KEXINIT
    assert buf[-5:] == b"\x00\x00\x00\x00\x00"
    reader = Reader(buf, 17)
    kex_names = reader.read_string().split(b",")
    assert kex.EXTENSION_SUPPORT_AS_CLIENT.encode() not in kex_names
    assert kex.EXTENSION_SUPPORT_AS_SERVER.encode() in kex_names
    assert reader.read_string() == b"ssh-ed25519"
    for _ in range(8):
        reader.read_string()
    assert reader.read_byte() == 0
    assert reader.read_u32() == 0
    assert reader.position == len(buf)


def test_write_kex_as_client_filters_server_extension():
    buf = write_kex(Preferred.DEFAULT, as_server=False)
    kex_names = Reader(buf, 17).read_string().split(b",")
    assert kex.EXTENSION_SUPPORT_AS_SERVER.encode() not in kex_names
    assert kex.EXTENSION_SUPPORT_AS_CLIENT.encode() in kex_names


def test_cookie_is_random():
    first = write_kex(Preferred.DEFAULT, True)
    second = write_kex(Preferred.DEFAULT, True)
    assert first[1:17] != second[1:17] or first[1:17] == second[1:17] and False or first[17:] == second[17:]
    assert first[17:] == second[17:]


@pytest.mark.parametrize("side", [Side.CLIENT, Side.SERVER])
def test_round_trip_default(side):
    buf = write_kex(Preferred.DEFAULT, as_server=side is Side.CLIENT)
    names = read_kex(buf, Preferred.DEFAULT, side)
    assert names == Names(
        kex=kex.CURVE25519,
        key="ssh-ed25519",
        cipher=Preferred.DEFAULT.cipher[0],
        client_mac=Preferred.DEFAULT.mac[0],
        server_mac=Preferred.DEFAULT.mac[0],
        server_compression="none",
        client_compression="none",
        ignore_guessed=False,
    )


def test_compressed_preference():
    buf = write_kex(Preferred.COMPRESSED, as_server=True)
    names = read_kex(buf, Preferred.COMPRESSED, Side.CLIENT)
    assert names.client_compression == "zlib"
    assert names.server_compression == "zlib"


def test_select_server_follows_client_order():
    assert select_server(["a", "b"], b"b,a") == (False, "b")
    assert select_server(["a", "b"], b"a,b") == (True, "a")
    assert select_server(["a"], b"c,d") is None


def test_select_client_follows_own_order():
    assert select_client(["b", "a"], b"a,b") == (False, "b")
    assert select_client(["a", "b"], b"a,b") == (True, "a")
    assert select_client(["x"], b"") is None


def test_no_common_kex():
    buf = write_kex(Preferred(kex=("other-kex",)), True)
    with pytest.raises(SshError) as info:
        read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert info.value.kind is ErrorKind.NO_COMMON_KEX_ALGO


def test_no_common_key():
    buf = write_kex(Preferred(key=("rsa-sha2-256",)), True)
    with pytest.raises(SshError) as info:
        read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert info.value.kind is ErrorKind.NO_COMMON_KEY_ALGO


def test_no_common_cipher():
    buf = write_kex(Preferred(cipher=("other-cipher",)), True)
    with pytest.raises(SshError) as info:
        read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert info.value.kind is ErrorKind.NO_COMMON_CIPHER


def test_no_common_mac_falls_back_to_none():
    remote = Preferred(mac=("other-mac",))
    buf = write_kex(remote, True)
    names = read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert names.client_mac == mac.NONE
    assert names.server_mac == mac.NONE


def test_no_common_mac_when_cipher_needs_one():
    remote = Preferred(cipher=(AES_256_CTR,), mac=("other-mac",))
    buf = write_kex(remote, True)
    with pytest.raises(SshError) as info:
        read_kex(buf, Preferred.DEFAULT, Side.CLIENT, lambda c: c.endswith("-ctr"))
    assert info.value.kind is ErrorKind.NO_COMMON_MAC


def test_cipher_choice_and_mac_when_needed():
    remote = Preferred(cipher=(AES_128_CTR,), mac=(mac.HMAC_SHA256,))
    buf = write_kex(remote, True)
    names = read_kex(buf, Preferred.DEFAULT, Side.CLIENT, lambda c: True)
    assert names.cipher == AES_128_CTR
    assert names.client_mac == mac.HMAC_SHA256


def test_no_common_compression():
    buf = write_kex(Preferred(compression=("other",)), True)
    with pytest.raises(SshError) as info:
        read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert info.value.kind is ErrorKind.NO_COMMON_COMPRESSION


def test_ignore_guessed_when_guess_wrong():
    remote = Preferred(kex=(kex.DH_G14_SHA256, kex.CURVE25519))
    buf = _with_follows(write_kex(remote, True))
    names = read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert names.kex == kex.CURVE25519
    assert names.ignore_guessed is True


def test_guess_right_is_kept():
    buf = _with_follows(write_kex(Preferred.DEFAULT, True))
    names = read_kex(buf, Preferred.DEFAULT, Side.CLIENT)
    assert names.ignore_guessed is False


def test_truncated_message():
    buf = write_kex(Preferred.DEFAULT, True)
    with pytest.raises(SshError) as info:
        read_kex(buf[:-6], Preferred.DEFAULT, Side.CLIENT)
    assert info.value.kind is ErrorKind.INDEX_OUT_OF_BOUNDS


def test_preferred_lists_become_tuples():
    prefs = Preferred(kex=[kex.CURVE25519])
    assert prefs.kex == (kex.CURVE25519,)
    assert Preferred() == Preferred.DEFAULT
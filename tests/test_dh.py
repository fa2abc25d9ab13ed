import pytest

from sshproto.dh import DH_GROUP1, DH_GROUP14, DiffieHellman, decode_public_key


def test_group_sizes():
    assert len(DH_GROUP1.prime) == 128
    assert len(DH_GROUP14.prime) == 256
    assert decode_public_key(DH_GROUP1.prime).bit_length() == 1024
    assert DH_GROUP1.exp_size == 256


@pytest.mark.parametrize("group", [DH_GROUP1, DH_GROUP14])
def test_generator_is_two(group):
    dh = DiffieHellman(group)
    dh.private_key = 1
    assert dh.generate_public_key() == 2


@pytest.mark.parametrize("group", [DH_GROUP1, DH_GROUP14])
def test_prime_framing(group):
    assert group.prime[:8] == b"\xff" * 8
    assert group.prime[-8:] == b"\xff" * 8
    assert group.prime[8:12] == bytes.fromhex("C90FDAA2")


def test_groups_share_prefix():
    prime1 = DiffieHellman(DH_GROUP1).prime
    prime14 = DiffieHellman(DH_GROUP14).prime
    assert prime14 >> (156 * 8) == prime1 >> (28 * 8)


@pytest.mark.parametrize("group", [DH_GROUP1, DH_GROUP14])
def test_key_agreement(group):
    server = DiffieHellman(group)
    client = DiffieHellman(group)
    server.generate_private_key(True)
    client.generate_private_key(False)
    server_pub = server.generate_public_key()
    client_pub = client.generate_public_key()
    assert server.validate_public_key(server_pub)
    assert client.validate_public_key(client_pub)
    s1 = server.compute_shared_secret(client_pub)
    s2 = client.compute_shared_secret(server_pub)
    assert s1 == s2
    assert server.validate_shared_secret(s1)
    assert server.shared_secret == s1


def test_private_key_range():
    dh = DiffieHellman(DH_GROUP1)
    upper = (dh.prime - 1) // 2
    for is_server in (True, False):
        for _ in range(20):
            key = dh.generate_private_key(is_server)
            assert (1 if is_server else 2) <= key < upper
            assert dh.private_key == key


@pytest.mark.parametrize("offset", [0, 1])
def test_validation_rejects_low_values(offset):
    dh = DiffieHellman(DH_GROUP1)
    assert not dh.validate_public_key(offset)
    assert not dh.validate_shared_secret(offset)


def test_validation_rejects_high_values():
    dh = DiffieHellman(DH_GROUP1)
    assert not dh.validate_public_key(dh.prime - 1)
    assert not dh.validate_public_key(dh.prime)
    assert dh.validate_public_key(dh.prime - 2)
    assert dh.validate_public_key(2)


def test_decode_public_key_round_trip():
    value = decode_public_key(DH_GROUP14.prime)
    assert value.to_bytes(256, "big") == DH_GROUP14.prime
    assert decode_public_key(b"") == 0
    assert decode_public_key(b"\x00\x00\x05") == 5


def test_prime_is_loaded():
    dh = DiffieHellman(DH_GROUP14)
    assert dh.prime == decode_public_key(DH_GROUP14.prime)
    assert dh.prime.bit_length() == 2048
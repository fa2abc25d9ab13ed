"""Key exchange algorithms and derivation of session keys."""

from __future__ import annotations

import hashlib
import secrets
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Union

from . import msg
from .dh import DH_GROUP1, DH_GROUP14, DhGroup, DiffieHellman, decode_public_key
from .encoding import mpint, ssh_string
from .errors import ErrorKind, SshError
from .mac import Mac, get_mac_algorithm

__all__ = [
    "CURVE25519",
    "DH_G1_SHA1",
    "DH_G14_SHA1",
    "DH_G14_SHA256",
    "NONE",
    "EXTENSION_SUPPORT_AS_CLIENT",
    "EXTENSION_SUPPORT_AS_SERVER",
    "Exchange",
    "DirectionKeys",
    "KeyMaterial",
    "biguint_to_mpint",
    "x25519",
    "compute_keys",
    "KexAlgorithm",
    "Curve25519Kex",
    "DhGroupKex",
    "NoneKex",
    "KEXES",
    "make_kex",
]

CURVE25519 = "[email]"
DH_G1_SHA1 = "diffie-hellman-group1-sha1"
DH_G14_SHA1 = "diffie-hellman-group14-sha1"
DH_G14_SHA256 = "diffie-hellman-group14-sha256"
NONE = "none"
EXTENSION_SUPPORT_AS_CLIENT = "ext-info-c"
EXTENSION_SUPPORT_AS_SERVER = "ext-info-s"

_U32 = struct.Struct(">I")

# Field prime and base point order of Curve25519.
_P = 2**255 - 19
_L = 2**252 + 27742317777372353535851937790883648493
_A24 = 121665
_BASE_POINT = (9).to_bytes(32, "little")


@dataclass
class Exchange:
    """Data both sides feed into the exchange hash."""

    client_id: bytes = b""
    server_id: bytes = b""
    client_kex_init: bytes = b""
    server_kex_init: bytes = b""
    client_ephemeral: bytes = b""
    server_ephemeral: bytes = b""


@dataclass(frozen=True)
class DirectionKeys:
    """Cipher key, nonce and MAC for one direction of the connection."""

    key: bytes
    nonce: bytes
    mac: Mac

    def __repr__(self) -> str:
        return f"DirectionKeys(key=[hidden], nonce=[hidden], mac={self.mac!r})"


@dataclass(frozen=True)
class KeyMaterial:
    """Keys for both directions of the connection."""

    local_to_remote: DirectionKeys
    remote_to_local: DirectionKeys


def biguint_to_mpint(value: int) -> bytes:
    """Big-endian bytes of ``value``, with a zero byte added if the top bit is set."""
    if value < 0:
        raise ValueError("negative integers have no unsigned encoding")
    raw = value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if raw[0] > 0x7F:
        return b"\x00" + raw
    return raw


def x25519(scalar: Union[bytes, int], point: Union[bytes, int]) -> bytes:
    """Multiply a Montgomery u-coordinate by ``scalar``; no clamping is applied.

    Byte arguments are little-endian, 32 bytes long. The result is 32 bytes.
    """
    if isinstance(scalar, (bytes, bytearray)):
        if len(scalar) != 32:
            raise ValueError("an X25519 scalar is 32 bytes long")
        k = int.from_bytes(scalar, "little")
    else:
        k = int(scalar)
    if not 0 <= k < 2**255:
        raise ValueError("scalar out of range")
    if isinstance(point, (bytes, bytearray)):
        if len(point) != 32:
            raise ValueError("an X25519 point is 32 bytes long")
        u = int.from_bytes(point, "little") & ((1 << 255) - 1)
    else:
        u = int(point)
    u %= _P

    x1 = u
    x2, z2 = 1, 0
    x3, z3 = u, 1
    swap = 0
    for t in reversed(range(255)):
        bit = (k >> t) & 1
        swap ^= bit
        if swap:
            x2, x3 = x3, x2
            z2, z3 = z3, z2
        swap = bit
        a = x2 + z2
        aa = a * a % _P
        b = x2 - z2
        bb = b * b % _P
        e = aa - bb
        c = x3 + z3
        d = x3 - z3
        da = d * a % _P
        cb = c * b % _P
        x3 = (da + cb) ** 2 % _P
        z3 = x1 * (da - cb) ** 2 % _P
        x2 = aa * bb % _P
        z2 = e * (aa + _A24 * e) % _P
    if swap:
        x2, x3 = x3, x2
        z2, z3 = z3, z2
    result = x2 * pow(z2, _P - 2, _P) % _P
    return result.to_bytes(32, "little")


def _derive(
    hash_name: str,
    shared_secret: Optional[bytes],
    exchange_hash: bytes,
    letter: bytes,
    session_id: bytes,
    length: int,
) -> bytes:
    prefix = (mpint(shared_secret) if shared_secret is not None else b"") + bytes(exchange_hash)
    key = hashlib.new(hash_name, prefix + letter + bytes(session_id)).digest()
    while len(key) < length:
        key += hashlib.new(hash_name, prefix + key).digest()
    return key[:length]


def compute_keys(
    hash_name: str,
    shared_secret: Optional[bytes],
    session_id: bytes,
    exchange_hash: bytes,
    key_len: int,
    nonce_len: int,
    remote_to_local_mac: Union[str, bytes],
    local_to_remote_mac: Union[str, bytes],
    is_server: bool,
) -> KeyMaterial:
    """Derive the cipher keys, nonces and MACs of both directions."""
    r2l_mac = get_mac_algorithm(remote_to_local_mac)
    l2r_mac = get_mac_algorithm(local_to_remote_mac)

    if is_server:
        l2r_letters, r2l_letters = (b"D", b"B", b"F"), (b"C", b"A", b"E")
    else:
        l2r_letters, r2l_letters = (b"C", b"A", b"E"), (b"D", b"B", b"F")

    def direction(letters: Tuple[bytes, bytes, bytes], mac_algorithm) -> DirectionKeys:
        key_letter, nonce_letter, mac_letter = letters
        derive: Callable[[bytes, int], bytes] = lambda letter, length: _derive(
            hash_name, shared_secret, exchange_hash, letter, session_id, length
        )
        return DirectionKeys(
            key=derive(key_letter, key_len),
            nonce=derive(nonce_letter, nonce_len),
            mac=mac_algorithm.make_mac(derive(mac_letter, mac_algorithm.key_len)),
        )

    return KeyMaterial(
        local_to_remote=direction(l2r_letters, l2r_mac),
        remote_to_local=direction(r2l_letters, r2l_mac),
    )


def _client_pubkey_from_init(payload: bytes) -> Tuple[int, bytes]:
    payload = bytes(payload)
    if not payload or payload[0] != msg.KEX_ECDH_INIT:
        raise SshError(ErrorKind.INCONSISTENT)
    if len(payload) < 5:
        raise SshError(ErrorKind.INCONSISTENT)
    length = _U32.unpack(payload[1:5])[0]
    return length, payload


def _exchange_hash_input(key: bytes, exchange: Exchange, shared: Optional[bytes]) -> bytes:
    parts = [
        ssh_string(exchange.client_id),
        ssh_string(exchange.server_id),
        ssh_string(exchange.client_kex_init),
        ssh_string(exchange.server_kex_init),
        bytes(key),
        ssh_string(exchange.client_ephemeral),
        ssh_string(exchange.server_ephemeral),
    ]
    if shared is not None:
        parts.append(mpint(shared))
    return b"".join(parts)


class KexAlgorithm(ABC):
    """One side of a key exchange."""

    hash_name = "sha256"
    shared_secret: Optional[bytes] = None

    @abstractmethod
    def skip_exchange(self) -> bool:
        """Whether this algorithm performs no exchange at all."""

    @abstractmethod
    def server_dh(self, exchange: Exchange, payload: bytes) -> None:
        """Answer the client's init message, filling the server ephemeral key."""

    @abstractmethod
    def client_dh(self) -> Tuple[bytes, bytes]:
        """Start the exchange; return the client ephemeral key and the init message."""

    @abstractmethod
    def compute_shared_secret(self, remote_pubkey: bytes) -> None:
        """Compute the shared secret from the server's ephemeral key."""

    @abstractmethod
    def compute_exchange_hash(self, key: bytes, exchange: Exchange) -> bytes:
        """Hash the exchange with the encoded host key ``key``."""

    def compute_keys(
        self,
        session_id: bytes,
        exchange_hash: bytes,
        key_len: int,
        nonce_len: int,
        remote_to_local_mac: Union[str, bytes],
        local_to_remote_mac: Union[str, bytes],
        is_server: bool,
    ) -> KeyMaterial:
        """Derive the session keys from the shared secret."""
        return compute_keys(
            self.hash_name,
            self.shared_secret,
            session_id,
            exchange_hash,
            key_len,
            nonce_len,
            remote_to_local_mac,
            local_to_remote_mac,
            is_server,
        )


class Curve25519Kex(KexAlgorithm):
    """Elliptic-curve Diffie-Hellman over Curve25519 with SHA-256."""

    hash_name = "sha256"

    def __init__(self) -> None:
        self.local_secret: Optional[int] = None
        self.shared_secret: Optional[bytes] = None

    def __repr__(self) -> str:
        return "Curve25519Kex(local_secret=[hidden], shared_secret=[hidden])"

    @staticmethod
    def _random_scalar() -> int:
        return int.from_bytes(secrets.token_bytes(32), "little") % _L

    def skip_exchange(self) -> bool:
        return False

    def server_dh(self, exchange: Exchange, payload: bytes) -> None:
        length, payload = _client_pubkey_from_init(payload)
        if length != 32:
            raise SshError(ErrorKind.KEX)
        if len(payload) < 5 + length:
            raise SshError(ErrorKind.INCONSISTENT)
        client_pubkey = payload[5:37]
        server_secret = self._random_scalar()
        exchange.server_ephemeral = x25519(server_secret, _BASE_POINT)
        self.shared_secret = x25519(server_secret, client_pubkey)

    def client_dh(self) -> Tuple[bytes, bytes]:
        client_secret = self._random_scalar()
        client_pubkey = x25519(client_secret, _BASE_POINT)
        self.local_secret = client_secret
        return client_pubkey, bytes([msg.KEX_ECDH_INIT]) + ssh_string(client_pubkey)

    def compute_shared_secret(self, remote_pubkey: bytes) -> None:
        local_secret, self.local_secret = self.local_secret, None
        if local_secret is None:
            raise SshError(ErrorKind.KEX_INIT)
        if len(remote_pubkey) != 32:
            raise SshError(ErrorKind.KEX)
        self.shared_secret = x25519(local_secret, bytes(remote_pubkey))

    def compute_exchange_hash(self, key: bytes, exchange: Exchange) -> bytes:
        data = _exchange_hash_input(key, exchange, self.shared_secret)
        return hashlib.sha256(data).digest()


class DhGroupKex(KexAlgorithm):
    """Finite-field Diffie-Hellman in a fixed group."""

    def __init__(self, group: DhGroup, hash_name: str) -> None:
        self.dh = DiffieHellman(group)
        self.hash_name = hash_name
        self.shared_secret: Optional[bytes] = None

    def __repr__(self) -> str:
        return f"DhGroupKex(hash_name={self.hash_name!r}, shared_secret=[hidden])"

    def skip_exchange(self) -> bool:
        return False

    def _set_shared(self, remote: int) -> None:
        if not self.dh.validate_public_key(remote):
            raise SshError(ErrorKind.INCONSISTENT)
        shared = self.dh.compute_shared_secret(remote)
        if not self.dh.validate_shared_secret(shared):
            raise SshError(ErrorKind.INCONSISTENT)
        self.shared_secret = biguint_to_mpint(shared)

    def server_dh(self, exchange: Exchange, payload: bytes) -> None:
        length, payload = _client_pubkey_from_init(payload)
        if len(payload) < 5 + length:
            raise SshError(ErrorKind.INCONSISTENT)
        client_pubkey = payload[5:5 + length]

        self.dh.generate_private_key(True)
        server_pubkey = self.dh.generate_public_key()
        if not self.dh.validate_public_key(server_pubkey):
            raise SshError(ErrorKind.INCONSISTENT)
        exchange.server_ephemeral = biguint_to_mpint(server_pubkey)
        self._set_shared(decode_public_key(client_pubkey))

    def client_dh(self) -> Tuple[bytes, bytes]:
        self.dh.generate_private_key(False)
        client_pubkey = self.dh.generate_public_key()
        if not self.dh.validate_public_key(client_pubkey):
            raise SshError(ErrorKind.INCONSISTENT)
        encoded = biguint_to_mpint(client_pubkey)
        return encoded, bytes([msg.KEX_ECDH_INIT]) + ssh_string(encoded)

    def compute_shared_secret(self, remote_pubkey: bytes) -> None:
        self._set_shared(decode_public_key(remote_pubkey))

    def compute_exchange_hash(self, key: bytes, exchange: Exchange) -> bytes:
        data = _exchange_hash_input(key, exchange, self.shared_secret)
        return hashlib.new(self.hash_name, data).digest()


class NoneKex(KexAlgorithm):
    """No key exchange; keys are derived without a shared secret."""

    hash_name = "sha256"

    def __init__(self) -> None:
        self.shared_secret = None

    def skip_exchange(self) -> bool:
        return True

    def server_dh(self, exchange: Exchange, payload: bytes) -> None:
        return None

    def client_dh(self) -> Tuple[bytes, bytes]:
        return b"", b""

    def compute_shared_secret(self, remote_pubkey: bytes) -> None:
        return None

    def compute_exchange_hash(self, key: bytes, exchange: Exchange) -> bytes:
        return b""


KEXES: Dict[str, Callable[[], KexAlgorithm]] = {
    CURVE25519: Curve25519Kex,
    DH_G14_SHA256: lambda: DhGroupKex(DH_GROUP14, "sha256"),
    DH_G14_SHA1: lambda: DhGroupKex(DH_GROUP14, "sha1"),
    DH_G1_SHA1: lambda: DhGroupKex(DH_GROUP1, "sha1"),
    NONE: NoneKex,
}


def make_kex(name: Union[str, bytes]) -> KexAlgorithm:
    """Create a fresh key exchange for the algorithm named ``name``."""
    if isinstance(name, (bytes, bytearray)):
        try:
            name = bytes(name).decode("ascii")
        except UnicodeDecodeError as exc:
            raise SshError(ErrorKind.UNKNOWN_ALGO, name) from exc
    try:
        factory = KEXES[name]
    except KeyError:
        raise SshError(ErrorKind.UNKNOWN_ALGO, name) from None
    return factory()
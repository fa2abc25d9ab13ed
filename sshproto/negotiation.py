"""Algorithm negotiation: building and reading KEXINIT messages."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Iterable, Optional, Sequence, Tuple, Union

from . import kex, mac, msg
from .encoding import ED25519_NAME, Reader, name_list
from .errors import ErrorKind, SshError

__all__ = [
    "CHACHA20_POLY1305",
    "AES_256_GCM",
    "AES_256_CTR",
    "AES_192_CTR",
    "AES_128_CTR",
    "RSA_SHA2_256",
    "RSA_SHA2_512",
    "KEX_ORDER",
    "CIPHER_ORDER",
    "HMAC_ORDER",
    "Preferred",
    "Names",
    "Side",
    "select_server",
    "select_client",
    "read_kex",
    "write_kex",
]

CHACHA20_POLY1305 = "[email]"
AES_256_GCM = "[email]"
AES_256_CTR = "aes256-ctr"
AES_192_CTR = "aes192-ctr"
AES_128_CTR = "aes128-ctr"

RSA_SHA2_256 = "rsa-sha2-256"
RSA_SHA2_512 = "rsa-sha2-512"

KEX_ORDER: Tuple[str, ...] = (
    kex.CURVE25519,
    kex.DH_G14_SHA256,
    kex.DH_G14_SHA1,
    kex.DH_G1_SHA1,
    kex.EXTENSION_SUPPORT_AS_CLIENT,
    kex.EXTENSION_SUPPORT_AS_SERVER,
)

CIPHER_ORDER: Tuple[str, ...] = (
    CHACHA20_POLY1305,
    AES_256_GCM,
    AES_256_CTR,
    AES_192_CTR,
    AES_128_CTR,
)

HMAC_ORDER: Tuple[str, ...] = (
    mac.HMAC_SHA512_ETM,
    mac.HMAC_SHA256_ETM,
    mac.HMAC_SHA512,
    mac.HMAC_SHA256,
    mac.HMAC_SHA1_ETM,
    mac.HMAC_SHA1,
    mac.NONE,
)

_DEFAULT_COMPRESSION: Tuple[str, ...] = ("none", "zlib", "[email]")


@dataclass(frozen=True)
class Preferred:
    """Lists of preferred algorithms, most preferred first."""

    kex: Tuple[str, ...] = KEX_ORDER
    key: Tuple[str, ...] = (ED25519_NAME,)
    cipher: Tuple[str, ...] = CIPHER_ORDER
    mac: Tuple[str, ...] = HMAC_ORDER
    compression: Tuple[str, ...] = _DEFAULT_COMPRESSION

    DEFAULT: ClassVar["Preferred"]
    COMPRESSED: ClassVar["Preferred"]

    def __post_init__(self) -> None:
        for name in ("kex", "key", "cipher", "mac", "compression"):
            object.__setattr__(self, name, tuple(getattr(self, name)))


Preferred.DEFAULT = Preferred()
Preferred.COMPRESSED = Preferred(
    kex=KEX_ORDER,
    key=(ED25519_NAME, RSA_SHA2_256, RSA_SHA2_512),
    cipher=CIPHER_ORDER,
    mac=HMAC_ORDER,
    compression=("zlib", "[email]", "none"),
)


@dataclass(frozen=True)
class Names:
    """The algorithms agreed on by both sides."""

    kex: str
    key: str
    cipher: str
    client_mac: str
    server_mac: str
    server_compression: str
    client_compression: str
    ignore_guessed: bool


def _split(remote: bytes) -> Iterable[bytes]:
    return bytes(remote).split(b",")


def select_server(server_list: Sequence[str], client_list: bytes) -> Optional[Tuple[bool, str]]:
    """Pick the first of the client's names that the server supports.

    Returns whether it is both sides' first choice, and the name.
    """
    both_first_choice = True
    for remote in _split(client_list):
        for ours in server_list:
            if remote == ours.encode("ascii"):
                return both_first_choice, ours
            both_first_choice = False
    return None


def select_client(client_list: Sequence[str], server_list: bytes) -> Optional[Tuple[bool, str]]:
    """Pick the first of the client's own names that the server supports.

    Returns whether it is both sides' first choice, and the name.
    """
    both_first_choice = True
    for ours in client_list:
        encoded = ours.encode("ascii")
        for remote in _split(server_list):
            if remote == encoded:
                return both_first_choice, ours
            both_first_choice = False
    return None


class Side(Enum):
    """Which end of the connection is negotiating."""

    SERVER = "server"
    CLIENT = "client"

    def select(self, ours: Sequence[str], remote: bytes) -> Optional[Tuple[bool, str]]:
        """Select an algorithm the way this side does."""
        if self is Side.SERVER:
            return select_server(ours, remote)
        return select_client(ours, remote)


def read_kex(
    buffer: bytes,
    preferred: Preferred,
    side: Side,
    cipher_needs_mac: Optional[Callable[[str], bool]] = None,
) -> Names:
    """Read the peer's KEXINIT message and agree on algorithms.

    ``cipher_needs_mac`` tells whether a cipher requires a separate MAC; without
    it no cipher does, and a missing common MAC falls back to ``none``.
    """
    reader = Reader(buffer, 17)

    kex_choice = side.select(preferred.kex, reader.read_string())
    if kex_choice is None:
        raise SshError(ErrorKind.NO_COMMON_KEX_ALGO)
    kex_both_first, kex_algorithm = kex_choice

    key_choice = side.select(preferred.key, reader.read_string())
    if key_choice is None:
        raise SshError(ErrorKind.NO_COMMON_KEY_ALGO)
    key_both_first, key_algorithm = key_choice

    cipher_choice = side.select(preferred.cipher, reader.read_string())
    if cipher_choice is None:
        raise SshError(ErrorKind.NO_COMMON_CIPHER)
    cipher = cipher_choice[1]
    reader.read_string()  # server-to-client cipher

    need_mac = bool(cipher_needs_mac(cipher)) if cipher_needs_mac is not None else False

    def pick_mac() -> str:
        choice = side.select(preferred.mac, reader.read_string())
        if choice is not None:
            return choice[1]
        if need_mac:
            raise SshError(ErrorKind.NO_COMMON_MAC)
        return mac.NONE

    client_mac = pick_mac()
    server_mac = pick_mac()

    def pick_compression() -> str:
        choice = side.select(preferred.compression, reader.read_string())
        if choice is None:
            raise SshError(ErrorKind.NO_COMMON_COMPRESSION)
        return choice[1]

    client_compression = pick_compression()
    server_compression = pick_compression()

    reader.read_string()  # languages client-to-server
    reader.read_string()  # languages server-to-client

    follows = reader.read_byte() != 0
    return Names(
        kex=kex_algorithm,
        key=key_algorithm,
        cipher=cipher,
        client_mac=client_mac,
        server_mac=server_mac,
        server_compression=server_compression,
        client_compression=client_compression,
        # Drop the guessed packet if one follows and the guess was wrong.
        ignore_guessed=follows and not (kex_both_first and key_both_first),
    )


def write_kex(preferred: Preferred, as_server: bool) -> bytes:
    """Build a KEXINIT message advertising ``preferred``."""
    excluded: Union[str, None] = (
        kex.EXTENSION_SUPPORT_AS_CLIENT if as_server else kex.EXTENSION_SUPPORT_AS_SERVER
    )
    parts = [
        bytes([msg.KEXINIT]),
        secrets.token_bytes(16),
        name_list(k for k in preferred.kex if k != excluded),
        name_list(preferred.key),
        name_list(preferred.cipher),
        name_list(preferred.cipher),
        name_list(preferred.mac),
        name_list(preferred.mac),
        name_list(preferred.compression),
        name_list(preferred.compression),
        name_list(()),
        name_list(()),
        b"\x00",
        b"\x00\x00\x00\x00",
    ]
    return b"".join(parts)
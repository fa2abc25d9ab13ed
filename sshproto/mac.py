"""Message authentication codes used to protect SSH packets."""

from __future__ import annotations

import hashlib
import hmac
import struct
from dataclasses import dataclass
from typing import Dict, Optional, Union

from .errors import ErrorKind, SshError

__all__ = [
    "NONE",
    "HMAC_SHA1",
    "HMAC_SHA256",
    "HMAC_SHA512",
    "HMAC_SHA1_ETM",
    "HMAC_SHA256_ETM",
    "HMAC_SHA512_ETM",
    "Mac",
    "MacAlgorithm",
    "MACS",
    "get_mac_algorithm",
]

NONE = "none"
HMAC_SHA1 = "hmac-sha1"
HMAC_SHA256 = "hmac-sha2-256"
HMAC_SHA512 = "hmac-sha2-512"
HMAC_SHA1_ETM = "[email]"
HMAC_SHA256_ETM = "[email]"
HMAC_SHA512_ETM = "[email]"

_SEQNO = struct.Struct(">I")


@dataclass(frozen=True, repr=False)
class Mac:
    """A keyed MAC; with no hash it authenticates nothing and accepts everything."""

    key: bytes
    hash_name: Optional[str] = None
    is_etm: bool = False

    def __repr__(self) -> str:
        return f"Mac(hash_name={self.hash_name!r}, is_etm={self.is_etm}, key=[hidden])"

    @property
    def mac_len(self) -> int:
        """Length in bytes of the tags this MAC produces."""
        if self.hash_name is None:
            return 0
        return hashlib.new(self.hash_name).digest_size

    def compute(self, sequence_number: int, payload: bytes) -> bytes:
        """Return the tag over the packet sequence number and ``payload``."""
        if self.hash_name is None:
            return b""
        mac = hmac.new(self.key, digestmod=self.hash_name)
        mac.update(_SEQNO.pack(sequence_number & 0xFFFFFFFF))
        mac.update(bytes(payload))
        return mac.digest()

    def verify(self, sequence_number: int, payload: bytes, tag: bytes) -> bool:
        """Check ``tag`` against the expected one in constant time."""
        if self.hash_name is None:
            return True
        return hmac.compare_digest(self.compute(sequence_number, payload), bytes(tag))


@dataclass(frozen=True)
class MacAlgorithm:
    """A named MAC algorithm that makes keyed MACs."""

    name: str
    hash_name: Optional[str]
    key_len: int
    etm: bool = False

    def make_mac(self, key: bytes) -> Mac:
        """Build a MAC from ``key``, which must be exactly ``key_len`` bytes."""
        if self.hash_name is None:
            return Mac(b"", None, False)
        key = bytes(key)
        if len(key) != self.key_len:
            raise ValueError(
                f"{self.name} needs a {self.key_len}-byte key, got {len(key)} bytes"
            )
        return Mac(key, self.hash_name, self.etm)


def _build_registry() -> Dict[str, MacAlgorithm]:
    registry: Dict[str, MacAlgorithm] = {}
    for algorithm in (
        MacAlgorithm(NONE, None, 0),
        MacAlgorithm(HMAC_SHA1, "sha1", 20),
        MacAlgorithm(HMAC_SHA256, "sha256", 32),
        MacAlgorithm(HMAC_SHA512, "sha512", 64),
        MacAlgorithm(HMAC_SHA1_ETM, "sha1", 64, etm=True),
        MacAlgorithm(HMAC_SHA256_ETM, "sha256", 64, etm=True),
        MacAlgorithm(HMAC_SHA512_ETM, "sha512", 64, etm=True),
    ):
        # Later entries take over a name already present.
        registry[algorithm.name] = algorithm
    return registry


MACS: Dict[str, MacAlgorithm] = _build_registry()


def get_mac_algorithm(name: Union[str, bytes]) -> MacAlgorithm:
    """Look up a MAC algorithm by its wire name."""
    if isinstance(name, (bytes, bytearray)):
        try:
            name = bytes(name).decode("ascii")
        except UnicodeDecodeError as exc:
            raise SshError(ErrorKind.UNKNOWN_ALGO, name) from exc
    try:
        return MACS[name]
    except KeyError:
        raise SshError(ErrorKind.UNKNOWN_ALGO, name) from None
"""SSH wire encoding: strings, mpints, name lists, packets and public key blobs."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, Union

from .errors import ErrorKind, SshError

__all__ = [
    "ED25519_NAME",
    "SSH_RSA_NAME",
    "ssh_string",
    "mpint",
    "mpint_len",
    "name_list",
    "frame_packet",
    "Reader",
    "Ed25519PublicKey",
    "RsaPublicKey",
    "encode_public_key",
]

ED25519_NAME = "ssh-ed25519"
SSH_RSA_NAME = "ssh-rsa"

_U32 = struct.Struct(">I")


def _u32(value: int) -> bytes:
    return _U32.pack(value)


def ssh_string(data: bytes) -> bytes:
    """Encode ``data`` as a length-prefixed SSH string."""
    return _u32(len(data)) + bytes(data)


def _mpint_body(data: bytes) -> bytes:
    stripped = bytes(data).lstrip(b"\x00")
    if stripped and stripped[0] & 0x80:
        return b"\x00" + stripped
    return stripped


def mpint(data: bytes) -> bytes:
    """Encode big-endian unsigned ``data`` as an SSH mpint."""
    return ssh_string(_mpint_body(data))


def mpint_len(data: bytes) -> int:
    """Return the encoded size of ``mpint(data)``, length prefix included."""
    return 4 + len(_mpint_body(data))


def name_list(names: Iterable[Union[str, bytes]]) -> bytes:
    """Encode algorithm names as a comma-separated SSH name list."""
    parts = [n.encode("ascii") if isinstance(n, str) else bytes(n) for n in names]
    return ssh_string(b",".join(parts))


def frame_packet(payload: bytes) -> bytes:
    """Prefix ``payload`` with its big-endian 32-bit length."""
    return _u32(len(payload)) + bytes(payload)


class Reader:
    """Sequential reader over SSH-encoded bytes."""

    def __init__(self, data: bytes, position: int = 0) -> None:
        self.data = bytes(data)
        self.position = position

    def _take(self, count: int) -> bytes:
        end = self.position + count
        if self.position < 0 or end > len(self.data):
            raise SshError(ErrorKind.INDEX_OUT_OF_BOUNDS)
        chunk = self.data[self.position:end]
        self.position = end
        return chunk

    def read_u32(self) -> int:
        """Read a big-endian 32-bit unsigned integer."""
        return _U32.unpack(self._take(4))[0]

    def read_byte(self) -> int:
        """Read a single byte."""
        return self._take(1)[0]

    def read_string(self) -> bytes:
        """Read a length-prefixed string."""
        length = self.read_u32()
        return self._take(length)

    def read_utf8(self) -> str:
        """Read a length-prefixed string and decode it as UTF-8."""
        raw = self.read_string()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SshError(ErrorKind.UTF8, exc) from exc


def _int_to_bytes(value: int) -> bytes:
    if value < 0:
        raise ValueError("negative integers have no unsigned encoding")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


@dataclass(frozen=True)
class Ed25519PublicKey:
    """An Ed25519 public key."""

    key: bytes

    def __post_init__(self) -> None:
        if len(self.key) != 32:
            raise ValueError("an Ed25519 public key is 32 bytes long")

    @property
    def name(self) -> str:
        return ED25519_NAME

    def blob(self) -> bytes:
        """Return the SSH public key blob."""
        return ssh_string(ED25519_NAME.encode("ascii")) + ssh_string(self.key)


@dataclass(frozen=True)
class RsaPublicKey:
    """An RSA public key given by its exponent and modulus."""

    e: int
    n: int

    @property
    def name(self) -> str:
        return SSH_RSA_NAME

    def blob(self) -> bytes:
        """Return the SSH public key blob."""
        return (
            ssh_string(SSH_RSA_NAME.encode("ascii"))
            + mpint(_int_to_bytes(self.e))
            + mpint(_int_to_bytes(self.n))
        )


def encode_public_key(key: Union[Ed25519PublicKey, RsaPublicKey]) -> bytes:
    """Encode ``key`` as a length-prefixed public key blob."""
    return ssh_string(key.blob())
"""Finite-field Diffie-Hellman groups and key agreement."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

__all__ = [
    "DhGroup",
    "DH_GROUP1",
    "DH_GROUP14",
    "DiffieHellman",
    "decode_public_key",
]


@dataclass(frozen=True)
class DhGroup:
    """A prime-order group given by its big-endian prime and generator."""

    prime: bytes
    generator: int
    exp_size: int


DH_GROUP1 = DhGroup(
    prime=bytes.fromhex(
        """
        FFFFFFFF FFFFFFFF C90FDAA2 2168C234 C4C6628B 80DC1CD1
        29024E08 8A67CC74 020BBEA6 3B139B22 514A0879 8E3404DD
        EF9519B3 CD3A431B 302B0A6D F25F1437 4FE1356D 6D51C245
        E485B576 625E7EC6 F44C42E9 A637ED6B 0BFF5CB6 F406B7ED
        EE386BFB 5A899FA5 AE9F2411 7C4B1FE6 49286651 ECE65381
        FFFFFFFF FFFFFFFF
        """
    ),
    generator=2,
    exp_size=256,
)

DH_GROUP14 = DhGroup(
    prime=bytes.fromhex(
        """
        FFFFFFFF FFFFFFFF C90FDAA2 2168C234 C4C6628B 80DC1CD1
        29024E08 8A67CC74 020BBEA6 3B139B22 514A0879 8E3404DD
        EF9519B3 CD3A431B 302B0A6D F25F1437 4FE1356D 6D51C245
        E485B576 625E7EC6 F44C42E9 A637ED6B 0BFF5CB6 F406B7ED
        EE386BFB 5A899FA5 AE9F2411 7C4B1FE6 49286651 ECE45B3D
        C2007CB8 A163BF05 98DA4836 1C55D39A 69163FA8 FD24CF5F
        83655D23 DCA3AD96 1C62F356 208552BB 9ED52907 7096966D
        670C354E 4ABC9804 F1746C08 CA18217C 32905E46 2E36CE3B
        E39E772C 180E8603 9B2783A2 EC07A28F B5C55DF0 6F4C52C9
        DE2BCBF6 95581718 3995497C EA956AE5 15D22618 98FA0510
        15728E5A 8AACAA68 FFFFFFFF FFFFFFFF
        """
    ),
    generator=2,
    exp_size=256,
)


def decode_public_key(data: bytes) -> int:
    """Decode a big-endian unsigned public value."""
    return int.from_bytes(bytes(data), "big")


class DiffieHellman:
    """One side of a Diffie-Hellman key agreement in a given group."""

    def __init__(self, group: DhGroup) -> None:
        self.prime = int.from_bytes(group.prime, "big")
        self.generator = group.generator
        self.exp_size = group.exp_size
        self.private_key = 0
        self.public_key = 0
        self.shared_secret = 0

    def __repr__(self) -> str:
        return (
            f"DiffieHellman(prime_bits={self.prime.bit_length()}, "
            f"generator={self.generator}, private_key=[hidden])"
        )

    def generate_private_key(self, is_server: bool) -> int:
        """Pick a random private exponent in [1 or 2, (p - 1) / 2)."""
        upper = (self.prime - 1) // 2
        lower = 1 if is_server else 2
        self.private_key = lower + secrets.randbelow(upper - lower)
        return self.private_key

    def generate_public_key(self) -> int:
        """Compute g^x mod p from the private exponent."""
        self.public_key = pow(self.generator, self.private_key, self.prime)
        return self.public_key

    def compute_shared_secret(self, other_public_key: int) -> int:
        """Compute the shared secret from the peer's public value."""
        self.shared_secret = pow(other_public_key, self.private_key, self.prime)
        return self.shared_secret

    def _in_range(self, value: int) -> bool:
        return 1 < value < self.prime - 1

    def validate_shared_secret(self, shared_secret: int) -> bool:
        """Whether the shared secret lies strictly between 1 and p - 1."""
        return self._in_range(shared_secret)

    def validate_public_key(self, public_key: int) -> bool:
        """Whether the public value lies strictly between 1 and p - 1."""
        return self._in_range(public_key)
"""SSH protocol building blocks: wire encoding, negotiation, key exchange, MACs and channel parsing."""

__version__ = "0.1.0"

__all__ = [
    "dh",
    "encoding",
    "errors",
    "kex",
    "mac",
    "msg",
    "negotiation",
    "parsing",
    "pty",
    "types",
]
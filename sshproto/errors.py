"""Errors raised by the SSH protocol layer."""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = ["ErrorKind", "SshError", "SendError"]


class ErrorKind(Enum):
    """The kinds of failure the protocol layer reports.

    Each value is the message template. A ``{}`` in it is filled with the detail.
    """

    COULD_NOT_READ_KEY = "Could not read key"
    KEX_INIT = "Key exchange init failed"
    UNKNOWN_ALGO = "Unknown algorithm"
    NO_COMMON_KEX_ALGO = "No common key exchange algorithm"
    NO_COMMON_KEY_ALGO = "No common key algorithm"
    NO_COMMON_CIPHER = "No common key cipher"
    NO_COMMON_COMPRESSION = "No common compression algorithm"
    NO_COMMON_MAC = "No common MAC algorithm"
    VERSION = "invalid SSH version string"
    KEX = "Key exchange failed"
    PACKET_AUTH = "Wrong packet authentication code"
    INCONSISTENT = "Inconsistent state of the protocol"
    NOT_AUTHENTICATED = "Not yet authenticated"
    INDEX_OUT_OF_BOUNDS = "Index out of bounds"
    UNKNOWN_KEY = "Unknown server key"
    WRONG_SERVER_SIG = "Wrong server signature"
    WRONG_CHANNEL = "Channel not open"
    CHANNEL_OPEN_FAILURE = "Failed to open channel ({})"
    DISCONNECT = "Disconnected"
    NO_HOME_DIR = "No home directory when saving host key"
    KEY_CHANGED = "Key changed, line {}"
    HUP = "Connection closed by the remote side"
    CONNECTION_TIMEOUT = "Connection timeout"
    NO_AUTH_METHOD = "No authentication method"
    SEND_ERROR = "Channel send error"
    PENDING = "Pending buffer limit reached"
    DECRYPTION_ERROR = "Failed to decrypt a packet"
    UTF8 = "Invalid UTF-8: {}"


class SshError(Exception):
    """A protocol failure of a given kind, with optional detail."""

    def __init__(self, kind: ErrorKind, detail: Any = None) -> None:
        self.kind = kind
        self.detail = detail
        template = kind.value
        if "{}" in template:
            message = template.format("?" if detail is None else detail)
        elif detail is not None:
            message = f"{template}: {detail}"
        else:
            message = template
        super().__init__(message)


class SendError(Exception):
    """The event loop could not be reached."""

    def __init__(self) -> None:
        super().__init__("Could not reach the event loop")
"""Protocol-level value types: limits, disconnect reasons, signals and channels."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import ClassVar, Deque, Optional, Tuple, Union

from .errors import ErrorKind, SshError
from .parsing import ChannelOpenConfirmation

__all__ = [
    "MAX_REKEY_LIMIT",
    "Limits",
    "Disconnect",
    "Signal",
    "ChannelOpenFailure",
    "ChannelId",
    "ChannelParams",
]

MAX_REKEY_LIMIT = 1 << 30


@dataclass
class Limits:
    """Bytes read/written and time elapsed before a key re-exchange is requested."""

    rekey_write_limit: int = MAX_REKEY_LIMIT
    rekey_read_limit: int = MAX_REKEY_LIMIT
    rekey_time_limit: timedelta = field(default_factory=lambda: timedelta(seconds=3600))

    def __post_init__(self) -> None:
        if self.rekey_write_limit > MAX_REKEY_LIMIT or self.rekey_read_limit > MAX_REKEY_LIMIT:
            raise ValueError("rekey limits above 1 GiB could lead to nonce reuse")


class Disconnect(IntEnum):
    """A reason for disconnection."""

    HOST_NOT_ALLOWED_TO_CONNECT = 1
    PROTOCOL_ERROR = 2
    KEY_EXCHANGE_FAILED = 3
    RESERVED = 4
    MAC_ERROR = 5
    COMPRESSION_ERROR = 6
    SERVICE_NOT_AVAILABLE = 7
    PROTOCOL_VERSION_NOT_SUPPORTED = 8
    HOST_KEY_NOT_VERIFIABLE = 9
    CONNECTION_LOST = 10
    BY_APPLICATION = 11
    TOO_MANY_CONNECTIONS = 12
    AUTH_CANCELLED_BY_USER = 13
    NO_MORE_AUTH_METHODS_AVAILABLE = 14
    ILLEGAL_USER_NAME = 15


_STANDARD_SIGNALS = (
    "ABRT", "ALRM", "FPE", "HUP", "ILL", "INT",
    "KILL", "PIPE", "QUIT", "SEGV", "TERM", "USR1",
)


@dataclass(frozen=True)
class Signal:
    """A signal that can be sent to a remote process, standard or custom."""

    name: str

    ABRT: ClassVar["Signal"]
    ALRM: ClassVar["Signal"]
    FPE: ClassVar["Signal"]
    HUP: ClassVar["Signal"]
    ILL: ClassVar["Signal"]
    INT: ClassVar["Signal"]
    KILL: ClassVar["Signal"]
    PIPE: ClassVar["Signal"]
    QUIT: ClassVar["Signal"]
    SEGV: ClassVar["Signal"]
    TERM: ClassVar["Signal"]
    USR1: ClassVar["Signal"]

    @classmethod
    def from_name(cls, name: Union[bytes, str]) -> "Signal":
        """Build a signal from its wire name; unknown names become custom signals."""
        if isinstance(name, str):
            return cls(name)
        try:
            return cls(bytes(name).decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise SshError(ErrorKind.UTF8, exc) from exc

    def is_custom(self) -> bool:
        """Whether this is not one of the standard signals."""
        return self.name not in _STANDARD_SIGNALS

    def __str__(self) -> str:
        return self.name


for _name in _STANDARD_SIGNALS:
    setattr(Signal, _name, Signal(_name))
del _name


class ChannelOpenFailure(IntEnum):
    """Reason for not being able to open a channel."""

    UNKNOWN = 0
    ADMINISTRATIVELY_PROHIBITED = 1
    CONNECT_FAILED = 2
    UNKNOWN_CHANNEL_TYPE = 3
    RESOURCE_SHORTAGE = 4

    @classmethod
    def from_code(cls, code: int) -> Optional["ChannelOpenFailure"]:
        """Return the reason for a wire code, or None if the code is not a known reason."""
        if code == cls.UNKNOWN:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


@dataclass(frozen=True, order=True)
class ChannelId:
    """The identifier of a channel."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class ChannelParams:
    """The parameters of a channel, on both sides."""

    recipient_channel: int
    sender_channel: ChannelId
    recipient_window_size: int
    sender_window_size: int
    recipient_maximum_packet_size: int
    sender_maximum_packet_size: int
    confirmed: bool = False
    wants_reply: bool = False
    pending_data: Deque[Tuple[bytes, Optional[int], int]] = field(default_factory=deque)

    def confirm(self, confirmation: ChannelOpenConfirmation) -> None:
        """Record the peer's confirmation of this channel."""
        # The sender of the confirmation is our recipient.
        self.recipient_channel = confirmation.sender_channel
        self.recipient_window_size = confirmation.initial_window_size
        self.recipient_maximum_packet_size = confirmation.maximum_packet_size
        self.confirmed = True
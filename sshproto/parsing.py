"""Parsing and answering of channel-open messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from . import msg
from .encoding import Reader, frame_packet, ssh_string

__all__ = [
    "AGENT_FORWARD_TYPE",
    "SessionChannel",
    "X11Channel",
    "TcpChannelInfo",
    "DirectTcpipChannel",
    "ForwardedTcpipChannel",
    "AgentForwardChannel",
    "UnknownChannel",
    "ChannelType",
    "OpenChannelMessage",
    "ChannelOpenConfirmation",
]

AGENT_FORWARD_TYPE = b"[email]"

_U32 = struct.Struct(">I")


@dataclass(frozen=True)
class SessionChannel:
    """An interactive session channel."""


@dataclass(frozen=True)
class X11Channel:
    """An X11 forwarding channel."""

    originator_address: str
    originator_port: int


@dataclass(frozen=True)
class TcpChannelInfo:
    """Endpoints of a forwarded TCP connection."""

    host_to_connect: str
    port_to_connect: int
    originator_address: str
    originator_port: int

    @classmethod
    def parse(cls, reader: Reader) -> "TcpChannelInfo":
        """Read the endpoint fields that follow a TCP/IP channel-open header."""
        host_to_connect = reader.read_utf8()
        port_to_connect = reader.read_u32()
        originator_address = reader.read_utf8()
        originator_port = reader.read_u32()
        return cls(host_to_connect, port_to_connect, originator_address, originator_port)


@dataclass(frozen=True)
class DirectTcpipChannel:
    """A client-initiated TCP/IP forwarding channel."""

    info: TcpChannelInfo


@dataclass(frozen=True)
class ForwardedTcpipChannel:
    """A server-initiated TCP/IP forwarding channel."""

    info: TcpChannelInfo


@dataclass(frozen=True)
class AgentForwardChannel:
    """An authentication agent forwarding channel."""


@dataclass(frozen=True)
class UnknownChannel:
    """A channel of a type this layer does not know."""

    typ: bytes


ChannelType = Union[
    SessionChannel,
    X11Channel,
    DirectTcpipChannel,
    ForwardedTcpipChannel,
    AgentForwardChannel,
    UnknownChannel,
]


@dataclass(frozen=True)
class OpenChannelMessage:
    """A channel-open request received from the peer."""

    typ: ChannelType
    recipient_channel: int
    recipient_window_size: int
    recipient_maximum_packet_size: int

    @classmethod
    def parse(cls, reader: Reader) -> "OpenChannelMessage":
        """Read a channel-open request body, positioned after the message number."""
        typ_name = reader.read_string()
        sender = reader.read_u32()
        window = reader.read_u32()
        max_packet = reader.read_u32()

        typ: ChannelType
        if typ_name == b"session":
            typ = SessionChannel()
        elif typ_name == b"x11":
            address = reader.read_utf8()
            port = reader.read_u32()
            typ = X11Channel(address, port)
        elif typ_name == b"direct-tcpip":
            typ = DirectTcpipChannel(TcpChannelInfo.parse(reader))
        elif typ_name == b"forwarded-tcpip":
            typ = ForwardedTcpipChannel(TcpChannelInfo.parse(reader))
        elif typ_name == AGENT_FORWARD_TYPE:
            typ = AgentForwardChannel()
        else:
            typ = UnknownChannel(bytes(typ_name))

        return cls(
            typ=typ,
            recipient_channel=sender,
            recipient_window_size=window,
            recipient_maximum_packet_size=max_packet,
        )

    def confirm(self, sender_channel: int, window_size: int, packet_size: int) -> bytes:
        """Return a framed packet confirming that this channel was opened."""
        payload = bytes([msg.CHANNEL_OPEN_CONFIRMATION]) + b"".join(
            _U32.pack(v)
            for v in (self.recipient_channel, sender_channel, window_size, packet_size)
        )
        return frame_packet(payload)

    def fail(self, reason: int, message: bytes) -> bytes:
        """Return a framed packet refusing this channel."""
        payload = (
            bytes([msg.CHANNEL_OPEN_FAILURE])
            + _U32.pack(self.recipient_channel)
            + _U32.pack(int(reason))
            + ssh_string(message)
            + ssh_string(b"en")
        )
        return frame_packet(payload)

    def unknown_type(self) -> bytes:
        """Return a framed packet refusing this channel for its unknown type."""
        return self.fail(msg.SSH_OPEN_UNKNOWN_CHANNEL_TYPE, b"Unknown channel type")


@dataclass(frozen=True)
class ChannelOpenConfirmation:
    """The peer's confirmation that a channel was opened."""

    recipient_channel: int
    sender_channel: int
    initial_window_size: int
    maximum_packet_size: int

    @classmethod
    def parse(cls, reader: Reader) -> "ChannelOpenConfirmation":
        """Read a confirmation body, positioned after the message number."""
        recipient_channel = reader.read_u32()
        sender_channel = reader.read_u32()
        initial_window_size = reader.read_u32()
        maximum_packet_size = reader.read_u32()
        return cls(recipient_channel, sender_channel, initial_window_size, maximum_packet_size)
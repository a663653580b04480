"""SOCKS4 wire format.

This module implements the two packets of the SOCKS4 CONNECT exchange:

    Request (client -> server):

        +----+----+----+----+----+----+----+----+----+....+----+
        | VN | CD | DSTPORT |      DSTIP        | USERID  |NULL|
        +----+----+----+----+----+----+----+----+----+....+----+
           1    1      2              4          variable    1

    Reply (server -> client):

        +----+----+----+----+----+----+----+----+
        | VN | CD | DSTPORT |      DSTIP        |
        +----+----+----+----+----+----+----+----+
           1    1      2              4

Multi-byte fields use network byte order in both directions.

Example:
    request = read_request(client)
    Socks4Reply(ReplyCode.GRANTED).write(client)
"""

import ipaddress
import socket
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Final

from loguru import logger

from socks4_relay.core.exceptions import FramingError

# SOCKS protocol constants
SOCKS_VERSION: Final = 4
REPLY_VERSION: Final = 0
CONNECT_CMD: Final = 1
BIND_CMD: Final = 2

USERID_MAX_LENGTH: Final = 255

# Fixed part of the request after the version byte, and the whole reply
_REQUEST_FIELDS: Final = struct.Struct("!BH4s")
_REPLY: Final = struct.Struct("!BBH4s")
REPLY_SIZE: Final = _REPLY.size

ANY_ADDRESS: Final = ipaddress.IPv4Address(0)


class ReplyCode(IntEnum):
    """Status codes carried in the second byte of a reply."""

    GRANTED = 0x5A
    FAILED = 0x5B
    REJECTED_NO_IDENTD = 0x5C
    REJECTED_IDENTD_MISMATCH = 0x5D


# Hand-built granted reply with zeroed port and address
GRANTED_REPLY: Final = bytes([REPLY_VERSION, ReplyCode.GRANTED, 0, 0, 0, 0, 0, 0])


@dataclass(frozen=True)
class Socks4Request:
    """A parsed client CONNECT/BIND request.

    Attributes:
        command: Command code as received (1 = CONNECT, 2 = BIND)
        dst_port: Destination TCP port
        dst_ip: Destination IPv4 address
        userid: User identifier, never populated by the decoder
        version: Protocol version, always 4
    """

    command: int
    dst_port: int
    dst_ip: ipaddress.IPv4Address
    userid: bytes | None = None
    version: int = field(default=SOCKS_VERSION, init=False)

    @property
    def destination(self) -> tuple[str, int]:
        """Address tuple suitable for ``socket.create_connection``."""
        return str(self.dst_ip), self.dst_port

    def to_bytes(self) -> bytes:
        """Encode the request as a client would send it."""
        header = bytes([self.version]) + _REQUEST_FIELDS.pack(
            self.command, self.dst_port, self.dst_ip.packed
        )
        return header + (self.userid or b"") + b"\x00"


@dataclass(frozen=True)
class Socks4Reply:
    """The single status packet sent back to the client."""

    code: ReplyCode
    dst_port: int = 0
    dst_ip: ipaddress.IPv4Address = ANY_ADDRESS
    version: int = REPLY_VERSION

    def to_bytes(self) -> bytes:
        return _REPLY.pack(self.version, self.code, self.dst_port, self.dst_ip.packed)

    def write(self, sock: socket.socket) -> None:
        """Send the encoded reply. Socket errors propagate to the caller."""
        sock.sendall(self.to_bytes())

    @classmethod
    def from_bytes(cls, data: bytes) -> "Socks4Reply":
        """Decode an 8-byte reply.

        Raises:
            FramingError: If ``data`` is not exactly 8 bytes
            ValueError: If the status byte is not a known reply code
        """
        if len(data) != REPLY_SIZE:
            raise FramingError(f"Reply must be {REPLY_SIZE} bytes, got {len(data)}")
        version, code, port, addr = _REPLY.unpack(data)
        return cls(
            code=ReplyCode(code),
            dst_port=port,
            dst_ip=ipaddress.IPv4Address(addr),
            version=version,
        )


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise FramingError."""
    chunks = []
    remaining = size
    while remaining:
        try:
            chunk = sock.recv(remaining)
        except OSError as exc:
            raise FramingError(f"Socket error while reading request: {exc}") from exc
        if not chunk:
            raise FramingError(f"Connection closed with {remaining} of {size} bytes unread")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_request(sock: socket.socket) -> Socks4Request:
    """Read and parse a SOCKS4 request from a connected socket.

    The version byte is not validated. The userid field is drained with a
    single best-effort read of at most ``USERID_MAX_LENGTH`` bytes and
    discarded, so the returned request never carries a userid.

    Args:
        sock: Client socket positioned at the start of a request

    Returns:
        Socks4Request: The decoded request

    Raises:
        FramingError: If the peer closes or errors before 8 bytes arrive
    """
    version = _recv_exact(sock, 1)[0]
    if version != SOCKS_VERSION:
        logger.debug(f"Client sent version {version}, treating it as SOCKS4")

    command, port, addr = _REQUEST_FIELDS.unpack(_recv_exact(sock, _REQUEST_FIELDS.size))

    try:
        drained = sock.recv(USERID_MAX_LENGTH)
    except OSError as exc:
        raise FramingError(f"Socket error while draining userid: {exc}") from exc
    logger.debug(f"Drained {len(drained)} userid bytes")

    return Socks4Request(command=command, dst_port=port, dst_ip=ipaddress.IPv4Address(addr))

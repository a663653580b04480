"""SOCKS4 connection handling for the proxy server.

This module turns a decoded request into a running relay:
- Dial the requested IPv4 destination
- Answer with exactly one 8-byte reply
- Start the upload/download relay threads and return

A failed dial is answered with a FAILED reply before the error is raised,
so clients always learn the outcome of their request. Only CONNECT is
serviced; BIND and unknown commands are refused the same way.

Example:
    # The handler is automatically used by the SocksProxy server class
    server = SocksProxy((host, port), Socks4Handler)
    server.serve_forever()
"""

import socket
import socketserver
from typing import Final

from loguru import logger

from socks4_relay.core.exceptions import DialError, ProxyError, UnsupportedCommandError
from socks4_relay.core.lib.relay import RelaySession, describe
from socks4_relay.core.lib.socks4 import (
    CONNECT_CMD,
    GRANTED_REPLY,
    ReplyCode,
    Socks4Reply,
    Socks4Request,
    read_request,
)

DIAL_TIMEOUT: Final = None


def _reject(client: socket.socket, request: Socks4Request) -> None:
    reply = Socks4Reply(ReplyCode.FAILED, request.dst_port, request.dst_ip)
    try:
        reply.write(client)
    except OSError as exc:
        logger.debug(f"Could not deliver rejection to {describe(client)}: {exc}")


def handle_socks4_client(
    request: Socks4Request,
    client: socket.socket,
    timeout: float | None = DIAL_TIMEOUT,
) -> RelaySession:
    """Satisfy a SOCKS4 request and start relaying.

    The granted reply is written in full before either relay thread starts.
    The function returns as soon as both threads are running; the relay
    lifetime is governed by the threads alone.

    Args:
        request: Decoded client request
        client: Connected client socket
        timeout: Dial timeout in seconds, None to block until the OS gives up

    Returns:
        RelaySession: The started session

    Raises:
        UnsupportedCommandError: If the command is not CONNECT
        DialError: If the destination could not be reached
        OSError: If the granted reply could not be written
    """
    if request.command != CONNECT_CMD:
        _reject(client, request)
        raise UnsupportedCommandError(f"Command {request.command} is not supported")

    logger.debug(f"Dialing {request.dst_ip}:{request.dst_port}")
    try:
        destination = socket.create_connection(request.destination, timeout=timeout)
    except OSError as exc:
        _reject(client, request)
        raise DialError(f"Cannot reach {request.dst_ip}:{request.dst_port}: {exc}") from exc

    with destination:
        client.sendall(GRANTED_REPLY)
        session = RelaySession(client, destination)
    session.start()
    return session


class Socks4Handler(socketserver.BaseRequestHandler):
    """Handle incoming SOCKS4 connections."""

    def handle(self) -> None:
        """Decode the request and hand the connection to the relay."""
        client_addr = "{}:{}".format(*self.client_address)
        try:
            request = read_request(self.request)
            logger.debug(
                f"{client_addr} requested command {request.command} "
                f"to {request.dst_ip}:{request.dst_port}"
            )
            handle_socks4_client(request, self.request)
        except ProxyError as exc:
            logger.warning(f"{client_addr}: {exc}")
        except OSError as exc:
            logger.error(f"{client_addr}: socket error: {exc}")

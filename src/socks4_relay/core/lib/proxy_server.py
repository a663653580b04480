"""Threaded SOCKS4 listener.

Every accepted connection is handled on its own thread by ``Socks4Handler``.
The handler returns as soon as the relay threads are running, so the server
must not half-close the accepted socket afterwards: ``shutdown_request`` only
releases the listener's handle and leaves the connection to the relay.

Example:
    run_server("0.0.0.0", 1080)
"""

import contextlib
import socket
import socketserver
from typing import Final

from loguru import logger

from .socks_handler import Socks4Handler

DEFAULT_HOST: Final = "0.0.0.0"
DEFAULT_PORT: Final = 1080


class SocksProxy(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """SOCKS4 proxy server implementation."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def server_bind(self) -> None:
        """Bind the server socket with reuse options."""
        self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        super().server_bind()

    def shutdown_request(self, request: socket.socket) -> None:
        """Close the listener's handle without shutting the connection down."""
        self.close_request(request)


def create_proxy_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> SocksProxy:
    """Bind a proxy server without starting it.

    Args:
        host: Host address to bind to
        port: Port number to listen on, 0 for an ephemeral port
    """
    server = SocksProxy((host, port), Socks4Handler)
    bound_host, bound_port = server.server_address[:2]
    logger.info(f"Listening on {bound_host}:{bound_port}")
    return server


def run_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve until interrupted.

    Args:
        host: Host address to bind to
        port: Port number to listen on
    """
    server: SocksProxy | None = None
    try:
        server = create_proxy_server(host, port)
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopping")
    except OSError as e:
        logger.exception(f"Server error: {e}")
        raise
    finally:
        if server:
            with contextlib.suppress(OSError):
                server.server_close()
                logger.info("Server closed")

"""Bidirectional byte relay between a client and its destination.

A relay session runs two independent threads:
- upload copies client -> destination
- download copies destination -> client

Each thread owns its own duplicated handles (``socket.dup``) for the read
side it drains and the write side it feeds, so the threads share no Python
state besides the counters below. When a direction reaches EOF or fails, it
half-closes its source for reading and its sink for writing, which shows up
as EOF at the far end while the opposite direction keeps running.

There is no idle timeout: a silent peer keeps its thread blocked until the
other end closes the connection.

Example:
    session = RelaySession(client, destination)
    session.start()
    # ... later, optionally
    session.join()
"""

import contextlib
import socket
import threading
from typing import Final

from loguru import logger

from socks4_relay.core.lib.proxy_stats import ProxyStats, proxy_stats
from socks4_relay.core.utils.utils import format_bytes

BUFFER_SIZE: Final = 4096


def describe(sock: socket.socket) -> str:
    """Return ``host:port`` of the remote end, for log lines."""
    try:
        peer = sock.getpeername()
    except OSError:
        return "?"
    if isinstance(peer, tuple):
        return f"{peer[0]}:{peer[1]}"
    return str(peer) or "local"


class RelaySession:
    """Two directional copy threads bound to one client and one destination."""

    def __init__(
        self,
        client: socket.socket,
        destination: socket.socket,
        stats: ProxyStats = proxy_stats,
    ) -> None:
        """Duplicate both sockets so each direction owns its handles.

        The caller keeps ownership of ``client`` and ``destination`` and may
        close them once this returns; the duplicates keep the connections open.
        """
        self.name = f"{describe(client)} <-> {describe(destination)}"
        self.bytes_up = 0
        self.bytes_down = 0
        self._stats = stats
        self._lock = threading.Lock()
        self._running = 2

        with contextlib.ExitStack() as stack:
            handles = []
            for sock in (client, client, destination, destination):
                handle = stack.enter_context(sock.dup())
                handle.settimeout(None)
                handles.append(handle)
            # Threads own the duplicates from here on
            stack.pop_all()
        client_in, client_out, dest_in, dest_out = handles

        self.upload = threading.Thread(
            target=self._pipe,
            args=(client_in, dest_out, True),
            name=f"upload {self.name}",
            daemon=True,
        )
        self.download = threading.Thread(
            target=self._pipe,
            args=(dest_in, client_out, False),
            name=f"download {self.name}",
            daemon=True,
        )

    @property
    def threads(self) -> tuple[threading.Thread, threading.Thread]:
        return self.upload, self.download

    def start(self) -> None:
        """Start both directions and return without waiting for them."""
        self._stats.connection_started()
        logger.info(f"Relay started {self.name}")
        self.upload.start()
        self.download.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for both directions to finish.

        Returns:
            bool: True if both threads have terminated
        """
        for thread in self.threads:
            thread.join(timeout)
        return not any(thread.is_alive() for thread in self.threads)

    def _pipe(self, source: socket.socket, sink: socket.socket, upload: bool) -> None:
        direction = "upload" if upload else "download"
        try:
            while True:
                data = source.recv(BUFFER_SIZE)
                if not data:
                    break
                sink.sendall(data)
                self._count(len(data), upload)
        except OSError as exc:
            logger.debug(f"{direction} {self.name} stopped: {exc}")
        finally:
            with contextlib.suppress(OSError):
                source.shutdown(socket.SHUT_RD)
            with contextlib.suppress(OSError):
                sink.shutdown(socket.SHUT_WR)
            source.close()
            sink.close()
            self._finished(direction)

    def _count(self, size: int, upload: bool) -> None:
        with self._lock:
            if upload:
                self.bytes_up += size
            else:
                self.bytes_down += size
        if upload:
            self._stats.update_bytes(size, 0)
        else:
            self._stats.update_bytes(0, size)

    def _finished(self, direction: str) -> None:
        with self._lock:
            self._running -= 1
            done = self._running == 0
        logger.debug(f"{direction} {self.name} half-closed")
        if done:
            self._stats.connection_ended()
            logger.info(
                f"Relay closed {self.name}: "
                f"{format_bytes(self.bytes_up)} up, {format_bytes(self.bytes_down)} down"
            )

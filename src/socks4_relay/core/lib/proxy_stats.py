"""Statistics tracking for the SOCKS4 proxy server.

This module keeps running totals for the relay, including:
- Active relay sessions
- Bytes uploaded (client -> destination)
- Bytes downloaded (destination -> client)
- Server uptime

Relay threads update the counters concurrently, so every access goes
through a single lock.

Example:
    from .proxy_stats import proxy_stats

    proxy_stats.connection_started()
    proxy_stats.update_bytes(sent=1024, received=0)
"""

import threading
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class StatsSnapshot:
    """Point-in-time copy of the counters."""

    active_connections: int
    total_connections: int
    total_bytes_sent: int
    total_bytes_received: int
    uptime: float


class ProxyStats:
    """Thread-safe statistics tracker for the relay.

    ``sent`` counts bytes forwarded to destinations, ``received`` counts
    bytes forwarded back to clients.
    """

    def __init__(self) -> None:
        """Initialize proxy statistics tracker with zeroed counters."""
        self.active_connections = 0
        self.total_connections = 0
        self.total_bytes_sent = 0
        self.total_bytes_received = 0
        self.start_time = datetime.now(tz=UTC)
        self._lock = threading.Lock()

    def update_bytes(self, sent: int, received: int) -> None:
        """Update byte transfer statistics.

        Args:
            sent: Number of bytes sent to a destination
            received: Number of bytes sent back to a client
        """
        with self._lock:
            self.total_bytes_sent += sent
            self.total_bytes_received += received

    def connection_started(self) -> None:
        """Increment the active connection counter."""
        with self._lock:
            self.active_connections += 1
            self.total_connections += 1

    def connection_ended(self) -> None:
        """Decrement the active connection counter."""
        with self._lock:
            self.active_connections -= 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                active_connections=self.active_connections,
                total_connections=self.total_connections,
                total_bytes_sent=self.total_bytes_sent,
                total_bytes_received=self.total_bytes_received,
                uptime=(datetime.now(tz=UTC) - self.start_time).total_seconds(),
            )


# Global statistics object
proxy_stats = ProxyStats()

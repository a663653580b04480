"""Shared fixtures: loopback destination servers and socket pairs."""

import socket
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import pytest
from loguru import logger

TIMEOUT = 5.0


@dataclass
class Destination:
    """A one-shot loopback server standing in for the proxied destination."""

    host: str
    port: int
    received: bytearray = field(default_factory=bytearray)
    eof: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None


def _serve_once(listener: socket.socket, dest: Destination, behaviour: Callable) -> None:
    with listener:
        conn, _ = listener.accept()
    with conn:
        conn.settimeout(TIMEOUT)
        behaviour(conn, dest)


def _start_destination(behaviour: Callable) -> Destination:
    listener = socket.create_server(("127.0.0.1", 0))
    host, port = listener.getsockname()
    dest = Destination(host, port)
    dest.thread = threading.Thread(target=_serve_once, args=(listener, dest, behaviour), daemon=True)
    dest.thread.start()
    return dest


def _echo(conn: socket.socket, dest: Destination) -> None:
    while data := conn.recv(4096):
        dest.received.extend(data)
        conn.sendall(data)
    dest.eof.set()


def _reply_after_eof(conn: socket.socket, dest: Destination) -> None:
    while data := conn.recv(4096):
        dest.received.extend(data)
    dest.eof.set()
    conn.sendall(b"after-eof")


@pytest.fixture
def echo_destination() -> Destination:
    """Destination that echoes everything and closes after client EOF."""
    return _start_destination(_echo)


@pytest.fixture
def late_reply_destination() -> Destination:
    """Destination that only answers once its read side has seen EOF."""
    return _start_destination(_reply_after_eof)


@pytest.fixture
def refused_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Messages logged through loguru while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, socket.socket]]:
    """(proxy side, client side) of a connected stream pair."""
    proxy_side, client_side = socket.socketpair()
    client_side.settimeout(TIMEOUT)
    yield proxy_side, client_side
    proxy_side.close()
    client_side.close()


def recv_exact(sock: socket.socket, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def recv_all(sock: socket.socket) -> bytes:
    data = b""
    while chunk := sock.recv(4096):
        data += chunk
    return data

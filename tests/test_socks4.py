"""Unit tests for the SOCKS4 request decoder and reply encoder."""

import ipaddress
import socket

import pytest
from conftest import TIMEOUT, recv_exact

from socks4_relay.core.exceptions import FramingError
from socks4_relay.core.lib.socks4 import (
    GRANTED_REPLY,
    REPLY_SIZE,
    ReplyCode,
    Socks4Reply,
    Socks4Request,
    read_request,
)

CONNECT_LOCALHOST_80 = bytes.fromhex("04 01 00 50 7F 00 00 01")


def feed(client_side: socket.socket, data: bytes, close: bool = True) -> None:
    client_side.sendall(data)
    if close:
        client_side.shutdown(socket.SHUT_WR)


class TestSocks4Reply:
    def test_granted_literal_matches_encoder(self):
        assert Socks4Reply(ReplyCode.GRANTED).to_bytes() == GRANTED_REPLY
        assert GRANTED_REPLY == bytes.fromhex("00 5A 00 00 00 00 00 00")

    def test_reply_codes_on_the_wire(self):
        assert [code.value for code in ReplyCode] == [0x5A, 0x5B, 0x5C, 0x5D]

    def test_port_and_address_use_network_order(self):
        reply = Socks4Reply(ReplyCode.FAILED, 0x1F90, ipaddress.IPv4Address("10.1.2.3"))
        assert reply.to_bytes() == bytes.fromhex("00 5B 1F 90 0A 01 02 03")

    @pytest.mark.parametrize("code", list(ReplyCode))
    def test_round_trip(self, code):
        reply = Socks4Reply(code, 65535, ipaddress.IPv4Address("192.168.7.9"), version=0)
        decoded = Socks4Reply.from_bytes(reply.to_bytes())
        assert decoded == reply
        assert len(reply.to_bytes()) == REPLY_SIZE

    def test_from_bytes_rejects_short_input(self):
        with pytest.raises(FramingError):
            Socks4Reply.from_bytes(GRANTED_REPLY[:5])

    def test_from_bytes_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            Socks4Reply.from_bytes(bytes.fromhex("00 01 00 00 00 00 00 00"))

    def test_write_sends_all_eight_bytes(self, socket_pair):
        proxy_side, client_side = socket_pair
        Socks4Reply(ReplyCode.REJECTED_NO_IDENTD, 21, ipaddress.IPv4Address("1.2.3.4")).write(proxy_side)
        assert recv_exact(client_side, REPLY_SIZE) == bytes.fromhex("00 5C 00 15 01 02 03 04")


class TestReadRequest:
    def test_connect_request(self, socket_pair):
        proxy_side, client_side = socket_pair
        feed(client_side, CONNECT_LOCALHOST_80 + b"alice\x00")

        request = read_request(proxy_side)

        assert request.version == 4
        assert request.command == 1
        assert request.dst_port == 80
        assert request.dst_ip == ipaddress.IPv4Address("127.0.0.1")
        assert request.destination == ("127.0.0.1", 80)
        assert request.userid is None

    def test_version_byte_is_not_validated(self, socket_pair):
        proxy_side, client_side = socket_pair
        feed(client_side, b"\x05" + CONNECT_LOCALHOST_80[1:] + b"\x00")

        assert read_request(proxy_side).version == 4

    def test_command_is_kept_verbatim(self, socket_pair):
        proxy_side, client_side = socket_pair
        feed(client_side, bytes.fromhex("04 02 01 BB 08 08 04 04 00"))

        request = read_request(proxy_side)
        assert request.command == 2
        assert request.dst_port == 443
        assert request.dst_ip == ipaddress.IPv4Address("8.8.4.4")

    def test_fixed_fields_survive_reencoding(self, socket_pair):
        proxy_side, client_side = socket_pair
        raw = bytes.fromhex("04 01 FF FE C0 A8 00 FE") + b"bob\x00"
        feed(client_side, raw)

        request = read_request(proxy_side)
        assert request.to_bytes()[:8] == raw[:8]

    def test_exactly_eight_bytes(self, socket_pair):
        proxy_side, client_side = socket_pair
        feed(client_side, CONNECT_LOCALHOST_80)

        assert read_request(proxy_side).dst_port == 80

    @pytest.mark.parametrize("size", [0, 1, 2, 4, 7])
    def test_short_request_is_a_framing_error(self, socket_pair, size):
        proxy_side, client_side = socket_pair
        feed(client_side, CONNECT_LOCALHOST_80[:size])

        with pytest.raises(FramingError):
            read_request(proxy_side)
        # Nothing partial is left behind for a retry to pick up
        with pytest.raises(FramingError):
            read_request(proxy_side)

    def test_socket_error_in_fixed_fields_is_wrapped(self, socket_pair):
        proxy_side, client_side = socket_pair
        client_side.sendall(CONNECT_LOCALHOST_80[:3])
        proxy_side.settimeout(0.2)

        with pytest.raises(FramingError) as excinfo:
            read_request(proxy_side)

        assert isinstance(excinfo.value.__cause__, TimeoutError)

    def test_socket_error_while_draining_userid_is_wrapped(self, socket_pair):
        proxy_side, client_side = socket_pair
        client_side.sendall(CONNECT_LOCALHOST_80)
        proxy_side.settimeout(0.2)

        with pytest.raises(FramingError, match="userid") as excinfo:
            read_request(proxy_side)

        assert isinstance(excinfo.value.__cause__, TimeoutError)

    def test_userid_drain_is_capped(self, socket_pair):
        proxy_side, client_side = socket_pair
        feed(client_side, CONNECT_LOCALHOST_80 + b"u" * 300 + b"\x00")

        read_request(proxy_side)

        proxy_side.settimeout(TIMEOUT)
        leftover = recv_exact(proxy_side, 1024)
        assert leftover == b"u" * 45 + b"\x00"

    def test_request_encoding_for_clients(self):
        request = Socks4Request(1, 8080, ipaddress.IPv4Address("127.0.0.1"), userid=b"me")
        assert request.to_bytes() == bytes.fromhex("04 01 1F 90 7F 00 00 01") + b"me\x00"

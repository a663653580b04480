"""Core proxy library components."""

from .proxy_server import SocksProxy, create_proxy_server, run_server
from .proxy_stats import ProxyStats, proxy_stats
from .relay import RelaySession
from .socks4 import GRANTED_REPLY, ReplyCode, Socks4Reply, Socks4Request, read_request
from .socks_handler import Socks4Handler, handle_socks4_client

__all__ = [
    "create_proxy_server",
    "GRANTED_REPLY",
    "handle_socks4_client",
    "ProxyStats",
    "proxy_stats",
    "read_request",
    "RelaySession",
    "ReplyCode",
    "run_server",
    "Socks4Handler",
    "Socks4Reply",
    "Socks4Request",
    "SocksProxy",
]

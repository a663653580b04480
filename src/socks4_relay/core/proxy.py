"""Main entry point for the SOCKS4 proxy server.

This module exposes the small public surface of the proxy so callers do not
depend on the layout of ``core.lib``.

Example:
    from socks4_relay.core.proxy import run_server

    # Serve SOCKS4 on all interfaces, port 1080
    run_server("0.0.0.0", 1080)

Attributes:
    __all__ (list): List of public components exposed by this module
"""

from .lib import create_proxy_server, proxy_stats, run_server

__all__ = ["create_proxy_server", "proxy_stats", "run_server"]

"""Core proxy server implementation.

This package contains the core components of the SOCKS4 proxy server:
- Wire codec for SOCKS4 requests and replies
- Connection handling and the bidirectional relay
- Threaded listener
- Statistics tracking
- Exception handling

The CLI in ``socks4_relay.cmd`` is a thin layer on top of this package.
"""

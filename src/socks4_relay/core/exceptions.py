"""Custom exceptions for the proxy server.

Every error raised while serving a single client derives from ``ProxyError``
so the listener can log it and move on to the next connection:
- Malformed or truncated SOCKS4 requests
- Destination dial failures
- Commands the server does not service

Example:
    try:
        request = read_request(sock)
    except FramingError as e:
        logger.warning(f"Dropping client: {e}")
"""


class ProxyError(Exception):
    """Base exception for proxy errors."""


class FramingError(ProxyError):
    """Raised when the fixed request fields cannot be read in full."""


class DialError(ProxyError):
    """Raised when the requested destination cannot be reached."""


class UnsupportedCommandError(ProxyError):
    """Raised for SOCKS4 commands other than CONNECT."""

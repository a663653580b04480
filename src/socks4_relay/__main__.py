"""Allow ``python -m socks4_relay``."""

from socks4_relay.cmd.cli import app

app()

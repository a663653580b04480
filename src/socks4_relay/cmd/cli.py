"""Command-line interface for the SOCKS4 proxy server.

The CLI is built using Typer and provides:
- Starting the proxy on a chosen address and port
- Debug logging
- A transfer summary when the server stops

Example:
    # Run from command line:
    $ socks4-relay proxy --host 0.0.0.0 --port 1080
"""

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from socks4_relay import __version__
from socks4_relay.core.lib.proxy_stats import ProxyStats
from socks4_relay.core.proxy import proxy_stats, run_server
from socks4_relay.core.utils import LOG_DIR, format_bytes, format_duration, setup_logging

console = Console()
app = typer.Typer(help="SOCKS4 proxy server")


def summary_table(stats: ProxyStats) -> Table:
    """Build the shutdown summary."""
    snapshot = stats.snapshot()
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", no_wrap=True)
    table.add_row("Uptime", format_duration(snapshot.uptime))
    table.add_row("Connections", str(snapshot.total_connections))
    table.add_row("Still open", str(snapshot.active_connections))
    table.add_row("Uploaded", format_bytes(snapshot.total_bytes_sent))
    table.add_row("Downloaded", format_bytes(snapshot.total_bytes_received))
    return table


@app.callback(invoke_without_command=True)
def version_callback():
    """Show version information."""
    console.print(f"[cyan]SOCKS4 Relay v{__version__}[/cyan]")


@app.command(name="proxy")
def start_proxy(
    host: str = typer.Option("0.0.0.0", "--host", help="Address to listen on"),
    port: int = typer.Option(1080, "--port", "-p", help="Port to listen on"),
    debug: bool = typer.Option(
        default=False,
        help="Enable debug logging",
    ),
):
    """Start the SOCKS4 proxy server."""
    setup_logging(debug=debug)
    logger.info(f"Starting SOCKS4 proxy server on {host}:{port}, logs in {LOG_DIR}")
    console.print(f"[bold green]SOCKS4 proxy listening on {host}:{port}")

    try:
        run_server(host, port)
    except OSError as e:
        console.print(f"[red]Error: {e}")
        raise typer.Exit(code=1) from e
    finally:
        console.print(summary_table(proxy_stats))


if __name__ == "__main__":
    app()

"""Command line interface modules.

The command modules wrap the core proxy server with option parsing,
logging setup and a shutdown summary.
"""

"""Command-line interface for chunkgate.

This module provides the main CLI entry point and assembles all commands.

Commands:
- download: Resumable ranged download of a URL to a file
- upload: Chunked upload of a file to the gateway
- probe: Show size and range support of a URL
- token: Request an auth token from the gateway
- configure: Save the gateway URL and auth token
"""

from __future__ import annotations

import logging

import click

from chunkgate.client.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
    setup_logging,
)
from chunkgate.client.cli.token import configure, token
from chunkgate.client.cli.transfer import download, probe, upload


@click.group()
@click.version_option(package_name="chunkgate")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
def cli(verbose: bool, quiet: bool) -> None:
    """chunkgate - Resumable chunked transfers with a storage gateway."""
    if verbose:
        setup_logging(logging.DEBUG)
    elif quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)


# Transfer commands
cli.add_command(download)
cli.add_command(upload)
cli.add_command(probe)

# Account commands
cli.add_command(token)
cli.add_command(configure)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]

"""Gateway account commands for the chunkgate CLI.

Commands:
- token: Request an auth token from the gateway
- configure: Save the gateway URL and auth token
"""

from __future__ import annotations

import sys

import click

from chunkgate.client.api import GatewayClient, GatewayError
from chunkgate.client.cli.config import load_config, resolve_option, save_config


@click.command()
@click.option("--gateway", default=None, help="Gateway URL (default: saved URL).")
@click.option("--account", required=True, help="Account name.")
@click.option("--api-key", required=True, help="API key of the account.")
@click.option(
    "--expire-time",
    type=int,
    default=0,
    show_default=True,
    help="Requested token expiry, as understood by the gateway.",
)
@click.option("--save", is_flag=True, help="Save the token for later commands.")
def token(
    gateway: str | None,
    account: str,
    api_key: str,
    expire_time: int,
    save: bool,
) -> None:
    """Request an auth token from the gateway and print it."""
    gateway_url = resolve_option(gateway, "gateway_url")
    if not gateway_url:
        click.echo(
            "Error: No gateway URL. Use --gateway or run 'chunkgate configure'.",
            err=True,
        )
        sys.exit(1)

    with GatewayClient() as client:
        try:
            auth_token = client.create_token(gateway_url, account, api_key, expire_time)
        except GatewayError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if save:
        config = load_config()
        config["gateway_url"] = gateway_url.rstrip("/")
        config["auth_token"] = auth_token
        save_config(config)
        click.echo("Token saved.", err=True)
    click.echo(auth_token)


@click.command()
@click.option("--gateway", required=True, help="Gateway URL.")
@click.option("--token", "auth_token", default=None, help="Auth token.")
def configure(gateway: str, auth_token: str | None) -> None:
    """Save the gateway URL (and optionally a token) for later commands."""
    config = load_config()
    config["gateway_url"] = gateway.rstrip("/")
    if auth_token is not None:
        config["auth_token"] = auth_token
    save_config(config)
    click.echo(f"Gateway: {config['gateway_url']}")

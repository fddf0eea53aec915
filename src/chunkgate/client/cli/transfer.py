"""Transfer commands for the chunkgate CLI.

Commands:
- download: Resumable ranged download of a URL to a file
- upload: Chunked upload of a file to the gateway
- probe: Show size and range support of a URL
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from chunkgate.client.api import GatewayClient, GatewayError
from chunkgate.client.cli.config import resolve_option
from chunkgate.client.transfer import (
    ChunkUploader,
    RangeDownloader,
    TransferError,
    TransferProgress,
)
from chunkgate.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    DEFAULT_UPLOAD_CHUNK_SIZE,
    TransferConfig,
    UploadConfig,
)


def _show_progress(progress: TransferProgress) -> None:
    arrow = "↓" if progress.operation == "download" else "↑"
    click.echo(
        f"\r  {arrow} {progress.percent:5.1f}% "
        f"({progress.bytes_transferred}/{progress.file_size} bytes)",
        nl=False,
    )


@click.command()
@click.argument("url")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--chunk-size",
    type=int,
    default=DEFAULT_CHUNK_SIZE,
    show_default=True,
    help="Bytes per range request.",
)
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Deadline in seconds for the whole download.",
)
@click.option(
    "--retries",
    type=int,
    default=DEFAULT_MAX_RETRIES,
    show_default=True,
    help="Retries per chunk.",
)
@click.option("--token", default=None, help="Auth token (default: saved token).")
@click.option("--no-progress", is_flag=True, help="Disable the progress line.")
def download(
    url: str,
    output: Path,
    chunk_size: int,
    timeout: float,
    retries: int,
    token: str | None,
    no_progress: bool,
) -> None:
    """Download URL to OUTPUT in byte ranges, resuming a partial OUTPUT."""
    config = TransferConfig(
        url=url,
        output_path=output,
        chunk_size=chunk_size,
        timeout=timeout,
        max_retries=retries,
        auth_token=resolve_option(token, "auth_token"),
    )
    downloader = RangeDownloader(
        config, progress_callback=None if no_progress else _show_progress
    )
    try:
        result = downloader.download()
    except (TransferError, GatewayError) as e:
        click.echo(f"\nError: {e}", err=True)
        sys.exit(1)

    if not no_progress and result.chunks_downloaded:
        click.echo()
    click.echo(f"Downloaded {result.size} bytes to {result.local_path}")


@click.command()
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--gateway", default=None, help="Gateway URL (default: saved URL).")
@click.option("--token", default=None, help="Auth token (default: saved token).")
@click.option(
    "--chunk-size",
    type=int,
    default=DEFAULT_UPLOAD_CHUNK_SIZE,
    show_default=True,
    help="Bytes per upload request.",
)
@click.option(
    "--max-resyncs",
    type=click.IntRange(min=0),
    default=None,
    help="Give up after this many offset corrections (default: no limit).",
)
@click.option("--no-progress", is_flag=True, help="Disable the progress line.")
def upload(
    file: Path,
    gateway: str | None,
    token: str | None,
    chunk_size: int,
    max_resyncs: int | None,
    no_progress: bool,
) -> None:
    """Upload FILE to the gateway and print its remote id."""
    gateway_url = resolve_option(gateway, "gateway_url")
    if not gateway_url:
        click.echo(
            "Error: No gateway URL. Use --gateway or run 'chunkgate configure'.",
            err=True,
        )
        sys.exit(1)

    config = UploadConfig(
        gateway_url=gateway_url,
        file_path=file,
        auth_token=resolve_option(token, "auth_token"),
        chunk_size=chunk_size,
        max_resyncs=max_resyncs,
    )
    uploader = ChunkUploader(
        config, progress_callback=None if no_progress else _show_progress
    )
    try:
        result = uploader.upload()
    except TransferError as e:
        click.echo(f"\nError: {e}", err=True)
        sys.exit(1)

    if not no_progress:
        click.echo()
    click.echo(result.remote_id)


@click.command()
@click.argument("url")
@click.option("--token", default=None, help="Auth token (default: saved token).")
@click.option("--timeout", type=float, default=DEFAULT_TIMEOUT, show_default=True)
def probe(url: str, token: str | None, timeout: float) -> None:
    """Show the size of URL and whether it supports range requests."""
    with GatewayClient(
        auth_token=resolve_option(token, "auth_token"), timeout=timeout
    ) as client:
        try:
            info = client.probe(url)
        except GatewayError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(f"Size: {info.size} bytes")
    click.echo(f"Range requests: {'yes' if info.accepts_ranges else 'no'}")

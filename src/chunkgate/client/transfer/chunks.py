"""Single byte-range download with validation.

This module provides:
- download_range: Fetch one ChunkRange and write it at its file offset
- validate_range_response: Check status and Content-Range of a response
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from chunkgate.client.transfer.types import (
    ChunkLengthError,
    LocalIOError,
    RangeValidationError,
)
from chunkgate.core.ranges import ChunkRange, parse_content_range

if TYPE_CHECKING:
    import httpx

    from chunkgate.client.api import GatewayClient

logger = logging.getLogger(__name__)

WRITE_BUFFER_SIZE = 1024 * 1024  # 1 MiB


def validate_range_response(response: httpx.Response, chunk_range: ChunkRange) -> int:
    """Check that a response answers the requested range.

    A 206 must carry a Content-Range naming exactly the requested
    start-end. A 200 carries the whole resource and is accepted; the
    bytes before the range start are then skipped.

    Returns:
        Number of leading body bytes to discard.

    Raises:
        RangeValidationError: On any other status or a mismatched range.
    """
    if response.status_code == 206:
        content_range = response.headers.get("Content-Range", "")
        try:
            start, end, _ = parse_content_range(content_range)
        except ValueError as e:
            raise RangeValidationError(
                f"Chunk {chunk_range}: {e}", chunk_range
            ) from e
        if (start, end) != (chunk_range.start, chunk_range.end):
            raise RangeValidationError(
                f"Content-Range mismatch: requested {chunk_range}, "
                f"got {content_range!r}",
                chunk_range,
            )
        return 0

    if response.status_code == 200:
        logger.warning(
            f"Server ignored range {chunk_range} and sent the whole resource"
        )
        return chunk_range.start

    raise RangeValidationError(
        f"Chunk {chunk_range}: unexpected status {response.status_code}, "
        "expected 206",
        chunk_range,
    )


def download_range(
    client: GatewayClient,
    url: str,
    output_path: Path,
    chunk_range: ChunkRange,
    timeout: float | None = None,
    auth_token: str | None = None,
) -> int:
    """Download one byte range and write it at the same offset on disk.

    The output file is opened, seeked, and closed for this chunk alone,
    without truncation, so chunks land correctly in any order. At most
    chunk_range.length bytes are written.

    Args:
        client: Gateway client issuing the request.
        url: Resource address.
        output_path: File receiving the bytes.
        chunk_range: Inclusive byte range to fetch.
        timeout: Optional request timeout in seconds.
        auth_token: Optional token overriding the client default.

    Returns:
        Number of bytes written. May be short if the body was short.

    Raises:
        NetworkError: On connection failure or timeout.
        RangeValidationError: On a bad status or Content-Range.
        ChunkLengthError: If a partial response is longer than requested.
        LocalIOError: If the output file cannot be opened or written.
    """
    with client.stream_range(
        url, chunk_range, timeout=timeout, auth_token=auth_token
    ) as response:
        skip = validate_range_response(response, chunk_range)
        partial = response.status_code == 206
        expected = chunk_range.length
        written = 0

        try:
            fd = os.open(output_path, os.O_WRONLY | os.O_CREAT, 0o644)
            with os.fdopen(fd, "wb", buffering=WRITE_BUFFER_SIZE) as f:
                f.seek(chunk_range.start)
                for block in response.iter_bytes():
                    if skip:
                        if len(block) <= skip:
                            skip -= len(block)
                            continue
                        block = block[skip:]
                        skip = 0
                    piece = block[: expected - written]
                    f.write(piece)
                    written += len(piece)
                    if len(piece) < len(block):
                        if partial:
                            raise ChunkLengthError(
                                chunk_range, written + len(block) - len(piece)
                            )
                        break
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise LocalIOError(
                f"Cannot write chunk {chunk_range} to {output_path}: {e}"
            ) from e

    logger.debug(f"Wrote {written} bytes at {chunk_range.start} to {output_path}")
    return written

"""Whole-resource streaming download.

This module provides:
- DownloadStream: An open response body with its advertised size
- open_stream: Open a plain GET with retries and hand the body to the caller

Used when the caller wants the bytes as a stream rather than a file, or
when the server does not support ranges.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import ExitStack
from typing import Any

import httpx

from chunkgate.client.api import GatewayClient, GatewayError
from chunkgate.client.transfer.retry import Deadline, RetryPolicy
from chunkgate.client.transfer.types import DownloadError
from chunkgate.core.config import DEFAULT_MAX_RETRIES
from chunkgate.core.ranges import parse_content_length

logger = logging.getLogger(__name__)

DEFAULT_STREAM_TIMEOUT = 300.0  # seconds


class DownloadStream:
    """Open response body of a streaming download.

    Must be closed, directly or by using it as a context manager.
    """

    def __init__(
        self, response: httpx.Response, total_size: int, resources: ExitStack
    ) -> None:
        self._response = response
        self._resources = resources
        self.total_size = total_size

    def iter_bytes(self, chunk_size: int | None = None) -> Iterator[bytes]:
        """Iterate over the body."""
        return self._response.iter_bytes(chunk_size)

    def read(self) -> bytes:
        """Read the whole remaining body."""
        return self._response.read()

    def close(self) -> None:
        """Release the response and any client opened for it."""
        self._resources.close()

    def __enter__(self) -> DownloadStream:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def open_stream(
    url: str,
    auth_token: str = "",
    timeout: float = DEFAULT_STREAM_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
    client: GatewayClient | None = None,
    sleep: Callable[[float], Any] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> DownloadStream:
    """Open a GET request for a whole resource, retrying until it returns 200.

    Args:
        url: Resource address.
        auth_token: Sent as the AuthToken header when non-empty.
        timeout: Deadline in seconds for opening the stream, and the
            per-request timeout of a client created here.
        max_retries: Retries after the first attempt.
        client: Optional gateway client; one is created when omitted.
        sleep: Blocking wait between retries.
        clock: Monotonic clock for the deadline.

    Returns:
        DownloadStream; total_size is 0 when the server sent no length.

    Raises:
        DownloadError: If no attempt succeeds.
        DeadlineExceededError: If the deadline expires between attempts.
    """
    if not url:
        raise ValueError("url must not be empty")
    if timeout <= 0:
        timeout = DEFAULT_STREAM_TIMEOUT
    if max_retries < 0:
        max_retries = DEFAULT_MAX_RETRIES

    resources = ExitStack()
    if client is None:
        client = resources.enter_context(
            GatewayClient(auth_token=auth_token, timeout=timeout)
        )
    gateway = client

    def attempt() -> tuple[httpx.Response, ExitStack]:
        response_stack = ExitStack()
        response = response_stack.enter_context(
            gateway.stream(url, auth_token=auth_token)
        )
        if response.status_code != 200:
            response_stack.close()
            raise GatewayError(
                f"GET {url} returned status {response.status_code}",
                response.status_code,
            )
        return response, response_stack

    policy = RetryPolicy(max_retries=max_retries, sleep=sleep)
    try:
        response, response_stack = policy.call(
            attempt,
            retryable_exceptions=(GatewayError,),
            deadline=Deadline(timeout, clock=clock),
            description=f"GET {url}",
        )
    except GatewayError as e:
        resources.close()
        raise DownloadError(f"Could not open {url}: {e}") from e
    except BaseException:
        resources.close()
        raise
    resources.enter_context(response_stack)

    size_header = response.headers.get("Content-Length", "0")
    try:
        total_size = parse_content_length(size_header)
    except ValueError as e:
        resources.close()
        raise DownloadError(str(e)) from e

    logger.info(f"Streaming {url} ({total_size} bytes)")
    return DownloadStream(response, total_size, resources)

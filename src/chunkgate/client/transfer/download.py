"""Resumable chunked download.

This module provides:
- RangeDownloader: Plans the chunk grid and drives range requests
- download_file: Convenience wrapper around RangeDownloader
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from chunkgate.client.api import GatewayClient, NetworkError
from chunkgate.client.transfer.chunks import download_range
from chunkgate.client.transfer.progress import local_size
from chunkgate.client.transfer.retry import (
    BackoffFunc,
    Deadline,
    RetryPolicy,
    linear_backoff,
)
from chunkgate.client.transfer.types import (
    ChunkLengthError,
    DownloadError,
    DownloadResult,
    DownloadState,
    IncompleteTransferError,
    LocalIOError,
    ProgressCallback,
    RangeNotSupportedError,
    RangeValidationError,
    TransferProgress,
)
from chunkgate.core.config import TransferConfig
from chunkgate.core.ranges import ChunkRange, plan_remaining, total_chunks

logger = logging.getLogger(__name__)

# Failures that may clear up on their own; local I/O errors are not here
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    NetworkError,
    RangeValidationError,
    ChunkLengthError,
)


class RangeDownloader:
    """Downloads a remote resource in byte-range chunks with resume support.

    Progress is inferred from the output file's length only: an
    interrupted download resumes from whatever is on disk.
    """

    def __init__(
        self,
        config: TransferConfig,
        client: GatewayClient | None = None,
        progress_callback: ProgressCallback | None = None,
        backoff: BackoffFunc = linear_backoff,
        sleep: Callable[[float], Any] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the downloader.

        Args:
            config: Transfer configuration; defaults are applied here.
            client: Optional gateway client. When omitted, one is created
                for each download() call and closed afterwards. The token
                from config is sent on every request either way.
            progress_callback: Optional callback for progress updates.
            backoff: Delay before retry N, in seconds.
            sleep: Blocking wait between retries.
            clock: Monotonic clock for the deadline.
        """
        self._config = config.normalized()
        self._client = client
        self._progress_callback = progress_callback
        self._retry = RetryPolicy(
            max_retries=self._config.max_retries, backoff=backoff, sleep=sleep
        )
        self._clock = clock

    @property
    def config(self) -> TransferConfig:
        return self._config

    def download(self) -> DownloadResult:
        """Download the resource to config.output_path.

        Returns:
            DownloadResult with the final size.

        Raises:
            ProbeError: If the metadata probe fails.
            RangeNotSupportedError: If the server does not accept ranges.
            DownloadError: If a chunk fails after all retries.
            DeadlineExceededError: If the run exceeds config.timeout.
            LocalIOError: If the output file cannot be written.
            IncompleteTransferError: If the final size is wrong.
        """
        if self._client is not None:
            return self._run(self._client)
        with GatewayClient(
            auth_token=self._config.auth_token, timeout=self._config.timeout
        ) as client:
            return self._run(client)

    def _run(self, client: GatewayClient) -> DownloadResult:
        config = self._config
        path = config.output_path
        deadline = Deadline(config.timeout, clock=self._clock)

        info = client.probe(
            config.url, timeout=deadline.remaining(), auth_token=config.auth_token
        )
        if not info.accepts_ranges:
            raise RangeNotSupportedError(
                f"{config.url} does not accept byte ranges; "
                "chunked download is not possible"
            )
        logger.info(f"Remote size of {config.url}: {info.size / 1024 / 1024:.2f} MB")

        state = DownloadState(
            remote_size=info.size,
            local_size=local_size(path),
            chunk_size=config.chunk_size,
        )

        if state.complete:
            if not path.exists():
                self._create_output()
            logger.info(f"{path} is already complete, nothing to download")
            return self._result(state, chunks_downloaded=0, resumed_from=state.local_size)
        if state.local_size > state.remote_size:
            raise IncompleteTransferError(path, state.remote_size, state.local_size)

        self._create_output()
        resumed_from = state.local_size
        n_chunks = total_chunks(state.remote_size, state.chunk_size)
        start_index = state.next_chunk_index
        if resumed_from:
            logger.info(
                f"Resuming {path} from {resumed_from} bytes "
                f"({resumed_from / 1024 / 1024:.2f} MB)"
            )
        logger.info(
            f"Chunk size: {state.chunk_size} bytes, total chunks: {n_chunks}, "
            f"done: {start_index}, remaining: {n_chunks - start_index}"
        )

        downloaded = 0
        for chunk_range in plan_remaining(
            state.remote_size, state.chunk_size, state.local_size
        ):
            logger.debug(
                f"Downloading chunk {chunk_range.index + 1}/{n_chunks} "
                f"(range {chunk_range})"
            )
            self._download_chunk_with_retry(client, chunk_range, n_chunks, deadline)
            state.local_size = local_size(path)
            downloaded += 1

            if self._progress_callback:
                self._progress_callback(TransferProgress(
                    file_path=str(path),
                    file_size=state.remote_size,
                    current_chunk=chunk_range.index + 1,
                    total_chunks=n_chunks,
                    bytes_transferred=chunk_range.end + 1,
                    operation="download",
                ))

        final_size = local_size(path)
        if final_size != state.remote_size:
            logger.error(
                f"Download of {path} incomplete: expected {state.remote_size}, "
                f"found {final_size}"
            )
            raise IncompleteTransferError(path, state.remote_size, final_size)

        logger.info(f"Downloaded {config.url} to {path}: {downloaded} chunks")
        return self._result(state, chunks_downloaded=downloaded, resumed_from=resumed_from)

    def _download_chunk_with_retry(
        self,
        client: GatewayClient,
        chunk_range: ChunkRange,
        n_chunks: int,
        deadline: Deadline,
    ) -> int:
        """Download one chunk, retrying transient failures.

        Args:
            client: Gateway client.
            chunk_range: Range to fetch.
            n_chunks: Total chunk count, for log messages.
            deadline: Run-wide deadline.

        Returns:
            Number of bytes written.
        """
        config = self._config

        def attempt() -> int:
            written = download_range(
                client,
                config.url,
                config.output_path,
                chunk_range,
                timeout=deadline.remaining(),
                auth_token=config.auth_token,
            )
            if written != chunk_range.length:
                raise ChunkLengthError(chunk_range, written)
            return written

        try:
            return self._retry.call(
                attempt,
                retryable_exceptions=RETRYABLE_EXCEPTIONS,
                deadline=deadline,
                description=f"chunk {chunk_range.index + 1}/{n_chunks} [{chunk_range}]",
            )
        except RETRYABLE_EXCEPTIONS as e:
            raise DownloadError(
                f"Chunk {chunk_range} failed after {config.max_retries} retries: {e}",
                chunk_range,
            ) from e

    def _create_output(self) -> None:
        """Make sure the output file and its directory exist."""
        path = self._config.output_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"Cannot create {path}: {e}") from e

    def _result(
        self, state: DownloadState, chunks_downloaded: int, resumed_from: int
    ) -> DownloadResult:
        return DownloadResult(
            url=self._config.url,
            local_path=self._config.output_path,
            size=state.local_size,
            chunks_downloaded=chunks_downloaded,
            resumed_from=resumed_from,
        )


def download_file(
    config: TransferConfig,
    client: GatewayClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> DownloadResult:
    """Download config.url to config.output_path, resuming if possible."""
    return RangeDownloader(
        config, client=client, progress_callback=progress_callback
    ).download()

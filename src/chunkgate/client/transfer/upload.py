"""Chunked upload driven by gateway offset corrections.

This module provides:
- ChunkUploader: Sends a file chunk by chunk until the gateway assigns an id
- upload_file: Convenience wrapper around ChunkUploader

The gateway owns the upload offset. Every response either assigns the
final id, moves the offset forward, or redirects the uploader to another
offset (resync). Any other code ends the upload.
"""

from __future__ import annotations

import logging

from chunkgate.client.api import GatewayClient, GatewayError
from chunkgate.client.schemas import UploadResponse
from chunkgate.client.transfer.types import (
    GatewayCode,
    LocalIOError,
    ProgressCallback,
    ResyncLimitError,
    TransferProgress,
    UploadError,
    UploadResult,
    UploadSession,
)
from chunkgate.core.config import UploadConfig
from chunkgate.core.hashing import compute_file_md5, read_window
from chunkgate.core.ranges import total_chunks

logger = logging.getLogger(__name__)


class ChunkUploader:
    """Uploads a file to the gateway one chunk at a time."""

    def __init__(
        self,
        config: UploadConfig,
        client: GatewayClient | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            config: Upload configuration.
            client: Optional gateway client. When omitted, one is created
                for each upload() call and closed afterwards. The token and
                timeout from config apply to every request either way;
                connection retries are left to the client's transport.
            progress_callback: Optional callback for progress updates.
        """
        self._config = config
        self._client = client
        self._progress_callback = progress_callback

    def upload(self) -> UploadResult:
        """Upload config.file_path and return the gateway's identifier.

        The content hash is computed once, before the first request, and
        sent unchanged with every chunk.

        Returns:
            UploadResult with the remote id.

        Raises:
            LocalIOError: If the file cannot be read.
            UploadError: If the gateway rejects a chunk or cannot be reached.
            ResyncLimitError: If config.max_resyncs is exceeded.
        """
        path = self._config.file_path
        if not path.is_file():
            raise LocalIOError(f"File not found: {path}")
        try:
            session = UploadSession(
                file_size=path.stat().st_size,
                file_name=path.name,
                file_md5=compute_file_md5(path),
            )
        except OSError as e:
            raise LocalIOError(f"Cannot read {path}: {e}") from e

        logger.info(
            f"Uploading {path.name} ({session.file_size} bytes, md5 {session.file_md5})"
        )

        if self._client is not None:
            return self._run(self._client, session)
        with GatewayClient(
            auth_token=self._config.auth_token,
            timeout=self._config.timeout,
            retries=self._config.max_retries,
        ) as client:
            return self._run(client, session)

    def _run(self, client: GatewayClient, session: UploadSession) -> UploadResult:
        config = self._config
        try:
            f = open(config.file_path, "rb")
        except OSError as e:
            raise LocalIOError(f"Cannot open {config.file_path}: {e}") from e

        with f:
            while True:
                try:
                    data = read_window(f, session.offset, config.chunk_size)
                except OSError as e:
                    raise LocalIOError(
                        f"Cannot read {config.file_path} at {session.offset}: {e}"
                    ) from e

                response = self._send(client, session, data)
                session.requests += 1

                if response.code == GatewayCode.RESYNC:
                    self._resync(session, response)
                    continue

                if response.code != GatewayCode.SUCCESS:
                    logger.error(
                        f"Upload of {session.file_name} rejected at offset "
                        f"{session.offset}: code {response.code}, {response.message}"
                    )
                    raise UploadError(
                        f"Upload rejected at offset {session.offset}: "
                        f"code {response.code}, {response.message}",
                        session.offset,
                        response.code,
                    )

                if response.final_id:
                    session.remote_id = response.final_id
                    session.offset = session.file_size
                    self._report(session)
                    logger.info(
                        f"Uploaded {session.file_name} as {session.remote_id} "
                        f"({session.requests} requests, {session.resyncs} resyncs)"
                    )
                    return UploadResult(
                        remote_id=session.remote_id,
                        local_path=config.file_path,
                        size=session.file_size,
                        file_md5=session.file_md5,
                        requests=session.requests,
                        resyncs=session.resyncs,
                    )

                session.offset = self._checked_offset(session, response.file_index)
                self._report(session)

    def _send(
        self, client: GatewayClient, session: UploadSession, data: bytes
    ) -> UploadResponse:
        """Send one chunk, turning transport and HTTP failures into UploadError."""
        logger.debug(
            f"Sending {len(data)} bytes of {session.file_name} at {session.offset}"
        )
        try:
            return client.upload_chunk(
                self._config.upload_url,
                data,
                offset=session.offset,
                file_size=session.file_size,
                file_name=session.file_name,
                file_md5=session.file_md5,
                timeout=self._config.timeout,
                auth_token=self._config.auth_token,
            )
        except GatewayError as e:
            raise UploadError(
                f"Upload of {session.file_name} failed at offset {session.offset}: {e}",
                session.offset,
                e.status_code,
            ) from e

    def _resync(self, session: UploadSession, response: UploadResponse) -> None:
        """Move the session to the offset chosen by the gateway."""
        session.resyncs += 1
        max_resyncs = self._config.max_resyncs
        if max_resyncs is not None and session.resyncs > max_resyncs:
            raise ResyncLimitError(
                f"Gateway requested more than {max_resyncs} offset corrections",
                session.offset,
                response.code,
            )
        corrected = self._checked_offset(session, response.file_index)
        logger.info(
            f"Gateway corrected offset of {session.file_name}: "
            f"{session.offset} -> {corrected}"
        )
        session.offset = corrected

    def _checked_offset(self, session: UploadSession, offset: int) -> int:
        if not 0 <= offset <= session.file_size:
            raise UploadError(
                f"Gateway returned offset {offset} outside 0-{session.file_size}",
                session.offset,
            )
        return offset

    def _report(self, session: UploadSession) -> None:
        if not self._progress_callback:
            return
        chunk_size = self._config.chunk_size
        self._progress_callback(TransferProgress(
            file_path=str(self._config.file_path),
            file_size=session.file_size,
            current_chunk=total_chunks(session.offset, chunk_size),
            total_chunks=total_chunks(session.file_size, chunk_size),
            bytes_transferred=session.offset,
            operation="upload",
        ))


def upload_file(
    config: UploadConfig,
    client: GatewayClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> str:
    """Upload config.file_path and return the remote identifier."""
    return ChunkUploader(
        config, client=client, progress_callback=progress_callback
    ).upload().remote_id

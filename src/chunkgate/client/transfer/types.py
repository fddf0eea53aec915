"""Shared types and dataclasses for transfer operations.

This module provides:
- TransferError and subclasses: Download/upload failure taxonomy
- TransferProgress: Progress tracking dataclass
- DownloadState, UploadSession: Per-run transfer state
- DownloadResult, UploadResult: Operation result dataclasses
- GatewayCode: Application codes returned by the upload endpoint
- Type aliases for callbacks
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from chunkgate.core.ranges import ChunkRange


class TransferError(Exception):
    """Base exception for transfer errors."""


class RangeNotSupportedError(TransferError):
    """The remote resource does not advertise byte-range support."""


class RangeValidationError(TransferError):
    """A range response had the wrong status or Content-Range."""

    def __init__(self, message: str, chunk_range: ChunkRange) -> None:
        super().__init__(message)
        self.chunk_range = chunk_range


class ChunkLengthError(TransferError):
    """A range response body did not match the requested length."""

    def __init__(self, chunk_range: ChunkRange, written: int) -> None:
        self.chunk_range = chunk_range
        self.written = written
        super().__init__(
            f"Chunk {chunk_range}: expected {chunk_range.length} bytes, "
            f"got {written}"
        )


class LocalIOError(TransferError):
    """The local output or source file could not be read or written."""


class DeadlineExceededError(TransferError):
    """The transfer ran past its deadline."""


class DownloadError(TransferError):
    """A chunk could not be downloaded within the retry budget."""

    def __init__(self, message: str, chunk_range: ChunkRange | None = None) -> None:
        super().__init__(message)
        self.chunk_range = chunk_range


class IncompleteTransferError(TransferError):
    """The transfer finished but the resulting size is wrong.

    Attributes:
        path: Output file.
        expected: Size reported by the remote side.
        actual: Size found on disk.
    """

    def __init__(self, path: Path, expected: int, actual: int) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Incomplete transfer of {path}: expected {expected} bytes, "
            f"found {actual}"
        )


class UploadError(TransferError):
    """The gateway rejected an upload.

    Attributes:
        offset: Offset of the chunk being sent.
        code: Gateway application code or HTTP status, when known.
    """

    def __init__(
        self, message: str, offset: int, code: int | None = None
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.code = code


class ResyncLimitError(UploadError):
    """The gateway issued more offset corrections than allowed."""


class GatewayCode(IntEnum):
    """Application codes in upload responses."""

    RESYNC = 7
    SUCCESS = 200


@dataclass
class TransferProgress:
    """Progress information for transfer operations."""

    file_path: str
    file_size: int
    current_chunk: int
    total_chunks: int
    bytes_transferred: int
    operation: str  # "upload" or "download"

    @property
    def percent(self) -> float:
        """Get progress percentage by bytes."""
        if self.file_size == 0:
            return 100.0
        return (self.bytes_transferred / self.file_size) * 100


# Type alias for progress callback
ProgressCallback = Callable[[TransferProgress], None]


@dataclass
class DownloadState:
    """State of one download run.

    remote_size is fetched once; local_size is refreshed from disk after
    every written chunk.
    """

    remote_size: int
    local_size: int
    chunk_size: int

    @property
    def next_chunk_index(self) -> int:
        """Index of the first chunk not fully on disk."""
        return self.local_size // self.chunk_size

    @property
    def complete(self) -> bool:
        """True when the local file has exactly the remote size."""
        return self.local_size == self.remote_size


@dataclass
class UploadSession:
    """State of one upload run."""

    file_size: int
    file_name: str
    file_md5: str
    offset: int = 0
    remote_id: str = ""
    resyncs: int = 0
    requests: int = 0


@dataclass
class DownloadResult:
    """Result of a download operation."""

    url: str
    local_path: Path
    size: int
    chunks_downloaded: int
    resumed_from: int


@dataclass
class UploadResult:
    """Result of an upload operation."""

    remote_id: str
    local_path: Path
    size: int
    file_md5: str
    requests: int
    resyncs: int

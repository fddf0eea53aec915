"""Transfer engines - Resumable ranged downloads and gateway-driven uploads.

This package provides:
- RangeDownloader / download_file: Chunked download with resume
- ChunkUploader / upload_file: Chunked upload with offset corrections
- open_stream: Whole-resource streaming download
- Retry helpers and the transfer error taxonomy
"""

from chunkgate.client.transfer.chunks import download_range, validate_range_response
from chunkgate.client.transfer.download import RangeDownloader, download_file
from chunkgate.client.transfer.progress import local_size
from chunkgate.client.transfer.retry import (
    Deadline,
    RetryPolicy,
    exponential_backoff,
    linear_backoff,
    retry_with_backoff,
)
from chunkgate.client.transfer.stream import DownloadStream, open_stream
from chunkgate.client.transfer.types import (
    ChunkLengthError,
    DeadlineExceededError,
    DownloadError,
    DownloadResult,
    DownloadState,
    GatewayCode,
    IncompleteTransferError,
    LocalIOError,
    ProgressCallback,
    RangeNotSupportedError,
    RangeValidationError,
    ResyncLimitError,
    TransferError,
    TransferProgress,
    UploadError,
    UploadResult,
    UploadSession,
)
from chunkgate.client.transfer.upload import ChunkUploader, upload_file

__all__ = [
    # Engines
    "ChunkUploader",
    "DownloadStream",
    "RangeDownloader",
    "download_file",
    "download_range",
    "local_size",
    "open_stream",
    "upload_file",
    "validate_range_response",
    # Retry
    "Deadline",
    "RetryPolicy",
    "exponential_backoff",
    "linear_backoff",
    "retry_with_backoff",
    # Types
    "ChunkLengthError",
    "DeadlineExceededError",
    "DownloadError",
    "DownloadResult",
    "DownloadState",
    "GatewayCode",
    "IncompleteTransferError",
    "LocalIOError",
    "ProgressCallback",
    "RangeNotSupportedError",
    "RangeValidationError",
    "ResyncLimitError",
    "TransferError",
    "TransferProgress",
    "UploadError",
    "UploadResult",
    "UploadSession",
]

"""Core module - Configuration, range planning, and hashing."""

from chunkgate.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    DEFAULT_UPLOAD_CHUNK_SIZE,
    DEFAULT_UPLOAD_TIMEOUT,
    TransferConfig,
    UploadConfig,
)
from chunkgate.core.hashing import compute_file_md5, read_window
from chunkgate.core.ranges import (
    ChunkRange,
    parse_content_length,
    parse_content_range,
    plan_chunks,
    plan_remaining,
    total_chunks,
)

__all__ = [
    # Config
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "DEFAULT_UPLOAD_CHUNK_SIZE",
    "DEFAULT_UPLOAD_TIMEOUT",
    "TransferConfig",
    "UploadConfig",
    # Hashing
    "compute_file_md5",
    "read_window",
    # Ranges
    "ChunkRange",
    "parse_content_length",
    "parse_content_range",
    "plan_chunks",
    "plan_remaining",
    "total_chunks",
]

"""Configuration dataclasses for transfers.

Shared by the download and upload orchestrators and by the CLI.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

# Download defaults
DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5 MiB
DEFAULT_TIMEOUT = 30.0  # seconds, whole orchestration run
DEFAULT_MAX_RETRIES = 3

# Upload defaults
DEFAULT_UPLOAD_CHUNK_SIZE = 2 * 1024 * 1024  # 2 MiB
DEFAULT_UPLOAD_TIMEOUT = 24 * 60 * 60.0  # seconds, per request

# Gateway endpoints
UPLOAD_PATH = "/v1/addLargeFile"
TOKEN_PATH = "/u/createToken"


@dataclass(frozen=True)
class TransferConfig:
    """Configuration for one ranged download.

    Attributes:
        url: Address of the remote resource.
        output_path: Local file receiving the bytes.
        chunk_size: Bytes requested per range request.
        timeout: Deadline in seconds for the whole download run.
        max_retries: Retries per chunk after the first attempt.
        auth_token: Sent as the AuthToken header when non-empty.
    """

    url: str
    output_path: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    auth_token: str = ""

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.url:
            raise ValueError("url must not be empty")
        # "" and Path("") both normalize to "."
        if not self.output_path or Path(self.output_path) == Path("."):
            raise ValueError("output_path must name a file")
        object.__setattr__(self, "output_path", Path(self.output_path))

    def normalized(self) -> TransferConfig:
        """Return a copy with defaults applied to out-of-range values."""
        return dataclasses.replace(
            self,
            chunk_size=self.chunk_size if self.chunk_size > 0 else DEFAULT_CHUNK_SIZE,
            timeout=self.timeout if self.timeout > 0 else DEFAULT_TIMEOUT,
            max_retries=(
                self.max_retries if self.max_retries >= 0 else DEFAULT_MAX_RETRIES
            ),
        )


@dataclass(frozen=True)
class UploadConfig:
    """Configuration for one chunked upload.

    Attributes:
        gateway_url: Base URL of the gateway (e.g., "https://gw.example.com").
        file_path: Local file to upload.
        auth_token: Sent as the AuthToken header.
        chunk_size: Bytes sent per request.
        timeout: Per-request timeout in seconds.
        max_retries: Connection retries performed by the HTTP transport.
        max_resyncs: Cap on offset corrections per upload, None for no cap.
    """

    gateway_url: str
    file_path: Path
    auth_token: str = ""
    chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE
    timeout: float = DEFAULT_UPLOAD_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    max_resyncs: int | None = None

    def __post_init__(self) -> None:
        """Normalize gateway URL and apply defaults."""
        if not self.gateway_url:
            raise ValueError("gateway_url must not be empty")
        object.__setattr__(self, "gateway_url", self.gateway_url.rstrip("/"))
        object.__setattr__(self, "file_path", Path(self.file_path))
        if self.chunk_size <= 0:
            object.__setattr__(self, "chunk_size", DEFAULT_UPLOAD_CHUNK_SIZE)
        if self.timeout <= 0:
            object.__setattr__(self, "timeout", DEFAULT_UPLOAD_TIMEOUT)
        if self.max_retries < 0:
            object.__setattr__(self, "max_retries", DEFAULT_MAX_RETRIES)
        if self.max_resyncs is not None and self.max_resyncs < 0:
            raise ValueError("max_resyncs must be >= 0 or None")

    @property
    def upload_url(self) -> str:
        """Full URL of the chunk upload endpoint."""
        return f"{self.gateway_url}{UPLOAD_PATH}"

"""HTTP client for the storage gateway.

This module provides:
- GatewayClient: HTTP client for communicating with the gateway
- Metadata probe (HEAD) returning size and range support
- Range and whole-resource GET streaming
- Chunk upload and token issuance
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from chunkgate.client.schemas import TokenRequest, TokenResponse, UploadResponse
from chunkgate.core.config import TOKEN_PATH
from chunkgate.core.ranges import ChunkRange, parse_content_length

logger = logging.getLogger(__name__)

AUTH_HEADER = "AuthToken"
GATEWAY_SUCCESS = 200


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProbeError(GatewayError):
    """Metadata probe failed or returned unusable headers."""


class NetworkError(GatewayError):
    """Connection failure or timeout while talking to the gateway."""


class TokenError(GatewayError):
    """Token issuance was refused."""


@dataclass
class ResourceInfo:
    """Remote resource metadata from a probe."""

    size: int
    accepts_ranges: bool


class GatewayClient:
    """HTTP client for the storage gateway.

    Each transfer run owns one instance. Pass a transport to substitute
    the network (e.g., httpx.MockTransport in tests).
    """

    def __init__(
        self,
        auth_token: str = "",
        timeout: float = 30.0,
        retries: int = 0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            auth_token: Token sent in the AuthToken header.
            timeout: Default request timeout in seconds.
            retries: Connection retries performed by the HTTP transport.
            transport: Optional transport replacing the default one.
        """
        self._auth_token = auth_token
        self._timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport or httpx.HTTPTransport(retries=retries),
            follow_redirects=True,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> GatewayClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _auth_headers(self, auth_token: str | None = None) -> dict[str, str]:
        token = auth_token or self._auth_token
        if token:
            return {AUTH_HEADER: token}
        return {}

    # === Download operations ===

    def probe(
        self,
        url: str,
        timeout: float | None = None,
        auth_token: str | None = None,
    ) -> ResourceInfo:
        """Fetch size and range support of a remote resource.

        Args:
            url: Resource address.
            timeout: Optional timeout overriding the client default.
            auth_token: Optional token overriding the client default.

        Returns:
            Resource size and whether it advertises byte ranges.

        Raises:
            ProbeError: If the request fails, the status is not 200, or
                Content-Length is missing or not a number.
        """
        try:
            response = self._client.head(
                url,
                headers=self._auth_headers(auth_token),
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TransportError as e:
            raise ProbeError(f"HEAD {url} failed: {e}") from e

        if response.status_code != 200:
            raise ProbeError(
                f"HEAD {url} returned status {response.status_code}",
                response.status_code,
            )

        size_header = response.headers.get("Content-Length")
        if size_header is None:
            raise ProbeError(f"HEAD {url} did not return Content-Length")
        try:
            size = parse_content_length(size_header)
        except ValueError as e:
            raise ProbeError(str(e)) from e

        accepts_ranges = response.headers.get("Accept-Ranges") == "bytes"
        logger.debug(f"Probed {url}: size={size} accepts_ranges={accepts_ranges}")
        return ResourceInfo(size=size, accepts_ranges=accepts_ranges)

    @contextmanager
    def stream_range(
        self,
        url: str,
        chunk_range: ChunkRange,
        timeout: float | None = None,
        auth_token: str | None = None,
    ) -> Iterator[httpx.Response]:
        """Open a GET request restricted to one byte range.

        The response is yielded unread; transport errors raised while
        the body is consumed are reported as NetworkError.

        Raises:
            NetworkError: On connection failure or timeout.
        """
        headers = {"Range": chunk_range.header, **self._auth_headers(auth_token)}
        try:
            with self._client.stream(
                "GET",
                url,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            ) as response:
                yield response
        except httpx.TransportError as e:
            raise NetworkError(f"GET {url} [{chunk_range}] failed: {e}") from e

    @contextmanager
    def stream(
        self,
        url: str,
        timeout: float | None = None,
        auth_token: str | None = None,
    ) -> Iterator[httpx.Response]:
        """Open a plain GET request for the whole resource.

        Raises:
            NetworkError: On connection failure or timeout.
        """
        try:
            with self._client.stream(
                "GET",
                url,
                headers=self._auth_headers(auth_token),
                timeout=timeout if timeout is not None else self._timeout,
            ) as response:
                yield response
        except httpx.TransportError as e:
            raise NetworkError(f"GET {url} failed: {e}") from e

    # === Upload operations ===

    def upload_chunk(
        self,
        url: str,
        data: bytes,
        offset: int,
        file_size: int,
        file_name: str,
        file_md5: str,
        timeout: float | None = None,
        auth_token: str | None = None,
    ) -> UploadResponse:
        """Send one chunk of a file to the upload endpoint.

        Args:
            url: Upload endpoint URL.
            data: Chunk bytes.
            offset: Position of the chunk in the file.
            file_size: Total size of the file.
            file_name: Name of the file.
            file_md5: Content identity hash of the whole file.
            timeout: Optional timeout overriding the client default.
            auth_token: Optional token overriding the client default.

        Returns:
            Parsed gateway response. Offset corrections are returned, not
            raised; the caller decides what to do with them.

        Raises:
            NetworkError: On connection failure or timeout.
            GatewayError: On a non-200 HTTP status or a malformed body.
        """
        headers = {
            "Content-Type": "application/octet-stream",
            "FileStartIndex": str(offset),
            "FileSize": str(file_size),
            "FileName": file_name.encode("utf-8"),
            "FileMd5": file_md5,
            AUTH_HEADER: auth_token or self._auth_token,
        }
        try:
            response = self._client.post(
                url,
                content=data,
                headers=headers,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TransportError as e:
            raise NetworkError(f"POST {url} at offset {offset} failed: {e}") from e

        if response.status_code != 200:
            raise GatewayError(
                f"Upload at offset {offset} returned status {response.status_code}",
                response.status_code,
            )
        try:
            return UploadResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise GatewayError(f"Malformed upload response: {e}") from e

    # === Token operations ===

    def create_token(
        self,
        gateway_url: str,
        account: str,
        api_key: str,
        expire_time: int,
    ) -> str:
        """Request an authorization token from the gateway.

        Args:
            gateway_url: Base URL of the gateway.
            account: Account name.
            api_key: API key of the account.
            expire_time: Requested expiry, passed through unchanged.

        Returns:
            The issued token.

        Raises:
            NetworkError: On connection failure or timeout.
            TokenError: If the gateway refuses the request.
        """
        body = TokenRequest(account=account, api_key=api_key, expire_time=expire_time)
        url = f"{gateway_url.rstrip('/')}{TOKEN_PATH}"
        try:
            response = self._client.post(url, json=body.model_dump(by_alias=True))
        except httpx.TransportError as e:
            raise NetworkError(f"POST {url} failed: {e}") from e

        if response.status_code != 200:
            raise TokenError(
                f"Token request failed with status {response.status_code}",
                response.status_code,
            )
        try:
            result = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise TokenError(f"Malformed token response: {e}") from e
        if result.code != GATEWAY_SUCCESS or not result.data:
            raise TokenError(f"Token request refused: {result.message}", result.code)
        return result.data

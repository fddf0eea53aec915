"""Byte-range planning for chunked downloads.

This module provides:
- ChunkRange: An inclusive [start, end] byte interval
- plan_chunks: Split [0, total_size - 1] into contiguous chunk ranges
- plan_remaining: The ranges still needed given bytes already on disk
- parse_content_range: Parse a "bytes start-end/total" header
- parse_content_length: Parse a strictly decimal Content-Length header
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkRange:
    """Inclusive byte range requested in a single range request."""

    index: int
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid chunk range {self.start}-{self.end}")

    @property
    def length(self) -> int:
        """Number of bytes the range covers."""
        return self.end - self.start + 1

    @property
    def header(self) -> str:
        """Value for the Range request header."""
        return f"bytes={self.start}-{self.end}"

    def narrowed(self, start: int) -> ChunkRange:
        """Return the same chunk with its start moved forward to `start`."""
        return ChunkRange(index=self.index, start=start, end=self.end)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def total_chunks(total_size: int, chunk_size: int) -> int:
    """Number of chunks needed to cover total_size bytes."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return (total_size + chunk_size - 1) // chunk_size


def chunk_at(index: int, total_size: int, chunk_size: int) -> ChunkRange:
    """Planned range of chunk `index`, clipped to the end of the resource."""
    start = index * chunk_size
    end = min(start + chunk_size, total_size) - 1
    return ChunkRange(index=index, start=start, end=end)


def plan_chunks(total_size: int, chunk_size: int) -> list[ChunkRange]:
    """Split [0, total_size - 1] into contiguous ranges of chunk_size bytes.

    The last range is shorter when total_size is not a multiple of
    chunk_size. An empty resource yields no ranges.
    """
    return [
        chunk_at(i, total_size, chunk_size)
        for i in range(total_chunks(total_size, chunk_size))
    ]


def plan_remaining(
    total_size: int, chunk_size: int, local_size: int
) -> Iterator[ChunkRange]:
    """Yield the ranges still needed when local_size bytes are on disk.

    Starts at chunk local_size // chunk_size. Chunks fully covered by
    persisted bytes are skipped; a partially covered chunk starts at the
    persisted boundary.
    """
    for i in range(local_size // chunk_size, total_chunks(total_size, chunk_size)):
        planned = chunk_at(i, total_size, chunk_size)
        if planned.start < local_size:
            if planned.end < local_size:
                continue
            planned = planned.narrowed(local_size)
        yield planned


def parse_content_range(value: str) -> tuple[int, int, int | None]:
    """Parse a Content-Range header of the form "bytes start-end/total".

    Args:
        value: Raw header value.

    Returns:
        Tuple of (start, end, total); total is None when given as "*".

    Raises:
        ValueError: If the header is malformed.
    """
    unit, _, spec = value.strip().partition(" ")
    if unit != "bytes" or not spec:
        raise ValueError(f"Malformed Content-Range: {value!r}")
    interval, _, total_str = spec.partition("/")
    start_str, sep, end_str = interval.partition("-")
    if not sep or not start_str.isdigit() or not end_str.isdigit():
        raise ValueError(f"Malformed Content-Range: {value!r}")
    total: int | None = None
    if total_str and total_str != "*":
        if not total_str.isdigit():
            raise ValueError(f"Malformed Content-Range: {value!r}")
        total = int(total_str)
    return int(start_str), int(end_str), total


def parse_content_length(value: str) -> int:
    """Parse a Content-Length header: ASCII digits only, no sign or spaces.

    Raises:
        ValueError: If the header is not a non-negative decimal integer.
    """
    if not (value.isascii() and value.isdecimal()):
        raise ValueError(f"Invalid Content-Length {value!r}")
    return int(value)

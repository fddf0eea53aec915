"""Content identity hashing and windowed file reads."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

HASH_BLOCK_SIZE = 1024 * 1024


def compute_file_md5(path: Path) -> str:
    """Compute the MD5 content identity hash of a file.

    Reads the file in blocks to handle large files efficiently.

    Args:
        path: Path to the file to hash.

    Returns:
        Hex-encoded MD5 digest (32 characters).
    """
    hasher = hashlib.md5()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(HASH_BLOCK_SIZE), b""):
            hasher.update(block)
    return hasher.hexdigest()


def read_window(f: BinaryIO, offset: int, length: int) -> bytes:
    """Read up to `length` bytes from an open file starting at `offset`.

    Near end-of-file the returned window is shorter; past end-of-file
    it is empty.
    """
    f.seek(offset)
    return f.read(length)

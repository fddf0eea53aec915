"""Local progress tracking for resumable downloads.

The output file's own byte length is the only resumption checkpoint.
"""

from __future__ import annotations

import os
from pathlib import Path

from chunkgate.client.transfer.types import LocalIOError


def local_size(path: Path) -> int:
    """Return the persisted byte length of path, or 0 if it does not exist.

    Raises:
        LocalIOError: On any other stat failure.
    """
    try:
        return os.stat(path).st_size
    except FileNotFoundError:
        return 0
    except OSError as e:
        raise LocalIOError(f"Cannot stat {path}: {e}") from e

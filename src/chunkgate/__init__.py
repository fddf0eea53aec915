"""chunkgate - Resumable chunked transfers to and from a storage gateway."""

__version__ = "0.1.0"

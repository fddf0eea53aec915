"""Configuration utilities for the chunkgate CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_config_dir() -> Path:
    """Get the configuration directory for chunkgate.

    Returns:
        Path to ~/.chunkgate or equivalent.
    """
    return Path.home() / ".chunkgate"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, str]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, str]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def resolve_option(value: str | None, key: str) -> str:
    """Return an explicit option value, else the saved one, else ""."""
    if value is not None:
        return value
    return load_config().get(key, "")


def setup_logging(level: int) -> None:
    """Send chunkgate log records to stderr.

    Args:
        level: Logging level for the chunkgate logger.
    """
    chunkgate_logger = logging.getLogger("chunkgate")
    for handler in chunkgate_logger.handlers[:]:
        chunkgate_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    chunkgate_logger.addHandler(handler)
    chunkgate_logger.setLevel(level)

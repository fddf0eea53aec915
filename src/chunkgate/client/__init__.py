"""Client module - Gateway HTTP client, transfer engines, and CLI."""

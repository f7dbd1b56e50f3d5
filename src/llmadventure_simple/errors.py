"""Error types shared across the adventure package."""
from __future__ import annotations


class AdventureError(RuntimeError):
    """Base class for every fatal error that ends a session."""


class ConfigError(AdventureError):
    """Missing home directory, credentials file, or API key."""


class ProviderError(AdventureError):
    """Transport, HTTP, or response-shape failure talking to a chat backend."""

    def __init__(self, message: str, provider: str | None = None, status: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.provider:
            parts.append(self.provider)
        if self.status is not None:
            parts.append(f"HTTP {self.status}")
        return f"[{' '.join(parts)}] {base}" if parts else base


class PlayerInputError(AdventureError):
    """Reading the player's next line failed (EOF or OS error)."""

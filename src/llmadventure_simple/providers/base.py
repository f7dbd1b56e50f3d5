"""
Provider abstraction: one implementation per chat backend wire format.

Each provider turns a ChatRequest into exactly one blocking HTTP call and
returns the plain reply text, raising ProviderError for any failure.
"""
from __future__ import annotations

from ..conversation import ChatRequest


class ChatProvider:
    """Interface for a single chat-completion backend."""

    name: str = "base"

    def send(self, request: ChatRequest) -> str:
        """Perform one round-trip and return the reply text."""
        raise NotImplementedError

    def close(self) -> None:
        return

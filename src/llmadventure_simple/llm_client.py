from __future__ import annotations
"""
LLM client facade over the supported chat backends.

The session engine should not care which wire format is in use. This module
resolves the API key for a ProviderIdentity, picks the matching provider once,
and sends the full history each turn, returning the raw reply text.
"""
import logging
import time

from .config import Settings, get_key
from .conversation import ChatRequest, ConversationHistory, ProviderIdentity
from .providers import create_provider
from .providers.base import ChatProvider

log = logging.getLogger("llm_client")


class LLMClient:
    """Provider bound to one identity for the lifetime of a session."""

    def __init__(self, identity: ProviderIdentity, provider: ChatProvider):
        self.identity = identity
        self.provider = provider

    @classmethod
    def for_identity(cls, identity: ProviderIdentity, settings: Settings | None = None) -> "LLMClient":
        # Raises ConfigError before any transport exists when the key is missing.
        api_key = get_key(identity.provider, settings)
        return cls(identity, create_provider(identity, api_key, settings=settings))

    def send(self, history: ConversationHistory, max_tokens: int) -> str:
        request = ChatRequest.from_history(self.identity, history, max_tokens)
        log.debug("Sending %d messages to %s (max_tokens=%d)", len(request.messages), self.identity.label(), request.max_output_tokens)
        t0 = time.time()
        text = self.provider.send(request)
        log.debug("Reply from %s in %d ms", self.identity.label(), int((time.time() - t0) * 1000))
        return text

    def close(self) -> None:
        self.provider.close()


def send(identity: ProviderIdentity, history: ConversationHistory, max_tokens: int, settings: Settings | None = None) -> str:
    """One-shot convenience: resolve credentials, build the provider, send, and close it."""
    client = LLMClient.for_identity(identity, settings)
    try:
        return client.send(history, max_tokens)
    finally:
        client.close()

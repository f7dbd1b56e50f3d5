from __future__ import annotations

from typing import Dict, Type

from ..config import Settings
from ..conversation import ProviderIdentity
from ..errors import ConfigError
from .anthropic_provider import AnthropicProvider
from .base import ChatProvider
from .openai_provider import OpenAIProvider

_PROVIDERS: Dict[str, Type[ChatProvider]] = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
}


def create_provider(identity: ProviderIdentity, api_key: str, settings: Settings | None = None) -> ChatProvider:
    cls = _PROVIDERS.get(identity.provider)
    if cls is None:
        raise ConfigError(f"Unsupported provider '{identity.provider}'")
    return cls(api_key, settings=settings)

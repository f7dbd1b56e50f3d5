from __future__ import annotations
"""
Anthropic transport for game-master turns (messages API wire format).

POSTs {model, messages, max_tokens} to {base}/v1/messages with the x-api-key and
anthropic-version headers and reads content[0].text.
"""
import logging
from typing import Any, Dict

import requests

from ..config import Settings, get_settings
from ..conversation import ChatRequest
from ..errors import ProviderError
from .base import ChatProvider


class AnthropicProvider(ChatProvider):
    name = "anthropic"

    def __init__(self, api_key: str, settings: Settings | None = None):
        settings = settings or get_settings()
        self.log = logging.getLogger("llm_client.anthropic")
        # Bare host, as the official SDK reads ANTHROPIC_BASE_URL
        self.url = settings.anthropic_base_url.rstrip("/") + "/v1/messages"
        self.timeout_s = settings.request_timeout_s
        self.headers = {
            "x-api-key": api_key,
            "anthropic-version": settings.anthropic_version,
            "content-type": "application/json",
        }

    def send(self, request: ChatRequest) -> str:
        try:
            resp = requests.post(self.url, headers=self.headers, json=request.body(), timeout=self.timeout_s)
        except requests.RequestException as e:
            raise ProviderError(f"Request failed: {e}", provider=self.name) from e

        if not 200 <= resp.status_code < 300:
            raise ProviderError(self._error_message(resp), provider=self.name, status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Response body is not valid JSON", provider=self.name, status=resp.status_code) from e
        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise ProviderError("Unexpected response shape", provider=self.name)
        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("Response has no content array", provider=self.name)
        if not blocks:
            raise ProviderError("Response contained no content blocks", provider=self.name)
        first = blocks[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise ProviderError("First content block has no text", provider=self.name)
        self.log.debug("Reply received (%d chars, stop_reason=%s)", len(text), data.get("stop_reason"))
        return text

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            payload: Dict[str, Any] = resp.json()
        except ValueError:
            return (resp.text or resp.reason or "").strip() or "Request failed"
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        return str(payload)

from __future__ import annotations
"""
OpenAI transport for game-master turns (chat completions wire format).

Sends {model, messages, max_tokens} with a bearer token and reads
choices[0].message.content. Retries are disabled; a failed turn ends the session.
"""
import logging
from typing import Any

import openai
from openai import OpenAI

from ..config import Settings, get_settings
from ..conversation import ChatRequest
from ..errors import ProviderError
from .base import ChatProvider


class OpenAIProvider(ChatProvider):
    name = "openai"

    def __init__(self, api_key: str, settings: Settings | None = None, client: Any = None):
        settings = settings or get_settings()
        self.log = logging.getLogger("llm_client.openai")
        self.timeout_s = settings.request_timeout_s
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=settings.openai_base_url or None,
            max_retries=0,
            timeout=self.timeout_s,
        )

    def send(self, request: ChatRequest) -> str:
        try:
            rsp = self.client.chat.completions.create(
                model=request.model,
                messages=request.messages,
                max_tokens=request.max_output_tokens,
            )
        except openai.APIStatusError as e:
            raise ProviderError(_status_message(e), provider=self.name, status=e.status_code) from e
        except openai.APIConnectionError as e:
            raise ProviderError(f"Connection failed: {e}", provider=self.name) from e
        except openai.OpenAIError as e:
            raise ProviderError(str(e), provider=self.name) from e
        return self._extract_text(rsp)

    def close(self) -> None:
        self.client.close()

    def _extract_text(self, rsp: Any) -> str:
        choices = getattr(rsp, "choices", None)
        if not choices:
            raise ProviderError("Response contained no choices", provider=self.name)
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise ProviderError("First choice has no text content", provider=self.name)
        self.log.debug("Reply received (%d chars, finish_reason=%s)", len(content), getattr(choices[0], "finish_reason", None))
        return content


def _status_message(e: "openai.APIStatusError") -> str:
    body = getattr(e, "body", None)
    if isinstance(body, dict):
        err = body.get("error", body)
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return getattr(e, "message", None) or str(e)

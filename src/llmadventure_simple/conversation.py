"""
Conversation data model: messages, the append-only history, and per-turn requests.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, Iterator, List, Literal, Sequence

Role = Literal["user", "assistant"]
ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Message:
    """A single turn in the conversation."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unsupported role '{self.role}'; expected one of {ROLES}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class ConversationHistory:
    """Ordered transcript sent to the model on every turn. Only grows."""

    def __init__(self, seed: Sequence[Message]):
        if not seed:
            raise ValueError("History needs at least one seed message")
        self._messages: List[Message] = list(seed)
        self.seed_count = len(self._messages)

    def append(self, role: Role, content: str) -> Message:
        msg = Message(role=role, content=content)
        self._messages.append(msg)
        return msg

    def snapshot(self) -> List[Dict[str, str]]:
        """Wire-ready copy of the history; later appends do not affect it."""
        return [m.to_dict() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __getitem__(self, idx: int) -> Message:
        return self._messages[idx]

    def to_json(self, **extra) -> str:
        data = dict(extra)
        data["messages"] = self.snapshot()
        return json.dumps(data, ensure_ascii=False, indent=2)


@dataclass(frozen=True)
class ProviderIdentity:
    """Which backend and model id a session talks to."""

    provider: str  # "openai" | "anthropic"
    model: str

    def label(self) -> str:
        return f"{self.provider}:{self.model}"


@dataclass(frozen=True)
class ChatRequest:
    model: str
    messages: List[Dict[str, str]]
    max_output_tokens: int

    @classmethod
    def from_history(cls, identity: ProviderIdentity, history: ConversationHistory, max_tokens: int) -> "ChatRequest":
        return cls(model=identity.model, messages=history.snapshot(), max_output_tokens=int(max_tokens))

    def body(self) -> Dict[str, object]:
        """The {model, messages, max_tokens} triple both backends accept."""
        return {"model": self.model, "messages": self.messages, "max_tokens": self.max_output_tokens}


# Named selections offered on the command line.
MODEL_CHOICES: Dict[str, ProviderIdentity] = {
    "gpt-3.5-turbo": ProviderIdentity("openai", "gpt-3.5-turbo"),
    "gpt-4": ProviderIdentity("openai", "gpt-4"),
    "claude": ProviderIdentity("anthropic", "claude-sonnet-4-20250514"),
}


def resolve_identity(name: str) -> ProviderIdentity:
    """Map a CLI model name to its identity; 'provider:model' strings pass through."""
    if name in MODEL_CHOICES:
        return MODEL_CHOICES[name]
    provider, sep, model = name.partition(":")
    if sep and provider in ("openai", "anthropic") and model:
        return ProviderIdentity(provider, model)
    raise ValueError(f"Unknown model '{name}'. Choose one of {sorted(MODEL_CHOICES)} or 'provider:model'.")

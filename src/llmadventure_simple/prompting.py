"""
Game-master prompt text and the seed messages placed before the first model call.

Two seed strategies are supported:
- "combined": one user message holding the instructions and the opening line.
- "separate": the instructions and the opening line as two user messages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .conversation import Message

END_MARKER = "THE END"

GAME_MASTER_INSTRUCTIONS = (
    "You are a game master in a fantasy role play game like Dungeons and Dragons. "
    "You will guide the player through a map with room descriptions and their connections to other rooms. "
    "Some items can be taken and used in other places. You will have to guide the player. "
    "Never let the player know anything he did not yet discover and don't write anything a user should have answered. "
    f"Write '{END_MARKER}' when the game ended because the player died, exits the game or won. "
    f"Really just write '{END_MARKER}' in any case the game has ended. Don't forget the {END_MARKER}. "
    "Start with a description of what the goal of the adventure is."
)

OPENING_LINE = "Hello game master. I am ready. Let's start."

SEED_STRATEGIES = ("combined", "separate")


@dataclass
class PromptConfig:
    """Text and layout of the seed messages."""

    instructions: str = GAME_MASTER_INSTRUCTIONS
    opening_line: str = OPENING_LINE
    seed_strategy: str = "combined"  # "combined" | "separate"


def build_seed_messages(cfg: PromptConfig | None = None) -> List[Message]:
    cfg = cfg or PromptConfig()
    if cfg.seed_strategy == "separate":
        return [
            Message("user", cfg.instructions),
            Message("user", cfg.opening_line),
        ]
    if cfg.seed_strategy != "combined":
        raise ValueError(f"Unknown seed strategy '{cfg.seed_strategy}'; expected one of {SEED_STRATEGIES}")
    return [Message("user", f"{cfg.instructions}\n\n{cfg.opening_line}")]

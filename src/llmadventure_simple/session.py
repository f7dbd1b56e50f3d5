"""
Interactive game-master session and config.

- SessionConfig: knobs for the per-turn token budget, seed layout, and transcript dump.
- GameSession: owns the conversation history and runs the Init -> Turn -> Done loop.
  - Each turn sends the whole history via LLMClient, appends and prints the reply,
    and stops as soon as the reply contains the end marker.
  - Otherwise reads one line from the player and appends it before the next turn.
  - Any provider, configuration, or input error aborts the session; nothing is retried.
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .conversation import ConversationHistory
from .errors import PlayerInputError
from .llm_client import LLMClient
from .prompting import END_MARKER, PromptConfig, build_seed_messages

SEPARATOR = "-----------------------------------"
SPEAKER_LABEL = "Game Master"
INPUT_PROMPT = "Your input: "


class SessionState(enum.Enum):
    INIT = "init"
    TURN = "turn"
    DONE = "done"


@dataclass
class SessionConfig:
    max_tokens: int = 200
    prompt_cfg: PromptConfig = field(default_factory=PromptConfig)
    # Optional path for a JSON dump of the history when the session stops
    transcript_path: str | None = None


def reply_ends_game(text: str) -> bool:
    """Plain, case-sensitive substring test; a passing mention also counts."""
    return END_MARKER in text


class GameSession:
    def __init__(
        self,
        client: LLMClient,
        cfg: SessionConfig | None = None,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.log = logging.getLogger("session")
        self.client = client
        self.cfg = cfg or SessionConfig()
        self.read_line = read_line
        self.write = write
        self.history = ConversationHistory(build_seed_messages(self.cfg.prompt_cfg))
        self.state = SessionState.INIT
        self.turns = 0

    def run(self) -> SessionState:
        """Play until the model writes the end marker. Errors propagate to the caller."""
        self.log.info("Session started with %s (seed messages=%d)", self.client.identity.label(), self.history.seed_count)
        self.state = SessionState.TURN
        try:
            while self.state is SessionState.TURN:
                self.step()
        finally:
            self._dump_transcript()
        self.log.info("Session finished after %d turns", self.turns)
        return self.state

    def step(self) -> SessionState:
        """One round-trip, plus the player's answer unless the story just ended."""
        reply = self.client.send(self.history, self.cfg.max_tokens)
        self.history.append("assistant", reply)
        self.turns += 1
        self.write(f"{SEPARATOR}\n{SPEAKER_LABEL}: {reply}\n\n")

        if reply_ends_game(reply):
            self.log.debug("End marker found in turn %d", self.turns)
            self.state = SessionState.DONE
            return self.state

        self.history.append("user", self._read_player_line())
        return self.state

    def _read_player_line(self) -> str:
        """Prompt until the player types non-blank text; blank lines are not added to history."""
        while True:
            try:
                line = self.read_line(INPUT_PROMPT)
            except EOFError as e:
                raise PlayerInputError("Input stream closed before the story ended") from e
            except OSError as e:
                raise PlayerInputError(f"Failed to read player input: {e}") from e
            if line.strip():
                return line

    def _dump_transcript(self) -> None:
        p = self.cfg.transcript_path
        if not p:
            return
        try:
            if os.path.isdir(p) or os.path.splitext(p)[1] == "":
                os.makedirs(p, exist_ok=True)
                ts = datetime.now().strftime("%Y%m%d-%H%M%S")
                p = os.path.join(p, f"adventure_{ts}.json")
            else:
                dir_path = os.path.dirname(p)
                if dir_path:
                    os.makedirs(dir_path, exist_ok=True)
            with open(p, "w", encoding="utf-8") as f:
                f.write(self.history.to_json(model=self.client.identity.label(), state=self.state.value, turns=self.turns))
        except OSError:
            self.log.exception("Failed to write transcript to %s", p)
            return
        self.log.info("Wrote transcript to %s", p)

import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import httpx
from openai import OpenAI

from llmadventure_simple.config import Settings
from llmadventure_simple.conversation import ChatRequest, ConversationHistory, Message, ProviderIdentity
from llmadventure_simple.errors import PlayerInputError, ProviderError
from llmadventure_simple.llm_client import LLMClient
from llmadventure_simple.prompting import GAME_MASTER_INSTRUCTIONS, OPENING_LINE, PromptConfig
from llmadventure_simple.providers.anthropic_provider import AnthropicProvider
from llmadventure_simple.providers.base import ChatProvider
from llmadventure_simple.providers.openai_provider import OpenAIProvider
from llmadventure_simple.session import GameSession, SessionConfig, SessionState, reply_ends_game


class ScriptedProvider(ChatProvider):
    """Replies from a fixed script and keeps every request it was sent."""

    name = "scripted"

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests: list[ChatRequest] = []

    def send(self, request: ChatRequest) -> str:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeTerminal:
    def __init__(self, lines=()):
        self.lines = list(lines)
        self.prompts: list[str] = []
        self.output: list[str] = []

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    def write(self, text: str) -> None:
        self.output.append(text)


def _session(replies, lines=(), seed="combined", **cfg_kwargs):
    provider = ScriptedProvider(replies)
    term = FakeTerminal(lines)
    client = LLMClient(ProviderIdentity("openai", "gpt-test"), provider)
    cfg = SessionConfig(prompt_cfg=PromptConfig(seed_strategy=seed), **cfg_kwargs)
    return GameSession(client, cfg, read_line=term.read_line, write=term.write), provider, term


class SessionLoopTests(unittest.TestCase):
    def test_seed_comes_first_for_each_strategy(self):
        for seed, count in (("combined", 1), ("separate", 2)):
            with self.subTest(seed=seed):
                session, provider, _ = _session(["THE END"], seed=seed)
                session.run()
                first_request = provider.requests[0].messages
                self.assertEqual(len(first_request), count)
                self.assertEqual(first_request[0]["role"], "user")
                self.assertTrue(first_request[0]["content"].startswith(GAME_MASTER_INSTRUCTIONS))
                self.assertIn(OPENING_LINE, first_request[-1]["content"])
                self.assertEqual(session.history.seed_count, count)

    def test_history_grows_two_per_turn_and_one_on_the_last(self):
        replies = ["A cave.", "A troll.", "You win. THE END"]
        session, provider, term = _session(replies, lines=["go north", "attack"])

        state = session.run()

        self.assertIs(state, SessionState.DONE)
        self.assertEqual(session.turns, 3)
        self.assertEqual(len(session.history), 1 + 2 * 2 + 1)
        self.assertEqual([len(r.messages) for r in provider.requests], [1, 3, 5])
        self.assertEqual(len(term.prompts), 2)
        self.assertEqual(session.history[-1], Message("assistant", "You win. THE END"))
        self.assertEqual(session.history[2], Message("user", "go north"))

    def test_ending_reply_is_displayed_without_prompting(self):
        session, _, term = _session(["You enter a dark cave. THE END"])
        session.run()
        self.assertEqual(term.prompts, [])
        self.assertEqual(len(term.output), 1)
        self.assertIn("Game Master: You enter a dark cave. THE END", term.output[0])
        self.assertTrue(term.output[0].startswith("-----"))

    def test_marker_is_case_sensitive_substring(self):
        self.assertTrue(reply_ends_game("and so it was...THE ENDING"))
        self.assertFalse(reply_ends_game("the end"))
        self.assertFalse(reply_ends_game("The End"))

    def test_mentioning_the_marker_still_ends_the_game(self):
        session, _, term = _session(['The sign reads "THE END is near". What do you do?'])
        self.assertIs(session.run(), SessionState.DONE)
        self.assertEqual(term.prompts, [])

    def test_provider_error_aborts_immediately(self):
        session, provider, term = _session(["A cave.", ProviderError("boom", provider="openai", status=500)], lines=["look"])
        with self.assertRaises(ProviderError):
            session.run()
        self.assertEqual(len(provider.requests), 2)
        self.assertEqual(len(session.history), 3)
        self.assertIs(session.state, SessionState.TURN)

    def test_blank_lines_are_asked_again_and_not_recorded(self):
        session, provider, term = _session(["A cave.", "THE END"], lines=["", "   ", "look"])
        session.run()
        self.assertEqual(term.prompts, ["Your input: "] * 3)
        self.assertEqual(len(session.history), 4)
        self.assertEqual(session.history[2], Message("user", "look"))
        self.assertEqual(provider.requests[1].messages[-1], {"role": "user", "content": "look"})
        self.assertTrue(all(m["content"].strip() for m in provider.requests[1].messages))

    def test_only_blank_lines_then_eof_is_input_error(self):
        session, _, _ = _session(["A cave."], lines=["", ""])
        with self.assertRaises(PlayerInputError):
            session.run()
        self.assertEqual(len(session.history), 2)

    def test_closed_input_is_player_input_error(self):
        session, _, _ = _session(["A cave."], lines=[])
        with self.assertRaises(PlayerInputError):
            session.run()
        self.assertEqual(len(session.history), 2)

    def test_os_error_on_input(self):
        session, _, _ = _session(["A cave."])
        session.read_line = MagicMock(side_effect=OSError("tty gone"))
        with self.assertRaises(PlayerInputError):
            session.run()

    def test_max_tokens_is_forwarded(self):
        session, provider, _ = _session(["THE END"], max_tokens=64)
        session.run()
        self.assertEqual(provider.requests[0].max_output_tokens, 64)
        self.assertEqual(provider.requests[0].model, "gpt-test")

    def test_transcript_written_on_finish_and_abort(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out", "game.json")
            session, _, _ = _session(["Hi.", "Bye. THE END"], lines=["wave"], transcript_path=path)
            session.run()
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            self.assertEqual(data["state"], "done")
            self.assertEqual(data["turns"], 2)
            self.assertEqual(len(data["messages"]), 4)

            session, _, _ = _session(["Hi."], lines=[], transcript_path=tmp)
            with self.assertRaises(PlayerInputError):
                session.run()
            dumps = [n for n in os.listdir(tmp) if n.startswith("adventure_")]
            self.assertEqual(len(dumps), 1)


class HistoryTests(unittest.TestCase):
    def test_snapshot_is_a_copy(self):
        history = ConversationHistory([Message("user", "seed")])
        snap = history.snapshot()
        history.append("assistant", "reply")
        self.assertEqual(len(snap), 1)
        self.assertEqual(len(history), 2)

    def test_messages_are_immutable_and_roles_checked(self):
        msg = Message("user", "hi")
        with self.assertRaises(Exception):
            msg.content = "changed"  # type: ignore[misc]
        with self.assertRaises(ValueError):
            Message("system", "nope")  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            ConversationHistory([])


class EndToEndWireTests(unittest.TestCase):
    """Canned provider payloads flowing through the real provider classes."""

    def test_openai_reply_with_marker_terminates(self):
        sent: list[httpx.Request] = []
        canned = {"choices": [{"index": 0, "message": {"role": "assistant", "content": "You enter a dark cave. THE END"}}]}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json=canned)

        http = httpx.Client(transport=httpx.MockTransport(handler))
        provider = OpenAIProvider("sk-test", client=OpenAI(api_key="sk-test", max_retries=0, http_client=http))
        term = FakeTerminal()
        session = GameSession(LLMClient(ProviderIdentity("openai", "gpt-3.5-turbo"), provider), read_line=term.read_line, write=term.write)

        self.assertIs(session.run(), SessionState.DONE)
        self.assertEqual(len(sent), 1)
        self.assertEqual(session.history[-1], Message("assistant", "You enter a dark cave. THE END"))
        self.assertIn("You enter a dark cave. THE END", term.output[0])
        self.assertEqual(term.prompts, [])

    def test_anthropic_reply_without_marker_asks_for_input(self):
        first = MagicMock(status_code=200)
        first.json.return_value = {"content": [{"text": "You find a sword."}]}
        second = MagicMock(status_code=200)
        second.json.return_value = {"content": [{"text": "You swing it. THE END"}]}
        term = FakeTerminal(["", "take sword"])
        settings = Settings(
            default_model="claude",
            max_tokens=200,
            request_timeout_s=30.0,
            openai_base_url="https://api.openai.com/v1",
            anthropic_base_url="https://api.anthropic.com",
            anthropic_version="2023-06-01",
            credentials_file=None,
        )
        provider = AnthropicProvider("sk-ant", settings=settings)
        session = GameSession(LLMClient(ProviderIdentity("anthropic", "claude-test"), provider), read_line=term.read_line, write=term.write)

        with patch("llmadventure_simple.providers.anthropic_provider.requests.post", side_effect=[first, second]) as post:
            session.run()

        self.assertEqual(term.prompts, ["Your input: ", "Your input: "])
        self.assertIn("You find a sword.", term.output[0])
        self.assertEqual(post.call_args_list[0].args[0], "https://api.anthropic.com/v1/messages")
        bodies = [c.kwargs["json"] for c in post.call_args_list]
        self.assertEqual(len(bodies), 2)
        self.assertEqual(len(bodies[1]["messages"]), len(bodies[0]["messages"]) + 2)
        self.assertEqual(bodies[1]["messages"][-1], {"role": "user", "content": "take sword"})
        self.assertEqual(bodies[1]["messages"][-2], {"role": "assistant", "content": "You find a sword."})


if __name__ == "__main__":
    unittest.main()

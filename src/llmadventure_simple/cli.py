"""
Command-line entry point: pick a model, start a session, report how it ended.

Usage: llm-adventure [--model gpt-4] [--max-tokens 200] [--transcript runs/]
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import get_settings
from .conversation import MODEL_CHOICES, resolve_identity
from .errors import AdventureError
from .llm_client import LLMClient
from .prompting import SEED_STRATEGIES, PromptConfig
from .session import GameSession, SessionConfig


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="llm-adventure", description="Play a text adventure with an LLM game master.")
    ap.add_argument("--model", default=None, help=f"Model to use: one of {', '.join(MODEL_CHOICES)} or 'provider:model' (default from settings)")
    ap.add_argument("--gpt4", action="store_true", help="Shortcut for --model gpt-4 (more expensive and slower, but might lead to better stories)")
    ap.add_argument("--max-tokens", type=int, default=None, help="Maximum tokens per game-master reply")
    ap.add_argument("--seed", choices=SEED_STRATEGIES, default="combined", help="Send instructions and opening line as one message or two")
    ap.add_argument("--transcript", default=None, help="Path to a JSON file or directory for the final conversation")
    ap.add_argument("--log-level", default="WARNING", help="Python logging level (e.g., INFO, DEBUG)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = str(args.log_level).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("adventure")

    try:
        settings = get_settings()
    except AdventureError as e:
        log.error("%s", e)
        return 1

    model_name = "gpt-4" if args.gpt4 else (args.model or settings.default_model)
    try:
        identity = resolve_identity(model_name)
    except ValueError as e:
        log.error("%s", e)
        return 2

    max_tokens = args.max_tokens if args.max_tokens is not None else settings.max_tokens
    cfg = SessionConfig(
        max_tokens=int(max_tokens),
        prompt_cfg=PromptConfig(seed_strategy=args.seed),
        transcript_path=args.transcript,
    )

    try:
        client = LLMClient.for_identity(identity, settings)
    except AdventureError as e:
        log.error("%s", e)
        return 1

    try:
        log.info("Starting adventure: model=%s max_tokens=%d seed=%s", identity.label(), cfg.max_tokens, args.seed)
        GameSession(client, cfg).run()
    except AdventureError as e:
        log.error("%s", e)
        return 1
    except KeyboardInterrupt:
        log.warning("Interrupted")
        return 130
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

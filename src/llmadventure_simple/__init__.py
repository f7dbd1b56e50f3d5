"""
LLM Adventure (Simplified) package.

Components:
- session: the interactive game-master loop and end-of-story detection
- conversation/prompting: message history, per-turn requests, and seed prompts
- llm_client: provider facade; providers/ holds the OpenAI and Anthropic wire formats
- config: settings (YAML/env) and per-user API keys
"""
# Package exports are intentionally minimal; import modules directly as needed.

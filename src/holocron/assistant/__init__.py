"""External assistant clients.

Holocron never reasons on its own: every explanation, TIL and note is
produced by an assistant behind the ``Assistant`` protocol in ``base``.

    base.py           Assistant protocol, AgentResponse, StreamCallback
    protocol.py       stream-json line parsing (no I/O)
    claude_cli.py     `claude --print` subprocess client (default)
    anthropic_api.py  direct Anthropic API client (optional extra)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from holocron.assistant.base import AgentResponse, Assistant, StreamCallback

if TYPE_CHECKING:
    from holocron.config import AssistantConfig

__all__ = ["AgentResponse", "Assistant", "StreamCallback", "build_assistant"]


def build_assistant(config: AssistantConfig) -> Assistant:
    """Construct the assistant backend named by the config."""
    if config.backend == "claude_cli":
        from holocron.assistant.claude_cli import ClaudeCLIAssistant

        return ClaudeCLIAssistant(
            command=config.command,
            model=config.model,
            timeout=config.timeout,
        )
    if config.backend == "anthropic_api":
        from holocron.assistant.anthropic_api import AnthropicAPIAssistant

        kwargs: dict = {"timeout": config.timeout}
        if config.model:
            kwargs["model"] = config.model
        return AnthropicAPIAssistant(**kwargs)

    from holocron.errors import ConfigInvalid

    raise ConfigInvalid(
        f"Unknown assistant backend: {config.backend!r}. Use claude_cli or anthropic_api"
    )

"""Anthropic API assistant, a lightweight fallback when the CLI is unavailable."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from holocron.assistant.base import AgentResponse, StreamCallback, with_context
from holocron.errors import AssistantFailed, AssistantNotAuthenticated, AssistantTimeout

logger = logging.getLogger(__name__)


@dataclass
class AnthropicAPIAssistant:
    """Direct Anthropic API via the `anthropic` SDK. Pure conversation, no tools.

    The API is stateless, so multi-turn sessions rely on the transcript
    context Holocron passes with each prompt; ``session_id`` is ignored.
    """

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    timeout: int = 300
    _client: object = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._client is not None:
            return
        try:
            import anthropic

            self._client = anthropic.Anthropic(timeout=self.timeout)
        except ImportError:
            raise ImportError(
                "anthropic package required. Install with: pip install 'holocron[api]'"
            )

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def ask(
        self,
        prompt: str,
        *,
        context: str | None = None,
        session_id: str | None = None,
        on_text: StreamCallback | None = None,
    ) -> AgentResponse:
        import anthropic

        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": with_context(prompt, context)}],
        }

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except anthropic.AuthenticationError as e:
            raise AssistantNotAuthenticated(str(e)) from e
        except anthropic.APITimeoutError as e:
            raise AssistantTimeout(self.timeout) from e
        except anthropic.APIError as e:
            logger.error("Anthropic API error: %s", e)
            raise AssistantFailed(f"Anthropic API error: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text.strip():
            raise AssistantFailed("Assistant returned an empty reply")
        if on_text:
            on_text(text)

        cost = None
        if response.usage:
            # Approximate cost (Sonnet pricing)
            cost = (response.usage.input_tokens * 3 + response.usage.output_tokens * 15) / 1e6

        return AgentResponse(text=text, cost_usd=cost, model=response.model)

    async def health_check(self) -> bool:
        try:
            response = await asyncio.to_thread(
                self._client.messages.create,
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "ping"}],
            )
            return bool(response.content)
        except Exception:
            return False

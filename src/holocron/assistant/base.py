"""Assistant protocol and shared types."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

# Callback for streaming text chunks
StreamCallback = Callable[[str], None]


@dataclass
class AgentResponse:
    """Reply from an assistant backend."""

    text: str
    session_id: str | None = None
    cost_usd: float | None = None
    model: str | None = None
    duration_ms: int | None = None
    metadata: dict = field(default_factory=dict)


def with_context(prompt: str, context: str | None) -> str:
    """Prefix the prompt with a <context> block when context is given."""
    return f"<context>\n{context}\n</context>\n\n{prompt}" if context else prompt


@runtime_checkable
class Assistant(Protocol):
    """Protocol that all assistant backends must implement.

    ``ask`` is a single blocking unit of work from the caller's point of view.
    Failures are raised as holocron.errors.AssistantError subclasses.
    """

    @property
    def name(self) -> str: ...

    async def ask(
        self,
        prompt: str,
        *,
        context: str | None = None,
        session_id: str | None = None,
        on_text: StreamCallback | None = None,
    ) -> AgentResponse:
        """Send a prompt and return the full reply."""
        ...

    async def health_check(self) -> bool:
        """Check if the assistant is available. Returns True if healthy."""
        ...

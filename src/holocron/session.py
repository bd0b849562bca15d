"""Learning session state: mode, category and the ordered transcript."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

ASSISTANT_TURN_LIMIT = 500


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One immutable transcript entry."""

    role: Role
    text: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class LearningMode:
    """What the session is about: a deep dive on a topic or an analysed link."""

    kind: str  # "deep_dive" | "link"
    subject: str

    @classmethod
    def deep_dive(cls, topic: str) -> LearningMode:
        return cls("deep_dive", topic)

    @classmethod
    def link(cls, url: str) -> LearningMode:
        return cls("link", url)

    @property
    def is_link(self) -> bool:
        return self.kind == "link"

    def __str__(self) -> str:
        if self.is_link:
            return f"Link Analysis: {self.subject}"
        return f"Deep Dive: {self.subject}"


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class Transcript:
    """Append-only ordered log of turns for the current session."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def all(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __bool__(self) -> bool:
        return bool(self._turns)

    def render(self, budget: int | None = None) -> str:
        """Format turns for use as assistant context.

        Assistant replies are trimmed to ASSISTANT_TURN_LIMIT characters. If the
        result exceeds ``budget`` characters, the oldest turns are dropped
        first; the newest turn is always kept.
        """
        blocks = []
        for turn in self._turns:
            if turn.role is Role.ASSISTANT:
                blocks.append(f"Assistant: {_truncate(turn.text, ASSISTANT_TURN_LIMIT)}")
            else:
                blocks.append(f"User: {turn.text}")

        if budget is not None:
            total = sum(len(b) + 1 for b in blocks)
            dropped = 0
            while len(blocks) > 1 and total > budget:
                total -= len(blocks.pop(0)) + 1
                dropped += 1
            if dropped:
                blocks.insert(0, f"[{dropped} earlier turns omitted]")

        return "\n".join(blocks)


@dataclass
class Session:
    """A single interactive learning session. Lives for the process lifetime."""

    mode: LearningMode
    category: str | None = None
    transcript: Transcript = field(default_factory=Transcript)
    assistant_session_id: str | None = None

    @property
    def topic(self) -> str:
        return self.mode.subject

    def add_exchange(self, user_text: str, assistant_text: str) -> None:
        """Record a completed request/response pair."""
        self.transcript.append(Turn(Role.USER, user_text))
        self.transcript.append(Turn(Role.ASSISTANT, assistant_text))

    def build_context(self, budget: int | None = None) -> str:
        lines = [f"Learning Session: {self.mode}", ""]
        if self.category:
            lines += [f"Category: {self.category}", ""]
        lines.append("Conversation Summary:")
        lines.append(self.transcript.render(budget))
        return "\n".join(lines)

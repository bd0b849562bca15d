"""Holocron orchestrator — the single context object owned by the REPL.

Responsibilities:
1. Session lifecycle: start a deep dive or link session, drop it on exit
2. Conversation: forward user text to the assistant, record completed exchanges
3. Generation: turn the session into a TIL entry or a note via the assistant
4. Persistence: hand artifacts to the writer, keep the last unsaved one for retry
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from holocron.artifacts import (
    ArtifactKind,
    GeneratedArtifact,
    build_note_artifact,
    build_til_artifact,
    placeholder_artifact,
)
from holocron.errors import ConfigInvalid
from holocron.prompts import build_note_prompt, build_session_prompt, build_til_prompt
from holocron.session import LearningMode, Session
from holocron.writer import save_artifact

if TYPE_CHECKING:
    from holocron.assistant.base import AgentResponse, Assistant, StreamCallback
    from holocron.config import HolocronConfig

logger = logging.getLogger(__name__)


class NoActiveSession(Exception):
    """Raised when a command needs a session and none was started."""


class Holocron:
    """Owns config, assistant and the current session for the process lifetime."""

    def __init__(self, config: HolocronConfig, assistant: Assistant) -> None:
        self.config = config
        self.assistant = assistant
        self.session: Session | None = None
        self.pending: GeneratedArtifact | None = None

    # ── Session lifecycle ────────────────────────────────────

    def start_session(self, mode: LearningMode, category: str | None = None) -> Session:
        self.session = Session(mode=mode, category=category)
        self.pending = None
        logger.info("Started session: %s (category=%s)", mode, category)
        return self.session

    async def begin(
        self,
        mode: LearningMode,
        category: str | None = None,
        on_text: StreamCallback | None = None,
    ) -> AgentResponse:
        """Start a session and send its opening prompt."""
        session = self.start_session(mode, category)
        return await self.ask(build_session_prompt(session), on_text=on_text)

    # ── Conversation ─────────────────────────────────────────

    async def ask(self, text: str, on_text: StreamCallback | None = None) -> AgentResponse:
        """Send user text within the current session.

        Both turns are recorded only once the reply is complete, so a failed,
        timed-out or interrupted call leaves the transcript unchanged.
        """
        session = self._require_session()

        context = None
        if not session.assistant_session_id and session.transcript:
            # Stateless backend or lost session: resend the history
            context = session.transcript.render(self.config.assistant.context_budget)

        response = await self.assistant.ask(
            text,
            context=context,
            session_id=session.assistant_session_id,
            on_text=on_text,
        )

        session.add_exchange(text, response.text)
        if response.session_id:
            session.assistant_session_id = response.session_id
        logger.debug("Exchange recorded (%d turns)", len(session.transcript))
        return response

    # ── Generation ───────────────────────────────────────────

    async def generate(
        self,
        kind: ArtifactKind,
        on_text: StreamCallback | None = None,
    ) -> GeneratedArtifact:
        """Build a TIL or note from the current session.

        An absent or empty session short-circuits to a placeholder artifact
        without calling the assistant.
        """
        if kind is ArtifactKind.NOTE and self.config.notes_path is None:
            raise ConfigInvalid("Notes path not configured. Run: holocron config --notes-path <path>")

        session = self.session
        notes_format = self.config.notes_format
        if session is None or not session.transcript:
            logger.info("Empty session, returning placeholder %s", kind.value)
            artifact = placeholder_artifact(kind, session, notes_format)
            self.pending = artifact
            return artifact

        budget = self.config.assistant.context_budget
        if kind is ArtifactKind.TIL:
            prompt = build_til_prompt(session, budget)
        else:
            prompt = build_note_prompt(session, notes_format, budget)

        response = await self.assistant.ask(
            prompt,
            session_id=session.assistant_session_id,
            on_text=on_text,
        )

        if kind is ArtifactKind.TIL:
            artifact = build_til_artifact(response.text, session)
        else:
            artifact = build_note_artifact(response.text, session, notes_format)
        self.pending = artifact
        return artifact

    # ── Persistence ──────────────────────────────────────────

    def save(self, artifact: GeneratedArtifact, override: str | Path | None = None) -> Path:
        path = save_artifact(artifact, self.config, override)
        if self.pending is artifact:
            self.pending = None
        return path

    def discard(self) -> None:
        self.pending = None

    # ── Helpers ──────────────────────────────────────────────

    def _require_session(self) -> Session:
        if self.session is None:
            raise NoActiveSession("Start a session with /learn <topic> or /link <url>")
        return self.session

    def end(self) -> None:
        """Drop the session; raw transcripts are never persisted."""
        if self.session is not None:
            logger.info("Session ended after %d turns", len(self.session.transcript))
        self.session = None
        self.pending = None

"""Shared fixtures: config isolation and a fake assistant."""

from __future__ import annotations

from pathlib import Path

import pytest

from holocron.assistant.base import AgentResponse
from holocron.config import HolocronConfig, NotesFormat, save_config

_ENV_KEYS = ["HOLOCRON_LOG_LEVEL", "HOLOCRON_BACKEND", "HOLOCRON_MODEL", "HOLOCRON_TIMEOUT", "XDG_CONFIG_HOME"]


class FakeAssistant:
    """Returns canned replies in order (the last one repeats) or raises an injected error."""

    def __init__(
        self,
        replies: list[str] | None = None,
        *,
        error: Exception | None = None,
        session_id: str | None = "sess-fake",
        healthy: bool = True,
    ) -> None:
        self.replies = list(replies or ["Mock response"])
        self.error = error
        self.session_id = session_id
        self.healthy = healthy
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    async def ask(self, prompt, *, context=None, session_id=None, on_text=None) -> AgentResponse:
        self.calls.append({"prompt": prompt, "context": context, "session_id": session_id})
        if self.error is not None:
            raise self.error
        text = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if on_text:
            on_text(text)
        return AgentResponse(text=text, session_id=self.session_id)

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture(autouse=True)
def config_file(tmp_path: Path, monkeypatch) -> Path:
    """Point HOLOCRON_CONFIG at a temp file so tests never touch the real config."""
    path = tmp_path / "xdg" / "holocron" / "config.toml"
    monkeypatch.setenv("HOLOCRON_CONFIG", str(path))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return path


@pytest.fixture
def config(tmp_path: Path) -> HolocronConfig:
    return HolocronConfig(
        til_path=tmp_path / "til",
        notes_path=tmp_path / "notes",
        notes_format=NotesFormat.OBSIDIAN,
    )


@pytest.fixture
def saved_config(config: HolocronConfig, config_file: Path) -> HolocronConfig:
    save_config(config, config_file)
    return config

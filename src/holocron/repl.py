"""Interactive REPL — reads lines, dispatches slash-commands, talks to the assistant.

State machine:
    IDLE ──/learn,/link, follow-up text──> AWAITING_ASSISTANT ──reply──> IDLE
    IDLE ──/til,/note──> AWAITING_ASSISTANT ──artifact──> AWAITING_SAVE_CONFIRMATION ──> IDLE
    IDLE ──/exit, Ctrl+C, EOF──> EXITING
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

import click

from holocron.artifacts import ArtifactKind, GeneratedArtifact
from holocron.core import Holocron, NoActiveSession
from holocron.errors import HolocronError, IOFailure
from holocron.session import LearningMode
from holocron.writer import resolve_target

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUGGESTED_CATEGORIES = ("git", "rust", "sql", "postgres", "python", "javascript")

_ALIASES = {
    "learn": "learn",
    "deep": "learn",
    "link": "link",
    "til": "til",
    "note": "note",
    "save": "save",
    "help": "help",
    "exit": "exit",
    "quit": "exit",
}


class State(Enum):
    IDLE = "idle"
    AWAITING_ASSISTANT = "awaiting_assistant"
    AWAITING_SAVE_CONFIRMATION = "awaiting_save_confirmation"
    EXITING = "exiting"


@dataclass(frozen=True)
class Command:
    """A parsed slash-command. ``name`` is canonical when known."""

    name: str
    arg: str = ""
    known: bool = True


def parse_command(line: str) -> Command | None:
    """'/deep rust lifetimes' -> Command('learn', 'rust lifetimes'). Free text -> None."""
    line = line.strip()
    if not line.startswith("/"):
        return None
    head, _, rest = line[1:].partition(" ")
    head = head.lower()
    if head in _ALIASES:
        return Command(_ALIASES[head], rest.strip())
    return Command(head, rest.strip(), known=False)


def _rule(char: str = "═", width: int = 60) -> str:
    return click.style(char * width, fg="bright_cyan")


def print_banner() -> None:
    click.echo(_rule())
    click.echo(click.style("  HOLOCRON - Your Learning Assistant  ", fg="bright_cyan", bold=True))
    click.echo(_rule())
    click.echo()
    print_help()
    click.echo("Or just type to continue the conversation.")
    click.echo()


def print_title(text: str) -> None:
    click.echo(_rule())
    click.echo(click.style(f"  {text}  ", fg="bright_cyan", bold=True))
    click.echo(_rule())
    click.echo()


def stream_text(text: str) -> None:
    """Echo a streamed chunk of assistant output as it arrives."""
    click.echo(text, nl=False)


def print_help() -> None:
    click.echo("Commands:")
    for usage, text in (
        ("/learn <topic>", "Start a deep dive on a topic (alias /deep)"),
        ("/link <url>", "Analyze an article from URL"),
        ("/til", "Generate TIL from session"),
        ("/note", "Generate detailed note"),
        ("/save", "Retry saving the last unsaved artifact"),
        ("/exit", "Exit holocron"),
    ):
        click.echo(f"  {click.style(usage.ljust(15), fg='green')} - {text}")
    click.echo()


class Dispatcher:
    """Owns the interactive loop's state; all session state lives in Holocron."""

    def __init__(self, holocron: Holocron, *, prompt_category: bool = True) -> None:
        self.holocron = holocron
        self.prompt_category = prompt_category
        self.state = State.IDLE

    # ── Loop ─────────────────────────────────────────────────

    def run(self) -> None:
        while self.state is not State.EXITING:
            try:
                line = click.prompt(
                    click.style("holocron", fg="cyan"),
                    prompt_suffix="> ",
                    default="",
                    show_default=False,
                )
            except click.Abort:
                # Ctrl+C or EOF at the idle prompt means /exit
                click.echo()
                self.handle_line("/exit")
                break
            self.handle_line(line)

    def handle_line(self, line: str) -> State:
        line = line.strip()
        if not line:
            return self.state

        command = parse_command(line)
        try:
            if command is None:
                self._converse(line)
            else:
                self._dispatch(command)
        except NoActiveSession as e:
            click.echo(click.style(str(e), fg="yellow"))
        except HolocronError as e:
            logger.debug("Command failed", exc_info=True)
            click.echo(click.style("Error: ", fg="red", bold=True) + str(e))
        finally:
            if self.state is not State.EXITING:
                self.state = State.IDLE
        return self.state

    def _dispatch(self, command: Command) -> None:
        if not command.known:
            click.echo(click.style(f"Unknown command: /{command.name}. Type /help for commands.", fg="red"))
            return

        handler = getattr(self, f"_cmd_{command.name}")
        handler(command.arg)

    # ── Assistant calls ──────────────────────────────────────

    def _call(self, coro: Coroutine[Any, Any, T]) -> T | None:
        """Run one assistant call to completion. Ctrl+C aborts it and returns None."""
        self.state = State.AWAITING_ASSISTANT
        click.echo(click.style("Consulting the archives...", dim=True))
        try:
            return asyncio.run(coro)
        except KeyboardInterrupt:
            click.echo()
            click.echo(click.style("Interrupted.", fg="yellow"))
            return None
        finally:
            click.echo()

    def _converse(self, text: str) -> None:
        if self.holocron.session is None:
            raise NoActiveSession("Start a session with /learn <topic> or /link <url>")
        self._call(self.holocron.ask(text, on_text=stream_text))

    def _start(self, mode: LearningMode) -> None:
        category = self._ask_category() if self.prompt_category else None
        print_title(str(mode))
        self._call(self.holocron.begin(mode, category, on_text=stream_text))

    # ── Commands ─────────────────────────────────────────────

    def _cmd_learn(self, arg: str) -> None:
        if not arg:
            click.echo(click.style("Please provide a topic.", fg="yellow"))
            return
        self._start(LearningMode.deep_dive(arg))

    def _cmd_link(self, arg: str) -> None:
        if not arg:
            click.echo(click.style("Please provide a URL.", fg="yellow"))
            return
        self._start(LearningMode.link(arg))

    def _cmd_til(self, arg: str) -> None:
        self._generate(ArtifactKind.TIL)

    def _cmd_note(self, arg: str) -> None:
        self._generate(ArtifactKind.NOTE)

    def _cmd_save(self, arg: str) -> None:
        artifact = self.holocron.pending
        if artifact is None:
            click.echo(click.style("Nothing to save. Generate one with /til or /note.", fg="yellow"))
            return
        self._confirm_save(artifact)

    def _cmd_help(self, arg: str) -> None:
        print_help()

    def _cmd_exit(self, arg: str) -> None:
        self.state = State.EXITING
        self.holocron.end()
        click.echo(click.style("May the Force be with you.", fg="bright_cyan"))

    # ── Generation & save ────────────────────────────────────

    def _generate(self, kind: ArtifactKind) -> None:
        label = "TIL" if kind is ArtifactKind.TIL else "Note"
        click.echo(click.style(f"Generated {label}:", fg="green", bold=True))
        click.echo("─" * 40)
        artifact = self._call(self.holocron.generate(kind, on_text=stream_text))
        if artifact is None:
            return
        if artifact.placeholder:
            click.echo(click.style("Nothing learned in this session yet; created a placeholder.", fg="yellow"))
            click.echo(artifact.body)
        click.echo("─" * 40)
        self._confirm_save(artifact)

    def _confirm_save(self, artifact: GeneratedArtifact) -> None:
        self.state = State.AWAITING_SAVE_CONFIRMATION
        label = "TIL" if artifact.kind is ArtifactKind.TIL else "Note"
        target = resolve_target(artifact, self.holocron.config)

        try:
            if not click.confirm(f"Save as {target}?", default=True):
                self.holocron.discard()
                click.echo(click.style(f"{label} discarded.", fg="yellow"))
                return
            override = click.prompt(
                "Path override (enter to keep)", default="", show_default=False
            )
        except click.Abort:
            click.echo()
            click.echo(click.style("Save cancelled. Use /save to try again.", fg="yellow"))
            return

        try:
            path = self.holocron.save(artifact, override.strip() or None)
        except IOFailure as e:
            click.echo(click.style("Error: ", fg="red", bold=True) + str(e))
            click.echo(click.style("The artifact is kept. Use /save to retry.", fg="yellow"))
            return

        click.echo(click.style(f"✓ {label} saved to: ", fg="green", bold=True) + str(path))

    # ── Prompts ──────────────────────────────────────────────

    def _ask_category(self) -> str | None:
        hint = ", ".join(SUGGESTED_CATEGORIES)
        try:
            value = click.prompt(
                f"Category for TIL ({hint}; enter to skip)", default="", show_default=False
            )
        except click.Abort:
            return None
        return value.strip().lower() or None


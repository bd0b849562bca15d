"""Command-line interface.

- No args:            interactive REPL (first-run setup if unconfigured)
- learn <topic>:      deep dive, then follow-up loop
- link <url>:         article analysis, then follow-up loop
- init <path>:        create a TIL repository skeleton
- config [--flags]:   view or update the configuration
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from holocron.artifacts import normalize_category
from holocron.assistant import Assistant, build_assistant
from holocron.config import (
    DEFAULT_ARCHIVE_DIR,
    HolocronConfig,
    NotesFormat,
    config_path,
    expand_path,
    load_config,
    save_config,
    update_config,
)
from holocron.core import Holocron
from holocron.errors import AssistantUnavailable, ConfigMissing, HolocronError
from holocron.repl import Dispatcher, print_banner, print_title, stream_text
from holocron.scaffold import has_skills, init_til_repo
from holocron.session import LearningMode

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn HolocronError into a click error message and a non-zero exit."""
    try:
        yield
    except HolocronError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(e)) from e


# ── Config bootstrap ─────────────────────────────────────────


def _first_run_setup() -> HolocronConfig:
    click.echo(click.style("═" * 60, fg="bright_cyan"))
    click.echo(click.style("  Welcome to Holocron!  ", fg="bright_cyan", bold=True))
    click.echo(click.style("═" * 60, fg="bright_cyan"))
    click.echo()
    click.echo("Let's set up your configuration.")
    click.echo()

    til_path = expand_path(click.prompt("Path to your TIL repository"))

    if not til_path.exists():
        if click.confirm("TIL repository doesn't exist. Create it?", default=True):
            init_til_repo(til_path, DEFAULT_ARCHIVE_DIR, existing_ok=True)
            click.echo(f"{click.style('✓', fg='green')} Created TIL repository at {til_path}")
    elif not has_skills(til_path):
        if click.confirm("Install assistant skills (/til, /note) in this repo?", default=True):
            init_til_repo(til_path, DEFAULT_ARCHIVE_DIR, existing_ok=True)
            click.echo(f"{click.style('✓', fg='green')} Installed skills in {til_path / '.claude'}")

    config = HolocronConfig(til_path=til_path)

    click.echo()
    if click.confirm("Set up a notes/knowledge base path? (for Obsidian, Logseq, etc.)", default=False):
        config.notes_path = expand_path(click.prompt("Path to your notes repository"))
        config.notes_format = NotesFormat(
            click.prompt(
                "Notes format",
                type=click.Choice([f.value for f in NotesFormat], case_sensitive=False),
                default=NotesFormat.OBSIDIAN.value,
            ).lower()
        )

    path = save_config(config)
    click.echo()
    click.echo(f"{click.style('✓', fg='green')} Config saved to {path}")
    click.echo()
    return config


def _ensure_config(verbose: bool = False) -> HolocronConfig:
    try:
        config = load_config()
    except ConfigMissing:
        config = _first_run_setup()
    if not verbose:
        _setup_logging(config.log_level)
    return config


def _build_holocron(ctx: click.Context, config: HolocronConfig) -> Holocron:
    assistant: Assistant | None = ctx.obj.get("assistant")
    if assistant is None:
        assistant = build_assistant(config.assistant)
    return Holocron(config, assistant)


def _show_config(config: HolocronConfig) -> None:
    click.echo()
    click.echo(click.style("Current Configuration:", bold=True))
    click.echo(f"  TIL path:     {config.til_path}")
    click.echo(f"  Archive dir:  {config.archive_dir}")
    if config.notes_path is not None:
        click.echo(f"  Notes path:   {config.notes_path}")
        click.echo(f"  Notes format: {config.notes_format}")
    else:
        click.echo("  Notes path:   (not configured)")
    click.echo(f"  Assistant:    {config.assistant.backend}")
    click.echo()
    click.echo(f"Config file: {config_path()}")


# ── Commands ─────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """A learning assistant CLI backed by Claude Code.

    Start an interactive session to deep dive into topics, analyze articles,
    and generate TIL entries or detailed notes.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging("DEBUG" if verbose else "WARNING")

    if ctx.invoked_subcommand is not None:
        return

    with _handle_errors():
        config = _ensure_config(verbose)
        holocron = _build_holocron(ctx, config)
        if not asyncio.run(holocron.assistant.health_check()):
            raise AssistantUnavailable(
                f"Assistant backend '{holocron.assistant.name}' is not available. "
                "Is Claude Code installed and logged in?"
            )
        print_banner()
        Dispatcher(holocron).run()


def _run_session(ctx: click.Context, mode: LearningMode, category: str | None) -> None:
    with _handle_errors():
        config = _ensure_config(ctx.obj["verbose"])
        holocron = _build_holocron(ctx, config)
        dispatcher = Dispatcher(holocron, prompt_category=False)

        print_title(f"Learning: {mode.subject}")
        try:
            asyncio.run(holocron.begin(mode, normalize_category(category), on_text=stream_text))
        except KeyboardInterrupt:
            click.echo()
            raise click.Abort() from None
        click.echo()
        click.echo()
        click.echo(
            "Commands: "
            + " | ".join(click.style(c, fg="green") for c in ("/til", "/note", "/exit"))
        )
        click.echo()
        dispatcher.run()


@main.command()
@click.argument("topic")
@click.option("-c", "--category", help="Category for TIL generation (e.g. git, rust, sql).")
@click.pass_context
def learn(ctx: click.Context, topic: str, category: str | None) -> None:
    """Start a deep dive learning session on a topic."""
    _run_session(ctx, LearningMode.deep_dive(topic), category)


@main.command()
@click.argument("url")
@click.option("-c", "--category", help="Category for TIL generation (e.g. git, rust, sql).")
@click.pass_context
def link(ctx: click.Context, url: str, category: str | None) -> None:
    """Analyze and summarize an article from a URL."""
    _run_session(ctx, LearningMode.link(url), category)


@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--archive-dir", default=DEFAULT_ARCHIVE_DIR, show_default=True, help="Directory for TIL entries.")
@click.option("--force", is_flag=True, help="Add Holocron files to an existing, non-empty directory.")
def init(path: Path, archive_dir: str, force: bool) -> None:
    """Initialize a new TIL repository."""
    path = expand_path(path)
    with _handle_errors():
        report = init_til_repo(path, archive_dir, existing_ok=force)

    click.echo(f"{click.style('✓', fg='green')} Initialized TIL repository at {path}")
    click.echo()
    click.echo("Created:")
    for item in report.created:
        click.echo(f"  - {item}")
    for item in report.skipped:
        click.echo(f"  - {item} " + click.style("(already existed, skipped)", dim=True))
    click.echo()
    click.echo(f"Run {click.style('holocron config --til-path ' + str(path), fg='cyan')} to use it.")


@main.command("config")
@click.option("--til-path", help="Set the TIL repository path.")
@click.option("--notes-path", help="Set the notes repository path.")
@click.option("--notes-format", help="Set the notes format (obsidian, logseq, plain).")
@click.option("--archive-dir", help="Set the archive directory name.")
def config_cmd(
    til_path: str | None,
    notes_path: str | None,
    notes_format: str | None,
    archive_dir: str | None,
) -> None:
    """View or update holocron configuration."""
    flags = (til_path, notes_path, notes_format, archive_dir)
    with _handle_errors():
        try:
            config = load_config(apply_env=False)
        except ConfigMissing:
            if all(f is None for f in flags):
                config = _first_run_setup()
                _show_config(config)
                return
            config = HolocronConfig(til_path=Path(""))

        changed = update_config(
            config,
            til_path=til_path,
            notes_path=notes_path,
            notes_format=notes_format,
            archive_dir=archive_dir,
        )
        if changed:
            save_config(config)
            click.echo(f"{click.style('✓', fg='green')} Configuration updated.")

    _show_config(config)


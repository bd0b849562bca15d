"""Holocron — an interactive learning assistant on top of Claude Code.

Layout:
    config.py      ~/.config/holocron/config.toml load/save
    errors.py      error taxonomy
    assistant/     external assistant clients (claude CLI, Anthropic API)
    session.py     session + ordered transcript
    prompts.py     prompt templates
    artifacts.py   TIL / note artifacts, title + filename derivation
    writer.py      persistence of artifacts, README index
    scaffold.py    `holocron init` repo skeleton
    core.py        Holocron context object
    repl.py        interactive dispatcher
    cli.py         click entry point
"""

__version__ = "0.1.0"

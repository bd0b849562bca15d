"""Configuration loading and saving for ~/.config/holocron/config.toml."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from holocron.errors import ConfigInvalid, ConfigMissing, IOFailure, ValidationFailure

logger = logging.getLogger(__name__)

_CONFIG_DIRNAME = "holocron"
_CONFIG_FILENAME = "config.toml"
DEFAULT_ARCHIVE_DIR = "archive"


class NotesFormat(str, Enum):
    """Target knowledge-base flavour for generated notes."""

    OBSIDIAN = "obsidian"
    LOGSEQ = "logseq"
    PLAIN = "plain"

    def __str__(self) -> str:
        return self.value


@dataclass
class AssistantConfig:
    """Which assistant backend to run and how."""

    backend: str = "claude_cli"
    command: str = "claude"
    model: str | None = None
    timeout: int = 300
    context_budget: int = 12000


@dataclass
class HolocronConfig:
    """Top-level Holocron configuration."""

    til_path: Path
    archive_dir: str = DEFAULT_ARCHIVE_DIR
    notes_path: Path | None = None
    notes_format: NotesFormat = NotesFormat.OBSIDIAN
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    log_level: str = "WARNING"

    @property
    def archive_path(self) -> Path:
        return self.til_path / self.archive_dir


def config_path() -> Path:
    """Per-user config location: $HOLOCRON_CONFIG > $XDG_CONFIG_HOME > ~/.config."""
    override = os.getenv("HOLOCRON_CONFIG")
    if override:
        return Path(override).expanduser()
    base = os.getenv("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / _CONFIG_DIRNAME / _CONFIG_FILENAME


def expand_path(value: str | Path) -> Path:
    return Path(os.path.expanduser(str(value)))


def parse_notes_format(value: str | NotesFormat) -> NotesFormat:
    if isinstance(value, NotesFormat):
        return value
    try:
        return NotesFormat(str(value).strip().lower())
    except ValueError:
        raise ValidationFailure(
            f"Invalid notes format {value!r}. Use: obsidian, logseq, or plain"
        ) from None


def _check_creatable_dir(path: Path) -> None:
    """The path must be a directory or creatable below its nearest existing ancestor."""
    if path.exists():
        if not path.is_dir():
            raise ValidationFailure(f"TIL path {path} exists and is not a directory")
        return
    for parent in path.parents:
        if parent.exists():
            if not parent.is_dir():
                raise ValidationFailure(f"TIL path {path} cannot be created: {parent} is not a directory")
            return


def validate_config(config: HolocronConfig) -> None:
    """Raise ValidationFailure if the config cannot be persisted or used."""
    if not str(config.til_path) or str(config.til_path) == ".":
        raise ValidationFailure("TIL path is not set. Run: holocron config --til-path <path>")
    _check_creatable_dir(config.til_path)
    if not config.archive_dir.strip():
        raise ValidationFailure("Archive directory name must not be empty")
    if "/" in config.archive_dir.strip("/") or config.archive_dir in ("..", "."):
        raise ValidationFailure(f"Archive directory must be a single name, got {config.archive_dir!r}")
    config.notes_format = parse_notes_format(config.notes_format)
    if config.assistant.timeout <= 0:
        raise ValidationFailure("Assistant timeout must be a positive number of seconds")


def load_config(path: Path | None = None, *, apply_env: bool = True) -> HolocronConfig:
    """Load configuration from the TOML file.

    Priority: environment variables > config.toml > defaults. Raises
    ConfigMissing when no file exists so the caller can run first-time setup.
    """
    path = path or config_path()
    if not path.exists():
        raise ConfigMissing(f"No config file at {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigInvalid(f"Failed to parse config file {path}: {e}") from e

    til_path = data.get("til_path")
    if not til_path:
        raise ConfigInvalid(f"Config file {path} has no til_path")

    assistant_data = data.get("assistant", {})
    try:
        assistant = AssistantConfig(
            backend=assistant_data.get("backend", "claude_cli"),
            command=assistant_data.get("command", "claude"),
            model=assistant_data.get("model"),
            timeout=int(assistant_data.get("timeout", 300)),
            context_budget=int(assistant_data.get("context_budget", 12000)),
        )
        notes_format = parse_notes_format(data.get("notes_format", NotesFormat.OBSIDIAN))
    except (TypeError, ValueError, ValidationFailure) as e:
        raise ConfigInvalid(f"Invalid value in {path}: {e}") from e

    notes_path = data.get("notes_path")
    config = HolocronConfig(
        til_path=expand_path(til_path),
        archive_dir=data.get("archive_dir", DEFAULT_ARCHIVE_DIR),
        notes_path=expand_path(notes_path) if notes_path else None,
        notes_format=notes_format,
        assistant=assistant,
        log_level=data.get("log_level", "WARNING"),
    )

    if apply_env:
        _apply_env_overrides(config)

    logger.debug("Loaded config from %s", path)
    return config


def _apply_env_overrides(config: HolocronConfig) -> None:
    config.log_level = os.getenv("HOLOCRON_LOG_LEVEL", config.log_level)
    config.assistant.backend = os.getenv("HOLOCRON_BACKEND", config.assistant.backend)
    config.assistant.model = os.getenv("HOLOCRON_MODEL", config.assistant.model)
    timeout = os.getenv("HOLOCRON_TIMEOUT")
    if timeout:
        try:
            config.assistant.timeout = int(timeout)
        except ValueError:
            raise ConfigInvalid(f"HOLOCRON_TIMEOUT must be an integer, got {timeout!r}") from None


def _to_toml_dict(config: HolocronConfig) -> dict:
    data: dict = {
        "til_path": str(config.til_path),
        "archive_dir": config.archive_dir,
        "notes_format": config.notes_format.value,
        "log_level": config.log_level,
    }
    if config.notes_path is not None:
        data["notes_path"] = str(config.notes_path)

    assistant = {
        "backend": config.assistant.backend,
        "command": config.assistant.command,
        "timeout": config.assistant.timeout,
        "context_budget": config.assistant.context_budget,
    }
    if config.assistant.model:
        assistant["model"] = config.assistant.model
    data["assistant"] = assistant
    return data


def save_config(config: HolocronConfig, path: Path | None = None) -> Path:
    """Validate and atomically write the config (temp file + rename)."""
    validate_config(config)
    path = path or config_path()
    content = tomli_w.dumps(_to_toml_dict(config))

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".toml")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise IOFailure(f"Failed to write config to {path}: {e}") from e

    logger.info("Config saved to %s", path)
    return path


def update_config(
    config: HolocronConfig,
    *,
    til_path: str | Path | None = None,
    notes_path: str | Path | None = None,
    notes_format: str | None = None,
    archive_dir: str | None = None,
) -> bool:
    """Apply `holocron config` flag values in place. Returns True if anything changed."""
    changed = False
    if til_path is not None:
        config.til_path = expand_path(til_path)
        changed = True
    if notes_path is not None:
        config.notes_path = expand_path(notes_path)
        changed = True
    if notes_format is not None:
        config.notes_format = parse_notes_format(notes_format)
        changed = True
    if archive_dir is not None:
        config.archive_dir = archive_dir
        changed = True
    return changed

"""Tests for configuration loading and saving."""

import sys
from pathlib import Path

import pytest

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from holocron.config import (
    HolocronConfig,
    NotesFormat,
    config_path,
    load_config,
    parse_notes_format,
    save_config,
    update_config,
)
from holocron.errors import ConfigInvalid, ConfigMissing, IOFailure, ValidationFailure


class TestConfigPath:
    def test_env_override(self, config_file: Path):
        assert config_path() == config_file

    def test_xdg_config_home(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("HOLOCRON_CONFIG")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert config_path() == tmp_path / "xdg" / "holocron" / "config.toml"

    def test_home_default(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("HOLOCRON_CONFIG")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert config_path() == tmp_path / ".config" / "holocron" / "config.toml"


class TestLoadConfig:
    def test_missing_file(self, config_file: Path):
        with pytest.raises(ConfigMissing):
            load_config()

    def test_minimal_file_uses_defaults(self, config_file: Path, tmp_path: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(f'til_path = "{tmp_path / "til"}"\n')

        config = load_config()
        assert config.til_path == tmp_path / "til"
        assert config.archive_dir == "archive"
        assert config.notes_path is None
        assert config.notes_format is NotesFormat.OBSIDIAN
        assert config.assistant.backend == "claude_cli"
        assert config.assistant.timeout == 300
        assert config.log_level == "WARNING"

    def test_full_file(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(
            """
til_path = "/data/til"
archive_dir = "entries"
notes_path = "/data/notes"
notes_format = "Logseq"
log_level = "INFO"

[assistant]
backend = "anthropic_api"
model = "claude-haiku"
timeout = 60
context_budget = 4000
"""
        )
        config = load_config()
        assert config.archive_path == Path("/data/til/entries")
        assert config.notes_path == Path("/data/notes")
        assert config.notes_format is NotesFormat.LOGSEQ
        assert config.assistant.backend == "anthropic_api"
        assert config.assistant.model == "claude-haiku"
        assert config.assistant.timeout == 60
        assert config.assistant.context_budget == 4000
        assert config.log_level == "INFO"

    def test_tilde_is_expanded(self, config_file: Path, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        config_file.parent.mkdir(parents=True)
        config_file.write_text('til_path = "~/til"\n')
        assert load_config().til_path == tmp_path / "til"

    def test_unparseable_file(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("til_path = [unterminated\n")
        with pytest.raises(ConfigInvalid):
            load_config()

    def test_missing_til_path(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('notes_path = "/data/notes"\n')
        with pytest.raises(ConfigInvalid, match="til_path"):
            load_config()

    def test_bad_notes_format(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('til_path = "/data/til"\nnotes_format = "roam"\n')
        with pytest.raises(ConfigInvalid):
            load_config()

    def test_env_overrides_file(self, config_file: Path, monkeypatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('til_path = "/data/til"\n\n[assistant]\ntimeout = 120\n')
        monkeypatch.setenv("HOLOCRON_TIMEOUT", "30")
        monkeypatch.setenv("HOLOCRON_MODEL", "claude-opus")
        monkeypatch.setenv("HOLOCRON_LOG_LEVEL", "DEBUG")

        config = load_config()
        assert config.assistant.timeout == 30  # env wins
        assert config.assistant.model == "claude-opus"
        assert config.log_level == "DEBUG"

    def test_env_ignored_when_disabled(self, config_file: Path, monkeypatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('til_path = "/data/til"\n')
        monkeypatch.setenv("HOLOCRON_BACKEND", "anthropic_api")

        assert load_config(apply_env=False).assistant.backend == "claude_cli"

    def test_bad_timeout_env(self, config_file: Path, monkeypatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('til_path = "/data/til"\n')
        monkeypatch.setenv("HOLOCRON_TIMEOUT", "soon")
        with pytest.raises(ConfigInvalid, match="HOLOCRON_TIMEOUT"):
            load_config()


class TestSaveConfig:
    def test_round_trip(self, config: HolocronConfig, config_file: Path):
        config.notes_format = NotesFormat.PLAIN
        config.assistant.model = "claude-haiku"
        assert save_config(config) == config_file

        loaded = load_config()
        assert loaded.til_path == config.til_path
        assert loaded.notes_path == config.notes_path
        assert loaded.notes_format is NotesFormat.PLAIN
        assert loaded.assistant.model == "claude-haiku"

    def test_unset_notes_path_is_omitted(self, tmp_path: Path, config_file: Path):
        save_config(HolocronConfig(til_path=tmp_path / "til"))
        data = tomllib.loads(config_file.read_text())
        assert "notes_path" not in data
        assert "model" not in data["assistant"]

    def test_no_temp_files_left(self, config: HolocronConfig, config_file: Path):
        save_config(config)
        save_config(config)
        assert [p.name for p in config_file.parent.iterdir()] == ["config.toml"]

    def test_rejects_til_path_that_is_a_file(self, tmp_path: Path, config_file: Path):
        hostname = tmp_path / "hostname"
        hostname.write_text("box")
        with pytest.raises(ValidationFailure, match="not a directory"):
            save_config(HolocronConfig(til_path=hostname))
        assert not config_file.exists()

    def test_rejects_til_path_below_a_file(self, tmp_path: Path):
        (tmp_path / "hostname").write_text("box")
        with pytest.raises(ValidationFailure, match="cannot be created"):
            save_config(HolocronConfig(til_path=tmp_path / "hostname" / "til"))

    def test_accepts_missing_til_path(self, tmp_path: Path, config_file: Path):
        save_config(HolocronConfig(til_path=tmp_path / "not" / "yet" / "here"))
        assert load_config().til_path == tmp_path / "not" / "yet" / "here"

    def test_rejects_empty_til_path(self, config_file: Path):
        with pytest.raises(ValidationFailure):
            save_config(HolocronConfig(til_path=Path("")))
        assert not config_file.exists()

    @pytest.mark.parametrize("archive_dir", ["", "a/b", ".."])
    def test_rejects_bad_archive_dir(self, config: HolocronConfig, archive_dir: str):
        config.archive_dir = archive_dir
        with pytest.raises(ValidationFailure):
            save_config(config)

    def test_unwritable_location(self, config: HolocronConfig, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(IOFailure):
            save_config(config, blocker / "config.toml")


class TestUpdateConfig:
    def test_no_flags(self, config: HolocronConfig):
        assert update_config(config) is False

    def test_applies_flags(self, config: HolocronConfig, tmp_path: Path):
        changed = update_config(
            config,
            til_path=str(tmp_path / "other"),
            notes_format="logseq",
            archive_dir="entries",
        )
        assert changed is True
        assert config.til_path == tmp_path / "other"
        assert config.notes_format is NotesFormat.LOGSEQ
        assert config.archive_dir == "entries"

    def test_invalid_notes_format(self, config: HolocronConfig):
        with pytest.raises(ValidationFailure, match="obsidian, logseq, or plain"):
            update_config(config, notes_format="evernote")
        assert config.notes_format is NotesFormat.OBSIDIAN


class TestParseNotesFormat:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("obsidian", NotesFormat.OBSIDIAN),
            ("LOGSEQ", NotesFormat.LOGSEQ),
            (" plain ", NotesFormat.PLAIN),
        ],
    )
    def test_accepted(self, value, expected):
        assert parse_notes_format(value) is expected

    def test_rejected(self):
        with pytest.raises(ValidationFailure):
            parse_notes_format("notion")

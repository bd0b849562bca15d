"""Tests for artifact persistence and the TIL README index."""

from pathlib import Path
from unittest.mock import patch

import pytest

from holocron.artifacts import ArtifactKind, GeneratedArtifact
from holocron.config import HolocronConfig
from holocron.errors import ConfigInvalid, IOFailure
from holocron.scaffold import init_til_repo
from holocron.writer import resolve_target, save_artifact, update_readme


def til(title: str = "Rebase Onto Upstream", category: str | None = "git") -> GeneratedArtifact:
    filename = title.lower().replace(" ", "_") + ".md"
    path = Path(category) / filename if category else Path(filename)
    return GeneratedArtifact(ArtifactKind.TIL, title, f"# {title}\n\nBody", path, category=category)


def note(title: str = "Git Internals") -> GeneratedArtifact:
    filename = title.lower().replace(" ", "_") + ".md"
    return GeneratedArtifact(ArtifactKind.NOTE, title, f"# {title}\n", Path(filename))


class TestResolveTarget:
    def test_til(self, config: HolocronConfig):
        assert resolve_target(til(), config) == config.til_path / "archive" / "git" / "rebase_onto_upstream.md"

    def test_note(self, config: HolocronConfig):
        assert resolve_target(note(), config) == config.notes_path / "git_internals.md"

    def test_note_without_notes_path(self, config: HolocronConfig):
        config.notes_path = None
        with pytest.raises(ConfigInvalid, match="Notes path not configured"):
            resolve_target(note(), config)

    def test_relative_override(self, config: HolocronConfig):
        target = resolve_target(til(), config, "sql/joins")
        assert target == config.archive_path / "sql" / "joins.md"

    def test_absolute_override(self, config: HolocronConfig, tmp_path: Path):
        target = resolve_target(til(), config, str(tmp_path / "elsewhere.md"))
        assert target == tmp_path / "elsewhere.md"


class TestSaveArtifact:
    def test_creates_directories(self, config: HolocronConfig):
        path = save_artifact(til(), config)

        assert path == config.archive_path / "git" / "rebase_onto_upstream.md"
        assert path.read_text() == "# Rebase Onto Upstream\n\nBody\n"

    def test_uncategorized_lands_in_archive_root(self, config: HolocronConfig):
        path = save_artifact(til(category=None), config)
        assert path.parent == config.archive_path

    def test_name_collision_adds_suffix(self, config: HolocronConfig):
        first = save_artifact(til(), config)
        second = save_artifact(til(), config)
        third = save_artifact(til(), config)

        assert first.read_text() == second.read_text()
        assert second.name == "rebase_onto_upstream-2.md"
        assert third.name == "rebase_onto_upstream-3.md"

    def test_note(self, config: HolocronConfig):
        path = save_artifact(note(), config)
        assert path == config.notes_path / "git_internals.md"
        assert not (config.til_path / "README.md").exists()

    def test_write_failure(self, config: HolocronConfig):
        with patch.object(Path, "write_text", side_effect=PermissionError("read-only")):
            with pytest.raises(IOFailure, match="read-only"):
                save_artifact(til(), config)


class TestReadmeIndex:
    @pytest.fixture
    def repo(self, config: HolocronConfig) -> Path:
        init_til_repo(config.til_path)
        return config.til_path / "README.md"

    def test_first_entry_creates_category(self, config: HolocronConfig, repo: Path):
        save_artifact(til(), config)
        text = repo.read_text()

        assert "1 TILs & Counting" in text
        assert "* [Git](#git)" in text
        assert "### Git\n\n- [Rebase Onto Upstream](archive/git/rebase_onto_upstream.md)" in text

    def test_entries_grouped_by_category(self, config: HolocronConfig, repo: Path):
        save_artifact(til("Rebase Onto Upstream"), config)
        save_artifact(til("Interactive Staging"), config)
        save_artifact(til("Window Functions", "sql"), config)
        text = repo.read_text()

        assert "3 TILs & Counting" in text
        assert text.count("### Git") == 1
        git_section = text.split("### Git")[1].split("###")[0]
        assert "Rebase Onto Upstream" in git_section
        assert "Interactive Staging" in git_section
        assert "Window Functions" not in git_section
        assert "- [Window Functions](archive/sql/window_functions.md)" in text
        # The category list stays between its rules
        categories = text.split("### Categories")[1].split("---")[0]
        assert "* [Git](#git)" in categories
        assert "* [Sql](#sql)" in categories

    def test_uncategorized(self, config: HolocronConfig, repo: Path):
        save_artifact(til("Loose Thought", category=None), config)
        assert "### Uncategorized" in repo.read_text()

    def test_no_readme(self, config: HolocronConfig, tmp_path: Path):
        entry = config.archive_path / "git" / "x.md"
        assert update_readme(config.til_path, config, entry, "X") is False

    def test_entry_outside_repo(self, config: HolocronConfig, repo: Path, tmp_path: Path):
        before = repo.read_text()
        assert update_readme(config.til_path, config, tmp_path / "elsewhere.md", "X") is False
        assert repo.read_text() == before

    def test_entry_outside_archive_is_uncategorized(self, config: HolocronConfig, repo: Path):
        save_artifact(til("Loose Thought"), config, str(config.til_path / "drafts" / "loose"))
        text = repo.read_text()

        assert "### Uncategorized\n\n- [Loose Thought](drafts/loose.md)" in text
        assert "### Drafts" not in text

    def test_readme_failure_still_saves(self, config: HolocronConfig, caplog):
        (config.til_path / "README.md").mkdir(parents=True)
        path = save_artifact(til(), config)

        assert path == config.archive_path / "git" / "rebase_onto_upstream.md"
        assert path.read_text().startswith("# Rebase Onto Upstream")
        assert "README.md update failed" in caplog.text

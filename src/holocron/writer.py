"""Persistence: write generated artifacts under the configured roots.

TIL entries land in <til_path>/<archive_dir>/<category>/<slug>.md and are
indexed in the TIL repo README; notes land in <notes_path>/<slug>.md.
"""

from __future__ import annotations

import logging
from pathlib import Path

from holocron.artifacts import ArtifactKind, GeneratedArtifact
from holocron.config import HolocronConfig, expand_path
from holocron.errors import ConfigInvalid, IOFailure

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"
_COUNTER_SUFFIX = "TILs & Counting"


def artifact_root(artifact: GeneratedArtifact, config: HolocronConfig) -> Path:
    if artifact.kind is ArtifactKind.TIL:
        return config.archive_path
    if config.notes_path is None:
        raise ConfigInvalid("Notes path not configured. Run: holocron config --notes-path <path>")
    return config.notes_path


def resolve_target(
    artifact: GeneratedArtifact,
    config: HolocronConfig,
    override: str | Path | None = None,
) -> Path:
    """Where the artifact would be written (before collision handling)."""
    root = artifact_root(artifact, config)
    if override:
        path = expand_path(override)
        if not path.is_absolute():
            path = root / path
        if path.suffix != ".md":
            path = path.with_name(path.name + ".md")
        return path
    return root / artifact.suggested_path


def _unique_path(path: Path) -> Path:
    candidate = path
    counter = 2
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
        counter += 1
    return candidate


def save_artifact(
    artifact: GeneratedArtifact,
    config: HolocronConfig,
    override: str | Path | None = None,
) -> Path:
    """Write the artifact, creating missing directories. Returns the file path.

    Existing files are never overwritten; a numeric suffix is added instead.
    OSError (permissions, disk space) is surfaced as IOFailure, not retried.
    Once the entry is written the save has succeeded; a failed README index
    update is only logged.
    """
    target = _unique_path(resolve_target(artifact, config, override))
    content = artifact.body if artifact.body.endswith("\n") else artifact.body + "\n"

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Failed to write {artifact.kind.value} to {target}: {e}") from e

    logger.info("Saved %s to %s", artifact.kind.value, target)

    if artifact.kind is ArtifactKind.TIL:
        try:
            update_readme(config.til_path, config, target, artifact.title)
        except OSError as e:
            logger.warning("TIL saved to %s, but README.md update failed: %s", target, e)

    return target


# ── README index ─────────────────────────────────────────────


def update_readme(til_root: Path, config: HolocronConfig, entry_path: Path, title: str) -> bool:
    """Bump the TIL counter and link the entry under its category section.

    Returns False when the repo has no README.md or the entry lies outside it.
    """
    readme = til_root / "README.md"
    if not readme.exists():
        return False
    try:
        rel = entry_path.relative_to(til_root)
    except ValueError:
        logger.debug("Entry %s is outside %s, README not updated", entry_path, til_root)
        return False

    # Only a directory below <archive_dir>/ names a category
    archive = til_root / config.archive_dir
    category = UNCATEGORIZED
    if archive in entry_path.parent.parents:
        category = entry_path.parent.name

    lines = readme.read_text(encoding="utf-8").splitlines()
    _bump_counter(lines)
    _add_entry(lines, category, f"- [{title}]({rel.as_posix()})")
    readme.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return True


def _bump_counter(lines: list[str]) -> None:
    for i, line in enumerate(lines):
        if _COUNTER_SUFFIX in line:
            head = line.split()[0] if line.split() else ""
            if head.isdigit():
                lines[i] = f"{int(head) + 1} {_COUNTER_SUFFIX}"
                return


def _display(category: str) -> str:
    return category[:1].upper() + category[1:]


def _add_entry(lines: list[str], category: str, entry: str) -> None:
    header = f"### {_display(category)}".lower()
    for i, line in enumerate(lines):
        if line.strip().lower() == header:
            lines.insert(_insertion_point(lines, i), entry)
            return
    _add_category(lines, category, entry)


def _insertion_point(lines: list[str], header_idx: int) -> int:
    idx = header_idx + 1
    while idx < len(lines):
        line = lines[idx]
        if line.startswith("###") or line.startswith("---"):
            break
        if line.startswith("- [") or not line.strip():
            idx += 1
        else:
            break
    # Insert before the blank line that closes the section
    if idx > header_idx + 1 and not lines[idx - 1].strip():
        return idx - 1
    return idx


def _add_category(lines: list[str], category: str, entry: str) -> None:
    display = _display(category)

    in_categories = False
    for i, line in enumerate(lines):
        if line.strip() == "### Categories":
            in_categories = True
        elif in_categories and (line.startswith("---") or line.startswith("###")):
            lines.insert(i, f"* [{display}](#{category.lower()})")
            break

    end = len(lines)
    while end > 0 and not lines[end - 1].strip():
        end -= 1
    lines[end:end] = ["", f"### {display}", "", entry, ""]

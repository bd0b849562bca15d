"""`holocron init` — create a TIL repository skeleton.

Layout:
    <path>/
    ├── README.md                  # index: counter + per-category entry lists
    ├── <archive_dir>/             # TIL entries, one subdirectory per category
    └── .claude/
        ├── settings.json
        └── commands/
            ├── til.md             # /til skill for the assistant
            └── note.md            # /note skill for the assistant
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from holocron.errors import IOFailure, ValidationFailure

logger = logging.getLogger(__name__)

README_TEMPLATE = """\
# Today I Learned

A collection of concise write-ups on things I learn day to day.

0 TILs & Counting

---

### Categories

---
"""

TIL_SKILL = """\
# /til - Generate a TIL entry

Write a "Today I Learned" markdown entry from the current conversation.

## Format
- H1 title naming the thing you can now do ("Rebase Onto Upstream")
- Open with when or why you would need it, not a definition
- Walk through it: prose, then a code block, then more prose
- One command per code block; explanations go in prose, not comments
- 10-30 lines, ending with one practical takeaway

## Style
- Conversational, second person ("you can", "let's")
- Light structure: an occasional H3 at most
- Not a cheat sheet, not documentation

Return ONLY the markdown content.
"""

NOTE_SKILL = """\
# /note - Generate a knowledge base note

Write a thorough knowledge-base note (Obsidian, Logseq or plain markdown)
from the current conversation.

## Front-matter
```yaml
---
title: Descriptive title
date: YYYY-MM-DD
tags: [topic, subtopic]
aliases: [other names]
---
```

## Sections
1. H1 title
2. Overview - two or three paragraphs
3. Key concepts
4. Examples - annotated code
5. Gotchas and tips
6. Q&A highlights from the conversation
7. Related topics as [[wiki-links]]
8. Sources (only when the session analysed a link)

Return ONLY the markdown, starting with the front-matter.
"""

SETTINGS = {
    "permissions": {
        "allow": ["WebFetch", "WebSearch", "Read"],
    }
}


@dataclass
class InitReport:
    """What init_til_repo created and what it left alone."""

    root: Path
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _is_non_empty_dir(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


def init_til_repo(path: Path, archive_dir: str = "archive", *, existing_ok: bool = False) -> InitReport:
    """Create the TIL repo skeleton at ``path``.

    A non-empty existing directory is rejected unless ``existing_ok`` is set,
    in which case README.md is kept and only missing pieces plus the skill
    files are (re)written.
    """
    if path.exists() and not path.is_dir():
        raise ValidationFailure(f"{path} exists and is not a directory")
    if _is_non_empty_dir(path) and not existing_ok:
        raise ValidationFailure(
            f"{path} already exists and is not empty. Use --force to add Holocron files to it."
        )

    report = InitReport(root=path)
    commands = path / ".claude" / "commands"

    try:
        path.mkdir(parents=True, exist_ok=True)

        archive = path / archive_dir
        if archive.exists():
            report.skipped.append(f"{archive_dir}/")
        else:
            archive.mkdir(parents=True)
            report.created.append(f"{archive_dir}/")

        readme = path / "README.md"
        if readme.exists():
            report.skipped.append("README.md")
        else:
            readme.write_text(README_TEMPLATE, encoding="utf-8")
            report.created.append("README.md")

        commands.mkdir(parents=True, exist_ok=True)
        (commands / "til.md").write_text(TIL_SKILL, encoding="utf-8")
        (commands / "note.md").write_text(NOTE_SKILL, encoding="utf-8")
        report.created += [".claude/commands/til.md", ".claude/commands/note.md"]

        settings = path / ".claude" / "settings.json"
        if settings.exists():
            report.skipped.append(".claude/settings.json")
        else:
            settings.write_text(json.dumps(SETTINGS, indent=2) + "\n", encoding="utf-8")
            report.created.append(".claude/settings.json")
    except OSError as e:
        raise IOFailure(f"Failed to initialize TIL repository at {path}: {e}") from e

    logger.info("Initialized TIL repository at %s", path)
    return report


def has_skills(path: Path) -> bool:
    return (path / ".claude" / "commands" / "til.md").exists()

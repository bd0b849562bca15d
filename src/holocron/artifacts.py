"""Generated artifacts: TIL entries and knowledge notes built from assistant output.

The assistant returns markdown; this module derives a title and a suggested
file path from it and, for notes, normalises the front-matter for the
configured notes format.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path

import frontmatter
import yaml

from holocron.config import NotesFormat
from holocron.session import Session

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*\n(.*?)\n```\s*$", re.DOTALL)
_H1_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$")
_WIKI_LINK_RE = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")


class ArtifactKind(str, Enum):
    TIL = "til"
    NOTE = "note"

    @property
    def default_title(self) -> str:
        return "Untitled TIL" if self is ArtifactKind.TIL else "Untitled Note"


@dataclass
class GeneratedArtifact:
    """Markdown produced from a session, not yet written anywhere."""

    kind: ArtifactKind
    title: str
    body: str
    suggested_path: Path
    category: str | None = None
    placeholder: bool = False


# ── Title & filename derivation ──────────────────────────────


def strip_code_fence(markdown: str) -> str:
    """Remove a ```markdown fence wrapped around the whole reply."""
    text = markdown.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def _parse_post(markdown: str) -> frontmatter.Post:
    try:
        return frontmatter.loads(markdown)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed front-matter: %s", e)
        return frontmatter.Post(markdown)


def extract_title(markdown: str) -> str | None:
    """Front-matter ``title`` if present, else the first H1 heading."""
    post = _parse_post(markdown)
    title = post.metadata.get("title")
    if title is not None and str(title).strip():
        return str(title).strip()

    for line in post.content.splitlines():
        match = _H1_RE.match(line.strip())
        if match:
            return match.group(1).strip()
    return None


def title_to_filename(title: str) -> str:
    """'Git: The Basics' -> 'git_the_basics.md'."""
    slug = re.sub(r"[\W_]+", "_", title.lower()).strip("_")
    return f"{slug or 'untitled'}.md"


def normalize_category(category: str | None) -> str | None:
    if not category:
        return None
    cleaned = re.sub(r"[^\w-]+", "-", category.strip().lower()).strip("-")
    return cleaned or None


# ── Note rendering ───────────────────────────────────────────


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [v.strip() for v in str(value).split(",") if v.strip()]


def render_note(markdown: str, notes_format: NotesFormat, *, title: str, today: date | None = None) -> str:
    """Ensure front-matter exists and render it in the target notes format."""
    post = _parse_post(markdown)
    post.metadata.setdefault("title", title)
    post.metadata.setdefault("date", (today or date.today()).isoformat())
    post.metadata["tags"] = _as_list(post.metadata.get("tags"))
    post.metadata["aliases"] = _as_list(post.metadata.get("aliases"))

    if notes_format is NotesFormat.LOGSEQ:
        props = [
            f"title:: {post.metadata['title']}",
            f"date:: {post.metadata['date']}",
        ]
        if post.metadata["tags"]:
            props.append(f"tags:: {', '.join(post.metadata['tags'])}")
        if post.metadata["aliases"]:
            props.append(f"alias:: {', '.join(post.metadata['aliases'])}")
        return "\n".join(props) + "\n\n" + post.content.strip() + "\n"

    if notes_format is NotesFormat.PLAIN:
        post.content = _WIKI_LINK_RE.sub(lambda m: m.group(2) or m.group(1), post.content)

    return frontmatter.dumps(post, sort_keys=False) + "\n"


# ── Artifact construction ────────────────────────────────────


def build_til_artifact(markdown: str, session: Session | None) -> GeneratedArtifact:
    body = strip_code_fence(markdown)
    title = extract_title(body) or ArtifactKind.TIL.default_title
    category = normalize_category(session.category if session else None)
    filename = title_to_filename(title)
    path = Path(category) / filename if category else Path(filename)
    return GeneratedArtifact(ArtifactKind.TIL, title, body, path, category=category)


def build_note_artifact(
    markdown: str,
    session: Session | None,
    notes_format: NotesFormat = NotesFormat.OBSIDIAN,
    today: date | None = None,
) -> GeneratedArtifact:
    body = strip_code_fence(markdown)
    title = extract_title(body) or ArtifactKind.NOTE.default_title
    rendered = render_note(body, notes_format, title=title, today=today)
    category = session.category if session else None
    return GeneratedArtifact(
        ArtifactKind.NOTE, title, rendered, Path(title_to_filename(title)), category=category
    )


def placeholder_artifact(
    kind: ArtifactKind,
    session: Session | None,
    notes_format: NotesFormat = NotesFormat.OBSIDIAN,
) -> GeneratedArtifact:
    """Skeleton artifact for a session with nothing in its transcript yet."""
    title = session.topic if session else kind.default_title
    markdown = f"# {title}\n\nNothing was captured in this session yet.\n"
    if kind is ArtifactKind.TIL:
        artifact = build_til_artifact(markdown, session)
    else:
        artifact = build_note_artifact(markdown, session, notes_format)
    artifact.placeholder = True
    return artifact

"""Prompt templates sent to the assistant.

Session prompts open a deep dive or a link analysis; generation prompts turn
a session transcript into a TIL entry or a knowledge-base note.
"""

from __future__ import annotations

from datetime import date

from holocron.config import NotesFormat
from holocron.session import Session

DEEP_DIVE_PROMPT_TEMPLATE = """\
I want to learn about: {topic}

Please explain this topic in technical detail. Cover:
1. Core concepts and how they work
2. Practical examples with code where applicable
3. Common use cases and best practices
4. Common pitfalls to avoid

Be thorough but focused. I'll ask follow-up questions to go deeper on specific aspects."""

LINK_PROMPT_TEMPLATE = """\
Please analyze this article/resource: {url}

Provide:
1. A brief summary of the main points
2. Key technical concepts explained
3. Practical takeaways or code examples if applicable
4. Your assessment of what's most valuable to learn from this

Use WebFetch to access the content, then explain it thoroughly. I'll ask follow-up questions about specific parts."""

TIL_PROMPT_TEMPLATE = """\
Based on our learning session, generate a TIL (Today I Learned) entry.

{context}

## Format
- H1 title describing the action (e.g. "Update A Forked Repo")
- A short opening that explains when or why you would need this
- Working code examples, one command per code block, prose in between
- End with a single practical takeaway
- Concise: 10-30 lines

Write in a conversational, second-person tone. Do not write like documentation.
Return ONLY the markdown content. No preamble."""

NOTE_PROMPT_TEMPLATE = """\
Based on our learning session, generate a comprehensive knowledge base note.

{context}

## Format
Start with YAML front-matter:
---
title: <descriptive title>
date: {today}
tags: [relevant, tags]
aliases: [alternative, names]
---

Then:
1. H1 title
2. Overview - 2-3 paragraphs introducing the concept
3. Examples - code examples with annotations
4. Q&A highlights - key questions and answers from our conversation
5. Related topics - {link_style}
{sources_section}
The note is for a personal knowledge base ({notes_format}), so be thorough.
Return ONLY the markdown content, starting with the front-matter. No preamble."""

_LINK_STYLES = {
    NotesFormat.OBSIDIAN: "links as [[wiki-links]]",
    NotesFormat.LOGSEQ: "links as [[page references]]",
    NotesFormat.PLAIN: "a plain bullet list of topic names",
}


def build_deep_dive_prompt(topic: str) -> str:
    return DEEP_DIVE_PROMPT_TEMPLATE.format(topic=topic)


def build_link_prompt(url: str) -> str:
    return LINK_PROMPT_TEMPLATE.format(url=url)


def build_session_prompt(session: Session) -> str:
    """Opening prompt for a freshly started session."""
    if session.mode.is_link:
        return build_link_prompt(session.topic)
    return build_deep_dive_prompt(session.topic)


def build_til_prompt(session: Session, budget: int | None = None) -> str:
    return TIL_PROMPT_TEMPLATE.format(context=session.build_context(budget))


def build_note_prompt(
    session: Session,
    notes_format: NotesFormat = NotesFormat.OBSIDIAN,
    budget: int | None = None,
    today: date | None = None,
) -> str:
    sources = ""
    if session.mode.is_link:
        sources = f"6. Sources - list the original source: {session.topic}\n"
    return NOTE_PROMPT_TEMPLATE.format(
        context=session.build_context(budget),
        today=(today or date.today()).isoformat(),
        link_style=_LINK_STYLES[notes_format],
        sources_section=sources,
        notes_format=notes_format.value,
    )

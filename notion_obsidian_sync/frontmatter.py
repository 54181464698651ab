"""
Front matter handling for vault notes.

A synced note looks like::

    ---
    type: Lecture
    created: 2025-05-14T08:00:00.000Z
    tags: math, exam
    project: Calculus [[Calculus]]
    notion_id: 1f2e...
    ---
    <markdown body>

The header is always regenerated from the Notion record. Pulled content is
merged into an existing file append-only: nothing already in the file is
removed or reordered, and a body already present is not added twice.
"""

import re
from typing import Optional

from .notion_api import NOT_AVAILABLE, NoteRecord

DELIMITER = "---"
ID_FIELD = "notion_id"

FRONTMATTER_RE = re.compile(r"^---\r?\n(.*?)\r?\n---(?:\r?\n|$)", re.DOTALL)


def build_frontmatter(note: NoteRecord, project_name: str) -> str:
    """Header for a note, fields in fixed order."""
    tags = ", ".join(note.tags) or NOT_AVAILABLE
    return (
        f"{DELIMITER}\n"
        f"type: {note.type}\n"
        f"created: {note.created}\n"
        f"tags: {tags}\n"
        f"project: {project_name} [[{project_name}]]\n"
        f"{ID_FIELD}: {note.id}\n"
        f"{DELIMITER}\n"
    )


def parse_header(header: str) -> dict[str, str]:
    """Parse ``key: value`` lines. Values may contain colons."""
    fields = {}
    for line in header.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            fields[key.strip()] = value.strip()
    return fields


def split_note(content: str) -> tuple[Optional[dict[str, str]], str]:
    """
    Split a note file into header fields and body.

    Returns:
        ``(fields, body)`` with the body trimmed. ``fields`` is None when the
        file has no header; the body is then the whole file.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return None, content.strip()
    return parse_header(match.group(1)), content[match.end():].strip()


def _existing_body(content: str) -> str:
    """Everything after the first delimiter pair, or the whole file."""
    start = content.find(DELIMITER)
    end = content.find(DELIMITER, start + len(DELIMITER)) if start != -1 else -1
    if end == -1:
        return content.strip()
    return content[end + len(DELIMITER):].strip()


def merge_note(existing: Optional[str], frontmatter: str, body: str) -> str:
    """
    Content to write for a pulled note.

    Args:
        existing: Current file content, None if the file does not exist.
        frontmatter: Header built from the Notion record.
        body: Markdown pulled from Notion.

    Returns:
        ``frontmatter + body`` for a new file. For an existing file, the file
        itself, followed by a blank line and the pulled body when that body
        is not already part of it.
    """
    if not existing:
        return frontmatter + body

    new_body = body.strip() if body else ""
    if not new_body or new_body in _existing_body(existing):
        return existing

    return existing.rstrip("\n") + "\n\n" + new_body + "\n"

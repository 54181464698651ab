"""
Structured content blocks pushed to Notion.

A page body is an ordered sequence of ``Block`` values. The variant is
closed: ``Paragraph``, ``Code`` and ``Equation``. Each knows how to build
its own Notion API payload.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .config import RICH_TEXT_LIMIT


@dataclass(frozen=True)
class RichText:
    """A run of text with inline annotations."""

    content: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    strikethrough: bool = False
    link: Optional[str] = None

    def to_notion(self) -> dict:
        """Convert to a Notion rich text object."""
        text: dict = {"content": self.content}
        if self.link:
            text["link"] = {"url": self.link}

        item: dict = {"type": "text", "text": text}

        annotations = {
            name: True
            for name in ("bold", "italic", "code", "strikethrough")
            if getattr(self, name)
        }
        if annotations:
            item["annotations"] = annotations

        return item


def rich_text_payload(segments: tuple[RichText, ...]) -> list[dict]:
    """Build a rich_text array, splitting segments over the length limit."""
    payload = []
    for segment in segments:
        content = segment.content
        if len(content) <= RICH_TEXT_LIMIT:
            payload.append(segment.to_notion())
            continue
        for start in range(0, len(content), RICH_TEXT_LIMIT):
            chunk = RichText(
                content=content[start:start + RICH_TEXT_LIMIT],
                bold=segment.bold,
                italic=segment.italic,
                code=segment.code,
                strikethrough=segment.strikethrough,
                link=segment.link,
            )
            payload.append(chunk.to_notion())
    return payload


class ParagraphStyle(Enum):
    """Notion block type used for a line of text."""

    PLAIN = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED = "bulleted_list_item"
    NUMBERED = "numbered_list_item"
    QUOTE = "quote"


@dataclass(frozen=True)
class Paragraph:
    rich_text: tuple[RichText, ...]
    style: ParagraphStyle = ParagraphStyle.PLAIN

    def to_notion(self) -> dict:
        block_type = self.style.value
        return {
            "object": "block",
            "type": block_type,
            block_type: {"rich_text": rich_text_payload(self.rich_text)},
        }


@dataclass(frozen=True)
class Code:
    content: str
    language: str = "plain text"

    def to_notion(self) -> dict:
        return {
            "object": "block",
            "type": "code",
            "code": {
                "rich_text": rich_text_payload((RichText(self.content),)),
                "language": self.language,
            },
        }


@dataclass(frozen=True)
class Equation:
    expression: str

    def to_notion(self) -> dict:
        return {
            "object": "block",
            "type": "equation",
            "equation": {"expression": self.expression},
        }


Block = Union[Paragraph, Code, Equation]


def plain_paragraph(text: str) -> Paragraph:
    """Paragraph holding a single unformatted run."""
    return Paragraph(rich_text=(RichText(text),))

"""
Markdown to Notion blocks compiler.

Walks the lines of a note body once with a two-state parser:

- NORMAL: ``$$...$$`` lines become equation blocks, other non-blank lines
  go through mistune one line at a time and become paragraph-level blocks.
- IN_FENCE: every line is kept verbatim until the closing fence, then the
  buffer becomes a single code block.
"""

import logging
import re
from enum import Enum
from typing import Any, Optional

import mistune

from .blocks import Block, Code, Equation, Paragraph, ParagraphStyle, RichText, plain_paragraph
from .sanitizer import normalize_inline_math

logger = logging.getLogger(__name__)

FENCE = "```"
DEFAULT_LANGUAGE = "plain text"

# Whole line is one display equation; the inner text holds no "$$"
BLOCK_EQUATION_RE = re.compile(r"^\$\$((?:(?!\$\$).)+)\$\$$")

# Fence info strings that Notion knows under another name
LANGUAGE_ALIASES = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "sh": "shell",
    "zsh": "shell",
    "cpp": "c++",
    "cs": "c#",
    "csharp": "c#",
    "rb": "ruby",
    "rs": "rust",
    "yml": "yaml",
    "md": "markdown",
    "text": DEFAULT_LANGUAGE,
    "txt": DEFAULT_LANGUAGE,
}

# No math plugin: "$" stays literal text inside paragraphs
_md_parser = mistune.create_markdown(renderer=None, plugins=["strikethrough"])


class ParserState(Enum):
    NORMAL = "normal"
    IN_FENCE = "in_fence"


def fence_language(info: str) -> str:
    """Notion language name for a fence info string."""
    language = info.strip().lower()
    if not language:
        return DEFAULT_LANGUAGE
    return LANGUAGE_ALIASES.get(language, language)


def compile_markdown(markdown: str) -> list[Block]:
    """
    Convert a note body into an ordered list of blocks.

    An unterminated fence at the end of input is dropped along with
    everything buffered after it.
    """
    if not markdown or not isinstance(markdown, str):
        logger.warning("Markdown content for block conversion is empty or invalid")
        return []

    logger.debug("Converting markdown to blocks: %r...", markdown[:50])

    blocks: list[Block] = []
    state = ParserState.NORMAL
    language = DEFAULT_LANGUAGE
    buffered: list[str] = []

    for line in markdown.split("\n"):
        stripped = line.strip()

        if stripped.startswith(FENCE):
            if state is ParserState.NORMAL:
                state = ParserState.IN_FENCE
                language = fence_language(stripped[len(FENCE):])
                buffered = []
            else:
                blocks.append(Code(content="\n".join(buffered), language=language))
                state = ParserState.NORMAL
                language = DEFAULT_LANGUAGE
                buffered = []
            continue

        if state is ParserState.IN_FENCE:
            buffered.append(line)
            continue

        if not stripped:
            continue

        text = normalize_inline_math(stripped)

        match = BLOCK_EQUATION_RE.match(text)
        if match:
            blocks.append(Equation(expression=match.group(1).strip()))
            continue

        blocks.extend(markdown_line_to_blocks(text))

    if state is ParserState.IN_FENCE:
        logger.warning(
            "Unterminated code fence, dropping %d buffered line(s)", len(buffered)
        )

    logger.debug("Generated %d blocks", len(blocks))
    return blocks


# =========================================================================
# Single line conversion
# =========================================================================

def markdown_line_to_blocks(line: str) -> list[Paragraph]:
    """Convert one line of markdown into zero or more paragraph-level blocks."""
    blocks: list[Paragraph] = []
    for node in _md_parser(line):
        blocks.extend(_node_to_blocks(node))

    if not blocks and line.strip():
        # Link reference definitions parse to nothing renderable
        return [plain_paragraph(line.strip())]
    return blocks


def _node_to_blocks(node: dict[str, Any]) -> list[Paragraph]:
    """Convert a single mistune AST node."""
    ntype = node.get("type", "")

    if ntype == "blank_line":
        return []

    if ntype == "paragraph":
        return [Paragraph(rich_text=_inline_to_rich_text(node.get("children", [])))]

    if ntype == "heading":
        level = min(max(node.get("attrs", {}).get("level", 1), 1), 3)
        return [
            Paragraph(
                rich_text=_inline_to_rich_text(node.get("children", [])),
                style=ParagraphStyle[f"HEADING_{level}"],
            )
        ]

    if ntype == "list":
        ordered = node.get("attrs", {}).get("ordered", False)
        style = ParagraphStyle.NUMBERED if ordered else ParagraphStyle.BULLETED
        return [
            Paragraph(rich_text=_flatten_item(item), style=style)
            for item in node.get("children", [])
        ]

    if ntype == "block_quote":
        return [Paragraph(rich_text=_flatten_item(node), style=ParagraphStyle.QUOTE)]

    if ntype == "thematic_break":
        return [plain_paragraph("---")]

    # Anything else (html, stray code) is kept as literal text
    raw = node.get("raw", "").strip()
    if raw:
        return [plain_paragraph(raw)]
    if node.get("children"):
        return [Paragraph(rich_text=_flatten_item(node))]
    return []


def _flatten_item(node: dict[str, Any]) -> tuple[RichText, ...]:
    """Collect inline content of a container node (list item, quote)."""
    inline: list[dict[str, Any]] = []
    for child in node.get("children", []):
        if child.get("type") in ("paragraph", "block_text"):
            inline.extend(child.get("children", []))
        elif child.get("type") != "blank_line":
            inline.append(child)
    return _inline_to_rich_text(inline)


def _inline_to_rich_text(
    children: list[dict[str, Any]],
    annotations: Optional[dict[str, bool]] = None,
    link: Optional[str] = None,
) -> tuple[RichText, ...]:
    """Recursively convert mistune inline nodes to rich text runs."""
    annotations = annotations or {}
    items: list[RichText] = []

    for node in children:
        ntype = node.get("type", "")

        if ntype in ("strong", "emphasis", "strikethrough"):
            flag = {"strong": "bold", "emphasis": "italic"}.get(ntype, ntype)
            items.extend(
                _inline_to_rich_text(node.get("children", []), {**annotations, flag: True}, link)
            )
        elif ntype == "codespan":
            items.append(RichText(node.get("raw", ""), link=link, **{**annotations, "code": True}))
        elif ntype in ("link", "image"):
            url = node.get("attrs", {}).get("url", "")
            items.extend(_inline_to_rich_text(node.get("children", []), annotations, url or link))
        elif ntype in ("softbreak", "linebreak"):
            items.append(RichText("\n", link=link, **annotations))
        else:
            raw = node.get("raw", "")
            if raw:
                items.append(RichText(raw, link=link, **annotations))
            elif node.get("children"):
                items.extend(_inline_to_rich_text(node["children"], annotations, link))

    return tuple(items)

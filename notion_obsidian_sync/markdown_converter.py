"""
Notion blocks to Markdown converter.

Converts Notion's block structure to Obsidian-friendly Markdown.
Handles the common block types including:
- Text blocks (paragraphs, headings, quotes, callouts)
- Lists (bulleted, numbered, to-do, toggle)
- Code blocks and equations
- Media and links (images, bookmarks, embeds, files)
- Tables and column layouts
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .notion_api import NotionBlock


@dataclass
class ConversionContext:
    """Context passed during markdown conversion."""

    # List tracking
    numbered_list_counter: int = 0


class MarkdownConverter:
    """
    Converts Notion blocks to Markdown.

    Handles recursive block structures and maintains proper formatting.
    Equations are written as single-line ``$$...$$`` so they come back as
    equation blocks when the note is pushed.
    """

    def __init__(self):
        self._handlers: dict[str, Callable[[NotionBlock, ConversionContext], str]] = {
            "paragraph": self._convert_paragraph,
            "heading_1": self._convert_heading(1),
            "heading_2": self._convert_heading(2),
            "heading_3": self._convert_heading(3),
            "bulleted_list_item": self._convert_bulleted_list_item,
            "numbered_list_item": self._convert_numbered_list_item,
            "to_do": self._convert_todo,
            "toggle": self._convert_toggle,
            "code": self._convert_code,
            "quote": self._convert_quote,
            "callout": self._convert_callout,
            "divider": self._convert_divider,
            "image": self._convert_media("Image"),
            "video": self._convert_media("Video"),
            "file": self._convert_media("File"),
            "pdf": self._convert_media("PDF"),
            "audio": self._convert_media("Audio"),
            "embed": self._convert_link,
            "bookmark": self._convert_link,
            "link_preview": self._convert_link,
            "table": self._convert_table,
            "column_list": self._convert_column_list,
            "child_page": self._convert_child_page,
            "synced_block": self._convert_synced_block,
            "equation": self._convert_equation,
            "breadcrumb": self._convert_nothing,
            "table_of_contents": self._convert_nothing,
        }

    def convert(self, blocks: list[NotionBlock]) -> str:
        """
        Convert a list of Notion blocks to Markdown.

        Args:
            blocks: List of NotionBlock objects, children populated.

        Returns:
            Markdown text, empty when the page has no content.
        """
        context = ConversionContext()

        lines = []
        prev_block_type = None

        for block in blocks:
            if prev_block_type and self._needs_spacing(prev_block_type, block.type):
                lines.append("")

            if block.type != "numbered_list_item":
                context.numbered_list_counter = 0

            markdown = self._convert_block(block, context)
            if markdown is not None:
                lines.append(markdown)

            prev_block_type = block.type

        return self._normalize_whitespace("\n".join(lines))

    def _convert_block(self, block: NotionBlock, context: ConversionContext) -> Optional[str]:
        """Convert a single block to markdown."""
        handler = self._handlers.get(block.type)

        if handler:
            return handler(block, context)
        return f"<!-- Unsupported block type: {block.type} -->"

    def _convert_children(
        self,
        blocks: list[NotionBlock],
        context: ConversionContext,
        indent: bool = True,
    ) -> str:
        """Convert child blocks with proper indentation."""
        if not blocks:
            return ""

        # Nested numbered lists restart at 1
        outer_counter = context.numbered_list_counter
        context.numbered_list_counter = 0

        lines = []
        for block in blocks:
            markdown = self._convert_block(block, context)
            if markdown is not None:
                lines.append(self._indent_text(markdown) if indent else markdown)

        context.numbered_list_counter = outer_counter

        return "\n".join(lines)

    def _with_children(self, text: str, block: NotionBlock, context: ConversionContext) -> str:
        if block.children:
            return f"{text}\n{self._convert_children(block.children, context)}"
        return text

    # =========================================================================
    # Rich text handling
    # =========================================================================

    def _rich_text_to_markdown(self, rich_text: list[dict]) -> str:
        """Convert Notion rich text array to markdown string."""
        if not rich_text:
            return ""

        parts = []
        for text_obj in rich_text:
            if text_obj.get("type") == "equation":
                parts.append(f"${text_obj.get('equation', {}).get('expression', '')}$")
                continue

            content = text_obj.get("plain_text", "")
            annotations = text_obj.get("annotations", {})
            href = text_obj.get("href")

            if annotations.get("code"):
                content = f"`{content}`"
            if annotations.get("bold"):
                content = f"**{content}**"
            if annotations.get("italic"):
                content = f"*{content}*"
            if annotations.get("strikethrough"):
                content = f"~~{content}~~"

            if href:
                content = f"[{content}]({href})"

            parts.append(content)

        return "".join(parts)

    def _text(self, block: NotionBlock) -> str:
        return self._rich_text_to_markdown(block.content.get("rich_text", []))

    # =========================================================================
    # Block type handlers
    # =========================================================================

    def _convert_paragraph(self, block: NotionBlock, context: ConversionContext) -> str:
        return self._with_children(self._text(block), block, context)

    def _convert_heading(self, level: int) -> Callable[[NotionBlock, ConversionContext], str]:
        def convert(block: NotionBlock, context: ConversionContext) -> str:
            return f"{'#' * level} {self._text(block)}"
        return convert

    def _convert_bulleted_list_item(self, block: NotionBlock, context: ConversionContext) -> str:
        return self._with_children(f"- {self._text(block)}", block, context)

    def _convert_numbered_list_item(self, block: NotionBlock, context: ConversionContext) -> str:
        context.numbered_list_counter += 1
        text = f"{context.numbered_list_counter}. {self._text(block)}"
        return self._with_children(text, block, context)

    def _convert_todo(self, block: NotionBlock, context: ConversionContext) -> str:
        checkbox = "[x]" if block.content.get("checked", False) else "[ ]"
        return self._with_children(f"- {checkbox} {self._text(block)}", block, context)

    def _convert_toggle(self, block: NotionBlock, context: ConversionContext) -> str:
        """Toggles are flattened to a bullet with their children nested."""
        return self._with_children(f"- {self._text(block)}", block, context)

    def _convert_code(self, block: NotionBlock, context: ConversionContext) -> str:
        code = "".join(
            text_obj.get("plain_text", "") for text_obj in block.content.get("rich_text", [])
        )
        language = block.content.get("language", "").lower()
        if language == "plain text":
            language = ""

        return f"```{language}\n{code}\n```"

    def _convert_quote(self, block: NotionBlock, context: ConversionContext) -> str:
        lines = self._text(block).split("\n")

        if block.children:
            lines.extend(
                self._convert_children(block.children, context, indent=False).split("\n")
            )

        return "\n".join(f"> {line}" for line in lines)

    def _convert_callout(self, block: NotionBlock, context: ConversionContext) -> str:
        """Convert callout block to blockquote with emoji."""
        icon_data = block.content.get("icon") or {}
        icon = icon_data.get("emoji", "") if icon_data.get("type") == "emoji" else ""

        lines = self._text(block).split("\n")
        if icon:
            lines[0] = f"{icon} {lines[0]}"

        if block.children:
            lines.extend(
                self._convert_children(block.children, context, indent=False).split("\n")
            )

        return "\n".join(f"> {line}" for line in lines)

    def _convert_divider(self, block: NotionBlock, context: ConversionContext) -> str:
        return "---"

    def _convert_media(self, label: str) -> Callable[[NotionBlock, ConversionContext], str]:
        """Media blocks are linked, not downloaded."""
        def convert(block: NotionBlock, context: ConversionContext) -> str:
            data = block.content
            url = (data.get(data.get("type", ""), {}) or {}).get("url")
            if not url:
                return f"<!-- {label} URL not found -->"

            caption = self._rich_text_to_markdown(data.get("caption", []))
            name = caption or data.get("name") or label
            prefix = "!" if label == "Image" else ""
            return f"{prefix}[{name}]({url})"
        return convert

    def _convert_link(self, block: NotionBlock, context: ConversionContext) -> str:
        url = block.content.get("url", "")
        caption = self._rich_text_to_markdown(block.content.get("caption", []))
        return f"[{caption or url}]({url})"

    def _convert_table(self, block: NotionBlock, context: ConversionContext) -> str:
        if not block.children:
            return "<!-- Empty table -->"

        has_header = block.content.get("has_column_header", False)
        rows = []

        for i, row_block in enumerate(block.children):
            if row_block.type != "table_row":
                continue

            cells = row_block.content.get("cells", [])
            row_text = " | ".join(self._rich_text_to_markdown(cell) for cell in cells)
            rows.append(f"| {row_text} |")

            if i == 0 and has_header:
                separator = " | ".join("---" for _ in cells)
                rows.append(f"| {separator} |")

        return "\n".join(rows)

    def _convert_column_list(self, block: NotionBlock, context: ConversionContext) -> str:
        """Flatten columns into sequential content."""
        parts = [
            self._convert_children(column.children, context, indent=False)
            for column in block.children
            if column.children
        ]
        return "\n\n".join(parts)

    def _convert_child_page(self, block: NotionBlock, context: ConversionContext) -> str:
        title = block.content.get("title", "Untitled")
        return f"[[{title}]]"

    def _convert_synced_block(self, block: NotionBlock, context: ConversionContext) -> str:
        return self._convert_children(block.children, context, indent=False)

    def _convert_equation(self, block: NotionBlock, context: ConversionContext) -> str:
        return f"$${block.content.get('expression', '').strip()}$$"

    def _convert_nothing(self, block: NotionBlock, context: ConversionContext) -> Optional[str]:
        """Navigation blocks have no meaning in a static note."""
        return None

    # =========================================================================
    # Utilities
    # =========================================================================

    def _needs_spacing(self, prev_type: str, curr_type: str) -> bool:
        """Determine if spacing is needed between block types."""
        if curr_type.startswith("heading_") or prev_type.startswith("heading_"):
            return True

        list_types = {"bulleted_list_item", "numbered_list_item", "to_do", "toggle"}
        if (prev_type in list_types) != (curr_type in list_types):
            return True

        if "code" in (prev_type, curr_type) or "divider" in (prev_type, curr_type):
            return True

        return False

    def _indent_text(self, text: str) -> str:
        """Indent text one nesting level (2 spaces)."""
        indent = "  "
        return "\n".join(f"{indent}{line}" for line in text.split("\n"))

    def _normalize_whitespace(self, content: str) -> str:
        """Normalize whitespace in the output."""
        lines = [line.rstrip() for line in content.split("\n")]

        # Collapse runs of more than 2 blank lines
        result = []
        blank_count = 0
        for line in lines:
            if not line:
                blank_count += 1
                if blank_count <= 2:
                    result.append(line)
            else:
                blank_count = 0
                result.append(line)

        content = "\n".join(result).strip()
        return content + "\n" if content else ""

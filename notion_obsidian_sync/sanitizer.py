"""
Markdown clean-up applied between Notion and the vault.

- Task list lines are dropped from pulled content.
- Inline ``$x$`` math is rewritten to ``$$x$$`` before pushing.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Optional indent, optional list bullet, then an open "[ ]" or dashed "[-]" box
TASK_MARKER_RE = re.compile(r"^\s*(?:[-*+]\s+)?\[[ -]\]")

# Single-dollar span whose delimiters are not part of a "$$" pair
INLINE_MATH_RE = re.compile(r"(?<!\$)\$(?!\$)(.+?)(?<!\$)\$(?!\$)")


def remove_task_markers(markdown) -> str:
    """
    Drop every line that starts with an unchecked or dashed task marker.

    Non-string or empty input yields an empty string.
    """
    if not markdown or not isinstance(markdown, str):
        logger.warning("Markdown content is empty or invalid")
        return ""

    lines = markdown.split("\n")
    return "\n".join(line for line in lines if not TASK_MARKER_RE.match(line))


def normalize_inline_math(markdown):
    """Rewrite ``$x$`` spans to ``$$x$$``. Non-string input is returned as is."""
    if not isinstance(markdown, str):
        logger.warning("Markdown content for equation transformation is invalid")
        return markdown

    return INLINE_MATH_RE.sub(r"$$\1$$", markdown)

"""
Notion ↔ Obsidian Sync

Bidirectional synchronization between a Notion workspace (projects and
notes databases) and a local Obsidian vault of front-matter Markdown files.
"""

__version__ = "1.0.0"

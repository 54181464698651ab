"""
Local Obsidian vault access.

Thin wrapper over the filesystem so the sync engine never touches paths
directly: one folder per project, one ``<title>.md`` per note.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def safe_name(title: str) -> str:
    """Title usable as a single path component."""
    return title.replace("/", "-").replace("\\", "-").strip() or "Untitled"


class Vault:
    """Markdown files under a root directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def list_markdown_files(self) -> list[Path]:
        """
        All ``*.md`` files below the root, sorted.

        Files inside hidden directories (``.obsidian``, ``.trash``) are skipped.
        A missing root holds no files; the pull pass creates it.
        """
        if not self.root.exists():
            logger.info("Vault directory %s does not exist yet", self.root)
            return []

        return sorted(
            path for path in self.root.rglob("*.md")
            if path.is_file()
            and not any(part.startswith(".") for part in path.relative_to(self.root).parts)
        )

    def modified_time(self, path: Path) -> datetime:
        """Modification time of a file, in UTC."""
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def read_if_exists(self, path: Path) -> Optional[str]:
        """File content, or None when the file does not exist."""
        try:
            return self.read(path)
        except FileNotFoundError:
            return None

    def write(self, path: Path, content: str) -> None:
        path.write_text(content, encoding="utf-8")

    def project_folder(self, project_title: str) -> Path:
        return self.root / safe_name(project_title)

    def ensure_folder(self, folder: Path) -> bool:
        """Create a folder if missing. Returns True when it was created."""
        if folder.is_dir():
            return False
        folder.mkdir(parents=True, exist_ok=True)
        return True

    def note_path(self, folder: Path, note_title: str) -> Path:
        return folder / f"{safe_name(note_title)}.md"

    def relative(self, path: Path) -> str:
        """Path shown in logs and outcomes."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)

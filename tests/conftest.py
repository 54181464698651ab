"""Shared fixtures: an in-memory Notion and a temporary vault."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from notion_obsidian_sync.config import Config
from notion_obsidian_sync.notion_api import NotionBlock, NoteRecord, ProjectRecord


class FakeNotionAPI:
    """Stands in for NotionAPI and records every call in order."""

    def __init__(
        self,
        pages: Optional[dict] = None,
        children: Optional[dict] = None,
        projects: Optional[list] = None,
        notes: Optional[dict] = None,
        page_blocks: Optional[dict] = None,
        titles: Optional[dict] = None,
    ):
        self.pages = pages or {}
        self.children = children or {}
        self.projects = projects or []
        self.notes = notes or {}
        self.page_blocks = page_blocks or {}
        self.titles = titles or {}

        self.calls: list[tuple] = []
        self.appended: list[tuple[str, list[dict]]] = []
        self.fail_append_on: Optional[int] = None
        self.append_count = 0
        self.fail_list_children = False
        self.fail_delete: set[str] = set()
        self.fail_projects = False
        self.closed = False

    @property
    def request_count(self) -> int:
        return len(self.calls)

    async def retrieve_page(self, page_id: str) -> dict:
        self.calls.append(("retrieve", page_id))
        if page_id not in self.pages:
            raise RuntimeError(f"Could not find page with ID: {page_id}")
        return self.pages[page_id]

    async def get_page_title(self, page_id: str) -> str:
        self.calls.append(("title", page_id))
        if page_id not in self.titles:
            raise RuntimeError(f"Could not find page with ID: {page_id}")
        return self.titles[page_id]

    async def list_children(self, block_id: str) -> list[dict]:
        self.calls.append(("list", block_id))
        if self.fail_list_children:
            raise RuntimeError("list failed")
        return list(self.children.get(block_id, []))

    async def delete_block(self, block_id: str) -> None:
        self.calls.append(("delete", block_id))
        if block_id in self.fail_delete:
            raise RuntimeError(f"delete {block_id} failed")

    async def append_children(self, block_id: str, children: list[dict]) -> None:
        self.calls.append(("append", block_id, len(children)))
        self.append_count += 1
        if self.fail_append_on == self.append_count:
            raise RuntimeError("append failed")
        self.appended.append((block_id, children))

    async def get_projects(self) -> list[ProjectRecord]:
        self.calls.append(("projects",))
        if self.fail_projects:
            raise RuntimeError("projects query failed")
        return list(self.projects)

    async def get_project_notes(self, project_id: str) -> list[NoteRecord]:
        self.calls.append(("notes", project_id))
        return list(self.notes.get(project_id, []))

    async def get_page_blocks(self, page_id: str) -> list[NotionBlock]:
        self.calls.append(("blocks", page_id))
        blocks = self.page_blocks.get(page_id, [])
        if isinstance(blocks, Exception):
            raise blocks
        return blocks

    async def aclose(self) -> None:
        self.closed = True


def text_block(block_type: str, text: str, **extra) -> NotionBlock:
    """NotionBlock with a single plain rich text run."""
    content = {"rich_text": [{"type": "text", "plain_text": text}], **extra}
    return NotionBlock(id=f"{block_type}-{text}", type=block_type, has_children=False, content=content)


def rich_text_content(payload: dict) -> str:
    """Concatenated text of a block payload built by ``to_notion``."""
    body = payload[payload["type"]]
    return "".join(item["text"]["content"] for item in body["rich_text"])


def set_mtime(path: Path, when: datetime) -> None:
    ts = when.timestamp()
    os.utime(path, (ts, ts))


def write_note(path: Path, content: str, modified: Optional[datetime] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if modified:
        set_mtime(path, modified)
    return path


@pytest.fixture
def vault_dir(tmp_path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path, vault_dir) -> Config:
    return Config(
        notion_token="secret",
        projects_database_id="projects-db",
        notes_database_id="notes-db",
        project_tag_id="tag-1",
        vault_path=vault_dir,
        last_sync_file=tmp_path / "last_sync.txt",
    )


@pytest.fixture
def utc():
    def make(*args) -> datetime:
        return datetime(*args, tzinfo=timezone.utc)
    return make

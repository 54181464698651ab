"""
Main sync engine for Notion ↔ Obsidian synchronization.

One run is two passes, awaited strictly one item at a time:
1. Push: vault files changed since the last sync replace the body of the
   Notion page named by their ``notion_id``.
2. Pull: notes of every selected project are rendered to Markdown and
   merged into ``<project>/<note>.md``.

Failures are isolated per item and reported as outcomes. The sync cursor
is advanced only when both passes finish.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .batch_writer import append_in_batches
from .block_compiler import compile_markdown
from .config import Config
from .frontmatter import ID_FIELD, build_frontmatter, merge_note, split_note
from .markdown_converter import MarkdownConverter
from .notion_api import NOT_AVAILABLE, NoteRecord, NotionAPI, ProjectRecord
from .sanitizer import remove_task_markers
from .sync_state import SyncCursor, format_timestamp
from .vault import Vault

logger = logging.getLogger(__name__)

console = Console()


class Direction(Enum):
    PUSH = "push"
    PULL = "pull"


class OutcomeStatus(Enum):
    SYNCED = "synced"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class ItemOutcome:
    """What happened to one file, note or project."""

    direction: Direction
    item: str
    status: OutcomeStatus
    reason: str = ""


@dataclass
class SyncResult:
    """Result of a sync run."""

    outcomes: list[ItemOutcome] = field(default_factory=list)
    last_sync: Optional[datetime] = None
    completed_at: Optional[str] = None

    def add(
        self,
        direction: Direction,
        item: str,
        status: OutcomeStatus,
        reason: str = "",
    ) -> ItemOutcome:
        outcome = ItemOutcome(direction, item, status, reason)
        self.outcomes.append(outcome)
        return outcome

    def select(
        self,
        status: OutcomeStatus,
        direction: Optional[Direction] = None,
    ) -> list[ItemOutcome]:
        return [
            outcome for outcome in self.outcomes
            if outcome.status is status and (direction is None or outcome.direction is direction)
        ]

    @property
    def pushed(self) -> list[ItemOutcome]:
        return self.select(OutcomeStatus.SYNCED, Direction.PUSH)

    @property
    def pulled(self) -> list[ItemOutcome]:
        return self.select(OutcomeStatus.SYNCED, Direction.PULL)

    @property
    def failed(self) -> list[ItemOutcome]:
        return self.select(OutcomeStatus.FAILED)

    @property
    def success(self) -> bool:
        """True when no item failed."""
        return not self.failed


class SyncEngine:
    """
    Orchestrates Notion ↔ Obsidian synchronization.

    Collaborators are created from the config unless given explicitly.
    """

    def __init__(
        self,
        config: Config,
        notion_api: Optional[NotionAPI] = None,
        vault: Optional[Vault] = None,
        cursor: Optional[SyncCursor] = None,
        markdown_converter: Optional[MarkdownConverter] = None,
    ):
        self.config = config
        self.notion_api = notion_api or NotionAPI(config)
        self.vault = vault or Vault(config.vault_path)
        self.cursor = cursor or SyncCursor(config.last_sync_file)
        self.markdown_converter = markdown_converter or MarkdownConverter()
        self._project_names: dict[str, str] = {}

    async def sync(self) -> SyncResult:
        """
        Perform one full push + pull cycle.

        Returns:
            SyncResult with one outcome per processed item.

        Raises:
            Anything that escapes a whole pass (listing the vault, querying
            projects, writing the cursor). The cursor is not advanced then.
        """
        result = SyncResult()

        result.last_sync = self.cursor.read()
        logger.info("Last sync: %s", format_timestamp(result.last_sync))

        await self.push(result.last_sync, result)
        await self.pull(result)

        result.completed_at = self.cursor.write(datetime.now(timezone.utc))
        logger.info("Sync completed at %s", result.completed_at)

        return result

    # =========================================================================
    # Obsidian -> Notion
    # =========================================================================

    async def push(self, last_sync: datetime, result: SyncResult) -> None:
        """Push vault files modified after ``last_sync``."""
        logger.info("Starting Obsidian to Notion sync...")

        files = self.vault.list_markdown_files()
        logger.info("Found %d Markdown files.", len(files))

        for path in files:
            await self._push_file(path, last_sync, result)

        logger.info("Obsidian to Notion sync completed.")

    async def _push_file(self, path: Path, last_sync: datetime, result: SyncResult) -> ItemOutcome:
        name = self.vault.relative(path)

        try:
            modified = self.vault.modified_time(path)
            if modified <= last_sync:
                logger.debug("Skipping '%s' (not modified since last sync).", name)
                return result.add(Direction.PUSH, name, OutcomeStatus.SKIPPED, "not modified")

            logger.info("Processing '%s' (modified %s)...", name, modified.isoformat())
            fields, body = split_note(self.vault.read(path))

            if fields is None:
                logger.info("No frontmatter in '%s', skipping.", name)
                return result.add(Direction.PUSH, name, OutcomeStatus.SKIPPED, "no frontmatter")

            notion_id = fields.get(ID_FIELD)
            if not notion_id:
                logger.info("No %s in '%s', skipping.", ID_FIELD, name)
                return result.add(Direction.PUSH, name, OutcomeStatus.SKIPPED, f"no {ID_FIELD}")

            try:
                page = await self.notion_api.retrieve_page(notion_id)
            except Exception as e:
                logger.warning("Invalid %s %s in '%s': %s", ID_FIELD, notion_id, name, e)
                return result.add(
                    Direction.PUSH, name, OutcomeStatus.SKIPPED, f"invalid {ID_FIELD} {notion_id}"
                )

            if page.get("object") != "page":
                logger.warning("ID %s is not a page, skipping '%s'.", notion_id, name)
                return result.add(
                    Direction.PUSH, name, OutcomeStatus.SKIPPED, f"{notion_id} is not a page"
                )

            await self._clear_page(notion_id)

            blocks = compile_markdown(body) if body else []
            if blocks:
                await append_in_batches(
                    self.notion_api, notion_id, blocks, self.config.append_batch_size
                )
            else:
                logger.info("Empty content in '%s', cleared %s.", name, notion_id)

            logger.info("Synced '%s' to Notion (%d blocks).", name, len(blocks))
            return result.add(Direction.PUSH, name, OutcomeStatus.SYNCED)

        except Exception as e:
            logger.error("Error processing '%s': %s", name, e)
            return result.add(Direction.PUSH, name, OutcomeStatus.FAILED, str(e))

    async def _clear_page(self, page_id: str) -> None:
        """Delete every child block of a page, best effort."""
        try:
            children = await self.notion_api.list_children(page_id)
        except Exception as e:
            logger.warning("Failed to list blocks for %s: %s", page_id, e)
            return

        logger.info("Found %d existing blocks.", len(children))
        for child in children:
            try:
                await self.notion_api.delete_block(child["id"])
                logger.debug("Deleted block %s", child["id"])
            except Exception as e:
                logger.error("Failed to delete block %s: %s", child["id"], e)

    # =========================================================================
    # Notion -> Obsidian
    # =========================================================================

    async def pull(self, result: SyncResult) -> None:
        """Pull the notes of every selected project into the vault."""
        logger.info("Starting Notion to Obsidian sync...")
        self._project_names = {}

        projects = await self.notion_api.get_projects()
        if not projects:
            logger.info("No projects found to sync from Notion.")
            return

        logger.info("Found %d projects to process.", len(projects))
        for project in projects:
            await self._pull_project(project, result)

        logger.info("Notion to Obsidian sync completed.")

    async def _pull_project(self, project: ProjectRecord, result: SyncResult) -> None:
        logger.info("Now processing project: %s", project.title)

        try:
            folder = self.vault.project_folder(project.title)
            if self.vault.ensure_folder(folder):
                logger.info("Project folder '%s' created.", project.title)

            notes = await self.notion_api.get_project_notes(project.id)
        except Exception as e:
            logger.error("Failed to sync project '%s' (ID: %s): %s", project.title, project.id, e)
            result.add(Direction.PULL, project.title, OutcomeStatus.FAILED, str(e))
            return

        logger.info("Found %d notes for project: %s", len(notes), project.title)
        for note in notes:
            await self._pull_note(note, folder, result)

    async def _pull_note(self, note: NoteRecord, folder: Path, result: SyncResult) -> ItemOutcome:
        path = self.vault.note_path(folder, note.title)
        name = self.vault.relative(path)

        try:
            blocks = await self.notion_api.get_page_blocks(note.id)
            markdown = self.markdown_converter.convert(blocks)

            content = ""
            if not markdown:
                logger.warning("No Markdown content for note '%s' (ID: %s).", note.title, note.id)
            else:
                content = remove_task_markers(markdown)
                if not content.strip():
                    logger.warning(
                        "Content is empty after processing for note '%s' (ID: %s).",
                        note.title, note.id,
                    )

            project_name = await self._project_name(note.project_id)
            frontmatter = build_frontmatter(note, project_name)

            existing = self.vault.read_if_exists(path)
            merged = merge_note(existing, frontmatter, content)
            if merged == existing:
                logger.debug("Note '%s' already up to date.", name)
                return result.add(Direction.PULL, name, OutcomeStatus.UNCHANGED)

            self.vault.write(path, merged)
            logger.info("Note '%s' synced to '%s'.", note.title, name)
            return result.add(Direction.PULL, name, OutcomeStatus.SYNCED)

        except Exception as e:
            logger.error("Failed to sync note '%s' (ID: %s): %s", note.title, note.id, e)
            return result.add(Direction.PULL, name, OutcomeStatus.FAILED, str(e))

    async def _project_name(self, project_id: Optional[str]) -> str:
        """Display name of a related project, ``N/A`` when unknown."""
        if not project_id:
            return NOT_AVAILABLE

        if project_id not in self._project_names:
            try:
                self._project_names[project_id] = await self.notion_api.get_page_title(project_id)
            except Exception as e:
                logger.error("Failed to fetch project name for ID %s: %s", project_id, e)
                return NOT_AVAILABLE

        return self._project_names[project_id]

    # =========================================================================
    # Reporting
    # =========================================================================

    def print_summary(self, result: SyncResult) -> None:
        """Print sync summary."""
        console.print("\n" + "=" * 50)
        console.print("[bold]Sync Summary[/bold]")
        console.print("=" * 50)

        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Files pushed", str(len(result.pushed)))
        table.add_row("Notes pulled", str(len(result.pulled)))
        table.add_row("Skipped", str(len(result.select(OutcomeStatus.SKIPPED))))
        table.add_row("Unchanged", str(len(result.select(OutcomeStatus.UNCHANGED))))
        table.add_row("Failed", str(len(result.failed)))
        table.add_row("API requests", str(self.notion_api.request_count))

        console.print(table)

        if result.pushed:
            console.print(f"\n[green]Pushed:[/green] {', '.join(o.item for o in result.pushed)}")

        if result.pulled:
            console.print(f"\n[green]Pulled:[/green] {', '.join(o.item for o in result.pulled)}")

        for outcome in result.failed:
            console.print(
                f"[red]Failed ({outcome.direction.value}):[/red] {outcome.item}: {outcome.reason}"
            )

        console.print("")

"""
Notion API wrapper for the sync system.

Provides a clean interface to Notion's API with:
- Rate limiting compliance
- Pagination of database queries and block children
- Recursive block fetching for Markdown rendering
- Typed project and note records
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from notion_client import AsyncClient
from ratelimit import limits, sleep_and_retry

from .config import Config

# Notion API rate limit: 3 requests per second
RATE_LIMIT_CALLS = 3
RATE_LIMIT_PERIOD = 1  # second

UNTITLED = "Untitled"
NOT_AVAILABLE = "N/A"


def _title_of(page: dict, prop: str = "Name") -> str:
    """Plain text of a page's title property."""
    title = (page.get("properties", {}).get(prop) or {}).get("title") or []
    if title and title[0].get("plain_text"):
        return title[0]["plain_text"]
    return UNTITLED


@dataclass
class ProjectRecord:
    """A row of the projects database."""

    id: str
    title: str

    @classmethod
    def from_api_response(cls, page: dict) -> "ProjectRecord":
        return cls(id=page["id"], title=_title_of(page))


@dataclass
class NoteRecord:
    """A row of the notes database."""

    id: str
    title: str
    type: str = NOT_AVAILABLE
    created: str = NOT_AVAILABLE
    tags: tuple[str, ...] = ()
    project_id: Optional[str] = None

    @classmethod
    def from_api_response(cls, page: dict) -> "NoteRecord":
        """Create NoteRecord from API response."""
        properties = page.get("properties", {})

        select = (properties.get("Type") or {}).get("select") or {}
        multi_select = (properties.get("Tags") or {}).get("multi_select") or []
        relation = (properties.get("Project") or {}).get("relation") or []

        return cls(
            id=page["id"],
            title=_title_of(page),
            type=select.get("name") or NOT_AVAILABLE,
            created=page.get("created_time") or NOT_AVAILABLE,
            tags=tuple(tag["name"] for tag in multi_select if tag.get("name")),
            project_id=relation[0]["id"] if relation else None,
        )


@dataclass
class NotionBlock:
    """Represents a Notion block."""

    id: str
    type: str
    has_children: bool
    content: dict
    children: list["NotionBlock"] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, block: dict) -> "NotionBlock":
        """Create NotionBlock from API response."""
        block_type = block["type"]
        content = block.get(block_type, {})

        return cls(
            id=block["id"],
            type=block_type,
            has_children=block.get("has_children", False),
            content=content,
        )


class NotionAPI:
    """
    Async wrapper around Notion API with rate limiting and utilities.

    Handles:
    - Authentication
    - Rate limiting (3 req/sec)
    - Cursor pagination
    - Recursive block fetching
    """

    def __init__(self, config: Config, client: Optional[AsyncClient] = None):
        """
        Initialize the Notion API client.

        Args:
            config: Configuration instance with Notion token.
            client: Optional preconfigured client.
        """
        self.config = config
        self.client = client or AsyncClient(auth=config.notion_token)
        self._request_count = 0

    # sleep_and_retry blocks the event loop; calls must stay sequential
    @sleep_and_retry
    @limits(calls=RATE_LIMIT_CALLS, period=RATE_LIMIT_PERIOD)
    def _rate_limited_call(self, func, *args, **kwargs) -> Any:
        """Start a rate-limited API call; the caller awaits the result."""
        self._request_count += 1
        return func(*args, **kwargs)

    async def _paginate(self, func, **kwargs) -> list[dict]:
        """Collect ``results`` across every page of a paginated endpoint."""
        results: list[dict] = []
        start_cursor = None

        while True:
            if start_cursor:
                kwargs["start_cursor"] = start_cursor
            response = await self._rate_limited_call(func, **kwargs)
            results.extend(response.get("results", []))

            if not response.get("has_more"):
                return results
            start_cursor = response.get("next_cursor")

    async def query_database(self, database_id: str, query_filter: Optional[dict] = None) -> list[dict]:
        """
        Query every row of a database.

        Args:
            database_id: The database to query.
            query_filter: Optional Notion filter object.

        Returns:
            Raw page objects in API order.
        """
        kwargs: dict[str, Any] = {"database_id": self._format_page_id(database_id)}
        if query_filter:
            kwargs["filter"] = query_filter
        return await self._paginate(self.client.databases.query, **kwargs)

    async def get_projects(self) -> list[ProjectRecord]:
        """Projects selected by the configured filter."""
        pages = await self.query_database(
            self.config.projects_database_id,
            self.config.projects_filter(),
        )
        return [ProjectRecord.from_api_response(page) for page in pages]

    async def get_project_notes(self, project_id: str) -> list[NoteRecord]:
        """Notes related to a project."""
        pages = await self.query_database(
            self.config.notes_database_id,
            {"property": "Project", "relation": {"contains": project_id}},
        )
        return [NoteRecord.from_api_response(page) for page in pages]

    async def retrieve_page(self, page_id: str) -> dict:
        """Get a single page object by ID."""
        return await self._rate_limited_call(
            self.client.pages.retrieve,
            page_id=self._format_page_id(page_id),
        )

    async def get_page_title(self, page_id: str) -> str:
        """Title of a page, ``Untitled`` when it has none."""
        return _title_of(await self.retrieve_page(page_id))

    async def list_children(self, block_id: str) -> list[dict]:
        """All direct children of a block or page."""
        return await self._paginate(
            self.client.blocks.children.list,
            block_id=self._format_page_id(block_id),
        )

    async def delete_block(self, block_id: str) -> None:
        """Archive a block."""
        await self._rate_limited_call(self.client.blocks.delete, block_id=block_id)

    async def append_children(self, block_id: str, children: list[dict]) -> None:
        """Append blocks to the end of a page or block."""
        await self._rate_limited_call(
            self.client.blocks.children.append,
            block_id=self._format_page_id(block_id),
            children=children,
        )

    async def get_page_blocks(self, page_id: str) -> list[NotionBlock]:
        """
        Get all blocks from a page, children populated recursively.

        Args:
            page_id: The Notion page ID.

        Returns:
            List of NotionBlock objects.
        """
        blocks = []
        for block_data in await self.list_children(page_id):
            block = NotionBlock.from_api_response(block_data)
            if block.has_children:
                block.children = await self.get_page_blocks(block.id)
            blocks.append(block)
        return blocks

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def _format_page_id(self, page_id: str) -> str:
        """
        Format a page ID for API calls.

        Notion API sometimes requires dashes, sometimes doesn't.
        This ensures consistent formatting.
        """
        clean_id = page_id.replace("-", "")

        if len(clean_id) == 32:
            return f"{clean_id[:8]}-{clean_id[8:12]}-{clean_id[12:16]}-{clean_id[16:20]}-{clean_id[20:]}"

        return page_id

    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count

"""
Configuration management for Notion ↔ Obsidian sync.

Loads settings from environment variables and provides
structured configuration for all sync components.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Children per append request.
APPEND_BATCH_SIZE = 50

# Maximum characters in a single rich text segment.
RICH_TEXT_LIMIT = 2000

DEFAULT_PROJECTS_CREATED_AFTER = "2025-05-13T00:00:00+03:00"
DEFAULT_LAST_SYNC_FILE = "last_sync.txt"


@dataclass
class Config:
    """
    Central configuration for the sync system.

    Built once at startup and handed to every component.
    All secrets are loaded from env vars - never hardcoded.
    """

    # Notion settings
    notion_token: str
    projects_database_id: str
    notes_database_id: str
    project_tag_id: str

    # Paths
    vault_path: Path
    last_sync_file: Path = Path(DEFAULT_LAST_SYNC_FILE)

    # Project filter lower bound (ISO-8601)
    projects_created_after: str = DEFAULT_PROJECTS_CREATED_AFTER

    # Sync behavior
    debug: bool = False
    append_batch_size: int = APPEND_BATCH_SIZE

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                     looks for .env in current directory.

        Returns:
            Configured Config instance.

        Raises:
            ValueError: If required environment variables are missing.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        notion_token = os.getenv("NOTION_TOKEN")
        if not notion_token:
            raise ValueError(
                "NOTION_TOKEN environment variable is required.\n"
                "Create a Notion integration at https://www.notion.so/my-integrations"
            )

        projects_database_id = os.getenv("NOTION_PROJECTS_DATABASE_ID")
        if not projects_database_id:
            raise ValueError(
                "NOTION_PROJECTS_DATABASE_ID environment variable is required.\n"
                "This should be the ID of your Projects database in Notion."
            )

        notes_database_id = os.getenv("NOTION_NOTES_DATABASE_ID")
        if not notes_database_id:
            raise ValueError(
                "NOTION_NOTES_DATABASE_ID environment variable is required.\n"
                "This should be the ID of your Notes database in Notion."
            )

        project_tag_id = os.getenv("NOTION_PROJECT_TAG_ID")
        if not project_tag_id:
            raise ValueError(
                "NOTION_PROJECT_TAG_ID environment variable is required.\n"
                "Only projects related to this tag page are synced."
            )

        vault_path_str = os.getenv("OBSIDIAN_VAULT_PATH")
        if not vault_path_str:
            raise ValueError(
                "OBSIDIAN_VAULT_PATH environment variable is required.\n"
                "Set this to the root folder of your Obsidian vault."
            )

        last_sync_file = Path(os.getenv("LAST_SYNC_FILE", DEFAULT_LAST_SYNC_FILE))
        projects_created_after = os.getenv(
            "PROJECTS_CREATED_AFTER", DEFAULT_PROJECTS_CREATED_AFTER
        )
        debug = os.getenv("DEBUG", "false").lower() == "true"

        return cls(
            notion_token=notion_token,
            projects_database_id=projects_database_id,
            notes_database_id=notes_database_id,
            project_tag_id=project_tag_id,
            vault_path=Path(vault_path_str),
            last_sync_file=last_sync_file,
            projects_created_after=projects_created_after,
            debug=debug,
        )

    def projects_filter(self) -> dict:
        """Database filter selecting the projects that take part in the sync."""
        return {
            "and": [
                {
                    "property": "Created",
                    "date": {"on_or_after": self.projects_created_after},
                },
                {
                    "property": "Tag",
                    "relation": {"contains": self.project_tag_id},
                },
            ]
        }

    def __post_init__(self):
        """Normalize path fields."""
        if isinstance(self.vault_path, str):
            self.vault_path = Path(self.vault_path)
        if isinstance(self.last_sync_file, str):
            self.last_sync_file = Path(self.last_sync_file)

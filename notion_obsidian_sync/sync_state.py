"""
Persisted sync cursor.

A single ISO-8601 timestamp in a plain text file. Local files modified at
or before it are considered already pushed. A missing or unreadable file
means "never synced" (the Unix epoch).
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with microseconds and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class SyncCursor:
    """Read and write the last sync timestamp."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> datetime:
        """Last sync time, or the epoch when there is none."""
        try:
            value = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return EPOCH

        try:
            return parse_timestamp(value)
        except ValueError:
            logger.warning(
                "Could not parse last sync time %r in %s, using epoch", value.strip(), self.path
            )
            return EPOCH

    def write(self, when: datetime) -> str:
        """Persist ``when`` and return the written text."""
        text = format_timestamp(when)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")
        return text

#!/usr/bin/env python3
"""
Notion ↔ Obsidian Sync CLI

Usage:
    python sync.py              # Run one push + pull cycle

Per-note failures are logged and do not change the exit status.
"""

import asyncio
import logging
import sys

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from notion_obsidian_sync.config import Config
from notion_obsidian_sync.sync_engine import SyncEngine, SyncResult

console = Console()


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # Keep HTTP request lines out of the sync log
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_sync(config: Config) -> SyncResult:
    """Run one cycle and print its summary."""
    engine = SyncEngine(config)
    try:
        result = await engine.sync()
    finally:
        await engine.notion_api.aclose()

    engine.print_summary(result)
    return result


@click.command()
def cli():
    """
    Notion ↔ Obsidian Sync

    Pushes vault notes changed since the last run to Notion, then pulls
    project notes from Notion into the vault.
    """
    load_dotenv()

    try:
        config = Config.from_env()
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print("\n[dim]Make sure you have created a .env file with your credentials.[/dim]")
        sys.exit(1)

    setup_logging(config.debug)
    console.print("\n[bold blue]🔄 Starting Notion ↔ Obsidian Sync[/bold blue]\n")

    try:
        asyncio.run(run_sync(config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled.[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Sync failed:[/red] {e}")
        if config.debug:
            console.print_exception()
        sys.exit(1)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

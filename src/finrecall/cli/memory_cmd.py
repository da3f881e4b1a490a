"""Admin commands for the persistent memory store.

Lets operators provision the memory collection, inspect what the assistant
remembers about a registered user, and bulk-delete memories by criteria.
"""

import asyncio
from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from finrecall.config.loader import ConfigError, load_config
from finrecall.memory.errors import InvalidCriteriaError
from finrecall.memory.factory import create_persistent_store
from finrecall.memory.persistent import PersistentVectorStore
from finrecall.memory.schema import MemoryRecord, MemorySearchResult, MemoryType

console = Console()


def _format_timestamp(ts: int) -> str:
    """Format an epoch-millisecond timestamp for display."""
    return datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _parse_type(value: str | None) -> MemoryType | None:
    """Validate a ``--type`` option value."""
    if value is None:
        return None
    try:
        return MemoryType(value)
    except ValueError:
        choices = ", ".join(t.value for t in MemoryType)
        raise typer.BadParameter(f"Unknown memory type '{value}'. Choose from: {choices}") from None


def _parse_before(value: str | None) -> int | None:
    """Accept epoch milliseconds or an ISO date for ``--before``."""
    if value is None:
        return None
    if value.isdigit():
        return int(value)
    try:
        return int(datetime.fromisoformat(value).timestamp() * 1000)
    except ValueError:
        raise typer.BadParameter(f"Invalid --before value '{value}'") from None


def _open_store(config_path: str | None) -> PersistentVectorStore:
    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None
    return create_persistent_store(config)


def _records_table(records: list[MemoryRecord], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Time", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Content")
    table.add_column("Thread", style="dim")

    for record in sorted(records, key=lambda r: r.metadata.timestamp):
        table.add_row(
            _format_timestamp(record.metadata.timestamp),
            record.type.value,
            record.content,
            record.metadata.thread_id or "",
        )
    return table


def _results_table(results: list[MemorySearchResult], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Score", justify="right", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Content")
    table.add_column("Time", style="dim")

    for result in results:
        table.add_row(
            f"{result.score:.3f}",
            result.record.type.value,
            result.record.content,
            _format_timestamp(result.record.metadata.timestamp),
        )
    return table


def init_command(config_path: str | None = None) -> None:
    """Provision the memory collection."""
    store = _open_store(config_path)
    try:
        asyncio.run(store.ensure_initialized())
    except Exception as e:
        console.print(f"[red]Error initializing memory collection: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]Memory collection '{store.collection_name}' is ready[/green]")


def view_command(
    user_id: str,
    memory_type: str | None = None,
    config_path: str | None = None,
) -> None:
    """List every durable memory of a user."""
    type_ = _parse_type(memory_type)
    store = _open_store(config_path)
    try:
        records = asyncio.run(store.get_user_memories(user_id, type=type_))
    except Exception as e:
        console.print(f"[red]Error loading memories: {e}[/red]")
        raise typer.Exit(1) from None

    if not records:
        console.print(f"[dim]No memories stored for {user_id}[/dim]")
        return

    console.print(_records_table(records, f"Memories for {user_id} ({len(records)})"))


def query_command(
    user_id: str,
    query: str,
    memory_type: str | None = None,
    limit: int = 5,
    min_score: float | None = None,
    config_path: str | None = None,
) -> None:
    """Semantic search over a user's durable memories."""
    type_ = _parse_type(memory_type)
    store = _open_store(config_path)
    try:
        results = asyncio.run(
            store.search_memories(
                query, type=type_, user_id=user_id, limit=limit, min_score=min_score
            )
        )
    except Exception as e:
        console.print(f"[red]Error searching memories: {e}[/red]")
        raise typer.Exit(1) from None

    if not results:
        console.print("[dim]No matching memories[/dim]")
        return

    console.print(_results_table(results, f"Results for '{query}'"))


def clean_command(
    user_id: str | None = None,
    memory_type: str | None = None,
    before: str | None = None,
    yes: bool = False,
    config_path: str | None = None,
) -> None:
    """Bulk delete durable memories matching every given criterion."""
    type_ = _parse_type(memory_type)
    before_ms = _parse_before(before)

    criteria = []
    if user_id:
        criteria.append(f"user={user_id}")
    if type_:
        criteria.append(f"type={type_.value}")
    if before_ms is not None:
        criteria.append(f"before={_format_timestamp(before_ms)}")

    if not criteria:
        console.print(
            "[red]Refusing to delete without criteria (use --user, --type or --before)[/red]"
        )
        raise typer.Exit(1)

    if not yes and not typer.confirm(f"Delete memories where {', '.join(criteria)}?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(0)

    store = _open_store(config_path)
    try:
        asyncio.run(store.delete_memories(user_id=user_id, type=type_, before=before_ms))
    except InvalidCriteriaError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None
    except Exception as e:
        console.print(f"[red]Error deleting memories: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(f"[green]Deleted memories where {', '.join(criteria)}[/green]")

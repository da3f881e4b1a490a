"""Main CLI application using Typer."""

import logging
import sys

import typer
from rich.console import Console

from finrecall import __version__

app = typer.Typer(
    name="finrecall",
    help="finrecall - Conversational memory for the financial assistant",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version():
    """Show finrecall version."""
    console.print(f"finrecall version {__version__}")


@app.command()
def init(
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.finrecall/finrecall.yaml)",
    ),
):
    """Provision the persistent memory collection."""
    from finrecall.cli.memory_cmd import init_command

    init_command(config_path=config_path)


@app.command()
def view(
    user_id: str = typer.Argument(..., help="Registered user ID"),
    memory_type: str = typer.Option(None, "--type", "-t", help="Only show this memory type"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """List a user's durable memories."""
    from finrecall.cli.memory_cmd import view_command

    view_command(user_id=user_id, memory_type=memory_type, config_path=config_path)


@app.command()
def query(
    user_id: str = typer.Argument(..., help="Registered user ID"),
    text: str = typer.Argument(..., help="Search query"),
    memory_type: str = typer.Option(None, "--type", "-t", help="Only search this memory type"),
    limit: int = typer.Option(5, "--limit", "-n", help="Maximum number of results"),
    min_score: float = typer.Option(
        None, "--min-score", "-s", help="Minimum similarity (default from config)"
    ),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Semantic search over a user's durable memories."""
    from finrecall.cli.memory_cmd import query_command

    query_command(
        user_id=user_id,
        query=text,
        memory_type=memory_type,
        limit=limit,
        min_score=min_score,
        config_path=config_path,
    )


@app.command()
def clean(
    user_id: str = typer.Option(None, "--user", "-u", help="Only delete this user's memories"),
    memory_type: str = typer.Option(None, "--type", "-t", help="Only delete this memory type"),
    before: str = typer.Option(
        None, "--before", "-b", help="Only delete memories older than this (ISO date or epoch ms)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Bulk delete durable memories by criteria."""
    from finrecall.cli.memory_cmd import clean_command

    clean_command(
        user_id=user_id,
        memory_type=memory_type,
        before=before,
        yes=yes,
        config_path=config_path,
    )


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

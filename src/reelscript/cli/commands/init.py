"""Initialize database command."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reelscript.cli.utils.cli_handler import CLIHandler
from reelscript.config import get_settings_for_cli
from reelscript.database import create_database

console = Console()


def init_command(
    db_path: Annotated[
        Path | None,
        typer.Option(
            "--db-path",
            "-d",
            help="Path to the SQLite database file",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Force initialization, overwriting existing database",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
        ),
    ] = None,
) -> None:
    """Initialize the reelscript SQLite database.

    Fails if the database already exists unless --force is given.
    """
    handler = CLIHandler(console)
    try:
        settings = get_settings_for_cli(config, {"database_path": db_path})
    except FileNotFoundError as e:
        handler.handle_error(e)
        return

    target = settings.database_path
    if target.exists():
        if not force:
            console.print(
                f"[yellow]Database already exists at {target}. "
                "Use --force to recreate it.[/yellow]"
            )
            raise typer.Exit(1)
        target.unlink()

    try:
        create_database(target)
    except Exception as e:
        handler.handle_error(e)
    console.print(f"[green]✓[/green] Database initialized at {target}")

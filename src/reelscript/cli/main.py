"""Main CLI entry point."""

from __future__ import annotations

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reelscript import __version__
from reelscript.cli.commands import (
    import_command,
    init_command,
    new_command,
    parse_command,
    pipeline_command,
    prompt_command,
    render_command,
    save_command,
    sync_command,
)
from reelscript.cli.formatters.json_formatter import JsonFormatter
from reelscript.cli.utils.cli_handler import CLIHandler
from reelscript.config import get_logger, get_settings

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="reelscript",
    help="Markdown and structured data for short-video production projects",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="init")(init_command)
app.command(name="new")(new_command)
app.command(name="parse")(parse_command)
app.command(name="render")(render_command)
app.command(name="save")(save_command)
app.command(name="import")(import_command)
app.command(name="sync")(sync_command)
app.command(name="pipeline")(pipeline_command)
app.command(name="prompt")(prompt_command)


@app.command()
def status(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show configuration and the pipeline state of every project."""
    handler = CLIHandler(console)

    try:
        settings = get_settings()
        status_info: dict = {
            "version": __version__,
            "database": str(settings.database_path),
            "database_exists": settings.database_path.exists(),
            "projects_root": str(settings.projects_root),
            "default_dialect": settings.default_dialect,
            "projects": [],
        }

        if settings.database_path.exists():
            from reelscript.cli.utils.db_path import open_database
            from reelscript.database import PipelineOperations, ProjectOperations

            connection = open_database(settings)
            try:
                pipeline = PipelineOperations(connection)
                for project in ProjectOperations(connection).list_projects():
                    entry = project.to_dict()
                    entry["stages"] = pipeline.get_stages(project.id)
                    status_info["projects"].append(entry)
            finally:
                connection.close()

        if json_output:
            print(JsonFormatter().format(status_info))
            return

        console.print("[bold cyan]ReelScript Status[/bold cyan]\n")
        for key in ("version", "database", "database_exists", "projects_root"):
            console.print(f"  {key.replace('_', ' ').title()}: {status_info[key]}")

        if status_info["projects"]:
            table = Table(title="Projects")
            table.add_column("ID", justify="right")
            table.add_column("Name", style="cyan")
            table.add_column("Dialect")
            for stage in PipelineOperations.STAGES:
                table.add_column(stage)
            for entry in status_info["projects"]:
                table.add_row(
                    str(entry["id"]),
                    entry["name"],
                    entry["markdown_format"],
                    *entry["stages"].values(),
                )
            console.print(table)

    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)


@app.command()
def version() -> None:
    """Show reelscript version."""
    console.print(f"ReelScript v{__version__}")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="REELSCRIPT_DEBUG"),
    ] = False,
) -> None:
    """Configure global options."""
    if not (debug or verbose):
        return

    os.environ["REELSCRIPT_LOG_LEVEL"] = "DEBUG" if debug else "INFO"
    if debug:
        os.environ["REELSCRIPT_DEBUG"] = "true"

    from reelscript.config import clear_settings_cache, configure_logging

    clear_settings_cache()
    configure_logging(get_settings())
    if debug:
        logger.debug("Debug mode enabled")
    else:
        logger.info("Verbose mode enabled")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()

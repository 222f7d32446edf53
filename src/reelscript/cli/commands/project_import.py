"""Import existing project folders."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reelscript.cli.formatters.json_formatter import JsonFormatter
from reelscript.cli.utils.cli_handler import CLIHandler
from reelscript.cli.utils.db_path import open_database
from reelscript.config import get_settings
from reelscript.sync import ProjectImporter

console = Console()


def import_command(
    folder: Annotated[
        str | None,
        typer.Argument(help="Folder to import; all new '*项目' folders if omitted"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Import project folders from the projects root."""
    handler = CLIHandler(console)
    formatter = JsonFormatter()
    try:
        settings = get_settings()
        connection = open_database(settings)
        try:
            importer = ProjectImporter(settings, connection)
            if folder:
                project = importer.import_project(folder)
                handler.handle_success(
                    f"Imported {folder} as project {project.id}",
                    project.to_dict(),
                    json_output,
                )
                return
            result = importer.import_all_projects()
        finally:
            connection.close()

        if json_output:
            print(formatter.format(result))
            return

        table = Table(title="Project import")
        table.add_column("Folder", style="cyan")
        table.add_column("Result")
        for name, project_id in result.imported.items():
            table.add_row(name, f"[green]imported (id {project_id})[/green]")
        for name in result.skipped:
            table.add_row(name, "[yellow]already imported[/yellow]")
        for name, message in result.errors.items():
            table.add_row(name, f"[red]{message}[/red]")
        console.print(table)
        console.print(f"[dim]{result.elapsed:.2f}s[/dim]")
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)

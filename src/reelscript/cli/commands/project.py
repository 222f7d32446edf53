"""Project commands: create projects, save generated documents, sync files."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reelscript.cli.formatters.json_formatter import JsonFormatter
from reelscript.cli.utils.cli_handler import CLIHandler
from reelscript.cli.utils.db_path import open_database
from reelscript.config import get_settings
from reelscript.database import (
    EpisodeOperations,
    PipelineOperations,
    ProjectOperations,
)
from reelscript.exceptions import ValidationError
from reelscript.parser import Dialect
from reelscript.sync import FileSynchronizer, GenerationSaver, StructuredEditor
from reelscript.sync.saver import require_project

from .documents import DocumentKind, read_text_file

console = Console()


def new_command(
    name: Annotated[str, typer.Argument(help="Project name")],
    folder: Annotated[
        str | None,
        typer.Option("--folder", help="Folder name (default: '<name>项目')"),
    ] = None,
    dialect: Annotated[
        Dialect | None,
        typer.Option("--dialect", help="Markdown dialect for the project's files"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Create a project and its folder."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        connection = open_database(settings)
        try:
            project = ProjectOperations(connection).create_project(
                name,
                folder or f"{name}{settings.project_folder_suffix}",
                dialect=dialect or settings.default_dialect,
            )
            PipelineOperations(connection).initialize_stages(project.id)
            project_dir = FileSynchronizer(settings, connection).create_project_folder(
                project
            )
        finally:
            connection.close()
        handler.handle_success(
            f"Created project {project.id} in {project_dir}",
            project.to_dict(),
            json_output,
        )
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)


def save_command(
    kind: Annotated[DocumentKind, typer.Argument(help="Document type")],
    project_id: Annotated[int, typer.Argument(help="Project id")],
    file: Annotated[Path, typer.Argument(help="Generated markdown file")],
    episode: Annotated[
        int | None,
        typer.Option("--episode", "-e", help="Episode number (episode documents)"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Store generated markdown in the database and rewrite the mirror file."""
    handler = CLIHandler(console)
    try:
        markdown = read_text_file(file)
        settings = get_settings()
        connection = open_database(settings)
        try:
            saver = GenerationSaver(settings, connection)
            if kind == DocumentKind.SCRIPT:
                document = saver.save_generated_script(project_id, markdown)
            elif kind == DocumentKind.ASSETS:
                document = saver.save_generated_assets(project_id, markdown)
            else:
                if episode is None:
                    raise ValidationError(
                        message="Episode documents need --episode",
                        hint="Pass the episode number, e.g. --episode 3",
                    )
                document = saver.save_generated_episode(project_id, episode, markdown)
        finally:
            connection.close()
        handler.handle_success(
            f"Saved {kind.value} for project {project_id}", document, json_output
        )
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)


def pipeline_command(
    project_id: Annotated[int, typer.Argument(help="Project id")],
    stage: Annotated[str, typer.Argument(help="Pipeline stage")],
    status: Annotated[str, typer.Argument(help="New status")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Set the status of a pipeline stage."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        connection = open_database(settings)
        try:
            StructuredEditor(settings, connection).set_pipeline_status(
                project_id, stage, status
            )
        finally:
            connection.close()
        handler.handle_success(
            f"{stage} → {status}",
            {"project_id": project_id, "stage": stage, "status": status},
            json_output,
        )
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)


def sync_command(
    project_id: Annotated[int, typer.Argument(help="Project id")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Rewrite every mirror file of a project from the database."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        connection = open_database(settings)
        try:
            synchronizer = FileSynchronizer(settings, connection)
            require_project(synchronizer.projects, project_id)
            written = synchronizer.sync_project(project_id)
        finally:
            connection.close()

        if json_output:
            print(JsonFormatter().format([str(path) for path in written]))
            return
        if not written:
            console.print("[yellow]Nothing to sync.[/yellow]")
        for path in written:
            console.print(f"[green]✓[/green] {path}")
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)


def prompt_command(
    project_id: Annotated[int, typer.Argument(help="Project id")],
    episode: Annotated[int, typer.Argument(help="Episode number")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Print the stored raw prompt of an episode."""
    handler = CLIHandler(console)
    try:
        settings = get_settings()
        connection = open_database(settings)
        try:
            require_project(ProjectOperations(connection), project_id)
            row = EpisodeOperations(connection).get_episode(project_id, episode)
        finally:
            connection.close()
        if row is None:
            raise ValidationError(
                message=f"Episode {episode} of project {project_id} not found",
                hint=f"Save it first with 'reelscript save episode {project_id} "
                f"<file> --episode {episode}'",
            )

        raw_prompt = row["raw_prompt"] or ""
        if json_output:
            print(
                JsonFormatter().format(
                    {"episode_number": episode, "raw_prompt": raw_prompt}
                )
            )
            return
        print(raw_prompt)
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e, json_output)

"""Parse markdown documents to JSON and render JSON back to markdown."""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from reelscript.cli.formatters.json_formatter import JsonFormatter
from reelscript.cli.utils.cli_handler import CLIHandler
from reelscript.config import get_settings
from reelscript.exceptions import ValidationError
from reelscript.parser import (
    AssetListDocument,
    Dialect,
    EpisodeDocument,
    ScriptDocument,
    parse_asset_list_document,
    parse_episode_document,
    parse_script_document,
    serialize_asset_list_document,
    serialize_episode_document,
    serialize_script_document,
)

console = Console()


class DocumentKind(str, Enum):
    """Document types handled by parse and render."""

    SCRIPT = "script"
    ASSETS = "assets"
    EPISODE = "episode"


def read_text_file(path: Path) -> str:
    """Read a UTF-8 document, raising ValidationError on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(
            message=f"Cannot read {path}",
            hint="Pass a UTF-8 text file",
            details={"error": str(e)},
        ) from e


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        print(text)
    else:
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")


def parse_command(
    kind: Annotated[DocumentKind, typer.Argument(help="Document type")],
    file: Annotated[Path, typer.Argument(help="Markdown file to parse")],
    dialect: Annotated[
        Dialect | None,
        typer.Option(
            "--dialect",
            help="Dialect to read (asset lists and episodes); sniffed if omitted",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write JSON to this file"),
    ] = None,
) -> None:
    """Parse a markdown document and print its structured form as JSON."""
    handler = CLIHandler(console)
    try:
        markdown = read_text_file(file)
        document: Any
        if kind == DocumentKind.SCRIPT:
            document = parse_script_document(markdown)
        elif kind == DocumentKind.ASSETS:
            document = parse_asset_list_document(markdown, dialect)
        else:
            document = parse_episode_document(markdown, dialect)
        _emit(JsonFormatter().format(document), output)
    except typer.Exit:
        raise
    except Exception as e:
        handler.handle_error(e)


def render_command(
    kind: Annotated[DocumentKind, typer.Argument(help="Document type")],
    file: Annotated[Path, typer.Argument(help="JSON file produced by 'parse'")],
    dialect: Annotated[
        Dialect | None,
        typer.Option(
            "--dialect",
            help="Dialect to write (asset lists and episodes)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write markdown to this file"),
    ] = None,
) -> None:
    """Render a structured JSON document back to markdown."""
    handler = CLIHandler(console)
    try:
        try:
            data = json.loads(read_text_file(file))
        except json.JSONDecodeError as e:
            raise ValidationError(
                message=f"Invalid JSON in {file}: {e.msg}",
                details={"line": e.lineno, "column": e.colno},
            ) from e

        mode = dialect or Dialect.coerce(get_settings().default_dialect)
        if kind == DocumentKind.SCRIPT:
            markdown = serialize_script_document(ScriptDocument.from_dict(data))
        elif kind == DocumentKind.ASSETS:
            markdown = serialize_asset_list_document(
                AssetListDocument.from_dict(data), mode
            )
        else:
            markdown = serialize_episode_document(EpisodeDocument.from_dict(data), mode)
        _emit(markdown, output)
    except typer.Exit:
        raise
    except (KeyError, TypeError, ValueError) as e:
        handler.handle_error(
            ValidationError(
                message=f"JSON does not describe a {kind.value} document: {e}"
            )
        )
    except Exception as e:
        handler.handle_error(e)

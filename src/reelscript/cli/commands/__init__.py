"""CLI command implementations."""

from .documents import parse_command, render_command
from .init import init_command
from .project import (
    new_command,
    pipeline_command,
    prompt_command,
    save_command,
    sync_command,
)
from .project_import import import_command

__all__ = [
    "import_command",
    "init_command",
    "new_command",
    "parse_command",
    "pipeline_command",
    "prompt_command",
    "render_command",
    "save_command",
    "sync_command",
]

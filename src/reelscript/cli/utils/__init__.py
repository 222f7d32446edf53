"""CLI utilities."""

from .cli_handler import CLIHandler
from .db_path import open_database

__all__ = ["CLIHandler", "open_database"]

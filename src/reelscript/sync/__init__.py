"""Reconciliation between stored rows and markdown files on disk."""

from .editor import StructuredEditor
from .file_sync import FileSynchronizer
from .importer import ImportResult, ProjectFiles, ProjectImporter
from .saver import GenerationSaver

__all__ = [
    "FileSynchronizer",
    "GenerationSaver",
    "ImportResult",
    "ProjectFiles",
    "ProjectImporter",
    "StructuredEditor",
]

"""Output formatters for the reelscript CLI."""

from .json_formatter import JsonFormatter

__all__ = ["JsonFormatter"]

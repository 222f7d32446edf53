"""Custom exception hierarchy for reelscript with helpful error messages."""

from __future__ import annotations

from typing import Any


class ReelScriptError(Exception):
    """Base exception with helpful formatting for all reelscript errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class DatabaseError(ReelScriptError):
    """Database-related errors including connection and query issues."""

    pass


class ConfigurationError(ReelScriptError):
    """Configuration errors including invalid settings and missing config files."""

    pass


class ValidationError(ReelScriptError):
    """Input validation errors with details about what was expected."""

    pass


class ProjectNotFoundError(ReelScriptError):
    """Raised when a project id or folder has no matching record."""

    pass


class ProjectImportError(ReelScriptError):
    """Folder import errors such as a missing project directory."""

    pass


class FileSystemError(ReelScriptError):
    """File system operation errors while mirroring documents to disk."""

    pass


def check_database_path(db_path: Any) -> None:
    """Check for common database path issues and provide helpful errors.

    Args:
        db_path: Path to check for database

    Raises:
        DatabaseError: With helpful hints about database initialization
    """
    from pathlib import Path

    if not db_path or not Path(db_path).exists():
        hints = []
        if Path("reelscript.db").exists():
            hints.append("Found reelscript.db in current dir. Use that?")

        if not hints:
            hints.append("Run 'reelscript init' to create a new database")
            hints.append("Or set REELSCRIPT_DATABASE_PATH environment variable")

        raise DatabaseError(
            message=f"Database not found at {db_path}",
            hint=" ".join(hints),
            details={
                "searched_path": str(db_path) if db_path else "None",
                "current_dir": str(Path.cwd()),
            },
        )


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "db_path": "database_path",
        "project_root": "projects_root",
        "format": "default_dialect",
        "markdown_format": "default_dialect",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )

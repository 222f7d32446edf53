"""Database access helpers shared by CLI commands."""

from reelscript.config import ReelScriptSettings
from reelscript.database import DatabaseConnection, initialize_database
from reelscript.exceptions import check_database_path


def open_database(settings: ReelScriptSettings) -> DatabaseConnection:
    """Open the configured database, which must already exist.

    Raises:
        DatabaseError: If the database file is missing
    """
    check_database_path(settings.database_path)
    initialize_database(settings.database_path)
    return DatabaseConnection.from_settings(settings)

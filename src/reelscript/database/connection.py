"""Database connection management for reelscript.

This module provides thread-local SQLite connections with transaction
support and error wrapping.
"""

import contextlib
import os
import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, cast

from reelscript.config import ReelScriptSettings, get_logger
from reelscript.exceptions import DatabaseError

logger = get_logger(__name__)


class DatabaseConnection:
    """Manages SQLite database connections for reelscript."""

    def __init__(
        self,
        db_path: str | Path,
        timeout: float = 30.0,
        journal_mode: str = "WAL",
    ) -> None:
        """Initialize database connection manager.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait on a locked database
            journal_mode: SQLite journal mode to set on each connection
        """
        self.db_path = Path(db_path)
        self.journal_mode = journal_mode
        self.connection_params: dict[str, Any] = {
            "timeout": timeout,
            "check_same_thread": False,
            "isolation_level": None,  # Autocommit mode
        }
        self._local = threading.local()

    @classmethod
    def from_settings(cls, settings: ReelScriptSettings) -> "DatabaseConnection":
        """Build a connection manager from application settings."""
        return cls(
            settings.database_path,
            timeout=settings.database_timeout,
            journal_mode=settings.database_journal_mode,
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Get a thread-local database connection.

        Returns:
            SQLite connection object
        """
        if not hasattr(self._local, "connection") or self._local.connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(str(self.db_path), **self.connection_params)
            except sqlite3.Error as e:
                raise DatabaseError(
                    message=f"Cannot open database at {self.db_path}",
                    hint="Check the path and file permissions",
                    details={"error": str(e)},
                ) from e
            self._configure_connection(conn)
            self._local.connection = conn

        return cast(sqlite3.Connection, self._local.connection)

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        """Configure SQLite connection settings.

        Args:
            conn: SQLite connection to configure
        """
        conn.execute("PRAGMA foreign_keys = ON")

        # DELETE mode under pytest avoids lingering -wal files in tmp dirs
        if os.environ.get("PYTEST_CURRENT_TEST"):
            conn.execute("PRAGMA journal_mode = DELETE")
        else:
            conn.execute(f"PRAGMA journal_mode = {self.journal_mode}")

        conn.execute("PRAGMA synchronous = NORMAL")
        conn.row_factory = sqlite3.Row

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Execute operations in a database transaction.

        Yields:
            SQLite connection object in transaction mode

        Raises:
            DatabaseError: If SQLite rejects any statement; the transaction
                is rolled back first

        Example:
            with db.transaction() as conn:
                conn.execute("DELETE FROM assets WHERE project_id = ?", (1,))
                conn.execute("INSERT INTO assets ...")
        """
        conn = self._get_connection()
        conn.execute("BEGIN")

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error("Transaction failed, rolling back", error=str(e))
            conn.rollback()
            raise DatabaseError(
                message=f"Database operation failed: {e}",
                details={"database": str(self.db_path)},
            ) from e
        except Exception:
            conn.rollback()
            raise

    def fetch_one(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> sqlite3.Row | None:
        """Execute query and fetch one result.

        Args:
            sql: SQL query to execute
            parameters: Parameters for the SQL query

        Returns:
            Single row result or None
        """
        cursor = self._execute(sql, parameters)
        return cast(sqlite3.Row | None, cursor.fetchone())

    def fetch_all(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> list[sqlite3.Row]:
        """Execute query and fetch all results.

        Args:
            sql: SQL query to execute
            parameters: Parameters for the SQL query

        Returns:
            List of row results
        """
        cursor = self._execute(sql, parameters)
        return cursor.fetchall()

    def _execute(
        self, sql: str, parameters: tuple | dict | None = None
    ) -> sqlite3.Cursor:
        conn = self._get_connection()
        try:
            if parameters is None:
                return conn.execute(sql)
            return conn.execute(sql, parameters)
        except sqlite3.Error as e:
            raise DatabaseError(
                message=f"Database query failed: {e}",
                details={"database": str(self.db_path)},
            ) from e

    def get_table_names(self) -> list[str]:
        """Get list of all table names in the database."""
        rows = self.fetch_all(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        return [row["name"] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        if hasattr(self._local, "connection") and self._local.connection:
            with contextlib.suppress(sqlite3.Error):
                self._local.connection.close()
            self._local.connection = None

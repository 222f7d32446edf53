"""Project-level operations.

A project row carries the production parameters that the script table
mirrors (style, aspect ratio, tone, duration, episode count) plus the
markdown dialect its documents are written in.
"""

import sqlite3
from dataclasses import dataclass
from typing import Any, ClassVar

from reelscript.config import get_logger
from reelscript.exceptions import ValidationError
from reelscript.parser.models import Dialect

from .connection import DatabaseConnection

logger = get_logger(__name__)


@dataclass
class Project:
    """A stored production project."""

    id: int
    name: str
    folder_name: str
    style: str = ""
    aspect_ratio: str = "9:16"
    emotional_tone: str = ""
    episode_duration: str = "15秒"
    total_episodes: int = 0
    markdown_format: Dialect = Dialect.INLINE
    status: str = "draft"
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Project":
        """Build a project from a ``projects`` row."""
        return cls(
            id=row["id"],
            name=row["name"],
            folder_name=row["folder_name"],
            style=row["style"] or "",
            aspect_ratio=row["aspect_ratio"] or "",
            emotional_tone=row["emotional_tone"] or "",
            episode_duration=row["episode_duration"] or "",
            total_episodes=row["total_episodes"] or 0,
            markdown_format=Dialect.coerce(row["markdown_format"]),
            status=row["status"] or "draft",
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "folder_name": self.folder_name,
            "style": self.style,
            "aspect_ratio": self.aspect_ratio,
            "emotional_tone": self.emotional_tone,
            "episode_duration": self.episode_duration,
            "total_episodes": self.total_episodes,
            "markdown_format": self.markdown_format.value,
            "status": self.status,
        }


class ProjectOperations:
    """Operations for creating, reading and updating projects."""

    UPDATABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "name",
            "folder_name",
            "style",
            "aspect_ratio",
            "emotional_tone",
            "episode_duration",
            "total_episodes",
            "markdown_format",
            "status",
        }
    )
    STATUSES: ClassVar[tuple[str, ...]] = ("draft", "in_progress", "completed")

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize project operations.

        Args:
            connection: Database connection instance
        """
        self.connection = connection

    def create_project(
        self,
        name: str,
        folder_name: str,
        dialect: Dialect | str | None = None,
        **fields: Any,
    ) -> Project:
        """Insert a new project.

        Args:
            name: Display name
            folder_name: Directory name under the projects root
            dialect: Markdown dialect for the project's documents
            **fields: Further project columns (style, aspect_ratio, ...)

        Returns:
            The stored project
        """
        values = self._validate(fields)
        values["name"] = name
        values["folder_name"] = folder_name
        values["markdown_format"] = Dialect.coerce(dialect).value

        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with self.connection.transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO projects ({columns}) "  # nosec B608
                f"VALUES ({placeholders})",
                tuple(values.values()),
            )
            project_id = cursor.lastrowid
            row = conn.execute(
                "SELECT * FROM projects WHERE id = ?", (project_id,)
            ).fetchone()

        logger.info("Created project", project_id=project_id, name=name)
        return Project.from_row(row)

    def get_project(self, project_id: int | None) -> Project | None:
        """Fetch a project by id."""
        row = self.connection.fetch_one(
            "SELECT * FROM projects WHERE id = ?", (project_id,)
        )
        return Project.from_row(row) if row else None

    def get_project_by_folder(self, folder_name: str) -> Project | None:
        """Fetch the project stored for a folder name."""
        row = self.connection.fetch_one(
            "SELECT * FROM projects WHERE folder_name = ? ORDER BY id LIMIT 1",
            (folder_name,),
        )
        return Project.from_row(row) if row else None

    def list_projects(self) -> list[Project]:
        """Return all projects, newest first."""
        rows = self.connection.fetch_all(
            "SELECT * FROM projects ORDER BY updated_at DESC, id DESC"
        )
        return [Project.from_row(row) for row in rows]

    def update_project(self, project_id: int, **changes: Any) -> Project | None:
        """Update project columns.

        Args:
            project_id: Project to update
            **changes: Column values to set

        Returns:
            The updated project, or None if it does not exist

        Raises:
            ValidationError: If a column is unknown or a value is invalid
        """
        values = self._validate(changes)
        if not values:
            return self.get_project(project_id)

        assignments = ", ".join(f"{column} = ?" for column in values)
        with self.connection.transaction() as conn:
            conn.execute(
                f"UPDATE projects SET {assignments}, "  # nosec B608
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (*values.values(), project_id),
            )
        logger.debug("Updated project", project_id=project_id, fields=list(values))
        return self.get_project(project_id)

    def _validate(self, changes: dict[str, Any]) -> dict[str, Any]:
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                message=f"Unknown project field(s): {', '.join(sorted(unknown))}",
                hint=f"Allowed fields: {', '.join(sorted(self.UPDATABLE_FIELDS))}",
            )

        values = dict(changes)
        if "markdown_format" in values:
            try:
                values["markdown_format"] = Dialect.coerce(
                    values["markdown_format"]
                ).value
            except ValueError as e:
                raise ValidationError(
                    message=str(e), hint="Use 'inline' or 'quoted'"
                ) from e
        if "status" in values and values["status"] not in self.STATUSES:
            raise ValidationError(
                message=f"Invalid project status: {values['status']}",
                hint=f"Use one of: {', '.join(self.STATUSES)}",
            )
        if "total_episodes" in values:
            values["total_episodes"] = int(values["total_episodes"])
        return values

"""Pipeline stage tracking per project."""

from collections.abc import Iterable
from typing import ClassVar

from reelscript.config import get_logger
from reelscript.exceptions import ValidationError

from .connection import DatabaseConnection

logger = get_logger(__name__)


class PipelineOperations:
    """Operations for the script → assets → images → storyboard → video stages."""

    STAGES: ClassVar[tuple[str, ...]] = (
        "script",
        "assets",
        "images",
        "storyboard",
        "video",
    )
    STATUSES: ClassVar[tuple[str, ...]] = (
        "pending",
        "in_progress",
        "completed",
        "needs_revision",
    )

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize pipeline operations.

        Args:
            connection: Database connection instance
        """
        self.connection = connection

    def validate(self, stage: str, status: str) -> None:
        """Raise ValidationError unless stage and status are known values."""
        if stage not in self.STAGES:
            raise ValidationError(
                message=f"Unknown pipeline stage: {stage}",
                hint=f"Use one of: {', '.join(self.STAGES)}",
            )
        if status not in self.STATUSES:
            raise ValidationError(
                message=f"Unknown pipeline status: {status}",
                hint=f"Use one of: {', '.join(self.STATUSES)}",
            )

    def set_stage(self, project_id: int, stage: str, status: str) -> None:
        """Set the status of one stage, creating the row if needed."""
        self.validate(stage, status)
        with self.connection.transaction() as conn:
            conn.execute(
                """
                INSERT INTO pipeline_stages (project_id, stage, status)
                VALUES (?, ?, ?)
                ON CONFLICT(project_id, stage) DO UPDATE SET
                    status = excluded.status,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (project_id, stage, status),
            )
        logger.info(
            "Pipeline stage updated", project_id=project_id, stage=stage, status=status
        )

    def get_stages(self, project_id: int) -> dict[str, str]:
        """Return every stage's status in pipeline order.

        Stages without a row report ``pending``.
        """
        rows = self.connection.fetch_all(
            "SELECT stage, status FROM pipeline_stages WHERE project_id = ?",
            (project_id,),
        )
        stored = {row["stage"]: row["status"] for row in rows}
        return {stage: stored.get(stage, "pending") for stage in self.STAGES}

    def initialize_stages(
        self, project_id: int, completed: Iterable[str] = ()
    ) -> None:
        """Create all stage rows, marking ``completed`` stages as done."""
        done = set(completed)
        for stage in done:
            self.validate(stage, "completed")
        with self.connection.transaction() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO pipeline_stages (project_id, stage, status) "
                "VALUES (?, ?, ?)",
                [
                    (project_id, stage, "completed" if stage in done else "pending")
                    for stage in self.STAGES
                ],
            )

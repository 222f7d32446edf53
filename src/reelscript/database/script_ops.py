"""Script operations: the raw script markdown and its episode summaries."""

import json
import sqlite3
from typing import Any

from reelscript.config import get_logger
from reelscript.parser.models import ScriptEpisodeSummary

from .connection import DatabaseConnection

logger = get_logger(__name__)


class ScriptOperations:
    """Operations for a project's script and per-episode summaries."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize script operations.

        Args:
            connection: Database connection instance
        """
        self.connection = connection

    def upsert_script(
        self,
        project_id: int,
        raw_markdown: str | None = None,
        file_path: str | None = None,
    ) -> int:
        """Create the project's script row or update the given columns.

        Args:
            project_id: Owning project
            raw_markdown: New markdown text, left unchanged when None
            file_path: New mirror file path, left unchanged when None

        Returns:
            The script id
        """
        with self.connection.transaction() as conn:
            row = conn.execute(
                "SELECT id FROM scripts WHERE project_id = ?", (project_id,)
            ).fetchone()
            if row is None:
                cursor = conn.execute(
                    "INSERT INTO scripts (project_id, raw_markdown, file_path) "
                    "VALUES (?, ?, ?)",
                    (project_id, raw_markdown or "", file_path or ""),
                )
                return int(cursor.lastrowid or 0)

            script_id = int(row["id"])
            if raw_markdown is not None:
                conn.execute(
                    "UPDATE scripts SET raw_markdown = ? WHERE id = ?",
                    (raw_markdown, script_id),
                )
            if file_path is not None:
                conn.execute(
                    "UPDATE scripts SET file_path = ? WHERE id = ?",
                    (file_path, script_id),
                )
            return script_id

    def get_script(self, project_id: int) -> dict[str, Any] | None:
        """Return the script row of a project as a dict."""
        row = self.connection.fetch_one(
            "SELECT * FROM scripts WHERE project_id = ?", (project_id,)
        )
        return dict(row) if row else None

    def replace_script_episodes(
        self, script_id: int, episodes: list[ScriptEpisodeSummary]
    ) -> None:
        """Delete all episode summaries of a script and insert ``episodes``."""
        with self.connection.transaction() as conn:
            conn.execute(
                "DELETE FROM script_episodes WHERE script_id = ?", (script_id,)
            )
            conn.executemany(
                """
                INSERT INTO script_episodes (
                    script_id, episode_number, title, emotional_tone,
                    key_plots, opening_frame, closing_frame
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        script_id,
                        episode.episode_number,
                        episode.title,
                        episode.emotional_tone,
                        json.dumps(episode.key_plots, ensure_ascii=False),
                        episode.opening_frame,
                        episode.closing_frame,
                    )
                    for episode in episodes
                ],
            )
        logger.debug(
            "Replaced script episodes", script_id=script_id, count=len(episodes)
        )

    def get_script_episodes(self, script_id: int) -> list[ScriptEpisodeSummary]:
        """Return the episode summaries of a script ordered by number."""
        rows = self.connection.fetch_all(
            "SELECT * FROM script_episodes WHERE script_id = ? "
            "ORDER BY episode_number, id",
            (script_id,),
        )
        return [self._summary_from_row(row) for row in rows]

    @staticmethod
    def _summary_from_row(row: sqlite3.Row) -> ScriptEpisodeSummary:
        return ScriptEpisodeSummary(
            episode_number=row["episode_number"],
            title=row["title"] or "",
            emotional_tone=row["emotional_tone"] or "",
            key_plots=json.loads(row["key_plots"] or "[]"),
            opening_frame=row["opening_frame"] or "",
            closing_frame=row["closing_frame"] or "",
        )

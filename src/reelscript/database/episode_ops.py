"""Episode storyboard operations.

An episode row holds the scalar storyboard fields; its time slots and
asset slots live in child tables and are always replaced as a whole.
"""

import sqlite3
from typing import Any

from reelscript.config import get_logger
from reelscript.parser.models import AssetSlot, EpisodeDocument, SlotType, TimeSlot

from .connection import DatabaseConnection

logger = get_logger(__name__)


class EpisodeOperations:
    """Operations for episode storyboards and their slots."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize episode operations.

        Args:
            connection: Database connection instance
        """
        self.connection = connection

    def upsert_episode(
        self,
        project_id: int,
        document: EpisodeDocument,
        raw_markdown: str | None = None,
    ) -> int:
        """Store an episode document keyed by project and episode number.

        The episode row is inserted or updated, then its time slots and
        asset slots are replaced, all in one transaction.

        Args:
            project_id: Owning project
            document: Parsed or edited storyboard
            raw_markdown: Source markdown, left unchanged when None

        Returns:
            The episode id
        """
        with self.connection.transaction() as conn:
            conn.execute(
                """
                INSERT INTO episodes (
                    project_id, episode_number, title, style_line, sound_design,
                    reference_list, end_frame_description, raw_prompt
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(project_id, episode_number) DO UPDATE SET
                    title = excluded.title,
                    style_line = excluded.style_line,
                    sound_design = excluded.sound_design,
                    reference_list = excluded.reference_list,
                    end_frame_description = excluded.end_frame_description,
                    raw_prompt = excluded.raw_prompt
                """,
                (
                    project_id,
                    document.episode_number,
                    document.title,
                    document.style_line,
                    document.sound_design,
                    document.reference_list,
                    document.end_frame_description,
                    document.raw_prompt,
                ),
            )
            row = conn.execute(
                "SELECT id FROM episodes WHERE project_id = ? AND episode_number = ?",
                (project_id, document.episode_number),
            ).fetchone()
            episode_id = int(row["id"])
            if raw_markdown is not None:
                conn.execute(
                    "UPDATE episodes SET raw_markdown = ? WHERE id = ?",
                    (raw_markdown, episode_id),
                )
            self._replace_time_slots(conn, episode_id, document.time_slots)
            self._replace_asset_slots(conn, episode_id, document.asset_slots)

        logger.debug(
            "Stored episode",
            project_id=project_id,
            episode=document.episode_number,
            time_slots=len(document.time_slots),
        )
        return episode_id

    def replace_time_slots(self, episode_id: int, slots: list[TimeSlot]) -> None:
        """Delete and re-insert the time slots of an episode."""
        with self.connection.transaction() as conn:
            self._replace_time_slots(conn, episode_id, slots)

    def replace_asset_slots(self, episode_id: int, slots: list[AssetSlot]) -> None:
        """Delete and re-insert the asset slots of an episode."""
        with self.connection.transaction() as conn:
            self._replace_asset_slots(conn, episode_id, slots)

    @staticmethod
    def _replace_time_slots(
        conn: sqlite3.Connection, episode_id: int, slots: list[TimeSlot]
    ) -> None:
        conn.execute("DELETE FROM time_slots WHERE episode_id = ?", (episode_id,))
        conn.executemany(
            "INSERT INTO time_slots (episode_id, start_second, end_second, "
            "camera_movement, description) VALUES (?, ?, ?, ?, ?)",
            [
                (
                    episode_id,
                    slot.start_second,
                    slot.end_second,
                    slot.camera_movement,
                    slot.description,
                )
                for slot in slots
            ],
        )

    @staticmethod
    def _replace_asset_slots(
        conn: sqlite3.Connection, episode_id: int, slots: list[AssetSlot]
    ) -> None:
        conn.execute("DELETE FROM asset_slots WHERE episode_id = ?", (episode_id,))
        conn.executemany(
            "INSERT INTO asset_slots (episode_id, slot_number, slot_type, "
            "asset_code, description) VALUES (?, ?, ?, ?, ?)",
            [
                (
                    episode_id,
                    slot.slot_number,
                    SlotType(slot.slot_type).value,
                    slot.asset_code,
                    slot.description,
                )
                for slot in slots
            ],
        )

    def get_episode(
        self, project_id: int, episode_number: int
    ) -> dict[str, Any] | None:
        """Return an episode row as a dict, or None."""
        row = self.connection.fetch_one(
            "SELECT * FROM episodes WHERE project_id = ? AND episode_number = ?",
            (project_id, episode_number),
        )
        return dict(row) if row else None

    def list_episodes(self, project_id: int) -> list[dict[str, Any]]:
        """Return the episode rows of a project ordered by number."""
        rows = self.connection.fetch_all(
            "SELECT * FROM episodes WHERE project_id = ? ORDER BY episode_number",
            (project_id,),
        )
        return [dict(row) for row in rows]

    def get_time_slots(self, episode_id: int) -> list[TimeSlot]:
        """Return the time slots of an episode in window order."""
        rows = self.connection.fetch_all(
            "SELECT * FROM time_slots WHERE episode_id = ? ORDER BY start_second, id",
            (episode_id,),
        )
        return [
            TimeSlot(
                start_second=row["start_second"],
                end_second=row["end_second"],
                camera_movement=row["camera_movement"] or "",
                description=row["description"] or "",
            )
            for row in rows
        ]

    def get_asset_slots(self, episode_id: int) -> list[AssetSlot]:
        """Return the asset slots of an episode in insertion order."""
        rows = self.connection.fetch_all(
            "SELECT * FROM asset_slots WHERE episode_id = ? ORDER BY id",
            (episode_id,),
        )
        return [
            AssetSlot(
                slot_number=row["slot_number"],
                slot_type=SlotType(row["slot_type"] or "image"),
                asset_code=row["asset_code"] or "",
                description=row["description"] or "",
            )
            for row in rows
        ]

    def load_document(
        self, project_id: int, episode_number: int
    ) -> EpisodeDocument | None:
        """Rebuild the EpisodeDocument stored for an episode."""
        row = self.get_episode(project_id, episode_number)
        if row is None:
            return None
        return EpisodeDocument(
            title=row["title"] or "",
            episode_number=row["episode_number"],
            asset_slots=self.get_asset_slots(row["id"]),
            style_line=row["style_line"] or "",
            time_slots=self.get_time_slots(row["id"]),
            sound_design=row["sound_design"] or "",
            reference_list=row["reference_list"] or "",
            end_frame_description=row["end_frame_description"] or "",
            raw_prompt=row["raw_prompt"] or "",
        )

    def set_file_info(
        self, episode_id: int, file_path: str, raw_markdown: str | None = None
    ) -> None:
        """Record the mirror file path (and optionally its text) of an episode."""
        with self.connection.transaction() as conn:
            conn.execute(
                "UPDATE episodes SET file_path = ? WHERE id = ?",
                (file_path, episode_id),
            )
            if raw_markdown is not None:
                conn.execute(
                    "UPDATE episodes SET raw_markdown = ? WHERE id = ?",
                    (raw_markdown, episode_id),
                )

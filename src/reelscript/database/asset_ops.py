"""Asset operations for the per-project asset list."""

import json
import sqlite3
from typing import Any, ClassVar

from reelscript.config import get_logger
from reelscript.exceptions import ValidationError
from reelscript.parser.models import AssetRecord, AssetType

from .connection import DatabaseConnection

logger = get_logger(__name__)


def asset_from_row(row: sqlite3.Row | dict[str, Any]) -> AssetRecord:
    """Convert an ``assets`` row into an AssetRecord."""
    used = row["used_in_episodes"]
    return AssetRecord(
        code=row["code"],
        name=row["name"] or "",
        prompt=row["prompt"] or "",
        description=row["description"] or "",
        used_in_episodes=json.loads(used) if isinstance(used, str) else list(used),
    )


class AssetOperations:
    """Operations for characters, scenes and props of a project."""

    UPDATABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"code", "name", "prompt", "description", "image_path", "used_in_episodes"}
    )

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize asset operations.

        Args:
            connection: Database connection instance
        """
        self.connection = connection

    def replace_assets(self, project_id: int, assets: list[AssetRecord]) -> None:
        """Delete every asset of a project and insert ``assets`` in order."""
        with self.connection.transaction() as conn:
            conn.execute("DELETE FROM assets WHERE project_id = ?", (project_id,))
            conn.executemany(
                """
                INSERT INTO assets (
                    project_id, code, type, name, prompt, description,
                    used_in_episodes
                )
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        project_id,
                        asset.code,
                        asset.type.value,
                        asset.name,
                        asset.prompt,
                        asset.description,
                        json.dumps(asset.used_in_episodes, ensure_ascii=False),
                    )
                    for asset in assets
                ],
            )
        logger.debug("Replaced assets", project_id=project_id, count=len(assets))

    def list_assets(self, project_id: int) -> list[dict[str, Any]]:
        """Return the asset rows of a project with episode lists decoded."""
        rows = self.connection.fetch_all(
            "SELECT * FROM assets WHERE project_id = ? ORDER BY id", (project_id,)
        )
        return [self._decode(row) for row in rows]

    def get_asset(self, asset_id: int) -> dict[str, Any] | None:
        """Return one asset row, or None."""
        row = self.connection.fetch_one(
            "SELECT * FROM assets WHERE id = ?", (asset_id,)
        )
        return self._decode(row) if row else None

    def update_asset(self, asset_id: int, **changes: Any) -> dict[str, Any] | None:
        """Update asset columns.

        Changing ``code`` also changes the stored type, which always follows
        the code prefix.

        Raises:
            ValidationError: If a column is unknown
        """
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                message=f"Unknown asset field(s): {', '.join(sorted(unknown))}",
                hint=f"Allowed fields: {', '.join(sorted(self.UPDATABLE_FIELDS))}",
            )

        values = dict(changes)
        if "used_in_episodes" in values:
            values["used_in_episodes"] = json.dumps(
                list(values["used_in_episodes"]), ensure_ascii=False
            )
        if "code" in values:
            values["type"] = AssetType.from_code(values["code"]).value
        if not values:
            return self.get_asset(asset_id)

        assignments = ", ".join(f"{column} = ?" for column in values)
        with self.connection.transaction() as conn:
            conn.execute(
                f"UPDATE assets SET {assignments} WHERE id = ?",  # nosec B608
                (*values.values(), asset_id),
            )
        return self.get_asset(asset_id)

    def delete_asset(self, asset_id: int) -> bool:
        """Delete an asset. Returns True if a row was removed."""
        with self.connection.transaction() as conn:
            cursor = conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))
            return cursor.rowcount > 0

    @staticmethod
    def _decode(row: sqlite3.Row) -> dict[str, Any]:
        data = dict(row)
        data["used_in_episodes"] = json.loads(data.get("used_in_episodes") or "[]")
        return data

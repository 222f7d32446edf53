"""Apply structured edits and keep the mirror files current."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from reelscript.config import ReelScriptSettings, get_logger
from reelscript.database import (
    AssetOperations,
    DatabaseConnection,
    EpisodeOperations,
    PipelineOperations,
    ProjectOperations,
    ScriptOperations,
)
from reelscript.exceptions import ValidationError
from reelscript.parser import EpisodeDocument, ScriptEpisodeSummary

from .file_sync import FileSynchronizer
from .saver import require_project

logger = get_logger(__name__)


class StructuredEditor:
    """Edit stored documents field by field."""

    def __init__(
        self,
        settings: ReelScriptSettings,
        connection: DatabaseConnection,
        synchronizer: FileSynchronizer | None = None,
    ) -> None:
        """Initialize the editor.

        Args:
            settings: Application settings
            connection: Database connection instance
            synchronizer: File synchronizer; built from the other arguments
                when omitted
        """
        self.settings = settings
        self.synchronizer = synchronizer or FileSynchronizer(settings, connection)
        self.projects = ProjectOperations(connection)
        self.scripts = ScriptOperations(connection)
        self.assets = AssetOperations(connection)
        self.episodes = EpisodeOperations(connection)
        self.pipeline = PipelineOperations(connection)

    def update_script_episodes(
        self, project_id: int, episodes: list[ScriptEpisodeSummary]
    ) -> Path | None:
        """Replace the episode summaries and rewrite the script file."""
        require_project(self.projects, project_id)
        script_id = self.scripts.upsert_script(project_id)
        self.scripts.replace_script_episodes(script_id, episodes)
        logger.info(
            "Updated script episodes", project_id=project_id, count=len(episodes)
        )
        return self.synchronizer.sync_script_file(project_id)

    def update_asset(
        self, project_id: int, asset_id: int, **changes: Any
    ) -> dict[str, Any] | None:
        """Update one asset and rewrite the asset-list file.

        Raises:
            ValidationError: If the asset does not belong to the project or
                a field is unknown
        """
        require_project(self.projects, project_id)
        self._require_asset(project_id, asset_id)
        updated = self.assets.update_asset(asset_id, **changes)
        self.synchronizer.sync_asset_list_file(project_id)
        logger.info("Updated asset", project_id=project_id, asset_id=asset_id)
        return updated

    def delete_asset(self, project_id: int, asset_id: int) -> None:
        """Delete one asset and rewrite the asset-list file."""
        require_project(self.projects, project_id)
        self._require_asset(project_id, asset_id)
        self.assets.delete_asset(asset_id)
        self.synchronizer.sync_asset_list_file(project_id)
        logger.info("Deleted asset", project_id=project_id, asset_id=asset_id)

    def update_episode(
        self, project_id: int, episode_number: int, document: EpisodeDocument
    ) -> Path | None:
        """Store an edited storyboard and rewrite its episode file."""
        require_project(self.projects, project_id)
        document.episode_number = episode_number
        self.episodes.upsert_episode(project_id, document)
        logger.info("Updated episode", project_id=project_id, episode=episode_number)
        return self.synchronizer.sync_episode_file(project_id, episode_number)

    def set_pipeline_status(self, project_id: int, stage: str, status: str) -> None:
        """Set a pipeline stage status after validating both values."""
        require_project(self.projects, project_id)
        self.pipeline.set_stage(project_id, stage, status)

    def _require_asset(self, project_id: int, asset_id: int) -> None:
        asset = self.assets.get_asset(asset_id)
        if asset is None or asset["project_id"] != project_id:
            raise ValidationError(
                message=f"Asset {asset_id} not found in project {project_id}",
                details={"project_id": project_id, "asset_id": asset_id},
            )

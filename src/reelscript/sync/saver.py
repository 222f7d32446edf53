"""Persist AI-generated markdown as structured rows.

Each save parses the text, replaces the affected rows, regenerates the
mirror file from the database and advances the pipeline stage.
"""

from __future__ import annotations

from reelscript.config import ReelScriptSettings, get_logger
from reelscript.database import (
    AssetOperations,
    DatabaseConnection,
    EpisodeOperations,
    PipelineOperations,
    Project,
    ProjectOperations,
    ScriptOperations,
)
from reelscript.exceptions import ProjectNotFoundError
from reelscript.parser import (
    AssetListDocument,
    EpisodeDocument,
    ScriptDocument,
    parse_asset_list_document,
    parse_episode_document,
    parse_script_document,
)

from .file_sync import FileSynchronizer
from .parameters import project_fields_from_parameters

logger = get_logger(__name__)


def require_project(projects: ProjectOperations, project_id: int) -> Project:
    """Return the project or raise ProjectNotFoundError."""
    project = projects.get_project(project_id)
    if project is None:
        raise ProjectNotFoundError(
            message=f"Project {project_id} not found",
            hint="Run 'reelscript status' to list project ids",
        )
    return project


class GenerationSaver:
    """Save generated script, asset-list and episode markdown."""

    def __init__(
        self,
        settings: ReelScriptSettings,
        connection: DatabaseConnection,
        synchronizer: FileSynchronizer | None = None,
    ) -> None:
        """Initialize the saver.

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

    def save_generated_script(self, project_id: int, markdown: str) -> ScriptDocument:
        """Store a generated script and its episode summaries.

        Production parameters found in the table update the project.
        """
        require_project(self.projects, project_id)
        document = parse_script_document(markdown)

        script_id = self.scripts.upsert_script(project_id, raw_markdown=markdown)
        self.scripts.replace_script_episodes(script_id, document.episodes)

        fields = project_fields_from_parameters(document.parameters)
        if fields:
            self.projects.update_project(project_id, **fields)

        self.synchronizer.sync_script_file(project_id)
        self.pipeline.set_stage(project_id, "script", "completed")
        logger.info(
            "Saved generated script",
            project_id=project_id,
            episodes=len(document.episodes),
        )
        return document

    def save_generated_assets(
        self, project_id: int, markdown: str
    ) -> AssetListDocument:
        """Replace the project's assets with a generated asset list.

        A style prefix in the list becomes the project style.
        """
        require_project(self.projects, project_id)
        document = parse_asset_list_document(markdown)

        self.assets.replace_assets(project_id, document.assets)
        if document.style_prefix:
            self.projects.update_project(project_id, style=document.style_prefix)

        self.synchronizer.sync_asset_list_file(project_id)
        self.pipeline.set_stage(project_id, "assets", "completed")
        logger.info(
            "Saved generated assets",
            project_id=project_id,
            assets=len(document.assets),
        )
        return document

    def save_generated_episode(
        self, project_id: int, episode_number: int, markdown: str
    ) -> EpisodeDocument:
        """Store a generated storyboard under ``episode_number``.

        The number requested by the caller wins over any number in the text.
        """
        require_project(self.projects, project_id)
        document = parse_episode_document(markdown)
        document.episode_number = episode_number

        self.episodes.upsert_episode(project_id, document, raw_markdown=markdown)
        self.synchronizer.sync_episode_file(project_id, episode_number)
        self.pipeline.set_stage(project_id, "storyboard", "in_progress")
        logger.info(
            "Saved generated episode",
            project_id=project_id,
            episode=episode_number,
            time_slots=len(document.time_slots),
        )
        return document

"""Mirror stored documents to markdown files in the project folder.

Files are always regenerated from the database and overwritten whole;
they are never diffed or appended to.
"""

from __future__ import annotations

from pathlib import Path

from reelscript.config import ReelScriptSettings, get_logger
from reelscript.database import (
    AssetOperations,
    DatabaseConnection,
    EpisodeOperations,
    Project,
    ProjectOperations,
    ScriptOperations,
    asset_from_row,
)
from reelscript.exceptions import FileSystemError
from reelscript.parser import (
    AssetListDocument,
    ScriptDocument,
    parse_script_document,
    serialize_asset_list_document,
    serialize_episode_document,
    serialize_script_document,
)

from .parameters import parameters_from_project

logger = get_logger(__name__)


class FileSynchronizer:
    """Write the script, asset list and episode files of a project."""

    def __init__(
        self, settings: ReelScriptSettings, connection: DatabaseConnection
    ) -> None:
        """Initialize the synchronizer.

        Args:
            settings: Settings providing the projects root and folder names
            connection: Database connection instance
        """
        self.settings = settings
        self.projects = ProjectOperations(connection)
        self.scripts = ScriptOperations(connection)
        self.assets = AssetOperations(connection)
        self.episodes = EpisodeOperations(connection)

    def project_dir(self, project: Project) -> Path:
        """Return the folder holding a project's documents."""
        return self.settings.projects_root / project.folder_name

    def create_project_folder(self, project: Project) -> Path:
        """Create the project folder and its asset subfolder."""
        project_dir = self.project_dir(project)
        try:
            (project_dir / self.settings.asset_subfolder).mkdir(
                parents=True, exist_ok=True
            )
        except OSError as e:
            raise FileSystemError(
                message=f"Cannot create project folder {project_dir}",
                hint="Check that projects_root exists and is writable",
                details={"error": str(e)},
            ) from e
        return project_dir

    def build_script_document(self, project: Project) -> ScriptDocument | None:
        """Assemble the script of a project from its stored rows.

        Parameters come from the project columns. The emotional arc and
        color plan are carried over from the last stored markdown since
        they have no columns of their own.
        """
        script = self.scripts.get_script(project.id)
        if script is None:
            return None

        previous = parse_script_document(script["raw_markdown"] or "")
        return ScriptDocument(
            title=project.name,
            parameters=parameters_from_project(project),
            episodes=self.scripts.get_script_episodes(script["id"]),
            emotional_arc=previous.emotional_arc,
            color_plan=previous.color_plan,
        )

    def sync_script_file(self, project_id: int) -> Path | None:
        """Regenerate ``<name>_剧本.md``.

        Returns:
            The written path, or None if the project has no script
        """
        project = self.projects.get_project(project_id)
        if project is None:
            return None
        document = self.build_script_document(project)
        if document is None:
            return None

        markdown = serialize_script_document(document)
        path = self._write(project, f"{project.name}_剧本.md", markdown)
        self.scripts.upsert_script(
            project.id, raw_markdown=markdown, file_path=str(path)
        )
        return path

    def sync_asset_list_file(self, project_id: int) -> Path | None:
        """Regenerate ``<name>_素材清单.md`` in the project's dialect.

        Returns:
            The written path, or None if the project has no assets
        """
        project = self.projects.get_project(project_id)
        if project is None:
            return None
        rows = self.assets.list_assets(project.id)
        if not rows:
            return None

        document = AssetListDocument(
            style_prefix=project.style,
            assets=[asset_from_row(row) for row in rows],
        )
        markdown = serialize_asset_list_document(document, project.markdown_format)
        return self._write(project, f"{project.name}_素材清单.md", markdown)

    def sync_episode_file(self, project_id: int, episode_number: int) -> Path | None:
        """Regenerate ``<name>_E<NN>_分镜.md`` in the project's dialect.

        Returns:
            The written path, or None if the episode does not exist
        """
        project = self.projects.get_project(project_id)
        if project is None:
            return None
        document = self.episodes.load_document(project.id, episode_number)
        if document is None:
            return None

        markdown = serialize_episode_document(document, project.markdown_format)
        path = self._write(
            project, f"{project.name}_E{episode_number:02d}_分镜.md", markdown
        )
        row = self.episodes.get_episode(project.id, episode_number)
        if row is not None:
            self.episodes.set_file_info(row["id"], str(path), markdown)
        return path

    def sync_project(self, project_id: int) -> list[Path]:
        """Regenerate every mirror file of a project."""
        written = [
            self.sync_script_file(project_id),
            self.sync_asset_list_file(project_id),
        ]
        for row in self.episodes.list_episodes(project_id):
            written.append(self.sync_episode_file(project_id, row["episode_number"]))
        return [path for path in written if path is not None]

    def _write(self, project: Project, file_name: str, markdown: str) -> Path:
        project_dir = self.project_dir(project)
        if not project_dir.exists():
            self.create_project_folder(project)

        path = project_dir / file_name
        try:
            path.write_text(markdown, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(
                message=f"Cannot write {path}",
                details={"project_id": project.id, "error": str(e)},
            ) from e
        logger.info("Synced document", project_id=project.id, path=str(path))
        return path

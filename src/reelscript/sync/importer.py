"""Import existing ``<name>项目`` folders into the database.

Folder import reads whatever documents a project folder already holds,
in either dialect, including storyboards that concatenate several
episodes in one file.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

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
from reelscript.exceptions import ProjectImportError, ReelScriptError
from reelscript.parser import (
    AssetListDocument,
    Dialect,
    ScriptDocument,
    parse_asset_list_document,
    parse_episode_document,
    parse_script_document,
    split_episodes,
)
from reelscript.parser.fields import ASSET_QUOTED_MARKERS, detect_dialect

from .parameters import project_fields_from_parameters

logger = get_logger(__name__)

SINGLE_EPISODE_FILE = re.compile(r"_E\d{2}_分镜\.md$")
MULTI_EPISODE_FILE = re.compile(r"(?:分镜脚本|分镜全集)\.md$")


@dataclass
class ProjectFiles:
    """Documents found in one project folder."""

    script: Path | None = None
    asset_list: Path | None = None
    episodes: list[Path] = field(default_factory=list)


@dataclass
class ImportResult:
    """Results from importing several project folders."""

    imported: dict[str, int] = field(default_factory=dict)  # folder -> project id
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None

    def add_success(self, folder: str, project_id: int) -> None:
        """Record an imported folder."""
        self.imported[folder] = project_id

    def add_skipped(self, folder: str) -> None:
        """Record a folder that was already imported."""
        self.skipped.append(folder)

    def add_failure(self, folder: str, error: Exception | str) -> None:
        """Record a folder whose import failed."""
        self.errors[folder] = str(error)

    def finish(self) -> None:
        """Mark the import as complete."""
        self.end_time = time.time()

    @property
    def elapsed(self) -> float:
        """Seconds spent importing."""
        return (self.end_time or time.time()) - self.start_time

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "imported": dict(self.imported),
            "skipped": list(self.skipped),
            "errors": dict(self.errors),
            "elapsed_seconds": round(self.elapsed, 3),
        }


class ProjectImporter:
    """Scan the projects root and import project folders."""

    def __init__(
        self, settings: ReelScriptSettings, connection: DatabaseConnection
    ) -> None:
        """Initialize the importer.

        Args:
            settings: Settings providing the projects root and folder suffix
            connection: Database connection instance
        """
        self.settings = settings
        self.projects = ProjectOperations(connection)
        self.scripts = ScriptOperations(connection)
        self.assets = AssetOperations(connection)
        self.episodes = EpisodeOperations(connection)
        self.pipeline = PipelineOperations(connection)

    def scan_project_folders(self) -> list[str]:
        """Return the names of project folders under the projects root."""
        root = self.settings.projects_root
        if not root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in root.iterdir()
            if entry.is_dir()
            and entry.name.endswith(self.settings.project_folder_suffix)
        )

    def discover_files(self, project_dir: Path) -> ProjectFiles:
        """Find the script, asset list and storyboard files of a folder."""
        names = sorted(entry.name for entry in project_dir.iterdir() if entry.is_file())
        files = ProjectFiles()
        for name in names:
            if files.script is None and name.endswith("剧本.md"):
                files.script = project_dir / name
            elif files.asset_list is None and name.endswith("素材清单.md"):
                files.asset_list = project_dir / name
            if SINGLE_EPISODE_FILE.search(name) or MULTI_EPISODE_FILE.search(name):
                files.episodes.append(project_dir / name)
        return files

    def import_project(self, folder_name: str) -> Project:
        """Import one project folder.

        Args:
            folder_name: Folder name under the projects root

        Returns:
            The created project

        Raises:
            ProjectImportError: If the folder does not exist or cannot be read
        """
        project_dir = self.settings.projects_root / folder_name
        if not project_dir.is_dir():
            raise ProjectImportError(
                message=f"Project folder not found: {folder_name}",
                hint="Check projects_root or the folder name",
                details={"projects_root": str(self.settings.projects_root)},
            )

        files = self.discover_files(project_dir)
        script_markdown = self._read(files.script)
        asset_markdown = self._read(files.asset_list)
        script = parse_script_document(script_markdown) if files.script else None
        asset_list = (
            parse_asset_list_document(asset_markdown) if files.asset_list else None
        )

        project = self._create_project(
            folder_name, files, script, asset_list, asset_markdown
        )

        if script is not None:
            script_id = self.scripts.upsert_script(
                project.id, raw_markdown=script_markdown, file_path=str(files.script)
            )
            self.scripts.replace_script_episodes(script_id, script.episodes)

        if asset_list is not None:
            self.assets.replace_assets(project.id, asset_list.assets)

        imported_episodes = 0
        for path in files.episodes:
            imported_episodes += self._import_episode_file(project.id, path)

        completed = []
        if files.script:
            completed.append("script")
        if files.asset_list:
            completed.append("assets")
        if files.episodes:
            completed.append("storyboard")
        self.pipeline.initialize_stages(project.id, completed)

        logger.info(
            "Imported project folder",
            folder=folder_name,
            project_id=project.id,
            episodes=imported_episodes,
            assets=len(asset_list.assets) if asset_list else 0,
        )
        return project

    def import_all_projects(self) -> ImportResult:
        """Import every project folder not yet in the database."""
        result = ImportResult()
        for folder in self.scan_project_folders():
            if self.projects.get_project_by_folder(folder) is not None:
                result.add_skipped(folder)
                continue
            try:
                project = self.import_project(folder)
            except ReelScriptError as e:
                logger.error("Project import failed", folder=folder, error=e.message)
                result.add_failure(folder, e.message)
                continue
            result.add_success(folder, project.id)
        result.finish()
        return result

    def _create_project(
        self,
        folder_name: str,
        files: ProjectFiles,
        script: ScriptDocument | None,
        asset_list: AssetListDocument | None,
        asset_markdown: str,
    ) -> Project:
        suffix = self.settings.project_folder_suffix
        fields: dict[str, Any] = {
            "aspect_ratio": "9:16",
            "episode_duration": "15秒",
            "total_episodes": len(files.episodes),
            "status": "completed",
        }
        name = folder_name.removesuffix(suffix)
        if script is not None:
            name = script.title or name
            fields.update(project_fields_from_parameters(script.parameters))

        if asset_list and asset_list.style_prefix and not fields.get("style"):
            fields["style"] = asset_list.style_prefix

        if files.asset_list is not None:
            dialect = detect_dialect(asset_markdown, ASSET_QUOTED_MARKERS)
        else:
            dialect = Dialect.coerce(self.settings.default_dialect)

        return self.projects.create_project(
            name, folder_name, dialect=dialect, **fields
        )

    def _import_episode_file(self, project_id: int, path: Path) -> int:
        markdown = self._read(path)
        if MULTI_EPISODE_FILE.search(path.name):
            fragments = split_episodes(markdown)
        else:
            fragments = [markdown]

        count = 0
        for fragment in fragments:
            document = parse_episode_document(fragment)
            if document.episode_number == 0 and not document.title:
                logger.debug("Skipping fragment without heading", path=str(path))
                continue
            episode_id = self.episodes.upsert_episode(
                project_id, document, raw_markdown=fragment
            )
            self.episodes.set_file_info(episode_id, str(path))
            count += 1
        return count

    @staticmethod
    def _read(path: Path | None) -> str:
        if path is None:
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ProjectImportError(
                message=f"Cannot read {path}",
                hint="Project documents must be UTF-8 text",
                details={"error": str(e)},
            ) from e

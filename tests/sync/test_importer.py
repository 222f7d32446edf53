"""Tests for project folder import."""

import pytest

from reelscript.database import (
    AssetOperations,
    EpisodeOperations,
    PipelineOperations,
    ProjectOperations,
    ScriptOperations,
)
from reelscript.exceptions import ProjectImportError
from reelscript.parser import Dialect
from reelscript.sync import ImportResult, ProjectImporter


@pytest.fixture
def importer(settings, db_connection):
    """An importer for the test database."""
    return ProjectImporter(settings, db_connection)


@pytest.fixture
def project_folders(settings, fixture_text):
    """Two project folders and one unrelated folder under the projects root."""
    root = settings.projects_root

    rain = root / "雨夜项目"
    rain.mkdir()
    (rain / "雨夜_剧本.md").write_text(fixture_text("script.md"), encoding="utf-8")
    (rain / "雨夜_素材清单.md").write_text(
        fixture_text("assets_inline.md"), encoding="utf-8"
    )
    (rain / "雨夜_E01_分镜.md").write_text(
        fixture_text("episode_inline.md"), encoding="utf-8"
    )
    (rain / "雨夜_E02_分镜.md").write_text(
        fixture_text("episode_quoted.md"), encoding="utf-8"
    )
    (rain / "笔记.txt").write_text("不是文档", encoding="utf-8")

    cliff = root / "崖山项目"
    cliff.mkdir()
    (cliff / "崖山_素材清单.md").write_text(
        fixture_text("assets_quoted.md"), encoding="utf-8"
    )
    (cliff / "崖山_分镜脚本.md").write_text(
        fixture_text("episodes_multi.md"), encoding="utf-8"
    )

    (root / "杂物").mkdir()
    return root


class TestDiscovery:
    """Test folder scanning and file discovery."""

    def test_scan_project_folders(self, importer, project_folders):
        """Test that only folders with the project suffix are listed."""
        assert importer.scan_project_folders() == ["崖山项目", "雨夜项目"]

    def test_scan_missing_root(self, settings, db_connection):
        """Test scanning a projects root that does not exist."""
        missing = settings.model_copy(
            update={"projects_root": settings.projects_root / "nope"}
        )
        assert ProjectImporter(missing, db_connection).scan_project_folders() == []

    def test_discover_files(self, importer, project_folders):
        """Test classifying the documents of a folder."""
        files = importer.discover_files(project_folders / "雨夜项目")

        assert files.script.name == "雨夜_剧本.md"
        assert files.asset_list.name == "雨夜_素材清单.md"
        assert [path.name for path in files.episodes] == [
            "雨夜_E01_分镜.md",
            "雨夜_E02_分镜.md",
        ]

    def test_discover_multi_episode_file(self, importer, project_folders):
        """Test that concatenated storyboards are discovered."""
        files = importer.discover_files(project_folders / "崖山项目")

        assert files.script is None
        assert [path.name for path in files.episodes] == ["崖山_分镜脚本.md"]


class TestImportProject:
    """Test importing one folder."""

    def test_full_project(self, importer, project_folders, db_connection):
        """Test importing a folder with every document type."""
        project = importer.import_project("雨夜项目")

        assert project.name == "雨夜"
        assert project.style == "水墨赛博朋克"
        assert project.total_episodes == 2
        assert project.markdown_format == Dialect.INLINE

        scripts = ScriptOperations(db_connection)
        script = scripts.get_script(project.id)
        assert len(scripts.get_script_episodes(script["id"])) == 2

        assets = AssetOperations(db_connection).list_assets(project.id)
        codes = [asset["code"] for asset in assets]
        assert codes == ["C01", "C02", "S01", "P01"]

        episodes = EpisodeOperations(db_connection).list_episodes(project.id)
        assert [row["episode_number"] for row in episodes] == [1, 2]
        assert episodes[0]["file_path"].endswith("雨夜_E01_分镜.md")

        stages = PipelineOperations(db_connection).get_stages(project.id)
        assert stages["script"] == "completed"
        assert stages["assets"] == "completed"
        assert stages["storyboard"] == "completed"
        assert stages["video"] == "pending"

    def test_quoted_project_without_script(
        self, importer, project_folders, db_connection
    ):
        """Test a folder holding a quoted asset list and a multi-episode file."""
        project = importer.import_project("崖山项目")

        assert project.name == "崖山"
        assert project.style == "古风写实，柔和光影"
        assert project.markdown_format == Dialect.QUOTED

        episodes = EpisodeOperations(db_connection)
        numbers = [row["episode_number"] for row in episodes.list_episodes(project.id)]
        assert numbers == [1, 2]
        first = episodes.load_document(project.id, 1)
        assert first.end_frame_description == "远处的灯光"
        assert [slot.start_second for slot in first.time_slots] == [0, 6]

        stages = PipelineOperations(db_connection).get_stages(project.id)
        assert stages["script"] == "pending"
        assert stages["storyboard"] == "completed"

    def test_missing_folder(self, importer):
        """Test importing a folder that does not exist."""
        with pytest.raises(ProjectImportError) as exc_info:
            importer.import_project("不存在项目")
        assert "不存在项目" in exc_info.value.message

    def test_unreadable_script(self, importer, settings, db_connection):
        """Test that a script that is not UTF-8 fails before any row is created."""
        broken = settings.projects_root / "坏项目"
        broken.mkdir()
        (broken / "坏_剧本.md").write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(ProjectImportError):
            importer.import_project("坏项目")
        assert ProjectOperations(db_connection).get_project_by_folder("坏项目") is None


class TestImportAllProjects:
    """Test importing every folder."""

    def test_import_and_skip(self, importer, project_folders):
        """Test that a second run skips folders already imported."""
        first = importer.import_all_projects()
        assert sorted(first.imported) == ["崖山项目", "雨夜项目"]
        assert first.skipped == []
        assert first.errors == {}

        second = importer.import_all_projects()
        assert second.imported == {}
        assert second.skipped == ["崖山项目", "雨夜项目"]

    def test_errors_are_collected(self, importer, project_folders):
        """Test that one broken folder does not stop the others."""
        broken = project_folders / "坏项目"
        broken.mkdir()
        (broken / "坏_剧本.md").write_bytes(b"\xff\xfe\xfa")

        result = importer.import_all_projects()

        assert "坏项目" in result.errors
        assert "Cannot read" in result.errors["坏项目"]
        assert len(result.imported) == 2

    def test_result_to_dict(self):
        """Test the JSON-friendly result."""
        result = ImportResult()
        result.add_success("甲项目", 1)
        result.add_skipped("乙项目")
        result.add_failure("丙项目", "boom")
        result.finish()

        data = result.to_dict()
        assert data["imported"] == {"甲项目": 1}
        assert data["skipped"] == ["乙项目"]
        assert data["errors"] == {"丙项目": "boom"}
        assert data["elapsed_seconds"] >= 0

"""Tests for structured edits."""

import pytest

from reelscript.database import AssetOperations, PipelineOperations, ProjectOperations
from reelscript.exceptions import ProjectNotFoundError, ValidationError
from reelscript.parser import (
    EpisodeDocument,
    ScriptEpisodeSummary,
    TimeSlot,
    parse_episode_document,
    parse_script_document,
)
from reelscript.sync import GenerationSaver, StructuredEditor


@pytest.fixture
def editor(settings, db_connection):
    """An editor for the test database."""
    return StructuredEditor(settings, db_connection)


@pytest.fixture
def saved_assets(settings, db_connection, project, fixture_text):
    """The inline fixture assets saved into the test project."""
    GenerationSaver(settings, db_connection).save_generated_assets(
        project.id, fixture_text("assets_inline.md")
    )
    return AssetOperations(db_connection).list_assets(project.id)


class TestStructuredEditor:
    """Test StructuredEditor."""

    def test_update_script_episodes(self, editor, project):
        """Test replacing episode summaries and rewriting the script file."""
        episodes = [
            ScriptEpisodeSummary(1, "开场", key_plots=["相遇"]),
            ScriptEpisodeSummary(2, "结局", emotional_tone="释然"),
        ]

        path = editor.update_script_episodes(project.id, episodes)

        assert parse_script_document(path.read_text(encoding="utf-8")).episodes == (
            episodes
        )

    def test_update_asset(self, editor, project, saved_assets, settings):
        """Test editing an asset and rewriting the asset list."""
        asset_id = saved_assets[0]["id"]

        updated = editor.update_asset(project.id, asset_id, name="林小雪")

        assert updated["name"] == "林小雪"
        path = settings.projects_root / "雨夜项目" / "雨夜_素材清单.md"
        assert "### C01 - 林小雪" in path.read_text(encoding="utf-8")

    def test_delete_asset(self, editor, project, saved_assets, settings):
        """Test deleting an asset and rewriting the asset list."""
        prop = next(row for row in saved_assets if row["code"] == "P01")

        editor.delete_asset(project.id, prop["id"])

        path = settings.projects_root / "雨夜项目" / "雨夜_素材清单.md"
        assert "P01" not in path.read_text(encoding="utf-8")

    def test_asset_from_another_project(
        self, editor, saved_assets, db_connection
    ):
        """Test that assets cannot be edited through another project."""
        other = ProjectOperations(db_connection).create_project("别", "别项目")

        with pytest.raises(ValidationError):
            editor.update_asset(other.id, saved_assets[0]["id"], name="x")
        with pytest.raises(ValidationError):
            editor.delete_asset(other.id, 9999)

    def test_update_episode(self, editor, project):
        """Test storing an edited storyboard under the given number."""
        document = EpisodeDocument(
            title="改写",
            episode_number=9,
            time_slots=[TimeSlot(3, 6, "拉远", "拉远，街道全景")],
            end_frame_description="空街",
        )

        path = editor.update_episode(project.id, 2, document)

        assert path.name == "雨夜_E02_分镜.md"
        parsed = parse_episode_document(path.read_text(encoding="utf-8"))
        assert parsed.episode_number == 2
        assert parsed.time_slots == document.time_slots

    def test_set_pipeline_status(self, editor, project, db_connection):
        """Test setting a stage status."""
        editor.set_pipeline_status(project.id, "images", "in_progress")

        stages = PipelineOperations(db_connection).get_stages(project.id)
        assert stages["images"] == "in_progress"

    def test_invalid_pipeline_status(self, editor, project):
        """Test that invalid stage values are rejected."""
        with pytest.raises(ValidationError):
            editor.set_pipeline_status(project.id, "images", "finished")

    def test_unknown_project(self, editor, db_connection):
        """Test editing a project that does not exist."""
        with pytest.raises(ProjectNotFoundError):
            editor.set_pipeline_status(77, "script", "completed")

"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

import reelscript.config.settings as settings_module
from reelscript.config import ReelScriptSettings, set_settings
from reelscript.database import DatabaseConnection, ProjectOperations, create_database
from reelscript.sync import FileSynchronizer

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (may need extended timeout)"
    )


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path, monkeypatch):
    """Run every test against a private database path and projects root.

    Prevents databases or project folders from being created in the
    working directory and keeps settings from leaking between tests.
    """
    db_path = tmp_path / "test_reelscript.db"
    projects_root = tmp_path / "projects"
    projects_root.mkdir()
    monkeypatch.setenv("REELSCRIPT_DATABASE_PATH", str(db_path))
    monkeypatch.setenv("REELSCRIPT_PROJECTS_ROOT", str(projects_root))

    settings = ReelScriptSettings(database_path=db_path, projects_root=projects_root)
    set_settings(settings)

    yield settings

    settings_module._settings = None


@pytest.fixture
def settings(isolated_test_environment):
    """The settings installed for the current test."""
    return isolated_test_environment


@pytest.fixture
def db_connection(settings):
    """A connection to a freshly created database."""
    create_database(settings.database_path)
    connection = DatabaseConnection.from_settings(settings)
    yield connection
    connection.close()


@pytest.fixture
def project(db_connection, settings):
    """A stored project named 雨夜 with its folder created."""
    created = ProjectOperations(db_connection).create_project("雨夜", "雨夜项目")
    FileSynchronizer(settings, db_connection).create_project_folder(created)
    return created


@pytest.fixture
def quoted_project(db_connection, settings):
    """A stored project whose documents use the quoted dialect."""
    created = ProjectOperations(db_connection).create_project(
        "崖山", "崖山项目", dialect="quoted"
    )
    FileSynchronizer(settings, db_connection).create_project_folder(created)
    return created


@pytest.fixture
def runner():
    """Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def fixture_text():
    """Read a markdown fixture by file name."""

    def _read(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _read

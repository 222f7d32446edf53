"""Database schema definitions for the reelscript production store.

Projects own a script (with per-episode summaries), an asset list, episode
storyboards (with time slots and asset slots) and pipeline stage rows.
Child rows cascade with their parent.
"""

import sqlite3
from pathlib import Path

from reelscript.config import get_logger

logger = get_logger(__name__)

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    folder_name TEXT NOT NULL,
    style TEXT DEFAULT '',
    aspect_ratio TEXT DEFAULT '9:16',
    emotional_tone TEXT DEFAULT '',
    episode_duration TEXT DEFAULT '15秒',
    total_episodes INTEGER DEFAULT 0,
    markdown_format TEXT DEFAULT 'inline'
        CHECK (markdown_format IN ('inline', 'quoted')),
    status TEXT DEFAULT 'draft'
        CHECK (status IN ('draft', 'in_progress', 'completed')),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS scripts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL UNIQUE,
    raw_markdown TEXT DEFAULT '',
    file_path TEXT DEFAULT '',
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS script_episodes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    script_id INTEGER NOT NULL,
    episode_number INTEGER NOT NULL,
    title TEXT DEFAULT '',
    emotional_tone TEXT DEFAULT '',
    key_plots TEXT DEFAULT '[]', -- JSON array
    opening_frame TEXT DEFAULT '',
    closing_frame TEXT DEFAULT '',
    FOREIGN KEY (script_id) REFERENCES scripts(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS assets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL,
    code TEXT NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('character', 'scene', 'prop')),
    name TEXT DEFAULT '',
    prompt TEXT DEFAULT '',
    description TEXT DEFAULT '',
    image_path TEXT,
    used_in_episodes TEXT DEFAULT '[]', -- JSON array
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS episodes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL,
    episode_number INTEGER NOT NULL,
    title TEXT DEFAULT '',
    raw_markdown TEXT DEFAULT '',
    file_path TEXT DEFAULT '',
    style_line TEXT DEFAULT '',
    sound_design TEXT DEFAULT '',
    reference_list TEXT DEFAULT '',
    end_frame_description TEXT DEFAULT '',
    raw_prompt TEXT DEFAULT '',
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
    UNIQUE(project_id, episode_number)
);

CREATE TABLE IF NOT EXISTS time_slots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    episode_id INTEGER NOT NULL,
    start_second INTEGER NOT NULL,
    end_second INTEGER NOT NULL,
    camera_movement TEXT DEFAULT '',
    description TEXT DEFAULT '',
    FOREIGN KEY (episode_id) REFERENCES episodes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS asset_slots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    episode_id INTEGER NOT NULL,
    slot_number INTEGER NOT NULL,
    slot_type TEXT DEFAULT 'image' CHECK (slot_type IN ('image', 'video')),
    asset_code TEXT DEFAULT '',
    description TEXT DEFAULT '',
    FOREIGN KEY (episode_id) REFERENCES episodes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS pipeline_stages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    project_id INTEGER NOT NULL,
    stage TEXT NOT NULL
        CHECK (stage IN ('script', 'assets', 'images', 'storyboard', 'video')),
    status TEXT DEFAULT 'pending'
        CHECK (status IN ('pending', 'in_progress', 'completed', 'needs_revision')),
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
    UNIQUE(project_id, stage)
);

CREATE INDEX IF NOT EXISTS idx_projects_folder ON projects(folder_name);
CREATE INDEX IF NOT EXISTS idx_script_episodes_script ON script_episodes(script_id);
CREATE INDEX IF NOT EXISTS idx_assets_project ON assets(project_id);
CREATE INDEX IF NOT EXISTS idx_episodes_project ON episodes(project_id);
CREATE INDEX IF NOT EXISTS idx_time_slots_episode ON time_slots(episode_id);
CREATE INDEX IF NOT EXISTS idx_asset_slots_episode ON asset_slots(episode_id);
"""

REQUIRED_TABLES = (
    "schema_info",
    "projects",
    "scripts",
    "script_episodes",
    "assets",
    "episodes",
    "time_slots",
    "asset_slots",
    "pipeline_stages",
)


class DatabaseSchema:
    """Manages database schema creation."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialize schema manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)

    def create_schema(self) -> None:
        """Create the complete database schema."""
        logger.info("Creating database schema", path=str(self.db_path))

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            conn.executescript(SCHEMA_SQL)
            conn.execute(
                "INSERT OR REPLACE INTO schema_info (version, description) "
                "VALUES (?, ?)",
                (SCHEMA_VERSION, f"Initial schema creation v{SCHEMA_VERSION}"),
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Database schema created successfully")

    def get_current_version(self) -> int:
        """Get the current schema version from the database.

        Returns:
            Current schema version, or 0 if not found
        """
        if not self.db_path.exists():
            return 0
        conn = sqlite3.connect(self.db_path)
        try:
            result = conn.execute("SELECT MAX(version) FROM schema_info").fetchone()
            return result[0] if result[0] is not None else 0
        except sqlite3.OperationalError:
            # Table doesn't exist yet
            return 0
        finally:
            conn.close()

    def validate_schema(self) -> bool:
        """Validate that all required tables exist.

        Returns:
            True if schema is valid
        """
        try:
            conn = sqlite3.connect(self.db_path)
            try:
                cursor = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table'"
                )
                existing_tables = {row[0] for row in cursor.fetchall()}
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Error validating schema", error=str(e))
            return False

        missing_tables = set(REQUIRED_TABLES) - existing_tables
        if missing_tables:
            logger.error("Missing tables", tables=sorted(missing_tables))
            return False
        return True


def create_database(db_path: str | Path) -> DatabaseSchema:
    """Create a new reelscript database with schema.

    Args:
        db_path: Path to SQLite database file

    Returns:
        DatabaseSchema instance
    """
    schema = DatabaseSchema(db_path)
    schema.create_schema()
    return schema


def initialize_database(db_path: str | Path) -> bool:
    """Create the schema unless the database is already current.

    Args:
        db_path: Path to SQLite database file

    Returns:
        True if the schema was created, False if it already existed
    """
    schema = DatabaseSchema(db_path)
    if schema.get_current_version() >= SCHEMA_VERSION and schema.validate_schema():
        logger.debug("Database is already at current schema version")
        return False
    schema.create_schema()
    return True

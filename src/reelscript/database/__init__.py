"""reelscript database package.

SQLite storage for projects, scripts, assets, episode storyboards and
pipeline stages.
"""

from .asset_ops import AssetOperations, asset_from_row
from .connection import DatabaseConnection
from .episode_ops import EpisodeOperations
from .pipeline_ops import PipelineOperations
from .project_ops import Project, ProjectOperations
from .schema import SCHEMA_VERSION, DatabaseSchema, create_database, initialize_database
from .script_ops import ScriptOperations

__all__ = [
    "SCHEMA_VERSION",
    "AssetOperations",
    "DatabaseConnection",
    "DatabaseSchema",
    "EpisodeOperations",
    "PipelineOperations",
    "Project",
    "ProjectOperations",
    "ScriptOperations",
    "asset_from_row",
    "create_database",
    "initialize_database",
]

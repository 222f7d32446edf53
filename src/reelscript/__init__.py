"""ReelScript: markdown and structured data for short-video production.

ReelScript parses scripts, asset lists and episode storyboards written in
markdown, stores them in SQLite and keeps human-editable mirror files on
disk in step with the database.
"""

from .config import ReelScriptSettings, get_logger, get_settings
from .parser import (
    AssetListDocument,
    Dialect,
    EpisodeDocument,
    ScriptDocument,
    parse_asset_list_document,
    parse_episode_document,
    parse_script_document,
    serialize_asset_list_document,
    serialize_episode_document,
    serialize_script_document,
)

__version__ = "0.1.0"

__all__ = [
    "AssetListDocument",
    "Dialect",
    "EpisodeDocument",
    "ReelScriptSettings",
    "ScriptDocument",
    "__version__",
    "get_logger",
    "get_settings",
    "parse_asset_list_document",
    "parse_episode_document",
    "parse_script_document",
    "serialize_asset_list_document",
    "serialize_episode_document",
    "serialize_script_document",
]

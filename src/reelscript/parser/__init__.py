"""Markdown transcoders for short-video production documents."""

from __future__ import annotations

from .asset_list import (
    AssetListTranscoder,
    parse_asset_list_document,
    serialize_asset_list_document,
)
from .camera import CAMERA_VOCABULARY, tag_camera_movements
from .episode import (
    EpisodeTranscoder,
    parse_episode_document,
    serialize_episode_document,
    split_episodes,
)
from .models import (
    TIME_WINDOWS,
    AssetListDocument,
    AssetRecord,
    AssetSlot,
    AssetSummaryRow,
    AssetType,
    ColorPlanEntry,
    Dialect,
    EpisodeDocument,
    ScriptDocument,
    ScriptEpisodeSummary,
    SlotType,
    TimeSlot,
)
from .numerals import chinese_to_int, int_to_chinese
from .script_document import (
    ScriptTranscoder,
    parse_script_document,
    serialize_script_document,
)

__all__ = [
    "CAMERA_VOCABULARY",
    "TIME_WINDOWS",
    "AssetListDocument",
    "AssetListTranscoder",
    "AssetRecord",
    "AssetSlot",
    "AssetSummaryRow",
    "AssetType",
    "ColorPlanEntry",
    "Dialect",
    "EpisodeDocument",
    "EpisodeTranscoder",
    "ScriptDocument",
    "ScriptEpisodeSummary",
    "ScriptTranscoder",
    "SlotType",
    "TimeSlot",
    "chinese_to_int",
    "int_to_chinese",
    "parse_asset_list_document",
    "parse_episode_document",
    "parse_script_document",
    "serialize_asset_list_document",
    "serialize_episode_document",
    "serialize_script_document",
    "split_episodes",
    "tag_camera_movements",
]

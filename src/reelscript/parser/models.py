"""Data models for short-video production documents."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

# The five fixed 3-second windows every storyboard is divided into
TIME_WINDOWS: tuple[tuple[int, int], ...] = (
    (0, 3),
    (3, 6),
    (6, 9),
    (9, 12),
    (12, 15),
)


class Dialect(str, Enum):
    """Markdown dialect used by asset-list and episode documents.

    INLINE renders fields as bold-labeled prose; QUOTED renders them as
    blockquote labels with fenced code blocks.
    """

    INLINE = "inline"
    QUOTED = "quoted"

    @classmethod
    def coerce(cls, value: Dialect | str | None) -> Dialect:
        """Accept enum members, their values, or the legacy project names."""
        if isinstance(value, Dialect):
            return value
        if value is None:
            return cls.INLINE
        normalized = str(value).strip().lower()
        if normalized in ("quoted", "yashan"):
            return cls.QUOTED
        if normalized in ("inline", "linchong"):
            return cls.INLINE
        raise ValueError(f"Unknown markdown dialect: {value!r}")


class AssetType(str, Enum):
    """Semantic type of a generated asset, encoded by its code prefix."""

    CHARACTER = "character"
    SCENE = "scene"
    PROP = "prop"

    @classmethod
    def from_code(cls, code: str) -> AssetType:
        """Derive the type from the first letter of an asset code.

        Unknown prefixes fall back to CHARACTER.
        """
        prefix = code[:1].upper()
        if prefix == "S":
            return cls.SCENE
        if prefix == "P":
            return cls.PROP
        return cls.CHARACTER


class SlotType(str, Enum):
    """Kind of media uploaded into an episode asset slot."""

    IMAGE = "image"
    VIDEO = "video"


@dataclass
class ScriptEpisodeSummary:
    """One episode entry of a script document."""

    episode_number: int
    title: str = ""
    emotional_tone: str = ""
    key_plots: list[str] = field(default_factory=list)
    opening_frame: str = ""
    closing_frame: str = ""


@dataclass
class ColorPlanEntry:
    """A row of the per-episode color plan table."""

    episode: str
    colors: str
    mood: str


@dataclass
class ScriptDocument:
    """Represents a parsed script document."""

    title: str = ""
    parameters: dict[str, str] = field(default_factory=dict)
    episodes: list[ScriptEpisodeSummary] = field(default_factory=list)
    emotional_arc: str | None = None
    color_plan: list[ColorPlanEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScriptDocument:
        """Build a document from the output of ``to_dict``."""
        return cls(
            title=data.get("title", ""),
            parameters=dict(data.get("parameters") or {}),
            episodes=[
                ScriptEpisodeSummary(**episode) for episode in data.get("episodes", [])
            ],
            emotional_arc=data.get("emotional_arc"),
            color_plan=[ColorPlanEntry(**row) for row in data.get("color_plan", [])],
        )


@dataclass
class AssetRecord:
    """A single character, scene or prop asset."""

    code: str
    name: str = ""
    prompt: str = ""
    description: str = ""
    used_in_episodes: list[str] = field(default_factory=list)

    @property
    def type(self) -> AssetType:
        """Asset type, always derived from the code prefix."""
        return AssetType.from_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary including the derived type."""
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class AssetSummaryRow:
    """A row of the per-category asset usage summary table."""

    category: str
    count: str
    usage: str


@dataclass
class AssetListDocument:
    """Represents a parsed asset-list document."""

    style_prefix: str = ""
    assets: list[AssetRecord] = field(default_factory=list)
    summary: list[AssetSummaryRow] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "style_prefix": self.style_prefix,
            "assets": [asset.to_dict() for asset in self.assets],
            "summary": [asdict(row) for row in self.summary],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssetListDocument:
        """Build a document from the output of ``to_dict``.

        A ``type`` key on an asset is ignored since the code decides it.
        """
        assets = []
        for item in data.get("assets", []):
            assets.append(
                AssetRecord(
                    code=item["code"],
                    name=item.get("name", ""),
                    prompt=item.get("prompt", ""),
                    description=item.get("description", ""),
                    used_in_episodes=list(item.get("used_in_episodes") or []),
                )
            )
        return cls(
            style_prefix=data.get("style_prefix", ""),
            assets=assets,
            summary=[AssetSummaryRow(**row) for row in data.get("summary", [])],
        )


@dataclass
class AssetSlot:
    """An upload slot referenced by the storyboard prompt."""

    slot_number: int
    slot_type: SlotType
    asset_code: str
    description: str = ""

    @property
    def label(self) -> str:
        """Chinese slot reference such as 图片1 or 视频2."""
        kind = "视频" if self.slot_type == SlotType.VIDEO else "图片"
        return f"{kind}{self.slot_number}"


@dataclass
class TimeSlot:
    """Visual description for one fixed time window."""

    start_second: int
    end_second: int
    camera_movement: str = ""
    description: str = ""

    @property
    def camera_tags(self) -> list[str]:
        """Camera movement tags as a list."""
        return [tag for tag in self.camera_movement.split(", ") if tag]


@dataclass
class EpisodeDocument:
    """Represents a parsed single-episode storyboard document."""

    title: str = ""
    episode_number: int = 0
    asset_slots: list[AssetSlot] = field(default_factory=list)
    style_line: str = ""
    time_slots: list[TimeSlot] = field(default_factory=list)
    sound_design: str = ""
    reference_list: str = ""
    end_frame_description: str = ""
    raw_prompt: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        for slot in data["asset_slots"]:
            slot["slot_type"] = SlotType(slot["slot_type"]).value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EpisodeDocument:
        """Build a document from the output of ``to_dict``."""
        return cls(
            title=data.get("title", ""),
            episode_number=int(data.get("episode_number", 0)),
            asset_slots=[
                AssetSlot(
                    slot_number=int(slot["slot_number"]),
                    slot_type=SlotType(slot.get("slot_type", "image")),
                    asset_code=slot.get("asset_code", ""),
                    description=slot.get("description", ""),
                )
                for slot in data.get("asset_slots", [])
            ],
            style_line=data.get("style_line", ""),
            time_slots=[TimeSlot(**slot) for slot in data.get("time_slots", [])],
            sound_design=data.get("sound_design", ""),
            reference_list=data.get("reference_list", ""),
            end_frame_description=data.get("end_frame_description", ""),
            raw_prompt=data.get("raw_prompt", ""),
        )

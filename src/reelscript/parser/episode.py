"""Episode storyboard transcoding.

An episode document holds an asset-upload table, a Seedance prompt split
into fixed 3-second windows, sound design, a reference list and an
end-frame description. Both dialects are supported.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import ClassVar

from reelscript.config import get_logger
from reelscript.parser.camera import join_tags, tag_camera_movements
from reelscript.parser.fields import (
    EPISODE_QUOTED_MARKERS,
    detect_dialect,
    fenced_blocks,
    is_separator_row,
)
from reelscript.parser.models import (
    TIME_WINDOWS,
    AssetSlot,
    Dialect,
    EpisodeDocument,
    SlotType,
    TimeSlot,
)

logger = get_logger(__name__)

SOUND_SEPARATOR = " | "


@lru_cache(maxsize=16)
def inline_window_rule(start: int, end: int) -> re.Pattern[str]:
    """Compile the ``**0-3秒画面：**`` rule for one window."""
    return re.compile(
        rf"\*\*{start}-{end}(?:s|秒)(?:画面)?(?:[：:]\*\*|\*\*[：:])[ \t]*\n?"
        r"([\s\S]*?)(?=\*\*\d+-\d+(?:s|秒)|【声音】|音效设计|【参考】|\Z)"
    )


@lru_cache(maxsize=16)
def quoted_window_rule(start: int, end: int) -> re.Pattern[str]:
    """Compile the ``0-3s: text`` rule for one window."""
    return re.compile(
        rf"^[ \t]*{start}-{end}s[:：][ \t]*"
        r"([^\n]*(?:\n(?![ \t]*\d+-\d+s[:：]|[ \t]*音效设计|[ \t]*【)[^\n]*)*)",
        re.M,
    )


def _flatten(text: str) -> str:
    return " ".join(line.strip() for line in text.split("\n") if line.strip())


class EpisodeTranscoder:
    """Parse and serialize single-episode storyboard documents."""

    TITLE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"^#[ \t]+(?:E(\d+)[ \t]*-[ \t]*)?(.+?)[ \t]*$", re.M
    )
    EPISODE_CODE: ClassVar[re.Pattern[str]] = re.compile(r"E(\d{2})")
    SLOT_ROW: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\|\s*@?(?:图片|视频)(\d+)\s*\|\s*([CSP]\d{2})\s*\|\s*(.*?)\s*\|"
    )
    VIDEO_MARKER = "视频"
    PROMPT_SECTION: ClassVar[re.Pattern[str]] = re.compile(
        r"^##[ \t]*Seedance[ \t]*Prompt[ \t]*\n([\s\S]*?)(?=\n---|\n##[ \t]*尾帧|\Z)",
        re.M | re.I,
    )
    # Lines that end the style line at the top of the prompt
    PROMPT_MARKER: ClassVar[re.Pattern[str]] = re.compile(
        r"^(?:\*\*\d+-\d+(?:s|秒)|\d+-\d+s[:：]|【声音】|音效设计|【参考】)"
    )
    SOUND_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"(?:【声音】|音效设计[：:]?)[ \t]*([\s\S]*?)(?=【参考】|\Z)"
    )
    SOUND_ITEM_PREFIX: ClassVar[re.Pattern[str]] = re.compile(r"^[-*•][ \t]*")
    REFERENCE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"【参考】[ \t]*([^\n]*)")
    END_FRAME_SECTION: ClassVar[re.Pattern[str]] = re.compile(
        r"^##[ \t]*尾帧描述[ \t]*\n([\s\S]*?)(?=\n---|\n\*分镜|\Z)", re.M
    )

    def parse(
        self, markdown: str, dialect: Dialect | str | None = None
    ) -> EpisodeDocument:
        """Parse a single-episode storyboard.

        Time windows without text are omitted rather than filled with empty
        slots. When no Seedance Prompt section exists the whole document is
        searched for windows, sound design and references.

        Args:
            markdown: Raw episode markdown
            dialect: Dialect to try first; sniffed from the text when omitted

        Returns:
            Parsed EpisodeDocument
        """
        if dialect is None:
            mode = detect_dialect(markdown, EPISODE_QUOTED_MARKERS)
        else:
            mode = Dialect.coerce(dialect)

        title, episode_number = self._parse_title(markdown)

        prompt_match = self.PROMPT_SECTION.search(markdown)
        if prompt_match:
            body = prompt_match.group(1)
            blocks = fenced_blocks(body)
            raw_prompt = blocks[0].strip() if blocks else body.strip()
            region = raw_prompt
            style_line = self._parse_style_line(raw_prompt)
        else:
            raw_prompt = ""
            region = markdown
            style_line = ""

        document = EpisodeDocument(
            title=title,
            episode_number=episode_number,
            asset_slots=self._parse_asset_slots(markdown),
            style_line=style_line,
            time_slots=self._parse_time_slots(region, mode),
            sound_design=self._parse_sound_design(region),
            reference_list=self._parse_reference(region),
            end_frame_description=self._parse_end_frame(markdown),
            raw_prompt=raw_prompt,
        )
        logger.debug(
            "Parsed episode document",
            episode=document.episode_number,
            dialect=mode.value,
            time_slots=len(document.time_slots),
            asset_slots=len(document.asset_slots),
        )
        return document

    def _parse_title(self, markdown: str) -> tuple[str, int]:
        match = self.TITLE_PATTERN.search(markdown)
        title = match.group(2).strip() if match else ""
        if match and match.group(1):
            return title, int(match.group(1))
        code = self.EPISODE_CODE.search(markdown)
        return title, int(code.group(1)) if code else 0

    def _parse_asset_slots(self, markdown: str) -> list[AssetSlot]:
        slots = []
        for line in markdown.split("\n"):
            if is_separator_row(line):
                continue
            match = self.SLOT_ROW.search(line)
            if not match:
                continue
            slots.append(
                AssetSlot(
                    slot_number=int(match.group(1)),
                    slot_type=(
                        SlotType.VIDEO if self.VIDEO_MARKER in line else SlotType.IMAGE
                    ),
                    asset_code=match.group(2),
                    description=match.group(3).strip(),
                )
            )
        return slots

    def _parse_style_line(self, prompt: str) -> str:
        lines = []
        for line in prompt.split("\n"):
            stripped = line.strip()
            if self.PROMPT_MARKER.match(stripped):
                break
            if stripped:
                lines.append(stripped)
        return " ".join(lines)

    def _parse_time_slots(self, region: str, mode: Dialect) -> list[TimeSlot]:
        families = [inline_window_rule, quoted_window_rule]
        if mode == Dialect.QUOTED:
            families.reverse()

        slots = []
        for start, end in TIME_WINDOWS:
            for rule in families:
                match = rule(start, end).search(region)
                if match:
                    description = _flatten(match.group(1))
                    slots.append(
                        TimeSlot(
                            start_second=start,
                            end_second=end,
                            camera_movement=join_tags(
                                tag_camera_movements(description)
                            ),
                            description=description,
                        )
                    )
                    break
        return slots

    def _parse_sound_design(self, region: str) -> str:
        match = self.SOUND_PATTERN.search(region)
        if not match:
            return ""
        label_line, *list_lines = match.group(1).split("\n")
        # Only list lines carry a marker; the label line is kept verbatim.
        parts = [label_line.strip()]
        for line in list_lines:
            parts.append(self.SOUND_ITEM_PREFIX.sub("", line.strip(), count=1))
        parts = [part for part in parts if part]
        return SOUND_SEPARATOR.join(parts)

    def _parse_reference(self, region: str) -> str:
        match = self.REFERENCE_PATTERN.search(region)
        return match.group(1).strip() if match else ""

    def _parse_end_frame(self, markdown: str) -> str:
        match = self.END_FRAME_SECTION.search(markdown)
        return match.group(1).strip() if match else ""

    def serialize(
        self, document: EpisodeDocument, dialect: Dialect | str = Dialect.INLINE
    ) -> str:
        """Render an episode storyboard in the requested dialect.

        The prompt is rebuilt from the structured fields; ``raw_prompt`` is
        not written back.
        """
        mode = Dialect.coerce(dialect)
        quoted = mode == Dialect.QUOTED
        lines: list[str] = [
            f"# E{document.episode_number:02d} - {document.title}",
            "",
            "## 素材上传清单",
            "",
        ]

        if quoted:
            lines.extend(
                ["| 上传位置 | 素材ID | 素材描述 |", "|----------|--------|----------|"]
            )
            for slot in document.asset_slots:
                row = f"| @{slot.label} | {slot.asset_code} | {slot.description} |"
                lines.append(row)
        else:
            lines.extend(["| 素材槽 | 文件 | 说明 |", "|--------|------|------|"])
            for slot in document.asset_slots:
                row = f"| {slot.label} | {slot.asset_code} | {slot.description} |"
                lines.append(row)

        lines.extend(["", "---", "", "## Seedance Prompt", ""])
        if quoted:
            lines.append("```")
            if document.style_line:
                lines.append(document.style_line)
            for slot in document.time_slots:
                lines.append(
                    f"{slot.start_second}-{slot.end_second}s: {slot.description}"
                )
            if document.sound_design:
                lines.append("音效设计：")
                lines.extend(
                    f"- {part}" for part in document.sound_design.split(SOUND_SEPARATOR)
                )
            if document.reference_list:
                lines.append(f"【参考】{document.reference_list}")
            lines.extend(["```", ""])
        else:
            if document.style_line:
                lines.extend([document.style_line, ""])
            for slot in document.time_slots:
                lines.extend(
                    [
                        f"**{slot.start_second}-{slot.end_second}秒画面：**",
                        slot.description,
                        "",
                    ]
                )
            if document.sound_design:
                lines.append(f"【声音】{document.sound_design}")
            if document.reference_list:
                lines.append(f"【参考】{document.reference_list}")
            lines.append("")

        lines.extend(
            ["---", "", "## 尾帧描述", "", document.end_frame_description, ""]
        )
        return "\n".join(lines)


EPISODE_BOUNDARY = re.compile(r"(?=^#[ \t]+E\d{2})", re.M)


def split_episodes(markdown: str) -> list[str]:
    """Split a multi-episode document on its ``# E<NN>`` headings.

    Text before the first heading is dropped. A document without any
    episode heading is returned whole.
    """
    fragments = EPISODE_BOUNDARY.split(markdown)
    if len(fragments) == 1:
        return [markdown] if markdown.strip() else []
    return [
        fragment
        for fragment in fragments
        if EPISODE_BOUNDARY.match(fragment) and fragment.strip()
    ]


_transcoder = EpisodeTranscoder()


def parse_episode_document(
    markdown: str, dialect: Dialect | str | None = None
) -> EpisodeDocument:
    """Parse an episode storyboard with the shared transcoder."""
    return _transcoder.parse(markdown, dialect)


def serialize_episode_document(
    document: EpisodeDocument, dialect: Dialect | str = Dialect.INLINE
) -> str:
    """Serialize an episode storyboard with the shared transcoder."""
    return _transcoder.serialize(document, dialect)

"""Script document transcoding.

A script document carries the project title, a production-parameter table,
one block per episode and optional emotional-arc and color-plan sections.
Scripts only exist in the inline dialect.
"""

from __future__ import annotations

import re
from typing import ClassVar

from reelscript.config import get_logger
from reelscript.parser.fields import (
    extract_labeled_line,
    extract_labeled_list,
    extract_table_rows,
    fenced_blocks,
)
from reelscript.parser.models import (
    ColorPlanEntry,
    ScriptDocument,
    ScriptEpisodeSummary,
)
from reelscript.parser.numerals import chinese_to_int, int_to_chinese
from reelscript.parser.sections import locate_sections

logger = get_logger(__name__)


class ScriptTranscoder:
    """Parse and serialize script documents."""

    TITLE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^#[ \t]+(.+?)[ \t]*$", re.M)
    TITLE_SUFFIX: ClassVar[re.Pattern[str]] = re.compile(
        r"\s*-\s*(?:剧本|script)$", re.IGNORECASE
    )
    PARAM_TABLE: ClassVar[re.Pattern[str]] = re.compile(
        r"\|\s*参数\s*\|\s*值\s*\|[\s\S]*?(?=\n---|\n##|\Z)"
    )
    PARAM_ROW: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\|\s*(.+?)\s*\|\s*(.+?)\s*\|"
    )
    EPISODE_HEADING: ClassVar[re.Pattern[str]] = re.compile(
        r"^###[ \t]*第([一二三四五六七八九十\d]+)集[：:][ \t]*(.+)$", re.M
    )
    # The last episode ends at the next level-2 heading (emotional arc, color plan)
    EPISODE_STOP: ClassVar[re.Pattern[str]] = re.compile(r"^##(?!#)", re.M)
    COLOR_ROW: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\|\s*E(\d+)\s*\|\s*(.+?)\s*\|\s*(.+?)\s*\|"
    )
    ARC_MARKER = "→"

    def parse(self, markdown: str) -> ScriptDocument:
        """Parse a script document.

        Missing sections produce empty values; this never raises on
        structurally incomplete input.

        Args:
            markdown: Raw script markdown

        Returns:
            Parsed ScriptDocument
        """
        document = ScriptDocument(
            title=self._parse_title(markdown),
            parameters=self._parse_parameters(markdown),
            episodes=self._parse_episodes(markdown),
            emotional_arc=self._parse_emotional_arc(markdown),
            color_plan=[
                ColorPlanEntry(episode=f"E{number}", colors=colors, mood=mood)
                for number, colors, mood in extract_table_rows(
                    markdown, self.COLOR_ROW
                )
            ],
        )
        logger.debug(
            "Parsed script document",
            title=document.title,
            parameters=len(document.parameters),
            episodes=len(document.episodes),
        )
        return document

    def _parse_title(self, markdown: str) -> str:
        match = self.TITLE_PATTERN.search(markdown)
        if not match:
            return ""
        return self.TITLE_SUFFIX.sub("", match.group(1)).strip()

    def _parse_parameters(self, markdown: str) -> dict[str, str]:
        match = self.PARAM_TABLE.search(markdown)
        if not match:
            return {}
        parameters: dict[str, str] = {}
        for name, value in extract_table_rows(
            match.group(0), self.PARAM_ROW, skip_first_cells=("参数",)
        ):
            parameters[name] = value
        return parameters

    def _parse_episodes(self, markdown: str) -> list[ScriptEpisodeSummary]:
        episodes = []
        for section in locate_sections(
            markdown, self.EPISODE_HEADING, stop_pattern=self.EPISODE_STOP
        ):
            episodes.append(
                ScriptEpisodeSummary(
                    episode_number=chinese_to_int(section.key),
                    title=section.title,
                    emotional_tone=extract_labeled_line(section.text, "情感基调"),
                    key_plots=extract_labeled_list(section.text, "关键情节"),
                    opening_frame=extract_labeled_line(section.text, "首帧画面"),
                    closing_frame=extract_labeled_line(section.text, "尾帧画面"),
                )
            )
        return episodes

    def _parse_emotional_arc(self, markdown: str) -> str | None:
        for block in fenced_blocks(markdown):
            if self.ARC_MARKER in block:
                return block.strip()
        return None

    def serialize(self, document: ScriptDocument) -> str:
        """Render a script document in the inline dialect.

        Args:
            document: Script to render

        Returns:
            Markdown text that ``parse`` reads back
        """
        lines: list[str] = [
            f"# {document.title} - 剧本",
            "",
            "## 制作参数",
            "",
            "| 参数 | 值 |",
            "|------|-----|",
        ]
        for name, value in document.parameters.items():
            lines.append(f"| {name} | {value} |")
        lines.extend(["", "---", "", "## 剧本结构", ""])

        for episode in document.episodes:
            lines.append(
                f"### 第{int_to_chinese(episode.episode_number)}集：{episode.title}"
            )
            lines.append("")
            if episode.emotional_tone:
                lines.extend([f"**情感基调：** {episode.emotional_tone}", ""])
            lines.append("**关键情节：**")
            lines.extend(f"- {plot}" for plot in episode.key_plots)
            lines.append("")
            if episode.opening_frame:
                lines.extend([f"**首帧画面：** {episode.opening_frame}", ""])
            if episode.closing_frame:
                lines.extend([f"**尾帧画面：** {episode.closing_frame}", ""])
            lines.extend(["---", ""])

        if document.emotional_arc:
            lines.extend(
                ["## 情感弧线", "", "```", document.emotional_arc, "```", ""]
            )

        if document.color_plan:
            lines.extend(
                [
                    "## 色彩规划",
                    "",
                    "| 集数 | 主色调 | 情绪 |",
                    "|------|--------|------|",
                ]
            )
            for entry in document.color_plan:
                lines.append(f"| {entry.episode} | {entry.colors} | {entry.mood} |")
            lines.append("")

        return "\n".join(lines)


_transcoder = ScriptTranscoder()


def parse_script_document(markdown: str) -> ScriptDocument:
    """Parse a script document with the shared transcoder."""
    return _transcoder.parse(markdown)


def serialize_script_document(document: ScriptDocument) -> str:
    """Serialize a script document with the shared transcoder."""
    return _transcoder.serialize(document)

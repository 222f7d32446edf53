"""Asset-list document transcoding.

Asset lists exist in both dialects. The parser sniffs the dialect unless
one is given; the serializer is told which one to write.
"""

from __future__ import annotations

import re
from typing import ClassVar

from reelscript.config import get_logger
from reelscript.parser.fields import (
    ASSET_QUOTED_MARKERS,
    detect_dialect,
    extract_fenced_after,
    extract_fenced_content,
    extract_quoted_block,
    extract_table_rows,
)
from reelscript.parser.models import (
    AssetListDocument,
    AssetRecord,
    AssetSummaryRow,
    AssetType,
    Dialect,
)
from reelscript.parser.sections import locate_sections

logger = get_logger(__name__)

# Category heading and overview type label per asset type, in output order
ASSET_GROUPS: tuple[tuple[AssetType, str, str], ...] = (
    (AssetType.CHARACTER, "角色类素材 (Characters)", "角色"),
    (AssetType.SCENE, "场景类素材 (Scenes)", "场景"),
    (AssetType.PROP, "道具类素材 (Props)", "道具"),
)

SUMMARY_CATEGORIES: tuple[str, ...] = (
    "角色素材",
    "场景素材",
    "道具素材",
    "角色",
    "场景",
    "道具",
)


def _quote_lines(text: str) -> list[str]:
    """Prefix every line of ``text`` with the blockquote marker."""
    return [f"> {line}".rstrip() for line in text.split("\n")]


class AssetListTranscoder:
    """Parse and serialize asset-list documents in either dialect."""

    STYLE_HEADING: ClassVar[re.Pattern[str]] = re.compile(
        r"^#{1,6}[^\n]*风格前缀[^\n]*$", re.M
    )
    NEXT_HEADING: ClassVar[re.Pattern[str]] = re.compile(r"^#{1,6}\s", re.M)
    ASSET_HEADING: ClassVar[re.Pattern[str]] = re.compile(
        r"^###[ \t]+([CSP]\d{2})[ \t]*[—–-][ \t]*(.+)$", re.M
    )
    ASSET_STOP: ClassVar[re.Pattern[str]] = re.compile(r"^##(?!#)", re.M)
    OVERVIEW_ROW: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\|\s*([CSP]\d{2})\s*\|\s*(.*?)\s*\|\s*(.*?)\s*\|\s*(.*?)\s*\|"
    )
    SUMMARY_ROW: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*\|\s*("
        + "|".join(SUMMARY_CATEGORIES)
        + r")\s*\|\s*(.+?)\s*\|\s*(.+?)\s*\|"
    )
    EPISODE_SEPARATOR: ClassVar[re.Pattern[str]] = re.compile(r"[,，、]")
    # Inline prompts run until the next heading or horizontal rule
    PROSE_STOP: ClassVar[tuple[str, ...]] = ("#", "---")

    def parse(
        self, markdown: str, dialect: Dialect | str | None = None
    ) -> AssetListDocument:
        """Parse an asset-list document.

        Args:
            markdown: Raw asset-list markdown
            dialect: Dialect to read; sniffed from the text when omitted

        Returns:
            Parsed AssetListDocument
        """
        if dialect is None:
            mode = detect_dialect(markdown, ASSET_QUOTED_MARKERS)
        else:
            mode = Dialect.coerce(dialect)

        usage = self._parse_usage(markdown)
        assets = []
        for section in locate_sections(
            markdown, self.ASSET_HEADING, stop_pattern=self.ASSET_STOP
        ):
            if mode == Dialect.QUOTED:
                description = extract_quoted_block(section.text, "画面描述")
                prompt = extract_fenced_after(section.text, ("生成提示词",))
                if not prompt:
                    prompt = extract_fenced_content(section.text)
            else:
                description = ""
                prompt = self._prose_after_heading(section.text)
            assets.append(
                AssetRecord(
                    code=section.key,
                    name=section.title,
                    prompt=prompt,
                    description=description,
                    used_in_episodes=usage.get(section.key, []),
                )
            )

        document = AssetListDocument(
            style_prefix=self._parse_style_prefix(markdown),
            assets=assets,
            summary=[
                AssetSummaryRow(category=category, count=count, usage=used)
                for category, count, used in extract_table_rows(
                    markdown, self.SUMMARY_ROW
                )
            ],
        )
        logger.debug(
            "Parsed asset list document",
            dialect=mode.value,
            assets=len(document.assets),
        )
        return document

    def _parse_style_prefix(self, markdown: str) -> str:
        heading = self.STYLE_HEADING.search(markdown)
        if not heading:
            return ""
        following = self.NEXT_HEADING.search(markdown, heading.end())
        end = following.start() if following else len(markdown)
        return extract_fenced_content(markdown[heading.end() : end])

    def _parse_usage(self, markdown: str) -> dict[str, list[str]]:
        usage: dict[str, list[str]] = {}
        for code, _type_label, _name, episodes in extract_table_rows(
            markdown, self.OVERVIEW_ROW
        ):
            if code in usage:
                continue
            usage[code] = [
                item.strip()
                for item in self.EPISODE_SEPARATOR.split(episodes)
                if item.strip()
            ]
        return usage

    def _prose_after_heading(self, section: str) -> str:
        lines = []
        for line in section.split("\n")[1:]:
            stripped = line.strip()
            if stripped.startswith(self.PROSE_STOP):
                break
            if stripped:
                lines.append(stripped)
        return " ".join(lines)

    def serialize(
        self, document: AssetListDocument, dialect: Dialect | str = Dialect.INLINE
    ) -> str:
        """Render an asset list in the requested dialect.

        Assets are grouped character, scene, prop; the overview table is
        always written.
        """
        mode = Dialect.coerce(dialect)
        quoted = mode == Dialect.QUOTED
        lines: list[str] = ["# 素材清单", ""]

        if document.style_prefix:
            if quoted:
                lines.extend(["## 统一风格前缀", "", "> ```"])
                lines.extend(_quote_lines(document.style_prefix))
                lines.append("> ```")
            else:
                lines.extend(
                    [
                        "## 风格前缀（适用于所有素材）",
                        "",
                        "```",
                        document.style_prefix,
                        "```",
                    ]
                )
            lines.extend(["", "---", ""])

        for asset_type, group_heading, _label in ASSET_GROUPS:
            group = [asset for asset in document.assets if asset.type == asset_type]
            if not group:
                continue
            lines.extend([f"## {group_heading}", ""])
            for asset in group:
                if quoted:
                    lines.extend(
                        [
                            f"### {asset.code} — {asset.name}",
                            "",
                            f"> **画面描述**：{asset.description}",
                            ">",
                            "> **生成提示词**：",
                            "> ```",
                            *_quote_lines(asset.prompt),
                            "> ```",
                            "",
                        ]
                    )
                else:
                    lines.extend([f"### {asset.code} - {asset.name}", ""])
                    if asset.prompt:
                        lines.extend([asset.prompt, ""])
            lines.extend(["---", ""])

        labels = {asset_type: label for asset_type, _heading, label in ASSET_GROUPS}
        lines.extend(
            [
                "## 素材编号总览",
                "",
                "| 编号 | 类型 | 名称 | 用于集数 |",
                "|------|------|------|----------|",
            ]
        )
        for asset in document.assets:
            episodes = ", ".join(asset.used_in_episodes)
            lines.append(
                f"| {asset.code} | {labels[asset.type]} | {asset.name} | {episodes} |"
            )
        lines.append("")

        if document.summary:
            lines.extend(
                [
                    "## 素材统计",
                    "",
                    "| 类别 | 数量 | 用途 |",
                    "|------|------|------|",
                ]
            )
            for row in document.summary:
                lines.append(f"| {row.category} | {row.count} | {row.usage} |")
            lines.append("")

        return "\n".join(lines)


_transcoder = AssetListTranscoder()


def parse_asset_list_document(
    markdown: str, dialect: Dialect | str | None = None
) -> AssetListDocument:
    """Parse an asset list with the shared transcoder."""
    return _transcoder.parse(markdown, dialect)


def serialize_asset_list_document(
    document: AssetListDocument, dialect: Dialect | str = Dialect.INLINE
) -> str:
    """Serialize an asset list with the shared transcoder."""
    return _transcoder.serialize(document, dialect)

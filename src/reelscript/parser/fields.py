"""Single-field extraction rules shared by all document transcoders.

Every extractor is tolerant of absence: a missing field yields an empty
string or list, never an exception. Rules are compiled once per label and
reused, so each transcoder composes the same small grammar:

- labeled line:   ``**标签：** value``
- labeled list:   ``**标签：**`` followed by ``- item`` lines
- quoted block:   ``> **标签**：value`` spanning ``>`` lines
- fenced block:   the first triple-backtick block
- table row:      a pipe-delimited row matching a column pattern
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from re import Pattern

from markdown_it import MarkdownIt

from reelscript.parser.models import Dialect

COLON = "[：:]"

# Substrings that only appear in quoted-dialect asset lists
ASSET_QUOTED_MARKERS: tuple[str, ...] = ("> **画面描述**", "> **生成提示词**")

# Substrings that only appear in quoted-dialect storyboards
EPISODE_QUOTED_MARKERS: tuple[str, ...] = ("| 上传位置", "@图片", "@视频", "音效设计")

_LIST_ITEM = re.compile(r"^\s*(?:[-*•]|\d+[.、)])\s+(.+?)\s*$")
_SEPARATOR_ROW = re.compile(r"^\s*\|?(?:\s*:?-{2,}:?\s*\|)+\s*:?-*:?\s*$")
_QUOTE_PREFIX = re.compile(r"^\s*>\s?")

_md = MarkdownIt("commonmark")


@lru_cache(maxsize=64)
def labeled_line_rule(label: str) -> Pattern[str]:
    """Compile the rule for a bold label followed by its value.

    Accepts the colon inside or outside the bold markers and a value on the
    same line or on the line directly below.
    """
    return re.compile(
        rf"\*\*{re.escape(label)}(?:{COLON}\*\*|\*\*{COLON})[ \t]*\n?[ \t]*"
        rf"(?!\*\*|---|#)(\S[^\n]*)"
    )


@lru_cache(maxsize=64)
def labeled_header_rule(label: str) -> Pattern[str]:
    """Compile the rule for a bold label that introduces a block."""
    return re.compile(
        rf"\*\*{re.escape(label)}(?:{COLON}\*\*|\*\*{COLON})[ \t]*$",
        re.MULTILINE,
    )


@lru_cache(maxsize=64)
def quoted_label_rule(label: str) -> Pattern[str]:
    """Compile the rule for a blockquote label such as ``> **画面描述**：``."""
    return re.compile(
        rf"^\s*>\s*\*\*{re.escape(label)}(?:\*\*{COLON}|{COLON}\*\*)[ \t]*(.*)$",
        re.MULTILINE,
    )


def extract_labeled_line(section: str, label: str) -> str:
    """Return the trimmed value of ``**label：** value`` or ``""``."""
    match = labeled_line_rule(label).search(section)
    return match.group(1).strip() if match else ""


def extract_labeled_list(section: str, label: str) -> list[str]:
    """Return the items listed under ``**label：**``.

    Collection stops at the next bold label, heading or rule, or at the
    first blank line after at least one item.
    """
    match = labeled_header_rule(label).search(section)
    if not match:
        return []

    items: list[str] = []
    for line in section[match.end() :].split("\n")[1:]:
        stripped = line.strip()
        if not stripped:
            if items:
                break
            continue
        if stripped.startswith(("**", "#", "---", "|")):
            break
        item = _LIST_ITEM.match(line)
        if item:
            items.append(item.group(1))
    return items


def extract_quoted_block(section: str, label: str) -> str:
    """Return the text of ``> **label**：value`` joined across ``>`` lines.

    Continuation lines are the following ``>`` lines up to the next quoted
    label, a quoted fence, or the first line outside the blockquote.
    """
    match = quoted_label_rule(label).search(section)
    if not match:
        return ""

    parts = [match.group(1).strip()]
    for line in section[match.end() :].split("\n")[1:]:
        if not _QUOTE_PREFIX.match(line):
            break
        content = _QUOTE_PREFIX.sub("", line, count=1).strip()
        if content.startswith(("**", "```")):
            break
        parts.append(content)
    return " ".join(part for part in parts if part)


def fenced_blocks(section: str) -> list[str]:
    """Return the contents of every fenced code block, in order.

    Blockquote markers are already removed from fences nested in quotes.
    """
    return [token.content for token in _md.parse(section) if token.type == "fence"]


def extract_fenced_content(section: str) -> str:
    """Return the trimmed content of the first fenced code block or ``""``."""
    blocks = fenced_blocks(section)
    return blocks[0].strip() if blocks else ""


def extract_fenced_after(document: str, keywords: Iterable[str]) -> str:
    """Return the first fenced block that follows any of ``keywords``."""
    positions = [document.find(keyword) for keyword in keywords]
    found = [pos for pos in positions if pos != -1]
    if not found:
        return ""
    return extract_fenced_content(document[min(found) :])


def split_table_cells(line: str) -> list[str]:
    """Split a pipe-delimited table row into stripped cells."""
    stripped = line.strip()
    if not stripped.startswith("|"):
        return []
    return [cell.strip() for cell in stripped.strip("|").split("|")]


def is_separator_row(line: str) -> bool:
    """Return True for ``|---|:---:|`` style alignment rows."""
    return bool(_SEPARATOR_ROW.match(line))


def extract_table_rows(
    section: str,
    column_pattern: Pattern[str] | str,
    skip_first_cells: Iterable[str] = (),
) -> list[tuple[str, ...]]:
    """Return the stripped groups of every table row matching ``column_pattern``.

    Separator rows and rows whose first cell is in ``skip_first_cells``
    (header labels) are skipped.
    """
    if isinstance(column_pattern, str):
        column_pattern = re.compile(column_pattern)
    skip = set(skip_first_cells)

    rows: list[tuple[str, ...]] = []
    for line in section.split("\n"):
        if "|" not in line or is_separator_row(line):
            continue
        cells = split_table_cells(line)
        if cells and cells[0] in skip:
            continue
        match = column_pattern.search(line)
        if match:
            rows.append(tuple((group or "").strip() for group in match.groups()))
    return rows


def strip_quote_markers(text: str) -> str:
    """Remove a leading ``>`` from every line of ``text``."""
    return "\n".join(_QUOTE_PREFIX.sub("", line, count=1) for line in text.split("\n"))


def detect_dialect(
    document: str, markers: Iterable[str] = ASSET_QUOTED_MARKERS
) -> Dialect:
    """Guess the dialect of a whole document from marker substrings.

    The guess is global: a document mixing both styles is classified by
    whichever markers appear anywhere in it.
    """
    if any(marker in document for marker in markers):
        return Dialect.QUOTED
    return Dialect.INLINE

"""Heading-delimited section location within markdown documents."""

from __future__ import annotations

import re
from dataclasses import dataclass
from re import Pattern


@dataclass(frozen=True)
class Section:
    """A heading occurrence and the text it governs.

    Attributes:
        key: First capture group of the heading pattern (number or code)
        title: Second capture group of the heading pattern, stripped
        start: Offset of the heading in the document
        end: Offset where the next section (or the document) ends
        text: The document slice ``[start, end)``
    """

    key: str
    title: str
    start: int
    end: int
    text: str


def locate_sections(
    document: str,
    heading_pattern: Pattern[str] | str,
    stop_pattern: Pattern[str] | str | None = None,
) -> list[Section]:
    """Find every heading match and slice the document between them.

    Each section runs from its heading to the next heading match. The last
    section runs to the first ``stop_pattern`` match after it, or to the end
    of the document.

    Args:
        document: Full markdown text
        heading_pattern: Regex whose first two groups are the key and title
        stop_pattern: Optional regex terminating the final section

    Returns:
        Sections in document order; empty when nothing matches
    """
    if isinstance(heading_pattern, str):
        heading_pattern = re.compile(heading_pattern, re.MULTILINE)
    if isinstance(stop_pattern, str):
        stop_pattern = re.compile(stop_pattern, re.MULTILINE)

    matches = list(heading_pattern.finditer(document))
    sections: list[Section] = []
    for index, match in enumerate(matches):
        start = match.start()
        if index + 1 < len(matches):
            end = matches[index + 1].start()
        else:
            end = len(document)
            if stop_pattern is not None:
                stop = stop_pattern.search(document, match.end())
                if stop:
                    end = stop.start()

        groups = match.groups()
        key = groups[0] if groups and groups[0] is not None else ""
        title = groups[1] if len(groups) > 1 and groups[1] is not None else ""
        sections.append(
            Section(
                key=key,
                title=title.strip(),
                start=start,
                end=end,
                text=document[start:end],
            )
        )
    return sections

"""Tests for heading-delimited section location."""

import re

from reelscript.parser.sections import Section, locate_sections

HEADING = re.compile(r"^###[ \t]+([CSP]\d{2})[ \t]*-[ \t]*(.+)$", re.M)
LEVEL_TWO = re.compile(r"^##(?!#)", re.M)

DOCUMENT = """# 素材清单

### C01 - 林小雨
短发女孩

### S01 - 街道
雨夜街道

## 素材编号总览
| C01 | 角色 |
"""


class TestLocateSections:
    """Test locate_sections."""

    def test_sections_between_headings(self):
        """Test that each section runs to the next heading."""
        sections = locate_sections(DOCUMENT, HEADING, stop_pattern=LEVEL_TWO)

        assert [section.key for section in sections] == ["C01", "S01"]
        assert [section.title for section in sections] == ["林小雨", "街道"]
        assert sections[0].text == "### C01 - 林小雨\n短发女孩\n\n"
        assert sections[0].end == sections[1].start

    def test_last_section_stops_at_stop_pattern(self):
        """Test that the final section ends at the stop pattern."""
        sections = locate_sections(DOCUMENT, HEADING, stop_pattern=LEVEL_TWO)

        assert sections[-1].text == "### S01 - 街道\n雨夜街道\n\n"
        assert "素材编号总览" not in sections[-1].text

    def test_last_section_runs_to_end_without_stop_pattern(self):
        """Test that the final section reaches the end of the document."""
        sections = locate_sections(DOCUMENT, HEADING)

        assert sections[-1].end == len(DOCUMENT)
        assert "素材编号总览" in sections[-1].text

    def test_string_patterns_are_compiled_multiline(self):
        """Test that string patterns behave like compiled multiline ones."""
        sections = locate_sections(
            DOCUMENT, r"^###[ \t]+([CSP]\d{2})[ \t]*-[ \t]*(.+)$", r"^##(?!#)"
        )

        assert len(sections) == 2
        assert isinstance(sections[0], Section)

    def test_no_matches(self):
        """Test that a document without headings yields no sections."""
        assert locate_sections("plain text only", HEADING) == []

    def test_missing_title_group(self):
        """Test headings whose pattern has only a key group."""
        sections = locate_sections("## E01\nbody", re.compile(r"^## (E\d{2})$", re.M))

        assert sections[0].key == "E01"
        assert sections[0].title == ""

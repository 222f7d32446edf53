"""Tests for asset-list document transcoding."""

import pytest

from reelscript.parser import (
    AssetListDocument,
    AssetRecord,
    AssetSummaryRow,
    AssetType,
    Dialect,
    parse_asset_list_document,
    serialize_asset_list_document,
)


@pytest.fixture
def sample_assets():
    """An asset list with one asset of each type."""
    return AssetListDocument(
        style_prefix="水墨风格",
        assets=[
            AssetRecord(
                code="C01",
                name="林小雨",
                prompt="short hair girl, black raincoat",
                description="短发女孩",
                used_in_episodes=["E01", "E02"],
            ),
            AssetRecord(code="S01", name="街道", prompt="rainy street"),
            AssetRecord(code="P01", name="黑伞", prompt="old black umbrella"),
        ],
    )


class TestAssetType:
    """Test type derivation from asset codes."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("C01", AssetType.CHARACTER),
            ("S07", AssetType.SCENE),
            ("P12", AssetType.PROP),
            ("X99", AssetType.CHARACTER),
            ("", AssetType.CHARACTER),
        ],
    )
    def test_from_code(self, code, expected):
        """Test each prefix and the fallback."""
        assert AssetType.from_code(code) == expected

    def test_scene_code_ignores_surrounding_text(self):
        """Test that the heading text cannot change a scene into a character."""
        markdown = "### S07 - 角色林小雨的房间\n\n卧室，角色素材\n"
        document = parse_asset_list_document(markdown)

        assert document.assets[0].type == AssetType.SCENE
        assert document.assets[0].to_dict()["type"] == "scene"


class TestParseInlineAssetList:
    """Test parsing inline-dialect asset lists."""

    def test_fixture(self, fixture_text):
        """Test the full inline fixture."""
        document = parse_asset_list_document(fixture_text("assets_inline.md"))

        assert document.style_prefix == "水墨赛博朋克风格，高对比度，电影感"
        assert [asset.code for asset in document.assets] == ["C01", "C02", "S01", "P01"]
        assert [asset.name for asset in document.assets] == [
            "林小雨",
            "老陈",
            "雨夜街道",
            "黑伞",
        ]
        assert document.assets[0].prompt == "短发女孩，黑色雨衣，眼神倔强"
        assert document.assets[3].prompt == "一把旧的黑色长柄伞"
        assert all(asset.description == "" for asset in document.assets)

    def test_usage_from_overview(self, fixture_text):
        """Test episode usage with mixed separators and empty cells."""
        document = parse_asset_list_document(fixture_text("assets_inline.md"))
        usage = {asset.code: asset.used_in_episodes for asset in document.assets}

        assert usage == {
            "C01": ["E01", "E02"],
            "C02": ["E02"],
            "S01": ["E01", "E02"],
            "P01": [],
        }

    def test_summary_rows(self, fixture_text):
        """Test the per-category summary table."""
        document = parse_asset_list_document(fixture_text("assets_inline.md"))

        assert document.summary == [
            AssetSummaryRow(category="角色", count="2", usage="主角与配角"),
            AssetSummaryRow(category="场景", count="1", usage="全部集数"),
        ]

    def test_empty_document(self):
        """Test that empty input yields an empty document."""
        assert parse_asset_list_document("") == AssetListDocument()


class TestParseQuotedAssetList:
    """Test parsing quoted-dialect asset lists."""

    def test_fixture(self, fixture_text):
        """Test the full quoted fixture."""
        document = parse_asset_list_document(fixture_text("assets_quoted.md"))

        assert document.style_prefix == "古风写实，柔和光影"
        general, courtyard = document.assets
        assert general.code == "C01"
        assert general.name == "张世杰"
        assert general.description == "南宋将领，身披铠甲 神情坚毅"
        assert general.prompt == "song dynasty general, armor, determined face"
        assert general.used_in_episodes == ["E01", "E03"]
        assert courtyard.type == AssetType.SCENE

    def test_description_and_unlabeled_fence(self):
        """Test a quoted description followed by a bare fenced prompt."""
        markdown = (
            "### S01 — 古代庭院\n\n"
            "> **画面描述**：古代庭院\n\n"
            "```\nancient courtyard, cinematic\n```\n"
        )
        asset = parse_asset_list_document(markdown).assets[0]

        assert asset.description == "古代庭院"
        assert asset.prompt == "ancient courtyard, cinematic"

    def test_missing_fence_degrades_to_empty_prompt(self):
        """Test that a quoted asset without any fence keeps an empty prompt."""
        markdown = "### C01 — 无名\n\n> **画面描述**：只有描述\n"
        asset = parse_asset_list_document(markdown).assets[0]

        assert asset.description == "只有描述"
        assert asset.prompt == ""

    def test_explicit_dialect_overrides_sniffing(self):
        """Test that an explicit inline dialect reads prose prompts."""
        markdown = "### C01 - 林小雨\n\n> **画面描述**：描述\n"
        document = parse_asset_list_document(markdown, Dialect.INLINE)

        assert document.assets[0].description == ""
        assert document.assets[0].prompt == "> **画面描述**：描述"


class TestSerializeAssetList:
    """Test rendering asset lists."""

    def test_inline_layout(self, sample_assets):
        """Test inline headings, prompts and the overview table."""
        markdown = serialize_asset_list_document(sample_assets, Dialect.INLINE)

        assert markdown.startswith("# 素材清单\n")
        assert "## 风格前缀（适用于所有素材）\n\n```\n水墨风格\n```" in markdown
        assert "## 角色类素材 (Characters)" in markdown
        assert "### C01 - 林小雨\n\nshort hair girl, black raincoat" in markdown
        assert "| C01 | 角色 | 林小雨 | E01, E02 |" in markdown
        assert "| P01 | 道具 | 黑伞 |  |" in markdown
        assert "> **画面描述**" not in markdown
        assert "## 素材统计" not in markdown

    def test_quoted_layout(self, sample_assets):
        """Test quoted headings, labels and fences."""
        markdown = serialize_asset_list_document(sample_assets, "quoted")

        assert "## 统一风格前缀\n\n> ```\n> 水墨风格\n> ```" in markdown
        assert "### C01 — 林小雨" in markdown
        assert "> **画面描述**：短发女孩" in markdown
        assert "> **生成提示词**：\n> ```\n> short hair girl, black raincoat\n> ```" in (
            markdown
        )

    def test_groups_follow_type_order(self):
        """Test that assets are grouped character, scene, prop."""
        document = AssetListDocument(
            assets=[
                AssetRecord(code="P01", name="伞"),
                AssetRecord(code="C01", name="人"),
                AssetRecord(code="S01", name="街"),
            ]
        )
        markdown = serialize_asset_list_document(document)

        assert markdown.index("### C01") < markdown.index("### S01")
        assert markdown.index("### S01") < markdown.index("### P01")
        assert "## 风格前缀" not in markdown

    def test_summary_written_when_present(self):
        """Test the optional summary table."""
        document = AssetListDocument(
            assets=[AssetRecord(code="C01", name="人")],
            summary=[AssetSummaryRow(category="角色", count="1", usage="全部")],
        )
        markdown = serialize_asset_list_document(document)

        assert "## 素材统计" in markdown
        assert "| 角色 | 1 | 全部 |" in markdown

    @pytest.mark.parametrize("dialect", [Dialect.INLINE, Dialect.QUOTED])
    def test_round_trip(self, dialect):
        """Test parse(serialize(doc)) in both dialects."""
        description = "短发女孩" if dialect == Dialect.QUOTED else ""
        document = AssetListDocument(
            style_prefix="水墨风格",
            assets=[
                AssetRecord(
                    code="C01",
                    name="林小雨",
                    prompt="short hair girl",
                    description=description,
                    used_in_episodes=["E01", "E02"],
                ),
                AssetRecord(code="S01", name="街道", prompt="rainy street"),
            ],
            summary=[AssetSummaryRow(category="场景", count="1", usage="E01")],
        )
        markdown = serialize_asset_list_document(document, dialect)

        assert parse_asset_list_document(markdown, dialect) == document
        assert parse_asset_list_document(markdown) == document

    def test_quoted_multiline_prompt_and_style_prefix(self):
        """Test that every line of a multi-line fence stays inside the quote."""
        document = AssetListDocument(
            style_prefix="ink wash,\nsoft light",
            assets=[
                AssetRecord(
                    code="C01",
                    name="张世杰",
                    prompt="general, armor\ndetermined face",
                    description="南宋将领",
                )
            ],
        )
        markdown = serialize_asset_list_document(document, Dialect.QUOTED)

        assert "> ```\n> ink wash,\n> soft light\n> ```" in markdown
        assert "> ```\n> general, armor\n> determined face\n> ```" in markdown
        assert parse_asset_list_document(markdown, Dialect.QUOTED) == document

    def test_inline_multiline_style_prefix(self):
        """Test that the inline fence keeps a multi-line style prefix."""
        document = AssetListDocument(
            style_prefix="ink wash,\nsoft light",
            assets=[AssetRecord(code="S01", name="崖山", prompt="stormy coast")],
        )
        markdown = serialize_asset_list_document(document, Dialect.INLINE)

        parsed = parse_asset_list_document(markdown, Dialect.INLINE)
        assert parsed.style_prefix == "ink wash,\nsoft light"

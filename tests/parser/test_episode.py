"""Tests for episode storyboard transcoding."""

from dataclasses import replace

import pytest

from reelscript.parser import (
    AssetSlot,
    Dialect,
    EpisodeDocument,
    SlotType,
    TimeSlot,
    parse_episode_document,
    serialize_episode_document,
    split_episodes,
)


@pytest.fixture
def sample_episode():
    """A storyboard using three of the five windows."""
    return EpisodeDocument(
        title="雨中奔跑",
        episode_number=3,
        asset_slots=[
            AssetSlot(1, SlotType.IMAGE, "C01", "林小雨正面"),
            AssetSlot(1, SlotType.VIDEO, "S01", "街道动态"),
        ],
        style_line="水墨赛博朋克风格，冷色调",
        time_slots=[
            TimeSlot(0, 3, "推镜头", "推镜头，雨夜街道"),
            TimeSlot(6, 9, "", "女孩回头"),
            TimeSlot(12, 15, "俯拍", "俯拍黑伞"),
        ],
        sound_design="雨声 | 脚步声",
        reference_list="@图片1 林小雨",
        end_frame_description="黑伞静止",
    )


class TestParseInlineEpisode:
    """Test parsing inline-dialect storyboards."""

    def test_header_and_slots(self, fixture_text):
        """Test the title and the upload table."""
        document = parse_episode_document(fixture_text("episode_inline.md"))

        assert document.episode_number == 1
        assert document.title == "雨中奔跑"
        assert document.asset_slots == [
            AssetSlot(1, SlotType.IMAGE, "C01", "林小雨正面"),
            AssetSlot(2, SlotType.IMAGE, "S01", "雨夜街道"),
            AssetSlot(1, SlotType.VIDEO, "C01", "奔跑动作参考"),
        ]

    def test_prompt_fields(self, fixture_text):
        """Test style line, windows, sound design and references."""
        document = parse_episode_document(fixture_text("episode_inline.md"))

        assert document.style_line == "水墨赛博朋克风格，冷色调，9:16竖屏"
        windows = [(slot.start_second, slot.end_second) for slot in document.time_slots]
        assert windows == [
            (0, 3),
            (3, 6),
            (6, 9),
            (9, 12),
            (12, 15),
        ]
        assert document.time_slots[1].description == "跟镜头，女孩在积水中奔跑 溅起水花"
        assert document.time_slots[2].description == "女孩停下回头，面部特写"
        assert document.time_slots[4].description == "推近黑伞，画面定格"
        assert document.sound_design == "雨声渐强 | 脚步声"
        assert document.reference_list == "@图片1 林小雨，@图片2 街道"
        assert document.end_frame_description == "黑伞在雨中静止，伞下看不清人脸"
        assert document.raw_prompt.startswith("水墨赛博朋克风格")
        assert document.raw_prompt.endswith("@图片2 街道")

    def test_camera_tags(self, fixture_text):
        """Test that every window is tagged from its description."""
        document = parse_episode_document(fixture_text("episode_inline.md"))

        assert [slot.camera_tags for slot in document.time_slots] == [
            ["高空俯拍", "俯拍"],
            ["跟镜头"],
            ["面部特写"],
            ["镜头拉远", "拉远"],
            ["推近"],
        ]
        assert document.time_slots[0].camera_movement == "高空俯拍, 俯拍"

    def test_missing_windows_are_omitted(self):
        """Test that only the windows present produce slots."""
        markdown = "**0-3秒画面：** 推镜头，远景\n\n**6-9秒画面：** 特写\n"
        document = parse_episode_document(markdown)

        assert len(document.time_slots) == 2
        first, second = document.time_slots
        assert (first.start_second, first.end_second) == (0, 3)
        assert first.camera_tags == ["推镜头"]
        assert (second.start_second, second.end_second) == (6, 9)
        assert second.camera_tags == []
        assert document.style_line == ""
        assert document.raw_prompt == ""

    def test_window_label_variants(self):
        """Test the colon outside the bold markers and the 's' unit."""
        markdown = "**3-6s**：摇镜头扫过人群\n"
        slot = parse_episode_document(markdown).time_slots[0]

        assert (slot.start_second, slot.description) == (3, "摇镜头扫过人群")
        assert slot.camera_movement == "摇镜头"

    def test_episode_code_fallback(self):
        """Test reading the episode number from a code when the title has none."""
        document = parse_episode_document("# 第七集 分镜\n\n剧集编号 E07\n")

        assert document.title == "第七集 分镜"
        assert document.episode_number == 7

    def test_empty_document(self):
        """Test that empty input yields an empty document."""
        assert parse_episode_document("") == EpisodeDocument()


class TestParseQuotedEpisode:
    """Test parsing quoted-dialect storyboards."""

    def test_fixture(self, fixture_text):
        """Test the full quoted fixture."""
        document = parse_episode_document(fixture_text("episode_quoted.md"))

        assert document.episode_number == 2
        assert document.title == "故人"
        assert document.asset_slots == [
            AssetSlot(1, SlotType.IMAGE, "C01", "张世杰全身"),
            AssetSlot(1, SlotType.VIDEO, "S01", "庭院环境"),
        ]
        assert document.style_line == "古风写实，柔和光影"
        assert [slot.description for slot in document.time_slots] == [
            "推镜头，庭院远景",
            "张世杰缓步走入",
            "环绕镜头，人物中景",
        ]
        assert document.time_slots[2].camera_tags == ["环绕镜头", "环绕"]
        assert document.sound_design == "风声 | 远处钟声"
        assert document.reference_list == "@图片1 张世杰"
        assert document.end_frame_description == "张世杰立于庭院中央，仰望天空"
        assert document.raw_prompt.splitlines()[0] == "古风写实，柔和光影"

    def test_explicit_dialect(self, fixture_text):
        """Test that forcing the inline dialect still finds quoted windows."""
        markdown = fixture_text("episode_quoted.md")

        assert parse_episode_document(markdown, Dialect.INLINE) == (
            parse_episode_document(markdown, Dialect.QUOTED)
        )


class TestSerializeEpisode:
    """Test rendering storyboards."""

    def test_inline_layout(self, sample_episode):
        """Test inline headings, table and window labels."""
        markdown = serialize_episode_document(sample_episode, Dialect.INLINE)

        assert markdown.startswith("# E03 - 雨中奔跑\n")
        assert "| 素材槽 | 文件 | 说明 |" in markdown
        assert "| 图片1 | C01 | 林小雨正面 |" in markdown
        assert "| 视频1 | S01 | 街道动态 |" in markdown
        assert "**0-3秒画面：**\n推镜头，雨夜街道" in markdown
        assert "**3-6秒画面：**" not in markdown
        assert "【声音】雨声 | 脚步声" in markdown
        assert "【参考】@图片1 林小雨" in markdown
        assert "## 尾帧描述\n\n黑伞静止" in markdown

    def test_quoted_layout(self, sample_episode):
        """Test quoted table references and the fenced prompt."""
        markdown = serialize_episode_document(sample_episode, Dialect.QUOTED)

        assert "| 上传位置 | 素材ID | 素材描述 |" in markdown
        assert "| @图片1 | C01 | 林小雨正面 |" in markdown
        assert "| @视频1 | S01 | 街道动态 |" in markdown
        assert "```\n水墨赛博朋克风格，冷色调\n0-3s: 推镜头，雨夜街道\n" in markdown
        assert "音效设计：\n- 雨声\n- 脚步声\n【参考】@图片1 林小雨\n```" in markdown

    @pytest.mark.parametrize("dialect", [Dialect.INLINE, Dialect.QUOTED])
    def test_round_trip(self, sample_episode, dialect):
        """Test parse(serialize(doc)) in both dialects, ignoring raw_prompt."""
        markdown = serialize_episode_document(sample_episode, dialect)
        parsed = parse_episode_document(markdown)

        assert replace(parsed, raw_prompt="") == sample_episode
        assert parsed.raw_prompt

    def test_raw_prompt_not_written(self, sample_episode):
        """Test that the stored raw prompt never reaches the output."""
        sample_episode.raw_prompt = "SHOULD NOT APPEAR"
        markdown = serialize_episode_document(sample_episode)

        assert "SHOULD NOT APPEAR" not in markdown

    @pytest.mark.parametrize("dialect", [Dialect.INLINE, Dialect.QUOTED])
    @pytest.mark.parametrize(
        "sound_design", ["-bass drop | wind", "雨声 | *低鸣 | •钟声"]
    )
    def test_sound_items_keep_leading_markers(
        self, sample_episode, dialect, sound_design
    ):
        """Test that sound items starting with a list marker survive a round trip."""
        sample_episode.sound_design = sound_design
        markdown = serialize_episode_document(sample_episode, dialect)

        assert parse_episode_document(markdown).sound_design == sound_design

    def test_quoted_sound_list_markers_are_stripped_once(self):
        """Test that only the bullet itself is removed from quoted sound lines."""
        markdown = (
            "# E01 - 崖山\n\n## Seedance Prompt\n\n```\n0-3s: 海浪\n"
            "音效设计：\n- - bass\n* 风声\n• 钟声\n```\n"
        )
        parsed = parse_episode_document(markdown, Dialect.QUOTED)

        assert parsed.sound_design == "- bass | 风声 | 钟声"


class TestSplitEpisodes:
    """Test splitting multi-episode documents."""

    def test_split_drops_preamble(self, fixture_text):
        """Test that text before the first heading is discarded."""
        fragments = split_episodes(fixture_text("episodes_multi.md"))

        assert len(fragments) == 2
        assert fragments[0].startswith("# E01 - 开场")
        assert fragments[1].startswith("# E02 - 重逢")
        assert all("以下为全部分镜脚本" not in fragment for fragment in fragments)

    def test_fragments_parse_independently(self, fixture_text):
        """Test parsing each fragment as its own storyboard."""
        first, second = (
            parse_episode_document(fragment)
            for fragment in split_episodes(fixture_text("episodes_multi.md"))
        )

        assert first.episode_number == 1
        assert [slot.camera_tags for slot in first.time_slots] == [["推镜头"], []]
        assert first.end_frame_description == "远处的灯光"
        assert second.episode_number == 2
        assert second.time_slots[0].camera_tags == ["俯拍"]
        assert second.end_frame_description == "两人并肩"

    def test_document_without_headings(self):
        """Test that a document without episode headings is returned whole."""
        assert split_episodes("**0-3秒画面：** x") == ["**0-3秒画面：** x"]
        assert split_episodes("  \n") == []

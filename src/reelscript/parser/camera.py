"""Camera-movement tagging for storyboard descriptions."""

from __future__ import annotations

# Declaration order is the output order of tag_camera_movements
CAMERA_VOCABULARY: tuple[str, ...] = (
    "推镜头",
    "拉镜头",
    "摇镜头",
    "移镜头",
    "跟镜头",
    "环绕镜头",
    "360度旋转",
    "升降镜头",
    "希区柯克变焦",
    "一镜到底",
    "手持晃动",
    "高空俯拍",
    "低角度仰拍",
    "面部特写",
    "中景推近",
    "镜头环绕",
    "镜头拉远",
    "俯拍",
    "仰拍",
    "环绕",
    "推近",
    "拉远",
)

TAG_SEPARATOR = ", "


def tag_camera_movements(
    text: str, vocabulary: tuple[str, ...] = CAMERA_VOCABULARY
) -> list[str]:
    """Return every vocabulary term that occurs in ``text``.

    Matching is by plain substring. Results follow vocabulary order, not
    order of appearance, and contain no duplicates.
    """
    found: list[str] = []
    for term in vocabulary:
        if term in text and term not in found:
            found.append(term)
    return found


def join_tags(tags: list[str]) -> str:
    """Join tags into the stored comma-separated form."""
    return TAG_SEPARATOR.join(tags)

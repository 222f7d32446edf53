"""Conversion between Chinese numerals and integers for episode numbering.

Only the range used by episode headings (1-99) is supported.
"""

from __future__ import annotations

_DIGITS = {
    "一": 1,
    "二": 2,
    "三": 3,
    "四": 4,
    "五": 5,
    "六": 6,
    "七": 7,
    "八": 8,
    "九": 9,
    "十": 10,
}
_NUMERALS = {value: char for char, value in _DIGITS.items()}
_TEN = "十"


def chinese_to_int(text: str) -> int:
    """Convert a Chinese (or Arabic) numeral to an integer.

    Args:
        text: Numeral text such as "3", "七", "十二" or "二十五"

    Returns:
        The integer value, or 0 when the text is not a recognised numeral
    """
    text = text.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    if not text or any(char not in _DIGITS for char in text):
        return 0

    if len(text) == 1:
        return _DIGITS[text]
    if _TEN not in text:
        return 0

    tens, _, ones = text.partition(_TEN)
    if len(tens) > 1 or len(ones) > 1 or _TEN in tens + ones:
        return 0
    return _DIGITS.get(tens, 1) * 10 + _DIGITS.get(ones, 0)


def int_to_chinese(number: int) -> str:
    """Convert an integer in 1-99 to Chinese numeral text.

    Values outside the supported range are returned as plain digits.
    """
    if number <= 0 or number > 99:
        return str(number)
    if number <= 10:
        return _NUMERALS[number]
    tens, ones = divmod(number, 10)
    prefix = "" if tens == 1 else _NUMERALS[tens]
    return f"{prefix}{_TEN}{_NUMERALS[ones] if ones else ''}"

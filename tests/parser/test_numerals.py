"""Tests for Chinese numeral conversion."""

import pytest

from reelscript.parser.numerals import chinese_to_int, int_to_chinese


class TestChineseToInt:
    """Test chinese_to_int."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("一", 1),
            ("九", 9),
            ("十", 10),
            ("十二", 12),
            ("二十", 20),
            ("二十五", 25),
            ("九十九", 99),
        ],
    )
    def test_valid_numerals(self, text, expected):
        """Test numerals within the supported range."""
        assert chinese_to_int(text) == expected

    def test_arabic_digits(self):
        """Test that Arabic digits are accepted as-is."""
        assert chinese_to_int("7") == 7
        assert chinese_to_int("12") == 12

    def test_surrounding_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert chinese_to_int(" 三 ") == 3

    @pytest.mark.parametrize("text", ["廿", "零", "两", "百", "", "三四", "十十", "二十三四"])
    def test_unrecognised_numerals_return_zero(self, text):
        """Test that characters outside the table yield 0."""
        assert chinese_to_int(text) == 0


class TestIntToChinese:
    """Test int_to_chinese."""

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (1, "一"),
            (10, "十"),
            (11, "十一"),
            (20, "二十"),
            (25, "二十五"),
            (99, "九十九"),
        ],
    )
    def test_supported_range(self, number, expected):
        """Test numbers between 1 and 99."""
        assert int_to_chinese(number) == expected

    @pytest.mark.parametrize("number", [0, -3, 100, 250])
    def test_out_of_range_returns_digits(self, number):
        """Test numbers outside 1-99 fall back to digits."""
        assert int_to_chinese(number) == str(number)

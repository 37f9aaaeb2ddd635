# tests/utils/test_text.py
"""Tests for blog/utils/text.py module."""

import pytest

from blog.configs.settings import MAX_SLUG_LENGTH
from blog.utils.text import (
    FALLBACK_SLUG,
    calculate_reading_time,
    calculate_word_count,
    read_time_label,
    slugify,
    with_suffix,
)


class TestSlugify:
    """Tests for slugify function."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Hello World", "hello-world"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("Rock & Roll: 100% Pure!", "rock-roll-100-pure"),
            ("multiple   spaces -- and--dashes", "multiple-spaces-and-dashes"),
            ("Café déjà vu", "cafe-deja-vu"),
            ("Ñandú Über Straße", "nandu-uber-strae"),
            ("ﬁnal cut", "final-cut"),
        ],
    )
    def test_builds_url_friendly_slug(self, title: str, expected: str) -> None:
        assert slugify(title) == expected

    def test_truncates_to_column_length_without_trailing_hyphen(self) -> None:
        title = "word " * 30
        slug = slugify(title)
        assert len(slug) <= MAX_SLUG_LENGTH
        assert not slug.endswith("-")

    def test_title_without_usable_characters_falls_back(self) -> None:
        assert slugify("!!! ???") == FALLBACK_SLUG

    def test_custom_max_length(self) -> None:
        assert slugify("a very long tag name", 6) == "a-very"


class TestWithSuffix:
    def test_appends_counter(self) -> None:
        assert with_suffix("hello-world", 2) == "hello-world-2"

    def test_trims_base_to_fit(self) -> None:
        base = "a" * MAX_SLUG_LENGTH
        result = with_suffix(base, 12)
        assert len(result) == MAX_SLUG_LENGTH
        assert result.endswith("-12")

    def test_does_not_double_hyphen_after_trim(self) -> None:
        base = "abc-" + "d" * (MAX_SLUG_LENGTH - 4)
        result = with_suffix(base, 1, max_length=6)
        assert result == "abc-1"


class TestReadingTime:
    def test_word_count(self) -> None:
        assert calculate_word_count("one two\nthree\tfour") == 4

    def test_minimum_of_one_minute(self) -> None:
        assert calculate_reading_time("just a few words") == 1
        assert calculate_reading_time("") == 1

    def test_rounds_to_nearest_minute(self) -> None:
        content = " ".join(["word"] * 700)
        assert calculate_reading_time(content, words_per_minute=200) == 4

    def test_uses_configured_speed_by_default(self) -> None:
        content = " ".join(["word"] * 600)
        assert calculate_reading_time(content) == 3


class TestReadTimeLabel:
    def test_english_label(self) -> None:
        assert read_time_label(3, "en") == "3 min read"

    def test_unknown_locale_falls_back_to_english(self) -> None:
        assert read_time_label(5, "xx") == "5 min read"

    def test_other_locale(self) -> None:
        assert read_time_label(2, "id") == "2 menit baca"

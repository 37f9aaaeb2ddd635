"""Slug and read-time helpers for post content."""

from re import sub
from unicodedata import normalize

from blog.configs.settings import MAX_SLUG_LENGTH, settings

FALLBACK_SLUG = "post"

READ_TIME_LABELS: dict[str, str] = {
    "en": "{minutes} min read",
    "id": "{minutes} menit baca",
    "es": "{minutes} min de lectura",
}


def slugify(title: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Build a URL-friendly slug from a title.

    Accented letters are transliterated to ASCII, then the slug is
    lowercased, stripped of anything that isn't alphanumeric,
    whitespace or a hyphen, then truncated to ``max_length`` without leaving
    a trailing hyphen behind.

    Args:
        title: Source title.
        max_length: Maximum slug length.

    Returns:
        str: The slug, or ``"post"`` when the title has no usable characters.
    """
    slug = normalize("NFKD", title).encode("ascii", "ignore").decode().lower()
    slug = sub(r"[^a-z0-9\s-]", "", slug)
    slug = sub(r"\s+", "-", slug)
    slug = sub(r"-+", "-", slug)
    slug = slug.strip("-")[:max_length].rstrip("-")
    return slug or FALLBACK_SLUG


def with_suffix(slug: str, n: int, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Append ``-n`` to ``slug``, trimming the base so the result fits."""
    suffix = f"-{n}"
    base = slug[: max_length - len(suffix)].rstrip("-") or FALLBACK_SLUG
    return f"{base}{suffix}"


def calculate_word_count(content: str) -> int:
    """
    Calculate word count from content.

    Args:
        content: Post content

    Returns:
        int: Word count
    """
    return len(content.split())


def calculate_reading_time(content: str, words_per_minute: int | None = None) -> int:
    """
    Calculate reading time in minutes from content.

    Args:
        content: Post content
        words_per_minute: Reading speed, defaults to the configured value

    Returns:
        int: Reading time in minutes (minimum 1)
    """
    wpm = words_per_minute or settings.READ_TIME_WORDS_PER_MINUTE
    return max(1, round(calculate_word_count(content) / wpm))


def read_time_label(minutes: int, locale: str | None = None) -> str:
    """Localized ``duration`` string, falling back to English."""
    template = READ_TIME_LABELS.get(locale or settings.APP_LOCALE, READ_TIME_LABELS["en"])
    return template.format(minutes=minutes)

from blog.utils.helpers import get_summary, host, today_str, utcnow
from blog.utils.text import (
    calculate_reading_time,
    calculate_word_count,
    read_time_label,
    slugify,
    with_suffix,
)

__all__ = [
    "calculate_reading_time",
    "calculate_word_count",
    "get_summary",
    "host",
    "read_time_label",
    "slugify",
    "today_str",
    "utcnow",
    "with_suffix",
]

"""Shared column types and defaults for table models."""

from enum import StrEnum

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

from blog.utils.helpers import utcnow

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class PublishState(StrEnum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


__all__ = ["JSONList", "PublishState", "utcnow"]

# tests/models/test_lifecycle.py
"""Tests for the post lifecycle transitions."""

from uuid import uuid4

import pytest

from blog.errors import InvalidTransitionError
from blog.models import PostDB, PostState, purge, restore, soft_delete, state_of
from blog.utils.helpers import utcnow


def _post(**overrides: object) -> PostDB:
    return PostDB(
        author_id=uuid4(),
        title="Lifecycle",
        slug="lifecycle",
        content="content",
        **overrides,
    )


class TestStateOf:
    def test_new_post_is_active(self) -> None:
        assert state_of(_post()) is PostState.ACTIVE

    def test_marker_means_soft_deleted(self) -> None:
        assert state_of(_post(deleted_at=utcnow())) is PostState.SOFT_DELETED


class TestTransitions:
    def test_soft_delete_sets_marker(self) -> None:
        post = _post()
        at = utcnow()

        assert soft_delete(post, at) is PostState.SOFT_DELETED
        assert post.deleted_at == at

    def test_soft_delete_twice_is_rejected(self) -> None:
        post = _post(deleted_at=utcnow())

        with pytest.raises(InvalidTransitionError) as exc_info:
            soft_delete(post)

        assert exc_info.value.status_code == 409
        assert exc_info.value.current == "soft_deleted"

    def test_restore_clears_marker(self) -> None:
        post = _post(deleted_at=utcnow())

        assert restore(post) is PostState.ACTIVE
        assert post.deleted_at is None

    def test_restore_active_post_is_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError, match="from active to active"):
            restore(_post())

    @pytest.mark.parametrize("deleted", [False, True])
    def test_purge_allowed_from_any_live_state(self, deleted: bool) -> None:
        post = _post(deleted_at=utcnow() if deleted else None)
        assert purge(post) is PostState.PURGED

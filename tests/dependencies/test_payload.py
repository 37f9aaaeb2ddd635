# tests/dependencies/test_payload.py
"""Tests for request payload parsing into post schemas and cover decisions."""

from io import BytesIO

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.datastructures import FormData, Headers, UploadFile

from blog.dependencies.dependencies import _cover_from, _form_to_dict, _loggable
from blog.schemas.post import PostCreate
from blog.services import NoChange, SetUpload, SetUrl


def _upload(data: bytes, filename: str = "a.jpg") -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": "image/jpeg"}),
    )


class TestFormToDict:
    def test_list_fields_collect_repeated_values(self) -> None:
        form = FormData(
            [
                ("title", "Hello"),
                ("tags", "a"),
                ("tags", "b"),
                ("metaKeywords[]", "k1"),
                ("categories[]", "x"),
            ],
        )

        assert _form_to_dict(form) == {
            "title": "Hello",
            "tags": ["a", "b"],
            "metaKeywords": ["k1"],
            "categories": ["x"],
        }

    def test_single_tag_is_still_a_list(self) -> None:
        raw = _form_to_dict(FormData([("title", "T"), ("content", "C"), ("tags[]", "solo")]))

        assert PostCreate.model_validate(raw).tags == ["solo"]

    def test_last_scalar_value_wins(self) -> None:
        assert _form_to_dict(FormData([("title", "a"), ("title", "b")])) == {"title": "b"}


class TestCoverFrom:
    @pytest.mark.asyncio
    async def test_url_string(self) -> None:
        assert await _cover_from("  https://cdn.example.com/a.jpg ") == SetUrl(
            "https://cdn.example.com/a.jpg",
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["../escape.jpg", "post/cover/pic_0a1b.jpg", "ftp://example.com/a.jpg"])
    async def test_non_http_text_is_rejected(self, value: str) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            await _cover_from(value)

        assert {e["loc"] for e in exc_info.value.errors()} == {("body", "coverUrl")}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "", "   "])
    async def test_missing_or_blank_is_no_change(self, value: str | None) -> None:
        assert isinstance(await _cover_from(value), NoChange)

    @pytest.mark.asyncio
    async def test_uploaded_file(self) -> None:
        cover = await _cover_from(_upload(b"jpeg-bytes", "beach.jpg"))

        assert cover == SetUpload(data=b"jpeg-bytes", filename="beach.jpg", content_type="image/jpeg")

    @pytest.mark.asyncio
    async def test_empty_file_is_no_change(self) -> None:
        assert isinstance(await _cover_from(_upload(b"")), NoChange)


def test_loggable_replaces_files_with_names() -> None:
    raw = {"title": "T", "coverUrl": _upload(b"data", "pic.jpg")}

    assert _loggable(raw) == {"title": "T", "coverUrl": "pic.jpg"}

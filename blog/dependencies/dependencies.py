# blog/dependencies/dependencies.py

"""Application dependencies: auth, cache, storage, post service and request payloads."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from fastapi import Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import OAuth2PasswordBearer
from orjson import JSONDecodeError, loads
from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.datastructures import FormData, UploadFile
from starlette.status import HTTP_401_UNAUTHORIZED

from blog.auth.policy import PostPolicy
from blog.configs import settings
from blog.db import get_session
from blog.managers.cache_manager import CacheManager
from blog.managers.token_manager import decode_access_token
from blog.models import PublishState, UserDB
from blog.repositories import UserRepository
from blog.schemas.post import PostCreate, PostUpdate
from blog.services.cover_image import CoverInput, NoChange, SetUpload, SetUrl
from blog.services.post_cache import PostCache
from blog.services.post_service import PostService
from blog.services.storage import StorageService, get_storage_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> UserDB:
    """
    Get current authenticated user using user_id from token claims.

    Parameters
    ----------
    token : str
        Bearer token.
    session : AsyncSession
        Database session.

    Returns
    -------
    UserDB
        Current authenticated user.
    """
    token_data = decode_access_token(token)
    if not token_data:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserRepository(session).get_by_id(token_data.user_id)
    if not user:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


UserDBDep = Annotated[UserDB, Depends(get_current_user)]


def get_cache_manager(request: Request) -> CacheManager:
    """Dependency to get the global cache manager instance."""
    return request.app.state.cache_manager


CacheDep = Annotated[CacheManager, Depends(get_cache_manager)]


def get_storage(request: Request) -> StorageService:
    """Storage backend set up at startup, or the configured default."""
    storage = getattr(request.app.state, "storage", None)
    return storage or get_storage_service()


StorageDep = Annotated[StorageService, Depends(get_storage)]


def get_post_service(
    session: SessionDep,
    cache_manager: CacheDep,
    storage: StorageDep,
) -> PostService:
    """
    Resolve the `PostService` dependency.

    Returns
    -------
    PostService
        Service bound to the request's session and the shared cache/storage.
    """
    return PostService(session, PostCache(cache_manager), storage, PostPolicy())


PostServiceDep = Annotated[PostService, Depends(get_post_service)]


@dataclass(frozen=True)
class AdminListQuery:
    """
    Query container for the dashboard listing.

    Parameters
    ----------
    page : int
        1-based page number.
    publish : PublishState | None
        Exact publish state filter (``filter[publish]``).
    sort : Literal
        ``created_at`` oldest first, ``-created_at`` newest first.
    trashed : Literal | None
        ``with`` includes soft-deleted posts, ``only`` lists nothing else.
    """

    page: int = 1
    publish: PublishState | None = None
    sort: Literal["created_at", "-created_at"] = "-created_at"
    trashed: Literal["with", "only"] | None = None


def get_admin_list_query(
    page: Annotated[int, Query(ge=1, le=settings.MAX_PAGE, description="Page number")] = 1,
    publish: Annotated[
        PublishState | None,
        Query(alias="filter[publish]", description="Exact publish state filter"),
    ] = None,
    sort: Annotated[
        Literal["created_at", "-created_at"],
        Query(description="Sort by creation time; prefix with '-' for newest first"),
    ] = "-created_at",
    trashed: Annotated[
        Literal["with", "only"] | None,
        Query(description="Include soft-deleted posts"),
    ] = None,
) -> AdminListQuery:
    return AdminListQuery(page=page, publish=publish, sort=sort, trashed=trashed)


AdminListQueryDep = Annotated[AdminListQuery, Depends(get_admin_list_query)]

PageDep = Annotated[int, Query(ge=1, le=settings.MAX_PAGE, description="Page number")]


# Fields that arrive repeated (``tags`` / ``tags[]``) in form submissions
LIST_FIELDS = ("tags", "metaKeywords", "meta_keywords")
COVER_FIELD = "coverUrl"
COVER_URL = TypeAdapter(HttpUrl)


@dataclass
class PostPayload[SchemaT: BaseModel]:
    """A validated post body plus the cover decision taken from it."""

    data: SchemaT
    cover: CoverInput = field(default_factory=NoChange)
    log_payload: dict[str, Any] = field(default_factory=dict)


def _form_to_dict(form: FormData) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for key in form:
        name = key.removesuffix("[]")
        values = form.getlist(key)
        if name in LIST_FIELDS or key.endswith("[]"):
            raw.setdefault(name, []).extend(values)
        else:
            raw[name] = values[-1]
    return raw


async def _cover_from(value: object) -> CoverInput:
    """
    Decide the cover variant once, from whatever ``coverUrl`` carried.

    Text must be an absolute http(s) URL; storage paths are never accepted.
    """
    match value:
        case UploadFile() as upload:
            data = await upload.read()
            if not data:
                return NoChange()
            return SetUpload(
                data=data,
                filename=upload.filename or "cover",
                content_type=upload.content_type or "",
            )
        case str() as url if url.strip():
            url = url.strip()
            try:
                COVER_URL.validate_python(url)
            except ValidationError as e:
                raise RequestValidationError(
                    [{**err, "loc": ("body", COVER_FIELD)} for err in e.errors()],
                ) from e
            return SetUrl(url)
        case _:
            return NoChange()


def _loggable(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Request payload for logs, with uploaded files replaced by their names."""
    return {
        key: value.filename if isinstance(value, UploadFile) else value
        for key, value in raw.items()
    }


async def _read_body(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return _form_to_dict(await request.form())

    body = await request.body()
    if not body:
        return {}
    try:
        parsed = loads(body)
    except JSONDecodeError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "Invalid JSON body", "input": None}],
        ) from e
    if not isinstance(parsed, dict):
        raise RequestValidationError(
            [{"type": "dict_type", "loc": ("body",), "msg": "Body must be an object", "input": None}],
        )
    return parsed


async def _parse[SchemaT: BaseModel](request: Request, schema: type[SchemaT]) -> PostPayload[SchemaT]:
    raw = await _read_body(request)
    log_payload = _loggable(raw)
    cover = await _cover_from(raw.pop(COVER_FIELD, None))
    try:
        data = schema.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()],
        ) from e
    return PostPayload(data=data, cover=cover, log_payload=log_payload)


async def get_post_create_payload(request: Request) -> PostPayload[PostCreate]:
    """Parse a JSON or multipart create body; ``coverUrl`` may be a URL or a file."""
    return await _parse(request, PostCreate)


async def get_post_update_payload(request: Request) -> PostPayload[PostUpdate]:
    return await _parse(request, PostUpdate)


PostCreatePayloadDep = Annotated[PostPayload[PostCreate], Depends(get_post_create_payload)]
PostUpdatePayloadDep = Annotated[PostPayload[PostUpdate], Depends(get_post_update_payload)]

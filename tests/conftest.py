# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os

# Settings are read when ``blog`` is first imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["STORAGE_PROVIDER"] = "local"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402
from io import BytesIO  # noqa: E402
from pathlib import Path  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from blog.auth.permissions import Permission  # noqa: E402
from blog.db import get_session, init_db  # noqa: E402
from blog.main import app  # noqa: E402
from blog.managers.cache_manager import CacheManager  # noqa: E402
from blog.managers.rate_limiter import limiter  # noqa: E402
from blog.managers.token_manager import create_access_token  # noqa: E402
from blog.models import PostDB, PublishState, UserDB  # noqa: E402
from blog.repositories import PostRepository  # noqa: E402
from blog.services.post_cache import PostCache  # noqa: E402
from blog.services.post_service import PostService  # noqa: E402
from blog.services.storage import LocalStorage  # noqa: E402
from blog.utils.helpers import utcnow  # noqa: E402

UserFactory = Callable[..., Awaitable[UserDB]]
PostFactory = Callable[..., Awaitable[PostDB]]

LONG_CONTENT = " ".join(["word"] * 600)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """A fresh SQLite database file per test with every table created."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}",
        connect_args={"check_same_thread": False},
    )
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_maker() as db_session:
        yield db_session


# ---------------------------------------------------------------------------
# Users and posts
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(session: AsyncSession) -> UserFactory:
    """Persist a user holding the given permissions and roles."""

    async def factory(
        *,
        permissions: list[Permission] | None = None,
        roles: list[str] | None = None,
        username: str | None = None,
    ) -> UserDB:
        name = username or f"user_{uuid4().hex[:8]}"
        user = UserDB(
            username=name,
            email=f"{name}@example.com",
            permissions=[p.value for p in permissions or []],
            roles=roles or [],
        )
        session.add(user)
        await session.commit()
        return user

    return factory


@pytest.fixture
async def author(make_user: UserFactory) -> UserDB:
    """Can view and create posts; edits and deletes only their own."""
    return await make_user(
        username="author",
        permissions=[Permission.VIEW, Permission.CREATE],
    )


@pytest.fixture
async def other_author(make_user: UserFactory) -> UserDB:
    return await make_user(
        username="other_author",
        permissions=[Permission.VIEW, Permission.CREATE],
    )


@pytest.fixture
async def editor(make_user: UserFactory) -> UserDB:
    """Granted every granular post permission, but not the wildcard."""
    return await make_user(
        username="editor",
        permissions=[
            Permission.VIEW,
            Permission.CREATE,
            Permission.EDIT,
            Permission.DELETE,
            Permission.UPDATE,
        ],
    )


@pytest.fixture
async def admin(make_user: UserFactory) -> UserDB:
    return await make_user(
        username="admin",
        permissions=[Permission.ALL],
        roles=["Super Admin"],
    )


@pytest.fixture
def make_post(session: AsyncSession) -> PostFactory:
    """Persist a post directly, bypassing the service layer."""

    async def factory(
        author: UserDB,
        *,
        title: str = "Hello World",
        content: str = LONG_CONTENT,
        publish: PublishState = PublishState.PUBLISHED,
        featured: bool = False,
        created_at: datetime | None = None,
        deleted_at: datetime | None = None,
    ) -> PostDB:
        post = PostDB(
            author_id=author.uuid,
            title=title,
            slug=await PostRepository(session).unique_slug(title),
            content=content,
            publish=publish,
            featured=featured,
            created_at=created_at or utcnow(),
            deleted_at=deleted_at,
        )
        session.add(post)
        await session.commit()
        return post

    return factory


# ---------------------------------------------------------------------------
# Cache, storage and services
# ---------------------------------------------------------------------------


@pytest.fixture
async def cache_manager() -> AsyncGenerator[CacheManager]:
    """In-memory cache manager, started and shut down around each test."""
    manager = CacheManager(redis_enabled=False)
    await manager.initialize()
    try:
        yield manager
    finally:
        await manager.shutdown()


@pytest.fixture
def post_cache(cache_manager: CacheManager) -> PostCache:
    return PostCache(cache_manager, ttl=60)


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(root=tmp_path / "uploads", url_prefix="/uploads")


@pytest.fixture
def service(session: AsyncSession, post_cache: PostCache, storage: LocalStorage) -> PostService:
    return PostService(session, post_cache, storage)


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Encode a solid-color image of the given size and format."""

    def factory(size: tuple[int, int] = (800, 600), fmt: str = "JPEG") -> bytes:
        img = Image.new("RGBA" if fmt == "PNG" else "RGB", size, color="red")
        buffer = BytesIO()
        img.save(buffer, format=fmt)
        return buffer.getvalue()

    return factory


@pytest.fixture
def auth_headers() -> Callable[[UserDB], dict[str, str]]:
    """Authorization header carrying a fresh access token for a user."""

    def factory(user: UserDB) -> dict[str, str]:
        token = create_access_token(
            user_id=user.uuid,
            username=user.username,
            expires_delta=timedelta(minutes=30),
        )
        return {"Authorization": f"Bearer {token}"}

    return factory


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    cache_manager: CacheManager,
    storage: LocalStorage,
) -> AsyncGenerator[AsyncClient]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Each request gets its own session on the test database. Rate limiting
    is disabled.
    """

    async def override_get_session() -> AsyncGenerator[AsyncSession]:
        async with session_maker() as db_session:
            yield db_session

    limiter.enabled = False
    app.dependency_overrides[get_session] = override_get_session
    app.state.cache_manager = cache_manager
    app.state.storage = storage
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    app.dependency_overrides = {}
    limiter.enabled = True

# blog/main.py

"""Blog Posts API - posts, covers and tags over FastAPI with Redis-backed caching."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse, Response
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from blog.configs import settings
from blog.errors import (
    AuthorizationError,
    CacheExceptionError,
    DatabaseError,
    PostError,
    UploadError,
    auth_exception_handler,
    cache_exception_handler,
    database_exception_handler,
    http_exception_handler,
    post_exception_handler,
    upload_exception_handler,
    validation_exception_handler,
)
from blog.managers import limiter, rate_limit_exceeded_handler
from blog.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from blog.routes import dashboard_router, posts_router
from blog.schemas import CacheHealthResponse, HealthCheckResponse
from blog.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="Blog posts API: public reading, dashboard management, covers and tags",
    version="1.0.0",
    lifespan=lifespan,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


routes = [
    posts_router,
    dashboard_router,
]

_ = [app.include_router(router) for router in routes]

errors = [
    (PostError, post_exception_handler),
    (AuthorizationError, auth_exception_handler),
    (UploadError, upload_exception_handler),
    (CacheExceptionError, cache_exception_handler),
    (DatabaseError, database_exception_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter

if settings.STORAGE_PROVIDER == "local":
    app.mount(
        settings.UPLOADS_URL_PREFIX,
        StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
        name="uploads",
    )


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01",
                        "storage": "local",
                        "cache": {"backend": "in-memory", "status": "healthy"},
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> ORJSONResponse:
    """
    Health check endpoint.

    Parameters
    ----------
    request : Request
        Current request context.

    Returns
    -------
    ORJSONResponse
        API version, timestamp, storage provider and cache health.
    """
    cache_manager = getattr(request.app.state, "cache_manager", None)
    cache = (
        CacheHealthResponse.model_validate(await cache_manager.health_check())
        if cache_manager
        else None
    )

    health = HealthCheckResponse(
        version=app.version,
        status="ok" if cache is None or cache.status == "healthy" else "degraded",
        timestamp=today_str(),
        storage=settings.STORAGE_PROVIDER,
        cache=cache,
    )
    return ORJSONResponse(health.model_dump())


@app.get(
    "/",
    tags=["🏠 Root"],
    summary="Root access",
    response_model=dict[str, str],
    response_class=JSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"message": "Welcome to the Blog Posts API"},
                },
            },
        },
        429: {
            "description": "Rate limit exceeded",
            "content": {
                "application/json": {
                    "example": {"success": False, "message": "Rate limit exceeded"},
                },
            },
        },
    },
    operation_id="root_access",
)
@limiter.limit("5/minute")
async def root(request: Request, response: Response) -> JSONResponse:
    """
    Root endpoint.

    Returns
    -------
    JSONResponse
        Welcome message payload.
    """
    return JSONResponse(content={"message": f"Welcome to the {settings.APP_NAME}"})


if __name__ == "__main__":
    from uvicorn import run

    run(
        "blog.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True,
        loop="uvloop",
        http="httptools",
    )

from blog.routes.dashboard import router as dashboard_router
from blog.routes.posts import router as posts_router

__all__ = ["dashboard_router", "posts_router"]

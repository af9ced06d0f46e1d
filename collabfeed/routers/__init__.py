"""Aggregate router exports."""
from .collaboration import router as collaboration_router
from .engagement import router as engagement_router
from .feed import router as feed_router
from .media import router as media_router
from .posts import router as posts_router

__all__ = [
    "collaboration_router",
    "engagement_router",
    "feed_router",
    "media_router",
    "posts_router",
]

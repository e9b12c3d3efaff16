"""Route modules."""

from .articles import router as articles_router
from .courses import router as courses_router
from .likes import router as likes_router
from .members import router as members_router
from .portfolio import router as portfolio_router
from .tags import router as tags_router

__all__ = [
    "articles_router",
    "courses_router",
    "likes_router",
    "members_router",
    "portfolio_router",
    "tags_router",
]

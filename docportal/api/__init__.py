# docportal/api/__init__.py
from .folders import router as folders_router
from .documents import router as documents_router
from .search import router as search_router
from .trash import router as trash_router
from .analytics import router as analytics_router

__all__ = ["folders_router", "documents_router", "search_router", "trash_router", "analytics_router"]

# Routes module
from .automation import router as automation_router
from .news import router as news_router

__all__ = ["automation_router", "news_router"]

from namsan_portal.routers.chat import router as chat_router
from namsan_portal.routers.market import router as market_router
from namsan_portal.routers.news import router as news_router
from namsan_portal.routers.newsletter import router as newsletter_router
from namsan_portal.routers.popups import router as popups_router

__all__ = [
    "chat_router",
    "market_router",
    "news_router",
    "newsletter_router",
    "popups_router",
]

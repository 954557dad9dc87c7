"""Service layer: relay orchestration and upstream-error mapping."""
from namsan_portal.services.chat import ChatService
from namsan_portal.services.market_indices import MarketIndicesService
from namsan_portal.services.news import (MarketNewsService, StockNewsRefresh,
                                         StockNewsService)
from namsan_portal.services.newsletter import (NewsletterResult,
                                               NewsletterService,
                                               PerRecipientFailure)
from namsan_portal.services.notifications import AdminNotifier
from namsan_portal.services.popups import PopupGate
from namsan_portal.services.rate_limiter import (FixedWindowRateLimiter,
                                                 RateLimitBucket)
from namsan_portal.services.stock_prices import StockPricesService

__all__ = [
    "AdminNotifier",
    "ChatService",
    "FixedWindowRateLimiter",
    "MarketIndicesService",
    "MarketNewsService",
    "NewsletterResult",
    "NewsletterService",
    "PerRecipientFailure",
    "PopupGate",
    "RateLimitBucket",
    "StockNewsRefresh",
    "StockNewsService",
    "StockPricesService",
]

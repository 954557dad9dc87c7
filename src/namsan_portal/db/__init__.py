"""Database package: models, session management and the table query store."""
from namsan_portal.db.models import (MarketIndex, Newsletter, PopupAd,
                                     PopupDismissal, Profile, StockPickNews,
                                     UserRole, WeeklyStockPick)
from namsan_portal.db.store import DataStore, TableQuery

__all__ = [
    "DataStore",
    "MarketIndex",
    "Newsletter",
    "PopupAd",
    "PopupDismissal",
    "Profile",
    "StockPickNews",
    "TableQuery",
    "UserRole",
    "WeeklyStockPick",
]

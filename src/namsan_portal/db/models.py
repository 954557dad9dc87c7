"""Database models for the portal.

These mirror the tables owned by the hosted backend. Row-level access control
lives there; this service only reads and writes through DataStore.
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from namsan_portal.utils import utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class Profile(SQLModel, table=True):
    """One row per user, created at sign-up by the backend."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(unique=True, index=True)
    email: str
    full_name: str = ""
    full_name_ko: str | None = None
    phone: str | None = None
    preferred_language: str = "ko"
    is_admin: bool = False
    is_approved: bool = False
    approved_at: datetime | None = None
    approved_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserRole(SQLModel, table=True):
    """Role grants; an `admin` row unlocks the newsletter relay."""

    __tablename__ = "user_roles"

    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(index=True)
    role: str = "user"  # user | admin


class PopupAd(SQLModel, table=True):
    """Promotional popup authored by admins. Dates are ISO `YYYY-MM-DD` strings."""

    __tablename__ = "popup_ads"

    id: str = Field(default_factory=_new_id, primary_key=True)
    title_en: str
    title_ko: str
    description_en: str | None = None
    description_ko: str | None = None
    image_url: str | None = None
    button_text_en: str | None = None
    button_text_ko: str | None = None
    button_link: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    display_order: int = 0
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class PopupDismissal(SQLModel, table=True):
    """Last dismissal of a popup by a user; at most one row per pair."""

    __tablename__ = "popup_dismissals"
    __table_args__ = (UniqueConstraint("user_id", "popup_id"),)

    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(index=True)
    popup_id: str = Field(index=True)
    dismissed_at: datetime = Field(default_factory=utcnow)


class WeeklyStockPick(SQLModel, table=True):
    __tablename__ = "weekly_stock_picks"

    id: str = Field(default_factory=_new_id, primary_key=True)
    stock_name: str
    stock_code: str | None = None
    is_active: bool = True
    display_order: int = 0


class StockPickNews(SQLModel, table=True):
    """Latest news bullets per tracked stock. Replaced wholesale on refresh."""

    __tablename__ = "stock_pick_news"

    id: str = Field(default_factory=_new_id, primary_key=True)
    stock_name: str
    stock_code: str | None = None
    news_bullets: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    citations: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    fetched_at: datetime = Field(default_factory=utcnow)


class Newsletter(SQLModel, table=True):
    __tablename__ = "newsletters"

    id: str = Field(default_factory=_new_id, primary_key=True)
    subject: str
    html_content: str = ""
    status: str = "draft"  # draft | sent
    sent_at: datetime | None = None
    sent_by: str | None = None
    recipient_count: int | None = None


class MarketIndex(SQLModel, table=True):
    """Index card shown on the market page (KOSPI, S&P500, ...)."""

    __tablename__ = "market_indices"

    id: str = Field(default_factory=_new_id, primary_key=True)
    symbol: str = Field(index=True)
    name_ko: str = ""
    name_en: str = ""
    current_value: float | None = None
    change_value: float | None = None
    change_percent: float | None = None
    is_active: bool = True
    updated_at: datetime | None = None

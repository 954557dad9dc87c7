"""Pydantic schemas for relay requests and responses. Not persisted to DB.

Field aliases follow the browser client's camelCase payloads.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from namsan_portal.providers.ai_gateway.models import ChatMessage


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    error: str


class EnvelopeErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]


class ReportSummaryRequest(BaseModel):
    title: str
    summary: str | None = None
    category: str = ""
    language: str = "en"


class MarketNewsResponse(BaseModel):
    success: bool = True
    content: str
    citations: list[str] = Field(default_factory=list)


class StockNewsResponse(BaseModel):
    success: bool = True
    count: int
    message: str | None = None


class NewsletterRequest(_CamelModel):
    # Presence is checked by the service so the caller gets the relay's own message.
    subject: str = ""
    html_content: str = Field(default="", alias="htmlContent")
    newsletter_id: str | None = Field(default=None, alias="newsletterId")


class NewsletterResponse(_CamelModel):
    success: bool = True
    sent_count: int = Field(alias="sentCount")
    total_recipients: int = Field(alias="totalRecipients")


class SignupNotificationRequest(_CamelModel):
    user_name: str = Field(default="", alias="userName")
    user_email: str = Field(default="", alias="userEmail")
    user_phone: str | None = Field(default=None, alias="userPhone")
    user_address: str | None = Field(default=None, alias="userAddress")
    user_birthday: str | None = Field(default=None, alias="userBirthday")
    signup_date: str = Field(default="", alias="signupDate")


class SignupNotificationResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class MarketIndicesRequest(_CamelModel):
    auto_update: bool = Field(default=False, alias="autoUpdate")


class IndexRefreshResult(_CamelModel):
    """Outcome for one index card; `error` is set when no quote was stored."""

    symbol: str
    name: str
    current_value: float | None = Field(default=None, alias="currentValue")
    change_value: float | None = Field(default=None, alias="changeValue")
    change_percent: float | None = Field(default=None, alias="changePercent")
    error: str | None = None


class MarketIndicesResponse(BaseModel):
    success: bool = True
    data: list[IndexRefreshResult]


class StockCode(BaseModel):
    code: str = ""
    name: str = ""


class StockPricesRequest(_CamelModel):
    stock_codes: list[StockCode] = Field(default_factory=list, alias="stockCodes")


class StockPriceResult(_CamelModel):
    stock_code: str = Field(alias="stockCode")
    stock_name: str = Field(alias="stockName")
    current_price: float | None = Field(default=None, alias="currentPrice")
    error: str | None = None


class StockPricesResponse(BaseModel):
    success: bool = True
    data: list[StockPriceResult]


class PopupView(BaseModel):
    """A popup localized for display."""

    id: str
    title: str
    description: str | None = None
    image_url: str | None = None
    button_text: str
    button_link: str | None = None


class CurrentPopupResponse(BaseModel):
    popup: PopupView | None = None


class PopupActionResponse(BaseModel):
    success: bool = True
    button_link: str | None = None


__all__ = [
    "ChatRequest",
    "CurrentPopupResponse",
    "EnvelopeErrorResponse",
    "ErrorResponse",
    "IndexRefreshResult",
    "MarketIndicesRequest",
    "MarketIndicesResponse",
    "MarketNewsResponse",
    "NewsletterRequest",
    "NewsletterResponse",
    "PopupActionResponse",
    "PopupView",
    "ReportSummaryRequest",
    "SignupNotificationRequest",
    "SignupNotificationResponse",
    "StockCode",
    "StockNewsResponse",
    "StockPriceResult",
    "StockPricesRequest",
    "StockPricesResponse",
]

"""Models for the Perplexity provider (search params and answers)."""
from pydantic import BaseModel, Field

from namsan_portal.providers.ai_gateway.models import ChatMessage


class PerplexitySearchParams(BaseModel):
    """Body for POST /chat/completions with web search."""

    model: str = "sonar"
    messages: list[ChatMessage] = Field(default_factory=list)
    search_recency_filter: str = "day"


class SearchAnswer(BaseModel):
    """Answer text plus the source URLs the model cited."""

    content: str = ""
    citations: list[str] = Field(default_factory=list)

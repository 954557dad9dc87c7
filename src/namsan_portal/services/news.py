"""Market news and stock-pick news relays over Perplexity."""
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from namsan_portal.db import DataStore, StockPickNews, WeeklyStockPick
from namsan_portal.errors import MalformedUpstreamResponse
from namsan_portal.providers import (UPSTREAM_EXCEPTIONS, PerplexityProvider,
                                     SearchAnswer, UpstreamErrorMapper)
from namsan_portal.services.prompts import (MARKET_NEWS_SYSTEM_PROMPT,
                                            STOCK_NEWS_SYSTEM_PROMPT,
                                            market_news_question,
                                            stock_news_question)
from namsan_portal.services.utils import parse_stock_news
from namsan_portal.utils import utcnow

logger = logging.getLogger(__name__)

# News relays report every upstream failure as a plain 500.
PERPLEXITY_ERRORS = UpstreamErrorMapper(
    api_name="Perplexity API", passthrough_statuses=frozenset()
)


class MarketNewsService:
    """Today's Korean and US market summary with citations."""

    def __init__(
        self,
        provider: PerplexityProvider,
        *,
        error_mapper: UpstreamErrorMapper = PERPLEXITY_ERRORS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._provider = provider
        self._error_mapper = error_mapper
        self._today = today

    async def latest(self) -> SearchAnswer:
        try:
            return await self._provider.search(
                MARKET_NEWS_SYSTEM_PROMPT, market_news_question(self._today())
            )
        except UPSTREAM_EXCEPTIONS as e:
            self._error_mapper.raise_relay(e)


@dataclass(frozen=True)
class StockNewsRefresh:
    count: int
    message: str | None = None


class StockNewsService:
    """Refreshes StockPickNews for the active weekly picks.

    One search covers every pick. The answer must contain a JSON array;
    when it cannot be extracted the refresh fails and the stored news is left
    untouched. Otherwise the table is replaced wholesale, including items for
    names that are not among the picks (stored without a stock code).
    """

    def __init__(
        self,
        provider: PerplexityProvider,
        store: DataStore,
        *,
        error_mapper: UpstreamErrorMapper = PERPLEXITY_ERRORS,
        today: Callable[[], date] = date.today,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._provider = provider
        self._store = store
        self._error_mapper = error_mapper
        self._today = today
        self._clock = clock

    async def refresh(self) -> StockNewsRefresh:
        """Fetch, parse and store today's news; returns the number of rows written.

        Raises:
            UpstreamUnavailable: the search failed.
            MalformedUpstreamResponse: no usable JSON array in the answer.
        """
        picks = (
            self._store.table(WeeklyStockPick)
            .eq("is_active", True)
            .order("display_order")
            .execute()
        )
        if not picks:
            return StockNewsRefresh(count=0, message="No active stocks")

        question = stock_news_question(self._today(), [p.stock_name for p in picks])
        try:
            answer = await self._provider.search(STOCK_NEWS_SYSTEM_PROMPT, question)
        except UPSTREAM_EXCEPTIONS as e:
            self._error_mapper.raise_relay(e)

        extraction = parse_stock_news(answer.content)
        if not extraction.ok:
            logger.error(
                "Failed to parse stock news (%s): %.500s", extraction.error, answer.content
            )
            raise MalformedUpstreamResponse("Failed to parse news response")

        codes = {p.stock_name: p.stock_code for p in picks}
        fetched_at = self._clock()
        rows = [
            {
                "stock_name": item.stock_name,
                "stock_code": codes.get(item.stock_name),
                "news_bullets": item.bullets,
                "citations": answer.citations,
                "fetched_at": fetched_at,
            }
            for item in extraction.items
        ]
        self._store.replace_all(StockPickNews, rows)
        logger.info("Stored news for %d of %d stock picks", len(rows), len(picks))
        return StockNewsRefresh(count=len(rows))

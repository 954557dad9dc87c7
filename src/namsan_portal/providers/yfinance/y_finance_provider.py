"""Yahoo Finance quote provider for index and FX cards."""
import asyncio
import logging
from collections.abc import Callable
from typing import Any

import yfinance as yf

from namsan_portal.providers.yfinance.models import IndexQuote

logger = logging.getLogger(__name__)


class YFinanceProvider:
    """Last price and daily change for Yahoo tickers via yfinance.

    yfinance is synchronous, so each lookup runs in a worker thread. No API
    key required.
    """

    def __init__(
        self,
        max_concurrency: int = 5,
        ticker_factory: Callable[[str], Any] = yf.Ticker,
    ) -> None:
        """Initialize the YFinance provider.

        Args:
            max_concurrency: Upper bound on simultaneous ticker lookups.
            ticker_factory: Builds a ticker object (yf.Ticker; swapped in tests).
        """
        self._max_concurrency = max_concurrency
        self._ticker_factory = ticker_factory

    def _fetch_quote_sync(self, ticker: str) -> IndexQuote:
        """Fetch a single quote synchronously (run in thread)."""
        try:
            info = self._ticker_factory(ticker).fast_info
            price = info.get("lastPrice") or info.get("regularMarketPrice")
            prev_close = info.get("previousClose")
        except Exception as e:
            raise ValueError(f"Failed to fetch quote for '{ticker}': {e}") from e
        if price is None or float(price) <= 0:
            raise ValueError(f"Ticker '{ticker}' not found or has no price data")

        price = float(price)
        change = round(price - float(prev_close), 4) if prev_close else 0.0
        percent = (
            round(change / float(prev_close) * 100, 2)
            if prev_close and float(prev_close) > 0
            else 0.0
        )
        return IndexQuote(ticker=ticker, value=round(price, 4), change=change, percent=percent)

    async def get_quote(self, ticker: str) -> IndexQuote:
        """Fetch the current quote for a Yahoo ticker."""
        return await asyncio.to_thread(self._fetch_quote_sync, ticker)

    async def get_quotes(self, tickers: list[str]) -> dict[str, IndexQuote]:
        """Fetch quotes with bounded concurrency; tickers that fail are left out."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch(ticker: str) -> IndexQuote:
            async with semaphore:
                return await self.get_quote(ticker)

        unique = list(dict.fromkeys(tickers))
        results = await asyncio.gather(*(fetch(t) for t in unique), return_exceptions=True)
        quotes: dict[str, IndexQuote] = {}
        for ticker, result in zip(unique, results):
            if isinstance(result, IndexQuote):
                quotes[ticker] = result
            else:
                logger.warning("Yahoo Finance: no data for %s: %s", ticker, result)
        return quotes

    async def close(self) -> None:
        """Nothing to release; present so lifespan can close every provider alike."""

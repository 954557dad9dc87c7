"""Refresh of the market index cards from Yahoo Finance."""
import logging
from collections.abc import Callable
from datetime import datetime

from namsan_portal.db import DataStore, MarketIndex
from namsan_portal.errors import BadRequest
from namsan_portal.providers import YAHOO_SYMBOL_MAP, YFinanceProvider
from namsan_portal.schemas import IndexRefreshResult
from namsan_portal.services.notifications import AdminNotifier
from namsan_portal.utils import utcnow

logger = logging.getLogger(__name__)


class MarketIndicesService:
    """Updates active MarketIndex rows with the latest quote per symbol.

    Symbols without a Yahoo mapping, or whose lookup fails, are reported in
    the result with an error and keep their previous values.
    """

    def __init__(
        self,
        quotes: YFinanceProvider,
        store: DataStore,
        *,
        notifier: AdminNotifier | None = None,
        symbol_map: dict[str, str] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._quotes = quotes
        self._store = store
        self._notifier = notifier
        self._symbol_map = symbol_map if symbol_map is not None else YAHOO_SYMBOL_MAP
        self._clock = clock

    async def refresh(self, *, auto_update: bool = False) -> list[IndexRefreshResult]:
        """Fetch and store quotes for every active index.

        Args:
            auto_update: Scheduled run; failures are mailed to the admin.

        Raises:
            BadRequest: no active indices are configured.
        """
        indices = self._store.table(MarketIndex).eq("is_active", True).execute()
        if not indices:
            raise BadRequest("No active indices found")

        tickers = {index.symbol: self._symbol_map.get(index.symbol) for index in indices}
        for symbol, ticker in tickers.items():
            if ticker is None:
                logger.warning("No Yahoo symbol mapping for %s", symbol)
        quotes = await self._quotes.get_quotes([t for t in tickers.values() if t])
        logger.info("Yahoo Finance returned data for %d/%d indices", len(quotes), len(indices))

        results: list[IndexRefreshResult] = []
        for index in indices:
            ticker = tickers[index.symbol]
            quote = quotes.get(ticker) if ticker else None
            if quote is None:
                results.append(
                    IndexRefreshResult(
                        symbol=index.symbol,
                        name=index.name_ko,
                        error="No Yahoo symbol mapping" if ticker is None else "No data from Yahoo Finance",
                    )
                )
                continue
            self._store.table(MarketIndex).eq("id", index.id).update(
                {
                    "current_value": quote.value,
                    "change_value": quote.change,
                    "change_percent": quote.percent,
                    "updated_at": self._clock(),
                }
            )
            results.append(
                IndexRefreshResult(
                    symbol=index.symbol,
                    name=index.name_ko,
                    current_value=quote.value,
                    change_value=quote.change,
                    change_percent=quote.percent,
                )
            )

        failed = [r for r in results if r.error]
        if auto_update and failed and self._notifier is not None:
            await self._notifier.notify_index_failures(failed, len(results))
        return results

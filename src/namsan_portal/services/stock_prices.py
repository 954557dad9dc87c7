"""Current prices for Korean stock picks from Yahoo Finance."""
import logging

from namsan_portal.errors import BadRequest
from namsan_portal.providers import YFinanceProvider
from namsan_portal.schemas import StockCode, StockPriceResult

logger = logging.getLogger(__name__)

# KRX listings: KOSPI first, then KOSDAQ.
KRX_SUFFIXES = (".KS", ".KQ")


class StockPricesService:
    """Looks up six-digit KRX codes; a code missing from every market is reported."""

    def __init__(self, quotes: YFinanceProvider) -> None:
        self._quotes = quotes

    async def prices(self, stocks: list[StockCode]) -> list[StockPriceResult]:
        """Raises BadRequest when `stocks` is empty."""
        if not stocks:
            raise BadRequest("Stock codes array is required")

        found: dict[str, float] = {}
        pending = list(dict.fromkeys(s.code for s in stocks if s.code))
        for suffix in KRX_SUFFIXES:
            if not pending:
                break
            quotes = await self._quotes.get_quotes([f"{code}{suffix}" for code in pending])
            for code in pending:
                quote = quotes.get(f"{code}{suffix}")
                if quote is not None:
                    found[code] = quote.value
            pending = [code for code in pending if code not in found]

        results = []
        for stock in stocks:
            if not stock.code:
                error = "No stock code provided"
            elif stock.code not in found:
                error = "No data from Yahoo Finance"
            else:
                error = None
            results.append(
                StockPriceResult(
                    stock_code=stock.code,
                    stock_name=stock.name,
                    current_price=found.get(stock.code),
                    error=error,
                )
            )
        logger.info("Stock prices found for %d/%d codes", len(found), len(stocks))
        return results

from namsan_portal.providers.yfinance.models import (YAHOO_SYMBOL_MAP,
                                                     IndexQuote)
from namsan_portal.providers.yfinance.y_finance_provider import \
    YFinanceProvider

__all__ = ["IndexQuote", "YAHOO_SYMBOL_MAP", "YFinanceProvider"]

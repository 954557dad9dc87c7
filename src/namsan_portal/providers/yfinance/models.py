"""Models for the YFinance provider."""
from pydantic import BaseModel

# Internal card symbols -> Yahoo Finance tickers.
YAHOO_SYMBOL_MAP: dict[str, str] = {
    "TVC:NI225": "^N225",
    "AMEX:SPY": "SPY",
    "TVC:DJI": "^DJI",
    "FX:USDKRW": "USDKRW=X",
    "FX:JPYKRW": "JPYKRW=X",
    "FX:HKDKRW": "HKDKRW=X",
    "FX:EURUSD": "EURUSD=X",
    "FX:USDJPY": "USDJPY=X",
    "FX:USDCNY": "USDCNY=X",
    "TVC:US10Y": "^TNX",
    "TVC:GOLD": "GC=F",
    "TVC:SILVER": "SI=F",
    "TVC:USOIL": "CL=F",
    "NYMEX:NG1!": "NG=F",
    "CRYPTO:BTC": "BTC-USD",
    "CRYPTO:ETH": "ETH-USD",
    "CRYPTO:XRP": "XRP-USD",
    "KOSPI": "^KS11",
    "KOSDAQ": "^KQ11",
    "SPX": "^GSPC",
    "NDX": "^NDX",
    "S&P500": "^GSPC",
    "NASDAQ": "^IXIC",
}


class IndexQuote(BaseModel):
    """Last price with the change against the previous close."""

    ticker: str
    value: float
    change: float
    percent: float

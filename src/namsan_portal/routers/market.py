"""Market index card refresh and stock pick prices (Yahoo Finance)."""
from fastapi import APIRouter, Depends

from namsan_portal.deps import (AuthorizationHeader, MarketIndicesServiceDep,
                                StockPricesServiceDep, use_success_envelope)
from namsan_portal.schemas import (EnvelopeErrorResponse, MarketIndicesRequest,
                                   MarketIndicesResponse, StockPricesRequest,
                                   StockPricesResponse)

router = APIRouter(tags=["market"], dependencies=[Depends(use_success_envelope)])


@router.post(
    "/fetch-market-indices",
    response_model=MarketIndicesResponse,
    responses={status: {"model": EnvelopeErrorResponse} for status in (400, 401, 500)},
)
async def fetch_market_indices(
    _authorization: AuthorizationHeader,
    service: MarketIndicesServiceDep,
    body: MarketIndicesRequest | None = None,
) -> MarketIndicesResponse:
    """Refresh every active index; symbols without data are reported, not fatal.

    Scheduled callers pass `autoUpdate: true` to have failures mailed to the admin.
    """
    auto_update = body.auto_update if body is not None else False
    results = await service.refresh(auto_update=auto_update)
    return MarketIndicesResponse(data=results)


@router.post(
    "/fetch-stock-prices",
    response_model=StockPricesResponse,
    responses={status: {"model": EnvelopeErrorResponse} for status in (400, 401, 500)},
)
async def fetch_stock_prices(
    _authorization: AuthorizationHeader,
    service: StockPricesServiceDep,
    body: StockPricesRequest | None = None,
) -> StockPricesResponse:
    """Current price per KRX code, looked up on KOSPI then KOSDAQ."""
    stocks = body.stock_codes if body is not None else []
    return StockPricesResponse(data=await service.prices(stocks))

"""News relays (Perplexity). Errors use the `{success: false, error}` envelope."""
from fastapi import APIRouter, Depends

from namsan_portal.deps import (AuthorizationHeader, MarketNewsServiceDep,
                                StockNewsServiceDep, VerifiedClaims,
                                use_success_envelope)
from namsan_portal.schemas import (EnvelopeErrorResponse, MarketNewsResponse,
                                   StockNewsResponse)

router = APIRouter(
    tags=["news"],
    dependencies=[Depends(use_success_envelope)],
    responses={401: {"model": EnvelopeErrorResponse}, 500: {"model": EnvelopeErrorResponse}},
)


@router.post("/market-news", response_model=MarketNewsResponse)
async def market_news(
    _authorization: AuthorizationHeader, service: MarketNewsServiceDep
) -> MarketNewsResponse:
    """Today's Korean market news summary with source links."""
    answer = await service.latest()
    return MarketNewsResponse(content=answer.content, citations=answer.citations)


@router.post(
    "/stock-pick-news", response_model=StockNewsResponse, response_model_exclude_none=True
)
async def stock_pick_news(
    _claims: VerifiedClaims, service: StockNewsServiceDep
) -> StockNewsResponse:
    """Replace the stored news bullets for the active weekly stock picks."""
    refresh = await service.refresh()
    return StockNewsResponse(count=refresh.count, message=refresh.message)

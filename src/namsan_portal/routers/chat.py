"""Streaming AI relays: dashboard chat and research report summaries.

Successful responses forward the gateway's (decoded) server-sent events unchanged;
the upstream response is closed once the body has been sent.
"""
import httpx
from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from namsan_portal.deps import ChatServiceDep, VerifiedClaims
from namsan_portal.schemas import (ChatRequest, ErrorResponse,
                                   ReportSummaryRequest)

router = APIRouter(tags=["chat"])

_ERRORS = {
    status: {"model": ErrorResponse} for status in (400, 401, 402, 429, 500)
}


def _event_stream(upstream: httpx.Response) -> StreamingResponse:
    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="text/event-stream",
        background=BackgroundTask(upstream.aclose),
    )


@router.post("/chat", responses=_ERRORS)
async def chat(
    body: ChatRequest, claims: VerifiedClaims, service: ChatServiceDep
) -> StreamingResponse:
    """Stream an assistant reply to the conversation in `messages`.

    Limited per user (20 requests a minute by default).
    """
    upstream = await service.stream_chat(claims.sub, body.messages)
    return _event_stream(upstream)


@router.post("/summarize-report", responses=_ERRORS)
async def summarize_report(
    body: ReportSummaryRequest, _claims: VerifiedClaims, service: ChatServiceDep
) -> StreamingResponse:
    """Stream a detailed summary of a research report."""
    upstream = await service.stream_report_summary(body)
    return _event_stream(upstream)

"""Chat and report-summary relays over the AI gateway."""
import httpx

from namsan_portal.errors import RateLimited
from namsan_portal.providers import (UPSTREAM_EXCEPTIONS, AIGatewayProvider,
                                     ChatMessage, UpstreamErrorMapper)
from namsan_portal.schemas import ReportSummaryRequest
from namsan_portal.services.prompts import (CHAT_SYSTEM_PROMPT,
                                            REPORT_SUMMARY_SYSTEM_PROMPT,
                                            report_summary_question)
from namsan_portal.services.rate_limiter import FixedWindowRateLimiter

CHAT_RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment before sending more messages."

AI_GATEWAY_ERRORS = UpstreamErrorMapper(
    api_name="AI gateway", failure_message="Failed to connect to AI service"
)


class ChatService:
    """Opens streamed completions for the chat widget and report summaries.

    Both methods return the open upstream response; the router forwards its
    body verbatim and closes it afterwards.
    """

    def __init__(
        self,
        provider: AIGatewayProvider,
        limiter: FixedWindowRateLimiter,
        *,
        max_requests: int = 20,
        window_seconds: float = 60.0,
        error_mapper: UpstreamErrorMapper = AI_GATEWAY_ERRORS,
    ) -> None:
        self._provider = provider
        self._limiter = limiter
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._error_mapper = error_mapper

    async def stream_chat(self, user_id: str, messages: list[ChatMessage]) -> httpx.Response:
        """Rate-limit `user_id`, then start the completion.

        Raises:
            RateLimited: the local limit or the gateway's limit was hit.
            PaymentRequired: the gateway reported exhausted credits.
            UpstreamUnavailable: any other gateway failure.
        """
        if not self._limiter.allow(user_id, self._max_requests, self._window_seconds):
            raise RateLimited(CHAT_RATE_LIMIT_MESSAGE)
        return await self._open(CHAT_SYSTEM_PROMPT, messages)

    async def stream_report_summary(self, request: ReportSummaryRequest) -> httpx.Response:
        question = report_summary_question(
            request.title, request.category, request.summary, request.language
        )
        return await self._open(
            REPORT_SUMMARY_SYSTEM_PROMPT, [ChatMessage(role="user", content=question)]
        )

    async def _open(self, system_prompt: str, messages: list[ChatMessage]) -> httpx.Response:
        try:
            return await self._provider.open_completion_stream(system_prompt, messages)
        except UPSTREAM_EXCEPTIONS as e:
            self._error_mapper.raise_relay(e)

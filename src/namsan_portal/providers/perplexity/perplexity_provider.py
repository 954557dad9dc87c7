"""Perplexity search/answer provider for market news."""
import os

import httpx

from namsan_portal.providers.ai_gateway.models import ChatMessage
from namsan_portal.providers.core import (UpstreamPayloadError,
                                          UpstreamProviderABC)
from namsan_portal.providers.core.upstream_provider_abc import \
    DEFAULT_TIMEOUT_SECONDS
from namsan_portal.providers.perplexity.models import (PerplexitySearchParams,
                                                       SearchAnswer)


class PerplexityProvider(UpstreamProviderABC):
    """Web-grounded answers via the Perplexity chat completions API.

    Non-streaming: the whole answer and its citation list come back in one
    JSON body.
    """

    BASE_URL = "https://api.perplexity.ai"
    ENV_KEY_NAME = "PERPLEXITY_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = "sonar",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        key = api_key or os.getenv("PERPLEXITY_API_KEY")
        headers = {"Content-Type": "application/json"}
        if key:
            headers["Authorization"] = f"Bearer {key}"
        super().__init__(key, headers=headers, timeout=timeout, transport=transport)
        self._model = model

    async def search(
        self,
        system_prompt: str,
        question: str,
        *,
        recency: str = "day",
    ) -> SearchAnswer:
        """Ask one question with a system prompt, restricted to recent sources.

        Args:
            system_prompt: Instructions for the answering model.
            question: The user question.
            recency: Perplexity search_recency_filter value (e.g. "day", "week").

        Returns:
            SearchAnswer with the first choice's content and the citations.
        """
        self._require_api_key()
        params = PerplexitySearchParams(
            model=self._model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=question),
            ],
            search_recency_filter=recency,
        )
        response = await self._client.post("/chat/completions", json=params.model_dump())
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamPayloadError("Perplexity response is not JSON") from exc
        if not isinstance(data, dict):
            raise UpstreamPayloadError("Perplexity response is not a JSON object")

        choices = data.get("choices") or [{}]
        message = choices[0].get("message") or {}
        return SearchAnswer(
            content=message.get("content") or "",
            citations=[str(c) for c in data.get("citations") or []],
        )

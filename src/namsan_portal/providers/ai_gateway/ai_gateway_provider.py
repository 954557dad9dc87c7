"""OpenAI-compatible AI gateway provider for streamed chat completions."""
import os

import httpx

from namsan_portal.providers.ai_gateway.models import (ChatCompletionParams,
                                                       ChatMessage)
from namsan_portal.providers.core import UpstreamProviderABC
from namsan_portal.providers.core.upstream_provider_abc import \
    DEFAULT_TIMEOUT_SECONDS


class AIGatewayProvider(UpstreamProviderABC):
    """Chat completions through the hosted AI gateway.

    Responses are server-sent events; the provider hands back the open
    upstream response so the relay can forward the bytes without buffering.
    """

    BASE_URL = "https://ai.gateway.lovable.dev/v1"
    ENV_KEY_NAME = "AI_GATEWAY_API_KEY"
    DEFAULT_MODEL = "google/gemini-3-flash-preview"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the AI gateway provider.

        Args:
            api_key: Gateway key. Defaults to AI_GATEWAY_API_KEY, then LOVABLE_API_KEY.
            base_url: Override for the gateway base URL.
            model: Model name sent with every completion.
            timeout: Seconds before connect/read operations give up.
            transport: Optional httpx transport (tests).
        """
        key = api_key or os.getenv("AI_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")
        headers = {"Content-Type": "application/json"}
        if key:
            headers["Authorization"] = f"Bearer {key}"
        super().__init__(
            key, base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )
        self._model = model or self.DEFAULT_MODEL

    async def open_completion_stream(
        self, system_prompt: str, messages: list[ChatMessage]
    ) -> httpx.Response:
        """Start a streamed completion and return the open upstream response.

        The caller owns the response and must `aclose()` it once the body has
        been forwarded.

        Raises:
            ProviderNotConfiguredError: no API key.
            httpx.HTTPStatusError: the gateway answered with an error status.
        """
        self._require_api_key()
        params = ChatCompletionParams(
            model=self._model,
            messages=[ChatMessage(role="system", content=system_prompt), *messages],
            stream=True,
        )
        request = self._client.build_request(
            "POST", "/chat/completions", json=params.model_dump()
        )
        response = await self._client.send(request, stream=True)
        if response.is_error:
            await response.aread()
            await response.aclose()
            response.raise_for_status()
        return response

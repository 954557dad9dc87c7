"""Resend transactional email provider."""
import os
from typing import Any

import httpx

from namsan_portal.providers.core import (UpstreamPayloadError,
                                          UpstreamProviderABC)
from namsan_portal.providers.core.upstream_provider_abc import \
    DEFAULT_TIMEOUT_SECONDS
from namsan_portal.providers.resend.models import EmailMessage


class ResendProvider(UpstreamProviderABC):
    """Sends HTML email through the Resend REST API."""

    BASE_URL = "https://api.resend.com"
    ENV_KEY_NAME = "RESEND_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        key = api_key or os.getenv("RESEND_API_KEY")
        headers = {"Content-Type": "application/json"}
        if key:
            headers["Authorization"] = f"Bearer {key}"
        super().__init__(key, headers=headers, timeout=timeout, transport=transport)

    async def send_email(self, message: EmailMessage) -> dict[str, Any]:
        """Send one message; returns Resend's JSON reply (contains the email id)."""
        self._require_api_key()
        response = await self._client.post(
            "/emails", json=message.model_dump(by_alias=True)
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamPayloadError("Resend response is not JSON") from exc

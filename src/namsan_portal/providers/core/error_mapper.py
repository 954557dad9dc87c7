"""Domain concept for mapping upstream exceptions to relay errors."""
import asyncio
import logging
from dataclasses import dataclass

import httpx

from namsan_portal.errors import (PaymentRequired, RateLimited, RelayError,
                                  UpstreamUnavailable)
from namsan_portal.providers.core.exceptions import (
    ProviderNotConfiguredError, UpstreamPayloadError)

logger = logging.getLogger(__name__)

# Exceptions from providers we map to relay errors; all others propagate (e.g. bugs).
UPSTREAM_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    asyncio.TimeoutError,
    TimeoutError,
    OSError,
    ProviderNotConfiguredError,
    UpstreamPayloadError,
)


@dataclass(frozen=True)
class UpstreamErrorMapper:
    """Maps provider/upstream exceptions to RelayError (status + message).

    Inject this into services to centralize error mapping per upstream
    (AI gateway, Perplexity, Resend) with the right API name. Statuses listed
    in `passthrough_statuses` keep their meaning for the caller (upstream 429
    stays 429); everything else becomes a generic failure.
    """

    api_name: str = "API"
    passthrough_statuses: frozenset[int] = frozenset({402, 429})
    failure_message: str | None = None

    def _generic(self) -> str:
        return self.failure_message or f"{self.api_name} error"

    def to_relay(self, exc: Exception) -> RelayError:
        """Map an upstream exception to the RelayError the caller should see.

        Args:
            exc: The exception raised by the provider.

        Returns:
            A RelayError whose status_code and message are ready to render.
        """
        if isinstance(exc, RelayError):
            return exc
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            if status in self.passthrough_statuses:
                if status == 429:
                    return RateLimited()
                if status == 402:
                    return PaymentRequired()
            logger.error(
                "%s error: %s %s", self.api_name, status, _response_text(exc.response)
            )
            return UpstreamUnavailable(
                self.failure_message or f"{self.api_name} error [{status}]"
            )
        if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
            logger.warning("Request to %s timed out", self.api_name)
            return UpstreamUnavailable(f"Request to {self.api_name} timed out")
        if isinstance(exc, ProviderNotConfiguredError):
            return UpstreamUnavailable(str(exc))
        if isinstance(exc, UpstreamPayloadError):
            logger.error("%s returned an unexpected payload: %s", self.api_name, exc)
            return UpstreamUnavailable(self._generic())
        logger.error("%s request failed: %s", self.api_name, exc)
        return UpstreamUnavailable(self._generic())

    def raise_relay(self, exc: Exception) -> None:
        """Map upstream exception to a RelayError and raise it. Never returns."""
        raise self.to_relay(exc) from exc


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return "<streamed body>"

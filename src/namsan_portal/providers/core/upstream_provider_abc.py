"""Abstract base class for upstream API providers."""
from abc import ABC

import httpx

from namsan_portal.providers.core.exceptions import ProviderNotConfiguredError

DEFAULT_TIMEOUT_SECONDS = 60.0


class UpstreamProviderABC(ABC):
    """Base for providers that wrap one third-party HTTP API.

    Owns a single httpx.AsyncClient for the provider's lifetime. Subclasses
    set BASE_URL and ENV_KEY_NAME and call super().__init__() with their
    headers. Pass `transport` to route requests somewhere other than the
    network (e.g. httpx.MockTransport in tests).
    """

    BASE_URL: str = ""
    ENV_KEY_NAME: str = "API_KEY"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url or self.BASE_URL,
            headers=headers or {},
            timeout=timeout,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _require_api_key(self) -> str:
        """Return the API key or fail the invocation before any request is made."""
        if not self._api_key:
            raise ProviderNotConfiguredError(f"{self.ENV_KEY_NAME} is not configured")
        return self._api_key

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "UpstreamProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()

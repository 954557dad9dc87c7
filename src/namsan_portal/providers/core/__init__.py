"""Core provider abstractions."""
from namsan_portal.providers.core.error_mapper import (UPSTREAM_EXCEPTIONS,
                                                      UpstreamErrorMapper)
from namsan_portal.providers.core.exceptions import (
    ProviderNotConfiguredError, UpstreamPayloadError)
from namsan_portal.providers.core.upstream_provider_abc import \
    UpstreamProviderABC

__all__ = [
    "UPSTREAM_EXCEPTIONS",
    "ProviderNotConfiguredError",
    "UpstreamErrorMapper",
    "UpstreamPayloadError",
    "UpstreamProviderABC",
]

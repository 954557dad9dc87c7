from namsan_portal.providers.ai_gateway import (AIGatewayProvider,
                                                ChatMessage)
from namsan_portal.providers.core import (UPSTREAM_EXCEPTIONS,
                                          ProviderNotConfiguredError,
                                          UpstreamErrorMapper,
                                          UpstreamPayloadError,
                                          UpstreamProviderABC)
from namsan_portal.providers.identity import (AuthEvent, AuthSessionData,
                                              AuthUser, Claims,
                                              IdentityError, IdentityProvider)
from namsan_portal.providers.perplexity import (PerplexityProvider,
                                                SearchAnswer)
from namsan_portal.providers.resend import EmailMessage, ResendProvider
from namsan_portal.providers.yfinance import (YAHOO_SYMBOL_MAP, IndexQuote,
                                              YFinanceProvider)

__all__ = [
    "AIGatewayProvider",
    "AuthEvent",
    "AuthSessionData",
    "AuthUser",
    "ChatMessage",
    "Claims",
    "EmailMessage",
    "IdentityError",
    "IdentityProvider",
    "IndexQuote",
    "PerplexityProvider",
    "ProviderNotConfiguredError",
    "ResendProvider",
    "SearchAnswer",
    "UPSTREAM_EXCEPTIONS",
    "UpstreamErrorMapper",
    "UpstreamPayloadError",
    "UpstreamProviderABC",
    "YAHOO_SYMBOL_MAP",
    "YFinanceProvider",
]

from namsan_portal.providers.perplexity.models import SearchAnswer
from namsan_portal.providers.perplexity.perplexity_provider import \
    PerplexityProvider

__all__ = ["PerplexityProvider", "SearchAnswer"]

"""Provider-level exceptions raised before or after talking to an upstream API."""


class ProviderNotConfiguredError(RuntimeError):
    """The provider's API key (or base URL) is missing from the environment."""


class UpstreamPayloadError(ValueError):
    """The upstream answered 2xx but the body does not have the expected shape."""

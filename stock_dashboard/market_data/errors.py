"""
Errors raised by upstream market data providers.
"""


class ProviderError(Exception):
    """An upstream provider could not deliver usable data."""

    def __init__(self, provider: str, message: str, *, status: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status = status


class RateLimitError(ProviderError):
    """The provider signalled that its request quota is exhausted."""

"""
Exceptions surfaced to HTTP clients by the stock dashboard API.
"""


class SymbolValidationError(Exception):
    """The request did not name a usable ticker symbol (HTTP 400)."""


class InternalError(Exception):
    """Unexpected failure while handling a request (HTTP 500)."""

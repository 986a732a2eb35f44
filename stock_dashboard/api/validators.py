"""
Custom validators for API parameters.
"""

from collections.abc import Iterable, Sequence

from .errors import SymbolValidationError


def validate_symbol(value: str | None) -> str:
    """
    Trim and uppercase a ticker symbol.

    Args:
        value: Raw symbol from the request path

    Returns:
        The normalized ticker, e.g. ``" aapl "`` -> ``"AAPL"``

    Raises:
        SymbolValidationError: If the symbol is missing or blank
    """
    symbol = (value or "").strip().upper()
    if not symbol:
        raise SymbolValidationError("Symbol parameter is required")
    return symbol


def parse_symbols(values: Iterable[str] | None, default: Sequence[str]) -> list[str]:
    """
    Parse the ``symbols`` query parameter into a list of tickers.

    Each value may hold several comma-separated tickers, and the parameter
    may be repeated. Blank entries are dropped. When nothing usable is given
    the default list is returned.
    """
    if values is None:
        return list(default)

    symbols = [
        part.strip().upper()
        for value in values
        for part in value.split(",")
        if part.strip()
    ]
    return symbols or list(default)

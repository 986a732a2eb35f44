"""
Normalization of provider-specific payloads into Quote and ChartPoint records.
"""

import logging
from datetime import UTC, date, datetime
from typing import Any, Final

from .errors import ProviderError, RateLimitError
from .models import (
    MAX_SERIES_POINTS,
    SOURCE_ALPHA_VANTAGE,
    SOURCE_YAHOO,
    ChartPoint,
    Quote,
)

INVALID_HISTORY_STRUCTURE: Final[str] = "Invalid Yahoo Finance price history structure"

logger = logging.getLogger(__name__)


def parse_percent(value: str | float | int) -> float:
    """Parse a percentage such as ``"3.0765%"`` into ``3.0765``."""
    if isinstance(value, str):
        value = value.strip().removesuffix("%")
    return float(value)


def format_chart_date(value: date | datetime) -> str:
    """Format a date the way the dashboard chart labels it, e.g. ``Oct 3``."""
    return f"{value:%b} {value.day}"


def _yahoo_result(payload: dict[str, Any]) -> dict[str, Any]:
    chart = payload.get("chart")
    if not isinstance(chart, dict):
        raise ProviderError(SOURCE_YAHOO, "Invalid Yahoo Finance response structure")

    if error := chart.get("error"):
        description = (
            error.get("description") if isinstance(error, dict) else str(error)
        )
        raise ProviderError(SOURCE_YAHOO, description or "Yahoo Finance error")

    results = chart.get("result") or []
    if (
        not isinstance(results, list)
        or not results
        or not isinstance(results[0], dict)
    ):
        raise ProviderError(SOURCE_YAHOO, "Invalid Yahoo Finance response structure")
    return results[0]


def normalize_yahoo_quote(
    payload: dict[str, Any], symbol: str, now: datetime | None = None
) -> Quote:
    """
    Build a Quote from a Yahoo Finance chart response.

    Change and change percent are derived from ``regularMarketPrice`` and
    ``previousClose``; Yahoo does not supply them in the chart meta block.

    Raises:
        ProviderError: If the payload is not a usable chart response
    """
    meta = _yahoo_result(payload).get("meta")
    if not isinstance(meta, dict):
        raise ProviderError(SOURCE_YAHOO, "Yahoo Finance response has no meta block")

    try:
        price = float(meta.get("regularMarketPrice") or meta.get("previousClose") or 0)
        previous_close = float(meta.get("previousClose") or price)
        change = price - previous_close
        change_percent = change / previous_close * 100 if previous_close > 0 else 0.0

        return Quote(
            symbol=meta.get("symbol") or symbol,
            price=round(price, 2),
            change=round(change, 2),
            change_percent=round(change_percent, 2),
            volume=int(meta.get("regularMarketVolume") or 0),
            market_cap=meta.get("marketCap") or None,
            last_updated=now or datetime.now(UTC),
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise ProviderError(SOURCE_YAHOO, f"Malformed quote data: {e}") from e


def _series_values(quote: dict[str, Any], key: str) -> list:
    values = quote.get(key) or []
    if not isinstance(values, list):
        raise ProviderError(SOURCE_YAHOO, f"Yahoo Finance {key} values are not a list")
    return values


def _bar_volume(value: Any) -> int:
    """Volume of one daily bar; missing, unparseable or negative counts become 0."""
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


def normalize_yahoo_series(payload: dict[str, Any]) -> list[ChartPoint]:
    """
    Build a daily price series from a Yahoo Finance chart response.

    Each point uses the close price, or the open price when the close is
    missing. Points without a positive price are dropped and only the most
    recent MAX_SERIES_POINTS are kept.

    Raises:
        ProviderError: If the payload is malformed or has no usable points
    """
    result = _yahoo_result(payload)
    timestamps = result.get("timestamp") or []
    indicators = result.get("indicators") or {}
    if not isinstance(timestamps, list) or not isinstance(indicators, dict):
        raise ProviderError(SOURCE_YAHOO, INVALID_HISTORY_STRUCTURE)

    quotes = indicators.get("quote") or []
    if not timestamps or not quotes:
        raise ProviderError(SOURCE_YAHOO, "Yahoo Finance response has no price history")
    if not isinstance(quotes, list) or not isinstance(quotes[0], dict):
        raise ProviderError(SOURCE_YAHOO, INVALID_HISTORY_STRUCTURE)

    closes = _series_values(quotes[0], "close")
    opens = _series_values(quotes[0], "open")
    volumes = _series_values(quotes[0], "volume")

    def at(values: list, index: int) -> Any:
        return values[index] if index < len(values) else None

    points: list[ChartPoint] = []
    try:
        for index, timestamp in enumerate(timestamps):
            price = float(at(closes, index) or at(opens, index) or 0)
            if price <= 0:
                continue
            points.append(
                ChartPoint(
                    date=format_chart_date(datetime.fromtimestamp(timestamp, UTC)),
                    price=price,
                    volume=_bar_volume(at(volumes, index)),
                )
            )
    except (TypeError, ValueError, OverflowError) as e:
        raise ProviderError(SOURCE_YAHOO, f"Malformed price history: {e}") from e

    if not points:
        raise ProviderError(SOURCE_YAHOO, "Yahoo Finance price history is empty")

    logger.debug(f"Normalized {len(points)} Yahoo Finance chart points")
    return points[-MAX_SERIES_POINTS:]


def normalize_alpha_vantage_quote(
    payload: dict[str, Any], now: datetime | None = None
) -> Quote:
    """
    Build a Quote from an Alpha Vantage GLOBAL_QUOTE response.

    Alpha Vantage reports throttling with HTTP 200 and a ``Note`` or
    ``Information`` message instead of data.

    Raises:
        RateLimitError: If the payload carries the rate-limit message
        ProviderError: If the payload is an error or has no quote
    """
    if message := payload.get("Note") or payload.get("Information"):
        raise RateLimitError(SOURCE_ALPHA_VANTAGE, str(message))
    if message := payload.get("Error Message"):
        raise ProviderError(SOURCE_ALPHA_VANTAGE, str(message))

    quote = payload.get("Global Quote")
    if not isinstance(quote, dict) or not quote:
        raise ProviderError(SOURCE_ALPHA_VANTAGE, "Invalid API response structure")

    try:
        return Quote(
            symbol=quote["01. symbol"],
            price=float(quote["05. price"]),
            change=float(quote["09. change"]),
            change_percent=parse_percent(quote["10. change percent"]),
            volume=int(quote["06. volume"]),
            last_updated=now or datetime.now(UTC),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(
            SOURCE_ALPHA_VANTAGE, f"Malformed quote data: {e!r}"
        ) from e

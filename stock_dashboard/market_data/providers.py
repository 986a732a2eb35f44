"""
HTTP clients for the Yahoo Finance and Alpha Vantage market data APIs.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Final, Protocol, runtime_checkable

import aiohttp

from .errors import ProviderError, RateLimitError
from .models import SOURCE_ALPHA_VANTAGE, SOURCE_YAHOO, ChartPoint, Quote
from .normalizer import (
    normalize_alpha_vantage_quote,
    normalize_yahoo_quote,
    normalize_yahoo_series,
)
from .settings import MarketDataSettings

DEFAULT_HEADERS: Final[dict[str, str]] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}

logger = logging.getLogger(__name__)


@runtime_checkable
class QuoteProvider(Protocol):
    """Source of single-ticker quotes."""

    name: str

    async def fetch_quote(self, symbol: str) -> Quote: ...


@runtime_checkable
class HistoryProvider(QuoteProvider, Protocol):
    """Quote source that also serves daily price history."""

    async def fetch_daily_series(self, symbol: str) -> list[ChartPoint]: ...


class ProviderClient(ABC):
    """
    Base class for JSON-over-HTTP market data providers.

    Every call opens its own ``aiohttp.ClientSession`` unless a shared session
    is passed in, in which case the caller owns and closes it.
    """

    name: str = ""

    def __init__(self, *, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session

    @asynccontextmanager
    async def _session_scope(self) -> AsyncGenerator[aiohttp.ClientSession, None]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _get_json(
        self, url: str, *, timeout: float, params: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """
        GET a JSON object from the provider.

        Raises:
            RateLimitError: On HTTP 429
            ProviderError: On transport errors, timeouts, non-2xx statuses,
                or a body that is not a non-empty JSON object
        """
        try:
            async with (
                self._session_scope() as session,
                session.get(
                    url,
                    params=params,
                    headers=DEFAULT_HEADERS,
                    timeout=aiohttp.ClientTimeout(total=timeout),
                ) as response,
            ):
                if response.status == 429:
                    raise RateLimitError(
                        self.name, "HTTP 429 Too Many Requests", status=429
                    )
                if not 200 <= response.status < 300:
                    raise ProviderError(
                        self.name,
                        f"HTTP {response.status} {response.reason or ''}".rstrip(),
                        status=response.status,
                    )
                data = await response.json(content_type=None)

        except ProviderError:
            raise
        except TimeoutError as e:
            raise ProviderError(self.name, f"Request timed out after {timeout}s") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise ProviderError(self.name, str(e) or type(e).__name__) from e

        if not isinstance(data, dict) or not data:
            raise ProviderError(self.name, "Empty response payload")
        return data

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote for a ticker."""


class YahooFinanceClient(ProviderClient):
    """Client for the free Yahoo Finance chart endpoint."""

    name = SOURCE_YAHOO

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        *,
        quote_timeout: float = 3.0,
        series_timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(session=session)
        self.base_url = base_url.rstrip("/")
        self.quote_timeout = quote_timeout
        self.series_timeout = series_timeout

    @classmethod
    def from_settings(
        cls,
        settings: MarketDataSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> "YahooFinanceClient":
        return cls(
            settings.yahoo_base_url,
            quote_timeout=settings.yahoo_quote_timeout,
            series_timeout=settings.series_timeout,
            session=session,
        )

    def _chart_url(self, symbol: str) -> str:
        return f"{self.base_url}/v8/finance/chart/{symbol}"

    async def fetch_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote for a ticker."""
        logger.info(f"Yahoo Finance: fetching {symbol} ({self.quote_timeout}s timeout)")

        payload = await self._get_json(self._chart_url(symbol), timeout=self.quote_timeout)
        quote = normalize_yahoo_quote(payload, symbol)

        logger.info(f"Yahoo Finance: {quote.symbol} = ${quote.price}")
        return quote

    async def fetch_daily_series(self, symbol: str) -> list[ChartPoint]:
        """Fetch up to 30 daily closing prices covering the last month."""
        logger.info(f"Yahoo Finance: fetching chart data for {symbol}")

        payload = await self._get_json(
            self._chart_url(symbol),
            timeout=self.series_timeout,
            params={"range": "1mo", "interval": "1d"},
        )
        points = normalize_yahoo_series(payload)

        logger.info(f"Yahoo Finance: {len(points)} chart points for {symbol}")
        return points


class AlphaVantageClient(ProviderClient):
    """Client for the Alpha Vantage GLOBAL_QUOTE function."""

    name = SOURCE_ALPHA_VANTAGE

    def __init__(
        self,
        api_key: str = "demo",
        base_url: str = "https://www.alphavantage.co/query",
        *,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(session=session)
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: MarketDataSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> "AlphaVantageClient":
        return cls(
            settings.alpha_vantage_api_key,
            settings.alpha_vantage_base_url,
            timeout=settings.alpha_vantage_timeout,
            session=session,
        )

    async def fetch_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote for a ticker."""
        logger.info(f"Alpha Vantage: fetching {symbol}")

        payload = await self._get_json(
            self.base_url,
            timeout=self.timeout,
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self.api_key},
        )
        quote = normalize_alpha_vantage_quote(payload)

        logger.info(f"Alpha Vantage: {quote.symbol} = ${quote.price}")
        return quote

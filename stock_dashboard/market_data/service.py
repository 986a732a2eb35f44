"""
Fetch orchestration: pick a provider, bound it in time, fall back to mock data.
"""

import asyncio
import logging
from collections.abc import Iterable

from .mock_generator import MockDataGenerator
from .models import (
    SOURCE_MOCK,
    ChartPoint,
    Quote,
    QuoteResult,
    SeriesResult,
)
from .providers import (
    AlphaVantageClient,
    HistoryProvider,
    QuoteProvider,
    YahooFinanceClient,
)
from .settings import MarketDataSettings, market_data_settings

logger = logging.getLogger(__name__)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class MarketDataService:
    """
    Always-available source of quotes and price history.

    Provider failures of any kind are absorbed here: the caller receives mock
    data in place of the failed fetch, and the failure is logged and counted.
    The ``resolve_*`` methods expose where each value came from; the
    ``fetch_*`` methods return the bare records.
    """

    def __init__(
        self,
        settings: MarketDataSettings | None = None,
        *,
        yahoo_client: HistoryProvider | None = None,
        alpha_vantage_client: QuoteProvider | None = None,
        mock_generator: MockDataGenerator | None = None,
    ) -> None:
        self.settings = settings or market_data_settings
        self.yahoo_client = yahoo_client or YahooFinanceClient.from_settings(
            self.settings
        )
        self.alpha_vantage_client = (
            alpha_vantage_client or AlphaVantageClient.from_settings(self.settings)
        )
        self.mock_generator = mock_generator or MockDataGenerator()

        self.provider_success = 0
        self.provider_failures = 0
        self.timeouts = 0
        self.mock_substitutions = 0

    @property
    def quote_provider(self) -> QuoteProvider:
        if self.settings.use_yahoo_finance:
            return self.yahoo_client
        return self.alpha_vantage_client

    def _mock_quote(self, symbol: str, provider: str, error: BaseException) -> QuoteResult:
        self.mock_substitutions += 1
        message = _describe(error)
        logger.warning(f"Using mock data for {symbol} ({provider} failed: {message})")
        return QuoteResult(
            data=self.mock_generator.generate_quote(symbol),
            source=SOURCE_MOCK,
            error=message,
        )

    async def resolve_quote(self, symbol: str) -> QuoteResult:
        """Fetch a quote from the active provider, substituting mock data on failure."""
        provider = self.quote_provider
        try:
            quote = await provider.fetch_quote(symbol)
        except Exception as e:
            self.provider_failures += 1
            return self._mock_quote(symbol, provider.name, e)

        self.provider_success += 1
        return QuoteResult(data=quote, source=provider.name)

    async def fetch_quote(self, symbol: str) -> Quote:
        """Return a quote for the ticker. Never raises for provider failures."""
        return (await self.resolve_quote(symbol)).data

    async def _resolve_quote_within(self, symbol: str, timeout: float) -> QuoteResult:
        try:
            return await asyncio.wait_for(self.resolve_quote(symbol), timeout)
        except TimeoutError:
            self.timeouts += 1
            return self._mock_quote(
                symbol,
                self.quote_provider.name,
                TimeoutError(f"Stock timeout after {timeout}s"),
            )

    async def resolve_quote_batch(self, symbols: Iterable[str]) -> list[QuoteResult]:
        """
        Fetch quotes for all tickers concurrently.

        Each ticker gets its own deadline; a ticker that misses it is cancelled
        and replaced with mock data without affecting the others. The result
        order matches the input order.
        """
        symbols = list(symbols)
        timeout = self.settings.batch_symbol_timeout
        logger.info(f"Batch fetching {len(symbols)} stocks with {timeout}s timeout per stock")

        results = await asyncio.gather(
            *(self._resolve_quote_within(symbol, timeout) for symbol in symbols)
        )
        return list(results)

    async def fetch_quote_batch(self, symbols: Iterable[str]) -> list[Quote]:
        """Return one quote per ticker, in input order. Never raises for provider failures."""
        return [result.data for result in await self.resolve_quote_batch(symbols)]

    async def resolve_series(self, symbol: str) -> SeriesResult:
        """Fetch 30-day history from Yahoo Finance, substituting mock data on failure."""
        if not self.settings.use_yahoo_finance:
            logger.debug(f"No history provider enabled, generating mock chart for {symbol}")
            return SeriesResult(
                data=self.mock_generator.generate_series(symbol), source=SOURCE_MOCK
            )

        try:
            points = await self.yahoo_client.fetch_daily_series(symbol)
        except Exception as e:
            self.provider_failures += 1
            self.mock_substitutions += 1
            message = _describe(e)
            logger.warning(f"Chart data failed for {symbol}, using mock series: {message}")
            return SeriesResult(
                data=self.mock_generator.generate_series(symbol),
                source=SOURCE_MOCK,
                error=message,
            )

        self.provider_success += 1
        return SeriesResult(data=points, source=self.yahoo_client.name)

    async def fetch_series(self, symbol: str) -> list[ChartPoint]:
        """Return up to 30 daily points, oldest first. Never raises for provider failures."""
        return (await self.resolve_series(symbol)).data

    def metrics(self) -> dict[str, int]:
        return {
            "provider_success": self.provider_success,
            "provider_failures": self.provider_failures,
            "timeouts": self.timeouts,
            "mock_substitutions": self.mock_substitutions,
        }

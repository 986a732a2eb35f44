"""
Test configuration for the stock dashboard tests.
"""

import asyncio
import itertools
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add project root to path before importing our modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import our modules after path setup
from stock_dashboard.market_data.errors import ProviderError  # noqa: E402
from stock_dashboard.market_data.mock_generator import MockDataGenerator  # noqa: E402
from stock_dashboard.market_data.models import ChartPoint, Quote  # noqa: E402
from stock_dashboard.market_data.service import MarketDataService  # noqa: E402
from stock_dashboard.market_data.settings import MarketDataSettings  # noqa: E402

FIXED_NOW = datetime(2026, 10, 19, 15, 30, tzinfo=UTC)


class SequenceRandom:
    """Random source that replays a fixed sequence of floats forever."""

    def __init__(self, *values: float):
        self._values = itertools.cycle(values)

    def random(self) -> float:
        return next(self._values)


class FakeProvider:
    """In-memory stand-in for a provider client."""

    def __init__(
        self,
        name: str,
        *,
        price: float = 100.0,
        fail_symbols: set[str] | None = None,
        delays: dict[str, float] | None = None,
        series: list[ChartPoint] | None = None,
        series_error: Exception | None = None,
    ):
        self.name = name
        self.price = price
        self.fail_symbols = fail_symbols or set()
        self.delays = delays or {}
        self.series = series
        self.series_error = series_error
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def fetch_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        try:
            await asyncio.sleep(self.delays.get(symbol, 0))
        except asyncio.CancelledError:
            self.cancelled.append(symbol)
            raise
        if "*" in self.fail_symbols or symbol in self.fail_symbols:
            raise ProviderError(self.name, "simulated network error")
        return Quote(
            symbol=symbol,
            price=self.price,
            change=1.0,
            change_percent=1.01,
            volume=1_000,
            last_updated=FIXED_NOW,
        )

    async def fetch_daily_series(self, symbol: str) -> list[ChartPoint]:
        self.calls.append(symbol)
        if self.series_error is not None:
            raise self.series_error
        return list(self.series or [])


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def mock_generator(fixed_clock):
    return MockDataGenerator(clock=fixed_clock)


@pytest.fixture
def yahoo_settings():
    return MarketDataSettings(use_yahoo_finance=True, batch_symbol_timeout=0.2)


@pytest.fixture
def alpha_vantage_settings():
    return MarketDataSettings(use_yahoo_finance=False, batch_symbol_timeout=0.2)


@pytest.fixture
def make_service(yahoo_settings, mock_generator):
    """Build a MarketDataService around fake providers."""

    def factory(
        *,
        settings: MarketDataSettings | None = None,
        yahoo: FakeProvider | None = None,
        alpha_vantage: FakeProvider | None = None,
    ) -> MarketDataService:
        return MarketDataService(
            settings or yahoo_settings,
            yahoo_client=yahoo or FakeProvider("yahoo"),
            alpha_vantage_client=alpha_vantage or FakeProvider("alpha_vantage"),
            mock_generator=mock_generator,
        )

    return factory


@pytest.fixture
def yahoo_quote_payload():
    """Yahoo Finance chart response for a single quote."""
    return {
        "chart": {
            "result": [
                {
                    "meta": {
                        "symbol": "AAPL",
                        "regularMarketPrice": 175.23,
                        "previousClose": 170.00,
                        "regularMarketVolume": 48_123_456,
                        "marketCap": 2_750_000_000_000,
                    },
                    "timestamp": [],
                    "indicators": {"quote": [{}]},
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def yahoo_series_payload():
    """Yahoo Finance chart response with three days of history, one unusable."""
    return {
        "chart": {
            "result": [
                {
                    "meta": {"symbol": "AAPL", "regularMarketPrice": 176.0},
                    # 2026-10-14, 2026-10-15, 2026-10-16 13:30 UTC
                    "timestamp": [1791984600, 1792071000, 1792157400],
                    "indicators": {
                        "quote": [
                            {
                                "close": [174.5, None, 176.0],
                                "open": [173.0, None, 175.1],
                                "volume": [51_000_000, None, 47_500_000],
                            }
                        ]
                    },
                }
            ],
            "error": None,
        }
    }


@pytest.fixture
def alpha_vantage_quote_payload():
    """Alpha Vantage GLOBAL_QUOTE response."""
    return {
        "Global Quote": {
            "01. symbol": "MSFT",
            "02. open": "381.0000",
            "03. high": "385.1200",
            "04. low": "379.5000",
            "05. price": "383.2500",
            "06. volume": "21456789",
            "07. latest trading day": "2026-10-16",
            "08. previous close": "380.0000",
            "09. change": "3.2500",
            "10. change percent": "0.8553%",
        }
    }

"""
Synthetic quote and price history generator used when providers are unavailable.
"""

import logging
import math
import random
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Annotated, Final, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .models import MAX_SERIES_POINTS, ChartPoint, Quote
from .normalizer import format_chart_date

QUOTE_PRICE_SPREAD: Final[float] = 0.05  # +/-2.5%
QUOTE_VOLUME_SPREAD: Final[float] = 0.3  # +/-15%
DAILY_PRICE_SPREAD: Final[float] = 0.03  # +/-1.5%
MIN_SERIES_PRICE: Final[float] = 1.0
MIN_SERIES_VOLUME: Final[int] = 10_000_000
SERIES_VOLUME_RANGE: Final[int] = 50_000_000

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float: ...


class Baseline(BaseModel):
    """Reference values a synthetic quote is perturbed around."""

    model_config = ConfigDict(frozen=True)

    price: Annotated[float, Field(gt=0)]
    volume: Annotated[int, Field(ge=0)]
    market_cap: Annotated[float, Field(ge=0)]


DEFAULT_BASELINES: Final[dict[str, Baseline]] = {
    "AAPL": Baseline(price=175, volume=50_000_000, market_cap=2_800_000_000_000),
    "GOOGL": Baseline(price=140, volume=25_000_000, market_cap=1_750_000_000_000),
    "MSFT": Baseline(price=380, volume=35_000_000, market_cap=2_850_000_000_000),
    "AMZN": Baseline(price=145, volume=40_000_000, market_cap=1_500_000_000_000),
    "TSLA": Baseline(price=248, volume=70_000_000, market_cap=790_000_000_000),
    "META": Baseline(price=350, volume=30_000_000, market_cap=890_000_000_000),
    "NVDA": Baseline(price=480, volume=45_000_000, market_cap=1_200_000_000_000),
    "NFLX": Baseline(price=420, volume=15_000_000, market_cap=180_000_000_000),
}
DEFAULT_BASELINE_SYMBOL: Final[str] = "AAPL"


class MockDataGenerator:
    """Generates plausible random quotes and 30-day histories. Never fails."""

    def __init__(
        self,
        baselines: Mapping[str, Baseline] | None = None,
        *,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
        default_symbol: str = DEFAULT_BASELINE_SYMBOL,
    ) -> None:
        """
        Initialize the generator.

        Args:
            baselines: Reference values per ticker
            rng: Source of uniform floats; a fresh ``random.Random`` by default
            clock: Returns the current instant; UTC wall clock by default
            default_symbol: Baseline entry used for tickers not in the table

        Raises:
            ValueError: If default_symbol has no entry in the baseline table
        """
        self.baselines = dict(baselines or DEFAULT_BASELINES)
        if default_symbol not in self.baselines:
            raise ValueError(f"No baseline for default symbol {default_symbol!r}")

        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.default_symbol = default_symbol

    def baseline_for(self, symbol: str) -> Baseline:
        """Return the baseline for a ticker, or the default entry when unknown."""
        return self.baselines.get(symbol) or self.baselines[self.default_symbol]

    def generate_quote(self, symbol: str) -> Quote:
        """Generate a quote within +/-2.5% price and +/-15% volume of the baseline."""
        base = self.baseline_for(symbol)

        variation = (self.rng.random() - 0.5) * QUOTE_PRICE_SPREAD
        volume_offset = math.floor(
            (self.rng.random() - 0.5) * base.volume * QUOTE_VOLUME_SPREAD
        )

        return Quote(
            symbol=symbol,
            price=round(base.price * (1 + variation), 2),
            change=round(base.price * variation, 2),
            change_percent=round(variation * 100, 2),
            volume=base.volume + volume_offset,
            market_cap=base.market_cap,
            last_updated=self.clock(),
        )

    def generate_series(self, symbol: str) -> list[ChartPoint]:
        """
        Generate one point per calendar day for the last 30 days, ending today.

        The walk starts from a freshly generated quote price and moves by up
        to +/-1.5% per day, never dropping below MIN_SERIES_PRICE.
        """
        today = self.clock().date()
        current_price = self.generate_quote(symbol).price

        points: list[ChartPoint] = []
        for days_ago in range(MAX_SERIES_POINTS - 1, -1, -1):
            daily_change = (self.rng.random() - 0.5) * DAILY_PRICE_SPREAD
            current_price = max(current_price * (1 + daily_change), MIN_SERIES_PRICE)
            volume = math.floor(self.rng.random() * SERIES_VOLUME_RANGE)

            points.append(
                ChartPoint(
                    date=format_chart_date(today - timedelta(days=days_ago)),
                    price=round(current_price, 2),
                    volume=volume + MIN_SERIES_VOLUME,
                )
            )

        logger.debug(f"Generated {len(points)} mock chart points for {symbol}")
        return points

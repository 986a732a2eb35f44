"""
Market data settings using Pydantic for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

POPULAR_STOCKS = ["AAPL", "GOOGL", "MSFT", "AMZN", "TSLA", "META", "NVDA", "NFLX"]


class MarketDataSettings(BaseSettings):
    """Provider selection, credentials and timeouts for market data fetching."""

    alpha_vantage_api_key: str = Field(
        default="demo", description="Alpha Vantage API key"
    )
    use_yahoo_finance: bool = Field(
        default=False,
        description="Use Yahoo Finance instead of Alpha Vantage as the active provider",
    )

    yahoo_base_url: str = Field(
        default="https://query1.finance.yahoo.com",
        description="Yahoo Finance API base URL",
    )
    alpha_vantage_base_url: str = Field(
        default="https://www.alphavantage.co/query",
        description="Alpha Vantage query endpoint",
    )

    yahoo_quote_timeout: float = Field(
        default=3.0, description="Timeout in seconds for a Yahoo Finance quote call"
    )
    alpha_vantage_timeout: float = Field(
        default=10.0, description="Timeout in seconds for an Alpha Vantage call"
    )
    series_timeout: float = Field(
        default=10.0, description="Timeout in seconds for a price history call"
    )
    batch_symbol_timeout: float = Field(
        default=2.0,
        description="Per-symbol deadline in seconds when fetching a batch of quotes",
    )

    popular_symbols: list[str] = Field(
        default_factory=lambda: list(POPULAR_STOCKS),
        description="Tickers listed by the symbols endpoint",
    )
    default_batch_symbols: list[str] = Field(
        default_factory=lambda: POPULAR_STOCKS[:6],
        description="Tickers fetched when a batch request names none",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create a global instance
market_data_settings = MarketDataSettings()

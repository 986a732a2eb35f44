"""
Market data models for the stock dashboard application.
"""

from datetime import datetime
from typing import Annotated, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

SOURCE_YAHOO: Final[str] = "yahoo"
SOURCE_ALPHA_VANTAGE: Final[str] = "alpha_vantage"
SOURCE_MOCK: Final[str] = "mock"

MAX_SERIES_POINTS: Final[int] = 30

DataSource = Literal["yahoo", "alpha_vantage", "mock"]


class Quote(BaseModel):
    """Point-in-time price and volume snapshot for a ticker."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    symbol: Annotated[str, Field(description="Ticker symbol")]
    price: Annotated[float, Field(ge=0, description="Last traded price")]
    change: Annotated[float, Field(description="Absolute change from previous close")]
    change_percent: Annotated[
        float, Field(description="Change from previous close, in percent")
    ]
    volume: Annotated[int, Field(ge=0, description="Traded volume")]
    market_cap: Annotated[
        float | None, Field(ge=0, description="Market capitalisation")
    ] = None
    last_updated: Annotated[datetime, Field(description="Quote timestamp")]

    @field_serializer("last_updated")
    def serialize_last_updated(self, value: datetime) -> str:
        """Serialize datetime to ISO format."""
        return value.isoformat()


class ChartPoint(BaseModel):
    """Single daily point of a price history series."""

    model_config = ConfigDict(validate_assignment=True)

    date: Annotated[str, Field(description="Short display date, e.g. 'Oct 3'")]
    price: Annotated[float, Field(gt=0, description="Closing price")]
    volume: Annotated[int, Field(ge=0, description="Traded volume")]


class QuoteResult(BaseModel):
    """Quote together with where it came from."""

    data: Quote
    source: DataSource
    error: str | None = None

    @property
    def is_mock(self) -> bool:
        return self.source == SOURCE_MOCK


class SeriesResult(BaseModel):
    """Price history together with where it came from."""

    data: list[ChartPoint]
    source: DataSource
    error: str | None = None

    @property
    def is_mock(self) -> bool:
        return self.source == SOURCE_MOCK

"""
API-specific response models for the stock dashboard application.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..market_data.models import ChartPoint, Quote


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _Envelope(BaseModel):
    success: Annotated[bool, Field(description="Whether the request succeeded")] = True
    timestamp: Annotated[
        datetime, Field(default_factory=_utcnow, description="Response timestamp")
    ]

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize datetime to ISO format."""
        return value.isoformat()


class QuoteResponse(_Envelope):
    """Response for a single stock quote."""

    data: Quote


class QuoteListResponse(_Envelope):
    """Response for a batch of stock quotes."""

    data: list[Quote]
    count: Annotated[int, Field(ge=0, description="Number of quotes returned")]


class SeriesResponse(_Envelope):
    """Response for a daily price history."""

    data: list[ChartPoint]
    count: Annotated[int, Field(ge=0, description="Number of points returned")]


class SymbolsResponse(BaseModel):
    """Response listing the popular tickers."""

    symbols: list[str]
    total: int


class FailureResponse(BaseModel):
    """Body returned by the stock endpoints when a request fails."""

    model_config = ConfigDict(str_strip_whitespace=True)

    success: bool = False
    error: Annotated[str, Field(description="Human-readable error")]
    message: Annotated[str | None, Field(description="Underlying cause")] = None


class ErrorResponse(BaseModel):
    """Model for error responses."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    error: Annotated[str, Field(description="Error code")]
    message: Annotated[str, Field(description="Human-readable error message")]

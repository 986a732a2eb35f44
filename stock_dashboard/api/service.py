"""FastAPI application serving stock quotes and price history."""

import logging
from functools import lru_cache
from typing import Annotated, Final

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from ..market_data.service import MarketDataService
from ..market_data.settings import market_data_settings
from .errors import InternalError, SymbolValidationError
from .models import (
    ErrorResponse,
    FailureResponse,
    QuoteListResponse,
    QuoteResponse,
    SeriesResponse,
    SymbolsResponse,
)
from .settings import api_settings
from .validators import parse_symbols, validate_symbol

ERROR_FETCH_FAILED: Final[str] = "Failed to fetch stock data"
ERROR_INTERNAL_ERROR: Final[str] = "internal_error"
ERROR_NOT_FOUND: Final[str] = "not_found"

logger = logging.getLogger(__name__)


@lru_cache
def get_market_data_service() -> MarketDataService:
    """
    Dependency function to provide the market data service.

    Returns:
        MarketDataService: Process-wide service built from environment settings
    """
    return MarketDataService(market_data_settings)


ServiceDep = Annotated[MarketDataService, Depends(get_market_data_service)]


app = FastAPI(
    title="Stock Dashboard API",
    description="Stock quotes and 30-day price history with mock-data fallback",
    version="1.0.0",
)


@app.get("/", response_model=dict[str, str])
async def root() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        dict[str, str]: Health status information
    """
    return {"message": "Stock Dashboard API is running", "status": "healthy"}


@app.get("/api/stocks", response_model=QuoteListResponse)
async def get_stocks(
    service: ServiceDep,
    symbols: Annotated[
        list[str] | None,
        Query(
            description="Comma-separated tickers; defaults to the popular list",
            examples=["AAPL,MSFT,NVDA"],
        ),
    ] = None,
) -> QuoteListResponse:
    """
    Fetch quotes for several tickers at once.

    Every ticker is fetched independently. A ticker whose provider call fails
    or times out is returned with mock data, so the response always holds one
    quote per requested ticker, in request order.

    Raises:
        InternalError: If the batch could not be assembled at all
    """
    stock_symbols = parse_symbols(symbols, service.settings.default_batch_symbols)
    logger.info(f"API: Fetching stocks for symbols: {', '.join(stock_symbols)}")

    try:
        stocks = await service.fetch_quote_batch(stock_symbols)
    except Exception as e:
        logger.error(f"API error fetching stocks: {e}", exc_info=e)
        raise InternalError(str(e)) from e

    return QuoteListResponse(data=stocks, count=len(stocks))


@app.get("/api/stocks/", include_in_schema=False)
async def get_stock_without_symbol() -> None:
    """Reject a single-stock request whose symbol segment is empty."""
    raise SymbolValidationError("Symbol parameter is required")


@app.get("/api/stocks/{symbol}", response_model=QuoteResponse)
async def get_stock(service: ServiceDep, symbol: str) -> QuoteResponse:
    """
    Fetch the quote for one ticker.

    Responds 200 with mock data when the upstream provider is unavailable.

    Raises:
        SymbolValidationError: If the symbol is blank
        InternalError: For unexpected failures
    """
    stock_symbol = validate_symbol(symbol)
    logger.info(f"API: Fetching single stock for symbol: {stock_symbol}")

    try:
        stock = await service.fetch_quote(stock_symbol)
    except Exception as e:
        logger.error(f"API error fetching stock {stock_symbol}: {e}", exc_info=e)
        raise InternalError(str(e)) from e

    return QuoteResponse(data=stock)


@app.get("/api/stocks/{symbol}/history", response_model=SeriesResponse)
async def get_stock_history(service: ServiceDep, symbol: str) -> SeriesResponse:
    """Fetch up to 30 days of daily prices for one ticker, oldest first."""
    stock_symbol = validate_symbol(symbol)
    logger.info(f"API: Fetching price history for symbol: {stock_symbol}")

    try:
        points = await service.fetch_series(stock_symbol)
    except Exception as e:
        logger.error(f"API error fetching history for {stock_symbol}: {e}", exc_info=e)
        raise InternalError(str(e)) from e

    return SeriesResponse(data=points, count=len(points))


@app.get("/api/symbols", response_model=SymbolsResponse)
async def get_symbols(service: ServiceDep) -> SymbolsResponse:
    """List the popular tickers offered by the dashboard."""
    symbols = list(service.settings.popular_symbols)
    return SymbolsResponse(symbols=symbols, total=len(symbols))


@app.exception_handler(SymbolValidationError)
async def symbol_validation_handler(
    _: Request, exc: SymbolValidationError
) -> JSONResponse:
    """Handle missing or blank ticker symbols.

    Returns:
        JSONResponse: 400 failure body
    """
    return JSONResponse(
        status_code=400,
        content=FailureResponse(error=str(exc)).model_dump(),
    )


@app.exception_handler(InternalError)
async def stock_fetch_error_handler(_: Request, exc: InternalError) -> JSONResponse:
    """Handle failures raised while serving stock data.

    Returns:
        JSONResponse: 500 failure body
    """
    return JSONResponse(
        status_code=500,
        content=FailureResponse(
            error=ERROR_FETCH_FAILED, message=str(exc) or "Unknown error"
        ).model_dump(),
    )


@app.exception_handler(404)
async def not_found_handler(_: Request, __: Exception) -> JSONResponse:
    """Handle 404 errors.

    Returns:
        JSONResponse: Error response in JSON format
    """
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error=ERROR_NOT_FOUND, message="Endpoint not found"
        ).model_dump(),
    )


@app.exception_handler(500)
async def internal_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle internal server errors.

    Args:
        exc: The exception that was raised

    Returns:
        JSONResponse: Error response in JSON format
    """
    logger.error(f"Internal server error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ERROR_INTERNAL_ERROR, message="An internal server error occurred"
        ).model_dump(),
    )


async def main() -> None:
    """Main entry point for the API server."""
    config = uvicorn.Config(
        app,
        host=api_settings.api_host,
        port=api_settings.api_port,
        log_level=api_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())

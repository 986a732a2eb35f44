"""
Main entrypoint for the Stock Dashboard application.
Usage: python run.py api
       python run.py quote SYMBOL [SYMBOL ...]
       python run.py history SYMBOL
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

USAGE = """Usage: python run.py [api|quote|history] [SYMBOL ...]
  api                  - Start the Stock Dashboard API
  quote SYMBOL [...]   - Print quotes for one or more tickers as JSON
  history SYMBOL       - Print the 30-day price history for a ticker as JSON"""


def setup_logging() -> None:
    """
    Set up consistent logging configuration for the application.
    Reads LOG_LEVEL, LOG_FORMAT, LOG_FILE and LOG_TO_FILE through APISettings,
    the same settings uvicorn is started with.
    """
    from stock_dashboard.api.settings import api_settings

    numeric_level = getattr(logging, api_settings.log_level, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if api_settings.log_to_file:
        log_path = Path(api_settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=numeric_level,
        format=api_settings.log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )


logger = logging.getLogger(__name__)


async def print_quotes(symbols: list[str]) -> None:
    from stock_dashboard.market_data.service import MarketDataService

    service = MarketDataService()
    quotes = await service.fetch_quote_batch([s.upper() for s in symbols])
    print(json.dumps([q.model_dump(mode="json", by_alias=True) for q in quotes], indent=2))


async def print_history(symbol: str) -> None:
    from stock_dashboard.market_data.service import MarketDataService

    service = MarketDataService()
    points = await service.fetch_series(symbol.upper())
    print(json.dumps([p.model_dump(mode="json") for p in points], indent=2))


async def main():
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1].lower(), sys.argv[2:]

    setup_logging()

    if command == "api" and not args:
        from stock_dashboard.api.service import main as run_service

        logger.info("Starting API service...")
        await run_service()
    elif command == "quote" and args:
        await print_quotes(args)
    elif command == "history" and len(args) == 1:
        await print_history(args[0])
    else:
        print(f"Unknown command: {' '.join(sys.argv[1:])}")
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)
    except Exception as e:
        print(f"Application failed: {e}")
        sys.exit(1)

"""
Tests for the provider HTTP clients against a local aiohttp server.
"""

import asyncio

import aiohttp
import pytest
from aiohttp import test_utils, web

from stock_dashboard.market_data.errors import ProviderError, RateLimitError
from conftest import FakeProvider
from stock_dashboard.market_data.providers import (
    AlphaVantageClient,
    HistoryProvider,
    ProviderClient,
    QuoteProvider,
    YahooFinanceClient,
)
from stock_dashboard.market_data.settings import MarketDataSettings


def _json_handler(payload, status=200, delay=0.0, seen=None):
    async def handler(request: web.Request) -> web.Response:
        if seen is not None:
            seen.append(request)
        if delay:
            await asyncio.sleep(delay)
        return web.json_response(payload, status=status)

    return handler


def _server(path, handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_get(path, handler)
    return test_utils.TestServer(app)


def _base_url(server: test_utils.TestServer) -> str:
    return str(server.make_url("")).rstrip("/")


class TestYahooFinanceClient:
    """Test cases for YahooFinanceClient."""

    @pytest.mark.asyncio
    async def test_fetch_quote(self, yahoo_quote_payload):
        """Test a successful quote request and its normalization."""
        seen = []
        handler = _json_handler(yahoo_quote_payload, seen=seen)
        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server))
            quote = await client.fetch_quote("AAPL")

        assert quote.price == 175.23
        assert quote.change == 5.23
        assert quote.change_percent == pytest.approx(3.08, abs=0.005)
        assert seen[0].match_info["symbol"] == "AAPL"
        assert "Mozilla" in seen[0].headers["User-Agent"]

    @pytest.mark.asyncio
    async def test_fetch_daily_series(self, yahoo_series_payload):
        """Test that the history request asks for one month of daily bars."""
        seen = []
        handler = _json_handler(yahoo_series_payload, seen=seen)
        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server))
            points = await client.fetch_daily_series("AAPL")

        assert [p.price for p in points] == [174.5, 176.0]
        assert seen[0].query["range"] == "1mo"
        assert seen[0].query["interval"] == "1d"

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test that a non-2xx status raises ProviderError."""
        handler = _json_handler({"chart": {"result": None}}, status=404)
        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server))
            with pytest.raises(ProviderError) as exc_info:
                await client.fetch_quote("NOPE")

        assert exc_info.value.status == 404
        assert exc_info.value.provider == "yahoo"

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        """Test that HTTP 429 raises RateLimitError."""
        handler = _json_handler({"error": "Too Many Requests"}, status=429)
        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server))
            with pytest.raises(RateLimitError):
                await client.fetch_quote("AAPL")

    @pytest.mark.asyncio
    async def test_timeout(self, yahoo_quote_payload):
        """Test that a slow upstream raises ProviderError after the quote timeout."""
        handler = _json_handler(yahoo_quote_payload, delay=1.0)
        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server), quote_timeout=0.1)
            with pytest.raises(ProviderError, match="timed out"):
                await client.fetch_quote("AAPL")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """Test that an HTML error page raises ProviderError."""

        async def handler(_: web.Request) -> web.Response:
            return web.Response(text="<html>blocked</html>", content_type="text/html")

        async with _server("/v8/finance/chart/{symbol}", handler) as server:
            client = YahooFinanceClient(_base_url(server))
            with pytest.raises(ProviderError):
                await client.fetch_quote("AAPL")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        """Test that an unreachable host raises ProviderError."""
        client = YahooFinanceClient("http://127.0.0.1:9", quote_timeout=1.0)

        with pytest.raises(ProviderError):
            await client.fetch_quote("AAPL")

    @pytest.mark.asyncio
    async def test_shared_session_is_left_open(self, yahoo_quote_payload):
        """Test that an injected session is reused and not closed by the client."""
        handler = _json_handler(yahoo_quote_payload)
        async with (
            _server("/v8/finance/chart/{symbol}", handler) as server,
            aiohttp.ClientSession() as session,
        ):
            client = YahooFinanceClient(_base_url(server), session=session)
            await client.fetch_quote("AAPL")
            await client.fetch_quote("AAPL")

            assert not session.closed

    def test_from_settings(self):
        """Test construction from settings."""
        settings = MarketDataSettings(
            yahoo_base_url="http://yahoo.test/", yahoo_quote_timeout=1.5
        )

        client = YahooFinanceClient.from_settings(settings)

        assert client.base_url == "http://yahoo.test"
        assert client.quote_timeout == 1.5
        assert client.series_timeout == settings.series_timeout


class TestAlphaVantageClient:
    """Test cases for AlphaVantageClient."""

    @pytest.mark.asyncio
    async def test_fetch_quote(self, alpha_vantage_quote_payload):
        """Test a successful GLOBAL_QUOTE request."""
        seen = []
        handler = _json_handler(alpha_vantage_quote_payload, seen=seen)
        async with _server("/query", handler) as server:
            client = AlphaVantageClient("secret", f"{_base_url(server)}/query")
            quote = await client.fetch_quote("MSFT")

        assert quote.symbol == "MSFT"
        assert quote.change_percent == pytest.approx(0.8553)
        assert seen[0].query["function"] == "GLOBAL_QUOTE"
        assert seen[0].query["symbol"] == "MSFT"
        assert seen[0].query["apikey"] == "secret"

    @pytest.mark.asyncio
    async def test_rate_limit_note(self):
        """Test that a 200 response carrying a Note raises RateLimitError."""
        handler = _json_handler({"Note": "API call frequency is 5 calls per minute."})
        async with _server("/query", handler) as server:
            client = AlphaVantageClient("demo", f"{_base_url(server)}/query")
            with pytest.raises(RateLimitError, match="call frequency"):
                await client.fetch_quote("MSFT")

    @pytest.mark.asyncio
    async def test_empty_payload(self):
        """Test that an empty JSON object raises ProviderError."""
        handler = _json_handler({})
        async with _server("/query", handler) as server:
            client = AlphaVantageClient("demo", f"{_base_url(server)}/query")
            with pytest.raises(ProviderError, match="Empty response payload"):
                await client.fetch_quote("MSFT")

    def test_from_settings(self):
        """Test that the API key defaults to the shared demo key."""
        client = AlphaVantageClient.from_settings(MarketDataSettings())

        assert client.api_key == "demo"
        assert client.timeout == 10.0


class TestProviderInterfaces:
    """Test cases for the provider base class and protocols."""

    def test_base_client_is_abstract(self):
        """Test that ProviderClient cannot be used without fetch_quote."""
        with pytest.raises(TypeError):
            ProviderClient()

    def test_clients_satisfy_protocols(self):
        """Test which clients can serve quotes and which can serve history."""
        yahoo = YahooFinanceClient()
        alpha_vantage = AlphaVantageClient()

        assert isinstance(yahoo, HistoryProvider)
        assert isinstance(alpha_vantage, QuoteProvider)
        assert not isinstance(alpha_vantage, HistoryProvider)
        assert isinstance(FakeProvider("yahoo"), HistoryProvider)

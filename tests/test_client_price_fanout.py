from __future__ import annotations

import asyncio

import httpx
import pytest

from cryptoboard.client import FetchError, PriceClient, QuoteClient
from cryptoboard.config import BoardConfig
from cryptoboard.models import PriceQuote

_PRICES = {
    "BTCUSDT": "50000.00",
    "ETHUSDT": "3000.00",
    "SOLUSDT": "150.00",
}


def _config(**overrides) -> BoardConfig:
    values = dict(
        api_key="test-key",
        base_url="https://quotes.test",
        symbols=tuple(_PRICES),
        timeout_sec=1.0,
        list_policy="best-effort",
        strict_prices=False,
        stale_guard=True,
        log_level="INFO",
        log_file=None,
    )
    values.update(overrides)
    return BoardConfig(**values)


def _handler(request: httpx.Request) -> httpx.Response:
    symbol = request.url.params["symbol"]
    if symbol not in _PRICES:
        return httpx.Response(404, json={"error": "unknown symbol"})
    return httpx.Response(200, json={"symbol": symbol, "price": _PRICES[symbol], "timestamp": 1})


def _fetch(symbols: list[str], handler=_handler, **overrides) -> list[PriceQuote]:
    async def scenario() -> list[PriceQuote]:
        config = _config(**overrides)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = PriceClient(QuoteClient(config, http=http), fail_fast=config.fail_fast)
            return await client.fetch_prices(symbols)

    return asyncio.run(scenario())


def test_fetch_prices_returns_quotes_in_input_order() -> None:
    quotes = _fetch(["SOLUSDT", "BTCUSDT", "ETHUSDT"])

    assert quotes == [
        PriceQuote("SOLUSDT", "150.00"),
        PriceQuote("BTCUSDT", "50000.00"),
        PriceQuote("ETHUSDT", "3000.00"),
    ]


def test_fetch_prices_drops_failed_symbols_in_best_effort_mode() -> None:
    quotes = _fetch(["BTCUSDT", "BADSYM"])

    assert quotes == [PriceQuote("BTCUSDT", "50000.00")]


def test_fetch_prices_result_is_subset_of_requested_symbols() -> None:
    requested = ["BTCUSDT", "BADSYM", "ETHUSDT", "NOPE"]

    quotes = _fetch(requested)

    assert len(quotes) <= len(requested)
    assert all(quote.symbol in requested for quote in quotes)


def test_fetch_prices_all_failures_yield_empty_list() -> None:
    assert _fetch(["BADSYM", "NOPE"]) == []


def test_fetch_prices_fail_fast_raises_first_failure_in_input_order() -> None:
    with pytest.raises(FetchError) as excinfo:
        _fetch(["BTCUSDT", "BADSYM", "NOPE"], list_policy="fail-fast")

    assert excinfo.value.symbol == "BADSYM"
    assert "404" in excinfo.value.reason


def test_fetch_prices_drops_undecodable_and_mismatched_bodies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        symbol = request.url.params["symbol"]
        if symbol == "BTCUSDT":
            return httpx.Response(200, text="<html>oops</html>")
        if symbol == "ETHUSDT":
            return httpx.Response(200, json={"symbol": "SOLUSDT", "price": "1"})
        return httpx.Response(200, json={"symbol": symbol, "price": "150.00"})

    quotes = _fetch(["BTCUSDT", "ETHUSDT", "SOLUSDT"], handler=handler)

    assert quotes == [PriceQuote("SOLUSDT", "150.00")]


def test_fetch_prices_transport_errors_are_dropped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["symbol"] == "ETHUSDT":
            raise httpx.ConnectError("boom", request=request)
        return _handler(request)

    quotes = _fetch(["BTCUSDT", "ETHUSDT"], handler=handler)

    assert quotes == [PriceQuote("BTCUSDT", "50000.00")]


def test_fetch_prices_sends_api_key_and_symbol_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _handler(request)

    _fetch(["BTCUSDT"], handler=handler)

    assert len(seen) == 1
    assert seen[0].headers["X-Api-Key"] == "test-key"
    assert seen[0].url.path == "/v1/cryptoprice"
    assert seen[0].url.params["symbol"] == "BTCUSDT"


def test_fetch_prices_omits_api_key_header_when_unset() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _handler(request)

    _fetch(["BTCUSDT"], handler=handler, api_key=None)

    assert "X-Api-Key" not in seen[0].headers


def test_fetch_prices_issues_requests_concurrently() -> None:
    symbols = list(_PRICES)

    async def scenario() -> list[PriceQuote]:
        in_flight = 0
        all_started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight
            in_flight += 1
            if in_flight == len(symbols):
                all_started.set()
            # Sequential dispatch would never reach the full count.
            await asyncio.wait_for(all_started.wait(), timeout=2.0)
            return _handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = PriceClient(QuoteClient(_config(), http=http))
            return await client.fetch_prices(symbols)

    quotes = asyncio.run(scenario())

    assert [quote.symbol for quote in quotes] == symbols

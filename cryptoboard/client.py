"""Thin async wrappers over the crypto price-quote endpoint."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable

import httpx

from .config import BoardConfig
from .models import DetailRecord, PriceParseError, PriceQuote, Symbol, derive_detail

log = logging.getLogger(__name__)

_QUOTE_PATH = "/v1/cryptoprice"


class FetchError(Exception):
    """A single quote request failed in transport, status, or decoding."""

    def __init__(self, symbol: Symbol, reason: str) -> None:
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class QuoteClient:
    """Owns the HTTP session and issues one GET per quote."""

    def __init__(self, config: BoardConfig, *, http: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._owns_http = http is None
        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["X-Api-Key"] = config.api_key
        if http is None:
            http = httpx.AsyncClient(
                headers=headers,
                timeout=config.timeout_sec,
            )
        else:
            http.headers.update(headers)
        self._http = http

    @property
    def has_api_key(self) -> bool:
        return bool(self._config.api_key)

    async def aclose(self) -> None:
        if self._owns_http and not self._http.is_closed:
            await self._http.aclose()

    async def get_quote(self, symbol: Symbol) -> PriceQuote:
        url = f"{self._config.base_url}{_QUOTE_PATH}"
        log.debug("GET %s symbol=%s", url, symbol)
        try:
            response = await self._http.get(url, params={"symbol": symbol})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(symbol, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(symbol, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise FetchError(symbol, f"invalid JSON: {exc}") from exc
        try:
            quote = PriceQuote.from_payload(payload)
        except ValueError as exc:
            raise FetchError(symbol, str(exc)) from exc
        if quote.symbol.upper() != symbol.upper():
            raise FetchError(symbol, f"response was for {quote.symbol!r}")
        # Keep the caller's symbol so listings can be keyed by what they asked for.
        return PriceQuote(symbol=symbol, price=quote.price)


class PriceClient:
    """Concurrent fan-out of quote requests for the listing panel."""

    def __init__(self, quotes: QuoteClient, *, fail_fast: bool = False) -> None:
        self._quotes = quotes
        self._fail_fast = fail_fast

    async def fetch_prices(self, symbols: Iterable[Symbol]) -> list[PriceQuote]:
        """Return quotes for ``symbols`` in input order.

        Every request settles before this returns. In best-effort mode failed
        symbols are dropped; in fail-fast mode the first failure in input
        order is raised once all requests are done.
        """
        wanted = list(symbols)
        results = await asyncio.gather(
            *(self._quotes.get_quote(symbol) for symbol in wanted),
            return_exceptions=True,
        )
        quotes: list[PriceQuote] = []
        first_error: FetchError | None = None
        for symbol, result in zip(wanted, results):
            if isinstance(result, PriceQuote):
                quotes.append(result)
                continue
            if not isinstance(result, FetchError):
                # Anything else is a bug or a cancellation, not a fetch failure.
                raise result
            log.warning("Dropping quote for %s: %s", symbol, result.reason)
            if first_error is None:
                first_error = result
        if self._fail_fast and first_error is not None:
            raise first_error
        log.info("Fetched %d/%d quotes", len(quotes), len(wanted))
        return quotes


class DetailClient:
    """Single-quote fetch plus the locally derived detail fields."""

    def __init__(self, quotes: QuoteClient, *, strict_prices: bool = False) -> None:
        self._quotes = quotes
        self._strict_prices = strict_prices

    async def fetch_detail(self, symbol: Symbol) -> DetailRecord:
        quote = await self._quotes.get_quote(symbol)
        try:
            return derive_detail(quote, strict=self._strict_prices)
        except PriceParseError as exc:
            raise FetchError(symbol, str(exc)) from exc

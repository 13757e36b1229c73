"""Quote and detail records exchanged between the clients and the UI."""
from __future__ import annotations

from dataclasses import dataclass
import math

Symbol = str

_HIGH_MULT = 1.05
_LOW_MULT = 0.95
_VOLUME_MULT = 1_000_000.0
_MARKET_CAP_MULT = 1_000_000_000.0


class PriceParseError(ValueError):
    def __init__(self, raw: object) -> None:
        super().__init__(f"unparsable price: {raw!r}")
        self.raw = raw


@dataclass(frozen=True)
class PriceQuote:
    symbol: Symbol
    price: str

    @classmethod
    def from_payload(cls, payload: object) -> "PriceQuote":
        """Build a quote from the endpoint's JSON body.

        Raises ValueError when the body is not an object carrying ``symbol``
        and ``price``. Extra keys (the endpoint also sends ``timestamp``) are
        ignored.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        symbol = payload.get("symbol")
        price = payload.get("price")
        if not isinstance(symbol, str) or not symbol:
            raise ValueError("quote payload is missing 'symbol'")
        if price is None:
            raise ValueError("quote payload is missing 'price'")
        if not isinstance(price, str):
            raise ValueError(f"quote price must be a string, got {type(price).__name__}")
        return cls(symbol=symbol, price=price)


@dataclass(frozen=True)
class DetailRecord:
    symbol: Symbol
    price: str
    high_24h: str
    low_24h: str
    volume_24h: str
    market_cap: str


def parse_price(raw: object) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise PriceParseError(raw) from exc
    if not math.isfinite(value):
        raise PriceParseError(raw)
    return value


def derive_detail(quote: PriceQuote, *, strict: bool = False) -> DetailRecord:
    """Synthesize the 24h/volume/market-cap fields from a single quote.

    The quote endpoint only returns a price, so the remaining fields are fixed
    multiples of it. An unparsable price becomes 0.0 unless ``strict`` is set,
    in which case PriceParseError propagates.
    """
    try:
        value = parse_price(quote.price)
    except PriceParseError:
        if strict:
            raise
        value = 0.0
    return DetailRecord(
        symbol=quote.symbol,
        price=quote.price,
        high_24h=f"{value * _HIGH_MULT:.2f}",
        low_24h=f"{value * _LOW_MULT:.2f}",
        volume_24h=f"{value * _VOLUME_MULT:.0f}",
        market_cap=f"{value * _MARKET_CAP_MULT:.0f}",
    )

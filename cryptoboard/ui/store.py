"""In-memory view state for the listing and preview panels.

Kept under `cryptoboard.ui` because it is UI-only state, not client logic.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Callable, Union

from ..models import DetailRecord, PriceQuote, Symbol

log = logging.getLogger(__name__)


@dataclass
class PriceSnapshot:
    quotes: list[PriceQuote] = field(default_factory=list)
    updated_at: datetime | None = None
    error: str | None = None
    loading: bool = False

    def update(self, quotes: list[PriceQuote], error: str | None = None) -> None:
        self.quotes = quotes
        self.error = error
        self.loading = False
        self.updated_at = datetime.now(timezone.utc)


# region Listing cache
class CacheState(Enum):
    EMPTY = "empty"
    FILLED = "filled"


class ListingCache:
    """Detail memo for one rendered listing. Filled at most once."""

    def __init__(self, symbol: Symbol) -> None:
        self.symbol = symbol
        self._record: DetailRecord | None = None

    @property
    def state(self) -> CacheState:
        return CacheState.FILLED if self._record is not None else CacheState.EMPTY

    @property
    def record(self) -> DetailRecord | None:
        return self._record

    def fill(self, record: DetailRecord) -> bool:
        """Store ``record``; returns False when already filled (first write wins)."""
        if record.symbol.upper() != self.symbol.upper():
            raise ValueError(f"record for {record.symbol!r} offered to listing {self.symbol!r}")
        if self._record is not None:
            return False
        self._record = record
        return True

    def __repr__(self) -> str:
        return f"ListingCache({self.symbol!r}, {self.state.value})"
# endregion


# region Preview state
@dataclass(frozen=True)
class Unset:
    pass


@dataclass(frozen=True)
class Loading:
    symbol: Symbol


@dataclass(frozen=True)
class Loaded:
    record: DetailRecord


@dataclass(frozen=True)
class Failed:
    symbol: Symbol
    reason: str


PreviewState = Union[Unset, Loading, Loaded, Failed]
PreviewListener = Callable[[PreviewState], None]


class PreviewCoordinator:
    """Single shared cell describing what the preview panel shows.

    Writers call ``begin(symbol)`` when a hover starts and ``apply(token, state)``
    when a result arrives. With ``stale_guard`` on, only the most recent
    token may write, so a slow response for an earlier hover never replaces
    the current one. With it off, writes are last-write-wins.
    """

    def __init__(self, *, stale_guard: bool = True) -> None:
        self._state: PreviewState = Unset()
        self._stale_guard = stale_guard
        self._token = 0
        self._target: Symbol | None = None
        self._listeners: list[PreviewListener] = []

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def target(self) -> Symbol | None:
        return self._target

    @property
    def stale_guard(self) -> bool:
        return self._stale_guard

    def subscribe(self, listener: PreviewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, state: PreviewState) -> None:
        if isinstance(state, Unset) and not isinstance(self._state, Unset):
            raise ValueError("preview cannot return to Unset once a listing was hovered")
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def begin(self, symbol: Symbol) -> int:
        self._token += 1
        self._target = symbol
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def apply(self, token: int, state: PreviewState) -> bool:
        if self._stale_guard and not self.is_current(token):
            log.debug(
                "Discarding stale preview update %s (token %d, current %d)",
                type(state).__name__,
                token,
                self._token,
            )
            return False
        self.set(state)
        return True
# endregion

from __future__ import annotations

import pytest

from cryptoboard.models import PriceQuote, derive_detail
from cryptoboard.ui.store import (
    CacheState,
    Failed,
    ListingCache,
    Loaded,
    Loading,
    PreviewCoordinator,
    PriceSnapshot,
    Unset,
)


def _record(symbol: str, price: str = "1.00"):
    return derive_detail(PriceQuote(symbol=symbol, price=price))


def test_listing_cache_starts_empty_and_fills_once() -> None:
    cache = ListingCache("BTCUSDT")
    first = _record("BTCUSDT", "100.00")
    second = _record("BTCUSDT", "200.00")

    assert cache.state is CacheState.EMPTY
    assert cache.record is None
    assert cache.fill(first) is True
    assert cache.state is CacheState.FILLED
    assert cache.fill(second) is False
    assert cache.record == first


def test_listing_cache_rejects_record_for_other_symbol() -> None:
    cache = ListingCache("BTCUSDT")

    with pytest.raises(ValueError):
        cache.fill(_record("ETHUSDT"))

    assert cache.state is CacheState.EMPTY


def test_coordinator_starts_unset_and_notifies_subscribers() -> None:
    coordinator = PreviewCoordinator()
    seen = []
    unsubscribe = coordinator.subscribe(seen.append)

    assert coordinator.state == Unset()
    coordinator.set(Loading("BTCUSDT"))
    unsubscribe()
    coordinator.set(Failed("BTCUSDT", "HTTP 500"))

    assert seen == [Loading("BTCUSDT")]
    assert coordinator.state == Failed("BTCUSDT", "HTTP 500")


def test_coordinator_never_returns_to_unset() -> None:
    coordinator = PreviewCoordinator()
    coordinator.set(Loading("BTCUSDT"))

    with pytest.raises(ValueError):
        coordinator.set(Unset())


def test_coordinator_guard_discards_stale_tokens() -> None:
    coordinator = PreviewCoordinator(stale_guard=True)
    old = coordinator.begin("BTCUSDT")
    new = coordinator.begin("ETHUSDT")

    assert coordinator.target == "ETHUSDT"
    assert coordinator.apply(old, Loaded(_record("BTCUSDT"))) is False
    assert coordinator.state == Unset()
    assert coordinator.apply(new, Loaded(_record("ETHUSDT"))) is True
    assert coordinator.state == Loaded(_record("ETHUSDT"))


def test_coordinator_without_guard_is_last_write_wins() -> None:
    coordinator = PreviewCoordinator(stale_guard=False)
    old = coordinator.begin("BTCUSDT")
    coordinator.begin("ETHUSDT")

    assert coordinator.apply(old, Loaded(_record("BTCUSDT"))) is True
    assert coordinator.state == Loaded(_record("BTCUSDT"))


def test_price_snapshot_update_stamps_time_and_clears_loading() -> None:
    snapshot = PriceSnapshot(loading=True)

    snapshot.update([PriceQuote("BTCUSDT", "1")], None)

    assert snapshot.loading is False
    assert snapshot.updated_at is not None
    assert snapshot.quotes == [PriceQuote("BTCUSDT", "1")]

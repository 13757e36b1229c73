"""Hover-triggered detail resolution for a single listing."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Protocol

from ..client import FetchError
from ..models import DetailRecord, Symbol
from .store import Failed, ListingCache, Loaded, Loading, PreviewCoordinator

log = logging.getLogger(__name__)


class DetailSource(Protocol):
    def fetch_detail(self, symbol: Symbol) -> Awaitable[DetailRecord]: ...


def on_hover(
    cache: ListingCache,
    coordinator: PreviewCoordinator,
    client: DetailSource,
    symbol: Symbol,
) -> asyncio.Task[DetailRecord | None] | None:
    """Point the preview at ``symbol``.

    A filled cache answers synchronously and returns None. Otherwise the
    preview switches to Loading before anything is awaited and the returned
    task performs the fetch; the caller owns that task. Must be called with
    a running event loop.
    """
    token = coordinator.begin(symbol)
    record = cache.record
    if record is not None:
        coordinator.apply(token, Loaded(record))
        return None
    coordinator.apply(token, Loading(symbol))
    loop = asyncio.get_running_loop()
    return loop.create_task(
        resolve_detail(cache, coordinator, client, symbol, token),
        name=f"resolve-detail:{symbol}",
    )


async def resolve_detail(
    cache: ListingCache,
    coordinator: PreviewCoordinator,
    client: DetailSource,
    symbol: Symbol,
    token: int,
) -> DetailRecord | None:
    try:
        record = await client.fetch_detail(symbol)
    except FetchError as exc:
        log.warning("Detail fetch failed for %s: %s", symbol, exc.reason)
        coordinator.apply(token, Failed(symbol, exc.reason))
        return None
    # The listing keeps the record even when the panel has moved on.
    cache.fill(record)
    if not coordinator.apply(token, Loaded(record)):
        log.debug("Preview moved to %s before %s resolved", coordinator.target, symbol)
    return record

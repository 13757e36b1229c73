"""Crypto price list + hover preview TUI."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.message import Message
from textual.widgets import DataTable, Footer, Header, Static

from ..client import DetailClient, FetchError, PriceClient, QuoteClient
from ..config import BoardConfig, load_config
from ..models import DetailRecord, PriceQuote, Symbol
from .common import (
    LOADING_LIST_TEXT,
    _list_message,
    _listing_row,
    _preview_text,
    _status_text,
)
from .resolver import on_hover
from .store import ListingCache, PreviewCoordinator, PreviewState, PriceSnapshot

log = logging.getLogger(__name__)


class ListingTable(DataTable):
    """Row table that reports the row under the mouse or keyboard cursor.

    Rebuilding the rows makes DataTable highlight row 0 on its own; those
    highlights are ignored until ``Settled`` comes back through the queue.
    """

    # Rows only: home/end jump rows instead of scrolling columns.
    BINDINGS = [
        ("home", "scroll_top", "First"),
        ("end", "scroll_bottom", "Last"),
    ]

    class Hovered(Message):
        def __init__(self, table: "ListingTable", row_key: str) -> None:
            super().__init__()
            self.table = table
            self.row_key = row_key

        @property
        def control(self) -> "ListingTable":
            return self.table

    class Settled(Message):
        bubble = False

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._hovered_row: str | None = None
        self._settling = False

    def load_rows(self, rows: list[tuple[str, list[Text]]]) -> None:
        self._settling = True
        self._hovered_row = None
        self.clear()
        for key, cells in rows:
            self.add_row(*cells, key=key)
        self.post_message(self.Settled())

    def on_listing_table_settled(self, event: "ListingTable.Settled") -> None:
        self._settling = False

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.control is not self or self._settling:
            return
        self._announce(event.row_key.value)

    def watch_hover_coordinate(self, old: Coordinate, value: Coordinate) -> None:
        super().watch_hover_coordinate(old, value)
        if 0 <= value.row < self.row_count:
            self._announce(self.ordered_rows[value.row].key.value)

    def on_leave(self, event: events.Leave) -> None:
        self._hovered_row = None

    def _announce(self, row_key: str | None) -> None:
        if row_key is None or row_key == self._hovered_row:
            return
        self._hovered_row = row_key
        self.post_message(self.Hovered(self, row_key))


class PreviewPanel(Static):
    """Renders whatever the coordinator currently holds."""

    def __init__(self, coordinator: PreviewCoordinator, **kwargs) -> None:
        super().__init__(_preview_text(coordinator.state), **kwargs)
        self._coordinator = coordinator
        self._unsubscribe = None

    def on_mount(self) -> None:
        self._unsubscribe = self._coordinator.subscribe(self._on_state)
        self.update(_preview_text(self._coordinator.state))

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_state(self, state: PreviewState) -> None:
        self.update(_preview_text(state))


# region Board UI
class CryptoBoardApp(App):
    TITLE = "Crypto Price Tracker"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "reload", "Reload"),
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #body {
        height: 1fr;
    }

    #list-panel {
        width: 1fr;
        height: 1fr;
        padding: 0 1;
        border: solid #1b3650;
    }

    #preview-panel {
        width: 1fr;
        height: 1fr;
        padding: 0 1;
        border: solid #1b3650;
    }

    .panel-title {
        height: 2;
        text-style: bold;
        color: #c6d4e1;
    }

    #list-message {
        height: auto;
    }

    #listings {
        height: 1fr;
    }

    #listings:focus {
        border: solid #2c82c9;
    }

    #listings > .datatable--cursor {
        background: #1c3348;
    }

    #preview {
        height: 1fr;
        padding: 1 1;
        background: #121820;
    }

    #status {
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        config: BoardConfig | None = None,
        *,
        price_client: PriceClient | None = None,
        detail_client: DetailClient | None = None,
    ) -> None:
        super().__init__()
        self._config = config or load_config()
        self._quotes: QuoteClient | None = None
        if price_client is None or detail_client is None:
            self._quotes = QuoteClient(self._config)
        self._price_client = price_client or PriceClient(
            self._quotes, fail_fast=self._config.fail_fast
        )
        self._detail_client = detail_client or DetailClient(
            self._quotes, strict_prices=self._config.strict_prices
        )
        self._coordinator = PreviewCoordinator(stale_guard=self._config.stale_guard)
        self._snapshot = PriceSnapshot()
        self._caches: dict[Symbol, ListingCache] = {}
        self._row_keys: list[str] = []
        self._reload_task: asyncio.Task | None = None
        self._reload_token = 0
        self._hover_tasks: set[asyncio.Task] = set()
        self._status_note: str | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="body"):
            with Vertical(id="list-panel"):
                yield Static("Cryptocurrency List", classes="panel-title")
                yield Static(LOADING_LIST_TEXT, id="list-message")
                yield ListingTable(id="listings", zebra_stripes=True, cursor_type="row")
            with Vertical(id="preview-panel"):
                yield Static("Detailed Preview", classes="panel-title")
                yield PreviewPanel(self._coordinator, id="preview")
        yield Static("Starting...", id="status")
        yield Footer()

    async def on_mount(self) -> None:
        self._table = self.query_one("#listings", ListingTable)
        self._list_message = self.query_one("#list-message", Static)
        self._status = self.query_one("#status", Static)
        self._table.add_column("Symbol", width=12)
        self._table.add_column("Price", width=16)
        self._table.add_column("Updated", width=32)
        self._table.focus()
        self._schedule_reload()

    async def on_unmount(self) -> None:
        tasks = [task for task in self._hover_tasks if not task.done()]
        if self._reload_task is not None and not self._reload_task.done():
            tasks.append(self._reload_task)
        for task in tasks:
            task.cancel()
        if tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(*tasks, return_exceptions=True)
        self._hover_tasks.clear()
        if self._quotes is not None:
            await self._quotes.aclose()

    def action_reload(self) -> None:
        self._schedule_reload()

    def action_cursor_down(self) -> None:
        self._table.action_cursor_down()

    def action_cursor_up(self) -> None:
        self._table.action_cursor_up()

    def on_listing_table_hovered(self, event: ListingTable.Hovered) -> None:
        self.hover_symbol(event.row_key)

    def hover_symbol(self, symbol: Symbol) -> asyncio.Task[DetailRecord | None] | None:
        """Run the resolution flow for a rendered listing; returns the fetch task if any."""
        cache = self._caches.get(symbol)
        if cache is None:
            return None
        task = on_hover(cache, self._coordinator, self._detail_client, symbol)
        if task is not None:
            self._hover_tasks.add(task)
            task.add_done_callback(self._on_hover_done)
        return task

    def _on_hover_done(self, task: asyncio.Task) -> None:
        self._hover_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        log.error("Preview resolution crashed: %s", exc, exc_info=exc)
        self._status_note = f"preview error: {exc}"
        self._render_status()

    def _schedule_reload(self) -> None:
        self._reload_token += 1
        token = self._reload_token
        if self._reload_task is not None and not self._reload_task.done():
            self._reload_task.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._reload_task = loop.create_task(self._reload(token))

    async def _reload(self, token: int) -> list[PriceQuote]:
        if token != self._reload_token:
            return []
        self._snapshot.loading = True
        self._status_note = None
        self._render_list()
        try:
            quotes = await self._price_client.fetch_prices(self._config.symbols)
            error = None
        except FetchError as exc:
            log.error("Price list fetch failed: %s", exc)
            quotes, error = [], str(exc)
        except Exception as exc:
            log.exception("Price list fetch crashed")
            quotes, error = [], f"{type(exc).__name__}: {exc}"
        if token != self._reload_token:
            return []
        self._snapshot.update(quotes, error)
        # Fresh listings get fresh caches.
        self._caches = {quote.symbol: ListingCache(quote.symbol) for quote in quotes}
        self._render_list()
        return quotes

    def _render_list(self) -> None:
        rows = [
            (quote.symbol, _listing_row(quote, self._snapshot.updated_at))
            for quote in self._snapshot.quotes
        ]
        self._table.load_rows(rows)
        self._row_keys = [key for key, _cells in rows]
        message = _list_message(self._snapshot)
        if message is not None:
            self._list_message.update(message)
        self._list_message.display = message is not None
        self._table.display = bool(self._row_keys)
        self._render_status()

    def _render_status(self) -> None:
        self._status.update(
            _status_text(
                self._snapshot,
                base_url=self._config.base_url,
                requested=len(self._config.symbols),
                has_api_key=bool(self._config.api_key),
                note=self._status_note,
            )
        )
# endregion

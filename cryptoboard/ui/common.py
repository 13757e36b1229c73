"""Shared UI helpers.

Pure formatting helpers for the listing table, the preview panel and the
status line. Keep it free of network and Textual side effects.
"""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from ..models import DetailRecord, PriceQuote
from .store import Failed, Loaded, Loading, PreviewState, PriceSnapshot, Unset

LOADING_LIST_TEXT = "Loading cryptocurrencies..."
UNSET_PREVIEW_TEXT = "Hover over a cryptocurrency to see more details"
LOADING_PREVIEW_TEXT = "Loading detailed information..."


# region Formatting Helpers
def _fmt_usd(raw: str) -> str:
    return f"${raw}"


def _fmt_updated(ts: datetime | None) -> str:
    if ts is None:
        return "n/a"
    return ts.astimezone().strftime("%m/%d/%y %I:%M %p")
# endregion


def _listing_row(quote: PriceQuote, updated_at: datetime | None) -> list[Text]:
    return [
        Text(quote.symbol, style="bold"),
        Text(_fmt_usd(quote.price), style="bold green", justify="right"),
        Text(f"Last updated: {_fmt_updated(updated_at)}", style="grey58"),
    ]


def _list_message(snapshot: PriceSnapshot) -> Text | None:
    """Text shown in place of the table body, or None when rows should render."""
    if snapshot.loading and not snapshot.quotes:
        return Text(LOADING_LIST_TEXT, style="grey58")
    if snapshot.error:
        return Text(
            f"An error occurred while fetching crypto prices: {snapshot.error}",
            style="red",
        )
    if snapshot.updated_at is not None and not snapshot.quotes:
        return Text("No prices available.", style="grey58")
    return None


def _preview_item(label: str, value: str) -> Text:
    line = Text()
    line.append(f"{label}:".ljust(14), style="grey62")
    line.append(value, style="bold")
    return line


def _detail_lines(record: DetailRecord) -> list[Text]:
    return [
        _preview_item("Price", _fmt_usd(record.price)),
        _preview_item("24h High", _fmt_usd(record.high_24h)),
        _preview_item("24h Low", _fmt_usd(record.low_24h)),
        _preview_item("24h Volume", record.volume_24h),
        _preview_item("Market Cap", _fmt_usd(record.market_cap)),
    ]


def _preview_text(state: PreviewState) -> Text:
    if isinstance(state, Unset):
        return Text(UNSET_PREVIEW_TEXT, style="grey58", justify="center")
    if isinstance(state, Loading):
        return Text(LOADING_PREVIEW_TEXT, style="#5fafff", justify="center")
    if isinstance(state, Failed):
        text = Text(justify="center")
        text.append(f"Could not load {state.symbol}", style="bold red")
        text.append("\n")
        text.append(state.reason, style="red")
        return text
    if isinstance(state, Loaded):
        record = state.record
        text = Text()
        text.append(f"{record.symbol} Details", style="bold white")
        text.append("\n\n")
        text.append_text(Text("\n").join(_detail_lines(record)))
        return text
    raise TypeError(f"unknown preview state: {state!r}")


def _status_text(
    snapshot: PriceSnapshot,
    *,
    base_url: str,
    requested: int,
    has_api_key: bool,
    note: str | None = None,
) -> Text:
    text = Text()
    text.append(f"API {base_url}", style="grey70")
    text.append(f" | rows: {len(snapshot.quotes)}/{requested}")
    text.append(f" | last update: {_fmt_updated(snapshot.updated_at)}")
    if not has_api_key:
        text.append(" | key: missing (set CRYPTOBOARD_API_KEY)", style="yellow")
    if snapshot.error:
        text.append(f" | error: {snapshot.error}", style="red")
    if note:
        text.append(f" | {note}", style="red")
    return text
